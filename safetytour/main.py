from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from . import config
from .models import reset_engine
from .pipeline.render_pdf import ReportRenderError
from .pipeline.run import build_report, load_tour_json, render_record
from .pipeline.scoring import format_score, tally_score
from .storage import download_filename

app = typer.Typer(help="Safety tour PDF reports")


def _configure(out: Optional[Path], uploads: Optional[Path]) -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    if out:
        config.set_out_dir(out)
        reset_engine()
    if uploads:
        config.set_upload_root(uploads)


@app.command()
def render(
    tour_id: int = typer.Argument(..., help="Stored tour id"),
    rebuild: bool = typer.Option(False, "--rebuild", help="Ignore the cached PDF"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    uploads: Optional[Path] = typer.Option(None, "--uploads", help="Root for stored upload paths"),
) -> None:
    _configure(out, uploads)
    try:
        path = build_report(tour_id, rebuild=rebuild)
    except (LookupError, ValueError, ReportRenderError) as exc:
        typer.echo(f"PDF generation error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(str(path))


@app.command("render-json")
def render_json(
    source: Path = typer.Argument(..., help="Tour JSON document"),
    output: Optional[Path] = typer.Argument(None, help="PDF path; defaults to a download name in the output dir"),
    uploads: Optional[Path] = typer.Option(None, "--uploads", help="Root for stored upload paths"),
) -> None:
    _configure(None, uploads)
    try:
        record = load_tour_json(source)
        if output is None:
            output = config.OUT_DIR / download_filename(record.site, record.tour_date)
        path = render_record(record, output)
    except (FileNotFoundError, ValueError, ReportRenderError) as exc:
        typer.echo(f"PDF generation error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(str(path))


@app.command()
def score(source: Path = typer.Argument(..., help="Tour JSON document")) -> None:
    try:
        record = load_tour_json(source)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)
    result = tally_score(q.result for q in record.questions)
    counts = ", ".join(f"{key}={value}" for key, value in result.counts.items())
    typer.echo(f"Score: {format_score(result.percent) or 'n/a'} ({counts})")


if __name__ == "__main__":
    app()
