from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, Optional

from .status import ResultStatus


SCORED = (ResultStatus.PASS, ResultStatus.FAIL, ResultStatus.IMPROVEMENT)


@dataclass(frozen=True)
class Score:
    percent: Optional[float]
    counts: Dict[str, int] = field(default_factory=dict)


def tally_score(results: Iterable[ResultStatus]) -> Score:
    """
    Score % = pass / (pass + fail + improvement) * 100, rounded half-up to 2 places.
    N/A and unrecognised results are counted as "na" and left out.
    """
    counts = {"pass": 0, "fail": 0, "improvement": 0, "na": 0}
    for result in results:
        key = result.value if result in SCORED else "na"
        counts[key] += 1
    denominator = counts["pass"] + counts["fail"] + counts["improvement"]
    percent = None
    if denominator:
        exact = Decimal(counts["pass"] * 100) / Decimal(denominator)
        percent = float(exact.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
    return Score(percent=percent, counts=counts)


def format_score(percent: Optional[float]) -> str:
    if percent is None:
        return ""
    return f"{percent:.2f}%"
