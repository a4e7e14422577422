from __future__ import annotations

from enum import Enum


def _key(value: object) -> str:
    if isinstance(value, (str, int, float)):
        return str(value).strip().lower()
    return ""


class ResultStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    IMPROVEMENT = "improvement"
    NA = "na"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: object) -> "ResultStatus":
        key = _key(value)
        if key == "n/a":
            key = "na"
        try:
            return cls(key)
        except ValueError:
            return cls.UNKNOWN


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: object) -> "Priority":
        try:
            return cls(_key(value))
        except ValueError:
            return cls.UNKNOWN
