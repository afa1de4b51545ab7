from __future__ import annotations

import math
from typing import Any

COMPENSATION_FIELDS: tuple[str, ...] = (
    "ctc_min",
    "ctc_max",
    "compensation_fixed",
    "compensation_variables",
    "compensation_rsu",
    "offered_ctc",
    "offered_compensation_fixed",
    "offered_compensation_variables",
    "offered_compensation_rsu",
)


def finite_number_or_none(value: Any) -> float | None:
    """Form inputs send "", NaN or text for cleared number fields; all of those mean absent."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            value = float(value)
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    number = float(value)
    if not math.isfinite(number):
        return None
    return number


def blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def clean_tags(tags: list[str] | None) -> list[str]:
    seen: list[str] = []
    for tag in tags or []:
        label = tag.strip()
        if label and label not in seen:
            seen.append(label)
    return seen
