from __future__ import annotations

import math
from typing import Any

from propduel.errors import ValidationError
from propduel.models.enums import PickType


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def coerce_line(value: Any, field: str = "line") -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field.capitalize()} must be a number")
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field.capitalize()} must be a number") from exc
    if not math.isfinite(number):
        raise ValidationError(f"{field.capitalize()} must be a finite number")
    return number


def coerce_pick_type(value: Any) -> PickType:
    raw = value.strip() if isinstance(value, str) else value
    try:
        return PickType(raw)
    except ValueError as exc:
        raise ValidationError("Pick type must be OVER or UNDER") from exc
