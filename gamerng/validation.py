"""Parameter checks run before any sampling math.

Every check raises ``ValidationError`` naming the parameter and the value it got.
"""

from __future__ import annotations

import math
import numbers
from typing import Any, Optional

from .errors import ValidationError


def is_numeric(value: Any) -> bool:
    """True for real numbers and for strings that parse as a finite float."""
    if isinstance(value, bool):
        return False
    if isinstance(value, numbers.Real):
        return True
    if isinstance(value, str):
        try:
            return math.isfinite(float(value))
        except ValueError:
            return False
    return False


def _number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValidationError(f"Expected {name} to be a number, got {value!r}")
    if math.isnan(value):
        raise ValidationError(f"Expected {name} to be a number, got {value}")
    return value


def require_int(name: str, value: Any, msg: Optional[str] = None) -> int:
    value = _number(name, value)
    if isinstance(value, numbers.Integral):
        return int(value)
    if not (math.isfinite(value) and float(value).is_integer()):
        raise ValidationError(msg or f"Expected {name} to be an integer, got {value}")
    return int(value)


def require_positive(name: str, value: Any) -> float:
    value = _number(name, value)
    if not value > 0:
        raise ValidationError(f"Expected {name} to be positive, got {value}")
    return value


def require_gt(name: str, value: Any, bound: float) -> float:
    value = _number(name, value)
    if not value > bound:
        raise ValidationError(f"Expected {name} to be greater than {bound}, got {value}")
    return value


def require_gteq(name: str, value: Any, bound: float) -> float:
    value = _number(name, value)
    if not value >= bound:
        raise ValidationError(f"Expected {name} to be greater than or equal to {bound}, got {value}")
    return value


def require_lt(name: str, value: Any, bound: float) -> float:
    value = _number(name, value)
    if not value < bound:
        raise ValidationError(f"Expected {name} to be less than {bound}, got {value}")
    return value


def require_lteq(name: str, value: Any, bound: float) -> float:
    value = _number(name, value)
    if not value <= bound:
        raise ValidationError(f"Expected {name} to be less than or equal to {bound}, got {value}")
    return value


def require_between_eq(name: str, value: Any, low: float, high: float) -> float:
    value = _number(name, value)
    if not (low <= value <= high):
        raise ValidationError(f"Expected {name} to be between or equal to {low} and {high}, got {value}")
    return value
