"""
Field-level helpers for coercing untrusted JSON payloads.

Each helper returns ``None`` (or the supplied default) for anything it cannot
accept; none of them raise. ``bool`` is never treated as a number even though it
is an ``int`` subclass.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Generic, TypeVar

T = TypeVar("T")

MISSING: Any = object()


@dataclass
class CoercionResult(Generic[T]):
    value: T
    dropped: list[str] = field(default_factory=list)


def as_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def as_bool(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def is_finite_number(value: Any) -> bool:
    if not is_number(value):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    return math.isfinite(value)


def as_decimal(value: Any, *, allow_non_finite: bool = False) -> Decimal | None:
    """Accept int/float/Decimal or a numeric string."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        raw = value.strip().replace(",", "")
        if not raw:
            return None
    elif is_number(value):
        raw = str(value)
    else:
        return None
    try:
        dec = Decimal(raw)
    except InvalidOperation:
        return None
    if not dec.is_finite() and not allow_non_finite:
        return None
    return dec


def as_mapping(value: Any) -> Mapping[str, Any] | None:
    return value if isinstance(value, Mapping) else None


def take(
    payload: Mapping[str, Any],
    key: str,
    convert,
    dropped: list[str],
    *,
    prefix: str = "",
) -> Any:
    """
    Read ``payload[key]`` through ``convert``.

    Returns ``MISSING`` when the key is absent, ``None`` when it is explicitly null,
    and records ``prefix + key`` in ``dropped`` when the converter rejects the value.
    """
    if key not in payload:
        return MISSING
    raw = payload[key]
    if raw is None:
        return None
    converted = convert(raw)
    if converted is None:
        dropped.append(prefix + key)
        return MISSING
    return converted
