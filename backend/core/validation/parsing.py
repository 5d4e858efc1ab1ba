"""Bounded parsing.

One entry point for every parse-then-bound rule:

    resolve locale -> parse (numbers or dates) -> check bounds

Errors come back as ``Err(AppError)``. The error's category tells the caller
what happened: ``validation`` means the input was rejected, ``configuration``
means the locale, pattern or bounds were wrong.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any

from core.errors import AppError, Ok, Result, configuration_error, out_of_range

from .dates import TemporalKind, parse_temporal
from .locales import LocaleLike, resolve_locale
from .numbers import NumberKind, parse_number

ParseKind = NumberKind | TemporalKind


def parse_value(
    raw: str | None,
    kind: ParseKind,
    locale: LocaleLike = None,
    pattern: str | None = None,
) -> Result[Any, AppError]:
    """Parse ``raw`` as ``kind`` without applying bounds."""
    resolved = resolve_locale(locale)
    if resolved.is_err():
        return resolved
    if isinstance(kind, TemporalKind):
        return parse_temporal(raw, kind, resolved.unwrap(), pattern)
    return parse_number(raw, kind, resolved.unwrap(), pattern)


def _comparable(bound: Any, kind: NumberKind) -> Any:
    # float kinds compare as floats, so a bound of 0.1 means the double 0.1
    if kind in (NumberKind.FLOAT, NumberKind.DOUBLE):
        return float(bound)
    return Decimal(str(bound))


def check_bounds(
    value: Any,
    kind: NumberKind,
    min_value: Any = None,
    max_value: Any = None,
) -> Result[Any, AppError]:
    """Inclusive bounds, each checked only when given."""
    subject = _comparable(value, kind)
    if min_value is not None and subject < _comparable(min_value, kind):
        return out_of_range(kind.value, value, min_val=min_value, max_val=max_value, origin="parsing")
    if max_value is not None and subject > _comparable(max_value, kind):
        return out_of_range(kind.value, value, min_val=min_value, max_val=max_value, origin="parsing")
    return Ok(value)


def parse_and_bound(
    raw: str | None,
    kind: ParseKind,
    *,
    locale: LocaleLike = None,
    pattern: str | None = None,
    min_value: Any = None,
    max_value: Any = None,
) -> Result[Any, AppError]:
    """Parse ``raw`` and, for numeric kinds, apply inclusive bounds.

    Dates and times have no bounds; passing one is a configuration error.

    Usage:
        parse_and_bound("123", NumberKind.INTEGER, min_value=100, max_value=200)
        # Ok(123)
        parse_and_bound("1.234,5", NumberKind.DOUBLE, locale="de_DE")
        # Ok(1234.5)
    """
    if isinstance(kind, TemporalKind) and (min_value is not None or max_value is not None):
        return configuration_error(
            f"{kind.value} values do not take bounds",
            origin="parsing",
            kind=kind.value,
        )
    return parse_value(raw, kind, locale, pattern).and_then(
        lambda value: Ok(value) if isinstance(kind, TemporalKind)
        else check_bounds(value, kind, min_value, max_value)
    )
