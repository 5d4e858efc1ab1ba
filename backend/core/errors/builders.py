"""Domain-Specific Error Builders

Ergonomic constructors for typed errors. Each builder creates an AppError
with the appropriate code and context, wrapped in Err.
"""
from typing import Any

from .types import AppError, ErrorCode, ErrorContext, Err


# =============================================================================
# Validation Errors (E2xxx)
# =============================================================================

def validation_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.E2000_VALIDATION_GENERIC,
    field: str | None = None,
    value: str | None = None,
    origin: str = "",
    **metadata,
) -> Err[AppError]:
    """Create validation error."""
    meta = {"field": field, "value": value, **metadata}
    return Err(AppError(
        code=code,
        message=message,
        context=ErrorContext(origin=origin),
        metadata={k: v for k, v in meta.items() if v is not None},
    ))


def invalid_format(
    field: str, expected: str, got: str | None = None, origin: str = ""
) -> Err[AppError]:
    msg = f"Invalid format for '{field}': expected {expected}"
    if got:
        msg += f", got '{got}'"
    return validation_error(
        msg,
        code=ErrorCode.E2002_INVALID_FORMAT,
        field=field,
        value=got,
        expected=expected,
        origin=origin,
    )


def invalid_date(field: str, got: str, reason: str, origin: str = "") -> Err[AppError]:
    return validation_error(
        f"Invalid {field} '{got}': {reason}",
        code=ErrorCode.E2012_INVALID_DATE,
        field=field,
        value=got,
        origin=origin,
    )


def out_of_range(
    field: str,
    value: Any,
    min_val: Any = None,
    max_val: Any = None,
    origin: str = "",
) -> Err[AppError]:
    bounds = []
    if min_val is not None:
        bounds.append(f">= {min_val}")
    if max_val is not None:
        bounds.append(f"<= {max_val}")
    msg = f"Value {value} for '{field}' out of range ({', '.join(bounds)})"
    return validation_error(
        msg,
        code=ErrorCode.E2003_OUT_OF_RANGE,
        field=field,
        value=str(value),
        min=None if min_val is None else str(min_val),
        max=None if max_val is None else str(max_val),
        origin=origin,
    )


# =============================================================================
# Configuration Errors (E8xxx)
# =============================================================================

def configuration_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.E8000_CONFIGURATION_GENERIC,
    origin: str = "",
    cause: Exception | None = None,
    **metadata,
) -> Err[AppError]:
    """Create configuration error (rule set up wrongly, not bad input)."""
    return Err(AppError(
        code=code,
        message=message,
        context=ErrorContext(origin=origin),
        metadata={k: v for k, v in metadata.items() if v is not None},
        cause=cause,
    ))


def unknown_failure_type(type_name: str, origin: str = "") -> Err[AppError]:
    return configuration_error(
        f"Failure type '{type_name}' is not registered",
        code=ErrorCode.E8001_UNKNOWN_FAILURE_TYPE,
        failure_type=type_name,
        origin=origin,
    )


def not_an_error_type(type_name: str, origin: str = "") -> Err[AppError]:
    return configuration_error(
        f"Failure type '{type_name}' must be a raisable error type",
        code=ErrorCode.E8002_NOT_AN_ERROR_TYPE,
        failure_type=type_name,
        origin=origin,
    )


def failure_type_not_constructible(
    type_name: str, cause: Exception, origin: str = ""
) -> Err[AppError]:
    return configuration_error(
        f"Failure type '{type_name}' cannot be constructed without arguments",
        code=ErrorCode.E8003_FAILURE_TYPE_NOT_CONSTRUCTIBLE,
        failure_type=type_name,
        origin=origin,
        cause=cause,
    )


def invalid_options(rule: str, errors: list[dict], origin: str = "") -> Err[AppError]:
    return configuration_error(
        f"Invalid options for rule '{rule}'",
        code=ErrorCode.E8010_INVALID_OPTIONS,
        rule=rule,
        errors=errors,
        origin=origin,
    )


def unknown_locale(tag: str, origin: str = "") -> Err[AppError]:
    return configuration_error(
        f"Unknown locale '{tag}'",
        code=ErrorCode.E8011_UNKNOWN_LOCALE,
        locale=tag,
        origin=origin,
    )


def invalid_pattern(pattern: str, reason: str, origin: str = "") -> Err[AppError]:
    return configuration_error(
        f"Invalid pattern '{pattern}': {reason}",
        code=ErrorCode.E8012_INVALID_PATTERN,
        pattern=pattern,
        origin=origin,
    )


def invalid_regex(expression: str, reason: str, origin: str = "") -> Err[AppError]:
    return configuration_error(
        f"Invalid regular expression '{expression}': {reason}",
        code=ErrorCode.E8013_INVALID_REGEX,
        expression=expression,
        origin=origin,
    )


def unknown_rule(name: str, origin: str = "") -> Err[AppError]:
    return configuration_error(
        f"Unknown validation rule '{name}'",
        code=ErrorCode.E8020_UNKNOWN_RULE,
        rule=name,
        origin=origin,
    )

