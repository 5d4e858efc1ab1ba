"""Monadic Error Handling System

Type-safe error handling for the validation engine, inspired by Haskell's
Either monad and Rust's Result type.

Key components:
- Result[T, E]: Monadic container for success/failure
- AppError: Base error type with full context
- ErrorCode: Hierarchical error code taxonomy
- Builder functions: Ergonomic error construction

Usage:
    from core.errors import Ok, Result, AppError, out_of_range

    def check_bounds(value: int, upper: int) -> Result[int, AppError]:
        if value > upper:
            return out_of_range("value", value, max_val=upper, origin="parser")
        return Ok(value)

    match check_bounds(5, 3):
        case Ok(value):
            print(f"Accepted: {value}")
        case Err(error):
            log.debug(error.message, code=error.code.name)
"""
from .types import (
    # Core types
    Result,
    Ok,
    Err,
    AppError,
    ErrorCode,
    ErrorContext,
)

from .builders import (
    # Validation (E2xxx)
    validation_error,
    invalid_format,
    invalid_date,
    out_of_range,
    # Configuration (E8xxx)
    configuration_error,
    unknown_failure_type,
    not_an_error_type,
    failure_type_not_constructible,
    invalid_options,
    unknown_locale,
    invalid_pattern,
    invalid_regex,
    unknown_rule,
)

from .handlers import (
    AppErrorException,
    register_error_handlers,
    result_to_response,
    raise_result,
)

__all__ = [
    # Core types
    "Result",
    "Ok",
    "Err",
    "AppError",
    "ErrorCode",
    "ErrorContext",
    # Validation (E2xxx)
    "validation_error",
    "invalid_format",
    "invalid_date",
    "out_of_range",
    # Configuration (E8xxx)
    "configuration_error",
    "unknown_failure_type",
    "not_an_error_type",
    "failure_type_not_constructible",
    "invalid_options",
    "unknown_locale",
    "invalid_pattern",
    "invalid_regex",
    "unknown_rule",
    # Handlers
    "AppErrorException",
    "register_error_handlers",
    "result_to_response",
    "raise_result",
]
