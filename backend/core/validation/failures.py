"""Failure Reporting

Every rule reports a negative outcome through ``raise_failure``:

    resolve name -> structural check -> zero-arg instantiate -> raise

Failure types are looked up in an explicit registry rather than imported by
reflection. A name that is not registered, a registered class that is not an
error type, or one that cannot be built without arguments is a configuration
problem and raises ``ConfigurationError`` instead of the validation failure.

Usage:
    @register_failure_type(aliases=("OrderRejected",))
    class OrderRejected(Exception):
        pass

    validate_email(address, failure_type="OrderRejected")
"""
from __future__ import annotations

import threading
from typing import Callable, Iterable, NoReturn, TypeVar

from core.config import settings
from core.errors import (
    AppError,
    AppErrorException,
    Err,
    Ok,
    Result,
    failure_type_not_constructible,
    not_an_error_type,
    unknown_failure_type,
)
from core.logging import validation_logger

from .ancestry import is_error_type

log = validation_logger()

C = TypeVar("C", bound=type)


class InvalidInputError(Exception):
    """Default failure raised when a rule rejects its input."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message)


class ConfigurationError(AppErrorException):
    """A rule (or its failure type) was configured wrongly.

    Always fatal to the call and never a validation outcome.
    """

    @property
    def code(self):
        return self.error.code


def qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


class FailureTypeRegistry:
    """Maps failure-type names to classes.

    Registration does not check the class: the structural check happens when
    a failure is actually reported, so a bad entry only surfaces on a
    failing rule.
    """

    def __init__(self):
        self._types: dict[str, type] = {}
        self._lock = threading.Lock()

    def register(self, cls: C, *, aliases: Iterable[str] = ()) -> C:
        names = [qualified_name(cls), *aliases]
        with self._lock:
            for name in names:
                existing = self._types.get(name)
                if existing is not None and existing is not cls:
                    log.warning(
                        "failure_type_overwritten",
                        name=name,
                        previous=qualified_name(existing),
                        new=qualified_name(cls),
                    )
                self._types[name] = cls
        log.debug("failure_type_registered", names=names)
        return cls

    def unregister(self, name: str) -> None:
        with self._lock:
            self._types.pop(name, None)

    def lookup(self, name: str) -> type | None:
        return self._types.get(name)

    def names(self) -> list[str]:
        return sorted(self._types)

    def snapshot(self) -> dict[str, type]:
        with self._lock:
            return dict(self._types)

    def restore(self, entries: dict[str, type]) -> None:
        with self._lock:
            self._types = dict(entries)

    def __contains__(self, name: object) -> bool:
        return name in self._types


FAILURE_TYPES = FailureTypeRegistry()


def register_failure_type(
    cls: C | None = None, *, aliases: Iterable[str] = ()
) -> C | Callable[[C], C]:
    """Register a failure type, usable bare or with aliases.

    Usage:
        @register_failure_type
        class Rejected(Exception): ...

        @register_failure_type(aliases=("Rejected",))
        class Rejected(Exception): ...
    """
    if cls is not None:
        return FAILURE_TYPES.register(cls, aliases=aliases)
    return lambda c: FAILURE_TYPES.register(c, aliases=aliases)


def resolve_failure_type(type_name: str) -> Result[type, AppError]:
    """Resolve ``type_name`` to a registered, raisable, zero-arg class."""
    cls = FAILURE_TYPES.lookup(type_name) if isinstance(type_name, str) else None
    if cls is None:
        return unknown_failure_type(str(type_name), origin="failures")
    if not is_error_type(cls):
        return not_an_error_type(type_name, origin="failures")
    return Ok(cls)


def build_failure(type_name: str) -> Result[BaseException, AppError]:
    """Resolve and instantiate the failure without raising it."""
    resolved = resolve_failure_type(type_name)
    if resolved.is_err():
        return resolved
    try:
        return Ok(resolved.unwrap()())
    except Exception as e:
        return failure_type_not_constructible(type_name, e, origin="failures")


def ensure_failure_type(type_name: str) -> None:
    """Raise ConfigurationError now if ``type_name`` could not be reported later."""
    match build_failure(type_name):
        case Err(error):
            log.warning("failure_type_rejected", failure_type=type_name, code=error.code.name)
            raise ConfigurationError(error)


def raise_failure(type_name: str | None = None) -> NoReturn:
    """Raise the failure registered as ``type_name``.

    Falls back to ``settings.DEFAULT_FAILURE_TYPE``. Never returns.
    """
    name = type_name or settings.DEFAULT_FAILURE_TYPE
    result = build_failure(name)
    if result.is_err():
        error = result.unwrap_err()
        log.warning("failure_type_rejected", failure_type=name, code=error.code.name)
        raise ConfigurationError(error)
    raise result.unwrap()


register_failure_type(InvalidInputError, aliases=("InvalidInputError",))
for _builtin in (ValueError, TypeError, LookupError, RuntimeError):
    register_failure_type(_builtin, aliases=(_builtin.__name__,))
