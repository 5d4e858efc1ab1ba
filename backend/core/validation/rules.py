"""Validation Rules

Every rule is a gate with the same shape::

    validate_x(<inputs>, *, <options>, failure_type=DEFAULT) -> None

It returns ``None`` when the input passes and raises otherwise: the failure
type registered under ``failure_type`` for a rejected input, or
``ConfigurationError`` when the rule itself was configured wrongly (bad
options, locale, pattern, regex or failure type). No rule returns a bool.

Rules register themselves in ``RULES`` under their public name
(``validate-email``, ``validate-integer``, ...) so the HTTP surface can look
them up.

Usage:
    from core.validation import validate_integer, validate_length

    validate_integer("150", min_value=100, max_value=200)
    validate_length("abc", min_value=1, max_value=2)  # raises InvalidInputError
"""
from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, NoReturn, Optional, Sequence, TypeVar

from core.config import settings
from core.errors import AppError, Err, Ok, Result, unknown_rule
from core.logging import validation_logger

from . import checkers
from .ancestry import is_container, is_mapping
from .dates import TemporalKind
from .emptiness import is_empty
from .failures import ConfigurationError, ensure_failure_type, raise_failure
from .numbers import NumberKind
from .options import (
    CreditCardOptions,
    LengthOptions,
    LocaleOptions,
    NumberOptions,
    RegexOptions,
    UrlOptions,
    build_options,
)
from .parsing import ParseKind, parse_and_bound

log = validation_logger()

F = TypeVar("F", bound=Callable[..., None])

# None resolves to settings.DEFAULT_FAILURE_TYPE when a failure is reported
DEFAULT: Optional[str] = None


@dataclass(frozen=True, slots=True)
class RuleSpec:
    """Registry entry for one rule."""
    name: str
    func: Callable[..., None]
    summary: str = ""

    @property
    def parameters(self) -> list[str]:
        return list(inspect.signature(self.func).parameters)

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        return self.func(*args, **kwargs)


RULES: dict[str, RuleSpec] = {}


def rule(name: str) -> Callable[[F], F]:
    """Register a rule function under its public name.

    Usage:
        @rule("validate-email")
        def validate_email(address, *, failure_type=DEFAULT): ...
    """
    def decorator(func: F) -> F:
        if name in RULES:
            log.warning("rule_overwritten", rule=name, previous=RULES[name].func.__qualname__)
        doc = inspect.getdoc(func) or ""
        RULES[name] = RuleSpec(name, func, doc.splitlines()[0] if doc else "")
        return func
    return decorator


def get_rule(name: str) -> Result[RuleSpec, AppError]:
    spec = RULES.get(name)
    return Ok(spec) if spec is not None else unknown_rule(name, origin="rules")


def list_rules() -> list[RuleSpec]:
    return [RULES[name] for name in sorted(RULES)]


# ============================================================================
# Failure Path
# ============================================================================

def _begin(failure_type: Optional[str]) -> None:
    if settings.EAGER_FAILURE_TYPE_CHECK:
        ensure_failure_type(failure_type or settings.DEFAULT_FAILURE_TYPE)


def _fail(rule_name: str, failure_type: Optional[str], reason: str = "") -> NoReturn:
    log.debug("rule_failed", rule=rule_name, reason=reason)
    raise_failure(failure_type)


def _misconfigured(rule_name: str, error: AppError) -> NoReturn:
    log.warning("rule_misconfigured", rule=rule_name, code=error.code.name, message=error.message)
    raise ConfigurationError(error.with_metadata(rule=rule_name))


def _unwrap_config(rule_name: str, result: Result[Any, AppError]) -> Any:
    match result:
        case Ok(value):
            return value
        case Err(error):
            _misconfigured(rule_name, error)


def _settle(rule_name: str, result: Result[Any, AppError], failure_type: Optional[str]) -> None:
    """Turn a parse result into the gate outcome."""
    match result:
        case Ok():
            return None
        case Err(error) if error.code.category == "configuration":
            _misconfigured(rule_name, error)
        case Err(error):
            _fail(rule_name, failure_type, error.message)


def _gate(rule_name: str, passed: bool, failure_type: Optional[str], reason: str = "") -> None:
    if not passed:
        _fail(rule_name, failure_type, reason)


def _check_bounded(
    rule_name: str,
    kind: ParseKind,
    value: Any,
    failure_type: Optional[str],
    model: type[LocaleOptions] = NumberOptions,
    **options: Any,
) -> None:
    _begin(failure_type)
    opts = _unwrap_config(rule_name, build_options(model, rule_name, **options))
    bounds = {}
    if isinstance(opts, NumberOptions):
        bounds = {"min_value": opts.min_value, "max_value": opts.max_value}
    if value is not None and not isinstance(value, str):
        _fail(rule_name, failure_type, f"expected text, got {type(value).__name__}")
    result = parse_and_bound(value, kind, locale=opts.locale, pattern=opts.pattern, **bounds)
    _settle(rule_name, result, failure_type)


# ============================================================================
# Format Rules
# ============================================================================

@rule("validate-domain")
def validate_domain(domain: Any, *, failure_type: Optional[str] = DEFAULT) -> None:
    """Host name whose last label is an IANA top-level domain."""
    _begin(failure_type)
    _gate("validate-domain", checkers.DOMAIN.check(domain), failure_type)


@rule("validate-top-level-domain")
def validate_top_level_domain(tld: Any, *, failure_type: Optional[str] = DEFAULT) -> None:
    """IANA top-level domain; a leading dot is ignored."""
    _begin(failure_type)
    _gate("validate-top-level-domain", checkers.TOP_LEVEL_DOMAIN.check(tld), failure_type)


@rule("validate-top-level-domain-country")
def validate_top_level_domain_country(code: Any, *, failure_type: Optional[str] = DEFAULT) -> None:
    """Two-letter country-code top-level domain."""
    _begin(failure_type)
    _gate("validate-top-level-domain-country", checkers.COUNTRY_TOP_LEVEL_DOMAIN.check(code), failure_type)


@rule("validate-credit-card-number")
def validate_credit_card_number(
    number: Any,
    card_types: Sequence[str],
    *,
    failure_type: Optional[str] = DEFAULT,
) -> None:
    """Luhn-valid card number issued by one of ``card_types``."""
    _begin(failure_type)
    opts = _unwrap_config(
        "validate-credit-card-number",
        build_options(CreditCardOptions, "validate-credit-card-number", card_types=card_types),
    )
    checker = checkers.credit_card_checker(opts.card_types)
    _gate("validate-credit-card-number", checker.check(number), failure_type)


@rule("validate-email")
def validate_email(address: Any, *, failure_type: Optional[str] = DEFAULT) -> None:
    """E-mail address (no deliverability check)."""
    _begin(failure_type)
    _gate("validate-email", checkers.EMAIL.check(address), failure_type)


@rule("validate-ip-address")
def validate_ip_address(address: Any, *, failure_type: Optional[str] = DEFAULT) -> None:
    """IPv4 or IPv6 address."""
    _begin(failure_type)
    _gate("validate-ip-address", checkers.IP_ADDRESS.check(address), failure_type)


@rule("validate-isbn10")
def validate_isbn10(code: Any, *, failure_type: Optional[str] = DEFAULT) -> None:
    """ISBN-10 with a valid check digit."""
    _begin(failure_type)
    _gate("validate-isbn10", checkers.ISBN10.check(code), failure_type)


@rule("validate-isbn13")
def validate_isbn13(code: Any, *, failure_type: Optional[str] = DEFAULT) -> None:
    """ISBN-13 with a valid check digit."""
    _begin(failure_type)
    _gate("validate-isbn13", checkers.ISBN13.check(code), failure_type)


@rule("validate-url")
def validate_url(
    url: Any,
    *,
    allow_two_slashes: bool = False,
    allow_all_schemes: bool = False,
    allow_local_urls: bool = False,
    no_fragments: bool = False,
    failure_type: Optional[str] = DEFAULT,
) -> None:
    """Absolute URL; http, https and ftp unless all schemes are allowed."""
    _begin(failure_type)
    opts = _unwrap_config("validate-url", build_options(
        UrlOptions, "validate-url",
        allow_two_slashes=allow_two_slashes,
        allow_all_schemes=allow_all_schemes,
        allow_local_urls=allow_local_urls,
        no_fragments=no_fragments,
    ))
    _gate("validate-url", checkers.url_checker(opts.flags).check(url), failure_type)


@rule("validate-using-regex")
def validate_using_regex(
    value: Any,
    regexs: Sequence[str],
    *,
    case_sensitive: bool = False,
    failure_type: Optional[str] = DEFAULT,
) -> None:
    """Value fully matches at least one of ``regexs``."""
    _begin(failure_type)
    opts = _unwrap_config("validate-using-regex", build_options(
        RegexOptions, "validate-using-regex", regexs=regexs, case_sensitive=case_sensitive,
    ))
    checker = _unwrap_config(
        "validate-using-regex", checkers.regex_checker(opts.regexs, opts.case_sensitive)
    )
    _gate("validate-using-regex", checker.check(value), failure_type)


# ============================================================================
# Parsed Rules
# ============================================================================

@rule("validate-percentage")
def validate_percentage(
    value: Any,
    *,
    locale: Optional[str] = None,
    pattern: Optional[str] = None,
    failure_type: Optional[str] = DEFAULT,
) -> None:
    """Percentage under the locale percent format; a bare number also passes."""
    _check_bounded("validate-percentage", NumberKind.PERCENT, value, failure_type,
                   LocaleOptions, locale=locale, pattern=pattern)


@rule("validate-date")
def validate_date(
    value: Any,
    *,
    locale: Optional[str] = None,
    pattern: Optional[str] = None,
    failure_type: Optional[str] = DEFAULT,
) -> None:
    """Calendar date under ``pattern`` or the locale's short date format."""
    _check_bounded("validate-date", TemporalKind.DATE, value, failure_type,
                   LocaleOptions, locale=locale, pattern=pattern)


@rule("validate-time")
def validate_time(
    value: Any,
    *,
    locale: Optional[str] = None,
    pattern: Optional[str] = None,
    failure_type: Optional[str] = DEFAULT,
) -> None:
    """Time of day under ``pattern`` or the locale's short time format."""
    _check_bounded("validate-time", TemporalKind.TIME, value, failure_type,
                   LocaleOptions, locale=locale, pattern=pattern)


def _numeric_rule(name: str, kind: NumberKind, summary: str) -> Callable[..., None]:
    def validate(
        value: Any,
        *,
        locale: Optional[str] = None,
        pattern: Optional[str] = None,
        min_value: Any = None,
        max_value: Any = None,
        failure_type: Optional[str] = DEFAULT,
    ) -> None:
        _check_bounded(name, kind, value, failure_type, NumberOptions,
                       locale=locale, pattern=pattern, min_value=min_value, max_value=max_value)

    validate.__name__ = validate.__qualname__ = name.replace("-", "_")
    validate.__doc__ = summary
    return rule(name)(validate)


validate_integer = _numeric_rule(
    "validate-integer", NumberKind.INTEGER, "32-bit integer within optional inclusive bounds.")
validate_long = _numeric_rule(
    "validate-long", NumberKind.LONG, "64-bit integer within optional inclusive bounds.")
validate_float = _numeric_rule(
    "validate-float", NumberKind.FLOAT, "Single-precision number within optional inclusive bounds.")
validate_double = _numeric_rule(
    "validate-double", NumberKind.DOUBLE, "Double-precision number within optional inclusive bounds.")


# ============================================================================
# Presence Rules
# ============================================================================

@rule("validate-not-empty")
def validate_not_empty(value: Any, *, failure_type: Optional[str] = DEFAULT) -> None:
    """Value is present and, for text and collections, has at least one element."""
    _begin(failure_type)
    _gate("validate-not-empty", not is_empty(value), failure_type)


@rule("validate-length")
def validate_length(
    value: Any,
    min_value: Optional[int] = 0,
    max_value: Optional[int] = None,
    *,
    failure_type: Optional[str] = DEFAULT,
) -> None:
    """Length of text or a collection within ``[min_value, max_value]``.

    A missing value or a missing ``max_value`` fails the rule.
    """
    _begin(failure_type)
    opts = _unwrap_config("validate-length", build_options(
        LengthOptions, "validate-length", min_value=min_value, max_value=max_value,
    ))
    if value is None or opts.max_value is None:
        _fail("validate-length", failure_type, "value and max_value are required")
    if not (isinstance(value, str) or is_container(value) or is_mapping(value)):
        _fail("validate-length", failure_type, f"{type(value).__name__} has no length")
    _gate("validate-length", opts.min_value <= len(value) <= opts.max_value, failure_type)
