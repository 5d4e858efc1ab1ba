"""Validation Gates

Independent validation rules that return nothing on success and raise a
caller-selected failure type on a negative result.

Key Features:
- Format rules backed by validators, email_validator and python-stdnum
- Locale- and pattern-aware number, percentage, date and time parsing (babel)
- Inclusive min/max bounds on parsed numbers
- Failure types resolved by name from an explicit registry
- Cycle-safe structural inspection for emptiness and error-type checks

Usage:
    from core.validation import (
        validate_email, validate_integer, validate_length,
        register_failure_type, ConfigurationError,
    )

    @register_failure_type(aliases=("OrderRejected",))
    class OrderRejected(Exception):
        pass

    validate_integer("150", min_value=100, max_value=200)
    validate_email(address, failure_type="OrderRejected")
"""

# Structural inspection
from .ancestry import (
    Capability,
    compute_ancestry,
    type_includes,
    ancestry_includes,
    is_container,
    is_mapping,
    is_error_type,
)

# Emptiness
from .emptiness import NULL_PAYLOAD, NullPayload, is_empty

# Failure reporting
from .failures import (
    InvalidInputError,
    ConfigurationError,
    FailureTypeRegistry,
    FAILURE_TYPES,
    register_failure_type,
    resolve_failure_type,
    build_failure,
    ensure_failure_type,
    raise_failure,
)

# Parsing
from .locales import resolve_locale
from .numbers import NumberKind, parse_number
from .dates import TemporalKind, TemporalFields, parse_temporal
from .parsing import parse_value, check_bounds, parse_and_bound

# Options and checkers
from .options import (
    CreditCardType,
    UrlFlag,
    CreditCardOptions,
    UrlOptions,
    RegexOptions,
    LocaleOptions,
    NumberOptions,
    LengthOptions,
    build_options,
)
from .checkers import FormatChecker

# Rules
from .rules import (
    DEFAULT,
    RuleSpec,
    RULES,
    rule,
    get_rule,
    list_rules,
    validate_domain,
    validate_top_level_domain,
    validate_top_level_domain_country,
    validate_credit_card_number,
    validate_email,
    validate_ip_address,
    validate_isbn10,
    validate_isbn13,
    validate_url,
    validate_using_regex,
    validate_percentage,
    validate_date,
    validate_time,
    validate_integer,
    validate_long,
    validate_float,
    validate_double,
    validate_not_empty,
    validate_length,
)

__all__ = [
    # Structural inspection
    "Capability",
    "compute_ancestry",
    "type_includes",
    "ancestry_includes",
    "is_container",
    "is_mapping",
    "is_error_type",
    # Emptiness
    "NULL_PAYLOAD",
    "NullPayload",
    "is_empty",
    # Failure reporting
    "InvalidInputError",
    "ConfigurationError",
    "FailureTypeRegistry",
    "FAILURE_TYPES",
    "register_failure_type",
    "resolve_failure_type",
    "build_failure",
    "ensure_failure_type",
    "raise_failure",
    # Parsing
    "resolve_locale",
    "NumberKind",
    "parse_number",
    "TemporalKind",
    "TemporalFields",
    "parse_temporal",
    "parse_value",
    "check_bounds",
    "parse_and_bound",
    # Options and checkers
    "CreditCardType",
    "UrlFlag",
    "CreditCardOptions",
    "UrlOptions",
    "RegexOptions",
    "LocaleOptions",
    "NumberOptions",
    "LengthOptions",
    "build_options",
    "FormatChecker",
    # Rules
    "DEFAULT",
    "RuleSpec",
    "RULES",
    "rule",
    "get_rule",
    "list_rules",
    "validate_domain",
    "validate_top_level_domain",
    "validate_top_level_domain_country",
    "validate_credit_card_number",
    "validate_email",
    "validate_ip_address",
    "validate_isbn10",
    "validate_isbn13",
    "validate_url",
    "validate_using_regex",
    "validate_percentage",
    "validate_date",
    "validate_time",
    "validate_integer",
    "validate_long",
    "validate_float",
    "validate_double",
    "validate_not_empty",
    "validate_length",
]
