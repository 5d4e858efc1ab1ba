"""Rule option records.

Each rule with configuration builds one immutable pydantic model per call.
Models forbid unknown fields, so a misspelt option is a configuration error
rather than a silently ignored keyword.

Usage:
    match build_options(LengthOptions, "validate-length", min_value=2, max_value=5):
        case Ok(options):
            ...
        case Err(error):
            raise ConfigurationError(error)
"""
from __future__ import annotations

from decimal import Decimal
from enum import Enum, IntFlag
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from core.errors import AppError, Ok, Result, invalid_options

M = TypeVar("M", bound=BaseModel)


class CreditCardType(str, Enum):
    AMEX = "AMEX"
    DINERS = "DINERS"
    DISCOVER = "DISCOVER"
    MASTERCARD = "MASTERCARD"
    VISA = "VISA"


class UrlFlag(IntFlag):
    """URL checker switches, combined into one bitmask."""
    NONE = 0
    ALLOW_2_SLASHES = 1
    ALLOW_ALL_SCHEMES = 2
    ALLOW_LOCAL_URLS = 4
    NO_FRAGMENTS = 8


class RuleOptions(BaseModel):
    """Base for option records: immutable, no unknown fields."""
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        use_enum_values=False,
    )


class CreditCardOptions(RuleOptions):
    card_types: frozenset[CreditCardType] = Field(min_length=1)

    @field_validator("card_types", mode="before")
    @classmethod
    def _normalize_names(cls, value: Any) -> Any:
        if isinstance(value, (str, CreditCardType)):
            value = [value]
        if isinstance(value, (list, tuple, set, frozenset)):
            return [v.upper() if isinstance(v, str) and not isinstance(v, CreditCardType) else v for v in value]
        return value


class UrlOptions(RuleOptions):
    allow_two_slashes: bool = False
    allow_all_schemes: bool = False
    allow_local_urls: bool = False
    no_fragments: bool = False

    @property
    def flags(self) -> UrlFlag:
        flags = UrlFlag.NONE
        if self.allow_two_slashes:
            flags |= UrlFlag.ALLOW_2_SLASHES
        if self.allow_all_schemes:
            flags |= UrlFlag.ALLOW_ALL_SCHEMES
        if self.allow_local_urls:
            flags |= UrlFlag.ALLOW_LOCAL_URLS
        if self.no_fragments:
            flags |= UrlFlag.NO_FRAGMENTS
        return flags


class RegexOptions(RuleOptions):
    regexs: tuple[str, ...] = Field(min_length=1)
    case_sensitive: bool = False


class LocaleOptions(RuleOptions):
    """Locale tag and format pattern.

    ``pattern=None`` means the locale default; ``""`` is a pattern in its own
    right (no grouping, no affixes).
    """
    locale: Optional[str] = None
    pattern: Optional[str] = None


class NumberOptions(LocaleOptions):
    min_value: Optional[Decimal] = None
    max_value: Optional[Decimal] = None

    @field_validator("min_value", "max_value")
    @classmethod
    def _finite(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        if value is not None and not value.is_finite():
            raise ValueError("bounds must be finite numbers")
        return value


class LengthOptions(RuleOptions):
    min_value: int = Field(default=0, ge=0)
    max_value: Optional[int] = Field(default=None, ge=0)

    @field_validator("min_value", mode="before")
    @classmethod
    def _omitted_min(cls, value: Any) -> Any:
        return 0 if value is None else value


def build_options(model: type[M], rule: str, **values: Any) -> Result[M, AppError]:
    """Validate ``values`` into ``model``; malformed values become ``E8010``."""
    try:
        return Ok(model.model_validate(values))
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        return invalid_options(rule, errors, origin="options")
