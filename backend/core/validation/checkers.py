"""Format Checkers

One immutable checker per format family, each answering ``check(value)``
with a plain bool. Grammars come from libraries wherever one exists:

- domain / TLD: ``validators`` (IANA TLD list)
- e-mail: ``email_validator`` (no DNS lookups)
- credit card and ISBN check digits: ``python-stdnum``
- IP literals and URL structure: stdlib ``ipaddress`` and ``urllib.parse``

``None`` and non-string values are never valid. Checkers with options are
built through cached factories, so equal option sets share one instance.
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from ipaddress import ip_address
from typing import Any, Iterable
from urllib.parse import urlsplit

import validators
from email_validator import EmailNotValidError, validate_email
from stdnum import isbn, luhn

from core.errors import AppError, Ok, Result, invalid_regex

from .options import CreditCardType, UrlFlag


class FormatChecker(ABC):
    """Base class for format checkers."""

    @abstractmethod
    def check(self, value: Any) -> bool:
        """Whether ``value`` is well formed."""

    @property
    @abstractmethod
    def family(self) -> str:
        """Format family name used in logs."""

    def __call__(self, value: Any) -> bool: return self.check(value)


_LABEL = re.compile(r"(?!-)[A-Za-z0-9-]{1,63}(?<!-)")
_LOCAL_HOST = re.compile(r"(?!-)[A-Za-z0-9-]{1,63}(?<!-)")
_SCHEME = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*")
DEFAULT_URL_SCHEMES = frozenset({"http", "https", "ftp"})


def _ascii_label(label: str) -> str | None:
    try:
        encoded = label.encode("idna").decode("ascii")
    except UnicodeError:
        return None
    return encoded if _LABEL.fullmatch(encoded) else None


def _is_domain(value: str) -> bool:
    # validators returns a falsy ValidationError instead of False
    return validators.domain(value.lower(), consider_tld=True) is True


# ============================================================================
# Host Names
# ============================================================================

@dataclass(frozen=True, slots=True)
class DomainChecker(FormatChecker):
    """Host name made of valid labels, ending in an IANA top-level domain."""

    @property
    def family(self) -> str: return "domain"

    def check(self, value: Any) -> bool:
        if not isinstance(value, str) or not value or value != value.strip():
            return False
        labels = value.rstrip(".").split(".")
        ascii_labels = [_ascii_label(label) for label in labels]
        if len(labels) < 2 or None in ascii_labels:
            return False
        return _is_domain(".".join(ascii_labels))


@dataclass(frozen=True, slots=True)
class TopLevelDomainChecker(FormatChecker):
    """IANA top-level domain; a leading dot is ignored, case does not matter."""
    country_only: bool = False

    @property
    def family(self) -> str: return "country-tld" if self.country_only else "tld"

    def check(self, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        label = value[1:] if value.startswith(".") else value
        if self.country_only and not (len(label) == 2 and label.isascii() and label.isalpha()):
            return False
        ascii_label = _ascii_label(label) if label else None
        if ascii_label is None:
            return False
        return _is_domain(f"example.{ascii_label.lower()}")


# ============================================================================
# Numbers With Check Digits
# ============================================================================

# Issuer prefix and length per card type
_CARD_FORMATS: dict[CreditCardType, re.Pattern] = {
    CreditCardType.AMEX: re.compile(r"3[47]\d{13}"),
    CreditCardType.DINERS: re.compile(r"30[0-5]\d{11}|3095\d{10}|36\d{12}|3[89]\d{12}"),
    CreditCardType.DISCOVER: re.compile(r"6(?:011|5\d{2}|4[4-9]\d)\d{12}"),
    CreditCardType.MASTERCARD: re.compile(r"(?:5[1-5]\d{2}|222[1-9]|22[3-9]\d|2[3-6]\d{2}|27[01]\d|2720)\d{12}"),
    CreditCardType.VISA: re.compile(r"4\d{12}(?:\d{3})?"),
}


@dataclass(frozen=True, slots=True)
class CreditCardChecker(FormatChecker):
    """Digits only, Luhn valid, and issued by one of the accepted card types."""
    card_types: frozenset[CreditCardType]

    @property
    def family(self) -> str: return "credit-card"

    def check(self, value: Any) -> bool:
        if not isinstance(value, str) or not value.isascii() or not value.isdigit():
            return False
        if not any(_CARD_FORMATS[t].fullmatch(value) for t in self.card_types):
            return False
        return luhn.is_valid(value)


@dataclass(frozen=True, slots=True)
class IsbnChecker(FormatChecker):
    """ISBN-10 or ISBN-13 with a valid check digit; hyphens and spaces allowed."""
    length: int

    @property
    def family(self) -> str: return f"isbn{self.length}"

    def check(self, value: Any) -> bool:
        if not isinstance(value, str) or not value.strip():
            return False
        return isbn.isbn_type(value) == f"ISBN{self.length}"


# ============================================================================
# Network Addresses
# ============================================================================

@dataclass(frozen=True, slots=True)
class EmailChecker(FormatChecker):
    """RFC 5322 address; deliverability is not checked."""

    @property
    def family(self) -> str: return "email"

    def check(self, value: Any) -> bool:
        if not isinstance(value, str) or not value or value != value.strip():
            return False
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            return False
        return True


@dataclass(frozen=True, slots=True)
class IpAddressChecker(FormatChecker):
    """IPv4 or IPv6 literal."""

    @property
    def family(self) -> str: return "ip"

    def check(self, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        try:
            ip_address(value)
        except ValueError:
            return False
        return True


@dataclass(frozen=True, slots=True)
class UrlChecker(FormatChecker):
    """Absolute URL: scheme, authority, path, query and fragment.

    Flags:
    - ALLOW_2_SLASHES: "//" is allowed inside the path
    - ALLOW_ALL_SCHEMES: any syntactically valid scheme, not just http/https/ftp
    - ALLOW_LOCAL_URLS: "localhost" and single-label hosts are accepted
    - NO_FRAGMENTS: any "#fragment" makes the URL invalid
    """
    flags: UrlFlag = UrlFlag.NONE
    schemes: frozenset[str] = DEFAULT_URL_SCHEMES

    @property
    def family(self) -> str: return "url"

    def _valid_host(self, host: str | None) -> bool:
        if not host:
            return False
        try:
            ip_address(host)
            return True
        except ValueError:
            pass
        if UrlFlag.ALLOW_LOCAL_URLS in self.flags and (host == "localhost" or _LOCAL_HOST.fullmatch(host)):
            return True
        return DomainChecker().check(host)

    @staticmethod
    def _valid_path(path: str, allow_two_slashes: bool) -> bool:
        if "//" in path and not allow_two_slashes:
            return False
        depth = 0
        for segment in path.split("/")[1:]:
            if segment == "..":
                depth -= 1
                if depth < 0:
                    return False
            elif segment not in ("", "."):
                depth += 1
        return True

    def check(self, value: Any) -> bool:
        if not isinstance(value, str) or not value or any(ch.isspace() for ch in value):
            return False
        try:
            parts = urlsplit(value)
            port = parts.port
        except ValueError:
            return False
        if port is None and parts.netloc.endswith(":"):
            return False

        scheme = parts.scheme
        if not scheme or not _SCHEME.fullmatch(scheme):
            return False
        if UrlFlag.ALLOW_ALL_SCHEMES not in self.flags and scheme.lower() not in self.schemes:
            return False

        # file:/// is the one scheme allowed an empty authority
        local_file = scheme.lower() == "file" and not parts.netloc
        if not local_file and not self._valid_host(parts.hostname):
            return False

        if not self._valid_path(parts.path, UrlFlag.ALLOW_2_SLASHES in self.flags):
            return False
        if UrlFlag.NO_FRAGMENTS in self.flags and "#" in value:
            return False
        return True


# ============================================================================
# Regex Set
# ============================================================================

@dataclass(frozen=True, slots=True)
class RegexChecker(FormatChecker):
    """Value fully matches at least one of the expressions."""
    expressions: tuple[re.Pattern, ...]

    @property
    def family(self) -> str: return "regex"

    def check(self, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        return any(expression.fullmatch(value) for expression in self.expressions)


# ============================================================================
# Factories
# ============================================================================

DOMAIN = DomainChecker()
TOP_LEVEL_DOMAIN = TopLevelDomainChecker()
COUNTRY_TOP_LEVEL_DOMAIN = TopLevelDomainChecker(country_only=True)
EMAIL = EmailChecker()
IP_ADDRESS = IpAddressChecker()
ISBN10 = IsbnChecker(10)
ISBN13 = IsbnChecker(13)


@lru_cache(maxsize=32)
def credit_card_checker(card_types: frozenset[CreditCardType]) -> CreditCardChecker:
    return CreditCardChecker(frozenset(card_types))


@lru_cache(maxsize=16)
def url_checker(flags: UrlFlag = UrlFlag.NONE) -> UrlChecker:
    return UrlChecker(UrlFlag(flags))


@lru_cache(maxsize=128)
def _regex_checker(expressions: tuple[str, ...], case_sensitive: bool) -> Result[RegexChecker, AppError]:
    flags = 0 if case_sensitive else re.IGNORECASE
    compiled = []
    for expression in expressions:
        try:
            compiled.append(re.compile(expression, flags))
        except re.error as e:
            return invalid_regex(expression, str(e), origin="checkers")
    return Ok(RegexChecker(tuple(compiled)))


def regex_checker(expressions: Iterable[str], case_sensitive: bool = False) -> Result[RegexChecker, AppError]:
    """Compile the expressions once per (expressions, case) pair."""
    return _regex_checker(tuple(expressions), case_sensitive)
