"""Locale-aware number parsing.

Number patterns use the DecimalFormat letter grammar (``#,##0.###``,
``#,##0%``, ``'EUR' #,##0.00;('EUR' #,##0.00)``). A pattern is compiled once
per (pattern, locale symbols, kind) into an anchored regex, so the whole
input must be consumed. Locale data (decimal and group symbols, minus sign,
exponent symbol, default decimal and percent patterns) comes from CLDR via
babel.

Parsing is lenient about group sizes ("1,2345" is 12345) but strict about
everything else: no stray characters, no fraction for integral kinds, and
kind-specific range limits (32/64-bit integers, float32, finite doubles).
Fractional kinds accept an exponent ("1E5") under any pattern; integral
kinds only when the pattern has one.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from enum import Enum
from functools import lru_cache
from typing import Any

from babel import Locale
from babel.numbers import (
    get_decimal_symbol,
    get_exponential_symbol,
    get_group_symbol,
    get_minus_sign_symbol,
)

from core.errors import AppError, Err, Ok, Result, invalid_format, invalid_pattern, out_of_range


class NumberKind(str, Enum):
    """Numeric target of a parse, with its representable range."""
    INTEGER = "integer"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    PERCENT = "percent"

    @property
    def integral(self) -> bool:
        return self in (NumberKind.INTEGER, NumberKind.LONG)


INT32_RANGE = (-(2**31), 2**31 - 1)
INT64_RANGE = (-(2**63), 2**63 - 1)
FLOAT32_MAX = 3.4028234663852886e38
FLOAT32_MIN_SUBNORMAL = 1.401298464324817e-45

# Affix token kinds
_LITERAL, _MINUS, _PERCENT, _PER_MILLE = "literal", "minus", "percent", "per_mille"
_NUMBER_CHARS = frozenset("0123456789#,.@")
_SPACES = r"\s"

Affix = tuple[tuple[str, str], ...]


@dataclass(frozen=True, slots=True)
class NumberPattern:
    """Parsed DecimalFormat pattern, independent of any locale."""
    pattern: str
    positive_prefix: Affix = ()
    positive_suffix: Affix = ()
    negative_prefix: Affix = ((_MINUS, "-"),)
    negative_suffix: Affix = ()
    grouping: bool = False
    exponent: bool = False
    scale: int = 0
    explicit_negative: bool = field(default=False, compare=False)

    @property
    def has_percent(self) -> bool:
        affixes = (self.positive_prefix, self.positive_suffix, self.negative_prefix, self.negative_suffix)
        return any(kind == _PERCENT for affix in affixes for kind, _ in affix)

    def without_percent(self) -> NumberPattern:
        """Same pattern with percent signs removed, keeping the percent scale."""
        strip = lambda affix: tuple(t for t in affix if t[0] != _PERCENT)
        return replace(
            self,
            positive_prefix=strip(self.positive_prefix),
            positive_suffix=strip(self.positive_suffix),
            negative_prefix=strip(self.negative_prefix),
            negative_suffix=strip(self.negative_suffix),
        )


def _split_unquoted(pattern: str, sep: str) -> list[str]:
    parts, current, quoted = [], [], False
    for ch in pattern:
        if ch == "'":
            quoted = not quoted
        if ch == sep and not quoted:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    return parts


def _scan_subpattern(sub: str, full: str) -> Result[tuple[Affix, str, Affix], AppError]:
    """Split one subpattern into prefix tokens, number part and suffix tokens."""
    prefix: list[tuple[str, str]] = []
    suffix: list[tuple[str, str]] = []
    number: list[str] = []
    phase = "prefix"
    i, n = 0, len(sub)

    def add(target: list, kind: str, text: str = "") -> None:
        if kind == _LITERAL and target and target[-1][0] == _LITERAL:
            target[-1] = (_LITERAL, target[-1][1] + text)
        else:
            target.append((kind, text))

    while i < n:
        ch = sub[i]
        target = prefix if phase == "prefix" else suffix
        if ch == "'":
            end = i + 1
            chunk = []
            while True:
                if end >= n:
                    return invalid_pattern(full, "unterminated quote", origin="numbers")
                if sub[end] == "'":
                    if end + 1 < n and sub[end + 1] == "'":
                        chunk.append("'")
                        end += 2
                        continue
                    break
                chunk.append(sub[end])
                end += 1
            if phase == "number":
                phase, target = "suffix", suffix
            # '' outside quotes is a literal quote
            add(target, _LITERAL, "".join(chunk) if end > i + 1 else "'")
            i = end + 1
            continue
        if phase in ("prefix", "number") and (ch in _NUMBER_CHARS or (phase == "number" and ch == "E")):
            phase = "number"
            number.append(ch)
            i += 1
            continue
        if phase == "number":
            phase, target = "suffix", suffix
        if phase == "suffix" and ch in _NUMBER_CHARS:
            return invalid_pattern(full, f"unquoted special character '{ch}' in suffix", origin="numbers")
        if ch == "-":
            add(target, _MINUS, "-")
        elif ch == "%":
            add(target, _PERCENT, "%")
        elif ch == "\u2030":
            add(target, _PER_MILLE, "\u2030")
        else:
            add(target, _LITERAL, ch)
        i += 1
    return Ok((tuple(prefix), "".join(number), tuple(suffix)))


def _affix_scale(affixes: tuple[Affix, ...]) -> int:
    kinds = {kind for affix in affixes for kind, _ in affix}
    if _PER_MILLE in kinds:
        return 3
    if _PERCENT in kinds:
        return 2
    return 0


@lru_cache(maxsize=256)
def parse_number_pattern(pattern: str) -> Result[NumberPattern, AppError]:
    """Parse a DecimalFormat pattern string.

    An empty pattern is a real pattern: no affixes, no grouping, no exponent.
    """
    subpatterns = _split_unquoted(pattern, ";")
    if len(subpatterns) > 2:
        return invalid_pattern(pattern, "more than one ';' separator", origin="numbers")

    match _scan_subpattern(subpatterns[0], pattern):
        case Err() as failure:
            return failure
        case Ok((pos_prefix, number, pos_suffix)):
            pass

    if number.count(".") > 1:
        return invalid_pattern(pattern, "multiple decimal separators", origin="numbers")
    if number.count("E") > 1:
        return invalid_pattern(pattern, "multiple exponent symbols", origin="numbers")
    mantissa, _, exponent = number.partition("E")
    if "E" in number and (not exponent or set(exponent) - {"0"}):
        return invalid_pattern(pattern, "malformed exponent", origin="numbers")
    if "," in mantissa.partition(".")[2]:
        return invalid_pattern(pattern, "grouping separator after decimal point", origin="numbers")

    neg_prefix: Affix = ((_MINUS, "-"), *pos_prefix)
    neg_suffix: Affix = pos_suffix
    explicit = len(subpatterns) == 2
    if explicit:
        match _scan_subpattern(subpatterns[1], pattern):
            case Err() as failure:
                return failure
            case Ok((neg_prefix, _, neg_suffix)):
                pass

    return Ok(NumberPattern(
        pattern=pattern,
        positive_prefix=pos_prefix,
        positive_suffix=pos_suffix,
        negative_prefix=neg_prefix,
        negative_suffix=neg_suffix,
        grouping="," in mantissa.partition(".")[0],
        exponent=bool(exponent),
        scale=_affix_scale((pos_prefix, pos_suffix)),
        explicit_negative=explicit,
    ))


@dataclass(frozen=True, slots=True)
class NumberSymbols:
    decimal: str
    group: str
    minus: str
    exponential: str

    @classmethod
    def for_locale(cls, locale: Locale) -> NumberSymbols:
        return cls(
            decimal=get_decimal_symbol(locale),
            group=get_group_symbol(locale),
            minus=get_minus_sign_symbol(locale),
            exponential=get_exponential_symbol(locale),
        )


def _symbol_regex(symbol: str) -> str:
    if symbol.isspace():
        return _SPACES
    return re.escape(symbol)


def _affix_regex(affix: Affix, symbols: NumberSymbols) -> str:
    parts = []
    for kind, text in affix:
        if kind == _MINUS:
            parts.append(f"(?:-|{re.escape(symbols.minus)})" if symbols.minus != "-" else "-")
        elif kind == _LITERAL:
            parts.append("".join(r"\s+" if chunk.isspace() else re.escape(chunk)
                                 for chunk in re.split(r"(\s+)", text) if chunk))
        else:
            parts.append(re.escape(text))
    return "".join(parts)


@lru_cache(maxsize=256)
def _compile(pattern: NumberPattern, symbols: NumberSymbols, integral: bool) -> re.Pattern:
    dec, grp = _symbol_regex(symbols.decimal), _symbol_regex(symbols.group)
    int_part = rf"\d+(?:{grp}\d+)*" if pattern.grouping else r"\d+"
    number = int_part if integral else rf"(?:{int_part}(?:{dec}\d*)?|{dec}\d+)"
    # fractional kinds take an exponent whatever the pattern says
    if pattern.exponent or not integral:
        sign = rf"(?:[-+]|{re.escape(symbols.minus)})?"
        number += rf"(?:{re.escape(symbols.exponential)}{sign}\d+)?"
    pos = _affix_regex(pattern.positive_prefix, symbols), _affix_regex(pattern.positive_suffix, symbols)
    neg = _affix_regex(pattern.negative_prefix, symbols), _affix_regex(pattern.negative_suffix, symbols)
    return re.compile(
        rf"(?:{pos[0]}(?P<pos>{number}){pos[1]}|{neg[0]}(?P<neg>{number}){neg[1]})",
        re.UNICODE,
    )


def _to_decimal(text: str, symbols: NumberSymbols) -> Decimal:
    group = re.compile(_symbol_regex(symbols.group))
    mantissa, _, exponent = text.partition(symbols.exponential)
    plain = group.sub("", mantissa).replace(symbols.decimal, ".")
    if plain.startswith("."):
        plain = "0" + plain
    if exponent:
        plain = f"{plain}E{exponent.replace(symbols.minus, '-')}"
    return Decimal(plain)


def match_number(raw: str, pattern: NumberPattern, symbols: NumberSymbols, integral: bool) -> Decimal | None:
    """Match ``raw`` against a compiled pattern; ``None`` when it does not fully match."""
    m = _compile(pattern, symbols, integral).fullmatch(raw)
    if m is None:
        return None
    negative = m.group("pos") is None
    try:
        value = _to_decimal(m.group("neg") if negative else m.group("pos"), symbols)
    except InvalidOperation:
        return None
    if pattern.scale:
        value = value.scaleb(-pattern.scale)
    return -value if negative else value


def default_number_pattern(locale: Locale, kind: NumberKind) -> str:
    """The locale's standard decimal (or percent) pattern, e.g. ``#,##0.###``."""
    formats = locale.percent_formats if kind is NumberKind.PERCENT else locale.decimal_formats
    return formats[None].pattern


def _within_kind(value: Decimal, kind: NumberKind) -> Any:
    """Convert to the kind's Python type, or ``None`` when not representable."""
    if kind.integral:
        if value != value.to_integral_value():
            return None
        low, high = INT32_RANGE if kind is NumberKind.INTEGER else INT64_RANGE
        as_int = int(value)
        return as_int if low <= as_int <= high else None
    if kind is NumberKind.PERCENT:
        return value
    as_float = float(value)
    magnitude = abs(as_float)
    if magnitude == float("inf"):
        return None
    if kind is NumberKind.FLOAT:
        if magnitude > FLOAT32_MAX or (value != 0 and magnitude < FLOAT32_MIN_SUBNORMAL):
            return None
    return as_float


def parse_number(
    raw: str | None,
    kind: NumberKind,
    locale: Locale,
    pattern: str | None = None,
) -> Result[Any, AppError]:
    """Parse ``raw`` as ``kind`` under ``locale`` and an optional pattern.

    ``pattern=None`` uses the locale default; ``pattern=""`` is parsed as a
    (degenerate) pattern of its own.
    """
    field_name = kind.value
    text = raw.strip() if isinstance(raw, str) else ""
    if not text:
        return invalid_format(field_name, f"a {field_name} value", got=raw, origin="numbers")

    source = default_number_pattern(locale, kind) if pattern is None else pattern
    compiled = parse_number_pattern(source)
    if compiled.is_err():
        return compiled
    number_pattern = compiled.unwrap()
    symbols = NumberSymbols.for_locale(locale)

    value = match_number(text, number_pattern, symbols, kind.integral)
    if value is None and kind is NumberKind.PERCENT and number_pattern.has_percent:
        # a bare number is accepted as a percentage too ("50" == "50%")
        value = match_number(text, number_pattern.without_percent(), symbols, kind.integral)
    if value is None:
        return invalid_format(field_name, f"pattern '{source}'", got=text, origin="numbers")

    converted = _within_kind(value, kind)
    if converted is None:
        return out_of_range(field_name, value, origin="numbers")
    return Ok(converted)
