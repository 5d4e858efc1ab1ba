"""Locale-aware date and time parsing.

Patterns use the SimpleDateFormat letter set::

    G y Y M L d D E e c u F w W a H k K h m s S z Z X x O v V Q q

Text between single quotes is literal (``''`` is a quote). Any other ASCII
letter is an illegal pattern character. Parsing is non-lenient: field
values must be in range, the calendar date must exist, and a day-of-week
name must agree with the date it accompanies. Month, day, era and period
names come from CLDR via babel and match case-insensitively. Time zone
fields are checked for shape only.

Two-digit years (``y``/``yy`` with exactly two digits) resolve into the
window ``[today - 80y, today + 20y)``.
"""
from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from functools import lru_cache
from typing import Optional

from babel import Locale

from core.errors import AppError, Err, Ok, Result, invalid_date, invalid_format, invalid_pattern


class TemporalKind(str, Enum):
    DATE = "date"
    TIME = "time"


FIELD_LETTERS = frozenset("GyYMLdDEecuFwWaHkKhmsSzZXxOvVQq")

# Letters whose value is always a number
_NUMERIC = frozenset("yYdDFwWHkKhmsSu")
# Letters that are numeric at one or two letters and text from three on
_NUMERIC_WHEN_SHORT = frozenset("MLecQq")
_ZONE = frozenset("zZXxOvV")

_ZONE_REGEX = (
    r"(?:Z|[+-]\d{2}(?::?\d{2}){0,2}"
    r"|(?:GMT|UTC|UT)(?:[+-]\d{1,2}(?::?\d{2})?)?"
    r"|[A-Za-z][A-Za-z0-9_]*(?:/[A-Za-z0-9_+-]+)*)"
)

# (min, max) for each numeric field, checked before any calendar arithmetic
_RANGES: dict[str, tuple[int, int]] = {
    "M": (1, 12), "L": (1, 12), "d": (1, 31), "D": (1, 366),
    "H": (0, 23), "k": (1, 24), "K": (0, 11), "h": (1, 12),
    "m": (0, 59), "s": (0, 59), "S": (0, 999),
    "u": (1, 7), "e": (1, 7), "c": (1, 7), "F": (1, 5),
    "w": (1, 53), "W": (0, 6), "Q": (1, 4), "q": (1, 4),
}


@dataclass(frozen=True, slots=True)
class Token:
    """A field (``letter`` repeated ``count`` times) or a literal run."""
    letter: str = ""
    count: int = 0
    literal: str = ""

    @property
    def is_field(self) -> bool:
        return bool(self.letter)

    @property
    def numeric(self) -> bool:
        if self.letter in _NUMERIC:
            return True
        return self.letter in _NUMERIC_WHEN_SHORT and self.count <= 2


@dataclass(frozen=True, slots=True)
class TemporalFields:
    """Field values recovered from a successful parse."""
    year: Optional[int] = None
    month: Optional[int] = None
    day: Optional[int] = None
    hour: Optional[int] = None
    minute: Optional[int] = None
    second: Optional[int] = None
    millisecond: Optional[int] = None
    weekday: Optional[int] = None  # Monday == 0


def tokenize(pattern: str) -> Result[tuple[Token, ...], AppError]:
    """Split a date pattern into field and literal tokens."""
    tokens: list[Token] = []
    literal: list[str] = []
    i, n = 0, len(pattern)

    def flush() -> None:
        if literal:
            tokens.append(Token(literal="".join(literal)))
            literal.clear()

    while i < n:
        ch = pattern[i]
        if ch == "'":
            if i + 1 < n and pattern[i + 1] == "'":
                literal.append("'")
                i += 2
                continue
            i += 1
            while True:
                if i >= n:
                    return invalid_pattern(pattern, "unterminated quote", origin="dates")
                if pattern[i] == "'":
                    if i + 1 < n and pattern[i + 1] == "'":
                        literal.append("'")
                        i += 2
                        continue
                    i += 1
                    break
                literal.append(pattern[i])
                i += 1
            continue
        if ch.isascii() and ch.isalpha():
            if ch not in FIELD_LETTERS:
                return invalid_pattern(pattern, f"illegal pattern character '{ch}'", origin="dates")
            flush()
            end = i
            while end < n and pattern[end] == ch:
                end += 1
            tokens.append(Token(letter=ch, count=end - i))
            i = end
            continue
        literal.append(ch)
        i += 1
    flush()
    return Ok(tuple(tokens))


def _names(*tables) -> dict[str, int]:
    """Lower-cased name -> index across several babel name tables."""
    names: dict[str, int] = {}
    for table in tables:
        for index, name in table.items():
            names.setdefault(str(name).lower(), index)
            names.setdefault(str(name).lower().rstrip("."), index)
    return names


@dataclass(frozen=True)
class NameTables:
    months: dict[str, int]
    days: dict[str, int]
    periods: dict[str, str]
    eras: dict[str, int]
    quarters: dict[str, int]
    first_week_day: int = 6

    @classmethod
    def for_locale(cls, locale: Locale) -> NameTables:
        months, days, quarters, periods = locale.months, locale.days, locale.quarters, locale.periods
        return cls(
            months=_names(*(months[ctx][width]
                             for ctx in ("format", "stand-alone")
                             for width in ("wide", "abbreviated"))),
            days=_names(*(days[ctx][width]
                          for ctx in ("format", "stand-alone")
                          for width in ("wide", "abbreviated"))),
            periods={str(periods[key]).lower(): key for key in ("am", "pm") if key in periods},
            eras=_names(locale.eras["wide"], locale.eras["abbreviated"]),
            quarters=_names(quarters["format"]["wide"], quarters["format"]["abbreviated"]),
            first_week_day=locale.first_week_day,
        )

    def for_letter(self, letter: str) -> dict:
        return {
            "M": self.months, "L": self.months,
            "E": self.days, "e": self.days, "c": self.days,
            "a": self.periods, "G": self.eras,
            "Q": self.quarters, "q": self.quarters,
        }[letter]


def _alternation(names) -> str:
    ordered = sorted((n for n in names if n), key=len, reverse=True)
    return "(?i:" + "|".join(re.escape(n) for n in ordered) + ")"


def _lookup_name(table: dict, text: str) -> Optional[object]:
    """Find the entry the case-insensitive alternation matched, or None."""
    if text.lower() in table:
        return table[text.lower()]
    for name, value in table.items():
        if re.fullmatch(re.escape(name), text, re.IGNORECASE):
            return value
    return None


def _literal_regex(text: str) -> str:
    return "".join(
        r"\s+" if chunk.isspace() else re.escape(chunk)
        for chunk in re.split(r"(\s+)", text) if chunk
    )


@dataclass(frozen=True)
class CompiledPattern:
    pattern: str
    regex: re.Pattern
    fields: tuple[Token, ...]
    names: NameTables


@lru_cache(maxsize=128)
def _compile(pattern: str, locale_tag: str) -> Result[CompiledPattern, AppError]:
    tokenized = tokenize(pattern)
    if tokenized.is_err():
        return tokenized
    tokens = tokenized.unwrap()
    names = NameTables.for_locale(Locale.parse(locale_tag))

    parts: list[str] = []
    fields: list[Token] = []
    for position, token in enumerate(tokens):
        if not token.is_field:
            parts.append(_literal_regex(token.literal))
            continue
        following = tokens[position + 1] if position + 1 < len(tokens) else None
        if token.letter in _ZONE:
            body = _ZONE_REGEX
        elif token.numeric:
            abutting = following is not None and following.is_field and following.numeric
            body = rf"\d{{{token.count}}}" if abutting else r"\d+"
        else:
            body = _alternation(names.for_letter(token.letter))
        parts.append(f"(?P<f{len(fields)}>{body})")
        fields.append(token)

    return Ok(CompiledPattern(pattern, re.compile("".join(parts)), tuple(fields), names))


def default_temporal_pattern(locale: Locale, kind: TemporalKind) -> str:
    """The locale's short date or time pattern, e.g. ``M/d/yy`` or ``h:mm a``."""
    formats = locale.date_formats if kind is TemporalKind.DATE else locale.time_formats
    return formats["short"].pattern


def resolve_two_digit_year(two_digits: int, today: date | None = None) -> int:
    """Place ``two_digits`` in ``[today - 80y, today + 20y)``."""
    today = today or date.today()
    start = today.year - 80
    year = start - start % 100 + two_digits
    if year < start:
        year += 100
    return year


def _is_leap(year: int) -> bool:
    return calendar.isleap(year)


def _days_in_month(year: int, month: int) -> int:
    # Proleptic Gregorian; years outside 1..9999 use a surrogate of the same leapness
    surrogate = year if 1 <= year <= 9999 else (2000 if _is_leap(year) else 2001)
    return calendar.monthrange(surrogate, month)[1]


def _fields_from_match(compiled: CompiledPattern, match: re.Match) -> Result[dict, str]:
    values: dict[str, object] = {"first_week_day": compiled.names.first_week_day, "numeric_days": set()}
    for index, token in enumerate(compiled.fields):
        text = match.group(f"f{index}")
        letter = token.letter
        if letter in _ZONE:
            continue
        if token.numeric:
            number = int(text)
            bounds = _RANGES.get(letter)
            if bounds and not bounds[0] <= number <= bounds[1]:
                return Err(f"field '{letter * token.count}' out of range: {number}")
            if letter in "yY":
                values["two_digit_year"] = len(text) == 2 and token.count <= 2
            if letter in "ec":
                values["numeric_days"].add(letter)
            values[letter] = number
        else:
            value = _lookup_name(compiled.names.for_letter(letter), text)
            if value is None:
                return Err(f"unrecognized name for field '{letter * token.count}': {text}")
            values[letter] = value
    return Ok(values)


def _resolve(values: dict, today: date | None = None) -> Result[TemporalFields, str]:
    """Combine raw field values into a consistent date/time, non-leniently."""
    year = values.get("y", values.get("Y"))
    if year is not None:
        if year < 1 and not values.get("two_digit_year"):
            return Err("year must be positive")
        if values.get("two_digit_year"):
            year = resolve_two_digit_year(year, today)
        if values.get("G") == 0:
            year = 1 - year

    month = values.get("M", values.get("L"))
    day = values.get("d")
    if month is not None and day is not None:
        check_year = year if year is not None else 1970
        if day > _days_in_month(check_year, month):
            return Err(f"day {day} does not exist in month {month}")

    day_of_year = values.get("D")
    if day_of_year is not None and year is not None:
        if day_of_year > (366 if _is_leap(year) else 365):
            return Err(f"day of year {day_of_year} does not exist in {year}")

    hour = values.get("H")
    period = values.get("a")
    if "k" in values:
        hour = values["k"] % 24
    elif "h" in values:
        hour = values["h"] % 12 + (12 if period == "pm" else 0)
    elif "K" in values:
        hour = values["K"] + (12 if period == "pm" else 0)

    weekday = None
    for letter in ("E", "e", "c", "u"):
        if letter not in values:
            continue
        candidate = values[letter]
        if letter == "u":
            candidate -= 1
        elif letter in values.get("numeric_days", ()):
            candidate = (values["first_week_day"] + candidate - 1) % 7
        if weekday is not None and weekday != candidate:
            return Err("conflicting day-of-week fields")
        weekday = candidate

    if weekday is not None and year is not None and month is not None and day is not None and 1 <= year <= 9999:
        actual = date(year, month, day).weekday()
        if actual != weekday:
            return Err(f"{calendar.day_name[weekday]} does not match {year:04d}-{month:02d}-{day:02d}")

    return Ok(TemporalFields(
        year=year, month=month, day=day, hour=hour,
        minute=values.get("m"), second=values.get("s"),
        millisecond=values.get("S"), weekday=weekday,
    ))


def parse_temporal(
    raw: str | None,
    kind: TemporalKind,
    locale: Locale,
    pattern: str | None = None,
    today: date | None = None,
) -> Result[TemporalFields, AppError]:
    """Parse ``raw`` as a date or time.

    The explicit ``pattern`` wins when given; otherwise the locale's short
    date (or time) pattern applies.
    """
    field_name = kind.value
    text = raw.strip() if isinstance(raw, str) else ""
    if not text:
        return invalid_format(field_name, f"a {field_name}", got=raw, origin="dates")

    source = default_temporal_pattern(locale, kind) if pattern is None else pattern
    compiled = _compile(source, str(locale))
    if compiled.is_err():
        return compiled
    compiled = compiled.unwrap()

    found = compiled.regex.fullmatch(text)
    if found is None:
        return invalid_format(field_name, f"pattern '{source}'", got=text, origin="dates")

    resolved = _fields_from_match(compiled, found).and_then(lambda values: _resolve(values, today))
    match resolved:
        case Ok(fields):
            return Ok(fields)
        case Err(reason):
            return invalid_date(field_name, text, reason, origin="dates")
