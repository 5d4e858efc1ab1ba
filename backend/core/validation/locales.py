"""Locale resolution for number and date parsing.

Tags are accepted as ``en_US``, ``en-US`` or ``en``; ``None`` means the
configured default (``en_US`` unless overridden). Parsing "1,234" under
``de_DE`` and ``en_US`` gives different answers, so the default is never
left to the process locale.
"""
from __future__ import annotations

from functools import lru_cache

from babel import Locale, UnknownLocaleError

from core.config import settings
from core.errors import AppError, Ok, Result, unknown_locale

LocaleLike = Locale | str | None


@lru_cache(maxsize=64)
def _parse_tag(tag: str) -> Locale:
    return Locale.parse(tag.strip().replace("-", "_"))


def resolve_locale(locale: LocaleLike = None) -> Result[Locale, AppError]:
    """Resolve a tag or Locale to a babel ``Locale``."""
    if isinstance(locale, Locale):
        return Ok(locale)
    tag = locale if locale else settings.DEFAULT_LOCALE
    try:
        return Ok(_parse_tag(tag))
    except (UnknownLocaleError, ValueError, TypeError):
        return unknown_locale(str(tag), origin="locales")
