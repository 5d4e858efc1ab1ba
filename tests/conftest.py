"""Shared fixtures for the validation engine tests."""
import pytest

from core.config import settings
from core.validation import FAILURE_TYPES


@pytest.fixture(autouse=True)
def isolated_failure_types():
    """Undo any failure-type registration a test makes."""
    saved = FAILURE_TYPES.snapshot()
    yield FAILURE_TYPES
    FAILURE_TYPES.restore(saved)


@pytest.fixture
def eager_failure_types(monkeypatch):
    """Resolve failure types when a rule is entered instead of when it fails."""
    monkeypatch.setattr(settings, "EAGER_FAILURE_TYPE_CHECK", True)
    yield


@pytest.fixture
def de_default_locale(monkeypatch):
    monkeypatch.setattr(settings, "DEFAULT_LOCALE", "de_DE")
    yield
