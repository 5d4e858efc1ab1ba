# tests/test_failures.py
"""
Failure reporting tests

resolve name -> structural check -> zero-arg instantiate -> raise, with
every misconfiguration surfacing as ConfigurationError.
"""
import pytest

from core.errors import ErrorCode
from core.validation import (
    FAILURE_TYPES,
    ConfigurationError,
    InvalidInputError,
    build_failure,
    ensure_failure_type,
    raise_failure,
    register_failure_type,
    resolve_failure_type,
    validate_email,
    validate_length,
)


class OrderRejected(Exception):
    pass


class NeedsReason(Exception):
    def __init__(self, reason):
        super().__init__(reason)


class BrokenConstructor(Exception):
    def __init__(self):
        raise RuntimeError("cannot build")


class NotAnError:
    pass


class TestRegistry:
    def test_defaults_are_registered(self):
        for name in (
            "core.validation.failures.InvalidInputError",
            "InvalidInputError",
            "builtins.ValueError",
            "ValueError",
            "LookupError",
        ):
            assert name in FAILURE_TYPES

    def test_bare_decorator_registers_qualified_name(self):
        register_failure_type(OrderRejected)
        assert FAILURE_TYPES.lookup("test_failures.OrderRejected") is OrderRejected

    def test_aliases(self):
        register_failure_type(aliases=("OrderRejected",))(OrderRejected)
        assert FAILURE_TYPES.lookup("OrderRejected") is OrderRejected

    def test_registration_is_isolated_between_tests(self):
        assert "OrderRejected" not in FAILURE_TYPES


class TestResolve:
    def test_unknown_name(self):
        result = resolve_failure_type("no.such.Failure")
        assert result.is_err()
        assert result.unwrap_err().code is ErrorCode.E8001_UNKNOWN_FAILURE_TYPE

    def test_registered_non_error(self):
        register_failure_type(NotAnError, aliases=("NotAnError",))
        result = resolve_failure_type("NotAnError")
        assert result.unwrap_err().code is ErrorCode.E8002_NOT_AN_ERROR_TYPE
        assert "must be a raisable error type" in result.unwrap_err().message

    def test_build_requires_zero_arg_constructor(self):
        register_failure_type(NeedsReason, aliases=("NeedsReason",))
        result = build_failure("NeedsReason")
        assert result.unwrap_err().code is ErrorCode.E8003_FAILURE_TYPE_NOT_CONSTRUCTIBLE

    def test_constructor_errors_are_not_constructible(self):
        register_failure_type(BrokenConstructor, aliases=("BrokenConstructor",))
        result = build_failure("BrokenConstructor")
        assert result.unwrap_err().code is ErrorCode.E8003_FAILURE_TYPE_NOT_CONSTRUCTIBLE
        with pytest.raises(ConfigurationError):
            raise_failure("BrokenConstructor")


class TestRaiseFailure:
    def test_default_failure(self):
        with pytest.raises(InvalidInputError):
            raise_failure()

    def test_named_builtin(self):
        with pytest.raises(ValueError):
            raise_failure("ValueError")

    def test_custom_failure(self):
        register_failure_type(OrderRejected, aliases=("OrderRejected",))
        with pytest.raises(OrderRejected):
            raise_failure("OrderRejected")

    @pytest.mark.parametrize("name, code", [
        ("no.such.Failure", ErrorCode.E8001_UNKNOWN_FAILURE_TYPE),
        ("NotAnError", ErrorCode.E8002_NOT_AN_ERROR_TYPE),
        ("NeedsReason", ErrorCode.E8003_FAILURE_TYPE_NOT_CONSTRUCTIBLE),
    ])
    def test_misconfiguration_raises_configuration_error(self, name, code):
        register_failure_type(NotAnError, aliases=("NotAnError",))
        register_failure_type(NeedsReason, aliases=("NeedsReason",))
        with pytest.raises(ConfigurationError) as info:
            raise_failure(name)
        assert info.value.code is code

    def test_ensure_failure_type(self):
        ensure_failure_type("ValueError")
        with pytest.raises(ConfigurationError):
            ensure_failure_type("no.such.Failure")


class TestResolutionTiming:
    def test_lazy_by_default_passing_rule_ignores_bad_name(self):
        validate_email("jane.doe@mulesoft.com", failure_type="no.such.Failure")

    def test_lazy_failing_rule_reports_bad_name(self):
        with pytest.raises(ConfigurationError):
            validate_length("hello", 1, 3, failure_type="no.such.Failure")

    def test_eager_mode_rejects_bad_name_even_on_valid_input(self, eager_failure_types):
        with pytest.raises(ConfigurationError) as info:
            validate_email("jane.doe@mulesoft.com", failure_type="no.such.Failure")
        assert info.value.code is ErrorCode.E8001_UNKNOWN_FAILURE_TYPE

    def test_eager_mode_rejects_non_error_type(self, eager_failure_types):
        register_failure_type(NotAnError, aliases=("NotAnError",))
        with pytest.raises(ConfigurationError):
            validate_length("hello", 1, 10, failure_type="NotAnError")

    def test_eager_mode_accepts_good_name(self, eager_failure_types):
        validate_length("hello", 1, 10, failure_type="ValueError")
