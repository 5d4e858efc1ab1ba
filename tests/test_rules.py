# tests/test_rules.py
"""
Validation rule tests

Every rule is a gate: None on success, the chosen failure type on a
rejected input, ConfigurationError when the rule is configured wrongly.
"""
import pytest

from core.errors import ErrorCode
from core.validation import (
    RULES,
    ConfigurationError,
    InvalidInputError,
    LengthOptions,
    build_options,
    get_rule,
    list_rules,
    register_failure_type,
    validate_credit_card_number,
    validate_date,
    validate_domain,
    validate_double,
    validate_email,
    validate_float,
    validate_integer,
    validate_ip_address,
    validate_isbn10,
    validate_isbn13,
    validate_length,
    validate_long,
    validate_not_empty,
    validate_percentage,
    validate_time,
    validate_top_level_domain,
    validate_top_level_domain_country,
    validate_url,
    validate_using_regex,
)


class PaymentRejected(Exception):
    pass


class TestRegistry:
    def test_every_rule_is_registered(self):
        assert set(RULES) == {
            "validate-domain",
            "validate-top-level-domain",
            "validate-top-level-domain-country",
            "validate-credit-card-number",
            "validate-email",
            "validate-ip-address",
            "validate-percentage",
            "validate-isbn10",
            "validate-isbn13",
            "validate-url",
            "validate-time",
            "validate-date",
            "validate-using-regex",
            "validate-integer",
            "validate-long",
            "validate-float",
            "validate-double",
            "validate-not-empty",
            "validate-length",
        }

    def test_lookup(self):
        assert get_rule("validate-email").unwrap().func is validate_email
        assert get_rule("validate-integer").unwrap().func is validate_integer
        assert get_rule("validate-nothing").unwrap_err().code is ErrorCode.E8020_UNKNOWN_RULE

    def test_list_is_sorted_with_summaries(self):
        specs = list_rules()
        assert [s.name for s in specs] == sorted(RULES)
        assert all(s.summary for s in specs)

    def test_parameters(self):
        assert get_rule("validate-length").unwrap().parameters == ["value", "min_value", "max_value", "failure_type"]


class TestGateContract:
    @pytest.mark.parametrize("call", [
        lambda ft: validate_domain("mulesoft.com", failure_type=ft),
        lambda ft: validate_email("jane.doe@mulesoft.com", failure_type=ft),
        lambda ft: validate_integer("150", min_value=100, max_value=200, failure_type=ft),
        lambda ft: validate_length("hello", 1, 10, failure_type=ft),
        lambda ft: validate_not_empty([1], failure_type=ft),
    ])
    def test_success_returns_none(self, call):
        assert call(None) is None

    def test_default_failure_type(self):
        with pytest.raises(InvalidInputError):
            validate_email("not an address")

    def test_custom_failure_type(self):
        register_failure_type(PaymentRejected, aliases=("PaymentRejected",))
        with pytest.raises(PaymentRejected):
            validate_credit_card_number("4111111111111112", ["VISA"], failure_type="PaymentRejected")

    def test_failure_type_by_qualified_name(self):
        with pytest.raises(LookupError):
            validate_ip_address("999.1.1.1", failure_type="builtins.LookupError")

    def test_input_is_not_mutated(self):
        value = ["a", "b"]
        validate_length(value, 1, 5)
        validate_not_empty(value)
        assert value == ["a", "b"]

    def test_outcomes_are_deterministic(self):
        for _ in range(3):
            validate_integer("150", min_value=100, max_value=200)
            with pytest.raises(InvalidInputError):
                validate_integer("250", min_value=100, max_value=200)


class TestFormatRules:
    def test_domain(self):
        validate_domain("mulesoft.com")
        with pytest.raises(InvalidInputError):
            validate_domain("mulesoft")

    def test_top_level_domains(self):
        validate_top_level_domain(".com")
        validate_top_level_domain_country("ar")
        with pytest.raises(InvalidInputError):
            validate_top_level_domain_country("com")

    def test_credit_card(self):
        validate_credit_card_number("378282246310005", ["amex", "visa"])
        with pytest.raises(InvalidInputError):
            validate_credit_card_number("378282246310005", ["VISA"])

    def test_credit_card_needs_known_types(self):
        with pytest.raises(ConfigurationError) as info:
            validate_credit_card_number("4111111111111111", ["BANKCARD"])
        assert info.value.code is ErrorCode.E8010_INVALID_OPTIONS

    def test_credit_card_needs_at_least_one_type(self):
        with pytest.raises(ConfigurationError):
            validate_credit_card_number("4111111111111111", [])

    def test_isbn(self):
        validate_isbn10("0-306-40615-2")
        validate_isbn13("978-0-306-40615-7")
        with pytest.raises(InvalidInputError):
            validate_isbn13("0-306-40615-2")

    def test_url_flags(self):
        validate_url("http://localhost:8081/", allow_local_urls=True)
        with pytest.raises(InvalidInputError):
            validate_url("http://localhost:8081/")
        with pytest.raises(InvalidInputError):
            validate_url("http://mulesoft.com/#x", no_fragments=True)
        validate_url("ssh://mulesoft.com", allow_all_schemes=True)
        validate_url("http://mulesoft.com//x", allow_two_slashes=True)

    def test_regex(self):
        validate_using_regex("ABC-123", [r"[a-z]+-\d+"])
        with pytest.raises(InvalidInputError):
            validate_using_regex("ABC-123", [r"[a-z]+-\d+"], case_sensitive=True)

    @pytest.mark.parametrize("regexs, code", [
        ([], ErrorCode.E8010_INVALID_OPTIONS),
        (["("], ErrorCode.E8013_INVALID_REGEX),
    ])
    def test_regex_misconfiguration(self, regexs, code):
        with pytest.raises(ConfigurationError) as info:
            validate_using_regex("abc", regexs)
        assert info.value.code is code


class TestParsedRules:
    def test_integer_bounds(self):
        validate_integer("123", min_value=100, max_value=200)
        with pytest.raises(InvalidInputError):
            validate_integer("99", min_value=100, max_value=200)
        with pytest.raises(InvalidInputError):
            validate_integer("abc")

    def test_kinds(self):
        validate_long("9223372036854775807")
        validate_float("3.5")
        validate_double("-1,234.5", max_value=0)
        with pytest.raises(InvalidInputError):
            validate_integer("2147483648")

    def test_locale(self):
        validate_double("1.234,5", locale="de_DE", min_value=1000)
        with pytest.raises(InvalidInputError):
            validate_double("1.234,5")

    def test_non_text_input_fails(self):
        with pytest.raises(InvalidInputError):
            validate_integer(123)

    def test_bad_locale_is_configuration(self):
        with pytest.raises(ConfigurationError) as info:
            validate_integer("1", locale="xx_YY")
        assert info.value.code is ErrorCode.E8011_UNKNOWN_LOCALE

    def test_bad_bound_is_configuration(self):
        with pytest.raises(ConfigurationError):
            validate_integer("1", min_value="one")

    def test_unknown_option_is_rejected(self):
        result = build_options(LengthOptions, "validate-length", maximum=3)
        assert result.unwrap_err().code is ErrorCode.E8010_INVALID_OPTIONS

    def test_percentage(self):
        validate_percentage("45%")
        validate_percentage("45")
        validate_percentage("45 %", locale="de_DE")
        with pytest.raises(InvalidInputError):
            validate_percentage("45 percent")

    def test_date_and_time(self):
        validate_date("12/31/99")
        validate_date("31.12.1999", pattern="dd.MM.yyyy")
        validate_time("9:05 AM")
        validate_time("21:05", pattern="HH:mm")
        with pytest.raises(InvalidInputError):
            validate_date("02/30/2024", pattern="MM/dd/yyyy")
        with pytest.raises(ConfigurationError):
            validate_time("21:05", pattern="HH:mm:bb")


class TestPresenceRules:
    @pytest.mark.parametrize("value", ["x", [0], {"k": "v"}, 0, False])
    def test_not_empty_passes(self, value):
        validate_not_empty(value)

    @pytest.mark.parametrize("value", [None, "", [], {}, ()])
    def test_not_empty_fails(self, value):
        with pytest.raises(InvalidInputError):
            validate_not_empty(value)

    def test_length_examples(self):
        validate_length("hello", 1, 10)
        with pytest.raises(InvalidInputError):
            validate_length("hello", 1, 3)
        with pytest.raises(InvalidInputError):
            validate_length("hello")

    def test_length_defaults_min_to_zero(self):
        validate_length("", max_value=0)

    def test_length_treats_none_min_as_omitted(self):
        validate_length("hello", None, 10)
        with pytest.raises(InvalidInputError):
            validate_length("hello", None, None)

    def test_length_is_inclusive(self):
        validate_length("abc", 3, 3)

    def test_length_of_collections(self):
        validate_length([1, 2], 0, 2)
        validate_length({"a": 1}, 1, 1)

    @pytest.mark.parametrize("value", [None, 12345])
    def test_length_without_length(self, value):
        with pytest.raises(InvalidInputError):
            validate_length(value, 0, 10)

    def test_negative_min_is_configuration(self):
        with pytest.raises(ConfigurationError):
            validate_length("abc", -1, 5)
