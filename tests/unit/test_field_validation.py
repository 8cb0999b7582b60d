"""Tests for field validators and FieldValidator.

Validators are pure (value, snapshot) -> message-or-None callables; these
tests call them directly with small snapshots.
"""

from profile_engine.services.field_validation import (
    FieldValidator,
    all_of,
    at_least_field,
    composite_date,
    e164_phone,
    email_address,
    iso_date,
    length_between,
    min_items,
    numeric_range,
    pattern,
    time_of_day,
    web_url,
)
from profile_engine.services.form_types import FieldSpec

# =============================================================================
# Primitive validators
# =============================================================================


class TestNumericRange:
    """Tests for numeric_range()."""

    def test_accepts_value_within_bounds(self) -> None:
        """Numbers between the inclusive bounds pass."""
        validator = numeric_range(1, 30)
        assert validator(1, {}) is None
        assert validator(30, {}) is None
        assert validator("12", {}) is None

    def test_rejects_value_below_minimum(self) -> None:
        """Values under the minimum report the bound."""
        assert numeric_range(1, 30)(0, {}) == "Must be at least 1"

    def test_rejects_value_above_maximum(self) -> None:
        """Values over the maximum report the bound."""
        assert numeric_range(1, 30)(31, {}) == "Must be at most 30"

    def test_rejects_non_numeric_input(self) -> None:
        """Text that does not parse as a number fails."""
        assert numeric_range(0)("lots", {}) == "Must be a number"

    def test_rejects_booleans(self) -> None:
        """True is not the number 1 for form purposes."""
        assert numeric_range(0)(True, {}) == "Must be a number"

    def test_accepts_thousands_separator(self) -> None:
        """Salary-style input such as "1,200" parses."""
        assert numeric_range(1000, 10000)("1,200", {}) is None

    def test_integer_flag_rejects_fractions(self) -> None:
        """integer=True rejects 2.5."""
        assert numeric_range(0, 10, integer=True)(2.5, {}) == "Must be a whole number"

    def test_custom_message_overrides_every_failure(self) -> None:
        """A message argument replaces all default messages."""
        validator = numeric_range(0, 50, message="Out of range")
        assert validator(-1, {}) == "Out of range"
        assert validator("x", {}) == "Out of range"

    def test_rejects_nan(self) -> None:
        """NaN is not a finite number."""
        assert numeric_range(0)(float("nan"), {}) == "Must be a number"


class TestPattern:
    """Tests for pattern()."""

    def test_full_match_required(self) -> None:
        """Partial matches fail."""
        validator = pattern(r"\d{3}", message="Three digits")
        assert validator("123", {}) is None
        assert validator("1234", {}) == "Three digits"

    def test_surrounding_whitespace_ignored(self) -> None:
        """The value is stripped before matching."""
        assert pattern(r"\d{3}", message="x")(" 123 ", {}) is None

    def test_non_string_fails(self) -> None:
        """Numbers are not matched against text patterns."""
        assert pattern(r"\d{3}", message="Three digits")(123, {}) == "Three digits"


class TestLengthBetween:
    """Tests for length_between()."""

    def test_string_length_within_bounds(self) -> None:
        """Strings inside the bounds pass."""
        assert length_between(2, 5)("abc", {}) is None

    def test_too_short_reports_current_length(self) -> None:
        """The default message includes the current count."""
        assert length_between(20, 500)("short", {}) == (
            "Must be at least 20 characters (currently 5)"
        )

    def test_too_long(self) -> None:
        """Strings past the maximum fail."""
        assert length_between(max_length=3)("abcd", {}) == (
            "Must be at most 3 characters (currently 4)"
        )

    def test_whitespace_not_counted(self) -> None:
        """Padding does not help reach a minimum."""
        assert length_between(3)("  a  ", {}) is not None

    def test_list_measured_by_item_count(self) -> None:
        """Lists are measured in items."""
        assert length_between(2)(["a"], {}) == "Must be at least 2 items (currently 1)"

    def test_unsupported_type(self) -> None:
        """Numbers have no length."""
        assert length_between(1)(5, {}) == "Invalid value"


# =============================================================================
# Composed validators
# =============================================================================


class TestComposedValidators:
    """Tests for validators built from the primitives."""

    def test_all_of_returns_first_error(self) -> None:
        """Validators run in order; the first error wins."""
        validator = all_of(length_between(2), pattern(r"[a-z]+", message="Lowercase"))
        assert validator("a", {}).startswith("Must be at least 2")
        assert validator("AB", {}) == "Lowercase"
        assert validator("ab", {}) is None

    def test_email_address(self) -> None:
        """Email shape check."""
        validator = email_address()
        assert validator("a@b.com", {}) is None
        assert validator("not-an-email", {}) == "Enter a valid email address"

    def test_e164_phone(self) -> None:
        """International format with leading plus."""
        validator = e164_phone()
        assert validator("+971501234567", {}) is None
        assert validator("0501234567", {}) is not None

    def test_time_of_day(self) -> None:
        """24-hour HH:MM."""
        validator = time_of_day()
        assert validator("09:30", {}) is None
        assert validator("23:59", {}) is None
        assert validator("24:00", {}) == "Use 24-hour HH:MM format"

    def test_web_url(self) -> None:
        """http(s) URLs only."""
        validator = web_url()
        assert validator("https://agency.example.com", {}) is None
        assert validator("ftp://agency.example.com", {}) is not None

    def test_min_items(self) -> None:
        """At least N list entries."""
        validator = min_items(1, message="Pick one")
        assert validator([], {}) == "Pick one"
        assert validator(["cooking"], {}) is None

    def test_iso_date_rejects_impossible_day(self) -> None:
        """February 30th is not a calendar date."""
        validator = iso_date()
        assert validator("2027-02-28", {}) is None
        assert validator("2027-02-30", {}) == "Enter a real calendar date"
        assert validator("28/02/2027", {}) == "Use YYYY-MM-DD format"

    def test_iso_date_year_bounds(self) -> None:
        """Years outside the window fail."""
        assert iso_date(min_year=2000)("1999-01-01", {}) == (
            "Year must be between 2000 and 2100"
        )


class TestCrossFieldValidators:
    """Validators that read siblings from the snapshot argument."""

    def test_at_least_field_reads_sibling_from_snapshot(self) -> None:
        """Maximum must be >= the minimum in the same snapshot."""
        validator = at_least_field("min", message="Too low")
        assert validator(1000, {"min": 2000}) == "Too low"
        assert validator(2000, {"min": 2000}) is None

    def test_at_least_field_without_sibling_checks_number_only(self) -> None:
        """An empty sibling leaves only the number check."""
        validator = at_least_field("min", message="Too low")
        assert validator(5, {}) is None
        assert validator("abc", {}) == "Too low"

    def test_at_least_field_is_repeatable(self) -> None:
        """The same validator gives different answers for different snapshots."""
        validator = at_least_field("min")
        assert validator(10, {"min": 20}) is not None
        assert validator(10, {"min": 5}) is None
        assert validator(10, {"min": 20}) is not None

    def test_composite_date_waits_for_all_parts(self) -> None:
        """No error until day, month, and year are all filled."""
        validator = composite_date("d", "m", "y")
        assert validator(None, {"d": "31"}) is None

    def test_composite_date_rejects_day_past_month_end(self) -> None:
        """31 April does not exist."""
        validator = composite_date("d", "m", "y")
        assert validator("2000", {"d": "31", "m": "4", "y": "2000"}) == (
            "Enter a valid day for the selected month"
        )

    def test_composite_date_handles_leap_years(self) -> None:
        """29 February is valid only in leap years."""
        validator = composite_date("d", "m", "y")
        assert validator(None, {"d": 29, "m": 2, "y": 2000}) is None
        assert validator(None, {"d": 29, "m": 2, "y": 2001}) is not None

    def test_composite_date_year_window(self) -> None:
        """Year bounds apply (age limits)."""
        validator = composite_date("d", "m", "y", min_year=1970, max_year=2005)
        assert validator(None, {"d": 1, "m": 1, "y": 1960}) == (
            "Year must be between 1970 and 2005"
        )

    def test_composite_date_rejects_bad_month(self) -> None:
        """Month 13 fails."""
        validator = composite_date("d", "m", "y")
        assert validator(None, {"d": 1, "m": 13, "y": 2000}) == "Enter a valid month"


# =============================================================================
# FieldValidator
# =============================================================================


class TestFieldValidator:
    """Tests for FieldValidator.validate()."""

    def _validator(self) -> FieldValidator:
        return FieldValidator(
            [
                FieldSpec("full_name", required=True, label="Full name"),
                FieldSpec("nickname"),
                FieldSpec(
                    "familySize",
                    required=True,
                    validator=numeric_range(1, 30),
                ),
                FieldSpec("boom", validator=lambda value, snapshot: 1 / 0),
            ]
        )

    def test_required_empty_field_reports_label(self) -> None:
        """Missing required values use the display label."""
        assert self._validator().validate("full_name", "", {}) == "Full name is required"

    def test_label_derived_from_name(self) -> None:
        """Without a label, the camelCase name is humanized."""
        assert self._validator().validate("familySize", None, {}) == (
            "Family size is required"
        )

    def test_optional_empty_field_passes(self) -> None:
        """Empty optional fields have no error."""
        assert self._validator().validate("nickname", None, {}) is None

    def test_format_validator_runs_when_filled(self) -> None:
        """Filled values go through the field's validator."""
        assert self._validator().validate("familySize", 0, {}) == "Must be at least 1"

    def test_zero_counts_as_filled(self) -> None:
        """0 is an answer, not a missing value."""
        validator = FieldValidator([FieldSpec("count", required=True)])
        assert validator.validate("count", 0, {}) is None

    def test_unknown_field_returns_none(self) -> None:
        """Fields outside the table never error."""
        assert self._validator().validate("nope", "x", {}) is None

    def test_raising_validator_reported_not_raised(self) -> None:
        """validate() never raises."""
        assert self._validator().validate("boom", "x", {}) == "Boom is invalid"

    def test_unchecked_consent_is_missing(self) -> None:
        """False does not satisfy a required checkbox."""
        validator = FieldValidator([FieldSpec("termsAccepted", required=True, label="Terms")])
        assert validator.validate("termsAccepted", False, {}) == "Terms is required"
        assert validator.validate("termsAccepted", True, {}) is None
