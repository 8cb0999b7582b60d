"""Field validation for profile forms.

Validators are pure (value, snapshot) -> message-or-None callables. Three
kinds are primitive:

1. numeric_range: number parsing plus optional bounds
2. pattern: regular expression full match
3. length_between: character count (strings) or item count (lists)

Everything else composes from these. Cross-field validators (sibling
minimums, day/month/year dates) read sibling values from the snapshot
argument, never from closures over live form state, so a validation pass
is repeatable and testable in isolation.
"""

import calendar
import logging
import re
from collections.abc import Mapping, Sequence
from decimal import Decimal, InvalidOperation
from typing import Any

from profile_engine.services.form_types import FieldSpec, Validator, is_filled

logger = logging.getLogger(__name__)

_EMAIL_RE = r"[^@\s]+@[^@\s]+\.[^@\s]+"
_E164_RE = r"\+[1-9]\d{6,14}"
_TIME_OF_DAY_RE = r"([01]\d|2[0-3]):[0-5]\d"
_ISO_DATE_RE = r"\d{4}-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])"
_URL_RE = r"https?://[^\s/$.?#][^\s]*"


def _to_number(value: Any) -> Decimal | None:
    """Parse ints, floats, and numeric strings ("1,200" allowed)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            return None
        return number if number.is_finite() else None
    if isinstance(value, str):
        try:
            number = Decimal(value.strip().replace(",", ""))
        except InvalidOperation:
            return None
        return number if number.is_finite() else None
    return None


def _format_bound(bound: float | int | Decimal) -> str:
    number = Decimal(str(bound))
    return str(int(number)) if number == number.to_integral_value() else str(number)


# =============================================================================
# Primitive validator kinds
# =============================================================================


def numeric_range(
    minimum: float | int | None = None,
    maximum: float | int | None = None,
    *,
    integer: bool = False,
    message: str | None = None,
) -> Validator:
    """Build a validator that parses a number and checks bounds.

    Args:
        minimum: Inclusive lower bound, or None.
        maximum: Inclusive upper bound, or None.
        integer: Reject fractional values.
        message: Override for every failure message.

    Returns:
        Validator returning an error message or None.
    """

    def _validate(value: Any, _snapshot: Mapping[str, Any]) -> str | None:
        number = _to_number(value)
        if number is None:
            return message or "Must be a number"
        if integer and number != number.to_integral_value():
            return message or "Must be a whole number"
        if minimum is not None and number < Decimal(str(minimum)):
            return message or f"Must be at least {_format_bound(minimum)}"
        if maximum is not None and number > Decimal(str(maximum)):
            return message or f"Must be at most {_format_bound(maximum)}"
        return None

    return _validate


def pattern(regex: str, *, message: str) -> Validator:
    """Build a validator requiring the stripped string to fully match regex.

    Args:
        regex: Regular expression (compiled once).
        message: Error message on mismatch.

    Returns:
        Validator returning an error message or None.
    """
    compiled = re.compile(regex)

    def _validate(value: Any, _snapshot: Mapping[str, Any]) -> str | None:
        if not isinstance(value, str) or compiled.fullmatch(value.strip()) is None:
            return message
        return None

    return _validate


def length_between(
    min_length: int | None = None,
    max_length: int | None = None,
    *,
    message: str | None = None,
    unit: str | None = None,
) -> Validator:
    """Build a validator on string length or collection size.

    Strings are measured after stripping whitespace. Lists, tuples, and
    sets are measured by item count.

    Args:
        min_length: Inclusive minimum, or None.
        max_length: Inclusive maximum, or None.
        message: Override for every failure message.
        unit: Word used in default messages ("characters" or "items").

    Returns:
        Validator returning an error message or None.
    """

    def _validate(value: Any, _snapshot: Mapping[str, Any]) -> str | None:
        if isinstance(value, str):
            size = len(value.strip())
            noun = unit or "characters"
        elif isinstance(value, (list, tuple, set, frozenset)):
            size = len(value)
            noun = unit or "items"
        else:
            return message or "Invalid value"
        if min_length is not None and size < min_length:
            return message or f"Must be at least {min_length} {noun} (currently {size})"
        if max_length is not None and size > max_length:
            return message or f"Must be at most {max_length} {noun} (currently {size})"
        return None

    return _validate


# =============================================================================
# Composed validators
# =============================================================================


def all_of(*validators: Validator) -> Validator:
    """Run validators in order and return the first error."""

    def _validate(value: Any, snapshot: Mapping[str, Any]) -> str | None:
        for validator in validators:
            error = validator(value, snapshot)
            if error is not None:
                return error
        return None

    return _validate


def email_address(message: str = "Enter a valid email address") -> Validator:
    """Email address shape check."""
    return pattern(_EMAIL_RE, message=message)


def e164_phone(
    message: str = "Use international format, e.g. +12025551234",
) -> Validator:
    """E.164 phone number (leading +, 7 to 15 digits)."""
    return pattern(_E164_RE, message=message)


def time_of_day(message: str = "Use 24-hour HH:MM format") -> Validator:
    """HH:MM, 00:00 to 23:59."""
    return pattern(_TIME_OF_DAY_RE, message=message)


def web_url(message: str = "Enter a valid http(s) URL") -> Validator:
    """http:// or https:// URL."""
    return pattern(_URL_RE, message=message)


def min_items(count: int, *, message: str | None = None) -> Validator:
    """At least ``count`` entries in a list field."""
    return length_between(min_length=count, message=message, unit="items")


def at_least_field(other_field: str, *, message: str | None = None) -> Validator:
    """Number that must be >= a sibling number (e.g., budget max >= min).

    The bound is read from the snapshot at validation time. When the
    sibling is empty or not a number, only the number check applies.
    """

    def _validate(value: Any, snapshot: Mapping[str, Any]) -> str | None:
        bound = _to_number(snapshot.get(other_field))
        return numeric_range(minimum=bound, message=message)(value, snapshot)

    return _validate


def iso_date(
    *,
    min_year: int = 1900,
    max_year: int = 2100,
    message: str = "Use YYYY-MM-DD format",
) -> Validator:
    """YYYY-MM-DD string naming a real calendar day."""
    shape = pattern(_ISO_DATE_RE, message=message)
    year_check = numeric_range(
        min_year,
        max_year,
        message=f"Year must be between {min_year} and {max_year}",
    )

    def _validate(value: Any, snapshot: Mapping[str, Any]) -> str | None:
        error = shape(value, snapshot)
        if error is not None:
            return error
        year, month, day = (int(part) for part in value.strip().split("-"))
        error = year_check(year, snapshot)
        if error is not None:
            return error
        last_day = calendar.monthrange(year, month)[1]
        return numeric_range(1, last_day, message="Enter a real calendar date")(day, snapshot)

    return _validate


def composite_date(
    day_field: str,
    month_field: str,
    year_field: str,
    *,
    min_year: int = 1900,
    max_year: int = 2100,
) -> Validator:
    """Validate a date assembled from day/month/year sibling fields.

    Attach to any of the three fields; all three are read from the
    snapshot. Returns None until all three parts are filled (the
    required check reports the missing part).

    Args:
        day_field: Snapshot key of the day part.
        month_field: Snapshot key of the month part.
        year_field: Snapshot key of the year part.
        min_year: Earliest allowed year.
        max_year: Latest allowed year.

    Returns:
        Validator returning an error message or None.
    """
    year_check = numeric_range(
        min_year,
        max_year,
        integer=True,
        message=f"Year must be between {min_year} and {max_year}",
    )
    month_check = numeric_range(1, 12, integer=True, message="Enter a valid month")

    def _validate(_value: Any, snapshot: Mapping[str, Any]) -> str | None:
        day = snapshot.get(day_field)
        month = snapshot.get(month_field)
        year = snapshot.get(year_field)
        if not (is_filled(day) and is_filled(month) and is_filled(year)):
            return None
        error = year_check(year, snapshot) or month_check(month, snapshot)
        if error is not None:
            return error
        last_day = calendar.monthrange(int(_to_number(year)), int(_to_number(month)))[1]  # type: ignore[arg-type]
        return numeric_range(
            1,
            last_day,
            integer=True,
            message="Enter a valid day for the selected month",
        )(day, snapshot)

    return _validate


# =============================================================================
# FieldValidator
# =============================================================================


class FieldValidator:
    """Validates snapshot values against a FieldSpec table.

    validate() never raises: unknown field names return None, and a
    validator that raises is logged and reported as an invalid value.
    """

    def __init__(self, field_specs: Sequence[FieldSpec]) -> None:
        """Initialize the validator.

        Args:
            field_specs: FieldSpec table for one entity type.
        """
        self._specs = {spec.name: spec for spec in field_specs}

    def spec_for(self, field_name: str) -> FieldSpec | None:
        """Look up a field's spec."""
        return self._specs.get(field_name)

    def validate(
        self,
        field_name: str,
        value: Any,
        snapshot: Mapping[str, Any],
    ) -> str | None:
        """Return the current error message for a field, or None.

        Args:
            field_name: Snapshot key.
            value: Value to check (normally snapshot[field_name]).
            snapshot: Full snapshot, for cross-field validators.

        Returns:
            Error message, or None if the value is acceptable.
        """
        spec = self._specs.get(field_name)
        if spec is None:
            return None
        if not is_filled(value):
            return f"{spec.display_name} is required" if spec.required else None
        if spec.validator is None:
            return None
        try:
            return spec.validator(value, snapshot)
        except Exception:  # noqa: BLE001
            logger.exception("Validator for field %s raised", field_name)
            return f"{spec.display_name} is invalid"
