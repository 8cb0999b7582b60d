"""Error aggregation for the "jump to error" affordance.

Collects every current field error in FieldSpec declaration order so the
next-error cursor is deterministic. The list is rebuilt from scratch on
each pass; nothing is carried over between passes.
"""

from collections.abc import Collection, Mapping, Sequence
from typing import Any

from profile_engine.services.field_validation import FieldValidator
from profile_engine.services.form_types import FieldError, FieldSpec, is_filled


def verification_message(spec: FieldSpec) -> str:
    """Message shown for a filled contact field that is not yet verified."""
    return f"{spec.display_name} must be verified"


def collect_errors(
    field_specs: Sequence[FieldSpec],
    snapshot: Mapping[str, Any],
    *,
    field_names: Collection[str] | None = None,
    validator: FieldValidator | None = None,
) -> list[FieldError]:
    """Collect current field errors in declaration order.

    For each field: the FieldValidator message if any, otherwise a
    "must be verified" message when the field is filled, verifiable, and
    its verified flag is not True.

    Args:
        field_specs: FieldSpec table (declaration order is output order).
        snapshot: Current form snapshot.
        field_names: Restrict to these fields (e.g., one page). None = all.
        validator: Reusable FieldValidator for the table; built if None.

    Returns:
        Ordered list of FieldError, at most one per field.
    """
    if validator is None:
        validator = FieldValidator(field_specs)

    errors: list[FieldError] = []
    for spec in field_specs:
        if field_names is not None and spec.name not in field_names:
            continue
        value = snapshot.get(spec.name)
        message = validator.validate(spec.name, value, snapshot)
        if message is None and is_filled(value) and not spec.is_verified(snapshot):
            message = verification_message(spec)
        if message is not None:
            errors.append(FieldError(field_name=spec.name, message=message))
    return errors


def first_error(errors: Sequence[FieldError]) -> FieldError | None:
    """The error the "jump to error" control should focus first."""
    return errors[0] if errors else None


def next_error_after(
    errors: Sequence[FieldError],
    field_name: str | None,
) -> FieldError | None:
    """Error following ``field_name`` in order, wrapping to the first.

    Args:
        errors: Ordered errors from collect_errors().
        field_name: Currently focused field, or None.

    Returns:
        Next FieldError, or None if there are no errors.
    """
    if not errors:
        return None
    names = [error.field_name for error in errors]
    if field_name not in names:
        return errors[0]
    return errors[(names.index(field_name) + 1) % len(errors)]
