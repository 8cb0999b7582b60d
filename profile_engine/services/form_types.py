"""Shared types for the profile completion engine.

FieldSpec and PageSpec are static, immutable descriptors loaded once per
entity type and shared read-only across sessions. FormSnapshot is the
mutable field-name -> value mapping owned by exactly one engine instance.
DraftEnvelope and CompletionResult are derived values.
"""

import copy
import math
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

FormSnapshot = dict[str, Any]
"""Field name -> value (str, number, bool, list, or opaque blob reference)."""

Validator = Callable[[Any, Mapping[str, Any]], str | None]
"""(value, snapshot) -> error message or None. Must be side-effect free."""

VERIFIED_SUFFIX = "Verified"

_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


class ContactChannel(str, Enum):
    """Transport channel for a verifiable contact field."""

    PHONE = "phone"
    EMAIL = "email"


def verified_flag_name(field_name: str) -> str:
    """Return the snapshot key holding a contact field's verified flag.

    Example:
        >>> verified_flag_name("contactPhone")
        'contactPhoneVerified'
    """
    return f"{field_name}{VERIFIED_SUFFIX}"


def humanize_field_name(field_name: str) -> str:
    """Turn ``authorizedPersonEmail`` or ``full_name`` into a label."""
    words = _CAMEL_BOUNDARY_RE.sub(" ", field_name).replace("_", " ").split()
    if not words:
        return field_name
    return " ".join([words[0].capitalize(), *(w.lower() for w in words[1:])])


def is_filled(value: Any) -> bool:
    """Whether a snapshot value counts as "non-empty".

    - None is empty
    - Booleans count only when explicitly True (consent checkboxes)
    - Strings count when non-blank
    - Lists, tuples, sets, and dicts count when non-empty
    - Numbers count when present (0 is a valid answer), NaN does not
    - Anything else (opaque blob references) counts when present

    Args:
        value: Raw snapshot value.

    Returns:
        True if the value should be treated as answered.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) > 0
    if isinstance(value, float):
        return not math.isnan(value)
    return True


def has_meaningful_content(snapshot: Mapping[str, Any]) -> bool:
    """Whether any value in the snapshot is filled."""
    return any(is_filled(value) for value in snapshot.values())


# =============================================================================
# Static descriptors
# =============================================================================


@dataclass(frozen=True)
class FieldSpec:
    """Static descriptor for one form field.

    Attributes:
        name: Snapshot key.
        required: Whether the field must be filled to pass its page.
        validator: Optional format validator, run only when the value is filled.
        group: Completion group the field belongs to (e.g., "personal").
        weight: Contribution to the completion percentage. Zero is allowed.
        label: Display label used in error messages. Derived from name if None.
        verification: Contact channel if the value must be verified by code.
    """

    name: str
    required: bool = False
    validator: Validator | None = None
    group: str = "general"
    weight: float = 1.0
    label: str | None = None
    verification: ContactChannel | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("FieldSpec.name cannot be empty")
        if self.weight < 0 or math.isnan(self.weight):
            raise ValueError(f"FieldSpec '{self.name}' weight must be >= 0, got {self.weight}")

    @property
    def display_name(self) -> str:
        """Label shown to the user."""
        return self.label or humanize_field_name(self.name)

    @property
    def verified_flag(self) -> str | None:
        """Snapshot key of the verified flag, or None if not verifiable."""
        if self.verification is None:
            return None
        return verified_flag_name(self.name)

    def is_verified(self, snapshot: Mapping[str, Any]) -> bool:
        """Whether verification is satisfied (always True if not verifiable)."""
        flag = self.verified_flag
        return flag is None or snapshot.get(flag) is True

    def is_complete(self, snapshot: Mapping[str, Any]) -> bool:
        """Filled and, where applicable, verified."""
        return is_filled(snapshot.get(self.name)) and self.is_verified(snapshot)


@dataclass(frozen=True)
class PageSpec:
    """One wizard page.

    Attributes:
        id: Stable page identifier (e.g., "contact").
        title: Page heading.
        field_names: Fields shown on the page.
    """

    id: str
    title: str
    field_names: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        # Accept any iterable of names from table definitions
        if not isinstance(self.field_names, frozenset):
            object.__setattr__(self, "field_names", frozenset(self.field_names))


# =============================================================================
# Derived values
# =============================================================================


@dataclass(frozen=True)
class FieldError:
    """One current validation error.

    Attributes:
        field_name: Snapshot key of the offending field.
        message: User-facing message.
    """

    field_name: str
    message: str


@dataclass(frozen=True)
class GroupCompletion:
    """Completion of one field group."""

    completed_weight: float
    total_weight: float
    percentage: int


@dataclass(frozen=True)
class CompletionResult:
    """Weighted completion of a snapshot.

    Attributes:
        percentage: 0..100, rounded half up; never 100 unless every weighted
            field is complete.
        completed_weight: Sum of weights of complete fields.
        total_weight: Sum of all weights.
        groups: Per-group breakdown keyed by FieldSpec.group.
    """

    percentage: int
    completed_weight: float
    total_weight: float
    groups: dict[str, GroupCompletion] = field(default_factory=dict)


@dataclass(frozen=True)
class DraftEnvelope:
    """A persisted draft. Replaced wholesale on every save.

    Attributes:
        snapshot: Deep copy of the form snapshot at save time.
        saved_at: When the save was issued (UTC).
        version: Monotonic save counter for the draft key.
        page_index: Wizard page the user was on.
    """

    snapshot: FormSnapshot
    saved_at: datetime
    version: int
    page_index: int = 0

    @classmethod
    def capture(
        cls,
        snapshot: Mapping[str, Any],
        *,
        saved_at: datetime,
        version: int,
        page_index: int = 0,
    ) -> "DraftEnvelope":
        """Build an envelope from a deep copy of the live snapshot."""
        return cls(
            snapshot=copy.deepcopy(dict(snapshot)),
            saved_at=saved_at,
            version=version,
            page_index=page_index,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON storage."""
        return {
            "snapshot": copy.deepcopy(self.snapshot),
            "saved_at": self.saved_at.isoformat(),
            "version": self.version,
            "page_index": self.page_index,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DraftEnvelope":
        """Inverse of to_dict()."""
        saved_at = data["saved_at"]
        if isinstance(saved_at, str):
            saved_at = datetime.fromisoformat(saved_at)
        return cls(
            snapshot=dict(data.get("snapshot") or {}),
            saved_at=saved_at,
            version=int(data.get("version", 0)),
            page_index=int(data.get("page_index", 0)),
        )
