"""Entity profile descriptor.

An EntityProfile bundles the static tables one entity type's wizard runs
on: the FieldSpec table, the ordered PageSpec list, and the auto-save
window. The engine is generic; agency, maid, and sponsor differ only in
these tables.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from profile_engine.services.form_types import FieldSpec, PageSpec


@dataclass(frozen=True)
class EntityProfile:
    """Static wizard configuration for one entity type.

    Attributes:
        name: Entity type name, also the draft key prefix (e.g., "agency").
        fields: FieldSpec table in declaration (error) order.
        pages: Ordered pages; the last one is the submit page.
        long_form: Use the long-form auto-save window instead of the
            profile-edit window.

    Raises:
        ValueError: On construction, if there are no pages, page ids or
            field names repeat, or a page references an unknown field.
    """

    name: str
    fields: tuple[FieldSpec, ...]
    pages: tuple[PageSpec, ...]
    long_form: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("EntityProfile.name cannot be empty")
        if not self.pages:
            raise ValueError(f"Entity '{self.name}' must define at least one page")

        field_names = [spec.name for spec in self.fields]
        duplicates = sorted({n for n in field_names if field_names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Entity '{self.name}' repeats fields: {', '.join(duplicates)}")

        page_ids = [page.id for page in self.pages]
        if len(set(page_ids)) != len(page_ids):
            raise ValueError(f"Entity '{self.name}' repeats page ids")

        known = set(field_names)
        for page in self.pages:
            unknown = sorted(page.field_names - known)
            if unknown:
                raise ValueError(
                    f"Page '{page.id}' of entity '{self.name}' references "
                    f"unknown fields: {', '.join(unknown)}"
                )

    @property
    def contact_fields(self) -> tuple[FieldSpec, ...]:
        """Fields that require code verification."""
        return tuple(spec for spec in self.fields if spec.verification is not None)

    def field(self, name: str) -> FieldSpec | None:
        """FieldSpec by name, or None."""
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None


def build_profile(
    name: str,
    fields: Sequence[FieldSpec],
    pages: Sequence[PageSpec],
    *,
    long_form: bool = False,
) -> EntityProfile:
    """Build an EntityProfile from list literals."""
    return EntityProfile(
        name=name,
        fields=tuple(fields),
        pages=tuple(pages),
        long_form=long_form,
    )
