"""Wizard page controller.

Owns the ordered page list and the current page index. Forward movement
(next, jump_to past the current page) is gated on page validity; backward
movement never is. Every entry point that moves forward goes through the
same gate, so nav-chip clicks cannot skip an incomplete page.

A page is valid when collect_errors() reports nothing for its fields:
required fields filled, filled contact fields verified, and no format
errors on the page.
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from profile_engine.services.error_aggregation import collect_errors
from profile_engine.services.field_validation import FieldValidator
from profile_engine.services.form_types import FieldError, FieldSpec, PageSpec
from profile_engine.services.profile_errors import PageIndexError, PageInvalidError


class PageController:
    """Gated navigation over an ordered list of PageSpec.

    Args:
        pages: Ordered pages; the last one is the submit page.
        field_specs: FieldSpec table the pages refer to.
        snapshot: Callable returning the live snapshot (read-only use).
        validator: Shared FieldValidator for the table; built if None.
    """

    def __init__(
        self,
        pages: Sequence[PageSpec],
        field_specs: Sequence[FieldSpec],
        snapshot: Callable[[], Mapping[str, Any]],
        *,
        validator: FieldValidator | None = None,
    ) -> None:
        if not pages:
            raise ValueError("PageController requires at least one page")
        self._pages = tuple(pages)
        self._field_specs = tuple(field_specs)
        self._snapshot = snapshot
        self._validator = validator or FieldValidator(self._field_specs)
        self._index = 0
        self._completed: set[int] = set()

    @property
    def pages(self) -> tuple[PageSpec, ...]:
        """All pages in order."""
        return self._pages

    @property
    def current_index(self) -> int:
        """Index of the page being shown."""
        return self._index

    @property
    def current_page(self) -> PageSpec:
        """PageSpec being shown."""
        return self._pages[self._index]

    @property
    def last_index(self) -> int:
        """Index of the terminal (submit) page."""
        return len(self._pages) - 1

    @property
    def is_terminal(self) -> bool:
        """Whether the current page is the submit page."""
        return self._index == self.last_index

    @property
    def completed_pages(self) -> frozenset[int]:
        """Pages the user has moved past through the gate."""
        return frozenset(self._completed)

    def page_errors(self, index: int) -> list[FieldError]:
        """Ordered field errors for one page.

        Args:
            index: Page index.

        Returns:
            Errors for fields on that page, in FieldSpec order.

        Raises:
            PageIndexError: If index is outside the wizard.
        """
        page = self._page_at(index)
        return collect_errors(
            self._field_specs,
            self._snapshot(),
            field_names=page.field_names,
            validator=self._validator,
        )

    def is_page_valid(self, index: int) -> bool:
        """Whether a page passes the gate."""
        return not self.page_errors(index)

    def first_invalid_page(self, up_to: int | None = None) -> int | None:
        """Lowest invalid page index strictly below ``up_to`` (all pages if None)."""
        limit = len(self._pages) if up_to is None else up_to
        for index in range(limit):
            if not self.is_page_valid(index):
                return index
        return None

    def next(self) -> int:
        """Advance one page if the current page is valid.

        Returns:
            New current index (clamped to the last page).

        Raises:
            PageInvalidError: If the current page has errors. Index unchanged.
        """
        errors = self.page_errors(self._index)
        if errors:
            raise PageInvalidError(self._index, errors)
        self._completed.add(self._index)
        self._index = min(self._index + 1, self.last_index)
        return self._index

    def prev(self) -> int:
        """Go back one page. Always permitted; clamped to 0."""
        self._index = max(self._index - 1, 0)
        return self._index

    def jump_to(self, index: int) -> int:
        """Move directly to a page.

        Moving back (or staying) is always permitted. Moving forward requires
        every page strictly before the target to be valid.

        Args:
            index: Target page index.

        Returns:
            New current index.

        Raises:
            PageIndexError: If index is outside the wizard.
            PageInvalidError: If an earlier page is incomplete. The error
                names the first blocking page and carries its errors.
        """
        self._page_at(index)
        if index > self._index:
            blocking = self.first_invalid_page(up_to=index)
            if blocking is not None:
                raise PageInvalidError(blocking, self.page_errors(blocking))
            self._completed.update(range(index))
        self._index = index
        return self._index

    def _page_at(self, index: int) -> PageSpec:
        if not 0 <= index < len(self._pages):
            raise PageIndexError(
                f"Page {index} does not exist (wizard has {len(self._pages)} pages)."
            )
        return self._pages[index]
