"""Tests for gated wizard navigation.

Forward movement (next, forward jump_to) goes through the page gate;
backward movement never does.
"""

import pytest

from profile_engine.services.form_types import ContactChannel, FieldSpec, PageSpec
from profile_engine.services.page_controller import PageController
from profile_engine.services.profile_errors import PageIndexError, PageInvalidError

SPECS = (
    FieldSpec("name", required=True, label="Name"),
    FieldSpec("phone", required=True, verification=ContactChannel.PHONE),
    FieldSpec("notes"),
    FieldSpec("termsAccepted", required=True),
)

PAGES = (
    PageSpec("about", "About", {"name"}),
    PageSpec("extras", "Extras", {"notes"}),
    PageSpec("consents", "Consents", {"termsAccepted"}),
)


@pytest.fixture
def snapshot() -> dict:
    return {}


@pytest.fixture
def controller(snapshot: dict) -> PageController:
    return PageController(PAGES, SPECS, lambda: snapshot)


# =============================================================================
# Gate
# =============================================================================


class TestPageValidity:
    """Tests for page_errors() and is_page_valid()."""

    def test_page_with_missing_required_field_is_invalid(
        self, controller: PageController
    ) -> None:
        """Page 0 needs a name."""
        assert not controller.is_page_valid(0)
        assert [e.field_name for e in controller.page_errors(0)] == ["name"]

    def test_page_with_only_optional_fields_is_valid(
        self, controller: PageController
    ) -> None:
        """Page 1 has nothing required."""
        assert controller.is_page_valid(1)

    def test_unverified_contact_blocks_page(self) -> None:
        """A filled phone must also be verified."""
        snapshot = {"phone": "+15551234567"}
        controller = PageController(
            (PageSpec("contact", "Contact", {"phone"}),), SPECS, lambda: snapshot
        )
        assert not controller.is_page_valid(0)
        snapshot["phoneVerified"] = True
        assert controller.is_page_valid(0)

    def test_first_invalid_page(self, controller: PageController, snapshot: dict) -> None:
        """Lowest invalid index, optionally bounded."""
        assert controller.first_invalid_page() == 0
        snapshot["name"] = "X"
        assert controller.first_invalid_page() == 2
        assert controller.first_invalid_page(up_to=2) is None

    def test_out_of_range_page(self, controller: PageController) -> None:
        """Unknown page indexes raise PageIndexError."""
        with pytest.raises(PageIndexError):
            controller.page_errors(3)


# =============================================================================
# Navigation
# =============================================================================


class TestNext:
    """Tests for next()."""

    def test_blocked_when_current_page_invalid(self, controller: PageController) -> None:
        """Index stays put and the page's errors are reported."""
        with pytest.raises(PageInvalidError) as exc_info:
            controller.next()
        assert controller.current_index == 0
        assert exc_info.value.page_index == 0
        assert [e.field_name for e in exc_info.value.errors] == ["name"]

    def test_advances_when_valid(self, controller: PageController, snapshot: dict) -> None:
        """Valid page moves forward by one and is marked completed."""
        snapshot["name"] = "X"
        assert controller.next() == 1
        assert 0 in controller.completed_pages

    def test_clamped_at_last_page(self, controller: PageController, snapshot: dict) -> None:
        """next() on the terminal page stays on it."""
        snapshot.update(name="X", termsAccepted=True)
        controller.jump_to(2)
        assert controller.next() == 2
        assert controller.is_terminal


class TestPrev:
    """Tests for prev()."""

    def test_never_gated(self, controller: PageController, snapshot: dict) -> None:
        """Going back works even when the current page is invalid."""
        snapshot["name"] = "X"
        controller.jump_to(2)
        assert controller.prev() == 1
        assert controller.prev() == 0
        assert controller.prev() == 0


class TestJumpTo:
    """Tests for jump_to()."""

    def test_forward_jump_blocked_by_earlier_page(
        self, controller: PageController, snapshot: dict
    ) -> None:
        """jump_to(2) with name empty fails; after filling it succeeds."""
        with pytest.raises(PageInvalidError) as exc_info:
            controller.jump_to(2)
        assert exc_info.value.page_index == 0
        assert controller.current_index == 0

        snapshot["name"] = "X"
        assert controller.jump_to(2) == 2
        assert controller.completed_pages == frozenset({0, 1})

    def test_target_page_itself_not_gated(
        self, controller: PageController, snapshot: dict
    ) -> None:
        """Only pages before the target must be valid."""
        snapshot["name"] = "X"
        assert not controller.is_page_valid(2)
        assert controller.jump_to(2) == 2

    def test_backward_jump_never_gated(
        self, controller: PageController, snapshot: dict
    ) -> None:
        """Jumping back ignores validity."""
        snapshot["name"] = "X"
        controller.jump_to(2)
        snapshot["name"] = ""
        assert controller.jump_to(1) == 1
        assert controller.jump_to(0) == 0

    def test_jump_to_unknown_page(self, controller: PageController) -> None:
        """Negative and past-the-end indexes raise PageIndexError."""
        with pytest.raises(PageIndexError):
            controller.jump_to(-1)
        with pytest.raises(PageIndexError):
            controller.jump_to(3)

    def test_requires_pages(self) -> None:
        """A wizard needs at least one page."""
        with pytest.raises(ValueError):
            PageController((), SPECS, dict)
