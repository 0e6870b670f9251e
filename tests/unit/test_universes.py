"""Unit tests for the Universe Registry (via StoryLedger)."""

import dataclasses

import pytest

from src.registry.errors import InvalidInput, NotFound, NotRegistered
from src.registry.ledger import StoryLedger
from src.registry.logger import UNIVERSE_CREATED

from tests.testing_utils import ALICE, BOB, CAROL


class TestCreateUniverse:
    """Tests for create_universe."""

    def test_ids_are_sequential(self, ledger_with_authors: StoryLedger) -> None:
        first = ledger_with_authors.create_universe(ALICE, "One", "", False)
        second = ledger_with_authors.create_universe(CAROL, "Two", "", True)
        third = ledger_with_authors.create_universe(ALICE, "Three", "", True)
        assert (first, second, third) == (1, 2, 3)

    def test_record_fields(self, ledger_with_authors: StoryLedger) -> None:
        universe_id = ledger_with_authors.create_universe(ALICE, "Eldoria", "High fantasy", False)

        universe = ledger_with_authors.get_universe(universe_id)
        assert universe.id == universe_id
        assert universe.name == "Eldoria"
        assert universe.description == "High fantasy"
        assert universe.creator == ALICE
        assert universe.is_public is False
        assert universe.story_count == 0
        assert universe.created_at.startswith("2026-01-01T")

    def test_creator_is_authorized(self, ledger_with_authors: StoryLedger) -> None:
        universe_id = ledger_with_authors.create_universe(ALICE, "Eldoria", "", False)
        assert ledger_with_authors.is_authorized_for_universe(universe_id, ALICE)
        assert ledger_with_authors.get_authorized_authors(universe_id) == (ALICE,)

    def test_counters_updated(self, ledger_with_authors: StoryLedger) -> None:
        ledger_with_authors.create_universe(ALICE, "One", "", False)
        ledger_with_authors.create_universe(ALICE, "Two", "", True)

        assert ledger_with_authors.get_author_stats(ALICE).universe_count == 2
        assert ledger_with_authors.get_author_stats(CAROL).universe_count == 0
        assert ledger_with_authors.get_totals()["total_universes"] == 2

    def test_unregistered_caller_rejected(self, ledger_with_authors: StoryLedger) -> None:
        with pytest.raises(NotRegistered):
            ledger_with_authors.create_universe(BOB, "Nope", "", True)
        assert ledger_with_authors.get_totals()["total_universes"] == 0

    def test_empty_name_rejected(self, ledger_with_authors: StoryLedger) -> None:
        with pytest.raises(InvalidInput):
            ledger_with_authors.create_universe(ALICE, "", "desc", True)

    def test_not_registered_checked_before_name(self, ledger: StoryLedger) -> None:
        with pytest.raises(NotRegistered):
            ledger.create_universe(BOB, "", "", True)

    def test_empty_description_allowed(self, ledger_with_authors: StoryLedger) -> None:
        universe_id = ledger_with_authors.create_universe(ALICE, "Bare", "", True)
        assert ledger_with_authors.get_universe(universe_id).description == ""

    def test_non_bool_visibility_rejected(self, ledger_with_authors: StoryLedger) -> None:
        with pytest.raises(InvalidInput):
            ledger_with_authors.create_universe(ALICE, "Eldoria", "", "yes")  # type: ignore[arg-type]

    def test_failed_create_does_not_consume_id(self, ledger_with_authors: StoryLedger) -> None:
        with pytest.raises(InvalidInput):
            ledger_with_authors.create_universe(ALICE, "", "", True)
        assert ledger_with_authors.create_universe(ALICE, "Real", "", True) == 1

    def test_emits_event(self, ledger_with_authors: StoryLedger) -> None:
        universe_id = ledger_with_authors.create_universe(ALICE, "Eldoria", "", False)

        events = ledger_with_authors.events.events_of_type(UNIVERSE_CREATED)
        assert len(events) == 1
        assert events[0]["universe_id"] == universe_id
        assert events[0]["creator"] == ALICE
        assert events[0]["is_public"] is False


class TestGetUniverse:
    """Tests for get_universe."""

    def test_missing_universe_on_empty_registry(self, ledger: StoryLedger) -> None:
        with pytest.raises(NotFound) as exc_info:
            ledger.get_universe(999)
        assert exc_info.value.details == {"universe_id": 999}

    @pytest.mark.parametrize("universe_id", [0, -1, 2])
    def test_out_of_range(self, ledger_with_authors: StoryLedger, universe_id: int) -> None:
        ledger_with_authors.create_universe(ALICE, "Only", "", True)
        with pytest.raises(NotFound):
            ledger_with_authors.get_universe(universe_id)

    def test_snapshot_is_frozen(self, ledger_with_authors: StoryLedger) -> None:
        universe_id = ledger_with_authors.create_universe(ALICE, "Eldoria", "", True)
        universe = ledger_with_authors.get_universe(universe_id)
        with pytest.raises(dataclasses.FrozenInstanceError):
            universe.name = "Changed"  # type: ignore[misc]
