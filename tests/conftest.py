"""Pytest fixtures for story registry tests.

Common fixtures for building ledgers with registered authors and universes.
"""

from __future__ import annotations

from typing import Callable, Iterator

import pytest

from src.config import load_config_dict, reset_config
from src.config_schema import RegistryConfig
from src.registry.ledger import StoryLedger
from src.registry.logger import EventLogger

from tests.testing_utils import ALICE, CAROL, DAVE, FixedClock


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "feature(name): mark test as belonging to a feature. "
        "Usage: @pytest.mark.feature('likes')"
    )


@pytest.fixture(autouse=True)
def default_config() -> Iterator[None]:
    """Install an all-defaults global config (no event file) for each test."""
    load_config_dict({})
    yield
    reset_config()


@pytest.fixture
def fixed_clock() -> Callable[[], str]:
    """Clock returning increasing, predictable timestamps."""
    return FixedClock()


@pytest.fixture
def ledger(fixed_clock: Callable[[], str]) -> StoryLedger:
    """Create a fresh in-memory ledger for each test."""
    return StoryLedger(event_logger=EventLogger(in_memory=True), clock=fixed_clock)


@pytest.fixture
def make_ledger(fixed_clock: Callable[[], str]) -> Callable[..., StoryLedger]:
    """Factory for ledgers with non-default registry policy."""

    def _make(**registry_options: object) -> StoryLedger:
        return StoryLedger(
            config=RegistryConfig(**registry_options),
            event_logger=EventLogger(in_memory=True),
            clock=fixed_clock,
        )

    return _make


@pytest.fixture
def ledger_with_authors(ledger: StoryLedger) -> StoryLedger:
    """Ledger with Alice, Carol and Dave registered. Bob stays unregistered."""
    ledger.register_author(ALICE, "Alice")
    ledger.register_author(CAROL, "Carol")
    ledger.register_author(DAVE, "Dave")
    return ledger


@pytest.fixture
def private_universe(ledger_with_authors: StoryLedger) -> int:
    """A private universe created by Alice."""
    return ledger_with_authors.create_universe(ALICE, "Eldoria", "High fantasy", False)


@pytest.fixture
def public_universe(ledger_with_authors: StoryLedger) -> int:
    """A public universe created by Alice."""
    return ledger_with_authors.create_universe(ALICE, "Commons", "Open world", True)
