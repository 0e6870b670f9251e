"""Sequential ID allocation - one dense counter per entity kind

Universes and stories each get integer ids starting at 1. Ids are handed
out in strictly increasing order and never reused. The counters are plain
state owned by the registry store; they only move inside the commit of a
create operation.

Usage:
    ids = IDRegistry()

    ids.peek("universe")        # 1
    ids.allocate("universe")    # 1
    ids.allocate("universe")    # 2
    ids.exists("universe", 2)   # True
    ids.exists("universe", 3)   # False
"""

from __future__ import annotations

from typing import Literal


EntityKind = Literal["universe", "story"]

ENTITY_KINDS: tuple[EntityKind, ...] = ("universe", "story")


class IDRegistry:
    """Dense per-kind id counters.

    ``next_id`` for a kind is the id the next create will receive, so the
    allocated range is always ``[1, next_id)``.

    Thread-safety: This class is NOT thread-safe. Callers hold the ledger
    lock around ``allocate``.
    """

    _next: dict[EntityKind, int]

    def __init__(self, next_ids: dict[EntityKind, int] | None = None) -> None:
        """Initialize counters.

        Args:
            next_ids: Optional starting values (used when restoring a
                checkpoint). Missing kinds start at 1.
        """
        self._next = {kind: 1 for kind in ENTITY_KINDS}
        if next_ids:
            for kind, value in next_ids.items():
                if kind not in self._next:
                    raise ValueError(f"Unknown entity kind: {kind!r}")
                if value < 1:
                    raise ValueError(f"next id for {kind} must be >= 1, got {value}")
                self._next[kind] = value

    def allocate(self, kind: EntityKind) -> int:
        """Hand out the next id for ``kind`` and advance the counter.

        Args:
            kind: "universe" or "story"

        Returns:
            The newly allocated id
        """
        new_id = self._next[kind]
        self._next[kind] = new_id + 1
        return new_id

    def peek(self, kind: EntityKind) -> int:
        """Return the id the next ``allocate`` call would produce."""
        return self._next[kind]

    def exists(self, kind: EntityKind, entity_id: int) -> bool:
        """Check whether ``entity_id`` falls in the allocated range.

        Args:
            kind: Entity kind to check against
            entity_id: Id to check

        Returns:
            True if 1 <= entity_id < next id for the kind
        """
        return 1 <= entity_id < self._next[kind]

    def count(self, kind: EntityKind) -> int:
        """Number of ids allocated for ``kind``."""
        return self._next[kind] - 1

    def to_dict(self) -> dict[str, int]:
        return dict(self._next)
