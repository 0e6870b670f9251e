"""StoryLedger - the atomic facade over all registry components

Every public operation runs under one exclusive lock:
1. validate identity, input and authorization (may raise, nothing written yet)
2. mutate the primary record and its dependent counters
3. emit exactly one event

Because step 1 completes before step 2 starts, a failed call leaves the
store exactly as it was. Queries take the same lock and return frozen
snapshots, so no reader sees a half-applied commit. Id allocation happens
in step 2, inside the lock.

Step 3 happens after the commit and is not undone: if writing the event
line fails (an OSError from the JSONL file), the mutation stands, no event
is recorded, and the OSError propagates to the caller. Only registry rule
violations are guaranteed to leave the store untouched.
"""

# All record and counter mutations go through here.
# Never emit an event for a call that raised.
from __future__ import annotations

import inspect
import logging
import threading
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from typing import Any, Callable, TypedDict

from ..config_schema import AppConfig, RegistryConfig, validate_config_dict
from .access import AccessControl
from .errors import RegistryError, validation_error
from .identity import IdentityRegistry
from .logger import (
    AUTHOR_AUTHORIZED,
    AUTHOR_REGISTERED,
    STORY_ADDED,
    STORY_LIKED,
    STORY_MARKED_CANONICAL,
    UNIVERSE_CREATED,
    EventLogger,
)
from .models import AuthorStats, RegistryState, StorySnapshot, UniverseSnapshot
from .stories import StoryRegistry
from .universes import UniverseRegistry

logger = logging.getLogger(__name__)


def utc_now() -> str:
    """Default clock: ISO-8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()


class RegistryTotals(TypedDict):
    """Global counters."""

    total_authors: int
    total_universes: int
    total_stories: int


class StoryLedger:
    """Authors, universes and stories behind one lock.

    Components (identity, universes, access, stories) hold no locks and emit
    no events; this class wraps each of their mutations in a critical
    section and logs the matching event on success.
    """

    state: RegistryState
    config: RegistryConfig
    events: EventLogger
    identity: IdentityRegistry
    universes: UniverseRegistry
    access: AccessControl
    stories: StoryRegistry
    _lock: threading.RLock

    def __init__(
        self,
        config: RegistryConfig | None = None,
        event_logger: EventLogger | None = None,
        clock: Callable[[], str] | None = None,
        state: RegistryState | None = None,
    ) -> None:
        """
        Args:
            config: Registry policy (defaults if not provided)
            event_logger: Where events go (in-memory logger if not provided)
            clock: Callable returning the created_at timestamp string
            state: Existing store, e.g. restored from a checkpoint
        """
        self.config = config or RegistryConfig()
        self.events = event_logger or EventLogger(in_memory=True)
        self.state = state or RegistryState()
        self._lock = threading.RLock()

        now = clock or utc_now
        self.identity = IdentityRegistry(self.state, self.config)
        self.universes = UniverseRegistry(self.state, self.identity, self.config, now)
        self.access = AccessControl(self.universes, self.identity)
        self.stories = StoryRegistry(
            self.state, self.identity, self.universes, self.config, now
        )

    @classmethod
    def from_config(
        cls,
        config: dict[str, Any] | AppConfig,
        clock: Callable[[], str] | None = None,
    ) -> "StoryLedger":
        """Create a ledger from a config dict (or validated AppConfig).

        Reads the passed config only, never the global one, so tests stay
        isolated.

        Args:
            config: Raw config dict; may contain 'registry' and 'logging' sections
            clock: Optional timestamp source

        Returns:
            Configured StoryLedger instance
        """
        app_config = config if isinstance(config, AppConfig) else validate_config_dict(config)
        output_file = app_config.logging.output_file
        if output_file:
            event_logger = EventLogger(output_file=output_file)
        else:
            event_logger = EventLogger(in_memory=True)
        return cls(config=app_config.registry, event_logger=event_logger, clock=clock)

    # ========== Identity ==========

    def register_author(self, identity: str, pseudonym: str) -> None:
        """Register ``identity`` under ``pseudonym``.

        Raises:
            AlreadyRegistered, InvalidInput
        """
        with self._lock:
            author = self.identity.register_author(identity, pseudonym)
            self.events.log(AUTHOR_REGISTERED, {
                "author": author.address,
                "pseudonym": author.pseudonym,
            })

    def get_author_stats(self, identity: str) -> AuthorStats:
        """Author record snapshot; zeroed for unknown identities by default."""
        with self._lock:
            return self.identity.get_author_stats(identity)

    def is_registered(self, identity: str) -> bool:
        with self._lock:
            return self.identity.is_registered(identity)

    # ========== Universes ==========

    def create_universe(
        self,
        identity: str,
        name: str,
        description: str,
        is_public: bool,
    ) -> int:
        """Create a universe and return its id.

        Raises:
            NotRegistered, InvalidInput
        """
        with self._lock:
            universe = self.universes.create_universe(identity, name, description, is_public)
            self.events.log(UNIVERSE_CREATED, {
                "universe_id": universe.id,
                "creator": universe.creator,
                "name": universe.name,
                "is_public": universe.is_public,
            })
            return universe.id

    def get_universe(self, universe_id: int) -> UniverseSnapshot:
        """Raises NotFound for ids outside the allocated range."""
        with self._lock:
            return self.universes.require_universe(universe_id).snapshot()

    # ========== Access control ==========

    def authorize_author(self, identity: str, universe_id: int, target: str) -> None:
        """Let ``target`` contribute to a universe created by ``identity``.

        Raises:
            NotFound, Forbidden, NotRegistered
        """
        with self._lock:
            added = self.access.authorize_author(identity, universe_id, target)
            self.events.log(AUTHOR_AUTHORIZED, {
                "universe_id": universe_id,
                "author": target,
                "authorized_by": identity,
                "newly_added": added,
            })

    def is_authorized_for_universe(self, universe_id: int, identity: str) -> bool:
        with self._lock:
            return self.access.is_authorized_for_universe(universe_id, identity)

    def get_authorized_authors(self, universe_id: int) -> tuple[str, ...]:
        with self._lock:
            return self.access.get_authorized_authors(universe_id)

    # ========== Stories ==========

    def add_story(self, identity: str, universe_id: int, title: str, content: str) -> int:
        """Add a story and return its id.

        Raises:
            NotRegistered, NotFound, InvalidInput, Forbidden
        """
        with self._lock:
            story = self.stories.add_story(identity, universe_id, title, content)
            self.events.log(STORY_ADDED, {
                "story_id": story.id,
                "universe_id": story.universe_id,
                "author": story.author,
                "title": story.title,
            })
            return story.id

    def like_story(self, identity: str, story_id: int) -> None:
        """Like a story once.

        Raises:
            NotFound, AlreadyLiked (NotRegistered if registration is required)
        """
        with self._lock:
            story = self.stories.like_story(identity, story_id)
            self.events.log(STORY_LIKED, {
                "story_id": story.id,
                "liker": identity,
                "author": story.author,
                "likes": story.likes,
            })

    def mark_story_canonical(self, identity: str, story_id: int) -> None:
        """Flag a story canonical; repeat calls succeed.

        Raises:
            NotFound, Forbidden
        """
        with self._lock:
            story, changed = self.stories.mark_story_canonical(identity, story_id)
            self.events.log(STORY_MARKED_CANONICAL, {
                "story_id": story.id,
                "universe_id": story.universe_id,
                "marked_by": identity,
                "changed": changed,
            })

    def get_story(self, story_id: int) -> StorySnapshot:
        """Raises NotFound for ids outside the allocated range."""
        with self._lock:
            return self.stories.require_story(story_id).snapshot()

    def get_universe_stories(self, universe_id: int) -> tuple[int, ...]:
        with self._lock:
            return self.stories.get_universe_stories(universe_id)

    def has_liked(self, story_id: int, identity: str) -> bool:
        with self._lock:
            return self.stories.has_liked(story_id, identity)

    # ========== Aggregates ==========

    def get_totals(self) -> RegistryTotals:
        with self._lock:
            return {
                "total_authors": self.state.total_authors,
                "total_universes": self.state.total_universes,
                "total_stories": self.state.total_stories,
            }

    def verify_invariants(self) -> list[str]:
        """Check every cross-record invariant.

        Returns:
            Human-readable violations; empty when the store is consistent
        """
        with self._lock:
            return _find_violations(self.state)

    def export_state(self) -> dict[str, Any]:
        """Serializable copy of every record and counter, taken under the lock."""
        with self._lock:
            return {
                "event_sequence": self.events.sequence,
                "state": self.state.to_dict(),
            }

    # ========== Dict interface ==========

    def invoke(self, method: str, args: list[Any], caller: str | None = None) -> dict[str, Any]:
        """Run an operation by name and return a response dict.

        Mutating operations take ``caller`` as their identity; queries ignore
        it. Registry errors come back as the standard error dict instead of
        being raised.

        Returns:
            {"success": True, "result": ...} or an error response dict
        """
        handler = self._dispatch().get(method)
        if handler is None:
            return validation_error(
                f"Unknown method '{method}'", method=method, available=sorted(self._dispatch())
            )
        mutating = method in _MUTATING
        if mutating and caller is None:
            return validation_error(f"{method} requires a caller", method=method)
        call_args = [caller, *args] if mutating else list(args)
        try:
            inspect.signature(handler).bind(*call_args)
        except TypeError as e:
            return validation_error(f"Bad arguments for {method}: {e}", method=method)
        try:
            result = handler(*call_args)
        except RegistryError as e:
            return e.to_dict()
        return {"success": True, "result": _to_plain(result)}

    def _dispatch(self) -> dict[str, Callable[..., Any]]:
        return {
            "register_author": self.register_author,
            "create_universe": self.create_universe,
            "authorize_author": self.authorize_author,
            "add_story": self.add_story,
            "like_story": self.like_story,
            "mark_story_canonical": self.mark_story_canonical,
            "get_author_stats": self.get_author_stats,
            "get_universe": self.get_universe,
            "get_story": self.get_story,
            "get_universe_stories": self.get_universe_stories,
            "is_authorized_for_universe": self.is_authorized_for_universe,
            "get_authorized_authors": self.get_authorized_authors,
            "has_liked": self.has_liked,
            "get_totals": self.get_totals,
        }


_MUTATING: frozenset[str] = frozenset({
    "register_author",
    "create_universe",
    "authorize_author",
    "add_story",
    "like_story",
    "mark_story_canonical",
})


def _to_plain(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return _to_plain(asdict(value))
    if isinstance(value, dict):
        return {k: _to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    return value


def _find_violations(state: RegistryState) -> list[str]:
    violations: list[str] = []

    if state.ids.count("universe") != state.total_universes:
        violations.append(
            f"{state.ids.count('universe')} universe ids allocated but "
            f"{state.total_universes} universes stored"
        )
    if state.ids.count("story") != state.total_stories:
        violations.append(
            f"{state.ids.count('story')} story ids allocated but "
            f"{state.total_stories} stories stored"
        )
    for kind, records in (("universe", state.universes), ("story", state.stories)):
        expected = set(range(1, state.ids.peek(kind)))
        if set(records) != expected:
            missing = sorted(expected - set(records))
            extra = sorted(set(records) - expected)
            violations.append(f"{kind} ids not dense: missing {missing}, unexpected {extra}")
        for key, record in records.items():
            if record.id != key:
                violations.append(f"{kind} stored under {key} has id {record.id}")

    for universe in state.universes.values():
        if universe.creator not in state.authors:
            violations.append(
                f"creator {universe.creator} of universe {universe.id} is not registered"
            )
        for member in universe.authorized_authors - set(state.authors):
            violations.append(
                f"authorized author {member} of universe {universe.id} is not registered"
            )
    for story in state.stories.values():
        if story.author not in state.authors:
            violations.append(f"author {story.author} of story {story.id} is not registered")

    per_universe: dict[int, list[int]] = {u: [] for u in state.universes}
    stories_by_author: dict[str, int] = {}
    likes_by_author: dict[str, int] = {}
    for story in state.stories.values():
        if story.universe_id not in state.universes:
            violations.append(f"story {story.id} references missing universe {story.universe_id}")
        else:
            per_universe[story.universe_id].append(story.id)
        if story.likes != len(story.liked_by):
            violations.append(
                f"story {story.id} has likes={story.likes} but {len(story.liked_by)} likers"
            )
        stories_by_author[story.author] = stories_by_author.get(story.author, 0) + 1
        likes_by_author[story.author] = likes_by_author.get(story.author, 0) + story.likes

    universes_by_creator: dict[str, int] = {}
    for universe in state.universes.values():
        if universe.creator not in universe.authorized_authors:
            violations.append(f"creator of universe {universe.id} is not authorized")
        if universe.story_count != len(universe.story_ids):
            violations.append(
                f"universe {universe.id} story_count={universe.story_count} "
                f"but index has {len(universe.story_ids)}"
            )
        if sorted(per_universe[universe.id]) != universe.story_ids:
            violations.append(f"universe {universe.id} story index is out of sync")
        universes_by_creator[universe.creator] = universes_by_creator.get(universe.creator, 0) + 1

    for address, author in state.authors.items():
        if author.universe_count != universes_by_creator.get(address, 0):
            violations.append(f"author {address} universe_count is {author.universe_count}")
        if author.story_count != stories_by_author.get(address, 0):
            violations.append(f"author {address} story_count is {author.story_count}")
        if author.total_likes_received != likes_by_author.get(address, 0):
            violations.append(
                f"author {address} total_likes_received is {author.total_likes_received}"
            )

    return violations
