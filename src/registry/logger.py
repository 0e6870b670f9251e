"""JSONL event logger - the audit log and subscription feed for commits"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from ..config import get

logger = logging.getLogger(__name__)


# Event types, one per mutating operation
AUTHOR_REGISTERED = "AuthorRegistered"
UNIVERSE_CREATED = "UniverseCreated"
AUTHOR_AUTHORIZED = "AuthorAuthorized"
STORY_ADDED = "StoryAdded"
STORY_LIKED = "StoryLiked"
STORY_MARKED_CANONICAL = "StoryMarkedCanonical"

EVENT_TYPES: tuple[str, ...] = (
    AUTHOR_REGISTERED,
    UNIVERSE_CREATED,
    AUTHOR_AUTHORIZED,
    STORY_ADDED,
    STORY_LIKED,
    STORY_MARKED_CANONICAL,
)

EventListener = Callable[[dict[str, Any]], None]


class EventLogger:
    """Append-only event log.

    Supports two modes:
    1. File mode (output_file set): one JSON object per line. The file is
       cleared on init for a new run, or kept and appended to when resuming.
       Reads go to the file, so nothing accumulates in process.
    2. Memory mode (output_file None and logging.output_file empty): events
       kept only in process, useful for tests and embedding

    Every event carries a monotonic ``sequence`` so consumers can order and
    de-duplicate. Listeners registered with ``subscribe`` are called after the
    event is recorded; a failing listener is logged and skipped.
    """

    output_path: Path | None
    _sequence: int
    _events: list[dict[str, Any]]
    _listeners: list[EventListener]

    def __init__(
        self,
        output_file: str | None = None,
        in_memory: bool = False,
        start_sequence: int = 0,
        append: bool = False,
    ) -> None:
        """Initialize the event logger.

        Args:
            output_file: JSONL file path. Defaults to logging.output_file.
            in_memory: Force memory mode even if config names a file.
            start_sequence: Sequence of the last event already logged, e.g.
                the one saved in a checkpoint. The next event gets this + 1.
            append: Keep an existing file instead of clearing it.
        """
        if start_sequence < 0:
            raise ValueError(f"start_sequence must be >= 0, got {start_sequence}")
        self._sequence = start_sequence
        self._events = []
        self._listeners = []

        if in_memory:
            self.output_path = None
            return

        resolved_file = output_file or get("logging.output_file")
        if not isinstance(resolved_file, str) or not resolved_file:
            self.output_path = None
            return
        self.output_path = Path(resolved_file)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        if append:
            self.output_path.touch()
        else:
            # Clear existing log on init (new run)
            self.output_path.write_text("")

    def resume_from(self, sequence: int) -> None:
        """Continue numbering after ``sequence``.

        Never moves the counter backwards, so events already logged by this
        instance keep their order.
        """
        if sequence < 0:
            raise ValueError(f"sequence must be >= 0, got {sequence}")
        self._sequence = max(self._sequence, sequence)

    def log(self, event_type: str, data: dict[str, Any]) -> dict[str, Any]:
        """Record one event and notify listeners.

        Returns:
            The event as written

        Raises:
            OSError: The JSONL file could not be written
        """
        event: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "sequence": self._sequence + 1,
            "event_type": event_type,
            **data,
        }
        if self.output_path is not None:
            with open(self.output_path, "a") as f:
                f.write(json.dumps(event) + "\n")
        else:
            self._events.append(event)
        self._sequence += 1

        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.warning(
                    "Event listener %r failed on %s #%d",
                    listener, event_type, self._sequence, exc_info=True,
                )
        return event

    def subscribe(self, listener: EventListener) -> None:
        """Register a callable invoked with every future event."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: EventListener) -> bool:
        """Remove a listener.

        Returns:
            True if the listener was registered
        """
        if listener in self._listeners:
            self._listeners.remove(listener)
            return True
        return False

    def read_recent(self, n: int | None = None) -> list[dict[str, Any]]:
        """Read the last N events.

        N defaults to logging.default_recent from config.
        """
        if n is None:
            default_recent = get("logging.default_recent")
            if isinstance(default_recent, int):
                n = default_recent
            else:
                n = 50
        if n <= 0:
            return []
        return [dict(e) for e in self._all_events()[-n:]]

    def read_file(self) -> list[dict[str, Any]]:
        """Read every event back from the JSONL file (empty in memory mode)."""
        if self.output_path is None or not self.output_path.exists():
            return []
        lines = self.output_path.read_text().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    def events_of_type(self, event_type: str) -> list[dict[str, Any]]:
        return [dict(e) for e in self._all_events() if e["event_type"] == event_type]

    def _all_events(self) -> list[dict[str, Any]]:
        if self.output_path is not None:
            return self.read_file()
        return self._events

    @property
    def sequence(self) -> int:
        """Sequence number of the last event logged."""
        return self._sequence
