"""Checkpoint save/load for registry state.

A checkpoint is one JSON document holding every record and the id
counters. Restoring it yields a ledger whose next ids continue where the
saved one stopped.

- Version 1: authors, universes (with authorized set and story index),
  stories (with likers), next_ids, and the event sequence so a resumed
  audit log keeps numbering where it stopped
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..config import get
from ..config_schema import RegistryConfig
from .ledger import StoryLedger
from .logger import EventLogger
from .models import RegistryState

logger = logging.getLogger(__name__)

# Current checkpoint format version
CHECKPOINT_VERSION = 1


def save_checkpoint(ledger: StoryLedger, path: str | Path | None = None) -> Path:
    """Write the ledger state to a checkpoint file.

    Uses atomic write (temp file + rename) so an interrupted save leaves
    the previous checkpoint intact.

    Args:
        ledger: Ledger to snapshot
        path: Destination; defaults to checkpoint.file from config

    Returns:
        Path to the saved checkpoint file
    """
    target = Path(path) if path is not None else Path(get("checkpoint.file") or "checkpoint.json")

    checkpoint: dict[str, Any] = {
        "version": CHECKPOINT_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        **ledger.export_state(),
    }

    target.parent.mkdir(parents=True, exist_ok=True)
    temp_file = target.with_name(target.name + ".tmp")
    with open(temp_file, "w") as f:
        json.dump(checkpoint, f, indent=2)

    # Atomic rename - if interrupted here, original checkpoint remains valid
    os.replace(temp_file, target)
    logger.info("Checkpoint saved to %s", target)
    return target


def load_checkpoint(
    path: str | Path,
    config: RegistryConfig | None = None,
    event_logger: EventLogger | None = None,
) -> StoryLedger:
    """Restore a ledger from a checkpoint file.

    Args:
        path: Checkpoint written by save_checkpoint
        config: Registry policy for the restored ledger
        event_logger: Event sink for operations after the restore. Its
            sequence continues from the saved one; pass a file logger
            opened with append=True to keep the earlier audit lines.

    Returns:
        A StoryLedger holding the saved records

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: Unknown version or inconsistent state
    """
    with open(path) as f:
        data: dict[str, Any] = json.load(f)

    version = data.get("version")
    if version != CHECKPOINT_VERSION:
        raise ValueError(f"Unsupported checkpoint version: {version!r}")

    state = RegistryState.from_dict(data.get("state", {}))
    ledger = StoryLedger(config=config, event_logger=event_logger, state=state)

    violations = ledger.verify_invariants()
    if violations:
        raise ValueError(f"Checkpoint {path} is inconsistent: " + "; ".join(violations))
    ledger.events.resume_from(int(data.get("event_sequence", 0)))

    logger.info(
        "Checkpoint %s loaded: %d authors, %d universes, %d stories",
        path, state.total_authors, state.total_universes, state.total_stories,
    )
    return ledger
