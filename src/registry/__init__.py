# Story universe registry package
from .ledger import StoryLedger, RegistryTotals
from .models import (
    Author, Universe, Story, RegistryState,
    AuthorStats, UniverseSnapshot, StorySnapshot,
)
from .errors import (
    ErrorCategory, ErrorCode, ErrorResponse,
    RegistryError, InvalidInput, NotRegistered, AlreadyRegistered,
    NotFound, Forbidden, AlreadyLiked,
)
from .logger import (
    EventLogger, EVENT_TYPES,
    AUTHOR_REGISTERED, UNIVERSE_CREATED, AUTHOR_AUTHORIZED,
    STORY_ADDED, STORY_LIKED, STORY_MARKED_CANONICAL,
)
from .access import PermissionAction, PermissionResult, check_permission
from .id_registry import IDRegistry
from .checkpoint import save_checkpoint, load_checkpoint

__all__ = [
    "StoryLedger", "RegistryTotals",
    # Records and snapshots
    "Author", "Universe", "Story", "RegistryState",
    "AuthorStats", "UniverseSnapshot", "StorySnapshot",
    # Errors
    "ErrorCategory", "ErrorCode", "ErrorResponse",
    "RegistryError", "InvalidInput", "NotRegistered", "AlreadyRegistered",
    "NotFound", "Forbidden", "AlreadyLiked",
    # Events
    "EventLogger", "EVENT_TYPES",
    "AUTHOR_REGISTERED", "UNIVERSE_CREATED", "AUTHOR_AUTHORIZED",
    "STORY_ADDED", "STORY_LIKED", "STORY_MARKED_CANONICAL",
    # Access control
    "PermissionAction", "PermissionResult", "check_permission",
    "IDRegistry",
    "save_checkpoint", "load_checkpoint",
]
