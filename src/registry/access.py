"""Access control - who may contribute to and administer a universe.

Permission checks are pure: they return a PermissionResult and never touch
state. The mutating entry point, ``authorize_author``, is the only way the
authorized set grows, and nothing ever shrinks it.

Rules:
- CONTRIBUTE: allowed if the universe is public or the caller is in its
  authorized set (the creator always is)
- AUTHORIZE, MARK_CANONICAL: allowed only for the universe creator, not
  delegable to other authorized authors
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .errors import ErrorCode, Forbidden
from .identity import IdentityRegistry
from .models import Universe
from .universes import UniverseRegistry
from .validation import require_identity

logger = logging.getLogger(__name__)


class PermissionAction(str, Enum):
    """Actions that are permission-checked against a universe."""

    CONTRIBUTE = "contribute"
    """Add a story to the universe."""

    AUTHORIZE = "authorize"
    """Grant another author contribution rights."""

    MARK_CANONICAL = "mark_canonical"
    """Flag a story in the universe as canonical."""


@dataclass(frozen=True)
class PermissionResult:
    """Result of a permission check.

    Attributes:
        allowed: Whether the action is permitted.
        reason: Human-readable explanation of the decision.
    """

    allowed: bool
    reason: str


def check_permission(
    universe: Universe, caller: str, action: PermissionAction
) -> PermissionResult:
    """Decide whether ``caller`` may perform ``action`` on ``universe``."""
    if action is PermissionAction.CONTRIBUTE:
        if universe.is_public:
            return PermissionResult(True, "universe is public")
        if caller in universe.authorized_authors:
            return PermissionResult(True, "caller is an authorized author")
        return PermissionResult(
            False, f"{caller} is not authorized for private universe {universe.id}"
        )

    if caller == universe.creator:
        return PermissionResult(True, "caller is the universe creator")
    return PermissionResult(
        False, f"only the creator of universe {universe.id} may {action.value}"
    )


def enforce(universe: Universe, caller: str, action: PermissionAction) -> None:
    """Raise Forbidden unless the check passes."""
    result = check_permission(universe, caller, action)
    if not result.allowed:
        code = (
            ErrorCode.NOT_AUTHORIZED
            if action is PermissionAction.CONTRIBUTE
            else ErrorCode.NOT_OWNER
        )
        raise Forbidden(
            result.reason,
            code,
            universe_id=universe.id,
            caller=caller,
            action=action.value,
        )


class AccessControl:
    """Per-universe authorized author sets."""

    universes: UniverseRegistry
    identity: IdentityRegistry

    def __init__(self, universes: UniverseRegistry, identity: IdentityRegistry) -> None:
        self.universes = universes
        self.identity = identity

    def authorize_author(self, caller: str, universe_id: int, target: str) -> bool:
        """Add ``target`` to the universe's authorized set.

        Re-authorizing an existing member is a successful no-op.

        Args:
            caller: Must be the universe creator
            universe_id: Universe to grant access to
            target: Registered author to authorize

        Returns:
            True if target was newly added, False if already a member

        Raises:
            NotFound: universe does not exist
            Forbidden: caller is not the creator
            NotRegistered: target has no Author record
        """
        require_identity(caller)
        universe = self.universes.require_universe(universe_id)
        enforce(universe, caller, PermissionAction.AUTHORIZE)
        self.identity.require_registered(target, "target")

        if target in universe.authorized_authors:
            logger.debug("%s already authorized for universe %d", target, universe_id)
            return False
        universe.authorized_authors.add(target)
        logger.info("%s authorized %s for universe %d", caller, target, universe_id)
        return True

    def is_authorized_for_universe(self, universe_id: int, identity: str) -> bool:
        """True if the universe is public or identity is in its set.

        Raises:
            NotFound: universe does not exist
        """
        universe = self.universes.require_universe(universe_id)
        return check_permission(universe, identity, PermissionAction.CONTRIBUTE).allowed

    def get_authorized_authors(self, universe_id: int) -> tuple[str, ...]:
        """Sorted members of the universe's authorized set."""
        universe = self.universes.require_universe(universe_id)
        return tuple(sorted(universe.authorized_authors))
