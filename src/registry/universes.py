"""Universe Registry - creating and looking up universes"""

from __future__ import annotations

import logging
from typing import Callable

from ..config_schema import RegistryConfig
from .errors import InvalidInput, NotFound
from .identity import IdentityRegistry
from .models import RegistryState, Universe
from .validation import require_id, require_text

logger = logging.getLogger(__name__)


class UniverseRegistry:
    """Creates universes and resolves universe ids.

    Creation allocates the next dense id, makes the creator the first
    authorized author and bumps the creator's ``universe_count``.
    """

    state: RegistryState
    identity: IdentityRegistry
    config: RegistryConfig
    _clock: Callable[[], str]

    def __init__(
        self,
        state: RegistryState,
        identity: IdentityRegistry,
        config: RegistryConfig,
        clock: Callable[[], str],
    ) -> None:
        self.state = state
        self.identity = identity
        self.config = config
        self._clock = clock

    def create_universe(
        self,
        caller: str,
        name: str,
        description: str,
        is_public: bool,
    ) -> Universe:
        """Create a universe owned by ``caller``.

        Args:
            caller: Registered author creating the universe
            name: Non-empty universe name
            description: Free text, may be empty
            is_public: Public universes accept stories from any registered author

        Returns:
            The new Universe record

        Raises:
            NotRegistered: caller has no Author record
            InvalidInput: empty or overlong name, non-string description
        """
        creator = self.identity.require_registered(caller)
        require_text(name, "name", self.config.max_name_length)
        if not isinstance(description, str):
            raise InvalidInput("description must be a string", field="description")
        if not isinstance(is_public, bool):
            raise InvalidInput("is_public must be a boolean", field="is_public")

        universe_id = self.state.ids.allocate("universe")
        universe = Universe(
            id=universe_id,
            name=name,
            description=description,
            creator=caller,
            is_public=is_public,
            created_at=self._clock(),
            authorized_authors={caller},
        )
        self.state.universes[universe_id] = universe
        creator.universe_count += 1
        logger.info(
            "Universe %d %r created by %s (%s)",
            universe_id, name, caller, "public" if is_public else "private",
        )
        return universe

    def require_universe(self, universe_id: int) -> Universe:
        """Resolve an id to its record.

        Raises:
            NotFound: id is outside [1, next_universe_id)
        """
        require_id(universe_id, "universe_id")
        if not self.state.ids.exists("universe", universe_id):
            raise NotFound(
                f"Universe {universe_id} does not exist", universe_id=universe_id
            )
        return self.state.universes[universe_id]

