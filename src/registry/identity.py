"""Identity Registry - pseudonymous authors

An identity registers exactly once. The pseudonym is fixed at registration
and the record is never deleted. Counters on the record are advanced by the
universe and story registries as side effects of their own commits.
"""

from __future__ import annotations

import logging

from ..config_schema import RegistryConfig
from .errors import AlreadyRegistered, NotRegistered
from .models import Author, AuthorStats, RegistryState
from .validation import require_identity, require_text

logger = logging.getLogger(__name__)


class IdentityRegistry:
    """Registers authors and answers identity queries.

    Does no locking of its own; StoryLedger calls it under the ledger lock.
    """

    state: RegistryState
    config: RegistryConfig

    def __init__(self, state: RegistryState, config: RegistryConfig) -> None:
        self.state = state
        self.config = config

    def register_author(self, identity: str, pseudonym: str) -> Author:
        """Create the Author record for ``identity``.

        Args:
            identity: Caller address
            pseudonym: Display name, non-empty

        Returns:
            The new record (counters zeroed)

        Raises:
            AlreadyRegistered: identity already has a record
            InvalidInput: empty pseudonym or identity
        """
        require_identity(identity)
        if identity in self.state.authors:
            raise AlreadyRegistered(
                f"{identity} is already registered", identity=identity
            )
        require_text(pseudonym, "pseudonym", self.config.max_pseudonym_length)

        author = Author(address=identity, pseudonym=pseudonym)
        self.state.authors[identity] = author
        logger.info("Registered author %s as %r", identity, pseudonym)
        return author

    def is_registered(self, identity: str) -> bool:
        author = self.state.authors.get(identity)
        return author is not None and author.is_registered

    def require_registered(self, identity: str, field: str = "identity") -> Author:
        """Return the caller's Author record or raise NotRegistered."""
        require_identity(identity, field)
        author = self.state.authors.get(identity)
        if author is None or not author.is_registered:
            raise NotRegistered(
                f"{identity} is not a registered author", **{field: identity}
            )
        return author

    def get_author_stats(self, identity: str) -> AuthorStats:
        """Snapshot of an author's record.

        Unknown identities yield zeroed stats with ``is_registered=False``,
        unless ``strict_author_lookup`` is set, in which case they raise
        NotRegistered.
        """
        author = self.state.authors.get(identity)
        if author is not None:
            return author.snapshot()
        if self.config.strict_author_lookup:
            raise NotRegistered(
                f"{identity} is not a registered author", identity=identity
            )
        return AuthorStats.unregistered(identity)
