"""Story Registry - stories, likes and canonical status

Every mutation here is additive or monotonic: stories are appended to their
universe's index, likes only go up (one per identity, no unlike), and the
canonical flag only goes from False to True.
"""

from __future__ import annotations

import logging
from typing import Callable

from ..config_schema import RegistryConfig
from .access import PermissionAction, enforce
from .errors import AlreadyLiked, NotFound
from .identity import IdentityRegistry
from .models import RegistryState, Story
from .universes import UniverseRegistry
from .validation import require_id, require_identity, require_text

logger = logging.getLogger(__name__)


class StoryRegistry:
    """Creates stories and applies likes and canonical marks."""

    state: RegistryState
    identity: IdentityRegistry
    universes: UniverseRegistry
    config: RegistryConfig
    _clock: Callable[[], str]

    def __init__(
        self,
        state: RegistryState,
        identity: IdentityRegistry,
        universes: UniverseRegistry,
        config: RegistryConfig,
        clock: Callable[[], str],
    ) -> None:
        self.state = state
        self.identity = identity
        self.universes = universes
        self.config = config
        self._clock = clock

    def add_story(
        self,
        caller: str,
        universe_id: int,
        title: str,
        content: str,
    ) -> Story:
        """Add a story to a universe.

        Checks run in this order: caller registered, universe exists, title
        and content non-empty, caller allowed to contribute.

        Returns:
            The new Story record

        Raises:
            NotRegistered: caller has no Author record
            NotFound: universe does not exist
            InvalidInput: empty or overlong title/content
            Forbidden: private universe and caller not authorized
        """
        author = self.identity.require_registered(caller)
        universe = self.universes.require_universe(universe_id)
        require_text(title, "title", self.config.max_title_length)
        require_text(content, "content", self.config.max_content_length)
        enforce(universe, caller, PermissionAction.CONTRIBUTE)

        story_id = self.state.ids.allocate("story")
        story = Story(
            id=story_id,
            universe_id=universe_id,
            title=title,
            content=content,
            author=caller,
            created_at=self._clock(),
        )
        self.state.stories[story_id] = story
        universe.story_ids.append(story_id)
        universe.story_count += 1
        author.story_count += 1
        logger.info(
            "Story %d %r added to universe %d by %s", story_id, title, universe_id, caller
        )
        return story

    def require_story(self, story_id: int) -> Story:
        """Resolve an id to its record.

        Raises:
            NotFound: id is outside [1, next_story_id)
        """
        require_id(story_id, "story_id")
        if not self.state.ids.exists("story", story_id):
            raise NotFound(f"Story {story_id} does not exist", story_id=story_id)
        return self.state.stories[story_id]

    def like_story(self, caller: str, story_id: int) -> Story:
        """Record one like from ``caller``.

        Registration is only required when ``require_registration_to_like``
        is set.

        Raises:
            NotFound: story does not exist
            NotRegistered: registration required and caller has none
            AlreadyLiked: caller liked this story before
        """
        require_identity(caller)
        story = self.require_story(story_id)
        if self.config.require_registration_to_like:
            self.identity.require_registered(caller)
        if caller in story.liked_by:
            raise AlreadyLiked(
                f"{caller} already liked story {story_id}",
                story_id=story_id,
                identity=caller,
            )

        story.liked_by.add(caller)
        story.likes += 1
        # The story author is always registered: add_story requires it
        self.state.authors[story.author].total_likes_received += 1
        logger.debug("%s liked story %d (now %d)", caller, story_id, story.likes)
        return story

    def mark_story_canonical(self, caller: str, story_id: int) -> tuple[Story, bool]:
        """Flag a story as canonical lore of its universe.

        Only the universe creator may do this, whoever wrote the story.

        Returns:
            (story, changed) where changed is False if it was already canonical

        Raises:
            NotFound: story does not exist
            Forbidden: caller did not create the story's universe
        """
        require_identity(caller)
        story = self.require_story(story_id)
        universe = self.state.universes[story.universe_id]
        enforce(universe, caller, PermissionAction.MARK_CANONICAL)

        changed = not story.is_canonical
        story.is_canonical = True
        if changed:
            logger.info("Story %d marked canonical by %s", story_id, caller)
        return story, changed

    def get_universe_stories(self, universe_id: int) -> tuple[int, ...]:
        """Story ids of a universe in creation order.

        Raises:
            NotFound: universe does not exist
        """
        universe = self.universes.require_universe(universe_id)
        return tuple(universe.story_ids)

    def has_liked(self, story_id: int, identity: str) -> bool:
        return identity in self.require_story(story_id).liked_by
