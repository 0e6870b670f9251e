"""Records held by the registry store.

Mutable records (Author, Universe, Story) live only inside RegistryState and
are never handed to callers. Queries return the frozen snapshot types, which
are copies taken under the ledger lock.

Membership sets (a universe's authorized authors, a story's likers) are owned
fields of their entity rather than global tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .id_registry import IDRegistry


@dataclass
class Author:
    """A pseudonymous author keyed by an externally supplied address."""

    address: str
    pseudonym: str
    universe_count: int = 0
    story_count: int = 0
    total_likes_received: int = 0
    is_registered: bool = True

    def snapshot(self) -> AuthorStats:
        return AuthorStats(
            address=self.address,
            pseudonym=self.pseudonym,
            universe_count=self.universe_count,
            story_count=self.story_count,
            total_likes_received=self.total_likes_received,
            is_registered=self.is_registered,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "pseudonym": self.pseudonym,
            "universe_count": self.universe_count,
            "story_count": self.story_count,
            "total_likes_received": self.total_likes_received,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Author:
        return cls(
            address=data["address"],
            pseudonym=data["pseudonym"],
            universe_count=int(data.get("universe_count", 0)),
            story_count=int(data.get("story_count", 0)),
            total_likes_received=int(data.get("total_likes_received", 0)),
        )


@dataclass
class Universe:
    """A collaborative fiction setting.

    The creator is added to ``authorized_authors`` at creation and can never
    be removed. ``story_ids`` is the append-only index of stories in creation
    order; ``story_count`` always equals its length.
    """

    id: int
    name: str
    description: str
    creator: str
    is_public: bool
    created_at: str
    story_count: int = 0
    authorized_authors: set[str] = field(default_factory=set)
    story_ids: list[int] = field(default_factory=list)

    def snapshot(self) -> UniverseSnapshot:
        return UniverseSnapshot(
            id=self.id,
            name=self.name,
            description=self.description,
            creator=self.creator,
            is_public=self.is_public,
            created_at=self.created_at,
            story_count=self.story_count,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "creator": self.creator,
            "is_public": self.is_public,
            "created_at": self.created_at,
            "story_count": self.story_count,
            # Sorted for deterministic checkpoints
            "authorized_authors": sorted(self.authorized_authors),
            "story_ids": list(self.story_ids),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Universe:
        return cls(
            id=int(data["id"]),
            name=data["name"],
            description=data.get("description", ""),
            creator=data["creator"],
            is_public=bool(data["is_public"]),
            created_at=data["created_at"],
            story_count=int(data.get("story_count", 0)),
            authorized_authors=set(data.get("authorized_authors", [])),
            story_ids=[int(s) for s in data.get("story_ids", [])],
        )


@dataclass
class Story:
    """A titled contribution bound to one universe.

    ``likes`` always equals ``len(liked_by)``. ``is_canonical`` only ever
    flips from False to True.
    """

    id: int
    universe_id: int
    title: str
    content: str
    author: str
    created_at: str
    likes: int = 0
    is_canonical: bool = False
    liked_by: set[str] = field(default_factory=set)

    def snapshot(self) -> StorySnapshot:
        return StorySnapshot(
            id=self.id,
            universe_id=self.universe_id,
            title=self.title,
            content=self.content,
            author=self.author,
            created_at=self.created_at,
            likes=self.likes,
            is_canonical=self.is_canonical,
            liked_by=tuple(sorted(self.liked_by)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "universe_id": self.universe_id,
            "title": self.title,
            "content": self.content,
            "author": self.author,
            "created_at": self.created_at,
            "likes": self.likes,
            "is_canonical": self.is_canonical,
            "liked_by": sorted(self.liked_by),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Story:
        return cls(
            id=int(data["id"]),
            universe_id=int(data["universe_id"]),
            title=data["title"],
            content=data["content"],
            author=data["author"],
            created_at=data["created_at"],
            likes=int(data.get("likes", 0)),
            is_canonical=bool(data.get("is_canonical", False)),
            liked_by=set(data.get("liked_by", [])),
        )


@dataclass(frozen=True)
class AuthorStats:
    """Read-only view of an Author record."""

    address: str
    pseudonym: str
    universe_count: int
    story_count: int
    total_likes_received: int
    is_registered: bool

    @classmethod
    def unregistered(cls, address: str) -> AuthorStats:
        """Zeroed stats returned for an identity that never registered."""
        return cls(
            address=address,
            pseudonym="",
            universe_count=0,
            story_count=0,
            total_likes_received=0,
            is_registered=False,
        )


@dataclass(frozen=True)
class UniverseSnapshot:
    """Read-only view of a Universe (membership set and index excluded)."""

    id: int
    name: str
    description: str
    creator: str
    is_public: bool
    created_at: str
    story_count: int


@dataclass(frozen=True)
class StorySnapshot:
    """Read-only view of a Story."""

    id: int
    universe_id: int
    title: str
    content: str
    author: str
    created_at: str
    likes: int
    is_canonical: bool
    liked_by: tuple[str, ...]


@dataclass
class RegistryState:
    """The shared store behind every registry component.

    Only StoryLedger mutates this, and only while holding its lock.
    """

    authors: dict[str, Author] = field(default_factory=dict)
    universes: dict[int, Universe] = field(default_factory=dict)
    stories: dict[int, Story] = field(default_factory=dict)
    ids: IDRegistry = field(default_factory=IDRegistry)

    @property
    def total_universes(self) -> int:
        return len(self.universes)

    @property
    def total_stories(self) -> int:
        return len(self.stories)

    @property
    def total_authors(self) -> int:
        return len(self.authors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "next_ids": self.ids.to_dict(),
            "authors": [a.to_dict() for a in self.authors.values()],
            "universes": [u.to_dict() for u in self.universes.values()],
            "stories": [s.to_dict() for s in self.stories.values()],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RegistryState:
        authors = [Author.from_dict(a) for a in data.get("authors", [])]
        universes = [Universe.from_dict(u) for u in data.get("universes", [])]
        stories = [Story.from_dict(s) for s in data.get("stories", [])]
        return cls(
            authors={a.address: a for a in authors},
            universes={u.id: u for u in universes},
            stories={s.id: s for s in stories},
            ids=IDRegistry(data.get("next_ids")),
        )
