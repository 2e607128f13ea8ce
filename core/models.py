"""Core domain models for catalog entries, tags and view criteria."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

DEFAULT_TAG_COLOR = "#f4a261"

CATEGORY_ALL = "all"
CATEGORY_UNTAGGED = "untagged"
CATEGORY_WATCHED = "watched"
CATEGORY_UNWATCHED = "unwatched"
CATEGORY_FAVORITES = "favorites"
TAG_CATEGORY_PREFIX = "tag:"

FIXED_CATEGORIES = (
    CATEGORY_ALL,
    CATEGORY_UNTAGGED,
    CATEGORY_WATCHED,
    CATEGORY_UNWATCHED,
    CATEGORY_FAVORITES,
)

# Fields an entry update may touch; id and created_at are immutable.
ENTRY_UPDATE_FIELDS = frozenset(
    {
        "file_path",
        "title",
        "year",
        "rating",
        "notes",
        "watched",
        "favorite",
        "thumbnail_path",
        "file_size",
        "duration",
        "tmdb_id",
        "tmdb_poster_path",
        "tmdb_rating",
        "tmdb_overview",
        "tmdb_director",
        "tmdb_cast",
        "tmdb_release_date",
        "tmdb_genres",
    }
)


@dataclass
class Tag:
    """A user-defined label attachable to many entries."""

    id: int
    name: str
    color: str = DEFAULT_TAG_COLOR
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class Entry:
    """One catalogued video file.

    `tags` is a denormalized snapshot of the attached tags, refreshed on reload.
    The `tmdb_*` fields are opaque external metadata.
    """

    id: int
    file_path: str
    title: str | None = None
    year: int | None = None
    rating: int | None = None
    notes: str | None = None
    watched: bool = False
    favorite: bool = False
    thumbnail_path: str | None = None
    file_size: int | None = None
    duration: float | None = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime | None = None
    tags: list[Tag] = field(default_factory=list)
    # External metadata
    tmdb_id: int | None = None
    tmdb_poster_path: str | None = None
    tmdb_rating: float | None = None
    tmdb_overview: str | None = None
    tmdb_director: str | None = None
    tmdb_cast: str | None = None
    tmdb_release_date: str | None = None
    tmdb_genres: str | None = None

    @property
    def tag_ids(self) -> set[int]:
        """Identifiers of the attached tags."""
        return {t.id for t in self.tags}


def tag_category(tag_id: int) -> str:
    """Return the category selector for a single tag."""
    return f"{TAG_CATEGORY_PREFIX}{tag_id}"


def parse_category(category: str) -> tuple[str, int | None]:
    """Split a category selector into (kind, tag_id).

    Raises:
        ValueError: If the selector is not a known category.
    """
    if category in FIXED_CATEGORIES:
        return category, None
    if isinstance(category, str) and category.startswith(TAG_CATEGORY_PREFIX):
        raw = category[len(TAG_CATEGORY_PREFIX) :]
        try:
            return "tag", int(raw)
        except ValueError:
            pass
    raise ValueError(f"Unknown category: {category!r}")


@dataclass(frozen=True)
class FilterSpec:
    """Active view criteria: a category selector and a free-text query."""

    category: str = CATEGORY_ALL
    query: str = ""
