"""Pydantic data models for tracked titles and resolved links.

Defines:
- TitleRecord: A tracked anime/manga title as persisted in the store
- EpisodeRecord: One episode (or chapter) of a title
- SourceUrl: A link to an episode on one source
- EpisodeUrl: A single {number, url} pair reported by a source handler
- ResolvedEpisode: Merged links for one episode number across sources
"""

from typing import TypeAlias

from pydantic import BaseModel, Field, field_validator, model_validator

# Type aliases for common patterns
SourceName: TypeAlias = str
TitleIdentifier: TypeAlias = str
EpisodeNumber: TypeAlias = int | float
SourceMap: TypeAlias = dict[SourceName, TitleIdentifier | None]


def normalize_number(value: EpisodeNumber) -> EpisodeNumber:
    """Collapse integral floats to int so 12.0 and 12 share one slot.

    Raises:
        ValueError: If the number is negative
    """
    if value < 0:
        raise ValueError(f"Episode number must be non-negative, got: {value}")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class SourceUrl(BaseModel):
    """A link to an episode on one source.

    Attributes:
        source: Source name (e.g. "gogoanime")
        url: Episode page URL on that source
    """

    source: SourceName = Field(..., min_length=1, description="Source name")
    url: str = Field(..., min_length=1, description="Episode URL")


class EpisodeUrl(BaseModel):
    """Episode URL reported by a single source handler."""

    number: EpisodeNumber = Field(..., description="Episode or chapter number")
    url: str = Field(..., min_length=1, description="Episode URL")

    @field_validator("number")
    @classmethod
    def normalize(cls, v: EpisodeNumber) -> EpisodeNumber:
        return normalize_number(v)


class ResolvedEpisode(BaseModel):
    """Links for one episode number merged from every source that reported it.

    Built by the aggregator and consumed by the caller; never persisted as-is.
    """

    number: EpisodeNumber
    urls: list[SourceUrl] = Field(default_factory=list)

    @field_validator("number")
    @classmethod
    def normalize(cls, v: EpisodeNumber) -> EpisodeNumber:
        return normalize_number(v)


class EpisodeRecord(BaseModel):
    """Persisted episode of a title.

    Attributes:
        number: Episode number (fractional for chapter-style sources)
        watched: Whether the user marked it as watched
        urls: Known links on the configured sources (may be empty)
    """

    number: EpisodeNumber = Field(..., description="Episode or chapter number")
    watched: bool = Field(False, description="Watched flag")
    urls: list[SourceUrl] = Field(default_factory=list, description="Links per source")

    @field_validator("number")
    @classmethod
    def normalize(cls, v: EpisodeNumber) -> EpisodeNumber:
        return normalize_number(v)

    @classmethod
    def from_resolved(cls, resolved: ResolvedEpisode) -> "EpisodeRecord":
        return cls(number=resolved.number, urls=list(resolved.urls))


class TitleRecord(BaseModel):
    """A tracked title.

    Attributes:
        id: Opaque unique identifier
        title: Display title (unique across the store)
        active: Whether the title is actively followed
        episodes: Episodes ordered by number ascending
        source_map: Source name -> that source's identifier for the title, or None

    Validation:
        - Episode numbers must be unique
        - Episodes are kept sorted by number
    """

    id: str = Field(..., min_length=1, description="Unique title id")
    title: str = Field(..., min_length=1, description="Title")
    active: bool = Field(False, description="Actively followed")
    episodes: list[EpisodeRecord] = Field(default_factory=list)
    source_map: SourceMap = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_episodes(self) -> "TitleRecord":
        """Reject duplicate episode numbers and keep episodes sorted."""
        numbers = [episode.number for episode in self.episodes]
        if len(numbers) != len(set(numbers)):
            raise ValueError(f"Duplicate episode numbers in '{self.title}'")
        self.episodes.sort(key=lambda episode: episode.number)
        return self

    def find_episode(self, number: EpisodeNumber) -> EpisodeRecord | None:
        for episode in self.episodes:
            if episode.number == number:
                return episode
        return None

    def configured_sources(self) -> list[SourceName]:
        """Source names that carry a non-empty identifier for this title."""
        return [
            source
            for source, identifier in self.source_map.items()
            if isinstance(identifier, str) and identifier
        ]
