"""Data models and configuration.

Pydantic models and configuration:
- models: Title, episode and link data models
- config: Centralized configuration (Pydantic Settings)
"""

from models.models import (
    EpisodeRecord,
    EpisodeUrl,
    ResolvedEpisode,
    SourceUrl,
    TitleRecord,
)
from models.config import settings, get_data_path

__all__ = [
    "EpisodeRecord",
    "EpisodeUrl",
    "ResolvedEpisode",
    "SourceUrl",
    "TitleRecord",
    "settings",
    "get_data_path",
]
