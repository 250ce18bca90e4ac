"""Title store backed by a single JSON file.

Layout::

    {
      "titles": [TitleRecord, ...],
      "sources": ["gogoanime", ...]
    }

Every read returns fresh snapshots; callers modify them and write them back.
Writes are serialized within this process only, so a second process writing
the same file can still lose updates.
"""

from pathlib import Path

from pydantic import ValidationError

from models.config import settings
from models.models import TitleRecord
from utils.exceptions import PersistenceError
from utils.logging import get_logger
from utils.persistence import JSONStore

logger = get_logger(__name__)


class TitleRepository:
    """Store of tracked titles and known source names."""

    def __init__(self, db_file: Path | None = None, default_sources: list[str] | None = None) -> None:
        self._store = JSONStore(db_file or settings.storage.db_file)
        self._default_sources = list(
            settings.storage.default_sources if default_sources is None else default_sources
        )

    @property
    def path(self) -> Path:
        return self._store.file_path

    def read_titles(self) -> list[TitleRecord]:
        raw_titles = self._store.load({}).get("titles", [])
        try:
            return [TitleRecord.model_validate(raw) for raw in raw_titles]
        except ValidationError as e:
            raise PersistenceError(f"Invalid title record in {self.path}: {e}") from e

    def read_source_names(self) -> list[str]:
        """Known source names; the configured defaults until first written."""
        return list(self._store.load({}).get("sources", self._default_sources))

    def find_title(self, *, title: str | None = None, title_id: str | None = None) -> TitleRecord | None:
        """Find a title by display title or by id."""
        for record in self.read_titles():
            if title_id is not None and record.id == title_id:
                return record
            if title is not None and record.title == title:
                return record
        return None

    def write_title(self, record: TitleRecord) -> None:
        """Insert or replace (by id) a title record."""
        payload = record.model_dump(mode="json")

        def upsert(titles: list[dict]) -> list[dict]:
            for index, existing in enumerate(titles):
                if existing.get("id") == record.id:
                    titles[index] = payload
                    return titles
            titles.append(payload)
            return titles

        self._store.update("titles", [], upsert)
        logger.debug("Wrote title '{}' ({} episodes)", record.title, len(record.episodes))

    def write_source_names(self, names: list[str]) -> None:
        self._store.update("sources", [], lambda _: list(names))

    def delete_title(self, title_id: str) -> bool:
        """Remove a title by id.

        Returns:
            True if a record was removed
        """
        removed = False

        def remove(titles: list[dict]) -> list[dict]:
            nonlocal removed
            kept = [raw for raw in titles if raw.get("id") != title_id]
            removed = len(kept) != len(titles)
            return kept

        self._store.update("titles", [], remove)
        return removed
