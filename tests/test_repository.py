"""
Tests for services/repository.py and utils/persistence.py

Coverage:
- Seeded source names until the first write
- Title upsert, lookup and removal
- Corrupt or invalid store files are reported, not replaced
- Atomic saves
"""

import json

import pytest

from models.models import TitleRecord
from services.repository import TitleRepository
from utils.exceptions import PersistenceError
from utils.persistence import JSONStore


class TestJSONStore:
    def test_missing_file_returns_default(self, tmp_path):
        store = JSONStore(tmp_path / "missing.json")
        assert store.load() == {}
        assert store.load([]) == []
        assert not store.exists()

    def test_save_and_load(self, tmp_path):
        store = JSONStore(tmp_path / "nested" / "db.json")
        store.save({"titles": [], "sources": ["alpha"]})

        assert store.exists()
        assert store.load() == {"titles": [], "sources": ["alpha"]}

    def test_save_leaves_no_temp_files(self, tmp_path):
        store = JSONStore(tmp_path / "db.json")
        store.save({"a": 1})
        store.save({"a": 2})

        assert [path.name for path in tmp_path.iterdir()] == ["db.json"]

    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "db.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(PersistenceError, match="Corrupt JSON"):
            JSONStore(path).load()
        assert path.read_text(encoding="utf-8") == "{not json"

    def test_unserializable_data_raises(self, tmp_path):
        store = JSONStore(tmp_path / "db.json")
        with pytest.raises(PersistenceError):
            store.save({"bad": object()})
        assert not store.exists()

    def test_update_single_key(self, tmp_path):
        store = JSONStore(tmp_path / "db.json")
        store.save({"sources": ["alpha"], "titles": [1]})

        result = store.update("sources", [], lambda names: [*names, "beta"])

        assert result == ["alpha", "beta"]
        assert store.load() == {"sources": ["alpha", "beta"], "titles": [1]}


class TestSourceNames:
    def test_defaults_until_written(self, temp_store):
        assert temp_store.read_source_names() == ["gogoanime", "otakustream", "mangakakalot"]
        assert not temp_store.path.exists()

    def test_written_names_replace_defaults(self, temp_store):
        temp_store.write_source_names(["gogoanime"])
        assert temp_store.read_source_names() == ["gogoanime"]

    def test_empty_list_is_kept(self, temp_store):
        temp_store.write_source_names([])
        assert temp_store.read_source_names() == []


class TestTitles:
    def test_empty_store(self, temp_store):
        assert temp_store.read_titles() == []
        assert temp_store.find_title(title="anything") is None

    def test_write_and_read(self, temp_store, make_title):
        record = make_title(
            {"gogoanime": "violet-evergarden", "otakustream": None},
            episodes=[{"number": 1, "urls": [{"source": "gogoanime", "url": "u1"}]}],
        )
        temp_store.write_title(record)

        assert temp_store.read_titles() == [record]

    def test_write_upserts_by_id(self, temp_store, make_title):
        temp_store.write_title(make_title())
        temp_store.write_title(make_title(title="Violet Evergarden Gaiden", active=True))

        titles = temp_store.read_titles()
        assert len(titles) == 1
        assert titles[0].title == "Violet Evergarden Gaiden"
        assert titles[0].active is True

    def test_find_by_title_and_id(self, temp_store, make_title):
        temp_store.write_title(make_title(id="a", title="First"))
        temp_store.write_title(make_title(id="b", title="Second"))

        assert temp_store.find_title(title="Second").id == "b"
        assert temp_store.find_title(title_id="a").title == "First"
        assert temp_store.find_title(title="Third") is None

    def test_delete(self, temp_store, make_title):
        temp_store.write_title(make_title(id="a", title="First"))
        temp_store.write_title(make_title(id="b", title="Second"))

        assert temp_store.delete_title("a") is True
        assert temp_store.delete_title("a") is False
        assert [record.id for record in temp_store.read_titles()] == ["b"]

    def test_titles_and_sources_coexist(self, temp_store, make_title):
        temp_store.write_source_names(["alpha"])
        temp_store.write_title(make_title())

        data = json.loads(temp_store.path.read_text(encoding="utf-8"))
        assert data["sources"] == ["alpha"]
        assert data["titles"][0]["id"] == "title-1"

    def test_invalid_record_raises(self, tmp_path):
        path = tmp_path / "db.json"
        path.write_text(json.dumps({"titles": [{"id": "x"}]}), encoding="utf-8")

        with pytest.raises(PersistenceError, match="Invalid title record"):
            TitleRepository(path).read_titles()

    def test_returns_fresh_snapshots(self, temp_store, make_title):
        temp_store.write_title(make_title())
        snapshot = temp_store.read_titles()[0]
        snapshot.title = "Changed locally"

        assert temp_store.read_titles()[0].title == "Violet Evergarden"
        assert isinstance(snapshot, TitleRecord)
