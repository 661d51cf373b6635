"""Tests for ledger storage backends."""

import json

from courseflow.db.store import InMemoryStore, JsonFileStore


class TestJsonFileStore:
    """Tests for JsonFileStore."""

    def test_save_and_load(self, tmp_path):
        store = JsonFileStore(tmp_path / "nested" / "database.json")
        document = {"courses": [], "assessments": [], "nextCourseId": 3}

        assert store.save(document) is True
        assert store.load() == document

    def test_missing_file(self, tmp_path):
        assert JsonFileStore(tmp_path / "missing.json").load() is None

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "database.json"
        path.write_text("{not json")

        assert JsonFileStore(path).load() is None

    def test_non_object_document(self, tmp_path):
        path = tmp_path / "database.json"
        path.write_text(json.dumps([1, 2, 3]))

        assert JsonFileStore(path).load() is None

    def test_failed_write_reports_false(self, tmp_path):
        """Writing below a regular file cannot succeed."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")

        assert JsonFileStore(blocker / "database.json").save({"courses": []}) is False


class TestInMemoryStore:
    """Tests for InMemoryStore."""

    def test_starts_empty(self):
        assert InMemoryStore().load() is None

    def test_documents_are_copied(self):
        store = InMemoryStore()
        document = {"courses": [{"id": 1}]}

        store.save(document)
        document["courses"].clear()

        assert store.load() == {"courses": [{"id": 1}]}
        assert store.save_count == 1
