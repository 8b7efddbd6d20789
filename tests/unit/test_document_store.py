"""Unit tests for the in-memory document store."""

import pytest

from cognishelf_search.adapters.document_store import DocumentStore, InMemoryDocumentStore, MutableDocumentStore


@pytest.mark.unit
class TestInMemoryDocumentStore:
    def test_add_assigns_id_and_timestamps(self):
        store = InMemoryDocumentStore()
        stored = store.add({"title": "Draft"})

        assert stored["id"]
        assert stored["createdAt"]
        assert stored["updatedAt"] == stored["createdAt"]
        assert store.get(stored["id"]) == stored

    def test_add_keeps_given_id(self):
        store = InMemoryDocumentStore()
        assert store.add({"id": "fixed", "title": "Draft"})["id"] == "fixed"
        assert len(store) == 1

    def test_add_does_not_mutate_input(self):
        document = {"title": "Draft"}
        InMemoryDocumentStore().add(document)
        assert document == {"title": "Draft"}

    def test_update_merges_and_keeps_id(self):
        store = InMemoryDocumentStore([{"id": "a", "title": "Old", "tags": ["x"]}])
        updated = store.update("a", {"title": "New", "id": "hijack"})

        assert updated["id"] == "a"
        assert updated["title"] == "New"
        assert updated["tags"] == ["x"]
        assert store.get("hijack") is None

    def test_update_unknown_returns_none(self):
        assert InMemoryDocumentStore().update("missing", {"title": "x"}) is None

    def test_delete(self):
        store = InMemoryDocumentStore([{"id": "a"}])
        assert store.delete("a") is True
        assert store.delete("a") is False
        assert store.get_all() == []

    def test_satisfies_protocols(self):
        store = InMemoryDocumentStore()
        assert isinstance(store, DocumentStore)
        assert isinstance(store, MutableDocumentStore)
