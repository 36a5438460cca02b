"""Tests for MemoryGraphStore backend."""

import time

import pytest

from triage_flow.core.errors import StoreError
from triage_flow.core.models import Edge, Node, Outcome, ProtocolGraph
from triage_flow.storage.memory import MemoryGraphStore


def _graph(name="Fever"):
    return ProtocolGraph(
        name=name,
        nodes=[Node(id="q1", label="Fever?"), Node(id="red", priority=Outcome.RED)],
        edges=[Edge(id="e1", source="q1", target="red", label="Yes")],
    )


class TestSaveAndGet:
    def test_save_assigns_id(self):
        store = MemoryGraphStore()
        graph_id = store.save(_graph())
        assert isinstance(graph_id, str) and graph_id
        assert store.get(graph_id) == _graph()

    def test_save_with_explicit_id(self):
        store = MemoryGraphStore()
        assert store.save(_graph(), "fever") == "fever"
        assert store.get("fever").name == "Fever"

    def test_ids_unique(self):
        store = MemoryGraphStore()
        assert store.save(_graph()) != store.save(_graph())

    def test_overwrite_keeps_created_at(self):
        store = MemoryGraphStore()
        store.save(_graph("Old"), "p")
        created = store.list_summaries()[0].created_at
        time.sleep(0.001)
        store.save(_graph("New"), "p")
        summary = store.list_summaries()[0]
        assert summary.name == "New"
        assert summary.created_at == created

    def test_get_missing_raises(self):
        with pytest.raises(StoreError, match="not found"):
            MemoryGraphStore().get("nope")


class TestListSummaries:
    def test_empty(self):
        assert MemoryGraphStore().list_summaries() == []

    def test_summaries(self):
        store = MemoryGraphStore()
        store.save(_graph("A"), "a")
        store.save(_graph("B"), "b")
        summaries = store.list_summaries()
        assert [(s.id, s.name, s.node_count) for s in summaries] == [
            ("a", "A", 2),
            ("b", "B", 2),
        ]
        assert summaries[0].created_at.tzinfo is not None


class TestDelete:
    def test_delete_existing(self):
        store = MemoryGraphStore()
        store.save(_graph(), "p")
        assert store.delete("p") is True
        with pytest.raises(StoreError):
            store.get("p")

    def test_delete_missing(self):
        assert MemoryGraphStore().delete("nope") is False
