"""
Tests for the MongoDB results sink, against an in-memory collection.
"""

from datetime import datetime, timezone

import pytest

import config
import results_store
from conftest import make_candidate
from fusion import fuse_candidates
from models import RawQuery
from query_parser import build_parsed_query
from resolver import build_output


class FakeInsertResult:

    def __init__(self, ids):
        self.inserted_ids = ids


class FakeCollection:

    def __init__(self, error=None):
        self.docs = []
        self.error = error

    def insert_many(self, docs):
        if self.error:
            raise self.error
        self.docs.extend(docs)
        return FakeInsertResult(list(range(len(docs))))

    def count_documents(self, query):
        if self.error:
            raise self.error
        return len(self.docs)


@pytest.fixture
def output():
    parsed = build_parsed_query(RawQuery(raw_query="2014 BMW 320d spark plug"))
    ranked = fuse_candidates([make_candidate("12 12 0 037 244")], parsed.part_group_path)
    return build_output(parsed, ranked, providers_run=['REALOEM'])


@pytest.fixture
def collection(monkeypatch):
    fake = FakeCollection()
    monkeypatch.setattr(config, 'MONGO_URI', 'mongodb://localhost:27017')
    monkeypatch.setattr(results_store, 'get_collection', lambda: fake)
    return fake


class TestToDocument:

    def test_primary_oem_lifted(self, output):
        stored_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
        doc = results_store.to_document(output, stored_at)
        assert doc['primary_oem'] == "12120037244"
        assert doc['stored_at'] == stored_at
        assert doc['parsed_query']['normalized_brand'] == "BMW"
        assert doc['providers_run'] == ['REALOEM']

    def test_no_primary(self):
        parsed = build_parsed_query(RawQuery(raw_query="spark plug"))
        doc = results_store.to_document(build_output(parsed, []), datetime.now(timezone.utc))
        assert doc['primary_oem'] is None
        assert doc['decision'] == 'NO_CANDIDATES'


class TestPushOutputs:

    def test_inserts(self, collection, output):
        result = results_store.push_outputs([output, output])
        assert result == {'success': True, 'inserted': 2}
        assert len(collection.docs) == 2

    def test_nothing_to_insert(self, collection):
        assert results_store.push_outputs([]) == {'success': True, 'inserted': 0}

    def test_not_configured(self, monkeypatch, output):
        monkeypatch.setattr(config, 'MONGO_URI', None)
        result = results_store.push_outputs([output])
        assert result['success'] is False
        assert 'MONGO_URI' in result['error']

    def test_insert_error_reported(self, collection, output):
        collection.error = RuntimeError("connection refused")
        result = results_store.push_outputs([output])
        assert result == {'success': False, 'error': 'connection refused'}


class TestConnection:

    def test_connected(self, collection):
        status = results_store.test_connection()
        assert status['connected'] is True
        assert status['stored_count'] == 0

    def test_unreachable(self, collection):
        collection.error = RuntimeError("timeout")
        assert results_store.test_connection() == {'connected': False, 'error': 'timeout'}

    def test_not_configured(self, monkeypatch):
        monkeypatch.setattr(config, 'MONGO_URI', None)
        assert results_store.test_connection()['connected'] is False
