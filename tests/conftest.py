# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# Shared fixtures for all tests.
#
# FIXTURES:
# ---------
# - fake_mongo          → In-memory stand-in for storage.MongoClient
# - classroom_schema    → Raw wire description of the classroom schema
# - classroom_record    → A record that satisfies it
# - service             → RecordAnalysisService over fake_mongo
# - registered_service  → service with "classrooms" already registered
# - package_logger      → (autouse) restores the package logger after each test
#
# ==============================================

import copy
import itertools
import logging

import pytest
from pymongo.errors import DuplicateKeyError

from record_analysis import log
from record_analysis.config import AppConfig
from record_analysis.service import RecordAnalysisService
from record_analysis.storage import AnalysisStore, RecordStore, SchemaStore


class FakeMongoClient:
    """
    Dictionary-backed replacement for storage.MongoClient.

    Supports the subset of queries the stores issue: {} and {"_id": value}.
    Documents are deep-copied on the way in and out like a real round trip.
    """

    def __init__(self):
        self.collections = {}
        self.connected = False
        self.connect_calls = 0
        self._ids = itertools.count(1)

    def connect(self):
        self.connect_calls += 1
        self.connected = True

    def disconnect(self):
        self.connected = False

    def _docs(self, collection_name):
        return self.collections.setdefault(collection_name, [])

    @staticmethod
    def _matches(document, query):
        return all(document.get(key) == value for key, value in query.items())

    def insert_one(self, collection_name, document):
        document = copy.deepcopy(document)
        docs = self._docs(collection_name)
        if "_id" not in document:
            document["_id"] = f"oid-{next(self._ids)}"
        elif any(d["_id"] == document["_id"] for d in docs):
            raise DuplicateKeyError(f"duplicate _id {document['_id']!r}")
        docs.append(document)
        return document["_id"]

    def find(self, collection_name, query):
        return [copy.deepcopy(d) for d in self._docs(collection_name) if self._matches(d, query)]

    def find_one(self, collection_name, query):
        found = self.find(collection_name, query)
        return found[0] if found else None

    def replace_one(self, collection_name, query, document, upsert=False):
        docs = self._docs(collection_name)
        for i, existing in enumerate(docs):
            if self._matches(existing, query):
                docs[i] = copy.deepcopy(document)
                return 1
        if upsert:
            docs.append(copy.deepcopy(document))
            return 1
        return 0

    def count(self, collection_name, query):
        return len(self.find(collection_name, query))


@pytest.fixture
def fake_mongo():
    return FakeMongoClient()


@pytest.fixture
def app_config():
    return AppConfig()


@pytest.fixture
def classroom_schema():
    return [
        {"name": "classroomName", "type": "string"},
        {"name": "classroomLimit", "type": "int"},
        {
            "name": "professor",
            "type": "customobject",
            "field_attributes": [
                {"name": "name", "type": "string"},
                {"name": "yearsAtRice", "type": "int"},
            ],
        },
    ]


@pytest.fixture
def classroom_record():
    return {
        "classroomName": "Duncan Hall 1072",
        "classroomLimit": 65,
        "professor": {"name": "Swong", "yearsAtRice": 10},
    }


@pytest.fixture
def service(fake_mongo, app_config):
    return RecordAnalysisService(
        config=app_config,
        schema_store=SchemaStore(fake_mongo),
        record_store=RecordStore(fake_mongo),
        analysis_store=AnalysisStore(fake_mongo),
        mongo_client=fake_mongo,
    )


@pytest.fixture
def registered_service(service, classroom_schema):
    service.register_schema("classrooms", classroom_schema)
    return service


@pytest.fixture(autouse=True)
def package_logger(monkeypatch):
    """Undo handler, level and propagation changes made by cli.main."""
    root = logging.getLogger(log.ROOT_LOGGER_NAME)
    handlers, level, propagate = list(root.handlers), root.level, root.propagate
    monkeypatch.setattr(log, "_stdout_handler", None)
    yield root
    root.handlers = handlers
    root.setLevel(level)
    root.propagate = propagate
