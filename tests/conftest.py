import copy
import itertools
from collections import defaultdict

import pytest
from fastapi.testclient import TestClient

from app.exceptions import DuplicateKeyError
from app.main import app
from app.dependencies import get_viewer_id
from app.services.firebase_service import firebase_service

FIRESTORE_METHODS = (
    "get_document",
    "get_documents",
    "find_one",
    "create_document_with_unique_key",
    "update_document",
    "increment_field",
    "transform_document",
    "delete_documents",
    "query_collection",
)


class InMemoryFirestore:
    """Dict-backed stand-in for the FirebaseService document methods"""

    def __init__(self):
        self.collections = defaultdict(dict)
        self._ids = itertools.count(1)

    def put(self, collection, doc_id, data):
        self.collections[collection][doc_id] = copy.deepcopy(data)

    def raw(self, collection, doc_id):
        return self.collections[collection].get(doc_id)

    async def get_document(self, collection, doc_id):
        data = self.collections[collection].get(doc_id)
        return copy.deepcopy(data) if data is not None else None

    async def get_documents(self, collection, doc_ids):
        coll = self.collections[collection]
        return {i: copy.deepcopy(coll[i]) for i in doc_ids if i in coll}

    async def find_one(self, collection, field, value):
        for doc_id, data in self.collections[collection].items():
            if data.get(field) == value:
                return doc_id, copy.deepcopy(data)
        return None

    async def create_document_with_unique_key(self, collection, data, key_collection, key):
        if key in self.collections[key_collection]:
            raise DuplicateKeyError(key)
        doc_id = f"doc{next(self._ids)}"
        self.collections[key_collection][key] = {"documentId": doc_id}
        self.collections[collection][doc_id] = copy.deepcopy(data)
        return doc_id

    async def update_document(self, collection, doc_id, data):
        doc = self.collections[collection].get(doc_id)
        if doc is None:
            return None
        doc.update(copy.deepcopy(data))
        return copy.deepcopy(doc)

    async def increment_field(self, collection, doc_id, field, amount=1):
        doc = self.collections[collection].get(doc_id)
        if doc is None:
            return None
        doc[field] = (doc.get(field) or 0) + amount
        return copy.deepcopy(doc)

    async def transform_document(self, collection, doc_id, mutate):
        doc = self.collections[collection].get(doc_id)
        if doc is None:
            return None
        updates = mutate(copy.deepcopy(doc))
        doc.update(copy.deepcopy(updates))
        return copy.deepcopy(doc)

    async def delete_documents(self, paths):
        for collection, doc_id in paths:
            self.collections[collection].pop(doc_id, None)

    async def query_collection(self, collection_name, filters=None, order_by=None,
                               direction=None, limit=None):
        docs = []
        for doc_id, data in self.collections[collection_name].items():
            if filters and not all(
                op == "==" and data.get(field) == value for field, op, value in filters
            ):
                continue
            docs.append((doc_id, copy.deepcopy(data)))
        return docs[:limit] if limit else docs


@pytest.fixture
def fake_db(monkeypatch):
    db = InMemoryFirestore()
    for name in FIRESTORE_METHODS:
        monkeypatch.setattr(firebase_service, name, getattr(db, name), raising=False)
    return db


@pytest.fixture
def client(fake_db):
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def as_viewer():
    """Call with a Clerk user id (or None) to set the requesting viewer"""

    def _set(viewer_id):
        app.dependency_overrides[get_viewer_id] = lambda: viewer_id

    yield _set
    app.dependency_overrides.pop(get_viewer_id, None)
