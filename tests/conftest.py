import copy

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import AutoReconnect

from auth import create_access_token
from database import get_db
from main import app


class _Result:
    def __init__(self, inserted_id=None, matched_count=0, deleted_count=0):
        self.inserted_id = inserted_id
        self.matched_count = matched_count
        self.deleted_count = deleted_count


class _Cursor(list):
    def limit(self, n):
        return _Cursor(self[:n])


class InMemoryCollection:
    """The slice of pymongo's Collection API the app uses."""

    def __init__(self):
        self.docs = []
        self.fail_reads = False
        self.fail_writes = False

    @staticmethod
    def _matches(doc, filter_dict):
        return all(doc.get(k) == v for k, v in (filter_dict or {}).items())

    def _check_read(self):
        if self.fail_reads:
            raise AutoReconnect("connection lost")

    def _check_write(self):
        if self.fail_writes:
            raise AutoReconnect("connection lost")

    def find_one(self, filter_dict=None):
        self._check_read()
        for doc in self.docs:
            if self._matches(doc, filter_dict):
                return copy.deepcopy(doc)
        return None

    def find(self, filter_dict=None):
        self._check_read()
        return _Cursor(copy.deepcopy(d) for d in self.docs if self._matches(d, filter_dict))

    def insert_one(self, doc):
        self._check_write()
        doc = copy.deepcopy(doc)
        doc.setdefault("_id", ObjectId())
        self.docs.append(doc)
        return _Result(inserted_id=doc["_id"])

    def replace_one(self, filter_dict, doc, upsert=False):
        self._check_write()
        for i, existing in enumerate(self.docs):
            if self._matches(existing, filter_dict):
                new_doc = copy.deepcopy(doc)
                new_doc.setdefault("_id", existing["_id"])
                self.docs[i] = new_doc
                return _Result(matched_count=1)
        if upsert:
            self.insert_one(doc)
        return _Result()

    def update_one(self, filter_dict, update):
        self._check_write()
        for doc in self.docs:
            if self._matches(doc, filter_dict):
                doc.update(copy.deepcopy(update.get("$set", {})))
                return _Result(matched_count=1)
        return _Result()

    def delete_one(self, filter_dict):
        self._check_write()
        for i, doc in enumerate(self.docs):
            if self._matches(doc, filter_dict):
                del self.docs[i]
                return _Result(deleted_count=1)
        return _Result()


class InMemoryDatabase:
    name = "siraq-test"

    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        return self.collections.setdefault(name, InMemoryCollection())

    def list_collection_names(self):
        return list(self.collections)


@pytest.fixture
def fake_db():
    return InMemoryDatabase()


@pytest.fixture
def client(fake_db):
    app.dependency_overrides[get_db] = lambda: fake_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    token = create_access_token({"sub": "admin-1", "email": "admin@siraq.test", "admin": True})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def wedding_values():
    return {
        "brideName": "Ayesha",
        "groomName": "Rahul",
        "weddingDate": "2025-12-12",
        "venue": "Taj Hall, Bengaluru",
    }
