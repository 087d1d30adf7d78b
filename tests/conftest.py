import pytest
from bson import ObjectId

from spice_vgraph import services


class FakeInsertResult:
    def __init__(self, inserted_id):
        self.inserted_id = inserted_id


class FakeCursor:
    def __init__(self, docs):
        self._docs = list(docs)

    def sort(self, key, direction):
        self._docs.sort(key=lambda d: d[key], reverse=direction < 0)
        return self

    def limit(self, n):
        self._docs = self._docs[:n]
        return self

    def __aiter__(self):
        self._iter = iter(self._docs)
        return self

    async def __anext__(self):
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration


class FakeCollection:
    def __init__(self):
        self.docs = []

    async def insert_one(self, doc):
        doc = dict(doc, _id=ObjectId())
        self.docs.append(doc)
        return FakeInsertResult(doc["_id"])

    def find(self, query):
        return FakeCursor(d for d in self.docs if all(d.get(k) == v for k, v in query.items()))

    async def find_one(self, query):
        async for doc in self.find(query):
            return doc
        return None


class FakeDatabase(dict):
    def __missing__(self, name):
        self[name] = FakeCollection()
        return self[name]


@pytest.fixture
def fake_db(monkeypatch):
    db = FakeDatabase()
    monkeypatch.setattr(services, "get_database", lambda: db)
    return db


@pytest.fixture
def no_db(monkeypatch):
    monkeypatch.setattr(services, "get_database", lambda: None)
