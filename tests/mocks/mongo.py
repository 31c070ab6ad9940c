import copy
from types import SimpleNamespace
from typing import Any, Dict, List, Optional


def _matches(document: Dict[str, Any], query: Dict[str, Any]) -> bool:
    return all(document.get(key) == value for key, value in query.items())


def _project(document: Dict[str, Any], projection: Optional[Dict[str, int]]):
    result = copy.deepcopy(document)
    for key, include in (projection or {}).items():
        if not include:
            result.pop(key, None)
    return result


class MockMongoCollection:
    def __init__(self):
        self.documents: List[Dict[str, Any]] = []
        self.bulk_requests: List[list] = []
        self._next_id = 0

    def update_one(self, query, update, upsert=False):
        for document in self.documents:
            if _matches(document, query):
                document.update(copy.deepcopy(update["$set"]))
                return SimpleNamespace(matched_count=1, upserted_id=None)
        if upsert:
            self._next_id += 1
            document = {"_id": self._next_id, **query}
            document.update(copy.deepcopy(update["$set"]))
            self.documents.append(document)
            return SimpleNamespace(matched_count=0, upserted_id=self._next_id)
        return SimpleNamespace(matched_count=0, upserted_id=None)

    def find_one(self, query, projection=None):
        for document in self.documents:
            if _matches(document, query):
                return _project(document, projection)
        return None

    def find(self, query, projection=None):
        return [
            _project(document, projection)
            for document in self.documents
            if _matches(document, query)
        ]

    def delete_one(self, query):
        for index, document in enumerate(self.documents):
            if _matches(document, query):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    def bulk_write(self, requests, ordered=True):
        self.bulk_requests.append(list(requests))
        for request in requests:
            # pymongo keeps the operation arguments on private attributes
            self.update_one(request._filter, request._doc, upsert=request._upsert)
        return SimpleNamespace(upserted_count=len(requests))


class _AsyncCursor:
    def __init__(self, documents):
        self._documents = documents

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for document in self._documents:
            yield document


class MockAsyncMongoCollection:
    def __init__(self, collection: MockMongoCollection):
        self._collection = collection

    async def update_one(self, query, update, upsert=False):
        return self._collection.update_one(query, update, upsert=upsert)

    async def find_one(self, query, projection=None):
        return self._collection.find_one(query, projection)

    def find(self, query, projection=None):
        return _AsyncCursor(self._collection.find(query, projection))

    async def delete_one(self, query):
        return self._collection.delete_one(query)

    async def bulk_write(self, requests, ordered=True):
        return self._collection.bulk_write(requests, ordered=ordered)


class _MockDatabase(dict):
    def __missing__(self, name):
        collection = MockMongoCollection()
        self[name] = collection
        return collection


class MockMongoClient:
    def __init__(self):
        self.databases: Dict[str, _MockDatabase] = {}

    def __getitem__(self, name: str) -> _MockDatabase:
        return self.databases.setdefault(name, _MockDatabase())


class MockAsyncMongoClient:
    """Async view over the same data as a MockMongoClient."""

    def __init__(self, sync_client: MockMongoClient):
        self._sync_client = sync_client

    def __getitem__(self, name: str):
        return _AsyncDatabase(self._sync_client[name])


class _AsyncDatabase:
    def __init__(self, database: _MockDatabase):
        self._database = database

    def __getitem__(self, name: str) -> MockAsyncMongoCollection:
        return MockAsyncMongoCollection(self._database[name])
