"""Shared fixtures and in-memory store doubles for the test suite."""

from __future__ import annotations

import threading
from types import SimpleNamespace
from typing import Any, Dict, Iterable, Iterator, List, Optional

import bson
import pytest
from pymongo.errors import AutoReconnect, DuplicateKeyError, OperationFailure


class FakeCursor:
    """Cursor double that yields pre-baked payloads and records closing."""

    def __init__(self, docs: List[Any], fail_after: Optional[int] = None, error: Optional[Exception] = None) -> None:
        self.docs = docs
        self.fail_after = fail_after
        self.error = error or AutoReconnect("connection dropped")
        self.closed = False
        self.yielded = 0

    def __iter__(self) -> Iterator[Any]:
        for index, doc in enumerate(self.docs):
            if self.fail_after is not None and index == self.fail_after:
                raise self.error
            self.yielded += 1
            yield doc

    def close(self) -> None:
        self.closed = True


class FakeCollection:
    """Just enough of a pymongo Collection for extractors and loaders."""

    def __init__(
        self,
        name: str,
        docs: Optional[Iterable[Any]] = None,
        fail_on_insert: Iterable[str] = (),
        fail_lookup: bool = False,
        fail_after: Optional[int] = None,
        cursor_error: Optional[Exception] = None,
        fail_index: bool = False,
    ) -> None:
        self.name = name
        self.docs: List[Any] = list(docs or [])
        self.fail_on_insert = set(fail_on_insert)
        self.fail_lookup = fail_lookup
        self.fail_after = fail_after
        self.cursor_error = cursor_error
        self.fail_index = fail_index
        self.unique_keys: List[str] = []
        self.cursors: List[FakeCursor] = []
        self.last_filter: Optional[Dict[str, Any]] = None
        self._lock = threading.Lock()

    def with_options(self, codec_options: Any = None) -> "FakeCollection":
        return self

    def find(self, filter: Optional[Dict[str, Any]] = None, batch_size: int = 0) -> FakeCursor:
        self.last_filter = filter
        cursor = FakeCursor(list(self.docs), fail_after=self.fail_after, error=self.cursor_error)
        self.cursors.append(cursor)
        return cursor

    def create_index(self, keys: List[Any], unique: bool = False) -> str:
        if self.fail_index:
            raise OperationFailure("E11000 duplicate key error building index")
        if unique:
            self.unique_keys.extend(name for name, _ in keys)
        return "_".join(f"{name}_{direction}" for name, direction in keys)

    def find_one(self, query: Dict[str, Any], projection: Any = None) -> Optional[Dict[str, Any]]:
        if self.fail_lookup:
            raise AutoReconnect("lookup timed out")
        with self._lock:
            for doc in self.docs:
                if isinstance(doc, dict) and all(doc.get(k) == v for k, v in query.items()):
                    return doc
        return None

    def insert_one(self, document: Dict[str, Any]) -> Any:
        if document.get("id") in self.fail_on_insert:
            raise DuplicateKeyError("E11000 duplicate key error")
        with self._lock:
            for key in self.unique_keys:
                if any(isinstance(doc, dict) and doc.get(key) == document.get(key) for doc in self.docs):
                    raise DuplicateKeyError(f"E11000 duplicate key error on {key}")
            self.docs.append(dict(document))

        return SimpleNamespace(inserted_id=len(self.docs))


class FakeDatabase:
    def __init__(self) -> None:
        self.collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]

    def __setitem__(self, name: str, collection: FakeCollection) -> None:
        self.collections[name] = collection


class FakeMongoClient:
    def __init__(self) -> None:
        self.databases: Dict[str, FakeDatabase] = {}
        self.closed = False

    def __getitem__(self, name: str) -> FakeDatabase:
        if name not in self.databases:
            self.databases[name] = FakeDatabase()
        return self.databases[name]

    def close(self) -> None:
        self.closed = True


def make_bot(index: int, **overrides: Any) -> Dict[str, Any]:
    """A well-formed legacy bot document."""
    doc = {
        "_id": f"obj-{index}",
        "botID": f"bot-{index}",
        "username": f"helper{index}",
        "discrim": "0001",
        "ownerName": "alice",
        "shortDesc": "A helpful bot",
        "longDesc": "Does helpful things",
        "tags": ["utility"],
        "votes": index,
    }
    doc.update(overrides)
    return doc


def corrupt_bson() -> bytes:
    """BSON bytes with a valid frame but an unknown element type."""
    payload = bytearray(bson.encode({"a": 1}))
    payload[4] = 0x20
    return bytes(payload)


@pytest.fixture
def mongo_client() -> FakeMongoClient:
    return FakeMongoClient()
