"""Shared pytest fixtures.

FakeDatabase implements the slice of pymongo's async database/collection API
the services use, so tests run without a MongoDB server.
"""

import copy
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import pytest
from fastapi.testclient import TestClient
from pymongo import ReturnDocument
from pymongo.errors import ConnectionFailure, DuplicateKeyError, ServerSelectionTimeoutError

from recipebox.app import App
from recipebox.config import Config
from recipebox.web.server import create_fastapi_app


@dataclass
class FakeInsertOneResult:
    inserted_id: Any


@dataclass
class FakeUpdateResult:
    matched_count: int
    modified_count: int


@dataclass
class FakeDeleteResult:
    deleted_count: int


def _bson_precision(value: Any) -> Any:
    """Drop sub-millisecond detail from datetimes, as a BSON round trip does."""
    if isinstance(value, datetime):
        return value.replace(microsecond=value.microsecond // 1000 * 1000)
    if isinstance(value, dict):
        return {key: _bson_precision(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_bson_precision(item) for item in value]
    return value


def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    return all(doc.get(key) == value for key, value in query.items())


class FakeCursor:
    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self._docs = docs

    def sort(self, key_or_list: Any, direction: int = 1) -> "FakeCursor":
        keys = key_or_list if isinstance(key_or_list, list) else [(key_or_list, direction)]
        # Stable sorts applied from the least significant key
        for key, order in reversed(keys):
            self._docs.sort(key=lambda doc, key=key: doc[key], reverse=order == -1)
        return self

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        return [copy.deepcopy(doc) for doc in self._docs[:length]]

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self._docs:
            yield copy.deepcopy(doc)


class FakeCollection:
    def __init__(self, database: "FakeDatabase", name: str) -> None:
        self.database = database
        self.name = name
        self.docs: list[dict[str, Any]] = []
        self.unique_fields: list[str] = ["_id"]
        self.indexes: list[list[tuple[str, int]]] = []

    def _check_connection(self) -> None:
        if self.database.broken:
            raise ConnectionFailure("connection closed")

    async def create_index(self, keys: list[tuple[str, int]], unique: bool = False, **_: Any) -> str:
        self.indexes.append(keys)
        if unique:
            self.unique_fields.extend(key for key, _ in keys)
        return "_".join(f"{key}_{direction}" for key, direction in keys)

    async def insert_one(self, document: dict[str, Any]) -> FakeInsertOneResult:
        self._check_connection()
        for field in self.unique_fields:
            if any(doc.get(field) == document.get(field) for doc in self.docs):
                raise DuplicateKeyError(f"E11000 duplicate key error collection: {self.name} index: {field}")
        self.docs.append(_bson_precision(copy.deepcopy(document)))
        return FakeInsertOneResult(inserted_id=document["_id"])

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        self._check_connection()
        doc = next((d for d in self.docs if _matches(d, query)), None)
        return copy.deepcopy(doc)

    def find(self, query: dict[str, Any] | None = None) -> FakeCursor:
        self._check_connection()
        return FakeCursor([d for d in self.docs if _matches(d, query or {})])

    async def count_documents(self, query: dict[str, Any]) -> int:
        self._check_connection()
        return sum(1 for d in self.docs if _matches(d, query))

    async def update_one(self, query: dict[str, Any], update: dict[str, Any]) -> FakeUpdateResult:
        self._check_connection()
        doc = next((d for d in self.docs if _matches(d, query)), None)
        if doc is None:
            return FakeUpdateResult(matched_count=0, modified_count=0)
        doc.update(_bson_precision(copy.deepcopy(update.get("$set", {}))))
        return FakeUpdateResult(matched_count=1, modified_count=1)

    async def delete_one(self, query: dict[str, Any]) -> FakeDeleteResult:
        self._check_connection()
        for index, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[index]
                return FakeDeleteResult(deleted_count=1)
        return FakeDeleteResult(deleted_count=0)

    async def find_one_and_update(
        self,
        query: dict[str, Any],
        update: dict[str, Any],
        upsert: bool = False,
        return_document: bool = ReturnDocument.BEFORE,
    ) -> dict[str, Any] | None:
        self._check_connection()
        doc = next((d for d in self.docs if _matches(d, query)), None)
        before = copy.deepcopy(doc)
        if doc is None:
            if not upsert:
                return None
            doc = dict(query)
            self.docs.append(doc)
        for key, amount in update.get("$inc", {}).items():
            doc[key] = doc.get(key, 0) + amount
        return copy.deepcopy(doc) if return_document == ReturnDocument.AFTER else before


class FakeDatabase:
    def __init__(self, available: bool = True) -> None:
        self.name = "recipebox_test"
        self.available = available
        self.broken = False  # set True to fail operations after startup
        self.collections: dict[str, FakeCollection] = {}

    def get_collection(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(self, name)
        return self.collections[name]

    async def command(self, command: str) -> dict[str, Any]:
        if not self.available:
            raise ServerSelectionTimeoutError("localhost:27017: [Errno 111] Connection refused")
        return {"ok": 1.0}


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def config():
    return Config(
        database_url="mongodb://localhost:27017/recipebox_test",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
    )


@pytest.fixture
def fake_database():
    return FakeDatabase()


@pytest.fixture
def offline_database():
    return FakeDatabase(available=False)


@pytest.fixture
def app(config, fake_database):
    return App(config, fake_database)  # type: ignore[arg-type]


@pytest.fixture
def client(app, config):
    with TestClient(create_fastapi_app(app, config)) as test_client:
        yield test_client


@pytest.fixture
def offline_client(config, offline_database):
    """Gateway whose store never answered the startup ping."""
    app = App(config, offline_database)  # type: ignore[arg-type]
    with TestClient(create_fastapi_app(app, config)) as test_client:
        yield test_client


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def signup(client):
    """Sign up a user through the API and return its {token, id, username} body."""

    def _signup(username: str, password: str = "secret1") -> dict[str, Any]:
        response = client.post("/api/auth/signup", json={"username": username, "password": password})
        assert response.status_code == 201, response.text
        return response.json()

    return _signup


@pytest.fixture
def headers():
    return auth_header
