"""
Pytest fixtures for bookstore-queries tests.

Provides an in-memory fake of the pymongo async client surface the
package uses, so the whole query run can be exercised without a server.
"""

from __future__ import annotations

import io
from types import SimpleNamespace
from typing import Any

import pytest
from bson import ObjectId
from loguru import logger
from rich.console import Console


class FakeServerState:
    """Documents and indexes for every namespace of the fake server."""

    def __init__(self) -> None:
        self.documents: dict[str, list[dict[str, Any]]] = {}
        self.indexes: dict[str, list[dict[str, Any]]] = {}
        self.clients: list[FakeAsyncMongoClient] = []
        # Exception raised by the next ping, if set
        self.ping_error: Exception | None = None
        # Method name -> exception raised by every collection call of that name
        self.fail_on: dict[str, Exception] = {}

    def client_factory(self, uri: str, **options: Any) -> FakeAsyncMongoClient:
        client = FakeAsyncMongoClient(self, uri, options)
        self.clients.append(client)
        return client

    def docs(self, namespace: str) -> list[dict[str, Any]]:
        return self.documents.setdefault(namespace, [])

    def index_docs(self, namespace: str) -> list[dict[str, Any]]:
        return self.indexes.setdefault(namespace, [])


class FakeCursor:
    """Mock for AsyncCursor."""

    def __init__(self, docs: list[dict[str, Any]], projection: dict[str, Any] | None) -> None:
        self._docs = docs
        self._projection = projection
        self._sort: list[tuple[str, int]] = []
        self._skip = 0
        self._limit = 0

    def sort(self, key_or_list: Any, direction: int = 1) -> FakeCursor:
        if isinstance(key_or_list, str):
            self._sort = [(key_or_list, direction)]
        else:
            self._sort = list(key_or_list)
        return self

    def skip(self, skip: int) -> FakeCursor:
        self._skip = skip
        return self

    def limit(self, limit: int) -> FakeCursor:
        self._limit = limit
        return self

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        results = _sorted([dict(doc) for doc in self._docs], self._sort)
        if self._skip:
            results = results[self._skip:]
        if self._limit:
            results = results[: self._limit]
        if length is not None:
            results = results[:length]
        return [_project(doc, self._projection) for doc in results]


class FakeCommandCursor:
    """Mock for AsyncCommandCursor."""

    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self._docs = docs

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        return list(self._docs if length is None else self._docs[:length])


class FakeCollection:
    """Mock for AsyncCollection."""

    def __init__(self, database: FakeDatabase, name: str) -> None:
        self.database = database
        self.name = name
        self.full_name = f"{database.name}.{name}"
        self._state = database.client.state

    @property
    def _docs(self) -> list[dict[str, Any]]:
        return self._state.docs(self.full_name)

    def _maybe_fail(self, method: str) -> None:
        if method in self._state.fail_on:
            raise self._state.fail_on[method]

    def find(self, filter: dict[str, Any] | None = None, projection: Any = None) -> FakeCursor:
        self._maybe_fail("find")
        return FakeCursor([d for d in self._docs if _matches(d, filter or {})], projection)

    async def find_one(self, filter: dict[str, Any] | None = None, projection: Any = None):
        self._maybe_fail("find_one")
        for doc in self._docs:
            if _matches(doc, filter or {}):
                return _project(dict(doc), projection)
        return None

    async def insert_many(self, documents: list[dict[str, Any]]):
        self._maybe_fail("insert_many")
        ids = []
        for document in documents:
            doc = dict(document)
            doc.setdefault("_id", ObjectId())
            self._docs.append(doc)
            ids.append(doc["_id"])
        return SimpleNamespace(inserted_ids=ids, acknowledged=True)

    async def update_one(self, filter: dict[str, Any], update: dict[str, Any]):
        self._maybe_fail("update_one")
        for doc in self._docs:
            if _matches(doc, filter):
                modified = _apply_update(doc, update)
                return SimpleNamespace(matched_count=1, modified_count=int(modified))
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def delete_one(self, filter: dict[str, Any]):
        self._maybe_fail("delete_one")
        for i, doc in enumerate(self._docs):
            if _matches(doc, filter):
                del self._docs[i]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def aggregate(self, pipeline: list[dict[str, Any]]) -> FakeCommandCursor:
        self._maybe_fail("aggregate")
        return FakeCommandCursor(_run_pipeline([dict(d) for d in self._docs], pipeline))

    async def create_index(self, keys: list[tuple[str, int]], **kwargs: Any) -> str:
        self._maybe_fail("create_index")
        name = kwargs.get("name") or "_".join(f"{k}_{d}" for k, d in keys)
        indexes = self._state.index_docs(self.full_name)
        if not any(ix["name"] == name for ix in indexes):
            indexes.append({"v": 2, "key": dict(keys), "name": name})
        return name

    async def list_indexes(self) -> FakeCommandCursor:
        self._maybe_fail("list_indexes")
        id_index = {"v": 2, "key": {"_id": 1}, "name": "_id_"}
        return FakeCommandCursor([id_index, *self._state.index_docs(self.full_name)])

    async def drop(self) -> None:
        self._maybe_fail("drop")
        self._state.documents.pop(self.full_name, None)
        self._state.indexes.pop(self.full_name, None)


class FakeDatabase:
    """Mock for AsyncDatabase."""

    def __init__(self, client: FakeAsyncMongoClient, name: str) -> None:
        self.client = client
        self.name = name
        self.commands: list[Any] = []

    def __getitem__(self, name: str) -> FakeCollection:
        return FakeCollection(self, name)

    async def command(self, command: Any) -> dict[str, Any]:
        self.commands.append(command)
        state = self.client.state
        if command == "ping":
            if state.ping_error is not None:
                raise state.ping_error
            return {"ok": 1.0}
        if isinstance(command, dict) and "explain" in command:
            if "explain" in state.fail_on:
                raise state.fail_on["explain"]
            return self._explain(command["explain"])
        return {"ok": 1.0}

    def _explain(self, find: dict[str, Any]) -> dict[str, Any]:
        namespace = f"{self.name}.{find['find']}"
        docs = self.client.state.docs(namespace)
        filter = find.get("filter", {})
        matched = [d for d in docs if _matches(d, filter)]

        index = _choose_index(self.client.state.index_docs(namespace), filter, find.get("hint"))
        if index is None:
            plan = {"stage": "COLLSCAN", "filter": filter}
            examined = len(docs)
        else:
            plan = {
                "stage": "FETCH",
                "inputStage": {"stage": "IXSCAN", "indexName": index["name"]},
            }
            examined = len(matched)

        return {
            "queryPlanner": {"namespace": namespace, "winningPlan": plan},
            "executionStats": {
                "nReturned": len(matched),
                "executionTimeMillis": 0,
                "totalDocsExamined": examined,
            },
            "ok": 1.0,
        }


class FakeAsyncMongoClient:
    """Mock for pymongo.AsyncMongoClient."""

    def __init__(self, state: FakeServerState, uri: str, options: dict[str, Any]) -> None:
        self.state = state
        self.uri = uri
        self.options = options
        self.closed = False
        self.admin = FakeDatabase(self, "admin")

    def __getitem__(self, name: str) -> FakeDatabase:
        return FakeDatabase(self, name)

    async def close(self) -> None:
        self.closed = True


def _choose_index(
    indexes: list[dict[str, Any]],
    filter: dict[str, Any],
    hint: Any,
) -> dict[str, Any] | None:
    if hint is not None:
        for index in indexes:
            if index["name"] == hint or index["key"] == hint:
                return index
        raise AssertionError(f"hint {hint!r} does not match an index")
    for index in indexes:
        if next(iter(index["key"])) in filter:
            return index
    return None


def _matches(doc: dict[str, Any], filter: dict[str, Any]) -> bool:
    """Check if document matches filter."""
    for key, value in filter.items():
        doc_value = doc.get(key)

        if isinstance(value, dict):
            for op, op_value in value.items():
                if op == "$eq":
                    if doc_value != op_value:
                        return False
                elif op == "$gt":
                    if doc_value is None or doc_value <= op_value:
                        return False
                elif op == "$gte":
                    if doc_value is None or doc_value < op_value:
                        return False
                elif op == "$lt":
                    if doc_value is None or doc_value >= op_value:
                        return False
                elif op == "$lte":
                    if doc_value is None or doc_value > op_value:
                        return False
                else:
                    raise AssertionError(f"unsupported operator {op}")
        elif doc_value != value:
            return False

    return True


def _apply_update(doc: dict[str, Any], update: dict[str, Any]) -> bool:
    """Apply update operators to document."""
    modified = False

    for op, fields in update.items():
        if op == "$set":
            for key, value in fields.items():
                if doc.get(key) != value:
                    doc[key] = value
                    modified = True
        elif op == "$inc":
            for key, value in fields.items():
                doc[key] = doc.get(key, 0) + value
                modified = True
        else:
            raise AssertionError(f"unsupported update operator {op}")

    return modified


def _project(doc: dict[str, Any], projection: dict[str, Any] | None) -> dict[str, Any]:
    """Apply projection to document."""
    if not projection:
        return doc

    include_mode = any(v for k, v in projection.items() if k != "_id")

    if include_mode:
        result = {key: doc[key] for key, include in projection.items() if include and key in doc}
        if "_id" in doc and projection.get("_id", 1):
            result = {"_id": doc["_id"], **result}
        return result
    return {k: v for k, v in doc.items() if projection.get(k, 1)}


def _sorted(docs: list[dict[str, Any]], sort: list[tuple[str, int]] | dict[str, int]) -> list[dict[str, Any]]:
    items = sort.items() if isinstance(sort, dict) else sort
    for field, direction in reversed(list(items)):
        docs.sort(key=lambda x: x.get(field, ""), reverse=(direction == -1))
    return docs


def _evaluate(expr: Any, doc: dict[str, Any]) -> Any:
    """Evaluate an aggregation expression against a document."""
    if isinstance(expr, str) and expr.startswith("$"):
        return doc.get(expr[1:])
    if isinstance(expr, dict):
        (op, args), = expr.items()
        values = [_evaluate(arg, doc) for arg in args]
        if op == "$subtract":
            return values[0] - values[1]
        if op == "$mod":
            return values[0] % values[1]
        raise AssertionError(f"unsupported expression {op}")
    return expr


def _run_pipeline(docs: list[dict[str, Any]], pipeline: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Run the $project/$group/$sort/$limit stages the package uses."""
    for stage in pipeline:
        (name, spec), = stage.items()
        if name == "$project":
            projected = []
            for doc in docs:
                out = {"_id": doc["_id"]} if spec.get("_id", 1) and "_id" in doc else {}
                for key, value in spec.items():
                    if key == "_id":
                        continue
                    if value == 1:
                        if key in doc:
                            out[key] = doc[key]
                    else:
                        out[key] = _evaluate(value, doc)
                projected.append(out)
            docs = projected
        elif name == "$group":
            groups: dict[Any, list[dict[str, Any]]] = {}
            for doc in docs:
                groups.setdefault(_evaluate(spec["_id"], doc), []).append(doc)
            docs = []
            for key, members in groups.items():
                out = {"_id": key}
                for field, accumulator in spec.items():
                    if field == "_id":
                        continue
                    (op, arg), = accumulator.items()
                    values = [_evaluate(arg, m) for m in members]
                    if op == "$sum":
                        out[field] = sum(values)
                    elif op == "$avg":
                        out[field] = sum(values) / len(values)
                    elif op == "$push":
                        out[field] = values
                    else:
                        raise AssertionError(f"unsupported accumulator {op}")
                docs.append(out)
        elif name == "$sort":
            docs = _sorted(docs, spec)
        elif name == "$limit":
            docs = docs[:spec]
        else:
            raise AssertionError(f"unsupported stage {name}")
    return docs


@pytest.fixture
def fake_server(monkeypatch: pytest.MonkeyPatch) -> FakeServerState:
    """Replace AsyncMongoClient with the in-memory fake."""
    state = FakeServerState()
    monkeypatch.setattr("bookstore_queries.client.AsyncMongoClient", state.client_factory)
    return state


@pytest.fixture
async def client(fake_server: FakeServerState):
    """Create a connected BookstoreClient."""
    from bookstore_queries import BookstoreClient

    client = BookstoreClient("mongodb://test:27017")
    await client.connect()
    return client


@pytest.fixture
async def books(client):
    """The (empty) books collection."""
    return client.books


@pytest.fixture
async def seeded_books(books):
    """The books collection loaded with SAMPLE_BOOKS."""
    from bookstore_queries import seed_books

    await seed_books(books)
    return books


@pytest.fixture
def console() -> Console:
    """A console that prints into a string buffer."""
    return Console(file=io.StringIO(), width=120, color_system=None)


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during the test."""
    messages: list[Any] = []
    sink_id = logger.add(messages.append, level="DEBUG", format="{level} {message}")
    yield messages
    logger.remove(sink_id)
