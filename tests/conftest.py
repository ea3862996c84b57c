# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Shared fixtures, including an in-memory stand-in for the RethinkDB driver."""

from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Any

import pytest
import pytest_asyncio
from rethinkdb.errors import ReqlDriverError, ReqlOpFailedError

from rethinkbox.cache.adapters.rethinkdb import RethinkDBCacheAdapter


class _MinVal:
    def __repr__(self) -> str:
        return "r.minval"


class FakeConnection:
    def __init__(self, options: dict[str, Any]) -> None:
        self.options = options
        self.open = True

    async def close(self) -> None:
        self.open = False


class FakeQuery:
    """A query term whose run() executes *action* against the fake server."""

    def __init__(self, r: FakeRethinkDB, name: str, action: Callable[[], Any]) -> None:
        self._r = r
        self.name = name
        self._action = action

    async def run(self, connection: FakeConnection) -> Any:
        self._r._before_run(connection, self.name)
        return self._action()


class FakeGet(FakeQuery):
    def __init__(self, table: FakeTable, key: str) -> None:
        super().__init__(table._r, "get", lambda: copy.deepcopy(table._rows().get(key)))
        self._table = table
        self._key = key

    def delete(self) -> FakeQuery:
        def action() -> dict[str, Any]:
            existed = self._table._rows().pop(self._key, None) is not None
            return _write_result(deleted=int(existed), skipped=int(not existed))

        return FakeQuery(self._r, "delete", action)

    def replace(self, document: dict[str, Any]) -> FakeQuery:
        def action() -> dict[str, Any]:
            rows = self._table._rows()
            existed = self._key in rows
            rows[self._key] = copy.deepcopy(document)
            return _write_result(replaced=int(existed), inserted=int(not existed))

        return FakeQuery(self._r, "replace", action)


class FakeBetween:
    def __init__(self, table: FakeTable, lower: Any, upper: Any, index: str) -> None:
        self._table = table
        self._lower = lower
        self._upper = upper
        self._index = index

    def delete(self) -> FakeQuery:
        def action() -> dict[str, Any]:
            rows = self._table._rows()
            doomed = [
                key
                for key, row in rows.items()
                if self._index in row
                and (isinstance(self._lower, _MinVal) or row[self._index] >= self._lower)
                and row[self._index] < self._upper
            ]
            for key in doomed:
                del rows[key]
            return _write_result(deleted=len(doomed))

        return FakeQuery(self._table._r, "between_delete", action)


class FakeTable:
    def __init__(self, r: FakeRethinkDB, db: str, name: str) -> None:
        self._r = r
        self._db = db
        self._name = name

    def _rows(self) -> dict[str, dict[str, Any]]:
        return self._r._table(self._db, self._name)["rows"]

    def _indexes(self) -> list[str]:
        return self._r._table(self._db, self._name)["indexes"]

    def get(self, key: str) -> FakeGet:
        return FakeGet(self, key)

    def insert(self, document: dict[str, Any], conflict: str = "error") -> FakeQuery:
        def action() -> dict[str, Any]:
            rows = self._rows()
            key = document["id"]
            if key in rows and conflict == "error":
                return _write_result(errors=1, first_error=f"Duplicate primary key `id`: {key!r}")
            existed = key in rows
            rows[key] = copy.deepcopy(document)
            return _write_result(replaced=int(existed), inserted=int(not existed))

        return FakeQuery(self._r, "insert", action)

    def between(self, lower: Any, upper: Any, index: str = "id") -> FakeBetween:
        return FakeBetween(self, lower, upper, index)

    def index_list(self) -> FakeQuery:
        return FakeQuery(self._r, "index_list", lambda: list(self._indexes()))

    def index_create(self, index: str) -> FakeQuery:
        def action() -> dict[str, Any]:
            if index in self._indexes():
                raise ReqlOpFailedError(f"Index `{index}` already exists on table `{self._db}.{self._name}`.")
            self._indexes().append(index)
            return {"created": 1}

        return FakeQuery(self._r, "index_create", action)

    def index_wait(self, index: str) -> FakeQuery:
        return FakeQuery(self._r, "index_wait", lambda: [{"index": index, "ready": True}])


class FakeDb:
    def __init__(self, r: FakeRethinkDB, name: str) -> None:
        self._r = r
        self._name = name

    def table(self, name: str) -> FakeTable:
        return FakeTable(self._r, self._name, name)

    def table_list(self) -> FakeQuery:
        return FakeQuery(self._r, "table_list", lambda: list(self._r._database(self._name)))

    def table_create(self, name: str) -> FakeQuery:
        def action() -> dict[str, Any]:
            tables = self._r._database(self._name)
            if name in tables:
                raise ReqlOpFailedError(f"Table `{self._name}.{name}` already exists.")
            tables[name] = {"rows": {}, "indexes": []}
            return {"tables_created": 1}

        return FakeQuery(self._r, "table_create", action)


def _write_result(**fields: Any) -> dict[str, Any]:
    result = {"inserted": 0, "replaced": 0, "unchanged": 0, "deleted": 0, "skipped": 0, "errors": 0}
    result.update(fields)
    return result


class FakeRethinkDB:
    """Stand-in for an asyncio ``RethinkDB()`` driver instance.

    Implements the query-builder surface the cache adapter uses and keeps
    databases in a dict. Tests can inject failures per query name with
    ``fail_on`` and run side effects before a query with ``hooks``.
    """

    minval = _MinVal()

    def __init__(self) -> None:
        self.databases: dict[str, dict[str, dict[str, Any]]] = {}
        self.connections: list[FakeConnection] = []
        self.connect_calls: list[dict[str, Any]] = []
        self.connect_error: Exception | None = None
        self.queries: list[str] = []
        self.fail_on: dict[str, Exception] = {}
        self.hooks: dict[str, Callable[[], None]] = {}

    async def connect(self, **options: Any) -> FakeConnection:
        self.connect_calls.append(options)
        if self.connect_error is not None:
            raise self.connect_error
        connection = FakeConnection(options)
        self.connections.append(connection)
        return connection

    def db(self, name: str) -> FakeDb:
        return FakeDb(self, name)

    def db_list(self) -> FakeQuery:
        return FakeQuery(self, "db_list", lambda: list(self.databases))

    def db_create(self, name: str) -> FakeQuery:
        def action() -> dict[str, Any]:
            if name in self.databases:
                raise ReqlOpFailedError(f"Database `{name}` already exists.")
            self.databases[name] = {}
            return {"dbs_created": 1}

        return FakeQuery(self, "db_create", action)

    def rows(self, db: str = "catbox", table: str = "catbox") -> dict[str, dict[str, Any]]:
        return self._table(db, table)["rows"]

    def create_table(self, db: str = "catbox", table: str = "catbox", indexes: tuple[str, ...] = ()) -> None:
        self.databases.setdefault(db, {})[table] = {"rows": {}, "indexes": list(indexes)}

    def _database(self, name: str) -> dict[str, dict[str, Any]]:
        if name not in self.databases:
            raise ReqlOpFailedError(f"Database `{name}` does not exist.")
        return self.databases[name]

    def _table(self, db: str, name: str) -> dict[str, Any]:
        tables = self._database(db)
        if name not in tables:
            raise ReqlOpFailedError(f"Table `{db}.{name}` does not exist.")
        return tables[name]

    def _before_run(self, connection: FakeConnection, name: str) -> None:
        if not connection.open:
            raise ReqlDriverError("Connection is closed.")
        self.queries.append(name)
        hook = self.hooks.pop(name, None)
        if hook is not None:
            hook()
        error = self.fail_on.pop(name, None)
        if error is not None:
            raise error


@pytest.fixture
def fake_r() -> FakeRethinkDB:
    return FakeRethinkDB()


@pytest_asyncio.fixture
async def adapter(fake_r: FakeRethinkDB):
    adapter = RethinkDBCacheAdapter(driver=fake_r)
    await adapter.start()
    yield adapter
    await adapter.stop()
