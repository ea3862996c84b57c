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
"""RethinkDB-backed cache adapter."""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Mapping
from datetime import timedelta
from typing import Any

from rethinkdb import RethinkDB
from rethinkdb.errors import ReqlError

from rethinkbox.cache.exceptions import (
    CacheBackendException,
    CacheConnectionException,
    CacheNotStartedException,
)
from rethinkbox.cache.keys import encode_key, validate_segment_name
from rethinkbox.cache.schema import ensure_schema
from rethinkbox.cache.sweeper import ExpirySweeper
from rethinkbox.cache.types import (
    EXPIRES_AT_INDEX,
    CacheEnvelope,
    CacheKey,
    CacheRecord,
    envelope_from_document,
    utcnow,
    validate_ttl,
)
from rethinkbox.config.properties.rethinkdb import RethinkDBCacheProperties

_logger = logging.getLogger(__name__)


def asyncio_driver() -> Any:
    """A RethinkDB driver instance whose queries return awaitables."""
    r = RethinkDB()
    r.set_loop_type("asyncio")
    return r


class RethinkDBCacheAdapter:
    """Cache plugin that stores one row per cache key in a RethinkDB table.

    Rows carry the value, the write time, the ttl and an ``expiresAt`` time
    indexed for the background sweep. Reads do not check ``expiresAt`` unless
    ``expire_on_read`` is set: an expired row stays visible until the next
    sweep removes it.

    All operations capture the connection once and run independently; there
    is no locking around the shared connection.
    """

    def __init__(
        self,
        settings: RethinkDBCacheProperties | None = None,
        driver: Any = None,
        **options: Any,
    ) -> None:
        if settings is not None and options:
            raise TypeError("Pass either a settings object or keyword options, not both")
        self._settings = settings or RethinkDBCacheProperties.from_options(**options)
        self._r = driver if driver is not None else asyncio_driver()
        self._table = self._r.db(self._settings.db).table(self._settings.table)
        self._connection: Any = None
        self._connected = False
        self._sweeper: ExpirySweeper | None = None
        self._start_lock = asyncio.Lock()
        # Bumped by every stop(); a start() that sees it change gives up.
        self._generation = 0

    @property
    def settings(self) -> RethinkDBCacheProperties:
        return self._settings

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Connect, bootstrap the schema and start the expiry sweep.

        Returns immediately when already started. On any failure the adapter
        is torn down and a CacheConnectionException is raised. A stop() that
        lands while start() is still connecting or bootstrapping wins: the
        new connection is closed and start() raises without becoming ready.
        """
        async with self._start_lock:
            if self._connection is not None:
                return

            settings = self._settings
            generation = self._generation
            try:
                connection = await self._r.connect(**settings.connect_options())
            except Exception as exc:
                await self.stop()
                raise CacheConnectionException(
                    f"Could not connect to RethinkDB at {settings.host}:{settings.port}: {exc}",
                    code="CACHE_CONNECT_FAILED",
                    context={"host": settings.host, "port": settings.port},
                ) from exc
            if generation != self._generation:
                await self._close_connection(connection)
                raise self._start_aborted()
            self._connection = connection

            try:
                await ensure_schema(self._r, connection, settings.db, settings.table)
            except Exception as exc:
                if generation != self._generation:
                    raise self._start_aborted() from exc
                await self.stop()
                raise CacheConnectionException(
                    f"Could not prepare {settings.db}.{settings.table}: {exc}",
                    code="CACHE_BOOTSTRAP_FAILED",
                    context={"db": settings.db, "table": settings.table},
                ) from exc
            if generation != self._generation:
                raise self._start_aborted()

            self._sweeper = ExpirySweeper(
                functools.partial(self._delete_expired, connection),
                timedelta(milliseconds=settings.flush_interval),
            )
            self._sweeper.start()
            self._connected = True
            _logger.info(
                "RethinkDB cache ready on %s:%s (%s.%s)",
                settings.host,
                settings.port,
                settings.db,
                settings.table,
            )

    async def stop(self) -> None:
        """Stop the sweep and close the connection. Safe to call repeatedly."""
        sweeper, self._sweeper = self._sweeper, None
        connection, self._connection = self._connection, None
        self._connected = False
        self._generation += 1

        if sweeper is not None:
            await sweeper.stop()
        if connection is not None:
            await self._close_connection(connection)

    def is_ready(self) -> bool:
        return self._connected

    def validate_segment_name(self, name: str) -> Exception | None:
        return validate_segment_name(name)

    # ------------------------------------------------------------------
    # Cache operations
    # ------------------------------------------------------------------

    async def get(self, key: CacheKey | Mapping[str, Any]) -> CacheEnvelope | None:
        """Look up a key. Returns ``None`` on a miss."""
        connection = self._require_connection()
        document = await self._lookup(connection, encode_key(key))
        if document is None:
            return None

        envelope = envelope_from_document(document)
        if self._settings.expire_on_read and envelope.is_expired():
            return None
        return envelope

    async def set(self, key: CacheKey | Mapping[str, Any], value: Any, ttl: int) -> None:
        """Write the full row for *key*, replacing any existing one."""
        connection = self._require_connection()
        storage_key = encode_key(key)
        document = CacheRecord.create(storage_key, value, validate_ttl(ttl)).to_document()

        if self._settings.upsert == "atomic":
            query = self._table.insert(document, conflict="replace")
        elif await self._lookup(connection, storage_key) is None:
            # Not atomic: a concurrent writer may insert between the lookup
            # and this insert, which then fails with a duplicate key error.
            query = self._table.insert(document)
        else:
            query = self._table.get(storage_key).replace(document)

        self._check_write(await self._run(query, connection), storage_key)

    async def drop(self, key: CacheKey | Mapping[str, Any]) -> None:
        """Delete the row for *key*. Deleting a missing key succeeds."""
        connection = self._require_connection()
        storage_key = encode_key(key)
        result = await self._run(self._table.get(storage_key).delete(), connection)
        self._check_write(result, storage_key)

    async def sweep_once(self) -> int:
        """Delete every expired row now; returns how many were removed."""
        return await self._delete_expired(self._require_connection())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    async def _close_connection(connection: Any) -> None:
        try:
            await connection.close()
        except Exception:
            _logger.warning("Failed to close RethinkDB connection cleanly", exc_info=True)

    def _start_aborted(self) -> CacheConnectionException:
        return CacheConnectionException(
            "Adapter was stopped while starting",
            code="CACHE_START_ABORTED",
            context={"host": self._settings.host, "port": self._settings.port},
        )

    def _require_connection(self) -> Any:
        connection = self._connection
        if connection is None or not self._connected:
            raise CacheNotStartedException()
        return connection

    async def _lookup(self, connection: Any, storage_key: str) -> Mapping[str, Any] | None:
        return await self._run(self._table.get(storage_key), connection)

    async def _delete_expired(self, connection: Any) -> int:
        query = self._table.between(self._r.minval, utcnow(), index=EXPIRES_AT_INDEX).delete()
        result = await self._run(query, connection)
        self._check_write(result)
        return int(result.get("deleted", 0))

    @staticmethod
    async def _run(query: Any, connection: Any) -> Any:
        try:
            return await query.run(connection)
        except ReqlError as exc:
            raise CacheBackendException(str(exc), code="CACHE_BACKEND_ERROR") from exc

    @staticmethod
    def _check_write(result: Mapping[str, Any], storage_key: str | None = None) -> None:
        # Write queries report failures in the result document instead of raising.
        if result.get("errors"):
            context = {"key": storage_key} if storage_key is not None else {}
            raise CacheBackendException(
                str(result.get("first_error", "Write failed")),
                code="CACHE_WRITE_FAILED",
                context=context,
            )
