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
"""In-process cache plugin with the same record lifecycle as the RethinkDB adapter."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import timedelta
from typing import Any

from rethinkbox.cache.exceptions import CacheNotStartedException
from rethinkbox.cache.keys import encode_key, validate_segment_name
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
from rethinkbox.config.properties.rethinkdb import DEFAULT_FLUSH_INTERVAL


class InMemoryCacheAdapter:
    """Dict-backed cache plugin for development and host tests.

    Rows are stored in the same document shape the RethinkDB adapter writes,
    expire lazily the same way, and are reclaimed by the same sweeper.
    """

    def __init__(self, flush_interval: int = DEFAULT_FLUSH_INTERVAL, expire_on_read: bool = False) -> None:
        self._rows: dict[str, dict[str, Any]] = {}
        self._flush_interval = flush_interval
        self._expire_on_read = expire_on_read
        self._sweeper: ExpirySweeper | None = None
        self._started = False

    async def start(self) -> None:
        if self._started:
            return
        self._sweeper = ExpirySweeper(
            self.sweep_once,
            timedelta(milliseconds=self._flush_interval),
            name="rethinkbox-memory-sweeper",
        )
        self._sweeper.start()
        self._started = True

    async def stop(self) -> None:
        sweeper, self._sweeper = self._sweeper, None
        self._started = False
        if sweeper is not None:
            await sweeper.stop()

    def is_ready(self) -> bool:
        return self._started

    def validate_segment_name(self, name: str) -> Exception | None:
        return validate_segment_name(name)

    async def get(self, key: CacheKey | Mapping[str, Any]) -> CacheEnvelope | None:
        self._require_started()
        document = self._rows.get(encode_key(key))
        if document is None:
            return None
        envelope = envelope_from_document(document)
        if self._expire_on_read and envelope.is_expired():
            return None
        return envelope

    async def set(self, key: CacheKey | Mapping[str, Any], value: Any, ttl: int) -> None:
        self._require_started()
        storage_key = encode_key(key)
        self._rows[storage_key] = CacheRecord.create(storage_key, value, validate_ttl(ttl)).to_document()

    async def drop(self, key: CacheKey | Mapping[str, Any]) -> None:
        self._require_started()
        self._rows.pop(encode_key(key), None)

    async def sweep_once(self) -> int:
        """Remove rows whose ``expiresAt`` is in the past."""
        now = utcnow()
        expired = [
            k for k, doc in self._rows.items() if doc.get(EXPIRES_AT_INDEX) is not None and doc[EXPIRES_AT_INDEX] < now
        ]
        for storage_key in expired:
            del self._rows[storage_key]
        return len(expired)

    def size(self) -> int:
        """Number of stored rows, expired ones included."""
        return len(self._rows)

    def _require_started(self) -> None:
        if not self._started:
            raise CacheNotStartedException()
