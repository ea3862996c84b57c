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
"""Tests for InMemoryCacheAdapter."""

from __future__ import annotations

import asyncio

import pytest

from rethinkbox.cache.adapters.memory import InMemoryCacheAdapter
from rethinkbox.cache.exceptions import (
    CacheIntegrityException,
    CacheNotStartedException,
    CacheValidationException,
)
from rethinkbox.cache.keys import encode_key
from rethinkbox.cache.ports.outbound import CachePlugin
from rethinkbox.cache.types import CacheKey, utcnow
from rethinkbox.kernel.lifecycle import Lifecycle

KEY = CacheKey(segment="pages", id="/home")


class TestInMemoryCacheAdapter:
    def test_protocol_compliance(self):
        adapter = InMemoryCacheAdapter()
        assert isinstance(adapter, CachePlugin)
        assert isinstance(adapter, Lifecycle)

    @pytest.mark.asyncio
    async def test_lifecycle(self):
        adapter = InMemoryCacheAdapter()
        assert adapter.is_ready() is False
        await adapter.start()
        await adapter.start()
        assert adapter.is_ready() is True
        await adapter.stop()
        await adapter.stop()
        assert adapter.is_ready() is False

    @pytest.mark.asyncio
    async def test_operations_require_start(self):
        adapter = InMemoryCacheAdapter()
        with pytest.raises(CacheNotStartedException):
            await adapter.get(KEY)
        with pytest.raises(CacheNotStartedException):
            await adapter.set(KEY, "v", 10)
        with pytest.raises(CacheNotStartedException):
            await adapter.drop(KEY)

    @pytest.mark.asyncio
    async def test_set_get_drop(self):
        adapter = InMemoryCacheAdapter()
        await adapter.start()
        try:
            assert await adapter.get(KEY) is None
            await adapter.set(KEY, "<html>", 1000)
            envelope = await adapter.get(KEY)
            assert envelope is not None
            assert envelope.item == "<html>"
            assert envelope.ttl == 1000

            await adapter.set(KEY, "<html2>", 1000)
            envelope = await adapter.get(KEY)
            assert envelope is not None
            assert envelope.item == "<html2>"

            await adapter.drop(KEY)
            await adapter.drop(KEY)
            assert await adapter.get(KEY) is None
        finally:
            await adapter.stop()

    @pytest.mark.asyncio
    async def test_rejects_invalid_ttl(self):
        adapter = InMemoryCacheAdapter()
        await adapter.start()
        try:
            with pytest.raises(CacheValidationException):
                await adapter.set(KEY, "v", 0)
        finally:
            await adapter.stop()

    @pytest.mark.asyncio
    async def test_corrupt_row(self):
        adapter = InMemoryCacheAdapter()
        await adapter.start()
        try:
            adapter._rows[encode_key(KEY)] = {"id": encode_key(KEY), "ttl": 5}
            with pytest.raises(CacheIntegrityException):
                await adapter.get(KEY)
        finally:
            await adapter.stop()

    @pytest.mark.asyncio
    async def test_expired_rows_visible_until_swept(self):
        adapter = InMemoryCacheAdapter()
        await adapter.start()
        try:
            await adapter.set(KEY, "v", 1)
            await asyncio.sleep(0.01)
            assert await adapter.get(KEY) is not None
            assert await adapter.sweep_once() == 1
            assert adapter.size() == 0
        finally:
            await adapter.stop()

    @pytest.mark.asyncio
    async def test_expire_on_read(self):
        adapter = InMemoryCacheAdapter(expire_on_read=True)
        await adapter.start()
        try:
            await adapter.set(KEY, "v", 1)
            await asyncio.sleep(0.01)
            assert await adapter.get(KEY) is None
            assert adapter.size() == 1
        finally:
            await adapter.stop()

    @pytest.mark.asyncio
    async def test_expire_on_read_row_without_ttl_is_corrupt(self):
        adapter = InMemoryCacheAdapter(expire_on_read=True)
        await adapter.start()
        try:
            adapter._rows[encode_key(KEY)] = {"id": encode_key(KEY), "value": "v", "stored": utcnow()}
            with pytest.raises(CacheIntegrityException):
                await adapter.get(KEY)
        finally:
            await adapter.stop()

    @pytest.mark.asyncio
    async def test_background_sweep(self):
        adapter = InMemoryCacheAdapter(flush_interval=10)
        await adapter.start()
        try:
            await adapter.set(KEY, "v", 1)
            await adapter.set(CacheKey(segment="pages", id="/about"), "v", 60000)
            await asyncio.sleep(0.1)
            assert adapter.size() == 1
        finally:
            await adapter.stop()

    def test_validate_segment_name(self):
        adapter = InMemoryCacheAdapter()
        assert adapter.validate_segment_name("pages") is None
        assert adapter.validate_segment_name("") is not None
