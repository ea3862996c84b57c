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
"""Tests for create_cache_adapter."""

from __future__ import annotations

import pytest

from rethinkbox.cache.adapters.memory import InMemoryCacheAdapter
from rethinkbox.cache.adapters.rethinkdb import RethinkDBCacheAdapter
from rethinkbox.cache.auto_configuration import create_cache_adapter
from rethinkbox.core.config import Config


class TestCreateCacheAdapter:
    def test_defaults_to_rethinkdb(self, fake_r):
        adapter = create_cache_adapter(Config({}), driver=fake_r)
        assert isinstance(adapter, RethinkDBCacheAdapter)
        assert adapter.settings.table == "catbox"

    def test_binds_rethinkdb_settings(self, fake_r):
        config = Config({
            "rethinkbox": {
                "cache": {
                    "rethinkdb": {"url": "rethinkdb://db.local/sessions", "table": "entries", "flushInterval": 5000},
                },
            },
        })
        adapter = create_cache_adapter(config, driver=fake_r)
        assert isinstance(adapter, RethinkDBCacheAdapter)
        assert adapter.settings.host == "db.local"
        assert adapter.settings.db == "sessions"
        assert adapter.settings.table == "entries"
        assert adapter.settings.flush_interval == 5000

    def test_memory_provider(self):
        config = Config({"rethinkbox": {"cache": {"provider": "memory"}}})
        assert isinstance(create_cache_adapter(config), InMemoryCacheAdapter)

    def test_provider_from_env(self, monkeypatch):
        monkeypatch.setenv("RETHINKBOX_CACHE_PROVIDER", "memory")
        assert isinstance(create_cache_adapter(Config({})), InMemoryCacheAdapter)

    def test_rethinkdb_settings_from_env(self, fake_r, monkeypatch):
        monkeypatch.setenv("RETHINKBOX_CACHE_RETHINKDB_HOST", "db.from.env")
        monkeypatch.setenv("RETHINKBOX_CACHE_RETHINKDB_PORT", "28016")
        monkeypatch.setenv("RETHINKBOX_CACHE_RETHINKDB_EXPIRE_ON_READ", "true")
        config = Config({"rethinkbox": {"cache": {"rethinkdb": {"host": "db.from.file", "table": "entries"}}}})
        adapter = create_cache_adapter(config, driver=fake_r)
        assert adapter.settings.host == "db.from.env"
        assert adapter.settings.port == 28016
        assert adapter.settings.expire_on_read is True
        assert adapter.settings.table == "entries"

    def test_flush_interval_from_env_wins_over_alias(self, monkeypatch):
        monkeypatch.setenv("RETHINKBOX_CACHE_PROVIDER", "memory")
        monkeypatch.setenv("RETHINKBOX_CACHE_RETHINKDB_FLUSH_INTERVAL", "250")
        config = Config({"rethinkbox": {"cache": {"rethinkdb": {"flushInterval": 5000}}}})
        adapter = create_cache_adapter(config)
        assert isinstance(adapter, InMemoryCacheAdapter)
        assert adapter._flush_interval == 250

    def test_unknown_provider(self):
        config = Config({"rethinkbox": {"cache": {"provider": "redis"}}})
        with pytest.raises(ValueError, match="Unknown cache provider"):
            create_cache_adapter(config)

    def test_invalid_settings(self, fake_r):
        config = Config({"rethinkbox": {"cache": {"rethinkdb": {"port": 0}}}})
        with pytest.raises(ValueError, match="Configuration validation failed"):
            create_cache_adapter(config, driver=fake_r)
