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
"""Build the configured cache plugin from a Config."""

from __future__ import annotations

from typing import Any

from rethinkbox.cache.adapters.memory import InMemoryCacheAdapter
from rethinkbox.cache.adapters.rethinkdb import RethinkDBCacheAdapter
from rethinkbox.cache.ports.outbound import CachePlugin
from rethinkbox.config.properties.rethinkdb import RethinkDBCacheProperties
from rethinkbox.core.config import Config

PROVIDERS = ("rethinkdb", "memory")


def create_cache_adapter(config: Config, driver: Any = None) -> CachePlugin:
    """Create the adapter named by ``rethinkbox.cache.provider``.

    Both providers read ``flush_interval`` and ``expire_on_read`` from the
    ``rethinkbox.cache.rethinkdb`` section. *driver* replaces the default
    asyncio RethinkDB driver.
    """
    provider = str(config.get("rethinkbox.cache.provider", "rethinkdb")).lower()
    settings = config.bind(RethinkDBCacheProperties)

    if provider == "rethinkdb":
        return RethinkDBCacheAdapter(settings, driver=driver)
    if provider == "memory":
        return InMemoryCacheAdapter(
            flush_interval=settings.flush_interval,
            expire_on_read=settings.expire_on_read,
        )
    raise ValueError(f"Unknown cache provider '{provider}', expected one of {', '.join(PROVIDERS)}")
