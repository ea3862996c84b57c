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
"""Cache plugin protocol — the contract a cache host drives."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from rethinkbox.cache.types import CacheEnvelope, CacheKey
from rethinkbox.kernel.lifecycle import Lifecycle


@runtime_checkable
class CachePlugin(Lifecycle, Protocol):
    """Storage backend for a segmented, TTL-based cache.

    The host calls start() once, then get/set/drop per cache operation, and
    stop() on shutdown. Keys are CacheKey instances or mappings with
    ``segment`` and ``id`` entries; ttl is in milliseconds.
    """

    def validate_segment_name(self, name: str) -> Exception | None: ...

    async def get(self, key: CacheKey | Mapping[str, Any]) -> CacheEnvelope | None: ...

    async def set(self, key: CacheKey | Mapping[str, Any], value: Any, ttl: int) -> None: ...

    async def drop(self, key: CacheKey | Mapping[str, Any]) -> None: ...
