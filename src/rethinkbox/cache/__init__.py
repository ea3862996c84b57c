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
"""rethinkbox cache — TTL cache plugin backed by RethinkDB."""

from rethinkbox.cache.adapters.memory import InMemoryCacheAdapter
from rethinkbox.cache.adapters.rethinkdb import RethinkDBCacheAdapter
from rethinkbox.cache.auto_configuration import create_cache_adapter
from rethinkbox.cache.exceptions import (
    CacheBackendException,
    CacheConnectionException,
    CacheIntegrityException,
    CacheNotStartedException,
    CacheValidationException,
)
from rethinkbox.cache.keys import decode_key, encode_key, validate_segment_name
from rethinkbox.cache.ports.outbound import CachePlugin
from rethinkbox.cache.sweeper import ExpirySweeper
from rethinkbox.cache.types import CacheEnvelope, CacheKey, CacheRecord

__all__ = [
    "CacheBackendException",
    "CacheConnectionException",
    "CacheEnvelope",
    "CacheIntegrityException",
    "CacheKey",
    "CacheNotStartedException",
    "CachePlugin",
    "CacheRecord",
    "CacheValidationException",
    "ExpirySweeper",
    "InMemoryCacheAdapter",
    "RethinkDBCacheAdapter",
    "create_cache_adapter",
    "decode_key",
    "encode_key",
    "validate_segment_name",
]
