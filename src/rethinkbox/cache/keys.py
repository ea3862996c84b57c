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
"""Storage key encoding and segment name validation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote, unquote

from rethinkbox.cache.exceptions import CacheValidationException
from rethinkbox.cache.types import CacheKey

# Characters left unescaped, matching encodeURIComponent. ':' is not among
# them, so a bare ':' in a storage key is always the separator.
_SAFE = "-_.!~*'()"
_SEPARATOR = ":"


def encode_key(key: CacheKey | Mapping[str, Any]) -> str:
    """Collapse a cache key into the primary key of its row."""
    cache_key = CacheKey.of(key)
    return quote(cache_key.segment, safe=_SAFE) + _SEPARATOR + quote(cache_key.id, safe=_SAFE)


def decode_key(storage_key: str) -> CacheKey:
    """Inverse of :func:`encode_key`."""
    segment, separator, ident = storage_key.partition(_SEPARATOR)
    if not separator:
        raise CacheValidationException(
            f"Not a storage key: {storage_key!r}",
            code="CACHE_INVALID_KEY",
        )
    return CacheKey(segment=unquote(segment), id=unquote(ident))


def validate_segment_name(name: str) -> CacheValidationException | None:
    """Return an error for an unusable segment name, ``None`` otherwise."""
    if not name:
        return CacheValidationException("Empty string", code="CACHE_INVALID_SEGMENT")
    if "\0" in name:
        return CacheValidationException("Includes null character", code="CACHE_INVALID_SEGMENT")
    return None
