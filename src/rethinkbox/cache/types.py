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
"""Cache keys, persisted records and the envelope returned on reads."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from rethinkbox.cache.exceptions import CacheIntegrityException, CacheValidationException

EXPIRES_AT_INDEX = "expiresAt"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime (the driver rejects naive ones)."""
    return datetime.now(timezone.utc)


def to_epoch_millis(moment: datetime) -> int:
    return (moment - _EPOCH) // timedelta(milliseconds=1)


@dataclass(frozen=True)
class CacheKey:
    """Logical identity of a cached value: a segment plus an id within it."""

    segment: str
    id: str

    @classmethod
    def of(cls, key: CacheKey | Mapping[str, Any]) -> CacheKey:
        """Accept a CacheKey or a mapping with ``segment`` and ``id`` entries."""
        if isinstance(key, CacheKey):
            return key
        try:
            return cls(segment=str(key["segment"]), id=str(key["id"]))
        except (KeyError, TypeError) as exc:
            raise CacheValidationException(
                "Cache key must provide 'segment' and 'id'",
                code="CACHE_INVALID_KEY",
                context={"key": repr(key)},
            ) from exc


@dataclass(frozen=True)
class CacheEnvelope:
    """A cached value with the time it was stored and its ttl, both in ms."""

    item: Any
    stored: int
    ttl: int

    def expires_at(self) -> int:
        return self.stored + self.ttl

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at() <= to_epoch_millis(now or utcnow())

    def to_dict(self) -> dict[str, Any]:
        return {"item": self.item, "stored": self.stored, "ttl": self.ttl}


@dataclass(frozen=True)
class CacheRecord:
    """A full cache row as persisted. Writes always replace the whole row."""

    id: str
    value: Any
    stored: datetime
    ttl: int
    expires_at: datetime

    @classmethod
    def create(cls, storage_key: str, value: Any, ttl: int, now: datetime | None = None) -> CacheRecord:
        stored = now or utcnow()
        return cls(
            id=storage_key,
            value=value,
            stored=stored,
            ttl=ttl,
            expires_at=stored + timedelta(milliseconds=ttl),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "value": self.value,
            "stored": self.stored,
            "ttl": self.ttl,
            EXPIRES_AT_INDEX: self.expires_at,
        }


def validate_ttl(ttl: Any) -> int:
    """Return *ttl* if it is a positive integer number of milliseconds."""
    if isinstance(ttl, bool) or not isinstance(ttl, int) or ttl <= 0:
        raise CacheValidationException(
            f"ttl must be a positive integer of milliseconds, got {ttl!r}",
            code="CACHE_INVALID_TTL",
        )
    return ttl


def envelope_from_document(document: Mapping[str, Any]) -> CacheEnvelope:
    """Rebuild the read envelope from a stored row.

    Rows without a ``value`` field, a ``stored`` time or an integer ``ttl``
    were not written by this adapter and are reported as corrupt.
    """
    stored = document.get("stored")
    ttl = document.get("ttl")
    if (
        "value" not in document
        or not isinstance(stored, datetime)
        or isinstance(ttl, bool)
        or not isinstance(ttl, int)
    ):
        raise CacheIntegrityException(
            "Incorrect result structure",
            code="CACHE_INCORRECT_STRUCTURE",
            context={"id": document.get("id")},
        )
    return CacheEnvelope(
        item=document["value"],
        stored=to_epoch_millis(stored),
        ttl=ttl,
    )
