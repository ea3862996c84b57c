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
"""Cache adapter exceptions, one per failure category."""

from __future__ import annotations

from rethinkbox.kernel.exceptions import (
    DataIntegrityException,
    ExternalServiceException,
    PreconditionFailedException,
    ServiceUnavailableException,
    ValidationException,
)


class CacheValidationException(ValidationException):
    """Invalid segment name, key or ttl supplied by the caller."""


class CacheNotStartedException(PreconditionFailedException):
    """An operation was issued before start() completed or after stop()."""

    def __init__(self, message: str = "Connection not started") -> None:
        super().__init__(message, code="CACHE_NOT_STARTED")


class CacheIntegrityException(DataIntegrityException):
    """A stored row does not look like a cache record."""


class CacheConnectionException(ServiceUnavailableException):
    """Connecting to the backend or bootstrapping its schema failed."""


class CacheBackendException(ExternalServiceException):
    """The backend rejected or failed a query."""
