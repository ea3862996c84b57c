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
"""Unified exception hierarchy for rethinkbox.

All package exceptions inherit from RethinkBoxException, so a host can catch
one type for every cache failure or target a specific subclass.

Categories:
- BusinessException: caller mistakes and malformed data
- InfrastructureException: database, network and driver failures
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class RethinkBoxException(Exception):
    """Base exception for all rethinkbox errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "CACHE_NOT_STARTED").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Business Exceptions
# =============================================================================


class BusinessException(RethinkBoxException):
    """Caller-side errors: invalid input, unmet preconditions, bad data."""


class ValidationException(BusinessException):
    """Input validation failures."""


class PreconditionFailedException(BusinessException):
    """A precondition for the operation was not met."""


class DataIntegrityException(BusinessException):
    """Stored data does not have the expected shape."""


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(RethinkBoxException):
    """Infrastructure failures: database, network, driver."""


class ServiceUnavailableException(InfrastructureException):
    """Downstream service is unavailable."""


class ExternalServiceException(InfrastructureException):
    """Failure reported by an external service while executing a request."""
