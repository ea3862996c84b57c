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
"""Lifecycle protocol for adapters that own a connection.

The cache host calls start() once before issuing operations and stop() on
shutdown. Both calls must be safe to repeat.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Lifecycle(Protocol):
    """Standard lifecycle for adapters owning external resources."""

    async def start(self) -> None:
        """Open connections and prepare the backend.

        A no-op when already started. On failure, implementations release
        anything they acquired and raise; they never report themselves ready
        after a failed start.
        """
        ...

    async def stop(self) -> None:
        """Release connections and background tasks.

        Best-effort cleanup: close failures are logged, not raised. Safe to
        call when never started.
        """
        ...

    def is_ready(self) -> bool:
        """Whether start() has completed and stop() has not been called since."""
        ...
