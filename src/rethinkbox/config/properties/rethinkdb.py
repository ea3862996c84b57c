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
"""RethinkDB cache adapter configuration properties."""

from __future__ import annotations

from typing import Any, Literal
from urllib.parse import unquote, urlsplit

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from rethinkbox.core.config import config_properties

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 28015
DEFAULT_DB = "catbox"
DEFAULT_TABLE = "catbox"
DEFAULT_FLUSH_INTERVAL = 60000


def parse_connection_url(url: str) -> dict[str, Any]:
    """Extract connection fields from ``rethinkdb://[user:auth@]host[:port][/db]``.

    Only components present in the URL are returned. A URL carrying a single
    userinfo component without ``:`` is read as the user name.
    """
    parts = urlsplit(url)
    fields: dict[str, Any] = {}
    if parts.hostname:
        fields["host"] = parts.hostname
    if parts.port is not None:
        fields["port"] = parts.port
    db = parts.path.lstrip("/")
    if db:
        fields["db"] = unquote(db)
    if parts.username:
        fields["user"] = unquote(parts.username)
    if parts.password:
        fields["auth"] = unquote(parts.password)
    return fields


@config_properties(prefix="rethinkbox.cache.rethinkdb")
class RethinkDBCacheProperties(BaseModel):
    """Settings for the RethinkDB cache adapter (rethinkbox.cache.rethinkdb.*).

    Immutable once built. When ``url`` is given, host, port, db, user and
    auth are read from it; fields passed explicitly win over the URL.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    db: str = Field(default=DEFAULT_DB, min_length=1)
    table: str = Field(default=DEFAULT_TABLE, min_length=1)
    flush_interval: int = Field(
        default=DEFAULT_FLUSH_INTERVAL,
        gt=0,
        validation_alias=AliasChoices("flush_interval", "flushInterval"),
        description="Milliseconds between expiry sweeps.",
    )
    user: str = "admin"
    auth: str | None = Field(default=None, repr=False)
    timeout: int = Field(default=20, gt=0, description="Connect timeout in seconds.")
    upsert: Literal["atomic", "read_then_write"] = "atomic"
    expire_on_read: bool = False
    url: str | None = Field(default=None, repr=False)

    @model_validator(mode="before")
    @classmethod
    def _merge_url(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not data.get("url"):
            return data
        explicit = {k: v for k, v in data.items() if v is not None}
        return {**parse_connection_url(data["url"]), **explicit}

    @classmethod
    def from_options(cls, **options: Any) -> RethinkDBCacheProperties:
        """Build settings from keyword options, ignoring ``None`` values."""
        return cls.model_validate({k: v for k, v in options.items() if v is not None})

    def connect_options(self) -> dict[str, Any]:
        """Keyword arguments for the driver's ``connect()``."""
        options: dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "db": self.db,
            "user": self.user,
            "timeout": self.timeout,
        }
        if self.auth:
            options["password"] = self.auth
        return options

    def describe(self) -> dict[str, Any]:
        """Resolved settings with the credential masked, for display."""
        described = self.model_dump(exclude={"url"})
        if described["auth"]:
            described["auth"] = "***"
        return described
