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
"""Schema bootstrap: database, table and expiry index for the cache."""

from __future__ import annotations

import logging
from typing import Any

from rethinkdb.errors import ReqlOpFailedError

from rethinkbox.cache.types import EXPIRES_AT_INDEX

logger = logging.getLogger(__name__)


async def _create_unless_exists(query: Any, connection: Any, kind: str, name: str) -> None:
    # Another process may create the object between our list and create calls.
    try:
        await query.run(connection)
    except ReqlOpFailedError as exc:
        if "already exists" not in str(exc):
            raise
        logger.debug("%s '%s' was created concurrently", kind, name)
    else:
        logger.info("Created %s '%s'", kind, name)


async def ensure_database(r: Any, connection: Any, db: str) -> None:
    if db not in await r.db_list().run(connection):
        await _create_unless_exists(r.db_create(db), connection, "database", db)


async def ensure_table(r: Any, connection: Any, db: str, table: str) -> None:
    if table not in await r.db(db).table_list().run(connection):
        await _create_unless_exists(r.db(db).table_create(table), connection, "table", f"{db}.{table}")


async def ensure_index(r: Any, connection: Any, db: str, table: str, index: str = EXPIRES_AT_INDEX) -> None:
    """Create the secondary index if missing and wait until it can serve queries."""
    query = r.db(db).table(table)
    if index not in await query.index_list().run(connection):
        await _create_unless_exists(query.index_create(index), connection, "index", index)
    await query.index_wait(index).run(connection)


async def ensure_schema(r: Any, connection: Any, db: str, table: str) -> None:
    """Ensure the database, the cache table and its ``expiresAt`` index exist.

    Every step checks before creating, so running this against an already
    bootstrapped server changes nothing.
    """
    await ensure_database(r, connection, db)
    await ensure_table(r, connection, db, table)
    await ensure_index(r, connection, db, table)
