# aclio/crud/kv_store.py
"""
Key-value storage for the client core.

Values are stored as JSON text under string keys. Callers get back plain
JSON types (dict, list, str, int, float, bool, None) and do their own
decoding into schemas.
"""
import json
import logging
from typing import Any, Dict, Iterable, Optional, Protocol

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from aclio.core.database import create_db_and_tables, make_engine, make_session_factory
from aclio.core.database import engine as default_engine
from aclio.core.db_utils import with_db_retry
from aclio.models.kv_entry import KVEntry

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    async def get(self, key: str, default: Any = None) -> Any: ...

    async def set(self, key: str, value: Any) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def delete_many(self, keys: Iterable[str]) -> None: ...


class MemoryKeyValueStore:
    """In-process store. Values round-trip through JSON like the SQL store."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self._data[key] = json.dumps(value)

    async def get(self, key: str, default: Any = None) -> Any:
        raw = self._data.get(key)
        if raw is None:
            return default
        return json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def delete_many(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._data.pop(key, None)

    def keys(self) -> list:
        return list(self._data.keys())


class SqlKeyValueStore:
    """Store backed by the kv_entries table."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        engine: Optional[AsyncEngine] = None,
    ):
        self.session_factory = session_factory
        self.engine = engine

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()

    @with_db_retry()
    async def get(self, key: str, default: Any = None) -> Any:
        async with self.session_factory() as db:
            entry = await db.get(KVEntry, key)
            if entry is None:
                return default
            try:
                return json.loads(entry.value)
            except json.JSONDecodeError:
                logger.warning(f"Corrupted value under key {key!r}, returning default")
                return default

    @with_db_retry()
    async def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value)
        async with self.session_factory() as db:
            entry = await db.get(KVEntry, key)
            if entry is None:
                db.add(KVEntry(key=key, value=payload))
            else:
                entry.value = payload
            await db.commit()

    @with_db_retry()
    async def delete(self, key: str) -> None:
        async with self.session_factory() as db:
            await db.execute(delete(KVEntry).where(KVEntry.key == key))
            await db.commit()

    @with_db_retry()
    async def delete_many(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if not keys:
            return
        async with self.session_factory() as db:
            await db.execute(delete(KVEntry).where(KVEntry.key.in_(keys)))
            await db.commit()


async def open_sql_store(database_url: Optional[str] = None) -> SqlKeyValueStore:
    """Create the kv_entries table if needed and return a store over it."""
    engine = make_engine(database_url) if database_url else default_engine
    await create_db_and_tables(engine)
    logger.info(f"Local store ready at {engine.url.render_as_string(hide_password=True)}")
    return SqlKeyValueStore(make_session_factory(engine), engine)
