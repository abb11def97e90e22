"""
Key-value persistence for quiz history.

Stores expose three async operations, get/set/list(prefix), over string values.
SqlKeyValueStore keeps entries in the `kv_store` table; MemoryKeyValueStore
keeps them in a dict for the life of the process.
"""
import asyncio
import logging
from typing import Dict, List, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from database import KVEntry, SessionLocal

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def list(self, prefix: str) -> List[str]:
        ...


class SqlKeyValueStore:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._get, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set, key, value)

    async def list(self, prefix: str) -> List[str]:
        return await asyncio.to_thread(self._list, prefix)

    def _get(self, key: str) -> Optional[str]:
        db: Session = self.session_factory()
        try:
            row = db.get(KVEntry, key)
            return row.value if row else None
        except SQLAlchemyError as e:
            raise StorageError(f"Could not read {key}: {e}") from e
        finally:
            db.close()

    def _set(self, key: str, value: str) -> None:
        db: Session = self.session_factory()
        try:
            row = db.get(KVEntry, key)
            if row:
                row.value = value
            else:
                db.add(KVEntry(key=key, value=value))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageError(f"Could not write {key}: {e}") from e
        finally:
            db.close()

    def _list(self, prefix: str) -> List[str]:
        db: Session = self.session_factory()
        try:
            stmt = select(KVEntry.key).where(KVEntry.key.startswith(prefix, autoescape=True)).order_by(KVEntry.key)
            return list(db.scalars(stmt))
        except SQLAlchemyError as e:
            raise StorageError(f"Could not list keys under {prefix}: {e}") from e
        finally:
            db.close()


class MemoryKeyValueStore:
    def __init__(self):
        self._data: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def list(self, prefix: str) -> List[str]:
        return sorted(k for k in self._data if k.startswith(prefix))


def get_store(backend: str = "sql") -> KeyValueStore:
    if backend == "memory":
        logger.info("Using in-memory quiz history; entries are lost on restart.")
        return MemoryKeyValueStore()
    return SqlKeyValueStore(SessionLocal)
