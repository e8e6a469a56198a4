"""Persistence store — one interface, two adapters.

Learn: Routes and services only ever see ForumStorage. Which adapter
backs it is decided once per app instance (AGORA_STORAGE_BACKEND):

- memory:   MemoryStorage, a single shared instance on app.state
- database: DatabaseStorage, wrapping a fresh AsyncSession per request
"""

from collections.abc import AsyncIterator

from fastapi import Request

from agora.storage.base import ForumStorage, StorageError
from agora.storage.database import DatabaseStorage
from agora.storage.memory import MemoryStorage

__all__ = [
    "DatabaseStorage",
    "ForumStorage",
    "MemoryStorage",
    "StorageError",
    "get_storage",
]


async def get_storage(request: Request) -> AsyncIterator[ForumStorage]:
    """FastAPI dependency — yields the store for this request."""
    memory = request.app.state.memory_storage
    if memory is not None:
        yield memory
        return

    from agora.db.engine import async_session_factory

    async with async_session_factory() as session:
        yield DatabaseStorage(session)
