"""
Storage backends for the auction engine.

``get_store`` is the FastAPI dependency; the backend is picked from
``settings.STORAGE_BACKEND`` ("sql" or "memory").
"""
from functools import lru_cache

from app.core.config import settings
from app.db.session import session_scope
from app.storage.database import SqlStore
from app.storage.interface import AuctionStore
from app.storage.memory import MemoryStore

__all__ = ["AuctionStore", "MemoryStore", "SqlStore", "get_store", "memory_store"]


@lru_cache(maxsize=1)
def memory_store() -> MemoryStore:
    # Una única instancia por proceso
    return MemoryStore()


def get_store():
    backend = settings.STORAGE_BACKEND.strip().lower()
    if backend == "memory":
        yield memory_store()
        return
    if backend != "sql":
        raise RuntimeError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND!r}")

    with session_scope() as db:
        yield SqlStore(db)
