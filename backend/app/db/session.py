from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings


def make_engine(url: str):
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    # Para SQLite hace falta este argumento si vas a usarlo con FastAPI (varios hilos)
    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # en memoria: una sola conexión compartida o cada hilo vería una BD vacía
        kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


engine = make_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


@contextmanager
def session_scope(factory=SessionLocal):
    """Session for scripts; commits are left to the store."""
    db = factory()
    try:
        yield db
    finally:
        db.close()
