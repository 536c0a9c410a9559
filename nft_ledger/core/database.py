"""Database engine and session management."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator
from urllib.parse import urlparse

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from nft_ledger.core.config import get_settings

# One ledger transaction commits fully before the next one begins.
_WRITE_LOCK = threading.Lock()
_AFTER_COMMIT_KEY = "after_commit_callbacks"


def _resolve_sqlite_path(database_url: str) -> None:
    """Ensure the parent directory for a SQLite database exists."""

    parsed = urlparse(database_url)
    if parsed.scheme != "sqlite":
        return

    if parsed.path in ("", ":memory:", "/:memory:"):
        return

    # sqlite:///./data/ledger.db parses to "/./data/ledger.db"
    raw_path = parsed.path[1:] if parsed.path.startswith("/.") else parsed.path
    db_dir = Path(raw_path).expanduser().resolve().parent
    db_dir.mkdir(parents=True, exist_ok=True)


def _create_engine() -> Engine:
    settings = get_settings()
    url = settings.database_url
    if url.startswith("sqlite"):
        _resolve_sqlite_path(url)
        engine_kwargs: dict[str, object] = {
            "future": True,
            "echo": settings.sql_echo,
            "connect_args": {"check_same_thread": False},
        }
        if url.endswith(":memory:") or url == "sqlite://":
            engine_kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **engine_kwargs)
    else:
        engine = create_engine(
            url,
            future=True,
            echo=settings.sql_echo,
            pool_pre_ping=True,
        )
    return engine


engine: Engine = _create_engine()

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True,
    class_=Session,
)


def get_session() -> Iterator[Session]:
    """FastAPI dependency for acquiring a read session."""

    session: Session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_write_session() -> Iterator[Session]:
    """FastAPI dependency for a serialized, all-or-nothing ledger transaction."""

    with session_scope() as session:
        yield session


def run_after_commit(session: Session, callback: Callable[[], None]) -> None:
    """Run ``callback`` once the session's transaction commits and the write lock is released.

    Nothing runs if the transaction rolls back.
    """

    session.info.setdefault(_AFTER_COMMIT_KEY, []).append(callback)


@contextmanager
def session_scope() -> Iterator[Session]:
    """Provide a serialized transactional scope for mutations, scripts and jobs."""

    with _WRITE_LOCK:
        session = SessionLocal()
        try:
            yield session
            session.commit()
            callbacks = session.info.pop(_AFTER_COMMIT_KEY, [])
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    for callback in callbacks:
        callback()
