from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from enum_behavior.core.config import settings
from enum_behavior.core.logging import get_logger

logger = get_logger("enum_behavior.db.database", component="db")


class Base(DeclarativeBase):
    pass


@dataclass(frozen=True, slots=True)
class DatabaseGateway:
    """Encapsulates engine and session factory lifecycle."""

    engine: Engine
    session_factory: sessionmaker[Session]

    @contextmanager
    def session(self) -> Iterator[Session]:
        session: Session = self.session_factory()
        try:
            yield session
        finally:
            session.close()

    @contextmanager
    def transactional(self, *, flush_before_commit: bool = False) -> Iterator[Session]:
        session: Session = self.session_factory()
        try:
            yield session
            if flush_before_commit:
                session.flush()
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error("transaction_rollback", error=str(e), error_type=type(e).__name__)
            raise
        finally:
            session.close()


def _build_engine(database_url: str | None = None) -> Engine:
    database_url = database_url or settings.database_url
    url: URL = make_url(database_url)
    kwargs: dict[str, object] = {"echo": False}

    if url.get_backend_name() == "sqlite":
        connect_args: dict[str, object] = {"check_same_thread": False}
        database = url.database or ""
        if database.startswith("file:"):
            connect_args["uri"] = True
        kwargs["connect_args"] = connect_args

        if database in ("", ":memory:", "file::memory:"):
            kwargs["poolclass"] = StaticPool
        else:
            kwargs["poolclass"] = QueuePool
    if kwargs.get("poolclass") is not StaticPool:
        kwargs.update(
            {
                "pool_size": settings.db_pool_size,
                "max_overflow": settings.db_max_overflow,
                "pool_timeout": settings.db_pool_timeout,
                "pool_recycle": settings.db_pool_recycle,
                "pool_pre_ping": settings.db_pool_pre_ping,
            }
        )

    return create_engine(database_url, **kwargs)


engine: Engine = _build_engine()
