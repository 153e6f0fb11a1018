"""Engine and session helpers for the order tracking database."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from order_monitor.config import AppSettings, DatabaseSettings

LOGGER = logging.getLogger(__name__)

_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def _engine_options(database: DatabaseSettings) -> dict[str, Any]:
    options: dict[str, Any] = {
        "future": True,
        "pool_pre_ping": True,
        "pool_size": database.max_pool_size,
    }
    if database.command_timeout_seconds:
        # Server-side limit for every statement issued on the connection
        timeout_ms = database.command_timeout_seconds * 1000
        options["connect_args"] = {"options": f"-c statement_timeout={timeout_ms}"}
    return options


def get_engine(settings: AppSettings) -> Engine:
    """Initialise (or reuse) the process-wide engine.

    The tracking tables are owned by the back-office system and only read
    here, so no schema is created.
    """

    global _engine
    if _engine is None:
        database = settings.database
        LOGGER.info("Connecting to %s:%s/%s", database.host, database.port, database.name)
        _engine = create_engine(database.build_sqlalchemy_url(), **_engine_options(database))
    return _engine


def get_session_factory(settings: AppSettings) -> sessionmaker:
    """Return a session factory bound to the configured engine."""

    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(settings),
            autoflush=False,
            expire_on_commit=False,
            class_=Session,
        )
    return _session_factory


def dispose_engine() -> None:
    """Close pooled connections and forget the cached engine and factory."""

    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


@contextmanager
def session_scope(settings: AppSettings) -> Iterator[Session]:
    """Yield a read session; nothing is committed."""

    session: Session = get_session_factory(settings)()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
