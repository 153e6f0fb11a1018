"""Shared dependency providers for the FastAPI layer."""

from __future__ import annotations

from typing import Generator, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from order_monitor.alerts import AlertChannel, LoggingAlertChannel
from order_monitor.config import AppSettings, get_settings
from order_monitor.monitoring import MonitoringContext, build_monitoring_context
from order_monitor.storage import SnapshotGateway, get_session_factory


_context: Optional[MonitoringContext] = None


def get_app_settings() -> AppSettings:
    """Return cached application settings."""

    return get_settings()


def get_db_session(settings: AppSettings = Depends(get_app_settings)) -> Generator[Session, None, None]:
    """Provide a SQLAlchemy session scoped to the request lifecycle."""

    session_factory = get_session_factory(settings)
    session: Session = session_factory()
    try:
        yield session
    finally:
        session.close()


def get_gateway(session: Session = Depends(get_db_session)) -> SnapshotGateway:
    return SnapshotGateway(session)


def get_monitoring_context(settings: AppSettings = Depends(get_app_settings)) -> MonitoringContext:
    """Return the detection components, built once per process."""

    global _context
    if _context is None:
        _context = build_monitoring_context(settings)
    return _context


def get_alert_channel(settings: AppSettings = Depends(get_app_settings)) -> AlertChannel:
    return LoggingAlertChannel(settings.alerts)
