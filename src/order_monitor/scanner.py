"""Periodic scan for stuck orders that dispatches alerts."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Callable, Optional

from order_monitor.alerts import AlertChannel, LoggingAlertChannel
from order_monitor.config import AppSettings, ScannerSettings
from order_monitor.detection import Pagination, utcnow
from order_monitor.monitoring import (
    MonitoringContext,
    build_monitoring_context,
    collect_stuck_orders,
    collect_summary,
)
from order_monitor.storage import SnapshotGateway, session_scope

LOGGER = logging.getLogger(__name__)


def execute_scan(
    gateway: SnapshotGateway,
    context: MonitoringContext,
    channel: AlertChannel,
    settings: ScannerSettings,
    *,
    now: Optional[datetime] = None,
) -> bool:
    """Run one scan. Returns True when an alert was dispatched.

    Failures are logged and reported as False so the scan loop keeps running.
    """

    if not settings.enabled:
        LOGGER.debug("Scanner is disabled, skipping scan")
        return False

    now = now or utcnow()
    try:
        LOGGER.info("Starting stuck orders scan")
        summary = collect_summary(gateway, context, now=now)
        if summary.total_stuck_orders == 0:
            LOGGER.info("No stuck orders found")
            return False

        LOGGER.warning("Found %s stuck orders", summary.total_stuck_orders)
        listing = collect_stuck_orders(
            gateway,
            context,
            pagination=Pagination(offset=0, limit=settings.batch_size),
            now=now,
        )
        dispatched = channel.send_stuck_orders_alert(summary, listing.items)
        if dispatched:
            LOGGER.info("Sent alert for %s stuck orders", summary.total_stuck_orders)
        return dispatched
    except Exception:
        LOGGER.exception("Error during stuck orders scan")
        return False


def run_scanner(
    settings: AppSettings,
    *,
    context: Optional[MonitoringContext] = None,
    channel: Optional[AlertChannel] = None,
    max_iterations: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Scan on a fixed interval until interrupted. Returns the number of alerts sent."""

    context = context or build_monitoring_context(settings)
    channel = channel or LoggingAlertChannel(settings.alerts)
    interval_seconds = settings.scanner.interval_minutes * 60
    LOGGER.info("Background scanner starting with interval of %s minutes", settings.scanner.interval_minutes)

    iterations = 0
    alerts_sent = 0
    try:
        while max_iterations is None or iterations < max_iterations:
            with session_scope(settings) as session:
                if execute_scan(SnapshotGateway(session), context, channel, settings.scanner):
                    alerts_sent += 1
            iterations += 1
            if max_iterations is not None and iterations >= max_iterations:
                break
            sleep(interval_seconds)
    except KeyboardInterrupt:
        LOGGER.info("Background scanner interrupted")

    LOGGER.info("Background scanner stopped after %s scans (%s alerts)", iterations, alerts_sent)
    return alerts_sent
