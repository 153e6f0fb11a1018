"""Alert rendering and dispatch for stuck-order scans."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Sequence

from order_monitor.config import AlertSettings
from order_monitor.detection import StuckOrderView, SummaryStats
from order_monitor.detection.summary import FACILITY_BUCKET, PREP_BUCKET

LOGGER = logging.getLogger(__name__)


def render_alert_subject(summary: SummaryStats, prefix: str) -> str:
    return f"{prefix} {summary.total_stuck_orders} stuck orders detected"


def render_alert_body(summary: SummaryStats, sample: Sequence[StuckOrderView]) -> list[str]:
    """Return the plain-text alert body as a list of lines."""

    lines = [
        f"Total stuck orders: {summary.total_stuck_orders}",
        f"Prep statuses: {summary.by_threshold_bucket.get(PREP_BUCKET, 0)}",
        f"Facility statuses: {summary.by_threshold_bucket.get(FACILITY_BUCKET, 0)}",
    ]
    if summary.by_status_category:
        lines.append("By category:")
        lines.extend(f"  {category}: {count}" for category, count in summary.by_status_category.items())
    if summary.by_facility:
        lines.append("By facility:")
        lines.extend(f"  {facility}: {count}" for facility, count in summary.by_facility.items())
    if sample:
        lines.append("Top stuck orders:")
        lines.extend(
            f"  - Order {view.order_id}: {view.status_name} ({view.status_id}), "
            f"stuck for {view.hours_stuck}h (threshold {view.threshold_hours}h)"
            for view in sample
        )
    return lines


class AlertChannel(ABC):
    """Interface for alert delivery."""

    @abstractmethod
    def send_stuck_orders_alert(self, summary: SummaryStats, orders: Sequence[StuckOrderView]) -> bool:
        """Dispatch an alert for the given stuck orders. Returns True when sent."""

    @abstractmethod
    def send_test_alert(self, recipient: str) -> None:
        """Send a test message to ``recipient``."""


class LoggingAlertChannel(AlertChannel):
    """Writes rendered alerts to the application log."""

    def __init__(self, settings: AlertSettings) -> None:
        self.settings = settings

    def send_stuck_orders_alert(self, summary: SummaryStats, orders: Sequence[StuckOrderView]) -> bool:
        if not self.settings.enabled:
            LOGGER.info("Alerts disabled; skipping alert for %s stuck orders", summary.total_stuck_orders)
            return False
        sample = list(orders)[: self.settings.sample_size]
        LOGGER.warning(
            "ALERT to %s: %s",
            ", ".join(self.settings.recipients) or "<no recipients>",
            render_alert_subject(summary, self.settings.subject_prefix),
        )
        for line in render_alert_body(summary, sample):
            LOGGER.warning(line)
        return True

    def send_test_alert(self, recipient: str) -> None:
        if not recipient or not recipient.strip():
            raise ValueError("email_required")
        LOGGER.info("TEST ALERT: %s test message to %s", self.settings.subject_prefix, recipient.strip())
