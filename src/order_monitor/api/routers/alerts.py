"""Routes for alert management."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from order_monitor.alerts import AlertChannel
from order_monitor.config import AppSettings
from order_monitor.detection import utcnow
from order_monitor.monitoring import MonitoringContext
from order_monitor.scanner import execute_scan
from order_monitor.storage import SnapshotGateway

from ..dependencies import get_alert_channel, get_app_settings, get_gateway, get_monitoring_context
from ..schemas.alerts import ScanResponse, TestAlertRequest, TestAlertResponse

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api/alerts", tags=["alerts"])


@router.post("/test", response_model=TestAlertResponse)
def send_test_alert(
    request: TestAlertRequest,
    channel: AlertChannel = Depends(get_alert_channel),
) -> TestAlertResponse:
    """Send a test alert to verify the alert channel."""

    email = request.email.strip()
    if not email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="email_required")

    LOGGER.info("Sending test alert to %s", email)
    channel.send_test_alert(email)
    return TestAlertResponse(success=True, message=f"Test alert sent to {email}", sent_at=utcnow())


@router.post("/scan", response_model=ScanResponse)
def run_scan(
    settings: AppSettings = Depends(get_app_settings),
    gateway: SnapshotGateway = Depends(get_gateway),
    context: MonitoringContext = Depends(get_monitoring_context),
    channel: AlertChannel = Depends(get_alert_channel),
) -> ScanResponse:
    """Run one stuck-order scan immediately."""

    alerted = execute_scan(gateway, context, channel, settings.scanner)
    return ScanResponse(alerted=alerted, completed_at=utcnow())
