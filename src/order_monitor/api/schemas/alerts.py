from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class TestAlertRequest(BaseModel):
    email: str = Field("", description="Recipient of the test alert")


class TestAlertResponse(BaseModel):
    success: bool
    message: str
    sent_at: datetime


class ScanResponse(BaseModel):
    alerted: bool = Field(..., description="Whether the scan dispatched an alert")
    completed_at: datetime
