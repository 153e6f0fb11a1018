"""Pydantic schemas for stuck-order endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class StuckOrderItem(BaseModel):
    order_id: str = Field(..., description="Consolidation order number")
    order_number: str = Field("", description="Customer-facing order number")
    status_id: int
    status: str = Field(..., description="Current status name")
    product_type: str = ""
    stuck_since: datetime = Field(..., description="When the current status began")
    hours_stuck: int = Field(..., description="Working hours spent in the current status")
    threshold_hours: int = Field(..., description="Threshold applied to the status")
    region: Optional[str] = Field(None, description="Website/region code")
    facility_code: Optional[str] = None
    facility_name: Optional[str] = None


class StuckOrdersResponse(BaseModel):
    total: int = Field(..., description="Distinct stuck orders before filters and paging")
    limit: int
    offset: int
    items: list[StuckOrderItem]
    generated_at: datetime


class StatusCountItem(BaseModel):
    status_id: int
    status: str
    count: int


class FacilityStatusCountItem(BaseModel):
    facility: str
    status: str
    count: int


class StuckOrdersSummaryResponse(BaseModel):
    total_stuck_orders: int
    by_threshold: dict[str, int] = Field(..., description="Counts per threshold bucket (prep/facility)")
    by_facility: dict[str, int] = Field(default_factory=dict)
    by_status_category: dict[str, int] = Field(default_factory=dict)
    top_statuses: list[StatusCountItem] = Field(default_factory=list)
    by_facility_status: list[FacilityStatusCountItem] = Field(default_factory=list)
    generated_at: datetime


class StatusHistoryItem(BaseModel):
    status_id: int
    status: str
    timestamp: datetime = Field(..., description="When the status was entered")
    duration: str = Field(..., description="Time spent in the status (e.g. '3h 5m' or '12h+ (STUCK)')")
    duration_minutes: Optional[int] = Field(None, description="Closed interval length in minutes")
    hours_from_now: Optional[int] = Field(None, description="Working hours elapsed for the open status")
    is_stuck: bool = False
    is_current: bool = False


class OrderStatusHistoryResponse(BaseModel):
    order_id: str
    history: list[StatusHistoryItem]


class StatusDefinitionItem(BaseModel):
    status_id: int
    status: str
    category: str
    threshold_hours: int


class StatusRangeItem(BaseModel):
    min_status_id: int
    max_status_id: int
    threshold_hours: int


class StatusCatalogResponse(BaseModel):
    prep_range: StatusRangeItem
    facility_range: StatusRangeItem
    default_threshold_hours: int
    items: list[StatusDefinitionItem]
