"""Schema exports."""

from .alerts import ScanResponse, TestAlertRequest, TestAlertResponse
from .orders import (
    FacilityStatusCountItem,
    OrderStatusHistoryResponse,
    StatusCatalogResponse,
    StatusCountItem,
    StatusDefinitionItem,
    StatusHistoryItem,
    StatusRangeItem,
    StuckOrderItem,
    StuckOrdersResponse,
    StuckOrdersSummaryResponse,
)

__all__ = [
    "FacilityStatusCountItem",
    "OrderStatusHistoryResponse",
    "ScanResponse",
    "StatusCatalogResponse",
    "StatusCountItem",
    "StatusDefinitionItem",
    "StatusHistoryItem",
    "StatusRangeItem",
    "StuckOrderItem",
    "StuckOrdersResponse",
    "StuckOrdersSummaryResponse",
    "TestAlertRequest",
    "TestAlertResponse",
]
