"""Registry of workflow statuses and their stuck thresholds."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from order_monitor.config import ThresholdSettings

DEFAULT_THRESHOLD_HOURS = 24
UNCLASSIFIED_CATEGORY = "Unclassified"


@dataclass(frozen=True)
class StatusDefinition:
    """A known workflow status."""

    status_id: int
    name: str
    category: str
    threshold_hours: int


@dataclass(frozen=True)
class StatusRange:
    """Inclusive band of status identifiers sharing one threshold."""

    min_status_id: int
    max_status_id: int
    threshold_hours: int

    def contains(self, status_id: int) -> bool:
        return self.min_status_id <= status_id <= self.max_status_id


DEFAULT_PREP_RANGE = StatusRange(3001, 3910, 6)
DEFAULT_FACILITY_RANGE = StatusRange(4001, 5830, 48)


class StatusRegistry:
    """Lookup table for status definitions and threshold resolution.

    Threshold resolution order is prep range, then facility range, then the
    default threshold. Unknown status identifiers never fail; they resolve to
    the default threshold and are reported as unclassified.
    """

    def __init__(
        self,
        definitions: Iterable[StatusDefinition],
        *,
        prep_range: StatusRange = DEFAULT_PREP_RANGE,
        facility_range: StatusRange = DEFAULT_FACILITY_RANGE,
        default_threshold_hours: int = DEFAULT_THRESHOLD_HOURS,
    ) -> None:
        self.prep_range = prep_range
        self.facility_range = facility_range
        self.default_threshold_hours = default_threshold_hours
        self._statuses: dict[int, StatusDefinition] = {}
        for definition in definitions:
            if definition.status_id in self._statuses:
                raise ValueError(f"Duplicate status id {definition.status_id}")
            self._statuses[definition.status_id] = definition
        categorised: dict[str, list[StatusDefinition]] = defaultdict(list)
        for definition in self._statuses.values():
            categorised[definition.category].append(definition)
        self._categories = dict(categorised)

    def __len__(self) -> int:
        return len(self._statuses)

    def __contains__(self, status_id: object) -> bool:
        return status_id in self._statuses

    def get(self, status_id: int) -> Optional[StatusDefinition]:
        return self._statuses.get(status_id)

    def name_for(self, status_id: int, fallback: Optional[str] = None) -> str:
        definition = self._statuses.get(status_id)
        if definition is not None:
            return definition.name
        return fallback if fallback is not None else str(status_id)

    def all_statuses(self) -> list[StatusDefinition]:
        return list(self._statuses.values())

    def prep_statuses(self) -> list[StatusDefinition]:
        return [s for s in self._statuses.values() if self.is_in_prep_range(s.status_id)]

    def facility_statuses(self) -> list[StatusDefinition]:
        return [s for s in self._statuses.values() if self.is_in_facility_range(s.status_id)]

    def threshold_for(self, status_id: int) -> int:
        if self.prep_range.contains(status_id):
            return self.prep_range.threshold_hours
        if self.facility_range.contains(status_id):
            return self.facility_range.threshold_hours
        return self.default_threshold_hours

    def is_in_prep_range(self, status_id: int) -> bool:
        return self.prep_range.contains(status_id)

    def is_in_facility_range(self, status_id: int) -> bool:
        return self.facility_range.contains(status_id)

    def is_ranged(self, status_id: int) -> bool:
        """Return True when the status drives alerting (prep or facility band)."""

        return self.is_in_prep_range(status_id) or self.is_in_facility_range(status_id)

    def category_of(self, status_id: int) -> str:
        definition = self._statuses.get(status_id)
        return definition.category if definition is not None else UNCLASSIFIED_CATEGORY

    def categories(self) -> dict[str, list[StatusDefinition]]:
        return {name: list(items) for name, items in self._categories.items()}

    def statuses_in_category(self, category: str) -> list[StatusDefinition]:
        return list(self._categories.get(category, []))

    def categories_of(self, status_ids: Iterable[int]) -> dict[str, int]:
        """Count the given status ids per category, preserving first-seen order."""

        counts: dict[str, int] = {}
        for status_id in status_ids:
            category = self.category_of(status_id)
            counts[category] = counts.get(category, 0) + 1
        return counts


# (status_id, name, category)
_PREP_CATALOG: tuple[tuple[int, str, str], ...] = (
    (3001, "Initialized_New", "Preparation"),
    (3002, "Initialized_Rma", "Preparation"),
    (3003, "Initialized_Reprint", "Preparation"),
    (3004, "ReprintRequested", "Preparation"),
    (3020, "FacilityAssigned", "Preparation"),
    (3030, "Order Split (Awaiting File)", "Preparation"),
    (3040, "DistributionAssigned", "Preparation"),
    (3050, "PreparationStarted", "Preparation"),
    (3052, "FileReceived", "Preparation"),
    (3053, "LabPrintPendingPdf", "Preparation"),
    (3054, "LabPrintPdfPendingCompress", "Preparation"),
    (3055, "PreReadyToPrint", "Preparation"),
    (3056, "PreparationDone_Individual", "Preparation"),
    (3058, "PreparationDoneAwaitingDecison", "Preparation"),
    (3059, "PreparationDoneAwaingReview", "Preparation"),
    (3060, "PreparationDone", "Preparation"),
    (3720, "PrintBoxAlert_RenderStatusFailure", "PrintBoxAlert"),
    (3721, "PrintBoxAlert_HasIncorrectPageCount", "PrintBoxAlert"),
    (3722, "PrintBoxAlert_ProjectOrdered", "PrintBoxAlert"),
    (3723, "PrintBoxAlert_HasEditorValidationError", "PrintBoxAlert"),
    (3724, "PrintBoxAlert_AlreadyExists", "PrintBoxAlert"),
    (3725, "PrintBoxAlert_RenderStatusFailureJS", "PrintBoxAlert"),
    (3726, "PrintBoxAlert_OrderStatusError", "PrintBoxAlert"),
    (3727, "PrintBoxAlert_HasDisabledValues", "PrintBoxAlert"),
    (3728, "PrintBoxAlert_HasMissingPhotos", "PrintBoxAlert"),
    (3729, "PrintBoxAlert_Unhandle", "PrintBoxAlert"),
    (3730, "RyzanAlert_ValidationFail", "RyzanAlert"),
    (3731, "RyzanAlert_InvalidRatio", "RyzanAlert"),
    (3732, "RyzanAlert_PendingDownload", "RyzanAlert"),
    (3790, "FileStatusError", "FileError"),
    (3791, "PrintBoxAlert_RenderStatusFailureJS_FontIssue", "PrintBoxAlert"),
    (3796, "PrintBoxAlert_Reviewed_Accepted", "PrintBoxAlert"),
    (3797, "PrintBoxAlert_Reviewed_ContactCustomerRequired", "PrintBoxAlert"),
    (3798, "PrintBoxAlert_ContactedCustomer", "PrintBoxAlert"),
    (3800, "GiveWayToXmasDelivery", "OnHold"),
    (3801, "OnHoldFreeCode", "OnHold"),
    (3802, "OnHoldOutOfStock", "OnHold"),
    (3803, "OnHoldBadAddress", "OnHold"),
    (3804, "AlertBadAddressIrishRepublic", "OnHold"),
    (3805, "OnHoldBadAddressNoResponse", "OnHold"),
    (3806, "AlertBadAddressIllegibleZipcode", "OnHold"),
    (3807, "Verification_Hold", "OnHold"),
    (3808, "OnHoldXmasStandard", "OnHold"),
    (3809, "OnHoldXmasPriority", "OnHold"),
    (3810, "Verification_ContactedCustomer", "OnHold"),
    (3811, "QualityIssueContactedCustomer", "OnHold"),
    (3815, "PREP:BadAddressContactedCustomer", "OnHold"),
    (3820, "OnHoldEmptyPhotoElement", "OnHold"),
    (3821, "OnHoldEmptyPhotoElementConfirmed", "OnHold"),
    (3822, "AlertCP_Erroneous", "Alert"),
    (3823, "AlertCP_DownloadPhotoFail", "Alert"),
    (3824, "AlertCP_DownloadXmlFail", "Alert"),
    (3825, "AlertCP_OldOrderNoFile", "Alert"),
    (3826, "AlertPackageInfoMissing", "Alert"),
    (3827, "AlertRyzan_Erroneous", "Alert"),
    (3828, "AlertPrintBox_Erroneous", "Alert"),
    (3829, "AlertFile_NotFoundInLocation", "Alert"),
    (3830, "MwareError500", "Alert"),
    (3831, "InvalidRatio", "Alert"),
    (3832, "InvalidFujiSize", "Alert"),
    (3835, "PrepDoneAlert_NoProductWeight", "PrepDoneAlert"),
    (3836, "PrepDoneAlert_NoPackageWeight", "PrepDoneAlert"),
    (3840, "PrepDoneAlert_NoShippingRule", "PrepDoneAlert"),
    (3841, "AlertNoAllocationRule", "PrepDoneAlert"),
    (3842, "AlertBadOrderSplit", "PrepDoneAlert"),
    (3843, "PrepDoneAlert_UnsupportedProduct", "PrepDoneAlert"),
    (3844, "PrepDoneAlert_ProductVolumeMissing", "PrepDoneAlert"),
    (3845, "AlertOverWeight", "PrepDoneAlert"),
    (3846, "PrepDoneAlert_ProductionCostMissing", "PrepDoneAlert"),
    (3847, "AlertShippingCustomDeclarationHigh", "PrepDoneAlert"),
    (3848, "AlertPostalCodeIssue", "PrepDoneAlert"),
    (3849, "AlertUnsupportShippingservice", "PrepDoneAlert"),
    (3850, "InsertBOFail", "SystemError"),
    (3851, "PendingUpdate_NotForBO", "SystemError"),
    (3852, "UpdateFail_NotForBO", "SystemError"),
    (3853, "UpdateBoFail_NotForBO", "SystemError"),
    (3860, "Invalid", "Invalid"),
    (3861, "Unpaid", "Invalid"),
    (3865, "ErrorOldOrderNoFile", "SystemError"),
    (3866, "AlertNoWarehouseName", "Alert"),
    (3867, "AlertEmptyCONumber", "Alert"),
    (3868, "AlertPotentialDuplicate", "Alert"),
    (3871, "PrepDoneAlert_NoHoldShippingLabelFailed", "PrepDoneAlert"),
    (3872, "PrepDoneAlert_BadAddress", "PrepDoneAlert"),
    (3873, "PrepDoneAlert_BadAddressContactCustomerRequired", "PrepDoneAlert"),
    (3874, "PrepDoneAlert_BadAddressContactedCustomer", "PrepDoneAlert"),
    (3875, "PrepDoneAlert_BadAddressFixedForProduction", "PrepDoneAlert"),
    (3900, "ComError", "ComError"),
    (3901, "ComError_Payment", "ComError"),
    (3902, "ComError_Timeout", "ComError"),
    (3903, "ComError_AccessDenied", "ComError"),
    (3904, "ComError_BadProduct", "ComError"),
    (3905, "ComError_Kafka", "ComError"),
    (3906, "ComError_BadXml", "ComError"),
    (3907, "ComError_BadShippingService", "ComError"),
    (3908, "ComError_DuplicateKey", "ComError"),
    (3910, "QualityIssueNeedCancellation", "QualityIssue"),
)

_FACILITY_CATALOG: tuple[tuple[int, str, str], ...] = (
    (4001, "SentToFacility", "Facility"),
    (4005, "FacilityMetadataReceived", "Facility"),
    (4006, "FileRequested", "Facility"),
    (4010, "FacilityOrderSubmissionError", "FacilityError"),
    (4030, "FacilityReprintRequested", "FacilityReprint"),
    (4031, "FacilityReprintAccepted", "FacilityReprint"),
    (4032, "FacilityReprintRejected", "FacilityReprint"),
    (4039, "FacilityReprintFulfilled", "FacilityReprint"),
    (4040, "FacilityFileDownloading", "Facility"),
    (4050, "FacilityFileDownloaded", "Facility"),
    (4100, "FacilityFileReceived", "Facility"),
    (4101, "FacilityFileReceivedConfirmed", "Facility"),
    (4105, "Dispatched Status RollBack", "Facility"),
    (4110, "FacilityVerifiying", "Facility"),
    (4120, "FacilityVerified", "Facility"),
    (4130, "FacilityReleaseToProduction", "Facility"),
    (4140, "FacilityReachedProduction", "Facility"),
    (4150, "FacilityMaterialPrepared", "Facility"),
    (4160, "FacilityReadyToPrint", "Facility"),
    (4170, "FacilitySentToPrint", "Facility"),
    (4200, "PrintedInFacility", "Facility"),
    (4201, "Cut", "Manufacturing"),
    (4203, "Stretched", "Manufacturing"),
    (4205, "Sticking", "Manufacturing"),
    (4206, "Pressed", "Manufacturing"),
    (4210, "ManufacturedInFacility", "Manufacturing"),
    (4310, "FacilityConsolidationDone", "Facility"),
    (4320, "FacilityPartialDispatch", "Facility"),
    (4700, "DispatchedFromFacility", "Dispatch"),
    (4710, "FacilityDispatchedDirectObsolete", "Dispatch"),
    (4800, "ErrorInFacility", "FacilityError"),
    (4801, "ErrorInFacility_Timeout", "FacilityError"),
    (4802, "ErrorInFacility_Error500", "FacilityError"),
    (4803, "ErrorInFacility_BadData", "FacilityError"),
    (4804, "FacilityDownloadError_OutOfMemory", "FacilityError"),
    (4805, "FacilityErrorDLShippingLabel", "FacilityError"),
    (4810, "FacilityFeecbackBlankFile", "FacilityFeedback"),
    (4811, "FacilityFeecbackCorruptFile", "FacilityFeedback"),
    (4812, "FacilityFeecbackImpositionIssue", "FacilityFeedback"),
    (4813, "FacilityFeedbackMissingFile", "FacilityFeedback"),
    (4814, "FacilityFeecbackInternalReprint", "FacilityFeedback"),
    (4815, "FacilityFeedbackShippingError", "FacilityFeedback"),
    (4820, "FacilityHoldForReview", "FacilityHold"),
    (4840, "Awaiting Facility Reprint Approval", "FacilityHold"),
    (4845, "Out Of Stock Waiting to Print", "FacilityHold"),
    (4850, "Quality Issue given to CS", "FacilityHold"),
    (4855, "ShippingErrorContactedCustomer", "FacilityHold"),
    (4856, "ShippingErrorAddressCorrected", "FacilityHold"),
    (4880, "FacilityDownloadError_AspectRatioMismatch", "FacilityError"),
    (4881, "FacilityDownloadError_NumberOfPagesMismatch", "FacilityError"),
    (4882, "FacilityDownloadError_FileNotReady", "FacilityError"),
    (4883, "FacilityDownloadError_NoSuitableProcess", "FacilityError"),
    (4900, "CancelledByFacility", "Cancelled"),
    (5000, "DispatchedFromFacilityObsolete", "Shipping"),
    (5010, "Delivered To DC", "Shipping"),
    (5100, "Received from Facility", "Shipping"),
    (5140, "Distribution Pick List Printed", "Shipping"),
    (5150, "Distribution Consolidation", "Shipping"),
    (5153, "Distribution Consolidation Done", "Shipping"),
    (5155, "Awaiting Consolidation", "Shipping"),
    (5157, "Awaiting Consolidation Done", "Shipping"),
    (5200, "Distribution Order Verification", "Shipping"),
    (5600, "ShippingLabelPrinted", "Shipping"),
    (5605, "ParcelCollectedByCarrier", "Shipping"),
    (5800, "Quarantine", "Quarantine"),
    (5801, "Received damage in transit from Facility", "Quarantine"),
    (5802, "Received with quality issues", "Quarantine"),
    (5803, "Received duplicate", "Quarantine"),
    (5805, "Quarantine at Facility", "Quarantine"),
    (5810, "Waiting For REO OR RES", "ShippingIssue"),
    (5815, "Shipping Address Issue", "ShippingIssue"),
    (5816, "MANU:ShippingAddressIssueContactedCustomer", "ShippingIssue"),
    (5820, "Shipping Address Corrected", "ShippingIssue"),
    (5825, "Reprint Requested for Address Correction", "ShippingIssue"),
    (5830, "Shipping Voided", "ShippingIssue"),
)


def _range_from_settings(settings) -> StatusRange:
    return StatusRange(settings.min_status_id, settings.max_status_id, settings.threshold_hours)


def build_default_registry(thresholds: Optional["ThresholdSettings"] = None) -> StatusRegistry:
    """Build the registry holding the full catalog of monitored statuses.

    Each definition's threshold is derived from the range it falls in, so a
    configured override of a range threshold applies to the whole catalog.
    """

    if thresholds is None:
        prep_range, facility_range = DEFAULT_PREP_RANGE, DEFAULT_FACILITY_RANGE
        default_hours = DEFAULT_THRESHOLD_HOURS
    else:
        prep_range = _range_from_settings(thresholds.prep)
        facility_range = _range_from_settings(thresholds.facility)
        default_hours = thresholds.default_threshold_hours

    def threshold(status_id: int) -> int:
        if prep_range.contains(status_id):
            return prep_range.threshold_hours
        if facility_range.contains(status_id):
            return facility_range.threshold_hours
        return default_hours

    definitions = [
        StatusDefinition(status_id, name, category, threshold(status_id))
        for status_id, name, category in _PREP_CATALOG + _FACILITY_CATALOG
    ]
    return StatusRegistry(
        definitions,
        prep_range=prep_range,
        facility_range=facility_range,
        default_threshold_hours=default_hours,
    )
