"""
ShipSplit Exception Hierarchy

Structured exception classes for allocation, validation and label issuance.
All exceptions include code, message, and details for logging and API responses.

Exception Hierarchy:
    ShipSplitError
    ├── AllocationError
    │   ├── UnknownOrderItemError
    │   ├── DraftNotFoundError
    │   ├── PackageNotFoundError
    │   ├── DraftLockedError
    │   ├── LastDraftRemovalError
    │   └── InvalidPackageCountError
    ├── ShipmentValidationError
    ├── IssuanceError
    │   ├── CarrierResolutionError
    │   ├── LabelAPIError
    │   └── SubmissionInProgressError
    └── GatewayError
"""
import logging
from typing import Optional, Dict, Any, List

logger = logging.getLogger(__name__)


class ShipSplitError(Exception):
    """
    Base exception for all ShipSplit errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging
        severity: P0-P3 severity level
    """

    default_code: str = "SHIPSPLIT_ERROR"
    default_severity: str = "P2"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[str] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.severity = severity or self.default_severity
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


# =============================================================================
# ALLOCATION / DRAFT ERRORS
# =============================================================================

class AllocationError(ShipSplitError):
    """Base exception for draft and allocation mutations."""
    default_code = "ALLOCATION_ERROR"
    default_severity = "P3"


class UnknownOrderItemError(AllocationError):
    """Item id is not part of the order."""
    default_code = "UNKNOWN_ORDER_ITEM"

    def __init__(self, item_id: str, **kwargs):
        details = kwargs.pop("details", {})
        details["item_id"] = item_id
        super().__init__(f"Order item {item_id} not found", details=details, **kwargs)


class DraftNotFoundError(AllocationError):
    """Draft id is not in the collection."""
    default_code = "DRAFT_NOT_FOUND"

    def __init__(self, draft_id: str, **kwargs):
        details = kwargs.pop("details", {})
        details["draft_id"] = draft_id
        super().__init__(f"Shipment draft {draft_id} not found", details=details, **kwargs)


class PackageNotFoundError(AllocationError):
    """Package id is not on the draft."""
    default_code = "PACKAGE_NOT_FOUND"

    def __init__(self, draft_id: str, package_id: str, **kwargs):
        details = kwargs.pop("details", {})
        details.update({"draft_id": draft_id, "package_id": package_id})
        super().__init__(
            f"Package {package_id} not found on shipment draft {draft_id}",
            details=details,
            **kwargs,
        )


class DraftLockedError(AllocationError):
    """Draft reached a terminal state and can no longer change."""
    default_code = "DRAFT_LOCKED"

    def __init__(self, draft_id: str, draft_name: str, status: str, **kwargs):
        details = kwargs.pop("details", {})
        details.update({"draft_id": draft_id, "status": status})
        super().__init__(f"{draft_name} is {status.lower()} and cannot be changed", details=details, **kwargs)


class LastDraftRemovalError(AllocationError):
    """At least one draft must remain."""
    default_code = "LAST_DRAFT"

    def __init__(self, draft_id: str, **kwargs):
        details = kwargs.pop("details", {})
        details["draft_id"] = draft_id
        super().__init__("Cannot remove the only shipment", details=details, **kwargs)


class InvalidPackageCountError(AllocationError):
    """Weight distribution needs at least one package."""
    default_code = "INVALID_PACKAGE_COUNT"

    def __init__(self, package_count: int, **kwargs):
        details = kwargs.pop("details", {})
        details["package_count"] = package_count
        super().__init__(f"Package count must be at least 1, got {package_count}", details=details, **kwargs)


# =============================================================================
# VALIDATION ERRORS
# =============================================================================

class ShipmentValidationError(ShipSplitError):
    """
    Pre-submission validation failed.

    Fully recoverable: no external call has been made.
    """
    default_code = "SHIPMENT_VALIDATION_FAILED"
    default_severity = "P3"

    def __init__(self, errors: List[str], **kwargs):
        self.errors = list(errors)
        details = kwargs.pop("details", {})
        details["errors"] = self.errors
        super().__init__("; ".join(self.errors), details=details, **kwargs)


# =============================================================================
# ISSUANCE ERRORS
# =============================================================================

class IssuanceError(ShipSplitError):
    """Base exception for a label batch that stopped at a draft."""
    default_code = "ISSUANCE_ERROR"
    default_severity = "P1"

    def __init__(self, message: str, draft_id: Optional[str] = None, draft_name: Optional[str] = None, **kwargs):
        self.draft_id = draft_id
        self.draft_name = draft_name
        details = kwargs.pop("details", {})
        details.update({"draft_id": draft_id, "draft_name": draft_name})
        super().__init__(message, details=details, **kwargs)


class CarrierResolutionError(IssuanceError):
    """Draft's carrier id is no longer in the carrier directory."""
    default_code = "CARRIER_NOT_FOUND"

    def __init__(self, draft_id: str, draft_name: str, carrier_id: str, **kwargs):
        details = kwargs.pop("details", {})
        details["carrier_id"] = carrier_id
        super().__init__(
            f"Carrier not found for {draft_name}",
            draft_id=draft_id,
            draft_name=draft_name,
            details=details,
            **kwargs,
        )


class LabelAPIError(IssuanceError):
    """The label issuance call itself failed."""
    default_code = "LABEL_API_FAILED"

    def __init__(
        self,
        draft_id: str,
        draft_name: str,
        reason: str,
        status_code: Optional[int] = None,
        **kwargs
    ):
        self.reason = reason
        self.status_code = status_code
        details = kwargs.pop("details", {})
        details["status_code"] = status_code
        super().__init__(
            f"Failed to create {draft_name}: {reason}",
            draft_id=draft_id,
            draft_name=draft_name,
            details=details,
            **kwargs,
        )


class SubmissionInProgressError(IssuanceError):
    """A batch is already in flight for this coordinator."""
    default_code = "SUBMISSION_IN_PROGRESS"
    default_severity = "P2"

    def __init__(self, **kwargs):
        super().__init__("A label submission is already in progress", **kwargs)


# =============================================================================
# GATEWAY ERRORS
# =============================================================================

class GatewayError(ShipSplitError):
    """Transport or HTTP failure talking to the shipping gateway."""
    default_code = "GATEWAY_ERROR"
    default_severity = "P1"

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        self.status_code = status_code
        details = kwargs.pop("details", {})
        details["status_code"] = status_code
        super().__init__(message, details=details, **kwargs)
