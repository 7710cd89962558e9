from stockroom.services.allocation_set import AllocationResult, AllocationSet
from stockroom.services.allocation_validator import (
    AllocationValidator,
    ValidationError,
    ValidationReason,
    ValidationResult,
)
from stockroom.services.audit import CommitAuditLog
from stockroom.services.commit_service import AllocationCommitService, CommitReport
from stockroom.services.http_client import HttpClient, HttpError, StorageApiError, TransportError
from stockroom.services.location_index import LocationHierarchyIndex, LocationLevel
from stockroom.services.repository import (
    NotFoundError,
    Pagination,
    StorageVoucherRepository,
    VoucherFilters,
)
from stockroom.services.voucher_store import VoucherLifecycleStore

__all__ = [
    "AllocationCommitService",
    "AllocationResult",
    "AllocationSet",
    "AllocationValidator",
    "CommitAuditLog",
    "CommitReport",
    "HttpClient",
    "HttpError",
    "LocationHierarchyIndex",
    "LocationLevel",
    "NotFoundError",
    "Pagination",
    "StorageApiError",
    "StorageVoucherRepository",
    "TransportError",
    "ValidationError",
    "ValidationReason",
    "ValidationResult",
    "VoucherFilters",
    "VoucherLifecycleStore",
]
