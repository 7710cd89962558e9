"""Depolama fişi (storage voucher) veri modelleri."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Optional, Union


class VoucherStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (VoucherStatus.REJECTED, VoucherStatus.CANCELLED)


class Priority(IntEnum):
    HIGH = 1
    MEDIUM = 2
    LOW = 3


# İstemci yalnızca talep eder; sonraki durumu her zaman sunucu belirler.
ALLOWED_TRANSITIONS: dict[VoucherStatus, frozenset[VoucherStatus]] = {
    VoucherStatus.DRAFT: frozenset(
        {VoucherStatus.PENDING, VoucherStatus.REJECTED, VoucherStatus.CANCELLED}
    ),
    VoucherStatus.PENDING: frozenset(
        {VoucherStatus.APPROVED, VoucherStatus.REJECTED, VoucherStatus.CANCELLED}
    ),
    VoucherStatus.APPROVED: frozenset({VoucherStatus.REJECTED, VoucherStatus.CANCELLED}),
    VoucherStatus.REJECTED: frozenset(),
    VoucherStatus.CANCELLED: frozenset(),
}

ITEM_STATUS_PENDING = "PENDING"


def can_request_transition(current: VoucherStatus, target: VoucherStatus) -> bool:
    """Mevcut durumdan hedef duruma geçiş talebinin anlamlı olup olmadığını döndürür."""
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


@dataclass(frozen=True)
class CommittedId:
    """Sunucuda kalıcı hale gelmiş kalemin kimliği."""

    server_id: str


@dataclass(frozen=True)
class PendingId:
    """Henüz gönderilmemiş, yalnızca istemcide var olan kalemin kimliği."""

    sequence: int


ItemIdentity = Union[CommittedId, PendingId]


@dataclass(frozen=True)
class StorageVoucherItem:
    identity: ItemIdentity
    detail_id: str
    stock_id: str
    quantity: int
    warehouse_id: str = ""
    area_id: str = ""
    row_id: str = ""
    shelf_id: str = ""
    warehouse_name: str = ""
    area_name: str = ""
    row_name: str = ""
    shelf_name: str = ""
    level: int = 1
    position: int = 1
    status: str = ITEM_STATUS_PENDING
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return isinstance(self.identity, PendingId)

    @property
    def server_id(self) -> Optional[str]:
        if isinstance(self.identity, CommittedId):
            return self.identity.server_id
        return None

    def with_changes(self, **changes) -> "StorageVoucherItem":
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: dict, detail_id: str = "") -> "StorageVoucherItem":
        return cls(
            identity=CommittedId(str(data["id"])),
            detail_id=str(data.get("storageVoucherDetailId") or detail_id),
            stock_id=str(data.get("stockId") or ""),
            quantity=int(data.get("quantity") or 0),
            warehouse_id=str(data.get("warehouseId") or ""),
            area_id=str(data.get("areaId") or ""),
            row_id=str(data.get("rowId") or ""),
            shelf_id=str(data.get("shelfId") or ""),
            warehouse_name=data.get("warehouseName") or "",
            area_name=data.get("areaName") or "",
            row_name=data.get("rowName") or "",
            shelf_name=data.get("shelfName") or "",
            level=int(data.get("level") or 1),
            position=int(data.get("position") or 1),
            status=data.get("status") or ITEM_STATUS_PENDING,
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


@dataclass
class StorageVoucherDetail:
    id: str
    stock_id: str
    code: str
    name: str
    quantity: int
    supplier: str = ""
    lot_number: str = ""
    expiry_date: Optional[str] = None
    cost: str = ""
    notes: str = ""
    status: str = ""
    voucher_id: str = ""
    storage_voucher_items: list[StorageVoucherItem] = field(default_factory=list)

    @property
    def allocated_quantity(self) -> int:
        return sum(item.quantity for item in self.storage_voucher_items)

    @classmethod
    def from_dict(cls, data: dict, voucher_id: str = "") -> "StorageVoucherDetail":
        detail_id = str(data["id"])
        return cls(
            id=detail_id,
            stock_id=str(data.get("stockId") or ""),
            code=data.get("code") or "",
            name=data.get("name") or "",
            quantity=int(data.get("quantity") or 0),
            supplier=data.get("supplier") or "",
            lot_number=data.get("lotNumber") or "",
            expiry_date=data.get("expiryDate"),
            cost=str(data.get("cost") or ""),
            notes=data.get("notes") or "",
            status=data.get("status") or "",
            voucher_id=str(data.get("storageVoucherId") or voucher_id),
            storage_voucher_items=[
                StorageVoucherItem.from_dict(raw, detail_id)
                for raw in data.get("storageVoucherItems") or []
            ],
        )


@dataclass
class StorageVoucher:
    id: str
    code: str
    status: VoucherStatus
    priority: Priority = Priority.MEDIUM
    storage_date: Optional[str] = None
    notes: str = ""
    created_by: str = ""
    assigned_to: str = ""
    assigned_name: str = ""
    is_valid_for_process: bool = False
    completed_at: Optional[str] = None
    details: list[StorageVoucherDetail] = field(default_factory=list)

    @property
    def allows_allocation(self) -> bool:
        return self.status is VoucherStatus.APPROVED

    def find_detail(self, detail_id: str) -> Optional[StorageVoucherDetail]:
        for detail in self.details:
            if detail.id == detail_id:
                return detail
        return None

    @classmethod
    def from_dict(cls, data: dict) -> "StorageVoucher":
        voucher_id = str(data["id"])
        priority = data.get("priority")
        return cls(
            id=voucher_id,
            code=data.get("code") or "",
            status=VoucherStatus(data.get("status") or VoucherStatus.DRAFT.value),
            priority=Priority(int(priority)) if priority is not None else Priority.MEDIUM,
            storage_date=data.get("storageDate"),
            notes=data.get("notes") or "",
            created_by=data.get("createdBy") or "",
            assigned_to=data.get("assignedTo") or "",
            assigned_name=data.get("assignedName") or "",
            is_valid_for_process=bool(data.get("isValidForProcess", False)),
            completed_at=data.get("completedAt"),
            details=[
                StorageVoucherDetail.from_dict(raw, voucher_id)
                for raw in data.get("details") or []
            ],
        )
