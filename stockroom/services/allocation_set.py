"""Bir fiş detay satırı için lokasyon yerleşim çalışma kümesi.

AllocationSet değişmez bir değerdir: her komut (add/edit/remove/reset) yeni bir
küme ve varsa doğrulama hatası içeren AllocationResult döndürür. Reddedilen
komut kümeyi olduğu gibi bırakır.

Korunum: allocated + remaining == total her komuttan sonra geçerlidir.
remaining asla sıfıra kırpılmaz; negatif değer fazla yerleşimi gösterir.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from typing import Optional

from stockroom.models.location import LocationSelection, ShelfLineage
from stockroom.models.voucher import (
    ITEM_STATUS_PENDING,
    ItemIdentity,
    PendingId,
    StorageVoucherDetail,
    StorageVoucherItem,
)
from stockroom.services.allocation_validator import (
    AllocationValidator,
    ValidationError,
    ValidationResult,
    current_selection,
)
from stockroom.services.location_index import LocationHierarchyIndex, LocationLevel

logger = logging.getLogger(__name__)

_validator = AllocationValidator()


@dataclass(frozen=True)
class AllocationResult:
    allocation: "AllocationSet"
    error: Optional[ValidationError] = None
    validation: Optional[ValidationResult] = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def errors(self) -> list[ValidationError]:
        """Reddedilen komutun tüm alan hataları."""
        if self.validation is not None:
            return list(self.validation.errors)
        return [self.error] if self.error is not None else []

    @classmethod
    def rejected(
        cls, allocation: "AllocationSet", validation: ValidationResult
    ) -> "AllocationResult":
        return cls(allocation, validation.first_error, validation)


@dataclass(frozen=True)
class AllocationSet:
    detail_id: str
    stock_id: str
    total: int
    items: tuple[StorageVoucherItem, ...]
    index: LocationHierarchyIndex = field(compare=False, repr=False)
    initial_items: tuple[StorageVoucherItem, ...] = field(default=(), repr=False)
    next_sequence: int = 1

    @classmethod
    def initialize(
        cls, detail: StorageVoucherDetail, index: LocationHierarchyIndex
    ) -> "AllocationSet":
        """Detay satırının mevcut kalemleriyle kümeyi başlatır."""
        items = tuple(detail.storage_voucher_items)
        return cls(
            detail_id=detail.id,
            stock_id=detail.stock_id,
            total=detail.quantity,
            items=items,
            index=index,
            initial_items=items,
            next_sequence=_next_sequence(items),
        )

    @property
    def allocated(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def remaining(self) -> int:
        return self.total - self.allocated

    @property
    def pending_items(self) -> list[StorageVoucherItem]:
        return [item for item in self.items if item.is_pending]

    def find(self, item_id: ItemIdentity) -> Optional[StorageVoucherItem]:
        for item in self.items:
            if item.identity == item_id:
                return item
        return None

    # --- Komutlar ---

    def add(self, selection: LocationSelection, quantity: int) -> AllocationResult:
        """Yeni bir bekleyen kalem ekler."""
        result = _validator.can_add(self, selection, quantity)
        if not result.is_valid:
            return AllocationResult.rejected(self, result)

        lineage = self.index.lineage(selection.shelf_id)
        item = StorageVoucherItem(
            identity=PendingId(self.next_sequence),
            detail_id=self.detail_id,
            stock_id=self.stock_id,
            quantity=quantity,
            level=selection.level,
            position=selection.position,
            status=ITEM_STATUS_PENDING,
            **_location_fields(lineage),
        )
        updated = replace(
            self, items=self.items + (item,), next_sequence=self.next_sequence + 1
        )
        if updated.remaining < 0:
            logger.info(
                "Detay %s fazla yerleşimde: kalan=%d", self.detail_id, updated.remaining
            )
        return AllocationResult(updated)

    def edit(
        self,
        item_id: ItemIdentity,
        selection: Optional[LocationSelection] = None,
        quantity: Optional[int] = None,
    ) -> AllocationResult:
        """Kalemi yerinde günceller; kimliği (sunucu id veya bekleyen sıra) korunur."""
        result = _validator.can_edit(self, item_id, selection, quantity)
        if not result.is_valid:
            return AllocationResult.rejected(self, result)

        current = self.find(item_id)
        selection = selection or current_selection(current, self.index)
        lineage = self.index.lineage(selection.shelf_id)
        edited = current.with_changes(
            quantity=current.quantity if quantity is None else quantity,
            level=selection.level,
            position=selection.position,
            status=ITEM_STATUS_PENDING,
            **_location_fields(lineage),
        )
        items = tuple(edited if item.identity == item_id else item for item in self.items)
        return AllocationResult(replace(self, items=items))

    def remove(self, item_id: ItemIdentity) -> AllocationResult:
        """Kalemi siler. Bulunamazsa küme değişmeden döner."""
        if self.find(item_id) is None:
            logger.debug("Silinecek kalem bulunamadı: %s", item_id)
            return AllocationResult(self)
        items = tuple(item for item in self.items if item.identity != item_id)
        return AllocationResult(replace(self, items=items))

    def reset(self) -> "AllocationSet":
        """Son initialize edilen duruma döner."""
        return replace(
            self,
            items=self.initial_items,
            next_sequence=_next_sequence(self.initial_items),
        )


def _next_sequence(items: tuple[StorageVoucherItem, ...]) -> int:
    sequences = [
        item.identity.sequence for item in items if isinstance(item.identity, PendingId)
    ]
    return max(sequences, default=0) + 1


def _location_fields(lineage: ShelfLineage) -> dict:
    # Denormalize alanlar daima hiyerarşiden türetilir.
    return {
        "warehouse_id": lineage.warehouse.id,
        "area_id": lineage.area.id,
        "row_id": lineage.row.id,
        "shelf_id": lineage.shelf.id,
        "warehouse_name": lineage.warehouse.name,
        "area_name": lineage.area.name,
        "row_name": lineage.row.name,
        "shelf_name": lineage.shelf.name,
    }


# --- Kademeli seçim ---

def reconcile_selection(
    selection: LocationSelection, index: LocationHierarchyIndex
) -> LocationSelection:
    """Üst seçimin artık geçerli çocuk olarak vermediği alt seçimleri temizler.

    Bir seviye temizlendiğinde altındaki tüm seviyeler de temizlenir.
    """
    warehouse_id = selection.warehouse_id
    if index.get_warehouse(warehouse_id) is None:
        warehouse_id = None

    area_id = _keep_if_child(selection.area_id, warehouse_id, LocationLevel.WAREHOUSE, index)
    row_id = _keep_if_child(selection.row_id, area_id, LocationLevel.AREA, index)
    shelf_id = _keep_if_child(selection.shelf_id, row_id, LocationLevel.ROW, index)

    return replace(
        selection,
        warehouse_id=warehouse_id,
        area_id=area_id,
        row_id=row_id,
        shelf_id=shelf_id,
    )


def _keep_if_child(
    child_id: Optional[str],
    parent_id: Optional[str],
    parent_level: LocationLevel,
    index: LocationHierarchyIndex,
) -> Optional[str]:
    if not child_id:
        return None
    children = index.children_of(parent_id, parent_level)
    if any(child.id == child_id for child in children):
        return child_id
    return None


def selection_from_shelf(
    shelf_id: str,
    index: LocationHierarchyIndex,
    level: int = 1,
    position: int = 1,
) -> Optional[LocationSelection]:
    """Raftan yukarı yürüyerek tam seçim oluşturur."""
    lineage = index.lineage(shelf_id)
    if lineage is None:
        return None
    return LocationSelection.from_lineage(lineage, level, position)


def selection_from_scan(
    raw: str, index: LocationHierarchyIndex
) -> Optional[LocationSelection]:
    """Raf QR etiketini ({"code", "name", "level"?, "position"?}) seçime çevirir."""
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Raf etiketi okunamadı: %r", raw)
        return None
    if not isinstance(payload, dict) or "code" not in payload:
        logger.warning("Raf etiketinde kod yok: %r", raw)
        return None

    shelf = index.find_shelf_by_code(str(payload["code"]))
    if shelf is None:
        logger.warning("Etiketteki raf bulunamadı: %s", payload["code"])
        return None

    try:
        level = int(payload.get("level") or 1)
        position = int(payload.get("position") or 1)
    except (TypeError, ValueError):
        level, position = 1, 1
    return selection_from_shelf(shelf.id, index, level=level, position=position)
