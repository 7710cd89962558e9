"""Yerleşim (allocation) kuralları - Ekleme/düzenleme ön kontrolleri ve commit kararı.

- Eksik lokasyon seçimi kontrolü
- Pozitif miktar kontrolü
- Lokasyon zincirinin hiyerarşiyle tutarlılığı
- Raf kat/pozisyon sınırları
- Commit edilebilirlik (fazla yerleşim yasağı)

Kurallar hiçbir zaman exception fırlatmaz; alan bazlı hata listesi döndürür.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

from stockroom.models.location import LocationSelection
from stockroom.models.voucher import ItemIdentity, StorageVoucherItem
from stockroom.services.location_index import LocationHierarchyIndex

if TYPE_CHECKING:
    from stockroom.services.allocation_set import AllocationSet

logger = logging.getLogger(__name__)

_LINEAGE_FIELDS = (
    ("warehouse", "warehouse_id"),
    ("area", "area_id"),
    ("row", "row_id"),
    ("shelf", "shelf_id"),
)


class ValidationReason(str, Enum):
    INCOMPLETE_SELECTION = "incomplete_selection"
    NON_POSITIVE_QUANTITY = "non_positive_quantity"
    UNKNOWN_LOCATION = "unknown_location"
    SLOT_OUT_OF_RANGE = "slot_out_of_range"
    ITEM_NOT_FOUND = "item_not_found"
    EMPTY_ALLOCATION = "empty_allocation"
    OVER_ALLOCATED = "over_allocated"


@dataclass(frozen=True)
class ValidationError:
    """Yerel doğrulama hatası. Exception değildir, değer olarak döndürülür."""

    reason: ValidationReason
    field: str
    message: str


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def first_error(self) -> Optional[ValidationError]:
        return self.errors[0] if self.errors else None

    @property
    def reasons(self) -> list[ValidationReason]:
        return [e.reason for e in self.errors]

    def field_errors(self) -> dict[str, str]:
        """Form alanı başına ilk hata mesajı."""
        messages: dict[str, str] = {}
        for error in self.errors:
            messages.setdefault(error.field, error.message)
        return messages

    @classmethod
    def of(cls, errors: list[ValidationError]) -> "ValidationResult":
        return cls(is_valid=not errors, errors=list(errors))


class AllocationValidator:
    """AllocationSet mutasyonları ve commit kararı için durumsuz kurallar."""

    # --- Lokasyon ve miktar kontrolleri ---

    @staticmethod
    def check_selection(
        selection: LocationSelection,
        quantity: int,
        index: LocationHierarchyIndex,
    ) -> list[ValidationError]:
        errors: list[ValidationError] = []

        for name in selection.missing_fields():
            errors.append(
                ValidationError(
                    ValidationReason.INCOMPLETE_SELECTION,
                    name,
                    "Depo, alan, sıra ve raf seçimi zorunludur",
                )
            )

        if quantity is None or quantity <= 0:
            errors.append(
                ValidationError(
                    ValidationReason.NON_POSITIVE_QUANTITY,
                    "quantity",
                    f"Miktar pozitif olmalı: {quantity}",
                )
            )

        if not selection.is_complete:
            return errors

        lineage = index.lineage(selection.shelf_id)
        if lineage is None:
            errors.append(
                ValidationError(
                    ValidationReason.UNKNOWN_LOCATION,
                    "shelf_id",
                    f"Raf hiyerarşide bulunamadı: {selection.shelf_id}",
                )
            )
            return errors

        deleted = [
            (name, getattr(lineage, link))
            for link, name in _LINEAGE_FIELDS
            if getattr(lineage, link).is_deleted
        ]
        for name, record in deleted:
            errors.append(
                ValidationError(
                    ValidationReason.UNKNOWN_LOCATION,
                    name,
                    f"Silinmiş lokasyon seçilemez: {name}={record.id}",
                )
            )
        if deleted:
            return errors

        expected = {
            "warehouse_id": lineage.warehouse.id,
            "area_id": lineage.area.id,
            "row_id": lineage.row.id,
        }
        for name, expected_id in expected.items():
            if getattr(selection, name) != expected_id:
                errors.append(
                    ValidationError(
                        ValidationReason.UNKNOWN_LOCATION,
                        name,
                        f"Seçim raf zinciriyle uyuşmuyor: {name}="
                        f"{getattr(selection, name)}, beklenen={expected_id}",
                    )
                )

        shelf = lineage.shelf
        if not shelf.accepts_level(selection.level):
            errors.append(
                ValidationError(
                    ValidationReason.SLOT_OUT_OF_RANGE,
                    "level",
                    f"Kat raf sınırları dışında: {selection.level} (kat sayısı={shelf.level_count})",
                )
            )
        if not shelf.accepts_position(selection.position):
            errors.append(
                ValidationError(
                    ValidationReason.SLOT_OUT_OF_RANGE,
                    "position",
                    f"Pozisyon raf sınırları dışında: {selection.position} "
                    f"(kat başına pozisyon={shelf.positions_per_level})",
                )
            )

        return errors

    # --- Ön kontrol sorguları ---

    def can_add(
        self,
        allocation: "AllocationSet",
        selection: LocationSelection,
        quantity: int,
    ) -> ValidationResult:
        """Yeni kalem eklemenin kabul edilip edilmeyeceğini döndürür."""
        return ValidationResult.of(
            self.check_selection(selection, quantity, allocation.index)
        )

    def can_edit(
        self,
        allocation: "AllocationSet",
        item_id: ItemIdentity,
        selection: Optional[LocationSelection] = None,
        quantity: Optional[int] = None,
    ) -> ValidationResult:
        """Mevcut kalemin düzenlenmesinin kabul edilip edilmeyeceğini döndürür.

        Verilmeyen alanlar kalemin mevcut değerleriyle doldurulur.
        """
        item = allocation.find(item_id)
        if item is None:
            return ValidationResult.of(
                [
                    ValidationError(
                        ValidationReason.ITEM_NOT_FOUND,
                        "item_id",
                        f"Kalem bulunamadı: {item_id}",
                    )
                ]
            )
        merged_selection = selection or current_selection(item, allocation.index)
        merged_quantity = item.quantity if quantity is None else quantity
        return ValidationResult.of(
            self.check_selection(merged_selection, merged_quantity, allocation.index)
        )

    # --- Commit kararı ---

    def commit_blockers(self, allocation: "AllocationSet") -> list[ValidationError]:
        errors: list[ValidationError] = []
        if not allocation.items:
            errors.append(
                ValidationError(
                    ValidationReason.EMPTY_ALLOCATION,
                    "items",
                    "Kaydedilecek lokasyon yok",
                )
            )
        if allocation.remaining < 0:
            errors.append(
                ValidationError(
                    ValidationReason.OVER_ALLOCATED,
                    "quantity",
                    f"Yerleşim hedef miktarı aşıyor: fazla={-allocation.remaining}",
                )
            )
        return errors

    def can_commit(self, allocation: "AllocationSet") -> bool:
        """Kalem varsa ve kalan miktar negatif değilse True.

        Eksik yerleşim (kalan > 0) kabul edilir; kısmi yerleşim geçerli bir durumdur.
        """
        return not self.commit_blockers(allocation)


def current_selection(
    item: StorageVoucherItem, index: LocationHierarchyIndex
) -> LocationSelection:
    """Kalemin bugünkü seçimini raf zincirinden türetir.

    Kalemdeki depo/alan/sıra id'leri kopyadır ve eskimiş olabilir; raf
    hiyerarşide yoksa kalemin kendi değerlerine düşülür.
    """
    lineage = index.lineage(item.shelf_id) if item.shelf_id else None
    if lineage is None:
        return LocationSelection.from_item(item)
    return LocationSelection.from_lineage(lineage, item.level, item.position)
