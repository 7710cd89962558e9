"""Depo lokasyon hiyerarşisi veri modelleri: Depo → Alan → Sıra → Raf."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Warehouse:
    id: str
    code: str
    name: str
    location: str = ""
    is_active: bool = True
    is_deleted: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "Warehouse":
        return cls(
            id=str(data["id"]),
            code=data.get("code") or "",
            name=data.get("name") or "",
            location=data.get("location") or "",
            is_active=bool(data.get("isActive", True)),
            is_deleted=bool(data.get("isDeleted", False)),
        )


@dataclass(frozen=True)
class Area:
    id: str
    code: str
    name: str
    warehouse_id: str
    is_active: bool = True
    is_deleted: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "Area":
        return cls(
            id=str(data["id"]),
            code=data.get("code") or "",
            name=data.get("name") or "",
            warehouse_id=str(data.get("warehouseId") or ""),
            is_active=bool(data.get("isActive", True)),
            is_deleted=bool(data.get("isDeleted", False)),
        )


@dataclass(frozen=True)
class Row:
    id: str
    code: str
    name: str
    area_id: str
    is_active: bool = True
    is_deleted: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "Row":
        return cls(
            id=str(data["id"]),
            code=data.get("code") or "",
            name=data.get("name") or "",
            area_id=str(data.get("areaId") or ""),
            is_active=bool(data.get("isActive", True)),
            is_deleted=bool(data.get("isDeleted", False)),
        )


@dataclass(frozen=True)
class Shelf:
    id: str
    code: str
    name: str
    row_id: str
    # 0 = sınırsız
    level_count: int = 0
    positions_per_level: int = 0
    is_active: bool = True
    is_deleted: bool = False

    def accepts_level(self, level: int) -> bool:
        if level < 1:
            return False
        return not self.level_count or level <= self.level_count

    def accepts_position(self, position: int) -> bool:
        if position < 1:
            return False
        return not self.positions_per_level or position <= self.positions_per_level

    @classmethod
    def from_dict(cls, data: dict) -> "Shelf":
        return cls(
            id=str(data["id"]),
            code=data.get("code") or "",
            name=data.get("name") or "",
            row_id=str(data.get("rowId") or ""),
            level_count=int(data.get("levelCount") or 0),
            positions_per_level=int(data.get("positionsPerLevel") or 0),
            is_active=bool(data.get("isActive", True)),
            is_deleted=bool(data.get("isDeleted", False)),
        )


@dataclass(frozen=True)
class ShelfLineage:
    """Raftan depoya kadar yürünerek elde edilen tam lokasyon zinciri."""

    warehouse: Warehouse
    area: Area
    row: Row
    shelf: Shelf


@dataclass(frozen=True)
class LocationSelection:
    """Operatörün kademeli seçimle oluşturduğu hedef lokasyon."""

    warehouse_id: Optional[str] = None
    area_id: Optional[str] = None
    row_id: Optional[str] = None
    shelf_id: Optional[str] = None
    level: int = 1
    position: int = 1

    def missing_fields(self) -> list[str]:
        return [
            name
            for name in ("warehouse_id", "area_id", "row_id", "shelf_id")
            if not getattr(self, name)
        ]

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()

    @classmethod
    def from_lineage(
        cls, lineage: ShelfLineage, level: int = 1, position: int = 1
    ) -> "LocationSelection":
        return cls(
            warehouse_id=lineage.warehouse.id,
            area_id=lineage.area.id,
            row_id=lineage.row.id,
            shelf_id=lineage.shelf.id,
            level=level,
            position=position,
        )

    @classmethod
    def from_item(cls, item) -> "LocationSelection":
        return cls(
            warehouse_id=item.warehouse_id or None,
            area_id=item.area_id or None,
            row_id=item.row_id or None,
            shelf_id=item.shelf_id or None,
            level=item.level,
            position=item.position,
        )
