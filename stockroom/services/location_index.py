"""Lokasyon hiyerarşisi üzerinde saf arama ve filtreleme.

- Üst seviye seçimine göre alt seviye listesini türetir
- Raftan depoya kadar tam zinciri (lineage) çözer
- Raf koduna göre arama yapar (QR etiket okuma)

Ana veri (depo, alan, sıra, raf) dışarıdan düz listeler halinde verilir;
index hiçbir zaman seçim durumunu değiştirmez veya onarmaz.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional, Sequence, Union

from stockroom.models.location import Area, Row, Shelf, ShelfLineage, Warehouse

LocationRecord = Union[Warehouse, Area, Row, Shelf]


class LocationLevel(str, Enum):
    WAREHOUSE = "warehouse"
    AREA = "area"
    ROW = "row"
    SHELF = "shelf"


class LocationHierarchyIndex:
    """Depo → Alan → Sıra → Raf hiyerarşisi için değişmez arama yapısı."""

    def __init__(
        self,
        warehouses: Iterable[Warehouse] = (),
        areas: Iterable[Area] = (),
        rows: Iterable[Row] = (),
        shelves: Iterable[Shelf] = (),
    ) -> None:
        self._warehouses: tuple[Warehouse, ...] = tuple(warehouses)
        self._areas: tuple[Area, ...] = tuple(areas)
        self._rows: tuple[Row, ...] = tuple(rows)
        self._shelves: tuple[Shelf, ...] = tuple(shelves)

        self._warehouse_by_id = {w.id: w for w in self._warehouses}
        self._area_by_id = {a.id: a for a in self._areas}
        self._row_by_id = {r.id: r for r in self._rows}
        self._shelf_by_id = {s.id: s for s in self._shelves}

    @classmethod
    def from_payloads(
        cls,
        warehouses: Iterable[dict] = (),
        areas: Iterable[dict] = (),
        rows: Iterable[dict] = (),
        shelves: Iterable[dict] = (),
    ) -> "LocationHierarchyIndex":
        """Ana veri servisinden gelen ham listelerden index oluşturur."""
        return cls(
            warehouses=[Warehouse.from_dict(w) for w in warehouses],
            areas=[Area.from_dict(a) for a in areas],
            rows=[Row.from_dict(r) for r in rows],
            shelves=[Shelf.from_dict(s) for s in shelves],
        )

    @property
    def warehouses(self) -> list[Warehouse]:
        return [w for w in self._warehouses if not w.is_deleted]

    def children_of(
        self, parent_id: Optional[str], level: LocationLevel
    ) -> Sequence[LocationRecord]:
        """`level` seviyesindeki `parent_id` kaydının bir alt seviyedeki çocuklarını döndürür.

        parent_id boşsa, bulunamıyorsa veya `level` raf ise boş liste döner.
        Silinmiş kayıtlar listelenmez.
        """
        if not parent_id:
            return []
        if level is LocationLevel.WAREHOUSE:
            children: Iterable[LocationRecord] = (
                a for a in self._areas if a.warehouse_id == parent_id
            )
        elif level is LocationLevel.AREA:
            children = (r for r in self._rows if r.area_id == parent_id)
        elif level is LocationLevel.ROW:
            children = (s for s in self._shelves if s.row_id == parent_id)
        else:
            return []
        return [c for c in children if not c.is_deleted]

    def get_warehouse(self, warehouse_id: Optional[str]) -> Optional[Warehouse]:
        return self._warehouse_by_id.get(warehouse_id) if warehouse_id else None

    def get_area(self, area_id: Optional[str]) -> Optional[Area]:
        return self._area_by_id.get(area_id) if area_id else None

    def get_row(self, row_id: Optional[str]) -> Optional[Row]:
        return self._row_by_id.get(row_id) if row_id else None

    def get_shelf(self, shelf_id: Optional[str]) -> Optional[Shelf]:
        return self._shelf_by_id.get(shelf_id) if shelf_id else None

    def lineage(self, shelf_id: Optional[str]) -> Optional[ShelfLineage]:
        """Raftan yukarı yürüyerek tam lokasyon zincirini döndürür.

        Zincirin herhangi bir halkası eksikse None döner.
        """
        shelf = self.get_shelf(shelf_id)
        if shelf is None:
            return None
        row = self.get_row(shelf.row_id)
        if row is None:
            return None
        area = self.get_area(row.area_id)
        if area is None:
            return None
        warehouse = self.get_warehouse(area.warehouse_id)
        if warehouse is None:
            return None
        return ShelfLineage(warehouse=warehouse, area=area, row=row, shelf=shelf)

    def find_shelf_by_code(self, code: str) -> Optional[Shelf]:
        """Raf koduna göre (etiket okuma) rafı bulur."""
        for shelf in self._shelves:
            if shelf.code == code and not shelf.is_deleted:
                return shelf
        return None
