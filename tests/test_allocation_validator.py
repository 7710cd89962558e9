"""AllocationValidator unit testleri."""

from stockroom.models.location import Area, LocationSelection, Row, Shelf, Warehouse
from stockroom.models.voucher import PendingId, StorageVoucherDetail
from stockroom.services.allocation_set import AllocationSet
from stockroom.services.allocation_validator import AllocationValidator, ValidationReason
from stockroom.services.location_index import LocationHierarchyIndex

LOC = LocationSelection("W1", "A1", "R1", "S1")


def _build_set(quantity: int = 10) -> AllocationSet:
    index = LocationHierarchyIndex(
        warehouses=[Warehouse("W1", "WH-1", "Ana Depo")],
        areas=[Area("A1", "AR-1", "Alan 1", "W1")],
        rows=[Row("R1", "RW-1", "Sıra 1", "A1")],
        shelves=[Shelf("S1", "SH-1", "Raf 1", "R1", level_count=2, positions_per_level=2)],
    )
    detail = StorageVoucherDetail(id="D1", stock_id="STK1", code="C", name="N", quantity=quantity)
    return AllocationSet.initialize(detail, index)


class TestCanAdd:
    def test_valid_selection(self):
        result = AllocationValidator().can_add(_build_set(), LOC, 5)
        assert result.is_valid is True
        assert result.errors == []

    def test_reports_every_missing_field(self):
        """Her eksik alan ayrı hata olarak raporlanır."""
        result = AllocationValidator().can_add(_build_set(), LocationSelection("W1"), 5)
        assert result.is_valid is False
        assert [e.field for e in result.errors] == ["area_id", "row_id", "shelf_id"]
        assert set(result.reasons) == {ValidationReason.INCOMPLETE_SELECTION}

    def test_incomplete_and_non_positive_together(self):
        result = AllocationValidator().can_add(_build_set(), LocationSelection(), 0)
        fields = result.field_errors()
        assert "warehouse_id" in fields
        assert "quantity" in fields

    def test_unknown_shelf(self):
        result = AllocationValidator().can_add(
            _build_set(), LocationSelection("W1", "A1", "R1", "S9"), 1
        )
        assert result.reasons == [ValidationReason.UNKNOWN_LOCATION]

    def test_position_out_of_range(self):
        result = AllocationValidator().can_add(
            _build_set(), LocationSelection("W1", "A1", "R1", "S1", level=2, position=3), 1
        )
        assert result.reasons == [ValidationReason.SLOT_OUT_OF_RANGE]
        assert result.first_error.field == "position"

    def test_can_add_does_not_mutate(self):
        allocation = _build_set()
        AllocationValidator().can_add(allocation, LOC, 5)
        assert allocation.items == ()


class TestCanEdit:
    def test_missing_item(self):
        result = AllocationValidator().can_edit(_build_set(), PendingId(1), quantity=3)
        assert result.reasons == [ValidationReason.ITEM_NOT_FOUND]

    def test_partial_edit_uses_existing_fields(self):
        allocation = _build_set().add(LOC, 4).allocation
        result = AllocationValidator().can_edit(allocation, PendingId(1), quantity=6)
        assert result.is_valid is True


class TestCanCommit:
    def test_empty_set_cannot_commit(self):
        validator = AllocationValidator()
        allocation = _build_set()
        assert validator.can_commit(allocation) is False
        assert [b.reason for b in validator.commit_blockers(allocation)] == [
            ValidationReason.EMPTY_ALLOCATION
        ]

    def test_under_allocation_can_commit(self):
        allocation = _build_set(10).add(LOC, 3).allocation
        assert AllocationValidator().can_commit(allocation) is True

    def test_exact_allocation_can_commit(self):
        allocation = _build_set(10).add(LOC, 10).allocation
        assert AllocationValidator().can_commit(allocation) is True

    def test_over_allocation_blocks_commit(self):
        allocation = _build_set(10).add(LOC, 11).allocation
        validator = AllocationValidator()
        assert validator.can_commit(allocation) is False
        assert validator.commit_blockers(allocation)[0].reason is ValidationReason.OVER_ALLOCATED
