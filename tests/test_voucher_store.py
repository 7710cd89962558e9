"""VoucherLifecycleStore unit testleri."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

from stockroom.models.location import Area, Row, Shelf, Warehouse
from stockroom.models.voucher import (
    Priority,
    StorageVoucher,
    StorageVoucherDetail,
    VoucherStatus,
)
from stockroom.services.http_client import HttpError, TransportError
from stockroom.services.location_index import LocationHierarchyIndex
from stockroom.services.repository import (
    NotFoundError,
    NotificationResult,
    StorageVoucherRepository,
    VoucherFilters,
)
from stockroom.services.voucher_store import VoucherLifecycleStore


def _voucher(voucher_id: str = "V1", status: VoucherStatus = VoucherStatus.APPROVED) -> StorageVoucher:
    detail = StorageVoucherDetail(id="D1", stock_id="STK1", code="C", name="N", quantity=10)
    return StorageVoucher(id=voucher_id, code=f"SV-{voucher_id}", status=status, details=[detail])


def _create_store(page_size: int = 10) -> tuple[VoucherLifecycleStore, MagicMock]:
    repository = MagicMock()
    repository.list_vouchers = AsyncMock(return_value=([_voucher("V1"), _voucher("V2")], 2))
    repository.get_voucher = AsyncMock(return_value=_voucher("V1"))
    repository.update_status = AsyncMock()
    repository.process_voucher = AsyncMock()
    repository.send_process_completed_email = AsyncMock(
        return_value=NotificationResult(200, "Email sent successfully")
    )
    return VoucherLifecycleStore(repository, page_size=page_size), repository


def _index() -> LocationHierarchyIndex:
    return LocationHierarchyIndex(
        warehouses=[Warehouse("W1", "WH-1", "Ana Depo")],
        areas=[Area("A1", "AR-1", "Alan 1", "W1")],
        rows=[Row("R1", "RW-1", "Sıra 1", "A1")],
        shelves=[Shelf("S1", "SH-1", "Raf 1", "R1")],
    )


class TestList:
    def test_malformed_count_surfaces_as_error(self):
        http = MagicMock()
        http.get = AsyncMock(return_value={"data": [], "count": {"total": 1}})
        store = VoucherLifecycleStore(StorageVoucherRepository(http))

        assert asyncio.run(store.list()) is None
        assert store.error
        assert store.results == []
        assert store.count == 0
        assert store.is_loading is False

    def test_list_populates_results(self):
        store, repository = _create_store()
        asyncio.run(store.list())
        assert [v.id for v in store.results] == ["V1", "V2"]
        assert store.count == 2
        assert store.error is None
        assert store.is_loading is False

    def test_failure_clears_previous_results(self):
        """Hata sonrası eski veri gösterilmez."""
        store, repository = _create_store()
        asyncio.run(store.list())
        assert store.count == 2

        repository.list_vouchers.side_effect = TransportError("bağlantı yok")
        result = asyncio.run(store.list())

        assert result is None
        assert store.results == []
        assert store.count == 0
        assert store.error
        assert store.is_loading is False

    def test_list_passes_filters_and_pagination(self):
        store, repository = _create_store(page_size=25)
        filters = VoucherFilters(status=VoucherStatus.PENDING, priority=Priority.HIGH)
        asyncio.run(store.list(filters))
        passed_filters, passed_pagination = repository.list_vouchers.await_args.args
        assert passed_filters is filters
        assert passed_pagination.page == 1
        assert passed_pagination.page_size == 25

    def test_apply_filters_resets_page(self):
        store, repository = _create_store()
        store.pagination.page = 3
        asyncio.run(store.apply_filters(code="SV-1", search="vida"))
        assert store.pagination.page == 1
        assert store.filters.code == "SV-1"
        assert store.filters.search == "vida"
        repository.list_vouchers.assert_awaited()

    def test_reset_filters(self):
        store, _ = _create_store()
        store.filters = VoucherFilters(code="X", assigned_to="u1")
        asyncio.run(store.reset_filters())
        assert store.filters == VoucherFilters()

    def test_go_to_page_respects_bounds(self):
        store, repository = _create_store(page_size=1)
        asyncio.run(store.list())
        assert store.page_count == 2

        assert asyncio.run(store.go_to_page(3)) is None
        assert asyncio.run(store.go_to_page(0)) is None
        assert repository.list_vouchers.await_count == 1

        asyncio.run(store.go_to_page(2))
        assert store.pagination.page == 2
        assert repository.list_vouchers.await_count == 2


class TestFetchById:
    def test_fetch_selects_voucher(self):
        store, _ = _create_store()
        voucher = asyncio.run(store.fetch_by_id("V1"))
        assert voucher is store.selected_voucher
        assert voucher.details[0].id == "D1"

    def test_not_found_clears_selection(self):
        store, repository = _create_store()
        asyncio.run(store.fetch_by_id("V1"))
        repository.get_voucher.side_effect = NotFoundError("Depolama fişi bulunamadı: V9")
        assert asyncio.run(store.fetch_by_id("V9")) is None
        assert store.selected_voucher is None
        assert "bulunamadı" in store.error


class TestOpenAllocation:
    def test_approved_voucher_opens_allocation(self):
        store, _ = _create_store()
        asyncio.run(store.fetch_by_id("V1"))
        allocation = store.open_allocation("D1", _index())
        assert allocation is not None
        assert allocation.total == 10

    def test_non_approved_voucher_is_refused(self):
        store, repository = _create_store()
        repository.get_voucher.return_value = _voucher("V1", VoucherStatus.PENDING)
        asyncio.run(store.fetch_by_id("V1"))
        assert store.open_allocation("D1", _index()) is None
        assert "PENDING" in store.error

    def test_unknown_detail(self):
        store, _ = _create_store()
        asyncio.run(store.fetch_by_id("V1"))
        assert store.open_allocation("D9", _index()) is None


class TestStatusTransitions:
    def test_server_status_is_adopted(self):
        store, repository = _create_store()
        repository.get_voucher.return_value = _voucher("V1", VoucherStatus.PENDING)
        asyncio.run(store.list())
        asyncio.run(store.fetch_by_id("V1"))
        # Sunucu farklı bir durum döndürse bile o benimsenir
        repository.update_status.return_value = _voucher("V1", VoucherStatus.REJECTED)

        voucher = asyncio.run(store.request_status_change("V1", VoucherStatus.APPROVED))

        assert voucher.status is VoucherStatus.REJECTED
        assert store.selected_voucher.status is VoucherStatus.REJECTED
        assert store.results[0].status is VoucherStatus.REJECTED

    def test_terminal_status_is_refused_locally(self):
        store, repository = _create_store()
        repository.get_voucher.return_value = _voucher("V1", VoucherStatus.CANCELLED)
        asyncio.run(store.fetch_by_id("V1"))

        assert asyncio.run(store.request_status_change("V1", VoucherStatus.PENDING)) is None
        repository.update_status.assert_not_awaited()
        assert store.error

    def test_status_failure_keeps_local_state(self):
        store, repository = _create_store()
        repository.get_voucher.return_value = _voucher("V1", VoucherStatus.PENDING)
        asyncio.run(store.fetch_by_id("V1"))
        repository.update_status.side_effect = HttpError(409, "çakışma")

        assert asyncio.run(store.request_status_change("V1", VoucherStatus.APPROVED)) is None
        assert store.selected_voucher.status is VoucherStatus.PENDING
        assert store.is_processing is False

    def test_unknown_status_string_is_refused(self):
        store, repository = _create_store()
        asyncio.run(store.fetch_by_id("V1"))

        assert asyncio.run(store.request_status_change("V1", "ARCHIVED")) is None
        repository.update_status.assert_not_awaited()
        assert "ARCHIVED" in store.error
        assert store.selected_voucher.status is VoucherStatus.APPROVED


class TestProcess:
    def test_process_adopts_returned_voucher(self):
        store, repository = _create_store()
        asyncio.run(store.list())
        asyncio.run(store.fetch_by_id("V1"))
        processed = _voucher("V1")
        processed.completed_at = "2026-10-17T10:00:00Z"
        repository.process_voucher.return_value = processed

        result = asyncio.run(store.request_process("V1"))

        assert result is processed
        assert store.selected_voucher is processed
        assert store.results[0] is processed
        assert store.results[1].id == "V2"

    def test_process_failure_does_not_mutate_status(self):
        store, repository = _create_store()
        asyncio.run(store.fetch_by_id("V1"))
        repository.process_voucher.side_effect = HttpError(500, "hata")

        assert asyncio.run(store.request_process("V1")) is None
        assert store.selected_voucher.status is VoucherStatus.APPROVED
        assert store.selected_voucher.completed_at is None
        assert store.error
        assert store.is_processing is False


class TestCompletionNotification:
    def test_notification_result(self):
        store, _ = _create_store()
        result = asyncio.run(store.request_completion_notification("V1"))
        assert result.status_code == 200

    def test_notification_failure_leaves_voucher(self):
        store, repository = _create_store()
        asyncio.run(store.fetch_by_id("V1"))
        repository.send_process_completed_email.side_effect = TransportError("smtp")

        assert asyncio.run(store.request_completion_notification("V1")) is None
        assert store.selected_voucher is not None
        assert store.selected_voucher.status is VoucherStatus.APPROVED
