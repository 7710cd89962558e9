"""Depolama fişi REST uç noktaları ve payload dönüşümleri."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Union

from stockroom.models.voucher import (
    CommittedId,
    Priority,
    StorageVoucher,
    StorageVoucherItem,
    VoucherStatus,
)
from stockroom.services.http_client import HttpClient, StorageApiError

logger = logging.getLogger(__name__)

API_BASE_URL = "/api/storage-vouchers"
API_BASE_MOBILE_URL = "/api/mobile/storage-vouchers"


class NotFoundError(StorageApiError):
    """Backend boş payload döndürdü."""
    pass


class UnexpectedResponseError(StorageApiError):
    """Backend yanıtı beklenen yapıda değil."""
    pass


@dataclass
class VoucherFilters:
    code: Optional[str] = None
    status: Optional[VoucherStatus] = None
    priority: Optional[Priority] = None
    assigned_to: Optional[str] = None
    storage_date_start: Optional[Union[date, str]] = None
    storage_date_end: Optional[Union[date, str]] = None
    search: Optional[str] = None


@dataclass
class Pagination:
    page: int = 1
    page_size: int = 10


@dataclass
class NotificationResult:
    status_code: int
    message: str


def _date_param(value: Optional[Union[date, str]]) -> Optional[str]:
    if value is None or value == "":
        return None
    return value.isoformat() if isinstance(value, date) else str(value)


def build_list_params(filters: VoucherFilters, pagination: Pagination) -> dict:
    """Liste sorgusu parametrelerini backend adlandırmasıyla oluşturur."""
    params: dict[str, Any] = {}
    if pagination.page:
        params["page"] = pagination.page
    if pagination.page_size:
        params["pageSize"] = pagination.page_size
    if filters.code:
        params["code"] = filters.code
    if filters.status:
        params["status"] = VoucherStatus(filters.status).value
    if filters.priority is not None:
        params["priorityList"] = int(filters.priority)
    if filters.assigned_to:
        params["assignedTo"] = filters.assigned_to
    start = _date_param(filters.storage_date_start)
    if start:
        params["storageDateStart"] = start
    end = _date_param(filters.storage_date_end)
    if end:
        params["storageDateEnd"] = end
    if filters.search:
        params["search"] = filters.search
    return params


def item_to_payload(item: StorageVoucherItem) -> dict:
    """Upsert gövdesi. id yalnızca kalıcı kalemlerde gönderilir."""
    payload = {
        "storageVoucherDetailId": item.detail_id,
        "stockId": item.stock_id,
        "warehouseId": item.warehouse_id,
        "areaId": item.area_id,
        "rowId": item.row_id,
        "shelfId": item.shelf_id,
        "warehouseName": item.warehouse_name,
        "areaName": item.area_name,
        "rowName": item.row_name,
        "shelfName": item.shelf_name,
        "quantity": item.quantity,
        "level": item.level,
        "position": item.position,
        "status": item.status,
    }
    if item.server_id is not None:
        payload["id"] = item.server_id
    return payload


def item_from_upsert_response(raw: dict, sent: StorageVoucherItem) -> StorageVoucherItem:
    """Upsert yanıtını (PascalCase) kaleme çevirir; lokasyon adları gönderilen kalemden alınır."""
    if not raw.get("Id"):
        raise UnexpectedResponseError("Kalem yanıtında Id yok")
    return sent.with_changes(
        identity=CommittedId(str(raw["Id"])),
        detail_id=str(raw.get("StorageVoucherDetailId") or sent.detail_id),
        stock_id=str(raw.get("StockId") or sent.stock_id),
        quantity=int(raw.get("Quantity", sent.quantity)),
        level=int(raw.get("Level", sent.level)),
        position=int(raw.get("Position", sent.position)),
        status=raw.get("Status") or sent.status,
        created_at=raw.get("CreatedAt"),
        updated_at=raw.get("UpdatedAt"),
    )


def _unwrap(response: Any) -> Any:
    if isinstance(response, dict) and isinstance(response.get("data"), dict):
        return response["data"]
    return response


class StorageVoucherRepository:
    """Depolama fişi backend sözleşmelerini saran depo."""

    def __init__(self, http_client: HttpClient):
        self.http = http_client

    async def list_vouchers(
        self, filters: VoucherFilters, pagination: Pagination
    ) -> tuple[list[StorageVoucher], int]:
        response = await self.http.get(
            API_BASE_MOBILE_URL, params=build_list_params(filters, pagination)
        )
        if not isinstance(response, dict) or not isinstance(response.get("data"), list):
            raise UnexpectedResponseError("Beklenmeyen liste yanıtı")

        try:
            vouchers = [StorageVoucher.from_dict(raw) for raw in response["data"]]
        except (KeyError, TypeError, ValueError) as e:
            raise UnexpectedResponseError(f"Fiş listesi çözümlenemedi: {e}") from e

        count = response.get("count", response.get("total"))
        if count is None:
            return vouchers, len(vouchers)
        try:
            return vouchers, int(count)
        except (TypeError, ValueError) as e:
            raise UnexpectedResponseError(f"Fiş sayısı çözümlenemedi: {count!r}") from e

    async def get_voucher(self, voucher_id: str) -> StorageVoucher:
        response = await self.http.get(f"{API_BASE_MOBILE_URL}/{voucher_id}")
        return self._parse_voucher(response, f"Depolama fişi bulunamadı: {voucher_id}")

    async def update_status(self, voucher_id: str, status: VoucherStatus) -> StorageVoucher:
        response = await self.http.patch(
            f"{API_BASE_URL}/{voucher_id}/status", {"status": VoucherStatus(status).value}
        )
        return self._parse_voucher(response, f"Durum güncellenemedi: {voucher_id}")

    async def process_voucher(self, voucher_id: str) -> StorageVoucher:
        response = await self.http.post(f"{API_BASE_URL}/{voucher_id}/process", {})
        return self._parse_voucher(response, f"Fiş işlenemedi: {voucher_id}")

    async def create_or_update_item(self, item: StorageVoucherItem) -> StorageVoucherItem:
        response = await self.http.post(
            f"{API_BASE_URL}/create-or-update-item", item_to_payload(item)
        )
        if not isinstance(response, dict) or not isinstance(response.get("data"), dict):
            raise UnexpectedResponseError("Kalem oluşturulamadı/güncellenemedi")
        return item_from_upsert_response(response["data"], item)

    async def send_process_completed_email(self, voucher_id: str) -> NotificationResult:
        response = await self.http.get(
            f"{API_BASE_MOBILE_URL}/send-email-process-completed/{voucher_id}"
        )
        if not isinstance(response, dict) or not response.get("data"):
            raise UnexpectedResponseError("Tamamlanma e-postası gönderilemedi")
        data = response["data"] if isinstance(response["data"], dict) else {}
        return NotificationResult(
            status_code=int(data.get("statusCode") or 200),
            message=data.get("message") or "Email sent successfully",
        )

    @staticmethod
    def _parse_voucher(response: Any, missing_message: str) -> StorageVoucher:
        data = _unwrap(response)
        if not data:
            raise NotFoundError(missing_message)
        if not isinstance(data, dict):
            raise UnexpectedResponseError("Beklenmeyen fiş yanıtı")
        try:
            return StorageVoucher.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise UnexpectedResponseError(f"Fiş çözümlenemedi: {e}") from e
