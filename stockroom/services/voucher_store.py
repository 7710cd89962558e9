"""Depolama fişi yaşam döngüsü - Listeleme, filtreleme, detay ve durum geçişleri.

- Sayfalı ve filtreli fiş listesi
- Fiş detayının (detay satırları + kalemler) yüklenmesi
- Durum değişikliği ve işleme (process) talepleri
- Tamamlanma e-postası bildirimi

Tüm uzak hatalar burada yakalanır; çağırana exception değil, None ve
okunabilir bir `error` metni döner. Hata durumunda eski veri gösterilmez.
Durum geçişlerinde sunucunun döndürdüğü durum olduğu gibi benimsenir.
"""

from __future__ import annotations

import logging
import math
from dataclasses import fields, replace
from typing import Optional

from stockroom.models.voucher import StorageVoucher, VoucherStatus, can_request_transition
from stockroom.services.allocation_set import AllocationSet
from stockroom.services.http_client import StorageApiError
from stockroom.services.location_index import LocationHierarchyIndex
from stockroom.services.repository import (
    NotificationResult,
    Pagination,
    StorageVoucherRepository,
    VoucherFilters,
)

logger = logging.getLogger(__name__)


class VoucherLifecycleStore:
    """Fiş listesi ve seçili fiş durumunu tutan store."""

    def __init__(self, repository: StorageVoucherRepository, page_size: int = 10):
        self.repository = repository
        self.is_loading = False
        self.is_processing = False
        self.results: list[StorageVoucher] = []
        self.count = 0
        self.filters = VoucherFilters()
        self.pagination = Pagination(page=1, page_size=page_size)
        self.selected_voucher: Optional[StorageVoucher] = None
        self.error: Optional[str] = None

    @property
    def page_count(self) -> int:
        if self.pagination.page_size <= 0:
            return 0
        return math.ceil(self.count / self.pagination.page_size)

    @property
    def is_empty(self) -> bool:
        return not self.results

    # --- Listeleme ---

    async def list(
        self,
        filters: Optional[VoucherFilters] = None,
        pagination: Optional[Pagination] = None,
    ) -> Optional[tuple[list[StorageVoucher], int]]:
        """Mevcut filtre ve sayfa ile fiş listesini yükler."""
        if filters is not None:
            self.filters = filters
        if pagination is not None:
            self.pagination = pagination

        self.is_loading = True
        self.error = None
        try:
            results, count = await self.repository.list_vouchers(
                self.filters, self.pagination
            )
        except (StorageApiError, ValueError) as e:
            logger.error("Depolama fişleri alınamadı: %s", e)
            self.error = str(e) or "Failed to fetch storage vouchers"
            self.results = []
            self.count = 0
            return None
        finally:
            self.is_loading = False

        self.results = results
        self.count = count
        return results, count

    async def apply_filters(self, **changes) -> Optional[tuple[list[StorageVoucher], int]]:
        """Filtreleri birleştirir, ilk sayfaya döner ve listeyi yeniler."""
        known = {f.name for f in fields(VoucherFilters)}
        unknown = set(changes) - known
        if unknown:
            raise TypeError(f"Bilinmeyen filtre: {', '.join(sorted(unknown))}")
        self.filters = replace(self.filters, **changes)
        self.pagination.page = 1
        return await self.list()

    async def reset_filters(self) -> Optional[tuple[list[StorageVoucher], int]]:
        self.filters = VoucherFilters()
        self.pagination.page = 1
        return await self.list()

    async def go_to_page(self, page: int) -> Optional[tuple[list[StorageVoucher], int]]:
        """Geçerli aralıktaysa (1..page_count) sayfaya gider, değilse hiçbir şey yapmaz."""
        if 1 <= page <= self.page_count:
            self.pagination.page = page
            return await self.list()
        return None

    # --- Tekil fiş ---

    async def fetch_by_id(self, voucher_id: str) -> Optional[StorageVoucher]:
        """Fişi detay satırları ve kalemleriyle birlikte yükler."""
        self.is_loading = True
        self.error = None
        try:
            voucher = await self.repository.get_voucher(voucher_id)
        except StorageApiError as e:
            logger.error("Fiş detayı alınamadı [%s]: %s", voucher_id, e)
            self.error = str(e) or "Failed to fetch storage voucher details"
            self.selected_voucher = None
            return None
        finally:
            self.is_loading = False

        self.selected_voucher = voucher
        return voucher

    def open_allocation(
        self, detail_id: str, index: LocationHierarchyIndex
    ) -> Optional[AllocationSet]:
        """Seçili onaylı fişin detay satırı için yerleşim kümesi açar."""
        voucher = self.selected_voucher
        if voucher is None:
            self.error = "Seçili fiş yok"
            return None
        if not voucher.allows_allocation:
            self.error = f"Fiş onaylı değil: {voucher.status.value}"
            return None
        detail = voucher.find_detail(detail_id)
        if detail is None:
            self.error = f"Detay satırı bulunamadı: {detail_id}"
            return None
        return AllocationSet.initialize(detail, index)

    # --- Durum geçişleri ---

    def _known_voucher(self, voucher_id: str) -> Optional[StorageVoucher]:
        if self.selected_voucher is not None and self.selected_voucher.id == voucher_id:
            return self.selected_voucher
        for voucher in self.results:
            if voucher.id == voucher_id:
                return voucher
        return None

    def _adopt(self, voucher: StorageVoucher) -> None:
        for i, existing in enumerate(self.results):
            if existing.id == voucher.id:
                self.results[i] = voucher
        if self.selected_voucher is not None and self.selected_voucher.id == voucher.id:
            self.selected_voucher = voucher

    async def request_status_change(
        self, voucher_id: str, status: VoucherStatus
    ) -> Optional[StorageVoucher]:
        """Durum geçişi talep eder; sunucunun döndürdüğü fişi benimser."""
        try:
            target = VoucherStatus(status)
        except ValueError:
            self.error = f"Bilinmeyen fiş durumu: {status}"
            logger.warning("%s [%s]", self.error, voucher_id)
            return None
        known = self._known_voucher(voucher_id)
        if known is not None and not can_request_transition(known.status, target):
            self.error = f"Geçersiz durum geçişi: {known.status.value} -> {target.value}"
            logger.warning("%s [%s]", self.error, voucher_id)
            return None

        self.is_processing = True
        self.error = None
        try:
            voucher = await self.repository.update_status(voucher_id, target)
        except StorageApiError as e:
            logger.error("Fiş durumu güncellenemedi [%s]: %s", voucher_id, e)
            self.error = str(e) or "Failed to update storage voucher status"
            return None
        finally:
            self.is_processing = False

        self._adopt(voucher)
        return voucher

    async def request_process(self, voucher_id: str) -> Optional[StorageVoucher]:
        """Fişin işlenmesini talep eder; başarısızlıkta yerel durum değişmez."""
        self.is_processing = True
        self.error = None
        try:
            voucher = await self.repository.process_voucher(voucher_id)
        except StorageApiError as e:
            logger.error("Fiş işlenemedi [%s]: %s", voucher_id, e)
            self.error = str(e) or "Failed to process storage voucher"
            return None
        finally:
            self.is_processing = False

        self._adopt(voucher)
        logger.info("Fiş işlendi: %s (durum=%s)", voucher_id, voucher.status.value)
        return voucher

    async def request_completion_notification(
        self, voucher_id: str
    ) -> Optional[NotificationResult]:
        """Tamamlanma e-postasını tetikler. Fiş durumunu etkilemez."""
        try:
            return await self.repository.send_process_completed_email(voucher_id)
        except StorageApiError as e:
            logger.warning("Tamamlanma e-postası gönderilemedi [%s]: %s", voucher_id, e)
            self.error = str(e) or "Failed to send process completed email"
            return None
