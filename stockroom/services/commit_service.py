"""Yerleşim commit servisi - Kalemleri bağımsız, idempotent upsert'lerle gönderir.

- Her kalem için ayrı istek, hepsi eşzamanlı
- Kalemler arası transaction yok; başarısız istek kardeşlerini iptal etmez
- Sonuç listesi girdiyle pozisyonel olarak hizalıdır (başarısız = None)

Varsayılan davranışta detayın kalemleri yalnızca başarıyla kaydedilenlerle
değiştirilir; başarısız bekleyen kalemler bellekten düşer. Tekrar deneme için
korunmaları isteniyorsa keep_failed=True verilmelidir.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from stockroom.models.voucher import StorageVoucher, StorageVoucherDetail, StorageVoucherItem
from stockroom.services.allocation_set import AllocationSet
from stockroom.services.allocation_validator import AllocationValidator, ValidationError
from stockroom.services.audit import CommitAuditLog
from stockroom.services.http_client import StorageApiError
from stockroom.services.repository import StorageVoucherRepository

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Depolama lokasyonları başarıyla güncellendi"
PARTIAL_FAILURE_MESSAGE = "Bazı lokasyonlar güncellenemedi"
BLOCKED_MESSAGE = "Yerleşim kaydedilemez"

CommitResult = Optional[StorageVoucherItem]


@dataclass
class CommitReport:
    results: list[CommitResult] = field(default_factory=list)
    blocked: bool = False
    blockers: list[ValidationError] = field(default_factory=list)
    message: str = ""

    @property
    def committed_items(self) -> list[StorageVoucherItem]:
        return [r for r in self.results if r is not None]

    @property
    def failure_count(self) -> int:
        return sum(1 for r in self.results if r is None)

    @property
    def has_errors(self) -> bool:
        return self.blocked or self.failure_count > 0


class AllocationCommitService:
    """AllocationSet kalemlerini backend'e gönderir ve sonuçları toplar."""

    def __init__(
        self,
        repository: StorageVoucherRepository,
        validator: Optional[AllocationValidator] = None,
        audit_log: Optional[CommitAuditLog] = None,
    ):
        self.repository = repository
        self.validator = validator or AllocationValidator()
        self.audit_log = audit_log or CommitAuditLog()

    async def commit(self, items: Sequence[StorageVoucherItem]) -> list[CommitResult]:
        """Tüm kalemleri eşzamanlı gönderir; hepsi sonuçlanana kadar bekler."""
        return list(await asyncio.gather(*(self._upsert(item) for item in items)))

    async def _upsert(self, item: StorageVoucherItem) -> CommitResult:
        try:
            return await self.repository.create_or_update_item(item)
        except (StorageApiError, KeyError, TypeError, ValueError) as e:
            logger.error("Kalem kaydedilemedi [%s]: %s", item.identity, e)
            return None

    @staticmethod
    def apply_results(
        detail: StorageVoucherDetail,
        items: Sequence[StorageVoucherItem],
        results: Sequence[CommitResult],
        keep_failed: bool = False,
    ) -> None:
        """Commit sonucunu detaya yazar.

        keep_failed=False: yalnızca başarılı kalemler kalır.
        keep_failed=True: başarısız kalemler orijinal kimlikleriyle yerinde korunur.
        """
        if keep_failed:
            detail.storage_voucher_items = [
                result if result is not None else item
                for item, result in zip(items, results)
            ]
        else:
            detail.storage_voucher_items = [r for r in results if r is not None]

    async def commit_allocation(
        self,
        allocation: AllocationSet,
        voucher: StorageVoucher,
        keep_failed: bool = False,
    ) -> CommitReport:
        """Kapı kontrolü + commit + detaya uygulama + audit."""
        blockers = self.validator.commit_blockers(allocation)
        if blockers:
            logger.info(
                "Commit engellendi [detay %s]: %s",
                allocation.detail_id,
                ", ".join(b.reason.value for b in blockers),
            )
            return CommitReport(blocked=True, blockers=blockers, message=BLOCKED_MESSAGE)

        items = list(allocation.items)
        results = await self.commit(items)
        report = CommitReport(results=results)
        report.message = PARTIAL_FAILURE_MESSAGE if report.failure_count else SUCCESS_MESSAGE

        detail = voucher.find_detail(allocation.detail_id)
        if detail is None:
            logger.warning(
                "Detay fişte bulunamadı, sonuç uygulanmadı: %s", allocation.detail_id
            )
        else:
            self.apply_results(detail, items, results, keep_failed=keep_failed)

        self.audit_log.record(
            voucher_id=voucher.id,
            detail_id=allocation.detail_id,
            submitted=len(items),
            committed=len(report.committed_items),
            allocated_quantity=sum(i.quantity for i in report.committed_items),
            target_quantity=allocation.total,
        )
        logger.info(
            "Commit tamamlandı [detay %s]: %d/%d kalem kaydedildi",
            allocation.detail_id,
            len(report.committed_items),
            len(items),
        )
        return report
