"""
Depolama fişi yerleşim akışı demo script'i (gerçek backend ile).

Kullanım:
    export STOCKROOM_API_URL="https://wms.example.com"
    export STOCKROOM_ACCESS_TOKEN="..."
    python demo.py <voucher_id> <detail_id> <shelf_code> <quantity>

Ana veri (depo/alan/sıra/raf) `master_data.json` dosyasından okunur:
    {"warehouses": [...], "areas": [...], "rows": [...], "shelfs": [...]}
"""

import asyncio
import json
import sys

from stockroom.config import Settings, configure_logging
from stockroom.services import (
    AllocationCommitService,
    CommitAuditLog,
    HttpClient,
    LocationHierarchyIndex,
    StorageVoucherRepository,
    VoucherLifecycleStore,
)
from stockroom.services.allocation_set import selection_from_shelf


def load_master_data(path: str = "master_data.json") -> LocationHierarchyIndex:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return LocationHierarchyIndex.from_payloads(
        warehouses=data.get("warehouses", []),
        areas=data.get("areas", []),
        rows=data.get("rows", []),
        shelves=data.get("shelfs", []),
    )


async def main(voucher_id: str, detail_id: str, shelf_code: str, quantity: int) -> int:
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    client = HttpClient(
        settings.api_url,
        access_token=settings.access_token,
        refresh_token=settings.refresh_token,
        timeout=settings.timeout,
    )
    repository = StorageVoucherRepository(client)
    store = VoucherLifecycleStore(repository, page_size=settings.page_size)
    committer = AllocationCommitService(
        repository,
        audit_log=CommitAuditLog(settings.audit_bucket, region_name=settings.region_name),
    )
    index = load_master_data()

    voucher = await store.fetch_by_id(voucher_id)
    if voucher is None:
        print(f"❌ Fiş yüklenemedi: {store.error}")
        return 1
    print(f"✅ Fiş: {voucher.code} ({voucher.status.value}), {len(voucher.details)} detay satırı")

    allocation = store.open_allocation(detail_id, index)
    if allocation is None:
        print(f"❌ Yerleşim açılamadı: {store.error}")
        return 1
    print(f"   Hedef={allocation.total} Yerleşen={allocation.allocated} Kalan={allocation.remaining}")

    shelf = index.find_shelf_by_code(shelf_code)
    selection = selection_from_shelf(shelf.id, index) if shelf else None
    if selection is None:
        print(f"❌ Raf bulunamadı: {shelf_code}")
        return 1

    result = allocation.add(selection, quantity)
    if not result.ok:
        print(f"❌ {result.error.field}: {result.error.message}")
        return 1
    allocation = result.allocation
    print(f"   Ekleme sonrası kalan: {allocation.remaining}")

    report = await committer.commit_allocation(allocation, voucher)
    icon = "⚠️" if report.has_errors else "✅"
    print(f"{icon} {report.message} ({report.failure_count} başarısız)")
    return 1 if report.has_errors else 0


if __name__ == "__main__":
    if len(sys.argv) != 5:
        print(__doc__)
        sys.exit(2)
    sys.exit(asyncio.run(main(sys.argv[1], sys.argv[2], sys.argv[3], int(sys.argv[4]))))
