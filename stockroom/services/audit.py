"""Yerleşim commit'leri için audit kaydı (bellek içi + opsiyonel S3)."""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


@dataclass
class CommitAuditEntry:
    entry_id: str
    voucher_id: str
    detail_id: str
    submitted: int
    committed: int
    failed: int
    allocated_quantity: int
    target_quantity: int
    timestamp: str = field(default_factory=lambda: datetime.utcnow().isoformat())


class CommitAuditLog:
    """Commit sonuçlarını kaydeder; bucket verilmişse S3'e de yazar."""

    def __init__(
        self,
        bucket_name: Optional[str] = None,
        region_name: str = "us-east-1",
        s3_client: Optional[Any] = None,
    ):
        self.bucket_name = bucket_name or None
        self._entries: list[CommitAuditEntry] = []
        self.s3 = s3_client
        if self.bucket_name and self.s3 is None:
            self.s3 = boto3.client("s3", region_name=region_name)

    def record(
        self,
        voucher_id: str,
        detail_id: str,
        submitted: int,
        committed: int,
        allocated_quantity: int,
        target_quantity: int,
    ) -> CommitAuditEntry:
        entry = CommitAuditEntry(
            entry_id=str(uuid.uuid4()),
            voucher_id=voucher_id,
            detail_id=detail_id,
            submitted=submitted,
            committed=committed,
            failed=submitted - committed,
            allocated_quantity=allocated_quantity,
            target_quantity=target_quantity,
        )
        self._entries.append(entry)
        self._write_to_s3(entry)
        return entry

    def get_entries(
        self,
        voucher_id: Optional[str] = None,
        detail_id: Optional[str] = None,
    ) -> list[CommitAuditEntry]:
        """Audit kayıtlarını filtreli olarak döndürür."""
        entries = self._entries
        if voucher_id:
            entries = [e for e in entries if e.voucher_id == voucher_id]
        if detail_id:
            entries = [e for e in entries if e.detail_id == detail_id]
        return entries

    def _write_to_s3(self, entry: CommitAuditEntry) -> None:
        if not self.bucket_name or self.s3 is None:
            return
        timestamp = entry.timestamp.replace(":", "-")
        key = f"allocation-commits/{entry.detail_id}/{timestamp}.json"
        try:
            self.s3.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=json.dumps(asdict(entry), default=str),
            )
        except (ClientError, BotoCoreError) as e:
            logger.warning("S3 audit log hatası: %s", e)
