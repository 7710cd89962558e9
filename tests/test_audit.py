"""CommitAuditLog unit testleri."""

import json
from unittest.mock import MagicMock

from botocore.exceptions import ClientError

from stockroom.services.audit import CommitAuditLog


class TestCommitAuditLog:
    def test_record_without_bucket_stays_in_memory(self):
        log = CommitAuditLog()
        entry = log.record("V1", "D1", submitted=3, committed=2, allocated_quantity=20, target_quantity=30)
        assert entry.failed == 1
        assert log.s3 is None
        assert len(log.get_entries()) == 1

    def test_record_writes_to_s3(self):
        s3 = MagicMock()
        log = CommitAuditLog("audit-bucket", s3_client=s3)
        log.record("V1", "D1", submitted=1, committed=1, allocated_quantity=5, target_quantity=5)

        s3.put_object.assert_called_once()
        kwargs = s3.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "audit-bucket"
        assert kwargs["Key"].startswith("allocation-commits/D1/")
        assert json.loads(kwargs["Body"])["committed"] == 1

    def test_s3_error_is_logged_not_raised(self):
        s3 = MagicMock()
        s3.put_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject"
        )
        log = CommitAuditLog("audit-bucket", s3_client=s3)
        entry = log.record("V1", "D1", submitted=1, committed=0, allocated_quantity=0, target_quantity=5)
        assert entry in log.get_entries()

    def test_filter_entries(self):
        log = CommitAuditLog()
        log.record("V1", "D1", 1, 1, 1, 1)
        log.record("V1", "D2", 1, 1, 1, 1)
        log.record("V2", "D3", 1, 1, 1, 1)
        assert len(log.get_entries(voucher_id="V1")) == 2
        assert len(log.get_entries(detail_id="D3")) == 1
