"""Activity log: append-only audit trail of account actions."""

from datetime import datetime
from typing import Any

from sqlalchemy import delete

from gatekeep.models import ActivityRecord
from gatekeep.stores.base import SqlStore


class ActivityLog(SqlStore):
    def append(
        self,
        account_id: int,
        action: str,
        now: datetime,
        session_id: int | None = None,
        resource: str | None = None,
        address_hash: str | None = None,
        metadata: Any = None,
        success: bool = True,
    ) -> ActivityRecord:
        record = ActivityRecord(
            account_id=account_id,
            session_id=session_id,
            action=action,
            resource=resource,
            address_hash=address_hash,
            metadata_json=metadata,
            success=success,
            created_at=now,
        )
        with self.transaction() as db:
            db.add(record)
        return record

    def delete_before(self, cutoff: datetime) -> int:
        """Irreversible; audit rows have no dependants."""
        with self.transaction() as db:
            result = db.execute(
                delete(ActivityRecord)
                .where(ActivityRecord.created_at < cutoff)
                .execution_options(synchronize_session=False)
            )
        return result.rowcount
