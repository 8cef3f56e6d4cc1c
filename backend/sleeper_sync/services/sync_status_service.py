from datetime import datetime, timedelta, timezone
from typing import List, Optional
from sqlalchemy.orm import Session
from sleeper_sync.config import settings
from sleeper_sync.models.users import AppUser, SyncLog
from sleeper_sync.services.sync_service import SyncResult
import logging

logger = logging.getLogger(__name__)

def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the DateTime columns store"""
    return datetime.now(timezone.utc).replace(tzinfo=None)

class SyncStatusService:
    """Cooldown and run-log bookkeeping around user syncs"""

    def __init__(self, db: Session, cooldown: timedelta = timedelta(hours=settings.sync_cooldown_hours)):
        self.db = db
        self.cooldown = cooldown

    def get_user(self, user_id: str) -> Optional[AppUser]:
        return self.db.query(AppUser).filter(AppUser.id == user_id).first()

    def cooldown_remaining(self, user: AppUser, now: Optional[datetime] = None) -> Optional[timedelta]:
        """Time left before the user may sync again, or None if a sync is allowed"""
        if not user.last_sync_at:
            return None
        now = now or utcnow()
        remaining = user.last_sync_at + self.cooldown - now
        return remaining if remaining > timedelta(0) else None

    def next_sync_at(self, user: AppUser) -> Optional[datetime]:
        return user.last_sync_at + self.cooldown if user.last_sync_at else None

    def active_log(
        self,
        user_id: str,
        stale_after: timedelta = timedelta(seconds=settings.sync_stale_after_seconds),
        now: Optional[datetime] = None
    ) -> Optional[SyncLog]:
        """Latest in-progress run log that is not old enough to count as abandoned"""
        now = now or utcnow()
        return self.db.query(SyncLog).filter(
            SyncLog.user_id == user_id,
            SyncLog.status == 'in_progress',
            SyncLog.created_at > now - stale_after
        ).order_by(SyncLog.created_at.desc()).first()

    def get_log(self, sync_log_id: int) -> Optional[SyncLog]:
        return self.db.query(SyncLog).filter(SyncLog.id == sync_log_id).first()

    def start_log(self, user_id: str) -> SyncLog:
        started = utcnow()
        sync_log = SyncLog(
            user_id=user_id,
            league_id='all',
            status='in_progress',
            details={'started_at': started.isoformat()},
            created_at=started
        )
        self.db.add(sync_log)
        self.db.commit()
        return sync_log

    def finish_log(self, sync_log: SyncLog, result: SyncResult) -> SyncLog:
        details = dict(sync_log.details or {})
        details.update(result.to_dict())
        details['completed_at'] = utcnow().isoformat()

        sync_log.status = 'success' if result.success else 'failed'
        sync_log.details = details
        self.db.commit()
        return sync_log

    def mark_synced(self, user: AppUser, when: Optional[datetime] = None):
        user.last_sync_at = when or utcnow()
        self.db.commit()

    def recent_logs(self, user_id: str, limit: int = 10) -> List[SyncLog]:
        return self.db.query(SyncLog).filter(
            SyncLog.user_id == user_id
        ).order_by(SyncLog.created_at.desc(), SyncLog.id.desc()).limit(limit).all()
