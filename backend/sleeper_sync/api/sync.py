import asyncio
import math
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import Awaitable, Callable, List, Optional, Set
from pydantic import BaseModel
from sleeper_sync.config import settings
from sleeper_sync.database import SessionLocal, get_db
from sleeper_sync.integrations.sleeper_api import SleeperAPIClient
from sleeper_sync.services.persistence import SqlAlchemyPersistence
from sleeper_sync.services.sync_service import SyncService, SyncResult
from sleeper_sync.services.sync_status_service import SyncStatusService, utcnow
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

SyncRunner = Callable[[str], Awaitable[SyncResult]]

class SyncResultResponse(BaseModel):
    success: bool
    leagues_processed: int
    rosters_processed: int
    matchups_processed: int
    drafts_processed: int
    errors: List[str]

class SyncResponse(BaseModel):
    success: bool
    message: str
    details: SyncResultResponse

class SyncLogResponse(BaseModel):
    id: int
    league_id: Optional[str] = None
    status: str
    details: Optional[dict] = None
    created_at: datetime

    class Config:
        from_attributes = True

class SyncStatusResponse(BaseModel):
    can_sync: bool
    hours_remaining: int
    last_sync_at: Optional[datetime] = None
    logs: List[SyncLogResponse]

async def run_user_sync(username: str) -> SyncResult:
    """Run a full sync with its own session and client, so it can outlive the request"""
    db = SessionLocal()
    client = SleeperAPIClient()
    try:
        service = SyncService(client, SqlAlchemyPersistence(db))
        return await service.sync_user_leagues(username)
    finally:
        await client.close()
        db.close()

def get_sync_runner() -> SyncRunner:
    return run_user_sync

def get_session_factory() -> Callable[[], Session]:
    return SessionLocal

# Follow-up tasks for syncs the request stopped waiting for
pending_results: Set[asyncio.Task] = set()

async def record_late_result(
    task: "asyncio.Future[SyncResult]",
    sync_log_id: int,
    user_id: str,
    session_factory: Callable[[], Session]
):
    """Finish the run log (and start the cooldown) once a timed-out sync completes"""
    try:
        result = await task
    except Exception as e:
        logger.error(f"Background sync for user {user_id} failed: {e}")
        result = SyncResult(success=False, errors=[str(e) or 'Unknown error occurred'])

    db = session_factory()
    try:
        status_service = SyncStatusService(db)
        sync_log = status_service.get_log(sync_log_id)
        if sync_log:
            status_service.finish_log(sync_log, result)
        if result.success:
            user = status_service.get_user(user_id)
            if user:
                status_service.mark_synced(user)
        logger.info(f"Recorded late sync result for user {user_id}: success={result.success}")
    finally:
        db.close()

def _hours(remaining) -> int:
    return math.ceil(remaining.total_seconds() / 3600)

@router.post("/{user_id}", response_model=SyncResponse)
async def sync_user(
    user_id: str,
    db: Session = Depends(get_db),
    runner: SyncRunner = Depends(get_sync_runner),
    session_factory: Callable[[], Session] = Depends(get_session_factory)
):
    """Sync every league of the user's linked Sleeper account"""
    status_service = SyncStatusService(db)

    user = status_service.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if not user.sleeper_username:
        raise HTTPException(status_code=400, detail="Sleeper username not set")

    remaining = status_service.cooldown_remaining(user)
    if remaining:
        raise HTTPException(
            status_code=429,
            detail={
                "error": "Sync cooldown active",
                "hours_remaining": _hours(remaining),
                "can_sync_at": status_service.next_sync_at(user).isoformat(),
            }
        )

    if status_service.active_log(user.id):
        raise HTTPException(status_code=409, detail="Sync already in progress")

    sync_log = status_service.start_log(user.id)

    logger.info(f"Starting sync for user: {user.sleeper_username}")
    started = utcnow()

    # The sync keeps running if we stop waiting for it
    task = asyncio.ensure_future(runner(user.sleeper_username))
    try:
        result = await asyncio.wait_for(asyncio.shield(task), timeout=settings.sync_timeout_seconds)
    except asyncio.TimeoutError:
        logger.warning(f"Sync for {user.sleeper_username} still running after {settings.sync_timeout_seconds}s")
        # The log stays in_progress until the follow-up records the outcome
        follow_up = asyncio.ensure_future(record_late_result(task, sync_log.id, user.id, session_factory))
        pending_results.add(follow_up)
        follow_up.add_done_callback(pending_results.discard)
        raise HTTPException(status_code=504, detail="Sync timed out")

    duration = (utcnow() - started).total_seconds()
    logger.info(f"Sync completed in {duration:.2f}s")

    status_service.finish_log(sync_log, result)
    if result.success:
        status_service.mark_synced(user)

    logger.info(
        f"Sync result for {user.sleeper_username}: success={result.success}, "
        f"leagues={result.leagues_processed}, rosters={result.rosters_processed}, "
        f"matchups={result.matchups_processed}, errors={result.errors}"
    )

    return SyncResponse(
        success=result.success,
        message="Data synced successfully" if result.success else "Sync completed with errors",
        details=SyncResultResponse(**result.to_dict())
    )

@router.get("/{user_id}", response_model=SyncStatusResponse)
async def get_sync_status(user_id: str, db: Session = Depends(get_db)):
    """Cooldown state and the latest sync logs for a user"""
    status_service = SyncStatusService(db)

    user = status_service.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    remaining = status_service.cooldown_remaining(user)
    return SyncStatusResponse(
        can_sync=remaining is None,
        hours_remaining=_hours(remaining) if remaining else 0,
        last_sync_at=user.last_sync_at,
        logs=[SyncLogResponse.model_validate(log) for log in status_service.recent_logs(user.id)]
    )
