# portal/services/audit_service.py

from typing import Optional, Dict, Any
from loguru import logger
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.models.audit import AuditLog
from portal.core.database import AsyncSessionLocal


# This function manages its own session so a failed write never rolls back
# the caller's transaction.
async def log_activity(
    action: str,
    actor_id: Optional[int],
    target_type: Optional[str] = None,
    target_id: Optional[int] = None,
    reason: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None
):
    """
    Creates an audit log entry in a separate DB session.
    Safe for use in BackgroundTasks.
    """
    async with AsyncSessionLocal() as session:
        try:
            session.add(AuditLog(
                actor_id=actor_id,
                action=action,
                target_type=target_type,
                target_id=target_id,
                reason=reason,
                details=details or {}
            ))
            await session.commit()

        except Exception as e:
            logger.error(f"Audit log write failed ({action}): {e}")
            await session.rollback()


async def list_audit_logs(
    session: AsyncSession,
    action: Optional[str] = None,
    actor_id: Optional[int] = None,
    limit: int = 100,
) -> list[AuditLog]:
    query = select(AuditLog).order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit)
    if action:
        query = query.where(AuditLog.action == action)
    if actor_id:
        query = query.where(AuditLog.actor_id == actor_id)
    result = await session.execute(query)
    return result.scalars().all()
