from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.deps import get_db_session
from portal.core.rbac import require_admin
from portal.models.user import User
from portal.schemas.audit import AuditLogRead
from portal.services.audit_service import list_audit_logs

router = APIRouter(prefix="/api/admin/audit-logs", tags=["Audit Logs"])


@router.get("/", response_model=List[AuditLogRead])
async def get_audit_logs(
    action: Optional[str] = None,
    actor_id: Optional[int] = None,
    limit: int = 100,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    return await list_audit_logs(session, action=action, actor_id=actor_id, limit=min(limit, 500))
