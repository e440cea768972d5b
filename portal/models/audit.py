#portal/models/audit.py

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import Optional, Dict, Any
from datetime import datetime

class AuditLog(SQLModel, table=True):
    __tablename__ = "audit_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    actor_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)

    action: str = Field(index=True)
    target_type: Optional[str] = None
    target_id: Optional[int] = None
    reason: Optional[str] = None

    # Stores {"email": "...", "previous_status": "..."}
    details: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    timestamp: datetime = Field(default_factory=datetime.utcnow, index=True)
