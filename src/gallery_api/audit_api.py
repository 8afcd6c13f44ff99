"""
Audit log API endpoints.
"""
from typing import List, Optional
from datetime import datetime
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .database import get_db
from .schemas import AuditLogOut
from .audit import query_audit_logs


router = APIRouter(prefix="/api/audit", tags=["audit"])


@router.get("/logs", response_model=List[AuditLogOut])
def get_audit_logs(
    start: Optional[datetime] = Query(None, description="Start timestamp"),
    end: Optional[datetime] = Query(None, description="End timestamp"),
    action: Optional[str] = Query(None, description="Filter by action type"),
    resource_type: Optional[str] = Query(None, description="Filter by resource type"),
    limit: int = Query(1000, ge=1, le=10000, description="Max results"),
    db: Session = Depends(get_db),
):
    """
    Query audit logs with optional filters.

    Returns list of audit log entries, newest first.
    """
    return query_audit_logs(
        db=db,
        start=start,
        end=end,
        action=action,
        resource_type=resource_type,
        limit=limit,
    )
