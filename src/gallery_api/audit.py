"""
Audit trail for mutations (uploads, deletions, article creation).
Recording never interrupts the request that triggered it.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .database import AuditLog

logger = logging.getLogger(__name__)

MAX_QUERY_LIMIT = 10000


def record_audit(
    db: Session,
    action: str,
    resource: Optional[str] = None,
    resource_type: Optional[str] = None,
    success: bool = True,
    metadata: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Record an audit log entry. Non-blocking - catches and logs errors internally.

    Args:
        db: Database session
        action: Action performed (e.g., 'image.upload', 'article.delete')
        resource: Resource identifier (image name or article id)
        resource_type: Type of resource ('image' or 'article')
        success: Whether action succeeded
        metadata: Additional context (e.g., original filename, size)
    """
    try:
        entry = AuditLog(
            action=action,
            resource=resource,
            resource_type=resource_type,
            success=success,
            metadata_json=metadata or {},
        )
        db.add(entry)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Failed to record audit log for {action}: {e}")


def query_audit_logs(
    db: Session,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    action: Optional[str] = None,
    resource_type: Optional[str] = None,
    limit: int = 1000,
) -> List[AuditLog]:
    """
    Query audit logs with optional filters, newest first.
    """
    q = db.query(AuditLog)

    if start:
        q = q.filter(AuditLog.created_at >= start)
    if end:
        q = q.filter(AuditLog.created_at <= end)
    if action:
        q = q.filter(AuditLog.action == action)
    if resource_type:
        q = q.filter(AuditLog.resource_type == resource_type)

    q = q.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
    return q.limit(min(limit, MAX_QUERY_LIMIT)).all()
