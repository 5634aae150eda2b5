import logging
from typing import Any, Dict, Optional

from outreach.models import AuditEvent

logger = logging.getLogger(__name__)


def log_action(*, user_id: Optional[int], action: str, object_type: str = '', object_id: Any = '',
               detail: Optional[Dict[str, Any]] = None) -> Optional[AuditEvent]:
    """Record an audit event.  Audit failures never break the calling flow."""
    try:
        return AuditEvent.objects.create(
            user_id=user_id,
            action=action,
            object_type=object_type,
            object_id=str(object_id or ''),
            detail=detail or {},
        )
    except Exception:
        logger.warning('audit write failed for %s', action, exc_info=True)
        return None
