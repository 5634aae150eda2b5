import logging
from typing import Any, Dict

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)

UPDATES_GROUP = 'updates'


def org_group(org_id: str) -> str:
    return f'org-{org_id}'


def publish(group: str, event: Dict[str, Any]) -> bool:
    """Send ``event`` to a channel group.  Delivery failures are logged, not raised."""
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return False
    try:
        async_to_sync(channel_layer.group_send)(group, event)
    except Exception:
        logger.warning('failed to publish %s to %s', event.get('type'), group, exc_info=True)
        return False
    return True
