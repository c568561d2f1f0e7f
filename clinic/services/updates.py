"""Push a refresh notice to dashboards listening on ``ws/updates/``."""
from __future__ import annotations

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.utils import timezone

logger = logging.getLogger(__name__)

GROUP = "updates"


def broadcast_refresh(*keys: str) -> None:
    """Tell connected clients that the named resources changed.

    The database write has already committed by the time this runs, so a
    channel layer outage is logged and the request still succeeds.
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    now = timezone.now()
    event = {"type": "broadcast.refresh", "version": int(now.timestamp()), "ts": now.isoformat(), "keys": list(keys)}
    try:
        async_to_sync(channel_layer.group_send)(GROUP, event)
    except Exception:
        logger.warning("refresh broadcast for %s failed", keys, exc_info=True)
