"""
backend/salonbook/services/events.py

Event emitter: pushes appointment events to a Redis queue for the
notification consumer.

Queue:
- events:appointments: booked / cancelled / completed notifications
"""

import json
import logging
import time

from redis.exceptions import RedisError

from .. import redis_client as redis_module

logger = logging.getLogger(__name__)

APPOINTMENTS_QUEUE = "events:appointments"


def emit_event(event_type: str, payload: dict) -> None:
    """
    Emit an appointment event.

    Pushed to Redis list `events:appointments`. Delivery problems are logged
    and never propagate to the caller.
    """
    client = redis_module.redis_client
    if client is None:
        logger.debug(f"Redis not configured, event dropped: {event_type}")
        return

    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        client.rpush(APPOINTMENTS_QUEUE, json.dumps(event, default=str))
        logger.info(f"Event emitted: {event_type} → {APPOINTMENTS_QUEUE}")
    except RedisError as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
