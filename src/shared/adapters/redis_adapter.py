"""Redis adapter publishing portal domain events to pub/sub channels."""

import json
import logging
from dataclasses import asdict
from datetime import datetime
from enum import Enum

import redis

from config import get_redis_host_and_port
from shared.domain.commands import Event

logger = logging.getLogger(__name__)

r = redis.Redis(**get_redis_host_and_port())


def _json_default(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


def _serialize_event(event: Event) -> str:
    """Event fields plus ``event_type`` so consumers can dispatch on one channel."""
    body = asdict(event)
    body["event_type"] = event.message_type
    return json.dumps(body, default=_json_default)


def publish(channel: str, event: Event) -> int:
    """Publish an event and return the number of subscribers that received it."""
    logger.info("publishing: channel=%s, event=%s", channel, event.message_type)
    receivers = r.publish(channel, _serialize_event(event))
    logger.debug("%s delivered to %s subscriber(s)", event.message_type, receivers)
    return receivers
