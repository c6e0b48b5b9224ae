"""
Real-time notification channel
Events are published to Redis pub/sub, one channel per receiving user.
Publishing is best effort: failures are logged and never propagate.
"""
import json
from typing import Any, Dict, Optional

from loguru import logger
from redis import Redis
from redis.exceptions import RedisError

CHANNEL_PREFIX = "tinylearn:user"


def user_channel(user_id: int) -> str:
    return f"{CHANNEL_PREFIX}:{user_id}"


class Notifier:
    def notify(self, user_id: int, event: str, payload: Dict[str, Any]) -> bool:
        raise NotImplementedError


class NullNotifier(Notifier):
    """Used when real-time delivery is disabled."""

    def notify(self, user_id: int, event: str, payload: Dict[str, Any]) -> bool:
        return False


class RedisNotifier(Notifier):
    def __init__(self, redis: Optional[Redis] = None, url: Optional[str] = None):
        if redis is None:
            redis = Redis.from_url(url or "redis://localhost:6379/0", socket_connect_timeout=1, socket_timeout=1)
        self.redis = redis

    def notify(self, user_id: int, event: str, payload: Dict[str, Any]) -> bool:
        message = json.dumps({"event": event, "data": payload}, default=str)
        try:
            receivers = self.redis.publish(user_channel(user_id), message)
        except RedisError as e:
            logger.warning(f"Failed to publish '{event}' to user {user_id}: {e}")
            return False
        logger.debug(f"Published '{event}' to user {user_id} ({receivers} listeners)")
        return True
