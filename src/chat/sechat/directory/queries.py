"""Profile query queue.

The directory never talks to the network. When it finds a profile stale or missing
it records a query request in a Redis sorted set (scored by request time); the
messaging layer drains the set, asks the network, and hands any signed response
back through ``IdentityDirectory.save_profile``, which completes the request.
"""

import logging
from time import time
from typing import Any, List

import sentry_sdk
from redis.exceptions import RedisError

from chat.sechat.directory.mkm.identifier import ID
from chat.sechat.directory.store.base import address_key

logger = logging.getLogger(__name__)


def normalize_redis_string(value: Any) -> str:
    """
    Normalize Redis value to string, handling bytes conversion.
    """
    if isinstance(value, bytes):
        return value.decode()
    return str(value)


class ProfileQueryQueue:
    """
    Redis-backed set of handles whose profiles should be fetched from the network.

    Members are addresses, so a handle is queued once whatever its name or terminal;
    repeated requests while it is pending keep the original request time.
    """

    def __init__(self, redis_client: Any, queue_name: str = "directory:profile:query"):
        self.redis_client = redis_client
        self.queue_name = queue_name

    async def request(self, identifier: ID) -> bool:
        """Queue a profile query. Returns True if the handle was newly queued."""
        try:
            added = await self.redis_client.zadd(
                self.queue_name, {address_key(identifier): int(time())}, nx=True
            )
        except RedisError as e:
            logger.error("Failed to queue profile query for %s: %s", identifier, e)
            sentry_sdk.capture_exception(e)
            return False
        return bool(added)

    async def pending(self, limit: int = 20) -> List[ID]:
        """Return the oldest pending handles, without removing them."""
        try:
            values = await self.redis_client.zrange(self.queue_name, 0, limit - 1)
        except RedisError as e:
            logger.error("Failed to read profile query queue: %s", e)
            sentry_sdk.capture_exception(e)
            return []
        identifiers = []
        for value in values:
            identifier = ID.parse(normalize_redis_string(value))
            if identifier is not None:
                identifiers.append(identifier)
        return identifiers

    async def complete(self, identifier: ID) -> bool:
        try:
            removed = await self.redis_client.zrem(
                self.queue_name, address_key(identifier)
            )
        except RedisError as e:
            logger.error("Failed to complete profile query for %s: %s", identifier, e)
            sentry_sdk.capture_exception(e)
            return False
        return bool(removed)

    async def count(self) -> int:
        try:
            return await self.redis_client.zcard(self.queue_name)
        except RedisError as e:
            sentry_sdk.capture_exception(e)
            return 0
