# storefront/services/lock_service.py
import uuid
from contextlib import contextmanager

import redis
from redis.exceptions import RedisError

from storefront.domain.errors import CheckoutFault, CheckoutInProgress
from storefront.utils.retry import redis_retry
from storefront.utils.settings import CHECKOUT_LOCK_TTL_SECONDS, REDIS_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje skrypt lua atomowo, nie mozna wcisnac sie miedzy GET a DEL
#wiec lock zwalnia tylko ten kto go wzial (token)


class LockService:
    """
    -lock na checkout usera (drugi submit z innej karty dostaje CheckoutInProgress)
    -zwalnianie locka tokenem
    -TTL sprzata lock gdy proces padnie w trakcie
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def _key(user_id: int) -> str:
        return f"checkout:{user_id}:lock"

    @redis_retry()
    def acquire_checkout_lock(self, user_id: int, token: str, ttl: int) -> bool:
        key = self._key(user_id)
        logger.info(f"Acquire lock {key}")
        #SET checkout:1:lock "<token>" NX EX 30
        return bool(self.redis.set(name=key, value=token, nx=True, ex=ttl))

    @redis_retry()
    def release_checkout_lock(self, user_id: int, token: str) -> bool:
        key = self._key(user_id)
        logger.info(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)

    @contextmanager
    def checkout_lock(self, user_id: int, ttl: int = CHECKOUT_LOCK_TTL_SECONDS):
        token = uuid.uuid4().hex

        try:
            locked = self.acquire_checkout_lock(user_id, token, ttl)
        except RedisError as e:
            logger.error(f"Checkout lock store unavailable: {e}")
            raise CheckoutFault("Checkout is temporarily unavailable") from e

        if not locked:
            logger.warning(f"Checkout already in progress for user {user_id}")
            raise CheckoutInProgress(user_id)

        try:
            yield token
        finally:
            try:
                self.release_checkout_lock(user_id, token)
            except RedisError as e:
                # lock wygasnie sam po TTL
                logger.warning(f"Failed to release checkout lock for user {user_id}: {e}")
