import uuid

import redis
from marketplace.utils.retry import redis_retry
from marketplace.utils.settings import REDIS_URL
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje atomowo przez lua, skrypt dziala jako jedna nieprzerywalna operacja
#nie mozna wcisnac sie miedzy GET a DEL, wiec tu jest get + porownanie + del wszystko naraz


class LockService:
    """
    -blokada checkoutu per uzytkownik (advisory lock)
    -zwalnianie locka tylko przez wlasciciela tokena
    -atomowosc przy pomocy lua
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def new_token() -> str:
        return uuid.uuid4().hex

    @redis_retry()
    def acquire_checkout_lock(self, user_id: int, token: str, ttl: int) -> bool:
        key = f"checkout:{user_id}:lock"
        logger.info(f"Acquire lock {key}")
        #SET checkout:1:lock "<token>" NX EX 30
        return bool(self.redis.set(
            name=key,
            value=token,
            nx=True, #not eXists, jak klucz jest to nic nie rob i False
            ex=ttl, #wygasa sam, lock nie zostanie na zawsze po padnietym requescie
        ))

    @redis_retry()
    def release_checkout_lock(self, user_id: int, token: str) -> bool:
        key = f"checkout:{user_id}:lock"
        logger.info(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)
