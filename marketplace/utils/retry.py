# marketplace/utils/retry.py
import redis
import requests
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential


def is_transient_http_error(exc: BaseException) -> bool:
    """Zerwane polaczenie, timeout albo 5xx. 4xx z bramki to blad zapytania, bez ponawiania."""
    if isinstance(exc, requests.HTTPError):
        return exc.response is not None and exc.response.status_code >= 500
    return isinstance(exc, (requests.ConnectionError, requests.Timeout))


def is_transient_redis_error(exc: BaseException) -> bool:
    return isinstance(exc, (redis.ConnectionError, redis.TimeoutError))


def http_retry(attempts: int = 3):
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception(is_transient_http_error),
    )


def redis_retry(attempts: int = 3):
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception(is_transient_redis_error),
    )
