# atelier/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import redis

from atelier.domain.errors import ConcurrencyConflictError


def conflict_retry(attempts: int = 3):
    """
    Retry a whole unit of work after a uniqueness race
    (order number taken, duplicate cart line inserted concurrently).
    The wrapped call must roll its session back before raising.
    """
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=0.5),
        retry=retry_if_exception_type(ConcurrencyConflictError),
    )


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )
