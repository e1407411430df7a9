# arena/core/storage.py
from contextlib import contextmanager
from functools import wraps

from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError
from tenacity import Retrying, stop_after_attempt, wait_exponential, retry_if_exception_type

from arena.config import settings
from arena.core.exceptions import StorageTimeout
from arena.core.logger import logger


@contextmanager
def storage_guard():
    """Translate driver timeouts / lock contention into StorageTimeout"""
    try:
        yield
    except (OperationalError, PoolTimeoutError) as e:
        logger.warning(f"Storage call failed transiently: {e.__class__.__name__}: {e}")
        raise StorageTimeout() from e


def _log_retry(retry_state):
    logger.warning(f"StorageTimeout, retrying (attempt {retry_state.attempt_number})")


def retry_storage(func):
    """Retry a storage-bound call on StorageTimeout with exponential backoff"""

    @wraps(func)
    def wrapper(*args, **kwargs):
        retryer = Retrying(
            stop=stop_after_attempt(settings.storage_retry_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),  # 0.1s, 0.2s, 0.4s ...
            retry=retry_if_exception_type(StorageTimeout),
            before_sleep=_log_retry,
            reraise=True
        )
        return retryer(func, *args, **kwargs)

    return wrapper


def storage_bound(func):
    """Typed timeouts, rollback and retries for a call taking the session as `db`.

    Used on routes and helpers that have no transaction handling of their own.
    """

    @retry_storage
    @wraps(func)
    def wrapper(*args, **kwargs):
        db = kwargs.get("db", args[0] if args else None)
        try:
            with storage_guard():
                return func(*args, **kwargs)
        except StorageTimeout:
            if db is not None:
                db.rollback()
            raise

    return wrapper
