import asyncio
from functools import wraps

from sqlalchemy.exc import OperationalError, InterfaceError, DBAPIError

from app.core.config import settings
from app.core.logger import get_logger
from app.exceptions.errors import StoreUnavailableError

logger = get_logger("store_retry")

TRANSIENT_ERRORS = (OperationalError, InterfaceError)


def _is_transient(exc: Exception) -> bool:
    if isinstance(exc, TRANSIENT_ERRORS):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


def retry_read(func):
    """Retry an idempotent read on transient store errors.

    The wrapped coroutine must take the session as its first argument. The
    session is rolled back between attempts. Only use this for reads: writes
    must surface the failure to the caller unchanged.
    """

    @wraps(func)
    async def wrapper(db, *args, **kwargs):
        attempts = settings.STORE_READ_RETRIES + 1
        for attempt in range(1, attempts + 1):
            try:
                return await func(db, *args, **kwargs)
            except DBAPIError as e:
                if not _is_transient(e):
                    raise
                await db.rollback()
                if attempt == attempts:
                    logger.error(f"{func.__qualname__} failed after {attempts} attempts: {repr(e)}")
                    raise StoreUnavailableError() from e
                delay = settings.STORE_RETRY_DELAY_SECONDS * attempt
                logger.warning(
                    f"Transient store error in {func.__qualname__} "
                    f"(attempt {attempt}/{attempts}), retrying in {delay:.2f}s: {e.__class__.__name__}"
                )
                await asyncio.sleep(delay)

    return wrapper
