"""Bounded retries for reads on transient store errors."""
import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from app.exceptions.errors import StoreUnavailableError
from app.utils.retry import retry_read


class _FakeSession:
    def __init__(self):
        self.rollbacks = 0

    async def rollback(self):
        self.rollbacks += 1


def _flaky(failures, exc):
    calls = {"count": 0}

    @retry_read
    async def read(db, value):
        calls["count"] += 1
        if calls["count"] <= failures:
            raise exc
        return value

    return read, calls


async def test_transient_error_is_retried():
    session = _FakeSession()
    read, calls = _flaky(1, OperationalError("SELECT 1", {}, Exception("connection reset")))

    assert await read(session, "ok") == "ok"
    assert calls["count"] == 2
    assert session.rollbacks == 1


async def test_gives_up_with_store_unavailable():
    session = _FakeSession()
    read, calls = _flaky(10, OperationalError("SELECT 1", {}, Exception("database is locked")))

    with pytest.raises(StoreUnavailableError) as exc_info:
        await read(session, "ok")

    assert exc_info.value.status_code == 503
    # Default of two retries: three attempts in total
    assert calls["count"] == 3


async def test_non_transient_errors_are_not_retried():
    session = _FakeSession()
    read, calls = _flaky(1, IntegrityError("INSERT", {}, Exception("unique")))

    with pytest.raises(IntegrityError):
        await read(session, "ok")
    assert calls["count"] == 1
    assert session.rollbacks == 0
