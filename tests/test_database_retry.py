import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, ProgrammingError

from app.database import execute_with_retry


class FlakySession:
    def __init__(self, failures, error=OperationalError):
        self.failures = failures
        self.error = error
        self.calls = 0
        self.rollbacks = 0

    async def execute(self, statement):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error("SELECT 1", {}, Exception("database is locked"))
        return "result"

    async def rollback(self):
        self.rollbacks += 1


@pytest.mark.asyncio
async def test_retries_transient_errors():
    session = FlakySession(failures=2)
    result = await execute_with_retry(session, text("SELECT 1"), max_retries=3, base_delay=0)
    assert result == "result"
    assert session.calls == 3
    assert session.rollbacks == 2


@pytest.mark.asyncio
async def test_gives_up_after_max_retries():
    session = FlakySession(failures=10)
    with pytest.raises(OperationalError):
        await execute_with_retry(session, text("SELECT 1"), max_retries=2, base_delay=0)
    assert session.calls == 3


@pytest.mark.asyncio
async def test_backoff_doubles(monkeypatch):
    delays = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    monkeypatch.setattr("app.database.asyncio.sleep", fake_sleep)
    session = FlakySession(failures=3)
    await execute_with_retry(session, text("SELECT 1"), max_retries=3, base_delay=0.5)
    assert delays == [0.5, 1.0, 2.0]


@pytest.mark.asyncio
async def test_other_errors_are_not_retried():
    session = FlakySession(failures=1, error=ProgrammingError)
    with pytest.raises(ProgrammingError):
        await execute_with_retry(session, text("SELECT 1"), max_retries=3, base_delay=0)
    assert session.calls == 1
