import asyncio

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.counters import CounterService, increment_and_get
from src.core.counters import service as counter_service
from src.core.exceptions import CounterUnavailableError, ValidationError


class TestCounterService:
    """Tests for the atomic counter increment."""

    async def test_first_increment_returns_one(self, db_session: AsyncSession):
        """Test that a fresh counter starts at 1."""
        value = await increment_and_get(db_session, "S_SERIES")
        assert value == 1

    async def test_sequential_increments(self, db_session: AsyncSession):
        """Test that each increment returns the next value."""
        service = CounterService(db_session)

        values = [await service.increment_and_get("S_SERIES") for _ in range(5)]

        assert values == [1, 2, 3, 4, 5]
        assert await service.current_value("S_SERIES") == 5

    async def test_counters_are_independent(self, db_session: AsyncSession):
        """Test that different names have independent sequences."""
        service = CounterService(db_session)

        s1 = await service.increment_and_get("S_SERIES")
        f1 = await service.increment_and_get("F_SERIES")
        s2 = await service.increment_and_get("S_SERIES")

        assert (s1, f1, s2) == (1, 1, 2)

    async def test_current_value_of_unused_counter(self, db_session: AsyncSession):
        """Test that a counter that was never incremented reads as 0."""
        service = CounterService(db_session)
        assert await service.current_value("NEVER_USED") == 0

    async def test_empty_name_rejected(self, db_session: AsyncSession):
        """Test that an empty counter name raises ValidationError."""
        service = CounterService(db_session)

        with pytest.raises(ValidationError):
            await service.increment_and_get("")
        with pytest.raises(ValidationError):
            await service.increment_and_get("   ")

    async def test_storage_failure_raises_counter_unavailable(
        self, db_session: AsyncSession, counter_store_down
    ):
        """Test that a storage error surfaces as CounterUnavailableError and changes nothing."""
        service = CounterService(db_session)
        await service.increment_and_get("S_SERIES")
        await db_session.commit()

        counter_store_down()

        with pytest.raises(CounterUnavailableError) as exc_info:
            await service.increment_and_get("S_SERIES")

        assert exc_info.value.status_code == 503
        assert exc_info.value.counter_name == "S_SERIES"
        assert "counter store unreachable" not in exc_info.value.message
        assert await service.current_value("S_SERIES") == 1

    async def test_unsupported_dialect_raises_counter_unavailable(
        self, db_session: AsyncSession, monkeypatch: pytest.MonkeyPatch
    ):
        """Test that a database without atomic upsert is reported as unavailable."""
        monkeypatch.setattr(counter_service, "_UPSERT_INSERTS", {})
        service = CounterService(db_session)

        with pytest.raises(CounterUnavailableError) as exc_info:
            await service.increment_and_get("S_SERIES")

        assert exc_info.value.status_code == 503
        monkeypatch.undo()
        assert await service.current_value("S_SERIES") == 0

    async def test_timeout_raises_counter_unavailable(
        self, db_session: AsyncSession, monkeypatch: pytest.MonkeyPatch
    ):
        """Test that a slow round trip is reported as unavailable, not retried."""
        calls = 0

        async def slow_execute(self, statement, *args, **kwargs):
            nonlocal calls
            calls += 1
            await asyncio.sleep(1)

        monkeypatch.setattr(AsyncSession, "execute", slow_execute)
        service = CounterService(db_session, timeout=0.01)

        with pytest.raises(CounterUnavailableError):
            await service.increment_and_get("F_SERIES")

        assert calls == 1


class TestCounterConcurrency:
    """Concurrent increments against a shared database."""

    async def test_concurrent_increments_have_no_gaps_or_duplicates(
        self, session_factory: async_sessionmaker[AsyncSession]
    ):
        """Test that n concurrent increments return exactly {1..n}."""
        n = 20

        async def take_next() -> int:
            async with session_factory() as session:
                value = await CounterService(session).increment_and_get("X")
                await session.commit()
                return value

        values = await asyncio.gather(*(take_next() for _ in range(n)))

        assert sorted(values) == list(range(1, n + 1))

        async with session_factory() as session:
            assert await CounterService(session).current_value("X") == n
