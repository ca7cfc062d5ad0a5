"""
Tests for the bounded retry policy and the profile bootstrap that uses it.
"""

import time

import pytest

from bazar.application.marketplace.bootstrap_profile import BootstrapProfileUseCase
from bazar.domain.marketplace.errors import BackendServiceError, ProfileNotFoundError
from bazar.shared.retry import RetryPolicy

from conftest import FakeProfileRepository, make_profile


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class TestRetryPolicy:
    """RetryPolicy.run semantics."""

    def test_rejects_zero_attempts(self) -> None:
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)

    def test_rejects_negative_delay(self) -> None:
        with pytest.raises(ValueError):
            RetryPolicy(delay_seconds=-1)

    def test_delay_with_backoff(self) -> None:
        policy = RetryPolicy(delay_seconds=1.0, backoff=2.0)
        assert [policy.delay_for(n) for n in (1, 2, 3)] == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_success_first_try_does_not_sleep(self) -> None:
        sleep = RecordingSleep()

        async def op():
            return "ok"

        assert await RetryPolicy().run(op, (ValueError,), sleep=sleep) == "ok"
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_retries_until_success(self) -> None:
        sleep = RecordingSleep()
        calls = {"n": 0}

        async def op():
            calls["n"] += 1
            if calls["n"] < 3:
                raise ValueError("not yet")
            return calls["n"]

        assert await RetryPolicy().run(op, (ValueError,), sleep=sleep) == 3
        assert sleep.delays == [2.0, 2.0]

    @pytest.mark.asyncio
    async def test_no_sleep_after_final_attempt(self) -> None:
        sleep = RecordingSleep()

        async def op():
            raise ValueError("never")

        with pytest.raises(ValueError):
            await RetryPolicy(max_attempts=3).run(op, (ValueError,), sleep=sleep)
        assert sleep.delays == [2.0, 2.0]

    @pytest.mark.asyncio
    async def test_other_errors_propagate_immediately(self) -> None:
        sleep = RecordingSleep()

        async def op():
            raise KeyError("boom")

        with pytest.raises(KeyError):
            await RetryPolicy().run(op, (ValueError,), sleep=sleep)
        assert sleep.delays == []


class TestBootstrapProfile:
    """Profile lookup with creation lag."""

    @pytest.mark.asyncio
    async def test_found_immediately(self) -> None:
        repo = FakeProfileRepository()
        repo.rows["u1"] = make_profile("u1")
        sleep = RecordingSleep()
        use_case = BootstrapProfileUseCase(repo, RetryPolicy(), sleep=sleep)

        profile = await use_case.execute("u1")

        assert profile is not None and profile.id == "u1"
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_appears_on_second_lookup(self) -> None:
        repo = FakeProfileRepository(appear_after=1)
        repo.rows["u1"] = make_profile("u1")
        sleep = RecordingSleep()
        use_case = BootstrapProfileUseCase(repo, RetryPolicy(), sleep=sleep)

        profile = await use_case.execute("u1")

        assert profile is not None
        assert repo.lookups == 2
        assert sleep.delays == [2.0]

    @pytest.mark.asyncio
    async def test_gives_up_after_three_lookups(self) -> None:
        repo = FakeProfileRepository()
        sleep = RecordingSleep()
        use_case = BootstrapProfileUseCase(repo, RetryPolicy(), sleep=sleep)

        assert await use_case.execute("ghost") is None
        assert repo.lookups == 3
        assert sum(sleep.delays) == 4.0

    @pytest.mark.asyncio
    async def test_backend_error_is_not_retried(self) -> None:
        class BrokenRepo(FakeProfileRepository):
            async def get_by_id(self, user_id):
                self.lookups += 1
                raise BackendServiceError("down")

        repo = BrokenRepo()
        use_case = BootstrapProfileUseCase(repo, RetryPolicy(), sleep=RecordingSleep())

        with pytest.raises(BackendServiceError):
            await use_case.execute("u1")
        assert repo.lookups == 1

    @pytest.mark.asyncio
    async def test_real_clock_worst_case(self) -> None:
        """With the real sleep, a missing profile gives up in about 4 seconds."""
        repo = FakeProfileRepository()
        use_case = BootstrapProfileUseCase(repo, RetryPolicy())

        started = time.monotonic()
        result = await use_case.execute("ghost")
        elapsed = time.monotonic() - started

        assert result is None
        assert 4.0 <= elapsed < 6.5

    @pytest.mark.asyncio
    async def test_real_clock_found_on_last_lookup(self) -> None:
        """A profile that shows up on the third lookup is returned after both waits."""
        repo = FakeProfileRepository(appear_after=2)
        repo.rows["u1"] = make_profile("u1")
        use_case = BootstrapProfileUseCase(repo, RetryPolicy())

        started = time.monotonic()
        profile = await use_case.execute("u1")
        elapsed = time.monotonic() - started

        assert profile is not None and profile.id == "u1"
        assert repo.lookups == 3
        assert 4.0 <= elapsed < 6.5

    def test_not_found_error_carries_user(self) -> None:
        assert ProfileNotFoundError("u9").user_id == "u9"
