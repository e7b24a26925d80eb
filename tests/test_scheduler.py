import asyncio

import pytest

from conftest import FakeContextProvider
from models.user import UserModel
from reminders.dedup import DeduplicationCache
from reminders.scheduler import NotificationScheduler, TICK_JOB_ID, build_scheduler

pytestmark = pytest.mark.asyncio


class FakeAPScheduler:
    """Records jobs instead of arming real timers."""

    def __init__(self):
        self.jobs = {}
        self.running = False
        self.shutdowns = 0

    def add_job(self, func, trigger, id=None, **kwargs):
        self.jobs[id] = (func, trigger, kwargs)

    def start(self):
        self.running = True

    def shutdown(self, wait=True):
        self.running = False
        self.shutdowns += 1


class RecordingPipeline:
    def __init__(self, failing=(), slow=(), per_user=1):
        self.calls = []
        self.failing = set(failing)
        self.slow = set(slow)
        self.per_user = per_user

    async def run_for_user(self, user, now=None):
        self.calls.append((user.id, now))
        if user.id in self.slow:
            await asyncio.sleep(1)
        if user.id in self.failing:
            raise RuntimeError("pipeline blew up")
        return [object()] * self.per_user


class BrokenProvider(FakeContextProvider):
    async def get_user_list(self):
        raise ConnectionError("users unavailable")


def _users(*ids):
    return [UserModel(id=i) for i in ids]


def _scheduler(clock, provider=None, pipeline=None, **kwargs):
    created = []

    def factory():
        created.append(FakeAPScheduler())
        return created[-1]

    scheduler = NotificationScheduler(
        provider=provider or FakeContextProvider(users=_users("u1")),
        pipeline=pipeline or RecordingPipeline(),
        dedup=DeduplicationCache(clock=clock),
        clock=clock,
        scheduler_factory=factory,
        **kwargs,
    )
    return scheduler, created


async def test_start_runs_one_tick_immediately_then_stop(clock):
    pipeline = RecordingPipeline()
    scheduler, created = _scheduler(clock, pipeline=pipeline)

    await scheduler.start(1)
    scheduler.stop()

    assert len(pipeline.calls) == 1
    assert scheduler.tick_count == 1
    assert scheduler.is_running is False
    assert created[0].shutdowns == 1


async def test_start_registers_interval_job(clock):
    scheduler, created = _scheduler(clock)

    await scheduler.start(5)

    assert TICK_JOB_ID in created[0].jobs
    _, trigger, options = created[0].jobs[TICK_JOB_ID]
    assert trigger.interval.total_seconds() == 300
    assert options["max_instances"] == 1
    assert created[0].running is True
    status = scheduler.status()
    assert status["is_running"] is True
    assert status["interval_minutes"] == 5
    assert status["last_run"] == clock.now
    scheduler.stop()


async def test_timer_fire_after_stop_is_ignored(clock):
    pipeline = RecordingPipeline()
    scheduler, _ = _scheduler(clock, pipeline=pipeline)

    await scheduler.start(1)
    scheduler.stop()
    clock.advance(minutes=5)
    await scheduler._scheduled_tick()

    assert len(pipeline.calls) == 1
    assert scheduler.tick_count == 1


async def test_scheduled_tick_while_running(clock):
    pipeline = RecordingPipeline()
    scheduler, _ = _scheduler(clock, pipeline=pipeline)

    await scheduler.start(1)
    clock.advance(minutes=1)
    await scheduler._scheduled_tick()

    assert [now for _, now in pipeline.calls] == [clock.now.replace(minute=0), clock.now]
    assert scheduler.status()["tick_count"] == 2
    scheduler.stop()


async def test_start_when_running_is_noop(clock):
    pipeline = RecordingPipeline()
    scheduler, created = _scheduler(clock, pipeline=pipeline)

    await scheduler.start(1)
    await scheduler.start(1)

    assert len(pipeline.calls) == 1
    assert len(created) == 1
    scheduler.stop()


async def test_stop_is_idempotent(clock):
    scheduler, _ = _scheduler(clock)

    scheduler.stop()
    await scheduler.start(1)
    scheduler.stop()
    scheduler.stop()

    assert scheduler.is_running is False
    assert scheduler.status()["next_run"] is None


async def test_user_list_failure_skips_tick(clock):
    pipeline = RecordingPipeline()
    scheduler, _ = _scheduler(clock, provider=BrokenProvider(), pipeline=pipeline)

    summary = await scheduler.tick()

    assert summary.skipped is True
    assert pipeline.calls == []


async def test_one_user_failure_does_not_affect_others(clock):
    pipeline = RecordingPipeline(failing={"u2"}, per_user=2)
    provider = FakeContextProvider(users=_users("u1", "u2", "u3"))
    scheduler, _ = _scheduler(clock, provider=provider, pipeline=pipeline)

    summary = await scheduler.tick()

    assert sorted(uid for uid, _ in pipeline.calls) == ["u1", "u2", "u3"]
    assert summary.users == 3
    assert summary.failed_users == 1
    assert summary.notifications == 4


async def test_slow_user_times_out(clock):
    pipeline = RecordingPipeline(slow={"u1"})
    provider = FakeContextProvider(users=_users("u1", "u2"))
    scheduler, _ = _scheduler(clock, provider=provider, pipeline=pipeline, user_timeout=0.05)

    summary = await scheduler.tick()

    assert summary.failed_users == 1
    assert summary.notifications == 1


async def test_every_user_in_a_tick_shares_the_tick_instant(clock):
    pipeline = RecordingPipeline()
    provider = FakeContextProvider(users=_users("u1", "u2", "u3"))
    scheduler, _ = _scheduler(clock, provider=provider, pipeline=pipeline, max_workers=1)

    await scheduler.tick()

    assert {now for _, now in pipeline.calls} == {clock.now}


async def test_build_scheduler_wires_shared_dedup(clock):
    scheduler = build_scheduler(clock=clock)

    assert scheduler.pipeline.generator.dedup is scheduler.dedup
    assert scheduler.is_running is False
    assert scheduler.status()["dedup_entries"] == 0


class GatedPipeline(RecordingPipeline):
    """Holds the first call open until released."""

    def __init__(self):
        super().__init__()
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def run_for_user(self, user, now=None):
        first = not self.calls
        result = await super().run_for_user(user, now)
        if first:
            self.entered.set()
            await self.release.wait()
        return result


async def test_restart_during_first_tick_arms_a_single_timer(clock):
    pipeline = GatedPipeline()
    scheduler, created = _scheduler(clock, pipeline=pipeline)

    first = asyncio.create_task(scheduler.start(1))
    await pipeline.entered.wait()
    scheduler.stop()
    second = asyncio.create_task(scheduler.start(1))
    await asyncio.sleep(0)
    pipeline.release.set()
    await asyncio.gather(first, second)

    assert len(created) == 1
    assert created[0].running is True

    scheduler.stop()

    assert all(not fake.running for fake in created)
    assert scheduler.is_running is False
