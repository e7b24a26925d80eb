from datetime import datetime

from models.context import TodayLog, UserContext
from models.notification import NotificationCandidate
from models.notification_settings import NotificationSettingsModel
from reminders.dedup import DeduplicationCache
from reminders.generator import NotificationGenerator
from reminders.strategies import default_strategies


class SpyStrategy:
    def __init__(self, notification_type, title="Spy", raises=None):
        self.notification_type = notification_type
        self.title = title
        self.raises = raises
        self.calls = 0

    def evaluate(self, profile, context, settings, now):
        self.calls += 1
        if self.raises:
            raise self.raises
        return [NotificationCandidate(type=self.notification_type, title=self.title, message="m", scheduled_time=now)]


NOW = datetime(2026, 10, 14, 11, 0)


def _settings(**overrides):
    return NotificationSettingsModel.defaults_for("user_1").model_copy(update=overrides)


def test_disabled_strategy_is_never_evaluated(profile):
    hydration = SpyStrategy("hydration")
    meal = SpyStrategy("meal")
    generator = NotificationGenerator(DeduplicationCache(), strategies=[meal, hydration])

    result = generator.generate_all(profile, UserContext(profile=profile), _settings(hydration_reminders=False), NOW)

    assert hydration.calls == 0
    assert meal.calls == 1
    assert [c.type for c in result] == ["meal"]


def test_failing_strategy_is_isolated(profile):
    broken = SpyStrategy("meal", raises=RuntimeError("boom"))
    healthy = SpyStrategy("hydration")
    generator = NotificationGenerator(DeduplicationCache(), strategies=[broken, healthy])

    result = generator.generate_all(profile, UserContext(profile=profile), _settings(), NOW)

    assert broken.calls == 1
    assert [c.type for c in result] == ["hydration"]


def test_results_keep_strategy_order(profile):
    strategies = [SpyStrategy("meal"), SpyStrategy("hydration"), SpyStrategy("exercise")]
    generator = NotificationGenerator(DeduplicationCache(), strategies=strategies)

    result = generator.generate_all(profile, UserContext(profile=profile), _settings(), NOW)

    assert [c.type for c in result] == ["meal", "hydration", "exercise"]


def test_duplicates_within_window_are_dropped(profile):
    generator = NotificationGenerator(DeduplicationCache(), strategies=[SpyStrategy("meal")])
    context = UserContext(profile=profile)

    first = generator.generate_all(profile, context, _settings(), NOW)
    for c in first:
        generator.dedup.mark_fired(profile.id, c.type, c.title, NOW)
    second = generator.generate_all(profile, context, _settings(), NOW.replace(minute=1))

    assert len(first) == 1
    assert second == []


def test_default_strategies_at_hydration_hour(profile):
    generator = NotificationGenerator(DeduplicationCache())
    assert [s.notification_type for s in generator.strategies] == [
        s.notification_type for s in default_strategies()
    ]

    context = UserContext(profile=profile, today_log=TodayLog(water_intake=1000))
    result = generator.generate_all(profile, context, _settings(), NOW)

    assert [c.type for c in result] == ["hydration"]
    assert generator.strategy_for("progress") is not None
    assert generator.strategy_for("unknown") is None


def test_generation_alone_does_not_record(profile):
    dedup = DeduplicationCache()
    generator = NotificationGenerator(dedup, strategies=[SpyStrategy("meal")])
    context = UserContext(profile=profile)

    first = generator.generate_all(profile, context, _settings(), NOW)
    again = generator.generate_all(profile, context, _settings(), NOW.replace(minute=1))

    assert len(first) == 1
    assert len(again) == 1
    assert len(dedup) == 0


def test_identical_candidates_in_one_run_collapse(profile):
    generator = NotificationGenerator(
        DeduplicationCache(),
        strategies=[SpyStrategy("activity", title="Same"), SpyStrategy("activity", title="Same")],
    )

    result = generator.generate_all(profile, UserContext(profile=profile), _settings(), NOW)

    assert len(result) == 1
