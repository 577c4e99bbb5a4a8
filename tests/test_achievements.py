from datetime import timedelta

import pytest

from sahaayak.core.achievements import BadgeRegistry, StreakEngine
from sahaayak.core.models import StreakType

USER = "user-1"

@pytest.fixture
def engine(store):
    return StreakEngine(store)

def badge_ids(update):
    return [b.badge_id for b in update.newly_earned_badges]

def test_first_action_starts_streak_and_awards_first_badge(engine, monday):
    update = engine.record_action(USER, StreakType.JOURNALING, monday)

    assert update.changed
    assert update.streak.count == 1
    assert update.streak.last_date == monday.isoformat()
    assert badge_ids(update) == ["first_journal"]

def test_same_day_is_noop(engine, monday):
    engine.record_action(USER, StreakType.MOOD_TRACKING, monday)
    update = engine.record_action(USER, StreakType.MOOD_TRACKING, monday)

    assert not update.changed
    assert update.streak.count == 1
    assert update.newly_earned_badges == []

def test_consecutive_days_increment(engine, monday):
    for offset in range(3):
        update = engine.record_action(USER, StreakType.JOURNALING, monday + timedelta(days=offset))

    assert update.streak.count == 3
    assert badge_ids(update) == ["journal_3_day"]

def test_gap_resets_to_one(engine, monday):
    engine.record_action(USER, StreakType.JOURNALING, monday)
    engine.record_action(USER, StreakType.JOURNALING, monday + timedelta(days=1))
    update = engine.record_action(USER, StreakType.JOURNALING, monday + timedelta(days=3))

    assert update.changed
    assert update.streak.count == 1

def test_earlier_date_is_ignored(engine, monday):
    engine.record_action(USER, StreakType.JOURNALING, monday)
    update = engine.record_action(USER, StreakType.JOURNALING, monday - timedelta(days=2))

    assert not update.changed
    assert engine.get_streak(USER, StreakType.JOURNALING).last_date == monday.isoformat()

def test_seven_day_milestone(engine, monday):
    earned = []
    for offset in range(7):
        earned += badge_ids(engine.record_action(USER, StreakType.MOOD_TRACKING, monday + timedelta(days=offset)))

    assert earned == ["first_mood", "mood_3_day", "mood_7_day"]
    assert engine.get_streak(USER, StreakType.MOOD_TRACKING).count == 7

def test_badges_are_write_once(engine, monday):
    first = engine.award_badge(USER, "first_journal")
    again = engine.award_badge(USER, "first_journal")

    assert first is not None
    assert again is None
    assert [b.badge_id for b in engine.get_badges(USER)] == ["first_journal"]

def test_milestone_not_reawarded_after_reset(engine, monday):
    day = monday
    for offset in range(3):
        engine.record_action(USER, StreakType.JOURNALING, day + timedelta(days=offset))
    restart = day + timedelta(days=10)
    earned = []
    for offset in range(3):
        earned += badge_ids(engine.record_action(USER, StreakType.JOURNALING, restart + timedelta(days=offset)))

    assert earned == []

def test_unknown_badge_ignored(engine):
    assert engine.award_badge(USER, "no_such_badge") is None
    assert engine.get_badges(USER) == []

def test_streak_types_are_independent(engine, monday):
    engine.record_action(USER, StreakType.JOURNALING, monday)
    engine.record_action(USER, StreakType.MOOD_TRACKING, monday + timedelta(days=5))

    streaks = engine.get_streaks(USER)
    assert set(streaks) == {"journaling", "mood_tracking"}
    assert streaks["journaling"].last_date == monday.isoformat()

def test_registry_has_journey_badges():
    registry = BadgeRegistry()
    assert registry.get_badge("exam_stress_journey_complete").icon == "✍️"
    assert registry.milestone_badge_for(StreakType.JOURNALING, 7) == "journal_7_day"
    assert registry.milestone_badge_for(StreakType.JOURNALING, 5) is None

def test_summary(engine, monday):
    engine.record_action(USER, StreakType.JOURNALING, monday)
    summary = engine.get_summary(USER)
    assert summary['badges_earned'] == 1
    assert summary['badges_total'] == len(engine.registry.badges)
    assert summary['streaks']['journaling']['count'] == 1
