from datetime import date, datetime, timezone

import pytest

from app.state import LetterStats, TypingStats
from services.completion import ProgressStore, complete_session

NOW = datetime(2024, 1, 2, 9, 30, tzinfo=timezone.utc)


def stats(wpm=50, accuracy=100.0):
    return TypingStats(wpm=wpm, net_wpm=wpm, accuracy=accuracy, correct_count=20,
                       error_count=0, elapsed_ms=30_000, characters_typed=20, total_characters=20)


def test_complete_session_end_to_end():
    store = ProgressStore()
    tally = {"a": LetterStats(5, 5), "b": LetterStats(1, 2)}

    report = complete_session(store, stats(), tally, "stage-1-lesson-1", base_xp=50,
                              session_id="s1", today=date(2024, 1, 2), now=NOW)

    assert report.stars == 3
    # 75 star-adjusted + 15 accuracy + 15 speed + 4 streak
    assert report.xp.total == 109
    assert report.newly_unlocked == ["first-steps", "speed-demon", "lightning-fingers"]
    assert report.achievement_xp == 150
    assert [info.letter for info in report.weak_letters] == ["b"]

    rec = store.record
    assert rec.total_xp == 259
    assert rec.completed_lessons == ["stage-1-lesson-1"]
    assert rec.weak_letters == {"a": 100.0, "b": 50.0}
    assert rec.letter_history["a"][0].date == NOW.isoformat()
    assert rec.letter_history["a"][0].session_id == "s1"
    assert rec.practice_streak == 1
    assert rec.achievements["first-steps"].unlocked_at == NOW.isoformat()


def test_letter_updates_are_visible_to_achievements():
    store = ProgressStore()
    for i in range(19):
        store.record.weak_letters[chr(ord("a") + i)] = 96.0

    report = complete_session(store, stats(wpm=10), {"t": LetterStats(4, 4)}, "stage-1-lesson-1", 50,
                              today=date(2024, 1, 2), now=NOW)
    assert "key-master" in report.newly_unlocked


def test_repeat_session_does_not_unlock_twice():
    store = ProgressStore()
    complete_session(store, stats(), {}, "stage-1-lesson-1", 50, today=date(2024, 1, 2), now=NOW)
    again = complete_session(store, stats(), {}, "stage-1-lesson-1", 50, today=date(2024, 1, 2), now=NOW)
    assert "first-steps" not in again.newly_unlocked
    assert "lightning-fingers" not in again.newly_unlocked
    assert store.record.lessons["stage-1-lesson-1"].attempts == 2


def test_failed_session_earns_nothing():
    store = ProgressStore()
    report = complete_session(store, stats(wpm=10, accuracy=50.0), {"a": LetterStats(1, 2)},
                              "stage-1-lesson-1", 50, today=date(2024, 1, 2), now=NOW)
    assert report.stars == 0
    assert report.xp.total == 0
    assert report.newly_unlocked == []
    assert store.record.completed_lessons == []
    assert store.record.lessons["stage-1-lesson-1"].attempts == 1
    assert store.record.weak_letters == {"a": 50.0}


def test_streak_rules():
    store = ProgressStore()
    assert store.update_streak(date(2024, 1, 1)) == 1
    assert store.update_streak(date(2024, 1, 1)) == 1
    assert store.update_streak(date(2024, 1, 2)) == 2
    assert store.update_streak(date(2024, 1, 5)) == 1
    assert store.record.longest_streak == 2
    assert store.record.last_practice_date == "2024-01-05"


def test_lesson_bests_only_improve():
    store = ProgressStore()
    store.complete_lesson("l1", 95.0, 40, 2, 60, NOW)
    best = store.complete_lesson("l1", 80.0, 55, 1, 50, NOW)
    assert best.best_accuracy == 95.0
    assert best.best_wpm == 55
    assert best.stars == 2
    assert best.xp_earned == 60
    assert store.record.average_accuracy == pytest.approx(87.5)


def test_click_achievements():
    store = ProgressStore()
    for _ in range(10):
        store.register_click("home")
    assert store.check_click_achievements(NOW) == ["curious-clicker"]
    assert store.check_click_achievements(NOW) == []
    with pytest.raises(ValueError):
        store.register_click("elsewhere")
