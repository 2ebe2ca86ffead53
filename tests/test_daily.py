from datetime import date, timedelta

from app.validation import HEBREW, QWERTY, detect_layout_from_text
from services.daily import (
    SENTENCES_EN,
    SENTENCES_HE,
    THEMES,
    Mulberry32,
    date_to_seed,
    get_daily_challenge,
    get_today_string,
    is_today,
    shuffle,
)


def test_seed_uses_one_based_month():
    assert date_to_seed(date(2024, 3, 7)) == 20240307
    assert date_to_seed(date(2025, 12, 31)) == 20251231


def test_mulberry_is_deterministic_and_in_range():
    a, b = Mulberry32(20240307), Mulberry32(20240307)
    draws = [a() for _ in range(500)]
    assert draws == [b() for _ in range(500)]
    assert all(0.0 <= d < 1.0 for d in draws)
    assert len(set(draws)) > 490


def test_mulberry_matches_reference_sequence():
    rng = Mulberry32(20240307)
    assert [rng() for _ in range(3)] == [0.9852727751713246, 0.46652851975522935, 0.5978148395661265]


def test_known_day_challenge():
    challenge = get_daily_challenge(date(2024, 1, 1), QWERTY)
    assert challenge.text == (
        "Keyboard skills are essential in our digital age. "
        "Every expert was once a beginner who never gave up. "
        "Type each word carefully and watch your speed increase."
    )
    assert challenge.theme.name == "Game Day"


def test_mulberry_state_stays_32_bit():
    rng = Mulberry32(0xFFFFFFFF)
    for _ in range(10):
        rng.next()
        assert 0 <= rng.state <= 0xFFFFFFFF


def test_shuffle_walks_from_the_back():
    # always drawing 0 swaps each tail slot with the head
    assert shuffle([1, 2, 3, 4], lambda: 0.0) == [2, 3, 4, 1]
    assert shuffle([1, 2, 3, 4], lambda: 0.999) == [1, 2, 3, 4]


def test_shuffle_returns_new_permutation():
    items = list(range(20))
    out = shuffle(items, Mulberry32(1))
    assert sorted(out) == items
    assert items == list(range(20))


def test_same_day_same_challenge():
    day = date(2024, 6, 1)
    assert get_daily_challenge(day) == get_daily_challenge(day)
    assert get_daily_challenge(day, HEBREW) == get_daily_challenge(day, HEBREW)


def test_challenge_shape():
    day = date(2024, 6, 1)
    challenge = get_daily_challenge(day, QWERTY)
    assert challenge.date == "2024-06-01"
    assert challenge.theme in THEMES
    assert challenge.word_count == len(challenge.text.split())
    assert challenge.character_count == len(challenge.text)

    count = sum(1 for s in SENTENCES_EN if s in challenge.text)
    assert count in (2, 3)


def test_hebrew_challenge_uses_hebrew_pool():
    challenge = get_daily_challenge(date(2024, 6, 1), HEBREW)
    assert detect_layout_from_text(challenge.text) == HEBREW
    assert any(s in challenge.text for s in SENTENCES_HE)


def test_days_differ():
    start = date(2024, 1, 1)
    texts = {get_daily_challenge(start + timedelta(days=i)).text for i in range(30)}
    assert len(texts) > 20


def test_today_helpers():
    today = get_today_string()
    assert is_today(today)
    assert not is_today("1999-01-01")
    assert get_daily_challenge().date == today
