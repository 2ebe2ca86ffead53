import random

from app.difficulty import ADULT, CHILD, is_word_appropriate
from app.validation import HEBREW, detect_layout_from_text
from services.text_generator import (
    CalmTextConfig,
    EndlessText,
    TargetedTextConfig,
    generate_calm_text,
    generate_initial_targeted_text,
    generate_more_text,
    generate_targeted_text,
    get_append_threshold,
    get_random_weak_letter,
    get_target_letter_stats,
    get_weakest_letter,
    should_generate_more,
)
from services.wordbank import ENGLISH, get_word_bank


def words_with(letter, chunks):
    words = [w for chunk in chunks for w in chunk.split()]
    return sum(1 for w in words if letter in w) / len(words)


def test_letter_index():
    assert ENGLISH.words_for_letter("Q") == ["quiet"]
    assert ENGLISH.words_for_letter("ж") == []
    assert all("x" in w for w in ENGLISH.words_for_letter("x"))


def test_letter_index_is_not_shared_with_callers():
    words = ENGLISH.words_for_letter("q")
    words.append("zzz")
    words.clear()
    assert ENGLISH.words_for_letter("q") == ["quiet"]


def test_weakest_and_random_weak_letter():
    assert get_weakest_letter({"a": 50, "b": 30}) == "b"
    assert get_weakest_letter({}) is None
    assert get_random_weak_letter({"a": 90}, random.Random(1)) is None
    assert get_random_weak_letter({"a": 90, "k": 20}, random.Random(1)) == "k"


def test_calm_text_leans_toward_weak_letter():
    rng = random.Random(42)
    focused = CalmTextConfig(weak_letters={"q": 20.0})
    plain = CalmTextConfig()

    biased = [generate_calm_text(focused, rng) for _ in range(1000)]
    baseline = [generate_calm_text(plain, rng) for _ in range(1000)]

    # p = 0.4 of words come from the "q" index, plus the odd natural hit
    assert 0.35 < words_with("q", biased) < 0.5
    assert words_with("q", baseline) < 0.05


def test_focus_can_be_switched_off():
    rng = random.Random(7)
    config = CalmTextConfig(weak_letters={"q": 20.0}, focus_weak_letters=False)
    chunks = [generate_calm_text(config, rng) for _ in range(300)]
    assert words_with("q", chunks) < 0.05


def test_letter_without_words_falls_back():
    text = generate_calm_text(CalmTextConfig(weak_letters={"ж": 5.0}), random.Random(3))
    assert text
    assert "ж" not in text


def test_chunk_always_has_a_word():
    text = generate_calm_text(CalmTextConfig(chunk_size=0), random.Random(0))
    assert len(text.split()) == 1


def test_chunk_respects_budget():
    text = generate_calm_text(CalmTextConfig(chunk_size=60), random.Random(0))
    words = text.split()
    assert sum(len(w) + 1 for w in words) >= 60
    assert sum(len(w) + 1 for w in words[:-1]) < 60


def test_hebrew_text():
    text = generate_calm_text(CalmTextConfig(layout=HEBREW), random.Random(5))
    assert detect_layout_from_text(text) == HEBREW
    assert get_word_bank(HEBREW).words_for_letter("ש")


def test_more_text_joins_with_single_space():
    rng = random.Random(0)
    assert generate_more_text("abc", rng=rng).startswith(" ")
    assert not generate_more_text("abc ", rng=rng).startswith(" ")
    assert not generate_more_text("", rng=rng).startswith(" ")


def test_targeted_text_respects_age_profile():
    rng = random.Random(11)
    text = generate_targeted_text(TargetedTextConfig(age_group=CHILD), rng)
    assert all(is_word_appropriate(w, CHILD) for w in text.split())


def test_explicit_targets_win_over_weak_letters():
    config = TargetedTextConfig(
        weak_letters={"a": 10.0},
        target_letters=["x"],
        weak_letter_weight=1.0,
        age_group=CHILD,
    )
    text = generate_targeted_text(config, random.Random(2))
    assert all("x" in w for w in text.split())


def test_targeted_letter_outside_age_range_still_used():
    # "quiet" is the only q word; too long for a child but better than nothing
    config = TargetedTextConfig(target_letters=["q"], weak_letter_weight=1.0, age_group=CHILD)
    text = generate_targeted_text(config, random.Random(4))
    assert set(text.split()) == {"quiet"}


def test_initial_targeted_text_has_several_chunks():
    config = TargetedTextConfig(age_group=ADULT, chunk_size=30)
    text = generate_initial_targeted_text(config, initial_chunks=3, rng=random.Random(9))
    assert sum(len(w) + 1 for w in text.split()) >= 90


def test_target_letter_stats():
    stats = get_target_letter_stats("ab ab", ["A"])
    assert stats["total_chars"] == 4
    assert stats["target_letter_count"] == 2
    assert stats["target_letter_percentage"] == 50
    assert stats["letter_breakdown"] == {"a": 2}


def test_append_threshold():
    assert get_append_threshold(100) == 80
    assert should_generate_more(80, 100)
    assert not should_generate_more(79, 100)


def test_endless_text_appends_once_per_crossing():
    appended = []
    endless = EndlessText.calm(CalmTextConfig(), random.Random(1), on_text_appended=appended.append)
    start = endless.text
    assert endless.check_and_append(0) == ""

    trigger = get_append_threshold(len(start))
    chunk = endless.check_and_append(trigger)
    assert chunk
    assert endless.text == start + chunk
    assert chunk.startswith(" ")
    assert appended == [chunk]

    assert endless.check_and_append(trigger) == ""
    assert endless.check_and_append(get_append_threshold(len(endless.text)))
    assert len(appended) == 2


def test_endless_text_reset():
    endless = EndlessText(lambda existing, size: ("" if not existing else " ") + "word")
    endless.append_more()
    assert endless.text == "word word"
    endless.reset()
    assert endless.text == "word"
