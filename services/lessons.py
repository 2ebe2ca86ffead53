# services/lessons.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional

WEAK_THRESHOLD = 80.0


@dataclass(frozen=True)
class Exercise:
    id: str
    content: str
    instructions: str
    focus_keys: List[str] = field(default_factory=list)
    target_accuracy: float = 70.0


@dataclass(frozen=True)
class Lesson:
    id: str
    stage_id: int
    lesson_number: int
    title: str
    new_keys: List[str]
    practice_keys: List[str]
    xp_reward: int
    passing_accuracy: float
    exercises: List[Exercise]

    @property
    def text(self) -> str:
        return " ".join(ex.content for ex in self.exercises)


@dataclass(frozen=True)
class Stage:
    id: int
    name: str
    description: str
    icon: str
    lessons: List[Lesson]


def _ex(lesson_id: str, n: int, content: str, instructions: str, focus: str = "", target: float = 70.0) -> Exercise:
    return Exercise(f"{lesson_id}-ex-{n}", content, instructions, list(focus), target)


_HOME = list("asdfjkl;")

STAGES: List[Stage] = [
    Stage(1, "Home Row Haven", "Master the home row position", "🏠", [
        Lesson("stage-1-lesson-1", 1, 1, "Meet Your Home Row", _HOME, _HOME, 50, 70, [
            _ex("stage-1-lesson-1", 1, "f f f f f j j j j j", "Index fingers on F and J.", "fj"),
            _ex("stage-1-lesson-1", 2, "f j f j f j f j f j", "Alternate between F and J.", "fj", 75),
            _ex("stage-1-lesson-1", 3, "ff jj ff jj ff jj ff jj", "Type each letter twice.", "fj", 75),
        ]),
        Lesson("stage-1-lesson-2", 1, 2, "Left Hand Home", list("asd"), list("asdf"), 50, 70, [
            _ex("stage-1-lesson-2", 1, "asdf asdf asdf asdf", "Left hand home row.", "asdf"),
            _ex("stage-1-lesson-2", 2, "fdsa fdsa fdsa fdsa", "Now backwards.", "asdf"),
            _ex("stage-1-lesson-2", 3, "sad dad fad add", "Left hand words.", "asdf"),
        ]),
        Lesson("stage-1-lesson-3", 1, 3, "Right Hand Home", list("kl;"), list("jkl;"), 50, 70, [
            _ex("stage-1-lesson-3", 1, "jkl; jkl; jkl; jkl;", "Right hand home row.", "jkl;"),
            _ex("stage-1-lesson-3", 2, ";lkj ;lkj ;lkj ;lkj", "Now backwards.", "jkl;"),
        ]),
        Lesson("stage-1-lesson-4", 1, 4, "Full Home Row", [], _HOME, 75, 75, [
            _ex("stage-1-lesson-4", 1, "asdf jkl; asdf jkl;", "Both hands.", "asdfjkl;", 75),
            _ex("stage-1-lesson-4", 2, "ask all fall sad lad", "Words using both hands.", "asdfjkl", 75),
            _ex("stage-1-lesson-4", 3, "salad flask falls asks dads", "Longer home row words.", "asdfjkl", 75),
        ]),
    ]),
    Stage(2, "Letter Lagoon", "Expand from home row to nearby keys", "🌊", [
        Lesson("stage-2-lesson-1", 2, 1, "Reach for G and H", list("gh"), list("fghj"), 60, 70, [
            _ex("stage-2-lesson-1", 1, "fg fg fg fg fgf fgf fgf", "Reach to G.", "g"),
            _ex("stage-2-lesson-1", 2, "jh jh jh jh jhj jhj jhj", "Reach to H.", "h"),
            _ex("stage-2-lesson-1", 3, "had has half gal glad hash", "Words with G and H.", "gh"),
        ]),
        Lesson("stage-2-lesson-2", 2, 2, "The Letter E", ["e"], list("defghjklas"), 60, 70, [
            _ex("stage-2-lesson-2", 1, "ded ded ded ede ede ede", "Reach up to E.", "e"),
            _ex("stage-2-lesson-2", 2, "she he led fed sea see", "Common words with E.", "e"),
            _ex("stage-2-lesson-2", 3, "feed feel edge hedge shed lead", "More words with E.", "e"),
        ]),
        Lesson("stage-2-lesson-3", 2, 3, "The Letter I", ["i"], list("kiedfghjlas"), 60, 70, [
            _ex("stage-2-lesson-3", 1, "kik kik kik iki iki iki", "Reach up to I.", "i"),
            _ex("stage-2-lesson-3", 2, "if is id kid lid did hid", "Simple words with I.", "i"),
            _ex("stage-2-lesson-3", 3, "like side hide disk file", "E and I together.", "ei"),
        ]),
        Lesson("stage-2-lesson-4", 2, 4, "R and U Keys", list("ru"), list("rufjeiasdkl"), 75, 75, [
            _ex("stage-2-lesson-4", 1, "frf frf rfr rfr frfr frfr", "Reach up to R.", "r", 75),
            _ex("stage-2-lesson-4", 2, "juj juj uju uju juju juju", "Reach up to U.", "u", 75),
            _ex("stage-2-lesson-4", 3, "true user rule rider surge", "All new keys.", "ru", 75),
        ]),
    ]),
    Stage(3, "Word Mountain", "Complete your alphabet mastery", "⛰️", [
        Lesson("stage-3-lesson-1", 3, 1, "W and O Keys", list("wo"), list("wosleiadfjk"), 65, 75, [
            _ex("stage-3-lesson-1", 1, "sws sws wsw wsw swsw swsw", "Reach up to W.", "w", 75),
            _ex("stage-3-lesson-1", 2, "lol lol olo olo lolo lolo", "Reach up to O.", "o", 75),
            _ex("stage-3-lesson-1", 3, "would world work words follow", "Words with W and O.", "wo", 75),
        ]),
        Lesson("stage-3-lesson-2", 3, 2, "Q and P Keys", list("qp"), list("qpa;woei"), 65, 75, [
            _ex("stage-3-lesson-2", 1, "aqa aqa qaq qaq aqaq aqaq", "Reach up to Q.", "q", 75),
            _ex("stage-3-lesson-2", 2, "quit quip equip equal type", "Words with Q.", "q", 75),
            _ex("stage-3-lesson-2", 3, "help hope type people keep", "Words with P.", "p", 75),
        ]),
        Lesson("stage-3-lesson-3", 3, 3, "C and V Keys", list("cv"), list("cvdfer"), 65, 75, [
            _ex("stage-3-lesson-3", 1, "dcd dcd cdc cdc dcdc dcdc", "Reach down to C.", "c", 75),
            _ex("stage-3-lesson-3", 2, "fvf fvf vfv vfv fvfv fvfv", "Reach down to V.", "v", 75),
            _ex("stage-3-lesson-3", 3, "active clever cover civil curve", "Words with C and V.", "cv", 75),
        ]),
        Lesson("stage-3-lesson-4", 3, 4, "B and N Keys", list("bn"), list("bnfjghvm"), 65, 75, [
            _ex("stage-3-lesson-4", 1, "fbf fbf bfb bfb fbfb fbfb", "Reach to B.", "b", 75),
            _ex("stage-3-lesson-4", 2, "jnj jnj njn njn jnjn jnjn", "Reach down to N.", "n", 75),
            _ex("stage-3-lesson-4", 3, "begin behind button dinner banner", "Longer words with B and N.", "bn", 75),
        ]),
    ]),
]


def get_stage(stage_id: int) -> Optional[Stage]:
    return next((s for s in STAGES if s.id == stage_id), None)


def get_lesson(lesson_id: str) -> Optional[Lesson]:
    for stage in STAGES:
        for lesson in stage.lessons:
            if lesson.id == lesson_id:
                return lesson
    return None


def all_lessons() -> List[Lesson]:
    return [lesson for stage in STAGES for lesson in stage.lessons]


def total_lessons() -> int:
    return sum(len(s.lessons) for s in STAGES)


def get_first_lesson() -> Lesson:
    return STAGES[0].lessons[0]


def get_next_lesson(current_id: str) -> Optional[Lesson]:
    ordered = all_lessons()
    for i, lesson in enumerate(ordered):
        if lesson.id == current_id:
            return ordered[i + 1] if i + 1 < len(ordered) else None
    return None


def _previous_lesson(lesson: Lesson) -> Optional[Lesson]:
    ordered = all_lessons()
    i = ordered.index(lesson)
    return ordered[i - 1] if i > 0 else None


def is_lesson_unlocked(lesson_id: str, completed: Iterable[str]) -> bool:
    """First lesson is always open; every other one needs its predecessor done."""
    lesson = get_lesson(lesson_id)
    if lesson is None:
        return False
    prev = _previous_lesson(lesson)
    return prev is None or prev.id in set(completed)


def is_stage_completed(stage_id: int, completed: Iterable[str]) -> bool:
    stage = get_stage(stage_id)
    if stage is None:
        return False
    done = set(completed)
    return all(lesson.id in done for lesson in stage.lessons)


def count_completed_stages(completed: Iterable[str]) -> int:
    done = set(completed)
    return sum(1 for s in STAGES if is_stage_completed(s.id, done))


def get_current_lesson(completed: Iterable[str]) -> Lesson:
    """Next unlocked lesson not yet completed; the last lesson once all are done."""
    done = set(completed)
    for lesson in all_lessons():
        if lesson.id not in done and is_lesson_unlocked(lesson.id, done):
            return lesson
    return STAGES[-1].lessons[-1]


def get_recommended_lessons(weak_letters: Mapping[str, float], completed: Iterable[str],
                            limit: int = 3) -> List[Lesson]:
    done = set(completed)
    weak = {letter for letter, acc in weak_letters.items() if acc < WEAK_THRESHOLD}
    if not weak:
        return [get_current_lesson(done)]

    picks = []
    for lesson in all_lessons():
        if len(picks) >= limit:
            break
        if weak.intersection(k.lower() for k in lesson.practice_keys) and is_lesson_unlocked(lesson.id, done):
            picks.append(lesson)
    return picks
