# main.py
from __future__ import annotations
import argparse
import logging
import random
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

from app.calculation import format_time, get_performance_feedback
from app.errors import KeyquestError
from app.settings import DEFAULT_SETTINGS_FILE, load_settings
from services.completion import ProgressStore, complete_session
from services.daily import get_daily_challenge
from services.lessons import get_current_lesson, get_lesson
from services.letter_analytics import get_letter_stats
from services.ranks import get_rank_progress
from services.text_generator import (
    CalmTextConfig,
    TargetedTextConfig,
    generate_calm_text,
    generate_initial_targeted_text,
)
from services.typing_engine import TypingEngine
from services.weakkeys import WeakKeys
from utils.file_handler import DEFAULT_PROGRESS_PATH, ProgressRepository

log = logging.getLogger("keyquest")


def setup_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler("app.log", encoding="utf-8"),
        ],
    )

    # Log any uncaught exceptions rather than silently dying
    def excepthook(exctype, value, tb):
        logging.getLogger("keyquest").critical("Unhandled exception", exc_info=(exctype, value, tb))
        # exit with non-zero so run scripts don't think it succeeded
        sys.exit(1)

    sys.excepthook = excepthook


# -------- commands --------
def cmd_daily(args) -> int:
    day = date.fromisoformat(args.date) if args.date else date.today()
    challenge = get_daily_challenge(day, args.layout)
    print(f"{challenge.theme.emoji} {challenge.theme.name} ({challenge.date})")
    print(challenge.text)
    print(f"{challenge.word_count} words, {challenge.character_count} characters")
    return 0


def cmd_weak(args) -> int:
    store = ProgressStore(ProgressRepository(args.progress).load())
    weak = WeakKeys(store.letter_accessors())
    ranked = weak.ranked()[: args.limit]
    if not ranked:
        print("No weak letters yet. Keep practicing!")
    for info in ranked:
        print(f"{info.letter.upper():>3}  {info.accuracy:6.2f}%  {info.trend.value:<9}  priority {info.priority}")

    stats = get_letter_stats(store.record.weak_letters, store.record.letter_history)
    print(", ".join(f"{k}: {v}" for k, v in stats.items()))
    return 0


def cmd_practice(args) -> int:
    settings = load_settings(args.settings)
    store = ProgressStore(ProgressRepository(args.progress).load())
    rng = random.Random(args.seed)

    if args.mode == "calm":
        config = CalmTextConfig(
            chunk_size=settings.initial_chunk_size,
            weak_letters=store.record.weak_letters,
            focus_weak_letters=settings.focus_weak_letters,
            weak_letter_weight=settings.calm_weak_letter_weight,
            layout=settings.layout,
        )
        print(generate_calm_text(config, rng))
    else:
        config = TargetedTextConfig(
            weak_letters=store.record.weak_letters,
            age_group=settings.age_group,
            target_letters=list(args.letters) if args.letters else None,
            chunk_size=settings.initial_chunk_size,
            weak_letter_weight=settings.targeted_weak_letter_weight,
            layout=settings.layout,
        )
        print(generate_initial_targeted_text(config, args.chunks, rng))
    return 0


def cmd_lesson(args) -> int:
    settings = load_settings(args.settings)
    repo = ProgressRepository(args.progress)
    store = ProgressStore(repo.load())

    lesson = get_lesson(args.lesson_id) if args.lesson_id else get_current_lesson(store.record.completed_lessons)
    if lesson is None:
        print(f"Unknown lesson: {args.lesson_id}", file=sys.stderr)
        return 2

    engine = TypingEngine(lesson.text, allow_backspace=settings.allow_backspace, layout=settings.layout)
    print(f"{lesson.title}\n\n  {lesson.text}\n")
    engine.start()
    typed = input("> ")
    for ch in typed:
        engine.process_key(ch)

    stats = engine.result
    if stats is None:
        print(f"Lesson not finished ({engine.cursor_position}/{len(lesson.text)} characters); nothing saved.",
              file=sys.stderr)
        return 3
    report = complete_session(
        store, stats, engine.letter_tally, lesson.id, lesson.xp_reward,
        passing_accuracy=lesson.passing_accuracy, history_limit=settings.history_limit,
    )
    repo.save(store.record)

    rank = get_rank_progress(store.record.total_xp)
    print(f"{stats.wpm} wpm, {stats.accuracy}% accuracy in {format_time(stats.elapsed_ms)} "
          f"({get_performance_feedback(stats.accuracy, stats.wpm)})")
    print(f"{'*' * report.stars or 'no stars'}, +{report.xp.total + report.achievement_xp} xp, rank {rank.current_rank}")
    for achievement_id in report.newly_unlocked:
        print(f"Achievement unlocked: {achievement_id}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="keyquest", description="Touch-typing tutor")
    parser.add_argument("--progress", type=Path, default=DEFAULT_PROGRESS_PATH, help="progress JSON file")
    parser.add_argument("--settings", type=Path, default=DEFAULT_SETTINGS_FILE, help="settings JSON file")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("daily", help="show the daily challenge")
    p.add_argument("--date", help="YYYY-MM-DD, defaults to today")
    p.add_argument("--layout", default="qwerty", choices=("qwerty", "hebrew"))
    p.set_defaults(func=cmd_daily)

    p = sub.add_parser("weak", help="list weak letters by priority")
    p.add_argument("--limit", type=int, default=5)
    p.set_defaults(func=cmd_weak)

    p = sub.add_parser("practice", help="generate practice text")
    p.add_argument("--mode", default="calm", choices=("calm", "targeted"))
    p.add_argument("--letters", help="target letters for targeted mode, e.g. 'qz'")
    p.add_argument("--chunks", type=int, default=3)
    p.add_argument("--seed", type=int)
    p.set_defaults(func=cmd_practice)

    p = sub.add_parser("lesson", help="type a lesson and record the result")
    p.add_argument("lesson_id", nargs="?", help="defaults to the next unlocked lesson")
    p.set_defaults(func=cmd_lesson)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)
    try:
        return args.func(args)
    except KeyquestError as e:
        log.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
