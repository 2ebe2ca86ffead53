import re
from typing import Optional

QWERTY = "qwerty"
HEBREW = "hebrew"
LAYOUTS = (QWERTY, HEBREW)

_HEBREW_RE = re.compile(r"[\u0590-\u05FF]")
_LATIN_RE = re.compile("[a-zA-Z]")


def is_hebrew_char(ch: str) -> bool:
    return bool(ch) and _HEBREW_RE.match(ch) is not None


def is_latin_char(ch: str) -> bool:
    return bool(ch) and _LATIN_RE.match(ch) is not None


def is_character_compatible_with_layout(ch: str, layout: str) -> bool:
    # digits, punctuation and space exist on every layout
    if not is_hebrew_char(ch) and not is_latin_char(ch):
        return True
    if layout == HEBREW:
        return is_hebrew_char(ch)
    return is_latin_char(ch)


def detect_layout_from_char(ch: str) -> Optional[str]:
    if is_hebrew_char(ch):
        return HEBREW
    if is_latin_char(ch):
        return QWERTY
    return None


def detect_layout_from_text(text: str) -> str:
    hebrew = sum(1 for ch in text if is_hebrew_char(ch))
    latin = sum(1 for ch in text if is_latin_char(ch))
    return HEBREW if hebrew > latin else QWERTY


def is_printable_key(ch: str) -> bool:
    """A single visible character or space; named keys like 'Shift' are not typing."""
    return len(ch) == 1 and (ch.isprintable() or ch == " ")
