"""Amount input sanitizing and validation.

Canonical numeric text is ASCII digits with at most one "." separator; signs,
grouping characters and letters are stripped. The same rules apply to
keystrokes (``is_allowed_key``) and to pasted or programmatic text
(``sanitize``).
"""

from __future__ import annotations

import re
from typing import Optional

from tokenswap.core.errors import InvalidNumber
from tokenswap.services.decimal_engine import DecimalEngine, get_decimal_engine

_DISALLOWED = re.compile(r"[^0-9.]")

EDITING_KEYS = frozenset(
    {"Backspace", "Tab", "Escape", "Enter", "Delete", "Home", "End", "ArrowLeft", "ArrowRight"}
)
# select-all, copy, paste, cut, undo
CTRL_SHORTCUTS = frozenset({"a", "c", "v", "x", "z"})


def sanitize(raw: str) -> str:
    clean = _DISALLOWED.sub("", raw or "")
    head, sep, tail = clean.partition(".")
    if sep:
        return head + "." + tail.replace(".", "")
    return head


def is_allowed_key(key: str, current_text: str = "", ctrl: bool = False) -> bool:
    """Keystroke filter for the amount field."""
    if key in EDITING_KEYS:
        return True
    if ctrl and key.lower() in CTRL_SHORTCUTS:
        return True
    if len(key) == 1 and "0" <= key <= "9":
        return True
    if key == ".":
        return "." not in current_text
    return False


def is_valid_amount(text: str, engine: Optional[DecimalEngine] = None) -> bool:
    if not text:
        return False
    engine = engine or get_decimal_engine()
    try:
        value = engine.parse(text)
    except InvalidNumber:
        return False
    return value >= 0
