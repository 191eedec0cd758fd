"""Body splitting and identifier helpers."""

from __future__ import annotations

import re
import secrets
import time
from typing import Iterable, List

from .models import Segment

DEFAULT_TITLE = "Effective Study Log"
DEFAULT_SEGMENT_TEXT = "\n".join(
    [
        "Line 1: Set today's study goals and confirm the key points and pace.",
        "Line 2: Read the lesson with full focus and mark passages to review.",
        "Line 3: Take notes on difficult concepts and record open questions.",
        "Line 4: Finish the exercises, check the answers, find the cause of mistakes.",
        "Line 5: Summarize what was learned and what to improve next time.",
    ]
)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"
_LINE_BREAK = re.compile(r"\r?\n")


def _to_base36(value: int) -> str:
    if value <= 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_id(prefix: str = "id") -> str:
    token = "".join(secrets.choice(_BASE36) for _ in range(8))
    stamp = _to_base36(int(time.time() * 1000))
    return f"{prefix}-{token}-{stamp}"


def split_body(raw: str) -> List[str]:
    lines = [line.rstrip() for line in _LINE_BREAK.split(raw or "")]
    return [line for line in lines if line.strip()]


def build_segments(lines: Iterable[str]) -> List[Segment]:
    return [Segment(id=generate_id("segment"), text=text) for text in lines]


def default_segments() -> List[Segment]:
    return build_segments(DEFAULT_SEGMENT_TEXT.split("\n"))
