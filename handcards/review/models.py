from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Set


class ReviewError(Exception):
    pass


class InvalidTransition(ReviewError):
    pass


class StorageError(ReviewError):
    pass


class Rating(str, Enum):
    AFFIRM = "affirm"    # easy
    DEFER = "defer"      # hard
    REJECT = "reject"    # wrong

    @classmethod
    def parse(cls, value) -> "Rating":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        key = _RATING_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"unknown rating: {value!r}") from None


_RATING_ALIASES = {
    "easy": "affirm",
    "hard": "defer",
    "wrong": "reject",
}


class Step(str, Enum):
    IDLE = "idle"
    QUESTION = "question"
    ANSWER = "answer"


@dataclass
class Flashcard:
    front: str
    back: str
    hint: Optional[str] = None
    tags: Set[str] = field(default_factory=set)
    bucket: int = 0
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    last_reviewed_at: Optional[datetime] = None


@dataclass
class SessionState:
    step: Step = Step.IDLE
    active_card_id: Optional[int] = None
    day_counter: int = 0
    hint_visible: bool = False
    notice: Optional[str] = None
    reviewed: int = 0
