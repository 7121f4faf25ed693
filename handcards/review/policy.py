"""
Leitner-style bucket policy.

Bucket b waits (2**b - 1) interval units after its last review: bucket 0 is
due right away, then 1, 3, 7, 15 ... units. Cards that were never reviewed
are always due.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Sequence

from .models import Flashcard, Rating

DEFAULT_INTERVAL_UNIT = timedelta(days=1)


def clamp_bucket(bucket) -> int:
    try:
        value = int(bucket)
    except (TypeError, ValueError):
        return 0
    return max(0, value)


def interval_for(bucket: int, unit: timedelta = DEFAULT_INTERVAL_UNIT) -> timedelta:
    return unit * (2 ** clamp_bucket(bucket) - 1)


def apply_rating(card: Flashcard, rating: Rating, now: datetime) -> Flashcard:
    bucket = clamp_bucket(card.bucket)

    if rating == Rating.AFFIRM:
        bucket += 1
    elif rating == Rating.REJECT:
        bucket = 0

    card.bucket = bucket
    card.last_reviewed_at = now
    return card


def next_eligible_at(card: Flashcard, unit: timedelta = DEFAULT_INTERVAL_UNIT) -> datetime:
    if card.last_reviewed_at is None:
        return datetime.min
    try:
        return card.last_reviewed_at + interval_for(card.bucket, unit)
    except OverflowError:
        return datetime.max


def select_next_due(
    cards: Sequence[Flashcard],
    now: datetime,
    unit: timedelta = DEFAULT_INTERVAL_UNIT,
) -> Optional[Flashcard]:
    """
    Lowest bucket first, then oldest review (never reviewed counts as oldest),
    then position in `cards`.
    """
    due = [
        (clamp_bucket(card.bucket), card.last_reviewed_at or datetime.min, pos, card)
        for pos, card in enumerate(cards)
        if next_eligible_at(card, unit) <= now
    ]
    if not due:
        return None
    return min(due, key=lambda entry: entry[:3])[3]
