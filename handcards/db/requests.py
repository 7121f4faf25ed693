from typing import Iterable, List, Optional, Union

from . import get_session
from .models import FlashcardRecord


def normalize_tags(tags: Union[str, Iterable[str], None]) -> List[str]:
    """'a, b,,a' -> ['a', 'b']"""
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    seen = []
    for tag in tags:
        tag = str(tag).strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def add_card(front: str, back: str, hint: Optional[str] = None, tags=None, source: Optional[str] = None,
             session=None) -> FlashcardRecord:
    front = (front or "").strip()
    back = (back or "").strip()
    if not front or not back:
        raise ValueError("Front and Back fields are required.")

    own_session = session is None
    db = get_session() if own_session else session
    try:
        card = FlashcardRecord(
            front=front,
            back=back,
            hint=(hint or "").strip() or None,
            tags=normalize_tags(tags),
            bucket=0,
            source=source,
        )
        db.add(card)
        db.commit()
        db.refresh(card)
        return card
    finally:
        if own_session:
            db.close()


def get_recent_cards(limit: int = 5, session=None) -> List[FlashcardRecord]:
    own_session = session is None
    db = get_session() if own_session else session
    try:
        return (
            db.query(FlashcardRecord)
            .order_by(FlashcardRecord.card_id.desc())
            .limit(limit)
            .all()
        )
    finally:
        if own_session:
            db.close()


def get_all_cards(session=None) -> List[FlashcardRecord]:
    own_session = session is None
    db = get_session() if own_session else session
    try:
        return db.query(FlashcardRecord).order_by(FlashcardRecord.card_id).all()
    finally:
        if own_session:
            db.close()
