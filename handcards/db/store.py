import logging
from typing import List, Sequence

from sqlalchemy.exc import SQLAlchemyError

from handcards.review.models import Flashcard, StorageError
from handcards.review.policy import clamp_bucket
from .models import FlashcardRecord

logger = logging.getLogger("handcards.store")


def record_to_card(record: FlashcardRecord) -> Flashcard:
    return Flashcard(
        id=record.card_id,
        front=record.front,
        back=record.back,
        hint=record.hint,
        tags=set(record.tags or []),
        bucket=clamp_bucket(record.bucket),
        created_at=record.created_at,
        last_reviewed_at=record.last_reviewed_at,
    )


def copy_card_to_record(card: Flashcard, record: FlashcardRecord) -> FlashcardRecord:
    record.front = card.front
    record.back = card.back
    record.hint = card.hint
    record.tags = sorted(card.tags)
    record.bucket = clamp_bucket(card.bucket)
    record.last_reviewed_at = card.last_reviewed_at
    if card.created_at is not None:
        record.created_at = card.created_at
    return record


class SqlFlashcardStore:
    """Storage collaborator of ReviewSession backed by the flashcards table."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def load(self) -> List[Flashcard]:
        db = self.session_factory()
        try:
            records = db.query(FlashcardRecord).order_by(FlashcardRecord.card_id).all()
            return [record_to_card(r) for r in records]
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e
        finally:
            db.close()

    def save(self, cards: Sequence[Flashcard]) -> bool:
        db = self.session_factory()
        try:
            created = []
            for card in cards:
                record = db.get(FlashcardRecord, card.id) if card.id is not None else None
                if record is None:
                    record = FlashcardRecord(card_id=card.id)
                    db.add(record)
                    created.append((card, record))
                copy_card_to_record(card, record)
            db.commit()

            for card, record in created:
                db.refresh(record)
                card.id = record.card_id
                card.created_at = record.created_at
            return True
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning("saving %d card(s) failed: %s", len(cards), e)
            return False
        finally:
            db.close()
