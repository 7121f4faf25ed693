import os
from datetime import timedelta

from fastapi import HTTPException, Request

from ..db import get_session, Session
from ..db.store import SqlFlashcardStore
from ..ml.hold import HoldConfirmation
from ..ml.runtime import load_gesture_config
from ..review.models import Step
from ..review.scheduler import ReviewSession


INTERVAL_UNIT_HOURS = float(os.getenv("HANDCARDS_INTERVAL_UNIT_HOURS", "24"))


def get_db():
    db = get_session()
    try:
        yield db
    finally:
        db.close()


def build_review_session() -> ReviewSession:
    config = load_gesture_config()
    return ReviewSession(
        store=SqlFlashcardStore(Session),
        hold=HoldConfirmation(config),
        interval_unit=timedelta(hours=INTERVAL_UNIT_HOURS),
    )


def review_for_app(app) -> ReviewSession:
    review = getattr(app.state, "review", None)
    if review is None:
        review = build_review_session()
        app.state.review = review
    return review


def get_review(request: Request) -> ReviewSession:
    return review_for_app(request.app)


def review_state(review: ReviewSession) -> dict:
    state = review.state
    card = review.active_card

    card_out = None
    if card is not None:
        card_out = {
            "card_id": card.id,
            "front": card.front,
            "back": card.back if state.step == Step.ANSWER else None,
            "hint": card.hint if state.hint_visible else None,
            "has_hint": bool(card.hint),
            "tags": sorted(card.tags),
            "bucket": card.bucket,
        }

    return {
        "step": state.step.value,
        "day_counter": state.day_counter,
        "hint_visible": state.hint_visible,
        "notice": state.notice,
        "reviewed": state.reviewed,
        "progress": review.progress,
        "symbol": review.current_symbol.value,
        "card": card_out,
    }


def conflict(e: Exception) -> HTTPException:
    return HTTPException(status_code=409, detail=str(e))
