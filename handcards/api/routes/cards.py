from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..deps import get_db, get_review
from ..schemas.card import CardIn, CardOut
from ...db import requests as rq
from ...db.store import record_to_card
from ...review.scheduler import ReviewSession


router = APIRouter(prefix="/api/v1", tags=["cards"])


@router.get("/cards", response_model=list[CardOut])
def list_cards(db: Session = Depends(get_db)):
    return rq.get_all_cards(session=db)


@router.get("/cards/recent", response_model=list[CardOut])
def recent_cards(limit: int = Query(default=5, ge=1, le=50), db: Session = Depends(get_db)):
    return rq.get_recent_cards(limit, session=db)


# async: add_card on the shared ReviewSession must stay on the event loop thread
@router.post("/cards", response_model=CardOut, status_code=201)
async def create_card(payload: CardIn, db: Session = Depends(get_db), review: ReviewSession = Depends(get_review)):
    try:
        record = rq.add_card(payload.front, payload.back, payload.hint, payload.tags, source="api", session=db)
    except ValueError as e:
        raise HTTPException(422, str(e))
    review.add_card(record_to_card(record))
    return record
