from fastapi import APIRouter, Depends, HTTPException

from ..deps import get_review, review_state, conflict
from ..schemas.review import RateIn, ReviewStateOut
from ...review.models import InvalidTransition, Rating
from ...review.scheduler import ReviewSession


# async: these run on the event loop, one at a time with the /ws/gesture frame
# loop that drives the same ReviewSession. Store calls block the loop meanwhile.
router = APIRouter(prefix="/api/v1/review", tags=["review"])


@router.get("", response_model=ReviewStateOut)
async def get_state(review: ReviewSession = Depends(get_review)):
    return review_state(review)


@router.post("/start", response_model=ReviewStateOut)
async def start(review: ReviewSession = Depends(get_review)):
    try:
        review.start()
    except InvalidTransition as e:
        raise conflict(e)
    return review_state(review)


@router.post("/hint", response_model=ReviewStateOut)
async def show_hint(review: ReviewSession = Depends(get_review)):
    try:
        review.show_hint()
    except InvalidTransition as e:
        raise conflict(e)
    return review_state(review)


@router.post("/answer", response_model=ReviewStateOut)
async def show_answer(review: ReviewSession = Depends(get_review)):
    try:
        review.show_answer()
    except InvalidTransition as e:
        raise conflict(e)
    return review_state(review)


@router.post("/rate", response_model=ReviewStateOut)
async def rate(payload: RateIn, review: ReviewSession = Depends(get_review)):
    try:
        rating = Rating.parse(payload.rating)
    except ValueError as e:
        raise HTTPException(422, str(e))
    try:
        review.rate(rating)
    except InvalidTransition as e:
        raise conflict(e)
    return review_state(review)


@router.post("/next-day", response_model=ReviewStateOut)
async def next_day(review: ReviewSession = Depends(get_review)):
    review.advance_day()
    return review_state(review)


@router.post("/end", response_model=ReviewStateOut)
async def end(review: ReviewSession = Depends(get_review)):
    review.end()
    return review_state(review)
