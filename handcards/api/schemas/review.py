from pydantic import BaseModel
from typing import List, Optional


class RateIn(BaseModel):
    rating: str


class ActiveCardOut(BaseModel):
    card_id: int
    front: str
    back: Optional[str] = None
    hint: Optional[str] = None
    has_hint: bool = False
    tags: List[str] = []
    bucket: int


class ReviewStateOut(BaseModel):
    step: str
    day_counter: int
    hint_visible: bool
    notice: Optional[str] = None
    reviewed: int
    progress: float
    symbol: str
    card: Optional[ActiveCardOut] = None
