from pydantic import BaseModel, ConfigDict, field_validator
from datetime import datetime
from typing import List, Optional, Union


class CardIn(BaseModel):
    front: str
    back: str
    hint: Optional[str] = None
    tags: Union[List[str], str, None] = None

    @field_validator("front", "back")
    @classmethod
    def required_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Front and Back fields are required.")
        return v


class CardOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    card_id: int
    front: str
    back: str
    hint: Optional[str] = None
    tags: List[str] = []
    bucket: int
    created_at: Optional[datetime] = None
    last_reviewed_at: Optional[datetime] = None
