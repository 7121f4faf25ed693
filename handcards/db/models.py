from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, func
from . import Base


class FlashcardRecord(Base):
    __tablename__ = 'flashcards'

    card_id = Column(Integer, primary_key=True, autoincrement=True)
    front = Column(Text, nullable=False)
    back = Column(Text, nullable=False)
    hint = Column(Text, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    bucket = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(), server_default=func.now())
    last_reviewed_at = Column(DateTime, nullable=True)
    source = Column(String(50), nullable=True)
