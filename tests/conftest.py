import dataclasses
from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from handcards.db import Base
from handcards.db import models  # noqa: F401
from handcards.ml.landmarks import LandmarkFrame
from handcards.review.models import Flashcard, StorageError


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class MemoryStore:
    """Hands out copies, like a real backend would."""

    def __init__(self, cards=()):
        self.cards = [self._copy(c) for c in cards]
        self.fail_save = False
        self.fail_load = False
        self.saves = 0

    @staticmethod
    def _copy(card):
        return dataclasses.replace(card, tags=set(card.tags))

    def load(self):
        if self.fail_load:
            raise StorageError("storage offline")
        return [self._copy(c) for c in self.cards]

    def save(self, cards):
        if self.fail_save:
            return False
        self.saves += 1
        self.cards = [self._copy(c) for c in cards]
        return True

    def bucket_of(self, card_id):
        return next(c.bucket for c in self.cards if c.id == card_id)


def make_hand(thumb_tip=(270.0, 350.0), extended=0):
    """
    Synthetic 21-point right hand in pixel space, wrist at (300, 400),
    knuckles on y=300. The first `extended` fingers (index first) point up.
    """
    pts = [(300.0, 400.0)] * 21
    pts[1] = (290.0, 385.0)
    pts[2] = (282.0, 370.0)
    pts[3] = (276.0, 360.0)
    pts[4] = thumb_tip

    for f, x in enumerate((280.0, 300.0, 320.0, 340.0)):
        mcp = 5 + 4 * f
        up = f < extended
        pts[mcp] = (x, 300.0)
        pts[mcp + 1] = (x, 270.0 if up else 315.0)
        pts[mcp + 2] = (x, 240.0 if up else 325.0)
        pts[mcp + 3] = (x, 210.0 if up else 330.0)
    return pts


@pytest.fixture
def hand():
    def build(kind, **kwargs):
        if kind == "thumbs_up":
            pts = make_hand(thumb_tip=(200.0, 250.0), **kwargs)
        elif kind == "thumbs_down":
            pts = make_hand(thumb_tip=(200.0, 480.0), **kwargs)
        elif kind == "flat":
            pts = make_hand(thumb_tip=(230.0, 320.0), extended=4)
        elif kind == "fist":
            pts = make_hand()
        else:
            raise ValueError(kind)
        return LandmarkFrame.from_points(pts)
    return build


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 9, 0, 0))


@pytest.fixture
def three_cards():
    return [
        Flashcard(id=1, front="Capital of France?", back="Paris", hint="Eiffel Tower", tags={"geography"}),
        Flashcard(id=2, front="5 + 7?", back="12", hint="Basic math", tags={"math"}),
        Flashcard(id=3, front="Extreme ironing", back="A sport", tags=set()),
    ]


@pytest.fixture
def memory_store(three_cards):
    return MemoryStore(three_cards)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine)
    Base.metadata.drop_all(engine)
    engine.dispose()
