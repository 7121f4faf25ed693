from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Protocol, Sequence

from handcards.ml.classifier import GestureSymbol
from handcards.ml.hold import HoldConfirmation
from handcards.ml.landmarks import LandmarkFrame

from .models import Flashcard, InvalidTransition, Rating, SessionState, Step, StorageError
from .policy import DEFAULT_INTERVAL_UNIT, apply_rating, select_next_due

logger = logging.getLogger("handcards.review")

NOTHING_TO_REVIEW = "No more cards to practice today!"
SAVE_FAILED = "Progress could not be saved. It will be retried after the next rating."
LOAD_FAILED = "Cards could not be loaded. Showing the cards already in memory."

RATING_FOR_GESTURE = {
    GestureSymbol.AFFIRM: Rating.AFFIRM,
    GestureSymbol.REJECT: Rating.REJECT,
    GestureSymbol.DEFER: Rating.DEFER,
}


class FlashcardStore(Protocol):
    def load(self) -> List[Flashcard]:
        ...

    def save(self, cards: Sequence[Flashcard]) -> bool:
        ...


class ReviewSession:
    """
    Owns the card pool and the idle -> question -> answer loop.

    Gesture confirmations and manual buttons both end up in rate(); the hold
    machine is only active while the answer is shown.
    """

    def __init__(
        self,
        store: FlashcardStore,
        hold: Optional[HoldConfirmation] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
        interval_unit: timedelta = DEFAULT_INTERVAL_UNIT,
    ):
        self.store = store
        self.hold = hold or HoldConfirmation()
        self.clock = clock
        self.interval_unit = interval_unit

        self._cards: List[Flashcard] = []
        self._unsaved_ids = set()
        self._state = SessionState()

    # ---- read access ----

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def cards(self) -> List[Flashcard]:
        return list(self._cards)

    @property
    def active_card(self) -> Optional[Flashcard]:
        return self._find(self._state.active_card_id)

    @property
    def progress(self) -> float:
        return self.hold.progress

    @property
    def current_symbol(self) -> GestureSymbol:
        return self.hold.current_symbol

    def now(self) -> datetime:
        return self.clock() + self.interval_unit * self._state.day_counter

    def _find(self, card_id) -> Optional[Flashcard]:
        if card_id is None:
            return None
        for card in self._cards:
            if card.id == card_id:
                return card
        return None

    def _require(self, step: Step, action: str):
        if self._state.step != step:
            raise InvalidTransition(f"cannot {action} while {self._state.step.value}")

    # ---- lifecycle ----

    def start(self) -> Optional[Flashcard]:
        self._require(Step.IDLE, "start")
        self._flush()
        self._reload()
        return self._advance()

    def end(self):
        self.hold.deactivate()
        self._flush()
        self._state = SessionState(day_counter=self._state.day_counter, notice=self._state.notice)

    def advance_day(self) -> Optional[Flashcard]:
        self._state.day_counter += 1
        logger.info("day %d", self._state.day_counter)
        if self._state.step == Step.IDLE:
            return self.start()
        return self.active_card

    def add_card(self, card: Flashcard):
        if card.id is None:
            raise ValueError("card must be stored before it joins a review")
        if self._find(card.id) is None:
            self._cards.append(card)

    # ---- steps ----

    def show_hint(self):
        self._require(Step.QUESTION, "show the hint")
        self._state.hint_visible = True

    def show_answer(self):
        self._require(Step.QUESTION, "show the answer")
        self._state.step = Step.ANSWER
        self._state.hint_visible = False
        self.hold.activate(on_confirm=self._on_gesture_confirmed)

    def rate(self, rating) -> Optional[Flashcard]:
        rating = Rating.parse(rating)
        self._require(Step.ANSWER, "rate")

        self.hold.deactivate()

        card = self.active_card
        apply_rating(card, rating, self.now())
        self._state.reviewed += 1
        self._unsaved_ids.add(card.id)
        logger.info("card %s rated %s -> bucket %d", card.id, rating.value, card.bucket)

        self._flush()
        return self._advance()

    def on_frame(self, frame: Optional[LandmarkFrame], ts_ms: Optional[float] = None) -> Optional[GestureSymbol]:
        return self.hold.on_frame(frame, ts_ms)

    def next_card_due(self, now: Optional[datetime] = None) -> Optional[Flashcard]:
        return select_next_due(self._cards, now or self.now(), self.interval_unit)

    # ---- internals ----

    def _on_gesture_confirmed(self, symbol: GestureSymbol):
        rating = RATING_FOR_GESTURE.get(symbol)
        if rating is not None and self._state.step == Step.ANSWER:
            self.rate(rating)

    def _advance(self) -> Optional[Flashcard]:
        card = self.next_card_due()
        self._state.hint_visible = False

        if card is None:
            self._state.step = Step.IDLE
            self._state.active_card_id = None
            if self._state.notice is None:
                self._state.notice = NOTHING_TO_REVIEW
            return None

        self._state.step = Step.QUESTION
        self._state.active_card_id = card.id
        if self._state.notice == NOTHING_TO_REVIEW:
            self._state.notice = None
        return card

    def _reload(self):
        try:
            loaded = self.store.load()
        except StorageError as e:
            logger.warning("card load failed: %s", e)
            self._state.notice = LOAD_FAILED
            return

        if self._unsaved_ids:
            # ratings that never reached storage win over the stored copy
            pending = {c.id: c for c in self._cards if c.id in self._unsaved_ids}
            loaded = [pending.get(c.id, c) for c in loaded]

        self._cards = list(loaded)
        if self._state.notice == LOAD_FAILED:
            self._state.notice = None

    def _flush(self) -> bool:
        if not self._unsaved_ids:
            return True

        try:
            ok = self.store.save(list(self._cards))
        except StorageError as e:
            logger.warning("card save failed: %s", e)
            ok = False
        except Exception:
            # a broken store must not leave the session stuck in ANSWER
            logger.exception("card save raised")
            ok = False

        if not ok:
            logger.warning("keeping %d unsaved card(s) in memory", len(self._unsaved_ids))
            self._state.notice = SAVE_FAILED
            return False

        self._unsaved_ids.clear()
        if self._state.notice == SAVE_FAILED:
            self._state.notice = None
        return True
