import os
import logging

from aiogram.filters import CommandObject
from aiogram.types import Message, InlineKeyboardButton, InlineKeyboardMarkup, WebAppInfo
from sqlalchemy.exc import SQLAlchemyError

import handcards.db.requests as rq


WEBAPP_URL = os.getenv("WEBAPP_URL", "http://localhost:5173")

ADD_USAGE = "Usage: /add front | back | hint | tag1, tag2"

logger = logging.getLogger("handcards.bot")


def parse_card_command(text: str) -> dict:
    """
    'front | back | hint | tag1, tag2' -> card fields.
    Hint and tags are optional; front and back are required.
    """
    parts = [p.strip() for p in (text or "").split("|")]
    parts += [""] * (4 - len(parts))
    front, back, hint, tags = parts[0], parts[1], parts[2], "|".join(parts[3:])

    if not front or not back:
        raise ValueError("Front and Back fields are required.")

    return {
        "front": front,
        "back": back,
        "hint": hint or None,
        "tags": rq.normalize_tags(tags),
    }


def format_recent(cards) -> str:
    if not cards:
        return "No flashcards created yet."
    lines = []
    for card in cards:
        tags = ", ".join(card.tags or []) or "none"
        lines.append(f"{card.front} → {card.back}  [bucket {card.bucket}; tags: {tags}]")
    return "\n".join(lines)


async def start(message: Message):
    kb = InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="Open review", web_app=WebAppInfo(url=WEBAPP_URL))]
    ])
    await message.answer(
        "Hi! Send /add to capture a flashcard, /recent to see the latest ones, "
        "and open the review to practise with thumbs up, thumbs down or a flat hand.",
        reply_markup=kb,
    )


async def add(message: Message, command: CommandObject):
    try:
        fields = parse_card_command(command.args or "")
    except ValueError as e:
        await message.answer(f"{e}\n{ADD_USAGE}")
        return

    try:
        card = rq.add_card(source="bot", **fields)
    except SQLAlchemyError:
        logger.exception("saving flashcard from the bot failed")
        await message.answer("Error saving flashcard!")
        return

    await message.answer(f"Flashcard saved! ({card.front} → {card.back})")


async def recent(message: Message):
    await message.answer(format_recent(rq.get_recent_cards(5)))
