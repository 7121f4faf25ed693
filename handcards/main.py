import os
from dotenv import load_dotenv
import asyncio
import logging
from aiogram import Bot, Dispatcher
from aiogram.filters import Command, CommandStart

load_dotenv()

from handcards.bot.handlers import start, add, recent  # noqa: E402
from handcards.db import engine, Base  # noqa: E402
from handcards.db import models  # noqa: E402,F401


async def main():
    Base.metadata.create_all(engine)
    bot = Bot(token=os.getenv('TOKEN'))
    dp = Dispatcher()
    dp.message.register(start, CommandStart())
    dp.message.register(add, Command("add"))
    dp.message.register(recent, Command("recent"))
    await dp.start_polling(bot)

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("Exit")
