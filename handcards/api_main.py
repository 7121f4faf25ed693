import logging

from dotenv import load_dotenv

load_dotenv()

from handcards.api.app import app  # noqa: E402
from handcards.db import engine, Base  # noqa: E402
from handcards.db import models  # noqa: E402,F401

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

Base.metadata.create_all(engine)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
