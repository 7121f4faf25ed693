import os

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()

DATABASE_URL = os.getenv("HANDCARDS_DATABASE_URL", "sqlite:///handcards.db")
SQL_ECHO = os.getenv("HANDCARDS_SQL_ECHO", "0") == "1"

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, echo=SQL_ECHO, connect_args=connect_args)

Session = sessionmaker(bind=engine)

def get_session():
    return Session()
