from sqlmodel import create_engine, Session
import os

DEFAULT_DATABASE_URL = "sqlite:///./box_quotes.db"


def get_engine():
    url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
    echo = os.getenv("SQL_ECHO", "").lower() in ("1", "true", "yes")
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=echo, connect_args=connect_args)


def get_session() -> Session:
    engine = get_engine()
    return Session(engine)
