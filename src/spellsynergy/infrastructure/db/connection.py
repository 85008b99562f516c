import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker


DEFAULT_DATABASE_URL = "sqlite:///spellsynergy.db"


def resolve_database_url(database_url: str | None = None) -> str:
    candidate = str(database_url or os.getenv("SPELLSYNERGY_DATABASE_URL", "") or "").strip()
    return candidate or DEFAULT_DATABASE_URL


def create_session_factory(database_url: str | None = None, *, echo: bool = False) -> sessionmaker:
    engine = create_engine(resolve_database_url(database_url), echo=echo, future=True, pool_pre_ping=True)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)
