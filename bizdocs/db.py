# bizdocs/db.py
import os

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

# Local dev convenience: loads from .env if present.
# In containers, env vars come from the deployment (no .env file).
load_dotenv()

_engine: Engine | None = None

SessionLocal = sessionmaker(autoflush=False)


class Base(DeclarativeBase):
    pass


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        url = os.getenv("DATABASE_URL")
        if not url:
            raise RuntimeError(
                "DATABASE_URL is not set. "
                "Local: put it in .env. "
                "Deployed: set DATABASE_URL in the service environment."
            )
        _engine = create_engine(url, pool_pre_ping=True)
        SessionLocal.configure(bind=_engine)
    return _engine


def new_session() -> Session:
    get_engine()
    return SessionLocal()


def get_db():
    db = new_session()
    try:
        yield db
    finally:
        db.close()
