"""Engine and session factory bound to configured database URL."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from app.core.config import get_settings


def build_engine(database_url: str, *, echo: bool = False) -> Engine:
    """Engine for SQLite (local runs, tests) or PostgreSQL via psycopg."""

    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(
        database_url,
        echo=echo,
        connect_args=connect_args,
        pool_pre_ping=True,
        future=True,
    )


settings = get_settings()

engine = build_engine(settings.database_url, echo=settings.database_echo)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
