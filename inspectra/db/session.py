"""Database engine built from application settings."""

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from inspectra.core.config import Settings, get_settings


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine, relaxing SQLite's same-thread check for the API workers."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=echo, connect_args=connect_args, future=True)


def engine_from_settings(settings: Optional[Settings] = None) -> Engine:
    settings = settings or get_settings()
    return create_db_engine(settings.database_url, echo=settings.database_echo)
