#!/usr/bin/env python3
"""
Create the User and Resume tables if they do not exist yet.

Usage:
    python -m scripts.create_tables

Reads DATABASE_URL from the environment (or .env). Safe to run repeatedly.
A connection failure is not caught, so the process exits non-zero.
"""
import logging

from sqlalchemy import create_engine

from mirai.core.config import settings
from mirai.db.session import Base
import mirai.models  # noqa: F401  registers the tables on Base.metadata

logger = logging.getLogger(__name__)


def create_tables(database_url: str) -> None:
    engine = create_engine(database_url)
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
    finally:
        engine.dispose()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    create_tables(settings.DATABASE_URL)
    logger.info("All tables created successfully!")


if __name__ == "__main__":
    main()
