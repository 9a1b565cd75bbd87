from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from nexa.core.config import Settings
from nexa.repositories.base import Repository
from nexa.repositories.memory import InMemoryRepository
from nexa.repositories.sql import SqlRepository


logger = logging.getLogger(__name__)


def build_repository(settings: Settings) -> Repository:
    """Pick the persistence backend once, at process start.

    A configured ``DATABASE_URL`` that cannot be reached falls back to the
    in-memory store so the API still boots in development.
    """
    if not settings.database_url:
        logger.info("DATABASE_URL not set; using in-memory repository")
        return InMemoryRepository()

    try:
        repository = SqlRepository.from_url(settings.database_url)
        repository.ping()
    except (SQLAlchemyError, ImportError) as exc:
        logger.warning("Database connection failed (%s); falling back to in-memory repository", exc)
        return InMemoryRepository()

    logger.info("Connected to relational database (%s)", repository.engine.url.get_backend_name())
    return repository
