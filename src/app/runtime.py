"""Bootstrap logic for running the learning core inside a host process."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.app.settings import AppSettings
from src.db import get_session_factory, run_migrations_if_needed
from src.learning import LearningCore


LOGGER = logging.getLogger(__name__)


def _configure_logging(log_level: str) -> None:
    """Set up project-wide logging configuration."""
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        level=log_level,
    )


def bootstrap(
    settings: AppSettings,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> LearningCore:
    """Prepare the database and build the service container for the process."""
    _configure_logging(settings.log_level)

    try:
        run_migrations_if_needed()
    except Exception:
        LOGGER.exception("Database migrations failed. Aborting startup.")
        raise

    if session_factory is None:
        session_factory = get_session_factory()

    core = LearningCore.build(session_factory, settings)
    LOGGER.info(
        "%s ready in %s mode (quality policy %s, %s streak days).",
        settings.app_name,
        settings.app_env,
        settings.quality_policy,
        settings.streak_day_mode,
    )
    return core
