# src/commung/scripts/migrate.py
"""Apply Alembic migrations up to ``head`` using the configured database URL."""
from __future__ import annotations

import logging
import os

from alembic import command
from alembic.config import Config

from commung.core.logging_config import configure_logging
from commung.core.settings import settings

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..", "..", "..", "migrations")
)


def build_config() -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", MIGRATIONS_DIR)
    cfg.set_main_option("sqlalchemy.url", settings.database_url_sync)
    return cfg


def run_upgrade_head() -> None:
    logger.info("Upgrading database schema from %s", MIGRATIONS_DIR)
    command.upgrade(build_config(), "head")


if __name__ == "__main__":
    configure_logging(settings.log_level)
    run_upgrade_head()
