"""
Programmatic Alembic entry points.

Alembic's command API is synchronous, so each wrapper opens a connection on
the async engine and hands its sync facade to ``command.upgrade`` /
``command.downgrade`` through ``Config.attributes["connection"]``;
``alembic/env.py`` picks that connection up instead of creating its own
engine.
"""
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SCRIPT_LOCATION = PROJECT_ROOT / "alembic"


def alembic_config() -> Config:
    """Return an Alembic config pointing at the project's migration scripts.

    ``alembic.ini`` is not read, so its ``[loggers]`` section never touches
    the process-wide logging setup.
    """
    cfg = Config()
    cfg.set_main_option("script_location", str(SCRIPT_LOCATION))
    return cfg


def _run_upgrade(connection, cfg: Config, revision: str) -> None:
    cfg.attributes["connection"] = connection
    command.upgrade(cfg, revision)


def _run_downgrade(connection, cfg: Config, revision: str) -> None:
    cfg.attributes["connection"] = connection
    command.downgrade(cfg, revision)


async def upgrade_database(engine: AsyncEngine, revision: str = "head") -> None:
    """Apply pending migrations up to *revision*."""
    logger.info("Applying migrations (target=%s)", revision)
    async with engine.begin() as conn:
        await conn.run_sync(_run_upgrade, alembic_config(), revision)


async def downgrade_database(engine: AsyncEngine, revision: str = "base") -> None:
    """Revert migrations down to *revision* (``base`` drops every table)."""
    logger.info("Reverting migrations (target=%s)", revision)
    async with engine.begin() as conn:
        await conn.run_sync(_run_downgrade, alembic_config(), revision)
