"""Database migration utilities."""

from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory

from glycotrack.logging_config import get_logger

logger = get_logger(__name__)


def get_alembic_config() -> Config:
    """Get Alembic configuration."""
    # alembic.ini sits at the project root, next to the glycotrack package
    app_root = Path(__file__).parent.parent.parent
    alembic_ini = app_root / "alembic.ini"

    if not alembic_ini.exists():
        raise FileNotFoundError(f"alembic.ini not found at {alembic_ini}")

    config = Config(str(alembic_ini))
    config.set_main_option("script_location", str(app_root / "migrations"))

    return config


def run_migrations() -> None:
    """
    Upgrade the database to the latest revision.

    Must be called outside a running event loop: the Alembic environment
    drives the async engine with ``asyncio.run``.
    """
    logger.info("Running database migrations...")

    try:
        command.upgrade(get_alembic_config(), "head")
    except Exception as e:
        logger.error("Database migration failed", error=str(e))
        raise

    logger.info("Database migrations completed successfully")


def get_current_revision() -> str | None:
    """Head revision of the migration scripts shipped with the package."""
    script = ScriptDirectory.from_config(get_alembic_config())
    return script.get_current_head()
