import logging
from pathlib import Path

from alembic.config import Config
from sqlalchemy import Connection, create_engine
from sqlalchemy.engine import Engine, make_url

from alembic import command
from societybills.settings import settings

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent

_engine: Engine | None = None
_connection: Connection | None = None


def _engine_options(db_url: str) -> dict:
    if make_url(db_url).get_backend_name() == "sqlite":
        # Bill generation and notification delivery use worker threads.
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_recycle": 1800}


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = create_engine(settings.db_url, **_engine_options(settings.db_url))
        logger.info("Database engine created for backend=%s", _engine.dialect.name)
    return _engine


def get_connection() -> Connection:
    """Process-wide connection for scripts. Web requests get their own via ``web.deps``."""
    global _connection
    if _connection is None:
        _connection = get_engine().connect()
        logger.debug("Script DB connection opened")
    return _connection


def _get_alembic_config() -> Config:
    ini_path = PROJECT_ROOT / "alembic.ini"
    if not ini_path.exists():
        ini_path = Path.cwd() / "alembic.ini"
    return Config(str(ini_path))


def initialize_db() -> None:
    """Upgrade the schema to the latest Alembic revision."""
    cfg = _get_alembic_config()
    logger.info("Applying migrations from %s", cfg.config_file_name)
    command.upgrade(cfg, "head")
    logger.info("Schema is at head")
