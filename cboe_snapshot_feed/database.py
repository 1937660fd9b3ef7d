import logging
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from cboe_snapshot_feed.config import Settings
from cboe_snapshot_feed.errors import ConfigurationError, DatabaseError

logger = logging.getLogger(__name__)


def _connect_args(settings: Settings, backend: str) -> dict:
    """Driver-level timeouts so a hung database cannot block the run forever."""
    if backend == "postgresql":
        return {
            "connect_timeout": settings.db_connect_timeout,
            "options": f"-c statement_timeout={settings.db_statement_timeout * 1000}",
        }
    if backend == "sqlite":
        return {"timeout": settings.db_connect_timeout}
    return {}


def create_db_engine(settings: Settings) -> Engine:
    """
    Creates the SQLAlchemy engine (and with it the single connection pool)
    used for the whole run.

    Raises:
        ConfigurationError: If the database URL cannot be parsed.
        DatabaseError: If the engine cannot be created.
    """
    try:
        url = make_url(settings.database_url)
    except ArgumentError as e:
        raise ConfigurationError(f"Invalid database URL: {e}") from e

    try:
        engine = create_engine(
            url,
            echo=False,
            pool_pre_ping=True,
            connect_args=_connect_args(settings, url.get_backend_name()),
        )
    except (SQLAlchemyError, ImportError) as e:
        raise DatabaseError(f"Failed to create database engine: {e}") from e

    logger.info(f"Using {url.get_backend_name()} database at {url.render_as_string(hide_password=True)}")
    return engine


@lru_cache(maxsize=None)
def session_factory(engine: Engine) -> sessionmaker:
    """The configured "Session" class for an engine, created once per engine."""
    return sessionmaker(autoflush=False, bind=engine)


def get_db(engine: Engine):
    """
    Provides a database session bound to the given engine.
    Use it with next() and let the generator close the session, or iterate once.
    e.g., db = next(get_db(engine))
    """
    db = session_factory(engine)()
    try:
        yield db
    finally:
        db.close()
