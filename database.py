"""
Database access for the skill context store.

One lazily-built engine per process. SQLite (the default) gets a file under
./data and cross-thread connections; server databases get a pre-pinged pool.
"""

import logging
from pathlib import Path
from typing import Generator

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import Session, sessionmaker

from config import get_settings

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Owns the engine and session factory for the configured DATABASE_URL."""

    def __init__(self):
        self.settings = get_settings()
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def url(self) -> URL:
        return make_url(self.settings.database_url)

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = self._build_engine(self.url)
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)
        return self._session_factory

    def _build_engine(self, url: URL) -> Engine:
        logger.info(f"Connecting skill store: {url.render_as_string(hide_password=True)}")
        echo = self.settings.log_level.upper() == "DEBUG"

        if url.get_backend_name() != "sqlite":
            return create_engine(
                url,
                pool_size=self.settings.db_pool_size,
                max_overflow=self.settings.db_max_overflow,
                pool_timeout=self.settings.db_pool_timeout,
                pool_pre_ping=True,
                echo=echo,
            )

        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        # FastAPI runs sync endpoints on a threadpool
        return create_engine(url, connect_args={"check_same_thread": False}, echo=echo)

    def create_tables(self) -> None:
        """Create the skill_contexts table if it does not exist yet."""
        from shared.models.entities import Base

        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        return self.session_factory()

    def health_check(self) -> bool:
        """True when a trivial query succeeds."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None


_db_manager: DatabaseManager | None = None


def get_db_manager() -> DatabaseManager:
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request, closed afterwards."""
    session = get_db_manager().get_session()
    try:
        yield session
    finally:
        session.close()


def reset_db_manager() -> None:
    """Dispose the global manager (tests, config reloads)."""
    global _db_manager
    if _db_manager is not None:
        _db_manager.close()
    _db_manager = None
