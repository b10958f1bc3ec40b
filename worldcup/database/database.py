import asyncio
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from contextlib import asynccontextmanager, nullcontext

from worldcup.config import Config
from worldcup.database.models import Base
from worldcup.utils.logger import setup_logger

class Database:
    def __init__(self, database_url: Optional[str] = None):
        self.logger = setup_logger(__name__)
        self.database_url = Config.get_database_url(database_url)
        self.engine = None
        self.async_session = None
        # One shared connection in memory mode: sessions must not overlap
        self._session_lock = asyncio.Lock() if self.is_memory else None

    @property
    def is_memory(self) -> bool:
        return ':memory:' in self.database_url or self.database_url.endswith('://')

    async def initialize(self):
        """Initialize the database connection and create tables"""
        self.logger.info("Initializing database...")

        engine_kwargs = {'echo': Config.DEBUG, 'future': True}
        if self.is_memory:
            # In-memory sqlite lives on a single connection
            engine_kwargs['poolclass'] = StaticPool
            engine_kwargs['connect_args'] = {'check_same_thread': False}

        self.engine = create_async_engine(self.database_url, **engine_kwargs)

        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

        # Create all tables
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        self.logger.info("Database initialized successfully")

    @property
    def session_factory(self):
        if self.async_session is None:
            raise RuntimeError("Database not initialized")
        return self.async_session

    @asynccontextmanager
    async def get_session(self):
        """
        Get a database session.

        In memory mode every session runs on the same connection, so a session
        is only handed out once the previous one has closed. Callers must not
        open a second session while holding one.
        """
        async with self._session_lock or nullcontext():
            async with self.session_factory() as session:
                try:
                    yield session
                except Exception:
                    await session.rollback()
                    raise
                finally:
                    await session.close()

    async def close(self):
        """Close the database connection"""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.async_session = None
            self.logger.info("Database connection closed")
