"""
SQLAlchemy database models and configuration.

Architecture Decision: Why SQLAlchemy?
- Provides ORM for cleaner code and prevents SQL injection
- Unique constraints enforce one row per key at the database level
- Supports async operations through aiosqlite
"""

from pathlib import Path
from typing import Optional
import os

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import String, Integer, Float, UniqueConstraint, CheckConstraint
from sqlalchemy.exc import SQLAlchemyError

from urenstaat.domain.errors import StorageError


# Base class for all models
class Base(DeclarativeBase):
    pass


class TemplateModel(Base):
    """Default hours of a project for one weekday"""
    __tablename__ = "templates"
    __table_args__ = (
        UniqueConstraint("project", "weekday", name="uq_template_project_weekday"),
        CheckConstraint("weekday BETWEEN 1 AND 7", name="ck_template_weekday"),
        CheckConstraint("hours >= 0", name="ck_template_hours"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    weekday: Mapped[int] = mapped_column(Integer, nullable=False)
    hours: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)


class TimeEntryModel(Base):
    """Hours of a project on one day, keyed by ISO week"""
    __tablename__ = "time_entries"
    __table_args__ = (
        UniqueConstraint("project", "iso_year", "iso_week", "weekday", name="uq_entry_key"),
        CheckConstraint("iso_week BETWEEN 1 AND 53", name="ck_entry_week"),
        CheckConstraint("weekday BETWEEN 1 AND 7", name="ck_entry_weekday"),
        CheckConstraint("hours >= 0", name="ck_entry_hours"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    iso_year: Mapped[int] = mapped_column(Integer, nullable=False)
    iso_week: Mapped[int] = mapped_column(Integer, nullable=False)
    weekday: Mapped[int] = mapped_column(Integer, nullable=False)
    hours: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)


def default_db_url() -> str:
    """SQLite file in the user's AppData on Windows, ~/.local/share elsewhere"""
    if os.name == 'nt':  # Windows
        data_dir = Path(os.getenv('APPDATA', Path.home())) / 'Urenstaat'
    else:  # Linux/Mac
        data_dir = Path.home() / '.local' / 'share' / 'urenstaat'

    data_dir.mkdir(parents=True, exist_ok=True)
    return f"sqlite+aiosqlite:///{data_dir / 'urenstaat.db'}"


class DatabaseEngine:
    """
    Manages database connection and session lifecycle.

    Singleton pattern ensures only one engine exists per process.
    """
    _instance: Optional['DatabaseEngine'] = None

    def __init__(self, db_url: str):
        self.engine = create_async_engine(db_url, echo=False)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

    @classmethod
    def get_instance(cls, db_url: Optional[str] = None) -> 'DatabaseEngine':
        """Get or create the database engine instance"""
        if cls._instance is None:
            cls._instance = cls(db_url or default_db_url())
        return cls._instance

    @classmethod
    async def reset(cls) -> None:
        """Dispose the current engine so the next call creates a fresh one"""
        if cls._instance is not None:
            await cls._instance.engine.dispose()
            cls._instance = None

    async def create_tables(self):
        """
        Create all tables in the database.

        Raises:
            StorageError: the database cannot be opened or written
        """
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise StorageError("database initialisation", e) from e

    def get_session(self) -> AsyncSession:
        """Get a new database session"""
        return self.session_factory()


# Convenience functions
def get_engine(db_url: Optional[str] = None) -> DatabaseEngine:
    """Get the database engine instance"""
    return DatabaseEngine.get_instance(db_url)


async def init_db(db_url: Optional[str] = None):
    """Initialize the database (create tables)"""
    engine = get_engine(db_url)
    await engine.create_tables()
