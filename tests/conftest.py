"""
Pytest configuration and fixtures.
"""

import io
import sys
from pathlib import Path

import pytest
import pytest_asyncio
from PIL import Image
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root
sys.path.insert(0, str(Path(__file__).parent.parent))

from urenstaat.infra.db import Base
from urenstaat.infra.repository import TemplateRepository, TimeEntryRepository
from urenstaat.services.template_service import TemplateService
from urenstaat.services.ledger_service import TimeLedgerService
from urenstaat.services.month_matrix_service import MonthMatrixService


@pytest_asyncio.fixture
async def db_engine():
    """Create an in-memory SQLite database for testing"""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Create a new session for a test"""
    async_session = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
def template_repo(db_session):
    return TemplateRepository(session=db_session)


@pytest.fixture
def entry_repo(db_session):
    return TimeEntryRepository(session=db_session)


@pytest.fixture
def template_service(template_repo):
    return TemplateService(template_repo=template_repo)


@pytest.fixture
def ledger(entry_repo, template_service):
    return TimeLedgerService(entry_repo=entry_repo, template_service=template_service)


@pytest.fixture
def matrix_service(entry_repo, template_repo):
    return MonthMatrixService(entry_repo=entry_repo, template_repo=template_repo)


def make_png(width: int, height: int) -> bytes:
    """Encode a solid-colour PNG"""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), (242, 142, 0)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    return make_png(600, 200)
