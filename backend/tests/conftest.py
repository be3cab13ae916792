from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from vacation_scheduler.db import get_session
from vacation_scheduler.main import app
from vacation_scheduler.models import SQLModel
from vacation_scheduler.services.clock import FixedClock, set_clock
from vacation_scheduler.services.employee import EmployeeInfo, InMemoryEmployeeService, set_employee_service

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

# Hired 2024-01-10, so the first vacation year is 2025-01-10 .. 2026-01-10.
HIRE_DATE = date(2024, 1, 10)
TODAY = date(2025, 1, 15)


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Fresh in-memory SQLite database per test."""
    _engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def employee() -> EmployeeInfo:
    return EmployeeInfo(
        id=uuid.uuid4(),
        first_name="Lucia",
        last_name="Mendez",
        email="lucia.mendez@example.com",
        position="Analyst",
        hire_date=HIRE_DATE,
    )


@pytest.fixture(autouse=True)
def _seed_employee_service(employee: EmployeeInfo) -> Iterator[None]:
    """Seed the in-memory employee registry for every test."""
    svc = InMemoryEmployeeService()
    svc.seed(employee)
    set_employee_service(svc)
    yield
    set_employee_service(InMemoryEmployeeService())


@pytest.fixture(autouse=True)
def clock() -> Iterator[FixedClock]:
    """Every test runs on a known "today"; tests may move it."""
    fixed = FixedClock(TODAY)
    set_clock(fixed)
    yield fixed
    set_clock(None)

