"""Service test fixtures — in-memory fakes, async SQLite store, FastAPI test client.

Invariants:
    - Every test gets fresh state: a new InMemoryStore, and a new in-memory SQLite database
    - Open feedback windows are closed at teardown (engine.shutdown)
    - The test client never runs the app lifespan: services are wired onto app.state here

Design Decisions:
    - Engine tests run on InMemoryStore: its asyncio.sleep(0) yields make races
      reproducible without threads or timing
    - SQLite in-memory with StaticPool for SqlPersistenceStore and route tests:
      one shared connection, used sequentially
    - db_manager patched so the readiness probe sees the test database
"""

import random

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

import porthub.infrastructure.database as db_module
from porthub.core.domain_types import Role
from porthub.db.base import Base
from porthub.infrastructure.database import DatabaseSessionManager
from porthub.infrastructure.sql_store import SqlPersistenceStore
from porthub.main import app
from porthub.services.account_service import AccountService
from porthub.services.command_dispatch import CommandDispatch
from porthub.services.feedback_ledger import FeedbackLedger
from porthub.services.lifecycle_engine import LifecycleEngine
from porthub.services.notification_tracker import NotificationTracker
from porthub.services.reply_collector import ReplyCollector
import porthub.models  # noqa: F401

from tests.services.fakes import (
    MASTER_ADMIN, OPS_IDENTITY, InMemoryStore, RecordingNotificationChannel,
    StubVerificationProbe,
)


# ─── Fakes ───────────────────────────────────────────────────────

@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def channel():
    return RecordingNotificationChannel()


@pytest.fixture
def probe():
    return StubVerificationProbe(answer=True)


@pytest.fixture
def notifier(channel):
    return NotificationTracker(channel, ops_identity=OPS_IDENTITY)


@pytest.fixture
def replies():
    return ReplyCollector(timeout_seconds=5.0)


def _build_engine(store, notifier, replies) -> LifecycleEngine:
    return LifecycleEngine(
        store, notifier, FeedbackLedger(store), replies,
        page_size=10, rng=random.Random(1234),
    )


@pytest.fixture
async def engine(store, notifier, replies):
    lifecycle = _build_engine(store, notifier, replies)
    yield lifecycle
    await lifecycle.shutdown()


@pytest.fixture
def account_service(store, probe):
    return AccountService(store, probe, master_admin_identity=MASTER_ADMIN)


async def _account(store, identity: str, name: str, role: Role):
    return await store.upsert_account(identity, display_name=name, role=role)


@pytest.fixture
async def customer(store):
    return await _account(store, "u-cass", "Cass", Role.CUSTOMER)


@pytest.fixture
async def porter(store):
    return await _account(store, "u-pike", "Pike", Role.PORTER)


@pytest.fixture
async def other_porter(store):
    return await _account(store, "u-quill", "Quill", Role.PORTER)


# ─── SQL store ───────────────────────────────────────────────────

@pytest.fixture
async def sql_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def db_manager(sql_engine):
    return DatabaseSessionManager.from_engine(sql_engine)


@pytest.fixture
def sql_store(db_manager):
    return SqlPersistenceStore(db_manager)


# ─── HTTP ────────────────────────────────────────────────────────

@pytest.fixture
async def client(db_manager, sql_store, channel, probe):
    """FastAPI test client over the SQL store with recording adapters."""
    replies = ReplyCollector(timeout_seconds=5.0)
    lifecycle = _build_engine(
        sql_store, NotificationTracker(channel, ops_identity=OPS_IDENTITY), replies,
    )
    app.state.engine = lifecycle
    app.state.dispatch = CommandDispatch(lifecycle)
    app.state.accounts = AccountService(sql_store, probe, master_admin_identity=MASTER_ADMIN)

    original_manager = db_module.db_manager
    db_module.db_manager = db_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    await lifecycle.shutdown()
    db_module.db_manager = original_manager
