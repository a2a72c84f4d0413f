"""PortHub API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map PortHubError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Services wired once in the lifespan and stored on app.state
    - Open feedback windows are closed before the database is disposed

Design Decisions:
    - Lifespan over @app.on_event: one place for startup and ordered cleanup
    - SQLite URLs get their schema from ORM metadata at startup (local runs);
      every other database is migrated with alembic
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from porthub.api.error_handlers import register_error_handlers
from porthub.api.routes import accounts, actions, health, jobs
from porthub.config import Settings, get_settings
from porthub.db.session import create_schema
from porthub.infrastructure.database import DatabaseSessionManager, init_db
from porthub.infrastructure.notification_channel import WebhookNotificationChannel
from porthub.infrastructure.observability import setup_logging
from porthub.infrastructure.sql_store import SqlPersistenceStore
from porthub.infrastructure.verification_probe import HttpVerificationProbe
from porthub.services.account_service import AccountService
from porthub.services.command_dispatch import CommandDispatch
from porthub.services.feedback_ledger import FeedbackLedger
from porthub.services.lifecycle_engine import LifecycleEngine
from porthub.services.notification_tracker import NotificationTracker
from porthub.services.reply_collector import ReplyCollector

logger = logging.getLogger(__name__)


def build_services(app: FastAPI, settings: Settings, db: DatabaseSessionManager) -> None:
    """Wire store, adapters, and services onto app.state."""
    store = SqlPersistenceStore(db)
    notifier = NotificationTracker(
        WebhookNotificationChannel(
            settings.notification_relay_url,
            timeout_seconds=settings.notification_timeout_seconds,
        ),
        ops_identity=settings.ops_channel_identity,
    )
    engine = LifecycleEngine(
        store,
        notifier,
        FeedbackLedger(store),
        ReplyCollector(settings.feedback_timeout_seconds),
        page_size=settings.jobs_page_size,
        job_number_attempts=settings.job_number_attempts,
    )
    app.state.engine = engine
    app.state.dispatch = CommandDispatch(engine)
    app.state.accounts = AccountService(
        store,
        HttpVerificationProbe(
            settings.profile_url_template,
            timeout_seconds=settings.verification_timeout_seconds,
            user_agent=settings.verification_user_agent,
        ),
        master_admin_identity=settings.master_admin_identity,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if settings.database_url.startswith("sqlite"):
        await create_schema(db.engine)
    build_services(app, settings, db)
    logger.info("PortHub API started")
    yield
    logger.info("PortHub API shutting down")
    await app.state.engine.shutdown()
    await db.dispose()


app = FastAPI(title="PortHub API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(jobs.router)
app.include_router(accounts.router)
app.include_router(actions.router)

register_error_handlers(app)
