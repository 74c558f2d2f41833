"""Composition root: builds the services a front end works with."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy.engine import Engine

from leadtracker.core.config import Config, get_config
from leadtracker.database.db import build_engine, build_session_factory
from leadtracker.database.kv_store import KeyValueStore, SqlKeyValueStore
from leadtracker.schemas.leads import Lead
from leadtracker.services import lead_views
from leadtracker.services.deletion_service import DeletionService
from leadtracker.services.lead_form_service import LeadFormService
from leadtracker.services.lead_store import LeadStore
from leadtracker.utils.dates import local_now


@dataclass(frozen=True)
class LeadTrackerApp:
    config: Config
    storage: KeyValueStore
    store: LeadStore
    forms: LeadFormService
    deletion: DeletionService
    now: Callable[[], datetime]
    engine: Engine | None = None

    def today(self) -> date:
        return self.now().date()

    def upcoming(self) -> list[Lead]:
        """Open leads due within the configured upcoming window."""
        return lead_views.upcoming(self.store.leads(), self.today(), days=self.config.UPCOMING_WINDOW_DAYS)

    def dashboard(self) -> lead_views.DashboardCounts:
        return lead_views.dashboard_counts(
            self.store.leads(), self.today(), upcoming_days=self.config.UPCOMING_WINDOW_DAYS
        )


def get_settings() -> Config:
    """Return validated application configuration."""
    return get_config()


def build_storage(config: Config) -> tuple[Engine, SqlKeyValueStore]:
    engine = build_engine(config.DATABASE_URL, echo=config.DEBUG)
    return engine, SqlKeyValueStore(build_session_factory(engine))


def build_application(
    config: Config | None = None,
    storage: KeyValueStore | None = None,
    now: Callable[[], datetime] = local_now,
) -> LeadTrackerApp:
    """Wire storage, store and services together; one instance per session."""
    cfg = config or get_settings()
    engine = None
    if storage is None:
        engine, storage = build_storage(cfg)

    store = LeadStore(storage, now=now)
    return LeadTrackerApp(
        config=cfg,
        storage=storage,
        store=store,
        forms=LeadFormService(store, now=now),
        deletion=DeletionService(store, storage, default_password=cfg.DEFAULT_DELETE_PASSWORD),
        now=now,
        engine=engine,
    )
