from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from leadtracker.database.db import Base
from leadtracker.database.kv_store import SqlKeyValueStore
from leadtracker.schemas.leads import Lead, MobileNumber
from leadtracker.services.lead_store import LeadStore

# Wednesday
FIXED_NOW = datetime(2025, 3, 5, 10, 30)


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'leads_test.db'}")
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    yield TestingSessionLocal
    engine.dispose()


@pytest.fixture
def storage(session_factory):
    return SqlKeyValueStore(session_factory)


@pytest.fixture
def store(storage):
    return LeadStore(storage, now=lambda: FIXED_NOW)


@pytest.fixture
def make_lead():
    counter = {"value": 0}

    def _make_lead(**overrides) -> Lead:
        counter["value"] += 1
        payload = {
            "id": f"lead-{counter['value']}",
            "client_name": f"Client {counter['value']}",
            "company": "Acme Power",
            "consumer_number": "1100223344",
            "kva": "100",
            "mobile_numbers": [MobileNumber(id="1", number="98765-43210", is_main=True)],
        }
        payload.update(overrides)
        return Lead(**payload)

    return _make_lead
