# pylint: disable=redefined-outer-name
import fakeredis
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, clear_mappers

from case.domain.requisition import RequisitionDraft


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    """Route event publishing to an in-memory Redis."""
    from shared.adapters import redis_adapter

    server = fakeredis.FakeRedis()
    monkeypatch.setattr(redis_adapter, "r", server)
    return server


@pytest.fixture
def sqlite_session_factory():
    """Create SQLite in-memory database for fast testing."""
    from shared.adapters import orm

    engine = create_engine("sqlite:///:memory:")
    orm.start_mappers()
    orm.metadata.create_all(engine)

    yield sessionmaker(bind=engine)

    clear_mappers()
    engine.dispose()


@pytest.fixture
def draft():
    """A requisition that passes validation: PGT-A, patient and partner."""
    return RequisitionDraft(
        patient_first_name="Jane",
        patient_last_name="Doe",
        patient_dob="1988-04-12",
        patient_email="jane@example.com",
        patient_phone="555-0101",
        partner_first_name="John",
        partner_last_name="Doe",
        partner_dob="1986-09-30",
        partner_email="john@example.com",
        ordering_provider_id="provider-1",
        tests_ordered=["pgt_a"],
        indication="advanced_maternal_age",
    )
