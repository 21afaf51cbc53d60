"""Tests for SqlCustomerStore against SQLite."""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from app.customer_service.models import Base
from app.customer_service.modules.customers.service import (
    CustomerPatch,
    DuplicateCustomerError,
    SqlCustomerStore,
    StoreError,
)


@pytest.fixture()
def session(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path/'store.db'}", future=True)
    Base.metadata.create_all(bind=engine)
    sm = sessionmaker(bind=engine, class_=Session, autoflush=False, expire_on_commit=False, future=True)
    s = sm()
    yield s
    s.close()
    engine.dispose()


@pytest.fixture()
def store(session):
    return SqlCustomerStore(lambda: session)


def test_insert_assigns_id(store):
    c = store.insert(name="John", email="john@example.com", address="1 Main")
    assert c.id >= 1
    assert store.select_by_id(c.id).email == "john@example.com"


def test_insert_duplicate_email(store):
    store.insert(name="John", email="john@example.com")
    with pytest.raises(DuplicateCustomerError):
        store.insert(name="Other", email="john@example.com")
    # Session is still usable after the rollback.
    assert store.insert(name="Jane", email="jane@example.com").id


def test_select_missing_returns_none(store):
    assert store.select_by_id(123) is None


def test_update_by_id(store):
    c = store.insert(name="John", email="john@example.com", address="Old")
    updated = store.update_by_id(c.id, CustomerPatch(address="New"))
    assert updated.name == "John"
    assert updated.address == "New"


def test_update_missing_returns_none(store):
    assert store.update_by_id(99, CustomerPatch(name="X")) is None


def test_delete_by_id(store):
    c = store.insert(name="John", email="john@example.com")
    assert store.delete_by_id(c.id) is True
    assert store.select_by_id(c.id) is None
    assert store.delete_by_id(c.id) is False


def test_database_errors_become_store_errors(tmp_path):
    # No tables created.
    engine = create_engine(f"sqlite:///{tmp_path/'empty.db'}", future=True)
    s = Session(bind=engine, future=True)
    store = SqlCustomerStore(lambda: s)
    with pytest.raises(StoreError) as exc:
        store.select_by_id(1)
    assert isinstance(exc.value.__cause__, OperationalError)
    assert not isinstance(exc.value, DuplicateCustomerError)
    s.close()
    engine.dispose()
