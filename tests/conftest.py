# tests/conftest.py
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from warehouse_manager.config.database import Base, get_db
from warehouse_manager.main import app
from warehouse_manager.shared.database import models  # noqa: F401
from warehouse_manager.shared.services.inventory_service import InventoryService


@pytest.fixture
def db_engine(tmp_path):
    # File-backed so worker threads get their own connections
    engine = create_engine(
        f"sqlite:///{tmp_path / 'warehouse_test.db'}",
        connect_args={"check_same_thread": False, "timeout": 30}
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def service(db):
    return InventoryService(db)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_warehouse(service):
    """Create a warehouse and stock it: ``make_warehouse("W1", 100, X=80)``"""
    counter = {"n": 0}

    def _make(name=None, max_capacity=100, location="Main St", **stock):
        counter["n"] += 1
        warehouse = service.create_warehouse(name or f"Warehouse {counter['n']}", location, max_capacity)
        for sku, quantity in stock.items():
            service.create_item(
                warehouse.id,
                sku,
                {"name": f"Item {sku}", "description": f"{sku} description", "category": "general"},
                quantity
            )
        return service.get_warehouse(warehouse.id)

    return _make
