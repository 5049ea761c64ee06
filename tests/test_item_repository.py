from datetime import date

import pytest

from warehouse_manager.core.exceptions import (
    ConflictError, InsufficientQuantityError, NotFoundError, ValidationError
)
from warehouse_manager.modules.items.repository import ItemRepository
from warehouse_manager.modules.warehouses.repository import WarehouseRepository


@pytest.fixture
def repo(db):
    return ItemRepository(db)


@pytest.fixture
def warehouse(db):
    warehouse = WarehouseRepository(db).create("North", "Oslo", 100)
    db.commit()
    return warehouse


def _fields(**overrides):
    fields = {"name": "Bolt", "description": "M8 bolt", "category": "hardware", "storage_location": "A-1"}
    fields.update(overrides)
    return fields


def test_create_and_lookup_by_sku(repo, db, warehouse):
    item = repo.create(warehouse.id, "BOLT-8", _fields(expiration_date=date(2030, 1, 1)), 12)
    db.commit()

    found = repo.find_by_sku_in_warehouse(warehouse.id, "BOLT-8")
    assert found.id == item.id
    assert found.quantity == 12
    assert found.storage_location == "A-1"
    assert found.expiration_date == date(2030, 1, 1)


def test_create_rejects_duplicate_sku_in_same_warehouse(repo, db, warehouse):
    repo.create(warehouse.id, "BOLT-8", _fields(), 1)
    db.commit()

    with pytest.raises(ConflictError):
        repo.create(warehouse.id, "BOLT-8", _fields(name="Other"), 1)


def test_same_sku_allowed_in_different_warehouses(repo, db, warehouse):
    other = WarehouseRepository(db).create("South", "Rome", 100)
    repo.create(warehouse.id, "BOLT-8", _fields(), 1)
    repo.create(other.id, "BOLT-8", _fields(), 1)
    db.commit()

    assert repo.find_by_sku_in_warehouse(other.id, "BOLT-8") is not None


@pytest.mark.parametrize(
    "sku, fields, quantity",
    [
        ("BOLT-8", _fields(), -1),
        ("", _fields(), 1),
        ("BOLT-8", _fields(name=""), 1),
    ],
)
def test_create_rejects_invalid_input(repo, warehouse, sku, fields, quantity):
    with pytest.raises(ValidationError):
        repo.create(warehouse.id, sku, fields, quantity)


def test_update_quantity_applies_delta_and_keeps_empty_rows(repo, db, warehouse):
    item = repo.create(warehouse.id, "BOLT-8", _fields(), 10)
    db.commit()

    assert repo.update_quantity(item.id, -4) == 6
    assert repo.update_quantity(item.id, -6) == 0
    db.commit()

    assert repo.get(item.id).quantity == 0
    assert repo.update_quantity(item.id, 3) == 3


def test_update_quantity_never_goes_negative(repo, db, warehouse):
    item = repo.create(warehouse.id, "BOLT-8", _fields(), 2)
    db.commit()

    with pytest.raises(InsufficientQuantityError) as exc_info:
        repo.update_quantity(item.id, -3)

    assert exc_info.value.details["available"] == 2
    assert exc_info.value.details["requested"] == 3
    assert repo.get(item.id).quantity == 2


def test_update_changes_fields_but_not_quantity(repo, db, warehouse):
    item = repo.create(warehouse.id, "BOLT-8", _fields(), 5)
    db.commit()

    repo.update(item.id, {"name": "Bolt M8", "category": "fasteners", "sku": "BOLT-M8"})
    db.commit()

    updated = repo.get(item.id)
    assert updated.name == "Bolt M8"
    assert updated.category == "fasteners"
    assert updated.sku == "BOLT-M8"
    assert updated.quantity == 5


def test_update_rejects_sku_taken_in_same_warehouse(repo, db, warehouse):
    repo.create(warehouse.id, "BOLT-8", _fields(), 1)
    nut = repo.create(warehouse.id, "NUT-8", _fields(name="Nut"), 1)
    db.commit()

    with pytest.raises(ConflictError):
        repo.update(nut.id, {"sku": "BOLT-8"})


def test_list_by_warehouse_with_search(repo, db, warehouse):
    repo.create(warehouse.id, "BOLT-8", _fields(), 1)
    repo.create(warehouse.id, "NUT-8", _fields(name="Hex nut", category="Fasteners"), 1)
    repo.create(warehouse.id, "GLUE-1", _fields(name="Glue", category="adhesives"), 1)
    db.commit()

    assert [item.sku for item in repo.list_by_warehouse(warehouse.id)] == ["BOLT-8", "NUT-8", "GLUE-1"]
    assert [item.sku for item in repo.list_by_warehouse(warehouse.id, "fasten")] == ["NUT-8"]
    assert [item.sku for item in repo.list_by_warehouse(warehouse.id, "glue")] == ["GLUE-1"]
    assert [item.sku for item in repo.list_by_warehouse(warehouse.id, "  ")] == ["BOLT-8", "NUT-8", "GLUE-1"]


def test_get_in_warehouse_checks_ownership(repo, db, warehouse):
    other = WarehouseRepository(db).create("South", "Rome", 100)
    item = repo.create(warehouse.id, "BOLT-8", _fields(), 1)
    db.commit()

    assert repo.get_in_warehouse(warehouse.id, item.id).id == item.id
    with pytest.raises(NotFoundError):
        repo.get_in_warehouse(other.id, item.id)


def test_delete(repo, db, warehouse):
    item = repo.create(warehouse.id, "BOLT-8", _fields(), 1)
    db.commit()

    repo.delete(item.id)
    db.commit()

    with pytest.raises(NotFoundError):
        repo.get(item.id)
