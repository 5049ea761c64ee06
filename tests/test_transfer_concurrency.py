from concurrent.futures import ThreadPoolExecutor

import pytest

from warehouse_manager.config.settings import settings
from warehouse_manager.core.exceptions import CapacityExceededError, ContentionError, InventoryError
from warehouse_manager.core.locking import WarehouseLocks
from warehouse_manager.modules.transfers.engine import TransferEngine
from warehouse_manager.modules.warehouses.repository import WarehouseRepository
from warehouse_manager.shared.services.inventory_service import InventoryService


def _run_transfers(session_factory, moves, workers=8):
    """Run each (source, destination, sku, quantity) on its own session and thread"""

    def run(move):
        session = session_factory()
        try:
            TransferEngine(session).transfer(*move)
            return "ok"
        except InventoryError as e:
            return type(e).__name__
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(run, moves))


def _snapshot(session_factory, *warehouse_ids):
    session = session_factory()
    try:
        service = InventoryService(session)
        return {
            warehouse_id: (
                service.get_warehouse(warehouse_id).current_capacity,
                service.get_warehouse(warehouse_id).max_capacity,
                {item.sku: item.quantity for item in service.list_items(warehouse_id)}
            )
            for warehouse_id in warehouse_ids
        }
    finally:
        session.close()


def test_no_lost_updates_same_direction(session_factory, make_warehouse):
    w1 = make_warehouse("W1", 1000, X=100)
    w2 = make_warehouse("W2", 1000, X=0)

    results = _run_transfers(session_factory, [(w1.id, w2.id, "X", 5)] * 20)

    assert results == ["ok"] * 20
    state = _snapshot(session_factory, w1.id, w2.id)
    assert state[w1.id] == (0, 1000, {"X": 0})
    assert state[w2.id] == (100, 1000, {"X": 100})


def test_opposite_directions_do_not_deadlock(session_factory, make_warehouse):
    w1 = make_warehouse("W1", 500, X=50)
    w2 = make_warehouse("W2", 500, X=50)

    moves = []
    for _ in range(15):
        moves.append((w1.id, w2.id, "X", 2))
        moves.append((w2.id, w1.id, "X", 1))

    results = _run_transfers(session_factory, moves, workers=10)

    assert results == ["ok"] * 30
    state = _snapshot(session_factory, w1.id, w2.id)
    assert state[w1.id] == (35, 500, {"X": 35})
    assert state[w2.id] == (65, 500, {"X": 65})


def test_concurrent_transfers_never_overfill_destination(session_factory, make_warehouse):
    w1 = make_warehouse("W1", 100, X=100)
    w2 = make_warehouse("W2", 10)

    # Each move fits on its own; only two of them fit together
    results = _run_transfers(session_factory, [(w1.id, w2.id, "X", 4)] * 6, workers=6)

    assert results.count("ok") == 2
    assert results.count(CapacityExceededError.__name__) == 4
    state = _snapshot(session_factory, w1.id, w2.id)
    assert state[w1.id] == (92, 100, {"X": 92})
    assert state[w2.id] == (8, 10, {"X": 8})


def test_concurrent_transfers_never_overdraw_source(session_factory, make_warehouse):
    w1 = make_warehouse("W1", 100, X=9)
    w2 = make_warehouse("W2", 100)
    w3 = make_warehouse("W3", 100)

    moves = [(w1.id, w2.id, "X", 3), (w1.id, w3.id, "X", 3)] * 3
    results = _run_transfers(session_factory, moves, workers=6)

    assert results.count("ok") == 3
    state = _snapshot(session_factory, w1.id, w2.id, w3.id)
    assert state[w1.id][2] == {"X": 0}
    assert state[w2.id][0] + state[w3.id][0] == 9
    for current, max_capacity, items in state.values():
        assert 0 <= current <= max_capacity
        assert current == sum(items.values())


def test_busy_warehouse_fails_with_contention_and_no_effect(db, session_factory, make_warehouse, monkeypatch):
    w1 = make_warehouse("W1", 100, X=10)
    w2 = make_warehouse("W2", 100)
    before = _snapshot(session_factory, w1.id, w2.id)

    locks = WarehouseLocks()
    monkeypatch.setattr(settings, "lock_timeout_seconds", 0.05)

    with locks.hold(w2.id):
        with pytest.raises(ContentionError):
            TransferEngine(db, locks=locks).transfer(w1.id, w2.id, "X", 5)

    assert _snapshot(session_factory, w1.id, w2.id) == before

    # Retrying once the section is free succeeds
    TransferEngine(db, locks=locks).transfer(w1.id, w2.id, "X", 5)
    assert _snapshot(session_factory, w1.id, w2.id)[w2.id] == (5, 100, {"X": 5})


def test_ledger_is_one_snapshot_when_a_transfer_commits_mid_read(service, session_factory, make_warehouse, monkeypatch):
    w1 = make_warehouse("W1", 100, X=10)
    w2 = make_warehouse("W2", 100)
    committed = []

    def commit_transfer_first(original):
        def wrapper(self, *args, **kwargs):
            if not committed:
                committed.append(True)
                _run_transfers(session_factory, [(w1.id, w2.id, "X", 4)], workers=1)
            return original(self, *args, **kwargs)
        return wrapper

    # Any second read the ledger makes would land after the transfer
    for name in ("get", "derived_occupancy"):
        original = getattr(WarehouseRepository, name)
        monkeypatch.setattr(WarehouseRepository, name, commit_transfer_first(original))

    ledger = service.capacity_ledger(w1.id)

    assert ledger["consistent"] is True
    assert ledger["current_capacity"] == ledger["derived_capacity"]
    assert ledger["current_capacity"] in (10, 6)


def test_ledger_stays_consistent_under_concurrent_transfers(service, session_factory, make_warehouse):
    w1 = make_warehouse("W1", 100, X=50)
    w2 = make_warehouse("W2", 100, X=50)
    moves = [(w1.id, w2.id, "X", 3), (w2.id, w1.id, "X", 2)] * 15

    with ThreadPoolExecutor(max_workers=1) as pool:
        pending = pool.submit(_run_transfers, session_factory, moves, 4)
        readings = []
        while not pending.done():
            readings.append(service.capacity_ledger(w1.id))
        assert pending.result() == ["ok"] * 30

    readings.append(service.capacity_ledger(w1.id))
    assert all(reading["consistent"] for reading in readings)
    assert readings[-1]["current_capacity"] == 35
