import gc
import threading

import pytest

from warehouse_manager.core.exceptions import ContentionError
from warehouse_manager.core.locking import WarehouseLocks


def test_sections_are_taken_in_ascending_order():
    locks = WarehouseLocks()

    with locks.hold(9, 3, 5) as order:
        assert order == [3, 5, 9]


def test_duplicate_ids_are_taken_once():
    locks = WarehouseLocks()

    with locks.hold(4, 4) as order:
        assert order == [4]


def test_timeout_raises_contention_and_releases_partial_hold():
    locks = WarehouseLocks()
    held = threading.Event()
    release = threading.Event()

    def holder():
        with locks.hold(2):
            held.set()
            release.wait(5)

    thread = threading.Thread(target=holder)
    thread.start()
    held.wait(5)

    try:
        with pytest.raises(ContentionError) as exc_info:
            with locks.hold(1, 2, timeout=0.05):
                pass
        assert exc_info.value.details["warehouse_id"] == 2

        # Warehouse 1 was released when the acquisition gave up
        with locks.hold(1, timeout=0.05):
            pass
    finally:
        release.set()
        thread.join(5)

    with locks.hold(1, 2, timeout=0.5) as order:
        assert order == [1, 2]


def test_sections_released_when_body_raises():
    locks = WarehouseLocks()

    with pytest.raises(RuntimeError):
        with locks.hold(1, 2):
            raise RuntimeError("boom")

    with locks.hold(2, 1, timeout=0.05):
        pass


def test_registry_forgets_sections_nobody_uses():
    locks = WarehouseLocks()

    with locks.hold(1, 2, 999):
        assert locks.in_use() == 3

    gc.collect()
    assert locks.in_use() == 0


def test_registry_keeps_a_section_while_it_is_held():
    locks = WarehouseLocks()
    held = threading.Event()
    release = threading.Event()

    def holder():
        with locks.hold(5):
            held.set()
            release.wait(5)

    thread = threading.Thread(target=holder)
    thread.start()
    held.wait(5)

    try:
        gc.collect()
        assert locks.in_use() == 1
        # The same lock is found again, so the section still excludes
        with pytest.raises(ContentionError):
            with locks.hold(5, timeout=0.05):
                pass
    finally:
        release.set()
        thread.join(5)
