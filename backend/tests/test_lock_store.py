import threading
from datetime import timedelta

import pytest

from tablelock.models.base import LockResult
from tablelock.store.lock_store import LockStore, is_valid_duration


# --- Acquire ---


def test_acquire_creates_record(store, clock):
    assert store.acquire("t1", "u1", 300) == LockResult.ok
    record = store.get("t1")
    assert record.owner_id == "u1"
    assert record.created_at == clock.now
    assert record.expires_at == clock.now + timedelta(seconds=300)


def test_acquire_fractional_duration(store, clock):
    assert store.acquire("t1", "u1", 1.5) == LockResult.ok
    assert store.get("t1").expires_at == clock.now + timedelta(seconds=1.5)


def test_acquire_conflict_keeps_first_owner(store):
    assert store.acquire("t1", "u1", 300) == LockResult.ok
    assert store.acquire("t1", "u2", 60) == LockResult.conflict
    assert store.acquire("t1", "u1", 60) == LockResult.conflict
    assert store.get("t1").owner_id == "u1"


def test_acquire_independent_resources(store):
    assert store.acquire("t1", "u1", 300) == LockResult.ok
    assert store.acquire("t2", "u2", 300) == LockResult.ok
    assert store.status("t1") and store.status("t2")


def test_acquire_over_expired_record(store, clock):
    assert store.acquire("t1", "u1", 1) == LockResult.ok
    clock.advance(2)
    assert store.acquire("t1", "u2", 300) == LockResult.ok
    assert store.get("t1").owner_id == "u2"


def test_lock_is_live_at_expiry_instant(store, clock):
    store.acquire("t1", "u1", 10)
    clock.advance(10)
    assert store.status("t1") is True
    clock.advance(0.001)
    assert store.status("t1") is False


@pytest.mark.parametrize(
    "resource_id, owner_id, duration",
    [
        ("", "u1", 10),
        ("t1", "", 10),
        (None, "u1", 10),
        ("t1", 42, 10),
        ("t1", "u1", 0),
        ("t1", "u1", -5),
        ("t1", "u1", "10"),
        ("t1", "u1", True),
        ("t1", "u1", float("nan")),
        ("t1", "u1", float("inf")),
        ("t1", "u1", 1e300),
        ("t1", "u1", 10**400),
    ],
)
def test_acquire_rejects_malformed_input(store, resource_id, owner_id, duration):
    assert store.acquire(resource_id, owner_id, duration) == LockResult.invalid
    assert len(store) == 0


def test_is_valid_duration():
    assert is_valid_duration(1)
    assert is_valid_duration(0.25)
    assert not is_valid_duration(0)
    assert not is_valid_duration(False)
    assert not is_valid_duration(None)


# --- Release ---


def test_release_by_owner(store):
    store.acquire("t1", "u1", 300)
    assert store.release("t1", "u1") == LockResult.ok
    assert store.status("t1") is False
    assert len(store) == 0


def test_release_wrong_owner(store):
    store.acquire("t1", "u1", 300)
    assert store.release("t1", "u2") == LockResult.forbidden
    assert store.get("t1").owner_id == "u1"


def test_release_no_record(store):
    assert store.release("t1", "u1") == LockResult.not_found


def test_release_expired_record_is_not_found(store, clock):
    store.acquire("t1", "u1", 5)
    clock.advance(6)
    assert store.release("t1", "u1") == LockResult.not_found


def test_release_rejects_malformed_input(store):
    assert store.release("", "u1") == LockResult.invalid
    assert store.release("t1", None) == LockResult.invalid


# --- Status / listing ---


def test_status_unknown_resource(store):
    assert store.status("never-locked") is False


def test_status_after_expiry(store, clock):
    store.acquire("t1", "u1", 30)
    clock.advance(31)
    assert store.status("t1") is False
    assert store.acquire("t1", "u3", 30) == LockResult.ok


def test_list_active_snapshot(store, clock):
    store.acquire("t1", "u1", 300)
    store.acquire("t2", "u2", 10)
    clock.advance(4.5)

    active = store.list_active()
    assert set(active) == {"t1", "t2"}
    assert active["t1"].owner_id == "u1"
    assert active["t1"].time_remaining == 295
    assert active["t2"].time_remaining == 5
    assert active["t2"].expires_at == store.get("t2").expires_at


def test_list_active_excludes_expired(store, clock):
    store.acquire("t1", "u1", 300)
    store.acquire("t2", "u2", 10)
    clock.advance(11)
    assert set(store.list_active()) == {"t1"}


def test_list_active_is_a_copy(store):
    store.acquire("t1", "u1", 300)
    active = store.list_active()
    active.clear()
    assert store.status("t1") is True


def test_time_remaining_floors_to_whole_seconds(store, clock):
    store.acquire("t1", "u1", 10)
    clock.advance(9.999)
    assert store.list_active()["t1"].time_remaining == 0


# --- Sweep ---


def test_sweep_removes_only_expired(store, clock):
    store.acquire("t1", "u1", 5)
    store.acquire("t2", "u2", 50)
    clock.advance(10)
    assert len(store) == 2
    assert store.sweep_expired() == 1
    assert len(store) == 1
    assert store.status("t2") is True


def test_sweep_is_idempotent(store, clock):
    store.acquire("t1", "u1", 5)
    store.acquire("t2", "u2", 50)
    clock.advance(10)
    store.sweep_expired()
    first = store.list_active()
    assert store.sweep_expired() == 0
    assert store.list_active() == first


def test_operations_sweep_whole_store(store, clock):
    store.acquire("t1", "u1", 5)
    store.acquire("t2", "u2", 5)
    clock.advance(10)
    store.status("unrelated")
    assert len(store) == 0


# --- Scenarios ---


def test_reservation_scenario(store):
    assert store.acquire("t1", "u1", 300) == LockResult.ok
    assert store.acquire("t1", "u2", 60) == LockResult.conflict
    assert store.release("t1", "u2") == LockResult.forbidden
    assert store.release("t1", "u1") == LockResult.ok
    assert store.status("t1") is False


def test_concurrent_acquire_single_winner():
    store = LockStore()
    results = []
    barrier = threading.Barrier(16)

    def contend(owner):
        barrier.wait()
        results.append(store.acquire("t1", owner, 60))

    threads = [threading.Thread(target=contend, args=(f"u{i}",)) for i in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(LockResult.ok) == 1
    assert results.count(LockResult.conflict) == 15
    assert len(store.list_active()) == 1
