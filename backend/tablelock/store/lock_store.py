import logging
import math
import threading
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Request

from tablelock.models.base import LockResult
from tablelock.models.lock import ActiveLock, LockRecord

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_valid_identifier(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def is_valid_duration(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value) and value > 0
    except OverflowError:
        return False


class LockStore:
    """In-memory registry of exclusive, expiring locks keyed by resource id.

    Expired records are purged lazily: every public method sweeps first and
    then runs its own logic, both under a single mutex, so a check-then-act
    such as ``acquire`` cannot interleave with another operation.

    Expected outcomes (conflict, missing lock, wrong owner, malformed input)
    are returned as ``LockResult`` values; nothing here raises for them.
    """

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._records: dict[str, LockRecord] = {}
        self._mutex = threading.Lock()

    def __len__(self) -> int:
        with self._mutex:
            return len(self._records)

    def _sweep(self, now: datetime) -> int:
        expired = [rid for rid, record in self._records.items() if record.is_expired(now)]
        for rid in expired:
            del self._records[rid]
        if expired:
            logger.debug("Swept %d expired locks", len(expired))
        return len(expired)

    def sweep_expired(self) -> int:
        """Purge every expired record and return how many were removed."""
        with self._mutex:
            return self._sweep(self._clock())

    def acquire(self, resource_id: str, owner_id: str, duration_seconds: float) -> LockResult:
        if not (
            is_valid_identifier(resource_id)
            and is_valid_identifier(owner_id)
            and is_valid_duration(duration_seconds)
        ):
            return LockResult.invalid

        with self._mutex:
            now = self._clock()
            self._sweep(now)
            if resource_id in self._records:
                return LockResult.conflict
            try:
                expires_at = now + timedelta(seconds=duration_seconds)
            except OverflowError:
                return LockResult.invalid
            self._records[resource_id] = LockRecord(
                resource_id=resource_id,
                owner_id=owner_id,
                expires_at=expires_at,
                created_at=now,
            )
            return LockResult.ok

    def release(self, resource_id: str, owner_id: str) -> LockResult:
        if not (is_valid_identifier(resource_id) and is_valid_identifier(owner_id)):
            return LockResult.invalid

        with self._mutex:
            self._sweep(self._clock())
            record = self._records.get(resource_id)
            if record is None:
                return LockResult.not_found
            if record.owner_id != owner_id:
                return LockResult.forbidden
            del self._records[resource_id]
            return LockResult.ok

    def status(self, resource_id: str) -> bool:
        with self._mutex:
            self._sweep(self._clock())
            return resource_id in self._records

    def get(self, resource_id: str) -> LockRecord | None:
        with self._mutex:
            self._sweep(self._clock())
            return self._records.get(resource_id)

    def list_active(self) -> dict[str, ActiveLock]:
        with self._mutex:
            now = self._clock()
            self._sweep(now)
            return {
                rid: ActiveLock(
                    owner_id=record.owner_id,
                    expires_at=record.expires_at,
                    time_remaining=record.time_remaining(now),
                )
                for rid, record in self._records.items()
            }


def get_lock_store(request: Request) -> LockStore:
    return request.app.state.lock_store
