import asyncio
import logging
import math

from tablelock.exceptions import TableLockError
from tablelock.models.base import LockResult
from tablelock.schemas.lock import (
    ActiveLockRead,
    ActiveLocksResponse,
    LockAcquireRequest,
    LockActionResponse,
    LockReleaseRequest,
    LockStatusResponse,
)
from tablelock.store.lock_store import LockStore, is_valid_duration

logger = logging.getLogger(__name__)

MISSING_LOCK_FIELDS = "Missing required fields: tableId, userId, and duration are required."
MISSING_UNLOCK_FIELDS = "Missing required fields: tableId and userId are required."
INVALID_IDENTIFIERS = "tableId and userId must be strings."
INVALID_DURATION = "Duration must be a positive number in seconds."

RESULT_ERRORS: dict[LockResult, tuple[int, str, str]] = {
    LockResult.conflict: (409, "LOCK_CONFLICT", "Table is currently locked by another user."),
    LockResult.not_found: (404, "NOT_FOUND", "No lock found for the specified table."),
    LockResult.forbidden: (
        403,
        "FORBIDDEN",
        "Unauthorized: You can only unlock tables that you have locked.",
    ),
}


def _validation_error(message: str) -> TableLockError:
    return TableLockError(400, "VALIDATION_ERROR", message)


def _is_missing(value) -> bool:
    """Absent, null, empty string, false, zero or NaN; other values count as present."""
    if value is None or value is False or value == "":
        return True
    if isinstance(value, float):
        return value == 0 or math.isnan(value)
    return isinstance(value, int) and value == 0


def validate_acquire(data: LockAcquireRequest) -> None:
    if _is_missing(data.table_id) or _is_missing(data.user_id) or _is_missing(data.duration):
        raise _validation_error(MISSING_LOCK_FIELDS)
    if not isinstance(data.table_id, str) or not isinstance(data.user_id, str):
        raise _validation_error(INVALID_IDENTIFIERS)
    if not is_valid_duration(data.duration):
        raise _validation_error(INVALID_DURATION)


def validate_release(data: LockReleaseRequest) -> None:
    if _is_missing(data.table_id) or _is_missing(data.user_id):
        raise _validation_error(MISSING_UNLOCK_FIELDS)
    if not isinstance(data.table_id, str) or not isinstance(data.user_id, str):
        raise _validation_error(INVALID_IDENTIFIERS)


def _raise_for_result(result: LockResult, invalid_message: str) -> None:
    if result == LockResult.ok:
        return
    if result == LockResult.invalid:
        raise _validation_error(invalid_message)
    raise TableLockError(*RESULT_ERRORS[result])


def acquire_lock(store: LockStore, data: LockAcquireRequest) -> LockActionResponse:
    validate_acquire(data)
    result = store.acquire(data.table_id, data.user_id, data.duration)
    _raise_for_result(result, INVALID_DURATION)
    logger.info("Table %s locked by %s for %ss", data.table_id, data.user_id, data.duration)
    return LockActionResponse(message="Table locked successfully.")


def release_lock(store: LockStore, data: LockReleaseRequest) -> LockActionResponse:
    validate_release(data)
    result = store.release(data.table_id, data.user_id)
    _raise_for_result(result, MISSING_UNLOCK_FIELDS)
    logger.info("Table %s unlocked by %s", data.table_id, data.user_id)
    return LockActionResponse(message="Table unlocked successfully.")


def get_status(store: LockStore, table_id: str) -> LockStatusResponse:
    if not table_id:
        raise _validation_error("Table ID is required.")
    return LockStatusResponse(is_locked=store.status(table_id))


def list_active_locks(store: LockStore) -> ActiveLocksResponse:
    active = store.list_active()
    return ActiveLocksResponse(
        active_locks={
            table_id: ActiveLockRead(
                user_id=lock.owner_id,
                expiry=lock.expires_at,
                time_remaining=lock.time_remaining,
            )
            for table_id, lock in active.items()
        },
        total_active_locks=len(active),
    )


async def _sweep_loop(store: LockStore, interval: float):
    while True:
        await asyncio.sleep(interval)
        try:
            swept = store.sweep_expired()
            if swept:
                logger.info("Cleaned up %d expired locks", swept)
        except Exception:
            logger.exception("Error during lock sweep")


def start_lock_sweep_task(store: LockStore, interval: float):
    return asyncio.create_task(_sweep_loop(store, interval))
