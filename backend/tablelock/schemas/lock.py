from typing import Any

from tablelock.schemas.base import CamelModel, CamelRequest, Timestamp


class LockAcquireRequest(CamelRequest):
    table_id: Any = None
    user_id: Any = None
    duration: Any = None


class LockReleaseRequest(CamelRequest):
    table_id: Any = None
    user_id: Any = None


class LockActionResponse(CamelModel):
    success: bool = True
    message: str


class LockStatusResponse(CamelModel):
    is_locked: bool


class ActiveLockRead(CamelModel):
    user_id: str
    expiry: Timestamp
    time_remaining: int


class ActiveLocksResponse(CamelModel):
    success: bool = True
    active_locks: dict[str, ActiveLockRead]
    total_active_locks: int
