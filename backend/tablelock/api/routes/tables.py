from fastapi import APIRouter, Depends

from tablelock.schemas.lock import (
    ActiveLocksResponse,
    LockAcquireRequest,
    LockActionResponse,
    LockReleaseRequest,
    LockStatusResponse,
)
from tablelock.services import lock_service
from tablelock.store.lock_store import LockStore, get_lock_store

router = APIRouter(prefix="/api/tables", tags=["tables"])


@router.post("/lock", response_model=LockActionResponse)
async def acquire_lock(
    data: LockAcquireRequest | None = None,
    store: LockStore = Depends(get_lock_store),
):
    return lock_service.acquire_lock(store, data or LockAcquireRequest())


@router.post("/unlock", response_model=LockActionResponse)
async def release_lock(
    data: LockReleaseRequest | None = None,
    store: LockStore = Depends(get_lock_store),
):
    return lock_service.release_lock(store, data or LockReleaseRequest())


@router.get("/locks", response_model=ActiveLocksResponse)
async def list_locks(store: LockStore = Depends(get_lock_store)):
    return lock_service.list_active_locks(store)


@router.get("/{table_id}/status", response_model=LockStatusResponse)
async def get_status(table_id: str, store: LockStore = Depends(get_lock_store)):
    return lock_service.get_status(store, table_id)
