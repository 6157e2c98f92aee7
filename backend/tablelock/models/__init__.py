from tablelock.models.base import LockResult
from tablelock.models.lock import ActiveLock, LockRecord

__all__ = ["ActiveLock", "LockRecord", "LockResult"]
