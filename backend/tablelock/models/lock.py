import math
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class LockRecord:
    resource_id: str
    owner_id: str
    expires_at: datetime
    created_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def time_remaining(self, now: datetime) -> int:
        """Whole seconds left before expiry, never negative."""
        return max(0, math.floor((self.expires_at - now).total_seconds()))


@dataclass(frozen=True)
class ActiveLock:
    owner_id: str
    expires_at: datetime
    time_remaining: int
