from typing import Any

from pydantic import BaseModel


class CacheEntry(BaseModel):
    value: dict[str, Any]
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at
