"""
Timeline entries.
"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ChatEntry(BaseModel):
    id: str
    kind: Literal["system", "message"]
    content: str
    timestamp: datetime = Field(default_factory=_now)
    username: Optional[str] = None  # message only
    own: Optional[bool] = None      # message only
    temporary: bool = False

    @property
    def is_system(self) -> bool:
        return self.kind == "system"
