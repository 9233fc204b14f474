"""
Model for the per-group moderation settings.
"""
from datetime import datetime
from typing import List, Optional, Set

from pydantic import BaseModel, Field


class GroupSettings(BaseModel):
    """
    Pydantic model assembled from the group_settings row and its set tables.
    """
    group_id: int
    admins: Set[int] = Field(default_factory=set)
    password: Optional[str] = None
    password_timeout_minutes: Optional[int] = None
    blacklist_words: List[str] = Field(default_factory=list)
    blacklist_users: Set[int] = Field(default_factory=set)
    created_at: Optional[datetime] = None

    @property
    def password_enabled(self) -> bool:
        return self.password is not None

    def timeout_minutes(self, default: int) -> int:
        """Configured verification timeout, falling back to the system default."""
        return self.password_timeout_minutes or default
