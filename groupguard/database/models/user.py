from datetime import datetime
from typing import Optional

from aiogram.types import User as AiogramUser
from pydantic import BaseModel


class User(BaseModel):
    """
    Pydantic model of a user seen by the bot, used to resolve @username mentions.
    """

    telegram_id: int
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_aiogram(cls, user: AiogramUser) -> "User":
        """
        Build a User from an aiogram user object.
        """
        return cls(
            telegram_id=user.id,
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
        )
