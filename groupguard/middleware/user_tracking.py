"""Middleware that remembers every user the bot sees."""

from typing import Callable, Dict, Any, Awaitable

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject, User as AiogramUser
from loguru import logger

from groupguard.database.manager import DatabaseManager
from groupguard.database.models.user import User


class UserTrackingMiddleware(BaseMiddleware):
    """
    Stores the author of each update so @username mentions can be resolved later.
    """

    def __init__(self, db_manager: DatabaseManager):
        super().__init__()
        self.db_manager = db_manager

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        user: AiogramUser = data.get("event_from_user")
        if user and not user.is_bot:
            try:
                await self.db_manager.users.upsert(User.from_aiogram(user))
            except Exception as e:
                logger.warning(f"⚠️ Could not store user {user.id}: {e}")
        return await handler(event, data)
