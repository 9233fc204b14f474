"""Middleware that passes services to handlers."""

from typing import Callable, Dict, Any, Awaitable

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject

from config.settings import Settings
from groupguard.database.manager import DatabaseManager
from groupguard.services.event_router import EventRouter


class ServiceMiddleware(BaseMiddleware):
    """
    Puts the database manager, settings and event router into handler data.
    """

    def __init__(self, db_manager: DatabaseManager, event_router: EventRouter, settings: Settings):
        super().__init__()
        self.db_manager = db_manager
        self.event_router = event_router
        self.settings = settings

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        data["db_manager"] = self.db_manager
        data["event_router"] = self.event_router
        data["settings"] = self.settings
        return await handler(event, data)
