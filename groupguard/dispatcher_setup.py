"""
Registration of every middleware and handler on the dispatcher.
"""
from typing import TYPE_CHECKING

from aiogram import Dispatcher
from loguru import logger

from groupguard.handlers import create_handlers_router
from groupguard.middleware.services import ServiceMiddleware
from groupguard.middleware.user_tracking import UserTrackingMiddleware


if TYPE_CHECKING:
    from config.settings import Settings
    from groupguard.database.manager import DatabaseManager
    from groupguard.services.event_router import EventRouter


def setup_dispatcher(
    dp: Dispatcher,
    db_manager: "DatabaseManager",
    event_router: "EventRouter",
    settings: "Settings",
) -> None:
    """
    Configure the dispatcher with middleware and handlers.

    Args:
        dp: Dispatcher instance.
        db_manager: Database manager.
        event_router: Router that runs the moderation logic.
        settings: Bot configuration.
    """
    dp.update.middleware(ServiceMiddleware(
        db_manager=db_manager,
        event_router=event_router,
        settings=settings,
    ))
    dp.update.middleware(UserTrackingMiddleware(db_manager))

    dp.include_router(create_handlers_router())

    logger.info("All handlers registered.")
