from aiogram import Router

from .bot_lifecycle import bot_lifecycle_router
from .group_events import group_events_router
from .private_messages import private_messages_router


def create_handlers_router() -> Router:
    """Build the root router with every handler attached."""
    router = Router(name="handlers_root")
    router.include_router(bot_lifecycle_router)
    router.include_router(private_messages_router)
    router.include_router(group_events_router)
    return router
