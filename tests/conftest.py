from unittest.mock import AsyncMock, MagicMock

import pytest

from config.settings import Settings
from groupguard.database.manager import DatabaseManager
from groupguard.events import BotEvent
from groupguard.services.event_router import EventRouter
from groupguard.services.pending_verifications import PendingVerificationRegistry

GROUP_ID = -1001234567890
ADMIN_ID = 111
USER_ID = 222
OTHER_ID = 333


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, BOT_TOKEN="123456:TEST-token", **overrides)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
async def db_manager():
    manager = DatabaseManager(":memory:")
    await manager.init_database()
    yield manager
    await manager.close()


@pytest.fixture
def gateway():
    gw = MagicMock()
    gw.reply = AsyncMock(return_value=True)
    gw.push = AsyncMock(return_value=True)
    gw.kick = AsyncMock(return_value=True)
    gw.get_group_member_name = AsyncMock(return_value=None)
    gw.get_user_name = AsyncMock(return_value=None)
    return gw


@pytest.fixture
async def registry():
    reg = PendingVerificationRegistry()
    yield reg
    reg.clear()


@pytest.fixture
def router(db_manager, gateway, registry, settings):
    return EventRouter(db_manager.group_settings, gateway, registry, settings)


@pytest.fixture
async def admin_router(router, db_manager):
    """Router for a group whose first admin is ADMIN_ID."""
    await db_manager.group_settings.add_first_admin(GROUP_ID, ADMIN_ID)
    return router


def group_text(text, user_id=ADMIN_ID, mentions=None, group_id=GROUP_ID):
    return BotEvent.group_message(group_id, user_id, text, message_id=1, mentions=mentions)


def last_reply(gateway) -> str:
    return gateway.reply.call_args.args[1]
