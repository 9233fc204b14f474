"""
Tests for event classification and per-event failure isolation.
"""
from unittest.mock import AsyncMock

import pytest

from groupguard.events import BotEvent
from tests.conftest import GROUP_ID, USER_ID, group_text


@pytest.mark.asyncio
async def test_unfollow_drops_pending_verification(router, registry, gateway):
    registry.register(USER_ID, GROUP_ID, 1, AsyncMock(), delay_seconds=10)

    await router.dispatch(BotEvent.unfollow(USER_ID))

    assert USER_ID not in registry
    gateway.reply.assert_not_awaited()


@pytest.mark.asyncio
async def test_direct_message_without_pending_is_ignored(router, gateway):
    result = await router.dispatch(BotEvent.direct_message(USER_ID, "hello"))

    assert result is None
    gateway.reply.assert_not_awaited()


@pytest.mark.asyncio
async def test_member_left_drops_only_matching_group(router, registry):
    registry.register(USER_ID, GROUP_ID, 1, AsyncMock(), delay_seconds=10)

    await router.dispatch(BotEvent.member_left(GROUP_ID - 1, [USER_ID]))
    assert USER_ID in registry

    await router.dispatch(BotEvent.member_left(GROUP_ID, [USER_ID]))
    assert USER_ID not in registry


@pytest.mark.asyncio
async def test_non_text_group_message_is_ignored(router, gateway, db_manager):
    await db_manager.group_settings.add_blacklisted_user(GROUP_ID, USER_ID)
    event = BotEvent.group_message(GROUP_ID, USER_ID, None, message_type="other")

    assert await router.dispatch(event) is None
    gateway.kick.assert_not_awaited()


@pytest.mark.asyncio
async def test_batch_isolates_failures(router, gateway, registry, db_manager):
    await db_manager.group_settings.set_password(GROUP_ID, "letmein")
    registry.register(USER_ID, GROUP_ID, 1, AsyncMock(), delay_seconds=10)
    router.verification.handle_members_joined = AsyncMock(side_effect=RuntimeError("boom"))

    results = await router.dispatch_batch([
        BotEvent.member_joined(GROUP_ID, [USER_ID + 1]),
        BotEvent.direct_message(USER_ID, "letmein"),
        group_text("just chatting", user_id=USER_ID),
    ])

    assert results == [None, True, None]


@pytest.mark.asyncio
async def test_dispatch_swallows_store_errors(router, db_manager):
    db_manager.group_settings.get_or_create = AsyncMock(side_effect=RuntimeError("db down"))

    assert await router.dispatch(group_text("hello")) is None
