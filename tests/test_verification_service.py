"""
Tests for the password-gated join flow.
"""
import asyncio
from unittest.mock import AsyncMock

import pytest

from groupguard.events import BotEvent
from tests.conftest import GROUP_ID, OTHER_ID, USER_ID, group_text, last_reply


def direct(text, user_id=USER_ID, message_type="text"):
    return BotEvent.direct_message(user_id, text, message_id=5, message_type=message_type)


@pytest.mark.asyncio
async def test_join_without_password_admits_silently(router, gateway, registry):
    outcomes = await router.dispatch(BotEvent.member_joined(GROUP_ID, [USER_ID]))

    assert outcomes == ["admitted"]
    gateway.push.assert_not_awaited()
    assert USER_ID not in registry


@pytest.mark.asyncio
async def test_join_with_password_prompts_member(router, gateway, registry, db_manager):
    await db_manager.group_settings.set_password(GROUP_ID, "letmein")
    await db_manager.group_settings.set_password_timeout(GROUP_ID, 1)

    outcomes = await router.dispatch(BotEvent.member_joined(GROUP_ID, [USER_ID]))

    assert outcomes == ["pending"]
    assert registry.get(USER_ID).group_id == GROUP_ID
    user_id, prompt = gateway.push.call_args.args
    assert user_id == USER_ID
    assert "within 1 minute(s)" in prompt


@pytest.mark.asyncio
async def test_correct_password_is_accepted(router, gateway, registry, db_manager):
    await db_manager.group_settings.set_password(GROUP_ID, "letmein")
    await router.dispatch(BotEvent.member_joined(GROUP_ID, [USER_ID]))

    result = await router.dispatch(direct("letmein"))

    assert result is True
    assert last_reply(gateway) == "Password accepted. Welcome!"
    assert USER_ID not in registry
    gateway.kick.assert_not_awaited()


@pytest.mark.asyncio
async def test_wrong_password_rejects_and_kicks(router, gateway, registry, db_manager):
    await db_manager.group_settings.set_password(GROUP_ID, "letmein")
    await router.dispatch(BotEvent.member_joined(GROUP_ID, [USER_ID]))

    result = await router.dispatch(direct("wrong"))

    assert result is False
    assert last_reply(gateway) == "Incorrect password."
    gateway.kick.assert_awaited_once_with(GROUP_ID, USER_ID)
    assert USER_ID not in registry


@pytest.mark.asyncio
async def test_non_text_attempt_counts_as_wrong(router, gateway, db_manager):
    await db_manager.group_settings.set_password(GROUP_ID, "letmein")
    await router.dispatch(BotEvent.member_joined(GROUP_ID, [USER_ID]))

    await router.dispatch(direct(None, message_type="other"))

    gateway.kick.assert_awaited_once_with(GROUP_ID, USER_ID)


@pytest.mark.asyncio
async def test_duplicate_attempt_is_ignored(router, gateway, db_manager):
    await db_manager.group_settings.set_password(GROUP_ID, "letmein")
    await router.dispatch(BotEvent.member_joined(GROUP_ID, [USER_ID]))

    await router.dispatch(direct("letmein"))
    await router.dispatch(direct("letmein"))

    assert gateway.reply.await_count == 1


@pytest.mark.asyncio
async def test_password_is_read_at_attempt_time(router, gateway, db_manager):
    await db_manager.group_settings.set_password(GROUP_ID, "old")
    await router.dispatch(BotEvent.member_joined(GROUP_ID, [USER_ID]))
    await db_manager.group_settings.set_password(GROUP_ID, "new")

    assert await router.dispatch(direct("new")) is True


@pytest.mark.asyncio
async def test_attempt_after_expiry_is_noop(router, gateway, registry, db_manager):
    await db_manager.group_settings.set_password(GROUP_ID, "letmein")
    registry.register(USER_ID, GROUP_ID, 1, router.verification._on_timeout, delay_seconds=0.01)

    await asyncio.sleep(0.05)
    gateway.kick.assert_awaited_once_with(GROUP_ID, USER_ID)

    await router.dispatch(direct("letmein"))

    gateway.reply.assert_not_awaited()
    assert gateway.kick.await_count == 1


@pytest.mark.asyncio
async def test_blacklisted_joiner_kicked_without_prompt(router, gateway, registry, db_manager):
    await db_manager.group_settings.set_password(GROUP_ID, "letmein")
    await db_manager.group_settings.add_blacklisted_user(GROUP_ID, USER_ID)

    outcomes = await router.dispatch(BotEvent.member_joined(GROUP_ID, [USER_ID, OTHER_ID]))

    assert outcomes == ["kicked", "pending"]
    gateway.kick.assert_awaited_once_with(GROUP_ID, USER_ID)
    assert USER_ID not in registry
    assert OTHER_ID in registry


@pytest.mark.asyncio
async def test_one_failing_joiner_does_not_block_others(router, gateway, db_manager):
    await db_manager.group_settings.add_blacklisted_user(GROUP_ID, USER_ID)
    await db_manager.group_settings.add_blacklisted_user(GROUP_ID, OTHER_ID)
    gateway.kick.side_effect = [RuntimeError("boom"), True]

    outcomes = await router.dispatch(BotEvent.member_joined(GROUP_ID, [USER_ID, OTHER_ID]))

    assert outcomes == ["error", "kicked"]
    assert gateway.kick.await_count == 2


@pytest.mark.asyncio
async def test_password_off_admits_new_members(admin_router, gateway, registry):
    await admin_router.dispatch(group_text("!setpassword secret"))
    await admin_router.dispatch(group_text("!setpassword off"))

    outcomes = await admin_router.dispatch(BotEvent.member_joined(GROUP_ID, [USER_ID]))

    assert outcomes == ["admitted"]
    gateway.push.assert_not_awaited()
    assert USER_ID not in registry


@pytest.mark.asyncio
async def test_joining_second_gated_group_fails_the_first(router, gateway, registry, db_manager):
    await db_manager.group_settings.set_password(GROUP_ID, "a")
    await db_manager.group_settings.set_password(GROUP_ID - 1, "b")

    await router.dispatch(BotEvent.member_joined(GROUP_ID, [USER_ID]))
    await router.dispatch(BotEvent.member_joined(GROUP_ID - 1, [USER_ID]))

    gateway.kick.assert_awaited_once_with(GROUP_ID, USER_ID)
    assert registry.get(USER_ID).group_id == GROUP_ID - 1

    assert await router.dispatch(direct("b")) is True
    assert gateway.kick.await_count == 1


@pytest.mark.asyncio
async def test_rejoining_same_group_restarts_verification(router, gateway, registry, db_manager):
    await db_manager.group_settings.set_password(GROUP_ID, "letmein")

    await router.dispatch(BotEvent.member_joined(GROUP_ID, [USER_ID]))
    await router.dispatch(BotEvent.member_joined(GROUP_ID, [USER_ID]))

    gateway.kick.assert_not_awaited()
    assert gateway.push.await_count == 2
    assert registry.get(USER_ID).group_id == GROUP_ID


@pytest.mark.asyncio
async def test_store_failure_during_attempt_kicks_member(router, gateway, registry, db_manager):
    await db_manager.group_settings.set_password(GROUP_ID, "letmein")
    await router.dispatch(BotEvent.member_joined(GROUP_ID, [USER_ID]))
    router.verification.group_settings.get_or_create = AsyncMock(side_effect=RuntimeError("db is down"))

    result = await router.dispatch(direct("letmein"))

    assert result is False
    gateway.kick.assert_awaited_once_with(GROUP_ID, USER_ID)
    gateway.reply.assert_not_awaited()
    assert USER_ID not in registry
