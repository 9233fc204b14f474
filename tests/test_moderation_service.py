"""
Tests for blacklist enforcement on group messages.
"""
import pytest

from groupguard.services.moderation_service import find_blacklisted_word
from tests.conftest import ADMIN_ID, GROUP_ID, USER_ID, group_text


def test_find_blacklisted_word_is_substring_and_case_insensitive():
    assert find_blacklisted_word("Buy CHEAPpills now", ["cheap"]) == "cheap"
    assert find_blacklisted_word("nothing here", ["cheap"]) is None
    assert find_blacklisted_word("anything", []) is None


def test_find_blacklisted_word_follows_given_order():
    assert find_blacklisted_word("scam and spam", ["spam", "scam"]) == "spam"
    assert find_blacklisted_word("scam and spam", ["scam", "spam"]) == "scam"


@pytest.mark.asyncio
async def test_word_kick_names_earliest_added_word(admin_router, gateway, db_manager):
    await db_manager.group_settings.add_blacklist_words(GROUP_ID, ["zebra"])
    await db_manager.group_settings.add_blacklist_words(GROUP_ID, ["apple"])

    result = await admin_router.dispatch(group_text("apple zebra", user_id=USER_ID))

    assert result == "zebra"


@pytest.mark.asyncio
async def test_admin_is_exempt_from_word_blacklist(admin_router, gateway, db_manager):
    await db_manager.group_settings.add_blacklist_words(GROUP_ID, ["spam"])

    await admin_router.dispatch(group_text("spam spam spam", user_id=ADMIN_ID))

    gateway.kick.assert_not_awaited()


@pytest.mark.asyncio
async def test_word_kick_reports_matched_word(admin_router, gateway, db_manager):
    await db_manager.group_settings.add_blacklist_words(GROUP_ID, ["spam"])

    result = await admin_router.dispatch(group_text("no spamming please", user_id=USER_ID))

    assert result == "spam"
    gateway.kick.assert_awaited_once_with(GROUP_ID, USER_ID)


@pytest.mark.asyncio
async def test_blacklisted_sender_is_kicked_before_commands(router, gateway, db_manager):
    await db_manager.group_settings.add_blacklisted_user(GROUP_ID, USER_ID)

    await router.dispatch(group_text("!setadmin", user_id=USER_ID))

    gateway.kick.assert_awaited_once_with(GROUP_ID, USER_ID)
    gateway.reply.assert_not_awaited()
    assert (await db_manager.group_settings.get_or_create(GROUP_ID)).admins == set()


@pytest.mark.asyncio
async def test_blacklisted_sender_kicked_once_even_with_bad_words(admin_router, gateway, db_manager):
    await db_manager.group_settings.add_blacklisted_user(GROUP_ID, USER_ID)
    await db_manager.group_settings.add_blacklist_words(GROUP_ID, ["spam"])

    await admin_router.dispatch(group_text("spam", user_id=USER_ID))

    assert gateway.kick.await_count == 1


@pytest.mark.asyncio
async def test_failed_kick_is_not_surfaced(admin_router, gateway, db_manager):
    gateway.kick.return_value = False
    await db_manager.group_settings.add_blacklist_words(GROUP_ID, ["spam"])

    await admin_router.dispatch(group_text("spam", user_id=USER_ID))

    gateway.kick.assert_awaited_once()
    gateway.reply.assert_not_awaited()
