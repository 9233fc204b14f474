"""
Tests for turning aiogram messages into events.
"""
from datetime import datetime

import pytest
from aiogram.types import Chat, Message, MessageEntity, User as TgUser

from groupguard.database.models.user import User
from groupguard.events import EventKind, SourceKind
from groupguard.utils.converters import message_to_event
from tests.conftest import ADMIN_ID, GROUP_ID, OTHER_ID, USER_ID

GROUP_CHAT = Chat(id=GROUP_ID, type="supergroup", title="Test Group")
ADMIN = TgUser(id=ADMIN_ID, is_bot=False, first_name="Admin")


def group_message(text, entities=None, reply_to=None):
    return Message(
        message_id=10,
        date=datetime.now(),
        chat=GROUP_CHAT,
        from_user=ADMIN,
        text=text,
        entities=entities,
        reply_to_message=reply_to,
    )


@pytest.mark.asyncio
async def test_username_mention_resolved_from_directory(db_manager):
    await db_manager.users.upsert(User(telegram_id=USER_ID, username="bob"))
    message = group_message(
        "!blacklistuser @bob",
        entities=[MessageEntity(type="mention", offset=15, length=4)],
    )

    event = await message_to_event(message, db_manager.users)

    assert event.kind == EventKind.MESSAGE
    assert event.source.kind == SourceKind.GROUP
    assert event.source.group_id == GROUP_ID
    assert event.source.user_id == ADMIN_ID
    assert event.message.mentions == [USER_ID]


@pytest.mark.asyncio
async def test_text_mention_and_unknown_username(db_manager):
    message = group_message(
        "!setadmin Carol @ghost",
        entities=[
            MessageEntity(
                type="text_mention", offset=10, length=5,
                user=TgUser(id=OTHER_ID, is_bot=False, first_name="Carol"),
            ),
            MessageEntity(type="mention", offset=16, length=6),
        ],
    )

    event = await message_to_event(message, db_manager.users)

    assert event.message.mentions == [OTHER_ID]


@pytest.mark.asyncio
async def test_reply_counts_as_mention(db_manager):
    original = Message(
        message_id=9,
        date=datetime.now(),
        chat=GROUP_CHAT,
        from_user=TgUser(id=USER_ID, is_bot=False, first_name="Mallory"),
        text="spam",
    )

    event = await message_to_event(group_message("!blacklistuser", reply_to=original), db_manager.users)

    assert event.message.mentions == [USER_ID]


@pytest.mark.asyncio
async def test_private_message_becomes_direct_event(db_manager):
    message = Message(
        message_id=3,
        date=datetime.now(),
        chat=Chat(id=USER_ID, type="private"),
        from_user=TgUser(id=USER_ID, is_bot=False, first_name="Bob"),
        text="letmein",
    )

    event = await message_to_event(message, db_manager.users)

    assert event.source.kind == SourceKind.DIRECT
    assert event.source.user_id == USER_ID
    assert event.message.text == "letmein"
    assert event.message.is_text
