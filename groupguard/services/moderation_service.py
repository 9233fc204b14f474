"""Blacklist enforcement and kicks."""

from typing import Iterable, Optional

from loguru import logger

from groupguard.database.models.group_settings import GroupSettings
from groupguard.services.gateway import MessagingGateway


def find_blacklisted_word(text: str, words: Iterable[str]) -> Optional[str]:
    """First blacklisted word, in the order given, contained in the text. Substring match, ignoring case."""
    lowered = text.lower()
    for word in words:
        if word and word in lowered:
            return word
    return None


class ModerationService:
    """Kicks members who are blacklisted or use blacklisted words."""

    def __init__(self, gateway: MessagingGateway):
        self.gateway = gateway

    async def kick(self, group_id: int, user_id: int, reason: str) -> bool:
        """Kick once. Failures are logged and reported through the return value."""
        logger.info(f"🚫 Kicking user {user_id} from group {group_id}. Reason: {reason}")
        kicked = await self.gateway.kick(group_id, user_id)
        if not kicked:
            logger.warning(f"⚠️ Could not kick user {user_id} from group {group_id}")
        return kicked

    async def enforce_user_blacklist(self, settings: GroupSettings, user_id: int) -> bool:
        """Kick the sender if blacklisted. Returns True when the message must not be processed further."""
        if user_id in settings.admins or user_id not in settings.blacklist_users:
            return False
        await self.kick(settings.group_id, user_id, "User is on the blacklist.")
        return True

    async def enforce_word_blacklist(self, settings: GroupSettings, user_id: int, text: str) -> Optional[str]:
        """Kick a non-admin sender whose text contains a blacklisted word. Returns the word."""
        if user_id in settings.admins:
            return None
        word = find_blacklisted_word(text, settings.blacklist_words)
        if word is None:
            return None
        await self.kick(settings.group_id, user_id, f"Used blacklisted word: '{word}'")
        return word
