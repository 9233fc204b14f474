"""Entry point for every inbound event."""

import asyncio
from typing import Any, Iterable, List

from loguru import logger

from config.settings import Settings
from groupguard.database.repositories.group_settings_repository import GroupSettingsRepository
from groupguard.events import BotEvent, EventKind, SourceKind
from groupguard.services.authorization import AuthorizationPolicy
from groupguard.services.command_service import CommandService
from groupguard.services.gateway import MessagingGateway
from groupguard.services.moderation_service import ModerationService
from groupguard.services.pending_verifications import PendingVerificationRegistry
from groupguard.services.verification_service import VerificationService


class EventRouter:
    """
    Classifies events by kind and source and hands them to the right service.

    Concurrent events touching the same group are not serialised: two admins
    editing settings at once both succeed and the later write to a field wins.
    """

    def __init__(
        self,
        group_settings: GroupSettingsRepository,
        gateway: MessagingGateway,
        registry: PendingVerificationRegistry,
        settings: Settings,
    ):
        self.group_settings = group_settings
        self.gateway = gateway
        self.registry = registry
        self.settings = settings

        self.policy = AuthorizationPolicy(group_settings)
        self.moderation = ModerationService(gateway)
        self.verification = VerificationService(
            group_settings, gateway, self.moderation, registry, settings
        )
        self.commands = CommandService(
            group_settings, gateway, self.moderation, self.policy, settings
        )

    async def dispatch(self, event: BotEvent) -> Any:
        """Handle one event. Failures are logged and never propagate."""
        try:
            return await self._route(event)
        except Exception:
            logger.exception(f"An error occurred while handling {event.kind.value} event")
            return None

    async def dispatch_batch(self, events: Iterable[BotEvent]) -> List[Any]:
        """Handle events concurrently. Results come back in input order."""
        return list(await asyncio.gather(*(self.dispatch(event) for event in events)))

    async def _route(self, event: BotEvent) -> Any:
        source = event.source

        if event.kind == EventKind.UNFOLLOW:
            if self.registry.discard(source.user_id):
                logger.info(f"User {source.user_id} blocked the bot, pending verification dropped")
            return None

        if source.kind != SourceKind.GROUP:
            if event.kind == EventKind.MESSAGE and source.user_id in self.registry:
                return await self.verification.handle_password_attempt(event)
            return None

        if event.kind == EventKind.MESSAGE:
            return await self._handle_group_message(event)
        if event.kind == EventKind.MEMBER_JOINED:
            return await self.verification.handle_members_joined(source.group_id, event.members)
        if event.kind == EventKind.MEMBER_LEFT:
            return self._handle_members_left(source.group_id, event.members)
        return None

    async def _handle_group_message(self, event: BotEvent) -> Any:
        message = event.message
        if message is None or not message.is_text:
            return None

        group_id = event.source.group_id
        sender_id = event.source.user_id
        settings = await self.group_settings.get_or_create(group_id)

        if await self.moderation.enforce_user_blacklist(settings, sender_id):
            return None

        command = self.commands.parse(message.text)
        if command is not None:
            return await self.commands.handle(event, command)

        return await self.moderation.enforce_word_blacklist(settings, sender_id, message.text)

    def _handle_members_left(self, group_id: int, members: List[int]) -> None:
        logger.info(f"👋 Member left group {group_id}: {', '.join(str(m) for m in members)}")
        for user_id in members:
            if self.registry.discard(user_id, group_id):
                logger.debug(f"Dropped pending verification of {user_id} after leaving")
        return None
