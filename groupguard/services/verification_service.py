"""Password-gated join flow."""

from typing import Iterable, List

from loguru import logger

from config.settings import Settings
from groupguard.database.repositories.group_settings_repository import GroupSettingsRepository
from groupguard.events import BotEvent
from groupguard.services.gateway import MessagingGateway
from groupguard.services.moderation_service import ModerationService
from groupguard.services.pending_verifications import PendingVerificationRegistry


class VerificationService:
    """Handles joining members and their password attempts."""

    def __init__(
        self,
        group_settings: GroupSettingsRepository,
        gateway: MessagingGateway,
        moderation: ModerationService,
        registry: PendingVerificationRegistry,
        settings: Settings,
    ):
        self.group_settings = group_settings
        self.gateway = gateway
        self.moderation = moderation
        self.registry = registry
        self.settings = settings

    async def handle_members_joined(self, group_id: int, members: Iterable[int]) -> List[str]:
        """
        Run the join policy for every member independently.

        Returns one outcome per member: "kicked", "pending", "admitted" or "error".
        """
        settings = await self.group_settings.get_or_create(group_id)
        outcomes = []
        for user_id in members:
            try:
                if user_id in settings.blacklist_users:
                    await self.moderation.kick(group_id, user_id, "A blacklisted user tried to join.")
                    outcomes.append("kicked")
                    continue

                if settings.password_enabled:
                    timeout = settings.timeout_minutes(self.settings.DEFAULT_PASSWORD_TIMEOUT_MINUTES)
                    await self.start_verification(group_id, user_id, timeout)
                    outcomes.append("pending")
                    continue

                logger.debug(f"User {user_id} joined group {group_id} without a password requirement")
                outcomes.append("admitted")
            except Exception:
                logger.exception(f"Failed to process joining member {user_id} of group {group_id}")
                outcomes.append("error")
        return outcomes

    async def start_verification(self, group_id: int, user_id: int, timeout_minutes: int) -> None:
        """
        Register the member and send the password prompt.

        A member can only be pending for one group at a time. An unfinished
        verification for another group counts as failed and the member is
        removed from that group.
        """
        previous = self.registry.take(user_id)
        self.registry.register(user_id, group_id, timeout_minutes, self._on_timeout)
        logger.info(f"🔐 User {user_id} must send the password of group {group_id} within {timeout_minutes} min")

        if previous is not None and previous.group_id != group_id:
            logger.info(f"User {user_id} left the verification of group {previous.group_id} unfinished")
            await self.moderation.kick(
                previous.group_id, user_id, "Password verification abandoned for another group."
            )

        prompt = (
            "Welcome! This group requires a password. Please reply with the password "
            f"within {timeout_minutes} minute(s) to stay in the group."
        )
        if not await self.gateway.push(user_id, prompt):
            logger.warning(f"⚠️ Password prompt could not be delivered to {user_id}")

    async def _on_timeout(self, group_id: int, user_id: int) -> None:
        await self.moderation.kick(group_id, user_id, "Password verification timed out.")

    async def handle_password_attempt(self, event: BotEvent) -> bool:
        """
        Check a direct message against the group password.

        The pending entry is removed before anything is awaited, so a duplicate
        or late attempt finds nothing and does nothing. Returns True if accepted.
        If the attempt cannot be checked the member is removed from the group.
        """
        user_id = event.source.user_id
        entry = self.registry.take(user_id)
        if entry is None:
            return False

        try:
            settings = await self.group_settings.get_or_create(entry.group_id)
        except Exception:
            logger.exception(f"Could not check the password of user {user_id} for group {entry.group_id}")
            await self.moderation.kick(entry.group_id, user_id, "Password could not be verified.")
            return False

        message = event.message
        if message is not None and message.is_text and message.text == settings.password:
            logger.info(f"✅ User {user_id} passed the password check for group {entry.group_id}")
            await self.gateway.reply(event, "Password accepted. Welcome!")
            return True

        logger.info(f"❌ User {user_id} sent a wrong password for group {entry.group_id}")
        await self.gateway.reply(event, "Incorrect password.")
        await self.moderation.kick(entry.group_id, user_id, "Incorrect password provided.")
        return False
