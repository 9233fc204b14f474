"""Parsing and execution of admin commands typed in a group."""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from loguru import logger

from config.settings import Settings
from groupguard.database.repositories.group_settings_repository import GroupSettingsRepository
from groupguard.events import BotEvent
from groupguard.exceptions import AuthorizationDenied, UserInputError
from groupguard.services.authorization import AuthorizationPolicy
from groupguard.services.gateway import MessagingGateway
from groupguard.services.moderation_service import ModerationService
from groupguard.utils.validators import (
    normalize_blacklist_words,
    truncate_text,
    validate_timeout_minutes,
)

CommandHandler = Callable[[BotEvent, List[str]], Awaitable[bool]]


@dataclass
class ParsedCommand:
    name: str
    args: List[str] = field(default_factory=list)


def parse_command(text: str, prefix: str) -> Optional[ParsedCommand]:
    """Split a message into command and arguments. None if it is not a command."""
    tokens = text.strip().split()
    if not tokens or not tokens[0].startswith(prefix):
        return None
    return ParsedCommand(name=tokens[0].lower(), args=tokens[1:])


class CommandService:
    """
    Routes group commands to their handlers.

    Every command answers by replying to the message that triggered it.
    Commands other than setadmin are silently ignored for non-admins.
    """

    GENERIC_ERROR = "An error occurred while processing the command."

    def __init__(
        self,
        group_settings: GroupSettingsRepository,
        gateway: MessagingGateway,
        moderation: ModerationService,
        policy: AuthorizationPolicy,
        settings: Settings,
    ):
        self.group_settings = group_settings
        self.gateway = gateway
        self.moderation = moderation
        self.policy = policy
        self.settings = settings
        self.prefix = settings.COMMAND_PREFIX

        self._handlers: Dict[str, Tuple[CommandHandler, str]] = {
            "setadmin": (self.set_admin, "An error occurred while setting an admin."),
            "setpassword": (self.set_password, "An error occurred while setting the password."),
            "setpasswordtimeout": (self.set_password_timeout, "An error occurred while setting the timeout."),
            "addblacklist": (self.add_blacklist_words, "An error occurred while adding to the blacklist."),
            "removeblacklist": (self.remove_blacklist_words, "An error occurred while removing from the blacklist."),
            "blacklistuser": (self.blacklist_user, "An error occurred while blacklisting the user."),
            "unblacklistuser": (self.unblacklist_user, "An error occurred while unblacklisting the user."),
            "status": (self.status, "Error fetching status."),
            "showblacklistwords": (self.show_blacklist_words, "An error occurred while fetching the word blacklist."),
            "showblacklistusers": (self.show_blacklist_users, "An error occurred while fetching the user blacklist."),
            "help": (self.help, self.GENERIC_ERROR),
        }

    def parse(self, text: Optional[str]) -> Optional[ParsedCommand]:
        if not text:
            return None
        return parse_command(text, self.prefix)

    async def handle(self, event: BotEvent, command: ParsedCommand) -> Optional[bool]:
        """Run one command with its own error isolation. Returns whether a reply went out."""
        group_id = event.source.group_id
        sender_id = event.source.user_id
        name = command.name[len(self.prefix):]
        handler, error_text = self._handlers.get(name, (None, self.GENERIC_ERROR))

        logger.debug(f"💬 Command {command.name} from {sender_id} in group {group_id}")
        try:
            if name != "setadmin":
                await self.policy.require_admin(group_id, sender_id)
            if handler is None:
                return await self._reply(
                    event,
                    f"Unknown command: {command.name}. Use {self.prefix}help to see all available commands.",
                )
            return await handler(event, command.args)
        except UserInputError as e:
            return await self._reply(event, e.message)
        except AuthorizationDenied:
            return None
        except Exception:
            logger.exception(f"Command {command.name} failed in group {group_id}")
            return await self._reply(event, error_text)

    async def _reply(self, event: BotEvent, text: str) -> bool:
        return await self.gateway.reply(event, text)

    def _mentioned_user(self, event: BotEvent, usage: str) -> int:
        mentions = event.message.mentions if event.message else []
        if not mentions:
            raise UserInputError(usage)
        return mentions[0]

    async def _display_name(self, user_id: int, group_id: Optional[int] = None) -> Optional[str]:
        """Best-effort display name: group membership first, then the user profile."""
        try:
            if group_id is not None:
                name = await self.gateway.get_group_member_name(group_id, user_id)
                if name:
                    return name
            return await self.gateway.get_user_name(user_id)
        except Exception as e:
            logger.debug(f"Name lookup failed for {user_id}: {e}")
            return None

    # Admin management

    async def set_admin(self, event: BotEvent, args: List[str]) -> bool:
        group_id = event.source.group_id
        sender_id = event.source.user_id

        if await self.policy.try_bootstrap(group_id, sender_id):
            return await self._reply(event, "You are now the first admin.")

        await self.policy.require_admin(group_id, sender_id)
        target_id = self._mentioned_user(event, f"Usage: {self.prefix}setadmin @username")
        if await self.policy.is_admin(group_id, target_id):
            raise UserInputError("This user is already an admin.")

        await self.group_settings.add_admin(group_id, target_id)
        logger.info(f"👑 User {sender_id} made {target_id} an admin of group {group_id}")
        return await self._reply(event, "New admin added.")

    # Password

    async def set_password(self, event: BotEvent, args: List[str]) -> bool:
        if not args:
            raise UserInputError(f"Usage: {self.prefix}setpassword [new_password|off]")

        group_id = event.source.group_id
        new_password = args[0]
        if new_password.lower() == "off":
            await self.group_settings.set_password(group_id, None)
            logger.info(f"🔓 Password protection disabled in group {group_id}")
            return await self._reply(event, "Password protection has been disabled.")

        await self.group_settings.set_password(group_id, new_password)
        logger.info(f"🔐 Password protection enabled in group {group_id}")
        return await self._reply(event, f"The group password has been set to: {new_password}")

    async def set_password_timeout(self, event: BotEvent, args: List[str]) -> bool:
        if not args:
            raise UserInputError(f"Usage: {self.prefix}setpasswordtimeout [minutes]")

        is_valid, minutes = validate_timeout_minutes(args[0])
        if not is_valid:
            raise UserInputError("Please provide a valid number of minutes.")

        await self.group_settings.set_password_timeout(event.source.group_id, minutes)
        return await self._reply(event, f"Password timeout has been set to {minutes} minute(s).")

    # Word blacklist

    async def add_blacklist_words(self, event: BotEvent, args: List[str]) -> bool:
        words = normalize_blacklist_words(args)
        if not words:
            raise UserInputError(f"Usage: {self.prefix}addblacklist [word]...")

        await self.group_settings.add_blacklist_words(event.source.group_id, words)
        return await self._reply(event, f"Added {len(words)} word(s) to blacklist.")

    async def remove_blacklist_words(self, event: BotEvent, args: List[str]) -> bool:
        words = normalize_blacklist_words(args)
        if not words:
            raise UserInputError(f"Usage: {self.prefix}removeblacklist [word]...")

        await self.group_settings.remove_blacklist_words(event.source.group_id, words)
        return await self._reply(event, f"Removed {len(words)} word(s) from blacklist.")

    # User blacklist

    async def blacklist_user(self, event: BotEvent, args: List[str]) -> bool:
        group_id = event.source.group_id
        target_id = self._mentioned_user(event, f"Usage: {self.prefix}blacklistuser @username")
        if await self.policy.is_admin(group_id, target_id):
            raise UserInputError("You cannot blacklist an admin.")

        await self.group_settings.add_blacklisted_user(group_id, target_id)
        name = await self._display_name(target_id, group_id)
        kicked = await self.moderation.kick(group_id, target_id, "User has been blacklisted.")

        if kicked:
            return await self._reply(event, f"{name or 'The user'} has been blacklisted and removed.")
        return await self._reply(
            event,
            f"{name or 'The user'} has been added to the blacklist, but could not be removed "
            "from the group (may have already left).",
        )

    async def unblacklist_user(self, event: BotEvent, args: List[str]) -> bool:
        target_id = self._mentioned_user(event, f"Usage: {self.prefix}unblacklistuser @username")

        await self.group_settings.remove_blacklisted_user(event.source.group_id, target_id)
        name = await self._display_name(target_id)
        return await self._reply(event, f"{name or 'The user'} has been unblacklisted.")

    # Reports

    async def status(self, event: BotEvent, args: List[str]) -> bool:
        settings = await self.group_settings.get_or_create(event.source.group_id)
        if settings.password_enabled:
            timeout = settings.timeout_minutes(self.settings.DEFAULT_PASSWORD_TIMEOUT_MINUTES)
            password_status = f"Enabled (Timeout: {timeout}m)"
        else:
            password_status = "Disabled"

        status_text = (
            "--- Group Status Overview ---\n"
            f"Password Protection: {password_status}\n"
            f"Admins: {len(settings.admins)}\n"
            f"Blacklisted Words: {len(settings.blacklist_words)}\n"
            f"Blacklisted Users: {len(settings.blacklist_users)}"
        )
        return await self._reply(event, status_text)

    async def show_blacklist_words(self, event: BotEvent, args: List[str]) -> bool:
        settings = await self.group_settings.get_or_create(event.source.group_id)
        words = sorted(settings.blacklist_words)
        listing = ", ".join(words) if words else "None"
        listing = truncate_text(listing, self.settings.MAX_REPLY_LENGTH)
        return await self._reply(event, f"--- Blacklisted Words ({len(words)}) ---\n{listing}")

    async def show_blacklist_users(self, event: BotEvent, args: List[str]) -> bool:
        settings = await self.group_settings.get_or_create(event.source.group_id)
        user_ids = sorted(settings.blacklist_users)
        listing = "None"
        if user_ids:
            names = await asyncio.gather(*(self._display_name(user_id) for user_id in user_ids))
            listing = ", ".join(
                name or f"Unknown (ID: {user_id})" for user_id, name in zip(user_ids, names)
            )
            listing = truncate_text(listing, self.settings.MAX_REPLY_LENGTH)
        return await self._reply(event, f"--- Blacklisted Users ({len(user_ids)}) ---\n{listing}")

    async def help(self, event: BotEvent, args: List[str]) -> bool:
        return await self._reply(event, self.help_text())

    def help_text(self) -> str:
        p = self.prefix
        return (
            "--- Admin Commands ---\n"
            f"{p}help\n"
            f"{p}status\n"
            f"{p}setpassword [pass|off]\n"
            f"{p}setpasswordtimeout [mins]\n"
            f"{p}showblacklistwords\n"
            f"{p}showblacklistusers\n"
            f"{p}setadmin @user\n"
            f"{p}addblacklist [word]...\n"
            f"{p}removeblacklist [word]...\n"
            f"{p}blacklistuser @user\n"
            f"{p}unblacklistuser @user"
        )
