"""Who may run privileged commands in a group."""

from loguru import logger

from groupguard.database.repositories.group_settings_repository import GroupSettingsRepository
from groupguard.exceptions import AuthorizationDenied


class AuthorizationPolicy:
    """Admin checks backed by the group's admin set."""

    def __init__(self, group_settings: GroupSettingsRepository):
        self.group_settings = group_settings

    async def is_admin(self, group_id: int, user_id: int) -> bool:
        return await self.group_settings.is_admin(group_id, user_id)

    async def require_admin(self, group_id: int, user_id: int) -> None:
        """Raise AuthorizationDenied unless the user is an admin of the group."""
        if not await self.is_admin(group_id, user_id):
            logger.debug(f"🔒 Ignoring privileged command from non-admin {user_id} in group {group_id}")
            raise AuthorizationDenied(f"user {user_id} is not an admin of group {group_id}")

    async def try_bootstrap(self, group_id: int, sender_id: int) -> bool:
        """
        Make the sender the first admin if the group has none.

        Returns True if the sender became admin. Mentions are irrelevant here:
        the sender is always the one promoted.
        """
        promoted = await self.group_settings.add_first_admin(group_id, sender_id)
        if promoted:
            logger.success(f"👑 User {sender_id} became the first admin of group {group_id}")
        return promoted
