"""Repository for the group_settings table and its per-group sets."""

from typing import Iterable, Optional

from loguru import logger

from .base import BaseRepository
from ..models.group_settings import GroupSettings


class GroupSettingsRepository(BaseRepository):
    """
    Repository for per-group moderation settings.

    Every set (admins, blacklisted words, blacklisted users) is stored one row
    per member, so each add/remove is a single atomic statement.
    """

    async def _ensure_group(self, group_id: int) -> bool:
        """Create the settings row with defaults if missing. Returns True if created."""
        created = await self.execute(
            "INSERT OR IGNORE INTO group_settings (group_id) VALUES (?)",
            (group_id,),
        )
        if created:
            logger.info(f"🆕 No settings found for group {group_id}. Created a new entry.")
        return bool(created)

    async def get_or_create(self, group_id: int) -> GroupSettings:
        """Return the settings of a group, persisting the defaults on first access."""
        await self._ensure_group(group_id)

        row = await self.fetchone(
            "SELECT * FROM group_settings WHERE group_id = ?", (group_id,)
        )
        admins = await self.fetchall(
            "SELECT user_id FROM group_admins WHERE group_id = ?", (group_id,)
        )
        words = await self.fetchall(
            "SELECT word FROM blacklist_words WHERE group_id = ? ORDER BY rowid", (group_id,)
        )
        users = await self.fetchall(
            "SELECT user_id FROM blacklist_users WHERE group_id = ?", (group_id,)
        )
        return GroupSettings(
            **dict(row),
            admins={r['user_id'] for r in admins},
            blacklist_words=[r['word'] for r in words],
            blacklist_users={r['user_id'] for r in users},
        )

    async def set_password(self, group_id: int, password: Optional[str]) -> None:
        """Set the join password, or clear it with None."""
        await self._ensure_group(group_id)
        await self.execute(
            "UPDATE group_settings SET password = ? WHERE group_id = ?",
            (password, group_id),
        )

    async def set_password_timeout(self, group_id: int, minutes: int) -> None:
        await self._ensure_group(group_id)
        await self.execute(
            "UPDATE group_settings SET password_timeout_minutes = ? WHERE group_id = ?",
            (minutes, group_id),
        )

    async def is_admin(self, group_id: int, user_id: int) -> bool:
        row = await self.fetchone(
            "SELECT 1 FROM group_admins WHERE group_id = ? AND user_id = ?",
            (group_id, user_id),
        )
        return row is not None

    async def add_admin(self, group_id: int, user_id: int) -> None:
        await self._ensure_group(group_id)
        await self.execute(
            "INSERT OR IGNORE INTO group_admins (group_id, user_id) VALUES (?, ?)",
            (group_id, user_id),
        )

    async def add_first_admin(self, group_id: int, user_id: int) -> bool:
        """
        Insert the admin only if the group has none yet.

        The emptiness check and the insert are one statement, so two concurrent
        bootstrap attempts cannot both succeed. Returns True if inserted.
        """
        await self._ensure_group(group_id)
        inserted = await self.execute(
            """
            INSERT INTO group_admins (group_id, user_id)
            SELECT ?, ?
            WHERE NOT EXISTS (SELECT 1 FROM group_admins WHERE group_id = ?)
            """,
            (group_id, user_id, group_id),
        )
        return inserted > 0

    async def remove_admin(self, group_id: int, user_id: int) -> None:
        await self.execute(
            "DELETE FROM group_admins WHERE group_id = ? AND user_id = ?",
            (group_id, user_id),
        )

    async def add_blacklist_words(self, group_id: int, words: Iterable[str]) -> None:
        """Add words to the blacklist, stored lower-cased."""
        await self._ensure_group(group_id)
        await self.executemany(
            "INSERT OR IGNORE INTO blacklist_words (group_id, word) VALUES (?, ?)",
            [(group_id, word.lower()) for word in words],
        )

    async def remove_blacklist_words(self, group_id: int, words: Iterable[str]) -> None:
        await self.executemany(
            "DELETE FROM blacklist_words WHERE group_id = ? AND word = ?",
            [(group_id, word.lower()) for word in words],
        )

    async def is_user_blacklisted(self, group_id: int, user_id: int) -> bool:
        row = await self.fetchone(
            "SELECT 1 FROM blacklist_users WHERE group_id = ? AND user_id = ?",
            (group_id, user_id),
        )
        return row is not None

    async def add_blacklisted_user(self, group_id: int, user_id: int) -> None:
        await self._ensure_group(group_id)
        await self.execute(
            "INSERT OR IGNORE INTO blacklist_users (group_id, user_id) VALUES (?, ?)",
            (group_id, user_id),
        )

    async def remove_blacklisted_user(self, group_id: int, user_id: int) -> None:
        await self.execute(
            "DELETE FROM blacklist_users WHERE group_id = ? AND user_id = ?",
            (group_id, user_id),
        )
