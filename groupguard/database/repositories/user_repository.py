"""
Repository for users the bot has seen, used to resolve @username mentions.
"""
from typing import Optional

from .base import BaseRepository
from ..models.user import User


class UserRepository(BaseRepository):
    """
    CRUD operations over the users table.
    """

    async def upsert(self, user: User) -> None:
        """
        Insert the user or refresh their names if already known.
        """
        sql = """
            INSERT INTO users (telegram_id, username, first_name, last_name, updated_at)
            VALUES (?, ?, ?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(telegram_id) DO UPDATE SET
                username = excluded.username,
                first_name = excluded.first_name,
                last_name = excluded.last_name,
                updated_at = excluded.updated_at
        """
        await self.execute(
            sql,
            (user.telegram_id, user.username, user.first_name, user.last_name),
        )

    async def get_by_username(self, username: str) -> Optional[User]:
        """
        Look a user up by username, case-insensitively.

        Returns None if the username was never seen.
        """
        if not username:
            return None

        username = username.lstrip('@')
        sql = "SELECT * FROM users WHERE username = ? COLLATE NOCASE ORDER BY updated_at DESC"
        row = await self.fetchone(sql, (username,))
        return User(**row) if row else None
