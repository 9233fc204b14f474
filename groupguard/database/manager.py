from pathlib import Path
from typing import Optional

from loguru import logger
import aiosqlite

from groupguard.database.repositories.group_settings_repository import GroupSettingsRepository
from groupguard.database.repositories.user_repository import UserRepository


class DatabaseManager:
    """
    SQLite database and repository management.

    Opens the connection, prepares the schema and gives access to the
    repositories.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.conn: Optional[aiosqlite.Connection] = None
        self.group_settings: Optional[GroupSettingsRepository] = None
        self.users: Optional[UserRepository] = None

    async def init_database(self) -> None:
        """Open the connection and create the tables. Any failure here is fatal."""
        self.conn = await aiosqlite.connect(self.db_path)
        self.conn.row_factory = aiosqlite.Row
        await self.conn.execute("PRAGMA foreign_keys = ON;")
        await self._run_sql_scripts()
        self._init_repositories()
        logger.info("Database and repositories initialised")

    def _init_repositories(self) -> None:
        self.group_settings = GroupSettingsRepository(self.conn)
        self.users = UserRepository(self.conn)

    async def _run_sql_scripts(self) -> None:
        """
        Run the schema scripts.

        Scripts live in groupguard/database/sql and run in alphabetical order.
        """
        sql_dir = Path(__file__).parent / "sql"
        scripts = sorted(sql_dir.glob("*.sql"))

        async with self.conn.cursor() as cursor:
            for script_path in scripts:
                try:
                    sql_query = script_path.read_text(encoding="utf-8").strip()
                    await cursor.execute(sql_query)
                except Exception as e:
                    logger.error(f"❌ Failed to run SQL script {script_path.name}: {e}")
                    raise

        await self.conn.commit()
        logger.info(f"Schema ready: ran {len(scripts)} SQL scripts")

    async def close(self) -> None:
        if self.conn:
            await self.conn.close()
            self.conn = None
            logger.info("Database connection closed")
