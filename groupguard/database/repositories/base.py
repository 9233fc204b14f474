"""Base class for all repositories."""

import aiosqlite


class BaseRepository:
    """Base repository."""

    def __init__(self, conn: aiosqlite.Connection):
        """
        Initialise the repository.

        :param conn: Database connection.
        """
        self.conn = conn

    async def execute(self, query: str, parameters=None) -> int:
        """Run a statement, commit it and return the number of affected rows."""
        if parameters is None:
            parameters = ()
        async with self.conn.execute(query, parameters) as cursor:
            rowcount = cursor.rowcount
        await self.conn.commit()
        return rowcount

    async def executemany(self, query: str, parameters) -> None:
        """Run a statement for every parameter tuple in a single commit."""
        await self.conn.executemany(query, parameters)
        await self.conn.commit()

    async def fetchone(self, query: str, parameters=None):
        """Run a query and return one row."""
        if parameters is None:
            parameters = ()
        async with self.conn.execute(query, parameters) as cursor:
            return await cursor.fetchone()

    async def fetchall(self, query: str, parameters=None):
        """Run a query and return all rows."""
        if parameters is None:
            parameters = ()
        async with self.conn.execute(query, parameters) as cursor:
            return await cursor.fetchall()
