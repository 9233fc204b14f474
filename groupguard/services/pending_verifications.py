"""In-memory registry of members who still have to send the group password."""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Optional

from loguru import logger

ExpiryCallback = Callable[[int, int], Awaitable[None]]


class ScheduledAction:
    """A callback that runs once after a delay unless cancelled first."""

    def __init__(self, delay: float, action: Callable[[], Awaitable[None]]):
        self.delay = delay
        self._action = action
        self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        await asyncio.sleep(self.delay)
        await self._action()

    def cancel(self) -> bool:
        """Cancel the action. Returns False if it already started or finished."""
        if self._task.done():
            return False
        return self._task.cancel()

    @property
    def done(self) -> bool:
        return self._task.done()


@dataclass(eq=False)
class PendingVerification:
    user_id: int
    group_id: int
    timeout_minutes: int
    expiry: Optional[ScheduledAction] = field(default=None, repr=False)


class PendingVerificationRegistry:
    """
    Maps a user to the group they must authenticate against.

    Removal is always check-and-remove on the dict with no await in between,
    so an entry is acted on by exactly one of: a password attempt, an
    explicit discard, or its own expiry.
    """

    def __init__(self):
        self._entries: Dict[int, PendingVerification] = {}

    def __contains__(self, user_id: int) -> bool:
        return user_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, user_id: int) -> Optional[PendingVerification]:
        return self._entries.get(user_id)

    def register(self, user_id: int, group_id: int, timeout_minutes: int,
                 on_expire: ExpiryCallback, delay_seconds: Optional[float] = None) -> PendingVerification:
        """
        Start a verification for the user, replacing any earlier one.

        on_expire(group_id, user_id) runs after the timeout if the entry is
        still registered at that moment.
        """
        previous = self.take(user_id)
        if previous:
            logger.debug(f"Replacing pending verification of {user_id} for group {previous.group_id}")

        entry = PendingVerification(user_id=user_id, group_id=group_id, timeout_minutes=timeout_minutes)
        delay = timeout_minutes * 60 if delay_seconds is None else delay_seconds

        async def _expire() -> None:
            if not self._remove(entry):
                return
            logger.info(f"⏰ User {user_id} timed out on the password for group {group_id}")
            try:
                await on_expire(group_id, user_id)
            except Exception:
                logger.exception(f"Expiry action failed for user {user_id} in group {group_id}")

        entry.expiry = ScheduledAction(delay, _expire)
        self._entries[user_id] = entry
        return entry

    def take(self, user_id: int) -> Optional[PendingVerification]:
        """Remove the user's entry and cancel its timer. None if nothing was pending."""
        entry = self._entries.pop(user_id, None)
        if entry and entry.expiry:
            entry.expiry.cancel()
        return entry

    def discard(self, user_id: int, group_id: Optional[int] = None) -> bool:
        """Drop the entry, optionally only when it targets the given group."""
        entry = self._entries.get(user_id)
        if entry is None or (group_id is not None and entry.group_id != group_id):
            return False
        return self.take(user_id) is not None

    def _remove(self, entry: PendingVerification) -> bool:
        if self._entries.get(entry.user_id) is not entry:
            return False
        del self._entries[entry.user_id]
        return True

    def clear(self) -> None:
        """Cancel every timer. Pending verifications are not persisted."""
        for user_id in list(self._entries):
            self.take(user_id)
