"""
Platform-neutral events handed to the event router.

aiogram updates are converted into these models by the handlers, which keeps
the moderation logic testable without Telegram objects.
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class EventKind(str, Enum):
    MESSAGE = "message"
    MEMBER_JOINED = "memberJoined"
    MEMBER_LEFT = "memberLeft"
    UNFOLLOW = "unfollow"


class SourceKind(str, Enum):
    GROUP = "group"
    DIRECT = "direct"


class EventSource(BaseModel):
    kind: SourceKind
    user_id: Optional[int] = None
    group_id: Optional[int] = None

    @property
    def chat_id(self) -> Optional[int]:
        """Chat the event happened in."""
        return self.group_id if self.kind == SourceKind.GROUP else self.user_id


class IncomingMessage(BaseModel):
    message_id: Optional[int] = None
    type: str = "text"
    text: Optional[str] = None
    mentions: List[int] = Field(default_factory=list)

    @property
    def is_text(self) -> bool:
        return self.type == "text" and self.text is not None


class BotEvent(BaseModel):
    kind: EventKind
    source: EventSource
    message: Optional[IncomingMessage] = None
    members: List[int] = Field(default_factory=list)

    @classmethod
    def group_message(cls, group_id: int, user_id: int, text: Optional[str],
                      message_id: Optional[int] = None, mentions: Optional[List[int]] = None,
                      message_type: str = "text") -> "BotEvent":
        return cls(
            kind=EventKind.MESSAGE,
            source=EventSource(kind=SourceKind.GROUP, group_id=group_id, user_id=user_id),
            message=IncomingMessage(
                message_id=message_id, type=message_type, text=text, mentions=mentions or []
            ),
        )

    @classmethod
    def direct_message(cls, user_id: int, text: Optional[str],
                       message_id: Optional[int] = None, message_type: str = "text") -> "BotEvent":
        return cls(
            kind=EventKind.MESSAGE,
            source=EventSource(kind=SourceKind.DIRECT, user_id=user_id),
            message=IncomingMessage(message_id=message_id, type=message_type, text=text),
        )

    @classmethod
    def member_joined(cls, group_id: int, members: List[int]) -> "BotEvent":
        return cls(
            kind=EventKind.MEMBER_JOINED,
            source=EventSource(kind=SourceKind.GROUP, group_id=group_id),
            members=members,
        )

    @classmethod
    def member_left(cls, group_id: int, members: List[int]) -> "BotEvent":
        return cls(
            kind=EventKind.MEMBER_LEFT,
            source=EventSource(kind=SourceKind.GROUP, group_id=group_id),
            members=members,
        )

    @classmethod
    def unfollow(cls, user_id: int) -> "BotEvent":
        return cls(
            kind=EventKind.UNFOLLOW,
            source=EventSource(kind=SourceKind.DIRECT, user_id=user_id),
        )
