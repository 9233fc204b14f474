"""Errors raised inside command handling."""


class GroupGuardError(Exception):
    """Base class for bot errors."""


class UserInputError(GroupGuardError):
    """Bad or missing command arguments. The message is shown to the user as is."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthorizationDenied(GroupGuardError):
    """A non-admin tried a privileged command. Never surfaced to the chat."""
