"""Telegram group moderation bot: admin-gated settings, password-gated joins, blacklists."""

__version__ = "1.0.0"
