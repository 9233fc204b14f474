from .group_settings_repository import GroupSettingsRepository
from .user_repository import UserRepository

__all__ = ["GroupSettingsRepository", "UserRepository"]
