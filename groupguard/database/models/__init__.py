from .group_settings import GroupSettings
from .user import User

__all__ = ["GroupSettings", "User"]
