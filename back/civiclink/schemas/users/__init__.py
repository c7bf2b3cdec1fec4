from .user_schemas import UserRef, UserStats, Viewer

__all__ = ["UserRef", "UserStats", "Viewer"]
