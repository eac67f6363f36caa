from wabot.models.user import User

__all__ = ["User"]
