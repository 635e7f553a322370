from .user import User
from .resume import Resume

__all__ = ["User", "Resume"]
