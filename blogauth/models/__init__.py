"""ORM model exports."""

from blogauth.models.post import Post
from blogauth.models.user import User

__all__ = ["Post", "User"]
