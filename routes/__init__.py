from . import users
from . import sessions
from . import organizations
from . import follows
from . import profile
from . import posts
from . import comments
from . import search

__all__ = [
    "users",
    "sessions",
    "organizations",
    "follows",
    "profile",
    "posts",
    "comments",
    "search",
]
