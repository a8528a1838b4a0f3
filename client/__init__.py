from .api import ApiError, Conflict, Forbidden, InvalidTarget, LinkBDClient, NetworkFailure, ServerError, Unauthenticated
from .cache import QueryCache, query_keys
from .follow_store import FollowControl, FollowState, FollowStore

__all__ = [
    "ApiError",
    "Conflict",
    "Forbidden",
    "InvalidTarget",
    "LinkBDClient",
    "NetworkFailure",
    "ServerError",
    "Unauthenticated",
    "QueryCache",
    "query_keys",
    "FollowControl",
    "FollowState",
    "FollowStore",
]
