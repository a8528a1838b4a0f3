"""Domain errors raised by the service layer.

Routes translate these into HTTP responses; services never build HTTP
responses themselves.
"""


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""


class InvalidTarget(ServiceError):
    """The follow target cannot be followed by the acting identity."""


class SelfFollow(InvalidTarget):
    def __init__(self, actor):
        self.actor = actor
        if actor.kind.value == "organization":
            message = "A business cannot follow itself, switch to your personal account to follow your business"
        else:
            message = "Cannot follow yourself"
        super().__init__(message)


class TargetNotFound(InvalidTarget):
    def __init__(self, actor):
        self.actor = actor
        super().__init__(f"{actor.kind.value.capitalize()} {actor.id} not found")


class NotAMember(ServiceError):
    """The user does not belong to the requested organization."""

    def __init__(self, user_id: str, organization_id: str):
        self.user_id = user_id
        self.organization_id = organization_id
        super().__init__(f"User {user_id} is not a member of organization {organization_id}")


class PostNotFound(ServiceError):
    def __init__(self, post_id: str):
        self.post_id = post_id
        super().__init__("Post not found")


class CommentNotFound(ServiceError):
    def __init__(self, comment_id: str):
        self.comment_id = comment_id
        super().__init__("Comment not found")


class InvalidParent(ServiceError):
    """A reply must point at a comment on the same post."""

    def __init__(self):
        super().__init__("Parent comment does not belong to this post")


class NotAuthor(ServiceError):
    """Only the identity content was published as may remove it."""

    def __init__(self):
        super().__init__("Not authorized to delete this comment")
