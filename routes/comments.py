from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from database import get_db
from models.AuthSession import AuthSession
from schemas import ActorRef, CommentRead, CommentWrite
from services import comments as comment_service
from services.errors import CommentNotFound, InvalidParent, NotAuthor, PostNotFound
from services.identity import get_active_identity
from utils.auth import get_acting_identity, get_current_session

router = APIRouter(prefix="/posts", tags=["Comments"])


def _to_read(comment, replies_count: int = 0) -> CommentRead:
    return CommentRead.model_validate(comment).model_copy(update={"replies_count": replies_count})


def _raise_http(exc: Exception):
    if isinstance(exc, (PostNotFound, CommentNotFound)):
        raise HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, InvalidParent):
        raise HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, NotAuthor):
        raise HTTPException(status_code=403, detail=str(exc))
    raise exc


@router.post("/{post_id}/comments", response_model=CommentRead, status_code=status.HTTP_201_CREATED)
def create_comment(
    post_id: str,
    payload: CommentWrite,
    session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """
    Comment on a post, or reply to a comment with `parent_id`, as the acting identity.
    """
    author = get_active_identity(db, session)
    try:
        comment = comment_service.create_comment(
            db, post_id, author, session.user_id, payload.content, payload.parent_id
        )
    except (PostNotFound, CommentNotFound, InvalidParent) as exc:
        _raise_http(exc)
    return _to_read(comment)


@router.get("/{post_id}/comments", response_model=List[CommentRead])
def list_comments(
    post_id: str,
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    try:
        rows = comment_service.list_comments(db, post_id, limit, offset)
    except PostNotFound as exc:
        _raise_http(exc)
    return [_to_read(comment, count) for comment, count in rows]


@router.get("/{post_id}/comments/{comment_id}/replies", response_model=List[CommentRead])
def list_replies(
    post_id: str,
    comment_id: str,
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    try:
        rows = comment_service.list_replies(db, post_id, comment_id, limit, offset)
    except CommentNotFound as exc:
        _raise_http(exc)
    return [_to_read(comment, count) for comment, count in rows]


@router.delete("/{post_id}/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    post_id: str,
    comment_id: str,
    acting: ActorRef = Depends(get_acting_identity),
    db: Session = Depends(get_db),
):
    """
    Delete a comment and its replies. Only the identity it was written as may delete it.
    """
    try:
        comment_service.delete_comment(db, post_id, comment_id, acting)
    except (CommentNotFound, NotAuthor) as exc:
        _raise_http(exc)
