"""Comment system API endpoints.

Provides routes for:
- Topic comment trees
- Comment and reply creation
- Like toggling
- Cascade deletion (author or admin)
- Topic and author statistics
"""

from fastapi import APIRouter, status

from forum_api.auth.dependencies import CurrentUser, OptionalUser
from forum_api.config import get_settings

from .dependencies import CommentServiceDep, handle_comment_error
from .exceptions import CommentError
from .schemas import (
    CommentNodeResponse,
    CommentResponse,
    CommentTreeResponse,
    CreateCommentRequest,
    LikeResponse,
    LikesReceivedResponse,
    MessageResponse,
    TopicStatsResponse,
)


router = APIRouter(prefix=f"{get_settings().api_prefix}/comments", tags=["comments"])


@router.get(
    "/users/{user_id}/likes",
    response_model=LikesReceivedResponse,
    summary="Likes received by an author",
)
async def get_likes_received(
    user_id: str,
    comment_service: CommentServiceDep,
) -> LikesReceivedResponse:
    """Total likes across every comment written by the user."""
    return LikesReceivedResponse(
        user_id=user_id,
        likes_received=comment_service.get_likes_received(user_id),
    )


@router.get(
    "/{topic_id}",
    response_model=CommentTreeResponse,
    summary="Get topic comment tree",
)
async def list_topic_comments(
    topic_id: str,
    comment_service: CommentServiceDep,
    user: OptionalUser,
) -> CommentTreeResponse:
    """Get the comments of a topic as a three-level tree.

    ``isLiked`` reflects the caller when authenticated, otherwise it is false.
    """
    viewer_id = user.id if user else None
    nodes = comment_service.get_comment_tree(topic_id, viewer_id)
    return CommentTreeResponse(
        comments=[CommentNodeResponse.from_node(node) for node in nodes]
    )


@router.get(
    "/{topic_id}/stats",
    response_model=TopicStatsResponse,
    summary="Get topic comment statistics",
)
async def get_topic_stats(
    topic_id: str,
    comment_service: CommentServiceDep,
) -> TopicStatsResponse:
    """Comment count, total likes and time of the latest comment."""
    return TopicStatsResponse.from_stats(comment_service.get_topic_stats(topic_id))


@router.post(
    "/{topic_id}",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create comment",
)
async def create_comment(
    topic_id: str,
    data: CreateCommentRequest,
    comment_service: CommentServiceDep,
    user: CurrentUser,
) -> CommentResponse:
    """Create a comment on a topic, or a reply when ``parentId`` is set."""
    try:
        comment = comment_service.create_comment(
            topic_id=topic_id,
            content=data.content,
            author=user,
            parent_id=data.parent_id,
            quoted_comment_id=data.quoted_comment_id,
        )
    except CommentError as e:
        raise handle_comment_error(e) from e

    return CommentResponse.from_comment(comment)


@router.post(
    "/{comment_id}/like",
    response_model=LikeResponse,
    summary="Toggle like",
)
async def toggle_like(
    comment_id: str,
    comment_service: CommentServiceDep,
    user: CurrentUser,
) -> LikeResponse:
    """Like a comment, or remove the caller's like if already present."""
    try:
        likes, is_liked = comment_service.toggle_like(comment_id, user.id)
    except CommentError as e:
        raise handle_comment_error(e) from e

    return LikeResponse(likes=likes, is_liked=is_liked)


@router.delete(
    "/{comment_id}",
    response_model=MessageResponse,
    summary="Delete comment",
)
async def delete_comment(
    comment_id: str,
    comment_service: CommentServiceDep,
    user: CurrentUser,
) -> MessageResponse:
    """Delete a comment and all of its replies.

    Users can delete their own comments. Admins can delete any comment.
    """
    try:
        removed = comment_service.delete_comment(
            comment_id=comment_id,
            requester_id=user.id,
            requester_is_admin=user.is_admin,
        )
    except CommentError as e:
        raise handle_comment_error(e) from e

    noun = "comment" if len(removed) == 1 else "comments"
    return MessageResponse(message=f"Deleted {len(removed)} {noun}")
