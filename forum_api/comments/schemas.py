"""Pydantic schemas for the comment API.

Fields are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import Comment, CommentNode, QuotedComment, TopicCommentStats
from .service import MAX_CONTENT_LENGTH, MIN_CONTENT_LENGTH


class CamelModel(BaseModel):
    """Base schema with camelCase aliases, accepting either name on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ==============================================================================
# Request Schemas
# ==============================================================================


class CreateCommentRequest(CamelModel):
    """Request to create a comment or a reply."""

    content: str = Field(
        ..., min_length=MIN_CONTENT_LENGTH, max_length=MAX_CONTENT_LENGTH
    )
    parent_id: str | None = None
    quoted_comment_id: str | None = None


# ==============================================================================
# Response Schemas
# ==============================================================================


class QuotedCommentResponse(CamelModel):
    """Quoted comment snapshot."""

    id: str
    content: str
    author: str
    author_id: str

    @classmethod
    def from_quote(cls, quote: QuotedComment) -> "QuotedCommentResponse":
        return cls(
            id=quote.comment_id,
            content=quote.content,
            author=quote.author_name,
            author_id=quote.author_id,
        )


class CommentResponse(CamelModel):
    """A single comment."""

    id: str
    content: str
    author: str
    author_id: str
    author_avatar: str
    topic_id: str
    parent_id: str | None = None
    created_at: datetime
    likes: int = 0
    is_liked: bool = False
    quoted_comment: QuotedCommentResponse | None = None

    @classmethod
    def from_comment(
        cls,
        comment: Comment,
        likes: int = 0,
        is_liked: bool = False,
    ) -> "CommentResponse":
        """Create response from a stored Comment."""
        return cls(
            id=comment.comment_id,
            content=comment.content,
            author=comment.author_name,
            author_id=comment.author_id,
            author_avatar=comment.author_avatar,
            topic_id=comment.topic_id,
            parent_id=comment.parent_id,
            created_at=comment.created_at,
            likes=likes,
            is_liked=is_liked,
            quoted_comment=(
                QuotedCommentResponse.from_quote(comment.quoted_comment)
                if comment.quoted_comment
                else None
            ),
        )


class CommentNodeResponse(CommentResponse):
    """Comment with its nested replies."""

    replies: list["CommentNodeResponse"] = Field(default_factory=list)
    replies_count: int = 0

    @classmethod
    def from_node(cls, node: CommentNode) -> "CommentNodeResponse":
        base = CommentResponse.from_comment(node.comment, node.likes, node.is_liked)
        return cls(
            **base.model_dump(),
            replies=[cls.from_node(reply) for reply in node.replies],
            replies_count=node.replies_count,
        )


class CommentTreeResponse(CamelModel):
    """All comments of a topic as a tree."""

    comments: list[CommentNodeResponse]


class LikeResponse(CamelModel):
    """Like state after a toggle."""

    likes: int
    is_liked: bool


class MessageResponse(CamelModel):
    """Simple message response."""

    message: str
    success: bool = True


class TopicStatsResponse(CamelModel):
    """Comment activity of a topic."""

    topic_id: str
    comments_count: int
    total_likes: int
    last_comment_at: datetime | None = None

    @classmethod
    def from_stats(cls, stats: TopicCommentStats) -> "TopicStatsResponse":
        return cls(
            topic_id=stats.topic_id,
            comments_count=stats.comments_count,
            total_likes=stats.total_likes,
            last_comment_at=stats.last_comment_at,
        )


class LikesReceivedResponse(CamelModel):
    """Likes received by an author across all comments."""

    user_id: str
    likes_received: int
