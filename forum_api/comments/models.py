"""Entities for the in-memory comment system.

Architecture: adjacency list
- ``parent_id`` references the parent comment (None for root comments)
- Author info is denormalized onto each comment at creation
- Likes are not stored on the comment; they are derived from the like index
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4


@dataclass(frozen=True)
class QuotedComment:
    """Snapshot of a quoted comment, taken when the quoting comment is created."""

    comment_id: str
    content: str
    author_name: str
    author_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.comment_id,
            "content": self.content,
            "author": self.author_name,
            "author_id": self.author_id,
        }


@dataclass(frozen=True)
class Comment:
    """Stored comment record.

    Immutable once created: content, parent and topic never change.
    """

    comment_id: str
    topic_id: str
    parent_id: str | None
    author_id: str
    author_name: str
    author_avatar: str
    content: str
    created_at: datetime
    quoted_comment: QuotedComment | None = None

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def quote(self) -> QuotedComment:
        """Take a quote snapshot of this comment."""
        return QuotedComment(
            comment_id=self.comment_id,
            content=self.content,
            author_name=self.author_name,
            author_id=self.author_id,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "comment_id": self.comment_id,
            "topic_id": self.topic_id,
            "parent_id": self.parent_id,
            "author_id": self.author_id,
            "author_name": self.author_name,
            "author_avatar": self.author_avatar,
            "content": self.content,
            "created_at": self.created_at.isoformat(),
            "quoted_comment": (
                self.quoted_comment.to_dict() if self.quoted_comment else None
            ),
        }


@dataclass
class CommentNode:
    """A comment as presented in a topic tree, decorated for one viewer."""

    comment: Comment
    likes: int
    is_liked: bool
    replies: list["CommentNode"] = field(default_factory=list)
    replies_count: int = 0

    @property
    def comment_id(self) -> str:
        return self.comment.comment_id


@dataclass(frozen=True)
class TopicCommentStats:
    """Aggregated comment activity for a topic."""

    topic_id: str
    comments_count: int
    total_likes: int
    last_comment_at: datetime | None


# ==============================================================================
# Factory Functions
# ==============================================================================


def generate_comment_id() -> str:
    """Generate an opaque comment identifier."""
    return str(uuid4())


def user_initials(name: str) -> str:
    """Upper-cased initials of each word in ``name`` ("Ana Paula" -> "AP")."""
    return "".join(part[0] for part in name.split()).upper()


def avatar_token(name: str, avatar_url: str | None = None) -> str:
    """Avatar shown next to a comment: the profile picture URL or the initials."""
    return avatar_url or user_initials(name)


def create_comment(
    topic_id: str,
    author_id: str,
    author_name: str,
    content: str,
    parent_id: str | None = None,
    author_avatar: str | None = None,
    quoted_comment: QuotedComment | None = None,
) -> Comment:
    """Create a new comment with a fresh id and the current UTC timestamp."""
    return Comment(
        comment_id=generate_comment_id(),
        topic_id=topic_id,
        parent_id=parent_id,
        author_id=author_id,
        author_name=author_name,
        author_avatar=avatar_token(author_name, author_avatar),
        content=content,
        created_at=datetime.now(UTC),
        quoted_comment=quoted_comment,
    )
