"""Comment system service layer.

Business logic for:
- Comment creation with parent/quote validation
- Topic tree reads
- Like toggling
- Cascade deletion of a comment and all of its replies
- Topic and author statistics
"""

from typing import TYPE_CHECKING

import structlog

from .exceptions import (
    CommentNotFoundError,
    CommentValidationError,
    PermissionDeniedError,
)
from .models import Comment, CommentNode, TopicCommentStats, create_comment
from .store import CommentStore
from .tree import build_comment_tree


if TYPE_CHECKING:
    from forum_api.auth.schemas import ForumUser


logger = structlog.get_logger(__name__)


# ==============================================================================
# Constants
# ==============================================================================

MIN_CONTENT_LENGTH = 1
MAX_CONTENT_LENGTH = 1000


def validate_content(content: str) -> str:
    """Check the content length bounds (inclusive).

    Length is counted in code points, so an emoji counts as one character.

    Raises:
        CommentValidationError: If content is shorter than 1 or longer than 1000
    """
    if not MIN_CONTENT_LENGTH <= len(content) <= MAX_CONTENT_LENGTH:
        msg = (
            f"Content must be between {MIN_CONTENT_LENGTH} and "
            f"{MAX_CONTENT_LENGTH} characters"
        )
        raise CommentValidationError(msg)
    return content


# ==============================================================================
# Comment Service
# ==============================================================================


class CommentService:
    """Service for comment management on top of a ``CommentStore``."""

    def __init__(self, store: CommentStore):
        self.store = store

    # ==========================================================================
    # Comment CRUD
    # ==========================================================================

    def create_comment(
        self,
        topic_id: str,
        content: str,
        author: "ForumUser",
        parent_id: str | None = None,
        quoted_comment_id: str | None = None,
    ) -> Comment:
        """Create a new comment on a topic.

        The parent may be any existing comment at any depth. The parent's
        topic is not compared with ``topic_id``. Empty ``parent_id`` or
        ``quoted_comment_id`` values mean "none".

        Raises:
            CommentValidationError: Bad content length, unknown parent or
                unknown quoted comment
        """
        validate_content(content)
        parent_id = parent_id or None
        quoted_comment_id = quoted_comment_id or None

        # Parent lookup and insert are one atomic step so a concurrent
        # cascade delete cannot remove the parent in between
        with self.store.lock:
            if parent_id is not None and parent_id not in self.store:
                raise CommentValidationError("Parent comment not found")

            quoted = None
            if quoted_comment_id is not None:
                quoted_source = self.store.get(quoted_comment_id)
                if quoted_source is None:
                    raise CommentValidationError("Quoted comment not found")
                quoted = quoted_source.quote()

            comment = create_comment(
                topic_id=topic_id,
                author_id=author.id,
                author_name=author.name,
                content=content,
                parent_id=parent_id,
                author_avatar=author.avatar,
                quoted_comment=quoted,
            )
            self.store.put(comment)

        logger.info(
            "comment_created",
            comment_id=comment.comment_id,
            topic_id=topic_id,
            parent_id=parent_id,
            author_id=author.id,
        )
        return comment

    def get_comment(self, comment_id: str) -> Comment:
        comment = self.store.get(comment_id)
        if comment is None:
            raise CommentNotFoundError
        return comment

    def get_comment_tree(
        self, topic_id: str, viewer_id: str | None = None
    ) -> list[CommentNode]:
        """Get the three-level comment tree of a topic."""
        return build_comment_tree(self.store, topic_id, viewer_id)

    def delete_comment(
        self,
        comment_id: str,
        requester_id: str,
        requester_is_admin: bool = False,
    ) -> list[str]:
        """Delete a comment together with every transitive reply.

        Authors can delete their own comments; admins can delete any comment.
        Descendants are removed whatever their depth or topic.

        Returns:
            Ids of all removed comments, target first

        Raises:
            CommentNotFoundError: If the comment does not exist
            PermissionDeniedError: If requester is neither author nor admin
        """
        with self.store.lock:
            comment = self.store.get(comment_id)
            if comment is None:
                raise CommentNotFoundError

            if not requester_is_admin and comment.author_id != requester_id:
                raise PermissionDeniedError(
                    "You can only delete your own comments"
                )

            children = self.store.children_index()

            # Explicit stack: thread depth is user-controlled
            removed: list[str] = []
            pending = [comment_id]
            while pending:
                current = pending.pop()
                removed.append(current)
                pending.extend(children.get(current, ()))

            for removed_id in removed:
                self.store.remove(removed_id)

        logger.info(
            "comment_thread_deleted",
            comment_id=comment_id,
            topic_id=comment.topic_id,
            removed_count=len(removed),
            requester_id=requester_id,
            by_admin=requester_is_admin and comment.author_id != requester_id,
        )
        return removed

    # ==========================================================================
    # Likes
    # ==========================================================================

    def toggle_like(self, comment_id: str, user_id: str) -> tuple[int, bool]:
        """Like the comment, or remove the like if the user already liked it.

        Returns:
            Tuple of (like count, whether the user now likes the comment)

        Raises:
            CommentNotFoundError: If the comment does not exist
        """
        likes, is_liked = self.store.toggle_like(comment_id, user_id)
        logger.info(
            "comment_like_toggled",
            comment_id=comment_id,
            user_id=user_id,
            likes=likes,
            is_liked=is_liked,
        )
        return likes, is_liked

    # ==========================================================================
    # Statistics
    # ==========================================================================

    def get_topic_stats(self, topic_id: str) -> TopicCommentStats:
        """Comment count, total likes and latest comment time of a topic."""
        with self.store.lock:
            comment_ids = self.store.topic_comment_ids(topic_id)
            total_likes = sum(self.store.like_count(cid) for cid in comment_ids)
            timestamps = [
                comment.created_at
                for comment in map(self.store.get, comment_ids)
                if comment is not None
            ]

        return TopicCommentStats(
            topic_id=topic_id,
            comments_count=len(comment_ids),
            total_likes=total_likes,
            last_comment_at=max(timestamps) if timestamps else None,
        )

    def get_likes_received(self, user_id: str) -> int:
        """Total likes over every comment written by ``user_id``."""
        return sum(
            self.store.like_count(comment.comment_id)
            for comment in self.store.all_comments()
            if comment.author_id == user_id
        )
