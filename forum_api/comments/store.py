"""In-memory comment storage.

Three indices share one lock:
- comments: comment id -> Comment
- topic index: topic id -> comment ids in creation order
- like index: comment id -> ids of users who liked it

Nothing is persisted; state lives as long as the store object. One store is
built per application in the lifespan and injected into the service, so tests
can create isolated instances.
"""

import threading
from collections.abc import Iterator

from .exceptions import CommentNotFoundError
from .models import Comment


class CommentStore:
    """Process-lifetime storage for comments, topic ordering and likes.

    ``lock`` is reentrant and public: callers that need check-then-act
    atomicity across several operations (parent lookup + put, cascade delete)
    hold it around the whole sequence.
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._comments: dict[str, Comment] = {}
        self._topic_comments: dict[str, list[str]] = {}
        self._likes: dict[str, set[str]] = {}

    def __len__(self) -> int:
        return len(self._comments)

    def __contains__(self, comment_id: object) -> bool:
        return comment_id in self._comments

    # ==========================================================================
    # Comments
    # ==========================================================================

    def put(self, comment: Comment) -> None:
        """Store a comment and append its id to the topic index."""
        with self.lock:
            self._comments[comment.comment_id] = comment
            self._topic_comments.setdefault(comment.topic_id, []).append(
                comment.comment_id
            )

    def get(self, comment_id: str) -> Comment | None:
        return self._comments.get(comment_id)

    def remove(self, comment_id: str) -> bool:
        """Remove a comment from all three indices.

        Returns:
            True if the comment existed. Removing an unknown id is a no-op.
        """
        with self.lock:
            comment = self._comments.pop(comment_id, None)
            if comment is None:
                return False

            self._likes.pop(comment_id, None)

            topic_ids = self._topic_comments.get(comment.topic_id)
            if topic_ids is not None:
                self._topic_comments[comment.topic_id] = [
                    cid for cid in topic_ids if cid != comment_id
                ]
            return True

    def all_comments(self) -> Iterator[Comment]:
        with self.lock:
            snapshot = list(self._comments.values())
        return iter(snapshot)

    def topic_comment_ids(self, topic_id: str) -> list[str]:
        """Comment ids of a topic in creation order (a copy)."""
        with self.lock:
            return list(self._topic_comments.get(topic_id, ()))

    def children_index(self) -> dict[str, list[str]]:
        """Map every parent id to the ids of its direct replies, across topics."""
        children: dict[str, list[str]] = {}
        with self.lock:
            for comment in self._comments.values():
                if comment.parent_id is not None:
                    children.setdefault(comment.parent_id, []).append(
                        comment.comment_id
                    )
        return children

    def clear(self) -> None:
        with self.lock:
            self._comments.clear()
            self._topic_comments.clear()
            self._likes.clear()

    # ==========================================================================
    # Likes
    # ==========================================================================

    def toggle_like(self, comment_id: str, user_id: str) -> tuple[int, bool]:
        """Flip ``user_id``'s like on a comment.

        Returns:
            Tuple of (like count after the toggle, whether the user now likes it)

        Raises:
            CommentNotFoundError: If the comment does not exist
        """
        with self.lock:
            if comment_id not in self._comments:
                raise CommentNotFoundError

            likes = self._likes.setdefault(comment_id, set())
            if user_id in likes:
                likes.discard(user_id)
                is_liked = False
            else:
                likes.add(user_id)
                is_liked = True
            return len(likes), is_liked

    def set_likes(self, comment_id: str, user_ids: set[str]) -> None:
        """Replace the like set of an existing comment."""
        with self.lock:
            if comment_id not in self._comments:
                raise CommentNotFoundError
            self._likes[comment_id] = set(user_ids)

    def like_count(self, comment_id: str) -> int:
        return len(self._likes.get(comment_id, ()))

    def is_liked_by(self, comment_id: str, user_id: str | None) -> bool:
        if user_id is None:
            return False
        return user_id in self._likes.get(comment_id, ())
