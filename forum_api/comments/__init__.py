"""Comment system module.

Provides the forum's threaded comments:
- In-memory store with topic and like indices
- Three-level topic trees
- Likes
- Cascade deletion of whole reply chains

Note: Router is not exported here to avoid circular imports.
Import directly from forum_api.comments.router when needed.
"""

from .exceptions import (
    CommentError,
    CommentNotFoundError,
    CommentValidationError,
    PermissionDeniedError,
)
from .models import Comment, CommentNode, QuotedComment, TopicCommentStats
from .service import CommentService
from .store import CommentStore
from .tree import build_comment_tree


__all__ = [
    "Comment",
    "CommentError",
    "CommentNode",
    "CommentNotFoundError",
    "CommentService",
    "CommentStore",
    "CommentValidationError",
    "PermissionDeniedError",
    "QuotedComment",
    "TopicCommentStats",
    "build_comment_tree",
]
