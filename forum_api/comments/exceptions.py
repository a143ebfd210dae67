"""Comment system errors.

Each error carries a machine-readable ``code`` that the router maps to an
HTTP status (see ``dependencies.handle_comment_error``).
"""


class CommentError(Exception):
    """Base comment error."""

    def __init__(self, message: str, code: str = "comment_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class CommentNotFoundError(CommentError):
    """Comment not found."""

    def __init__(self, message: str = "Comment not found"):
        super().__init__(message, "comment_not_found")


class PermissionDeniedError(CommentError):
    """Requester may not perform the operation."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message, "permission_denied")


class CommentValidationError(CommentError):
    """Malformed input or a reference to a comment that does not exist."""

    def __init__(self, message: str = "Invalid comment data"):
        super().__init__(message, "validation_error")
