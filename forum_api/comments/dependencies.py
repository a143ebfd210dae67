"""FastAPI dependencies for the comment system."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .exceptions import CommentError
from .service import CommentService


async def get_comment_service(request: Request) -> CommentService:
    """Get comment service from app state."""
    app_state = request.app.state
    if not getattr(app_state, "comment_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Comment service not available",
        )
    return app_state.comment_service


CommentServiceDep = Annotated[CommentService, Depends(get_comment_service)]


def handle_comment_error(error: CommentError) -> HTTPException:
    """Convert comment errors to HTTP exceptions."""
    status_map = {
        "comment_not_found": status.HTTP_404_NOT_FOUND,
        "permission_denied": status.HTTP_403_FORBIDDEN,
        "validation_error": status.HTTP_400_BAD_REQUEST,
    }

    status_code = status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(
        status_code=status_code,
        detail=error.message,
    )
