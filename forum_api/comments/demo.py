"""Demo threads for local development.

Loaded at startup when ``COMMENTS_SEED_DEMO=true``. Topic "1" holds a reply
chain five levels deep, which shows the tree's three-level cap: the last two
comments exist in the store but are not part of the rendered tree.
"""

from datetime import UTC, datetime, timedelta

import structlog

from .models import Comment, avatar_token
from .store import CommentStore


logger = structlog.get_logger(__name__)


# (id, topic, parent, author id, author name, minutes ago, content)
DEMO_COMMENTS: list[tuple[str, str, str | None, str, str, int, str]] = [
    ("demo1", "1", None, "demo_user_123", "Joao", 120,
     "Great comparison! Really helps when choosing a tool."),
    ("demo2", "1", "demo1", "user_carlos", "Carlos", 110,
     "Agreed! Midjourney really stands out for artwork."),
    ("demo3", "1", "demo2", "admin_vitoca_456", "Admin", 100,
     "Thanks for the comments! The feedback helps a lot."),
    ("demo4", "1", "demo3", "demo_user_123", "Joao", 90,
     "Can I add a reply here at level 4?"),
    ("demo5", "1", "demo4", "user_eduardo", "Eduardo", 80,
     "And me at level 5! Testing depth."),
    ("feat1_comment1", "demo_featured_1", None, "user_maria_789", "Maria Santos", 60,
     "Excellent tutorial! GPT-4 makes automation much easier."),
    ("feat1_comment2", "demo_featured_1", "feat1_comment1", "user_carlos",
     "Carlos Silva", 50,
     "I rolled this out at my company following the guide. Saved hours of work!"),
    ("feat1_comment3", "demo_featured_1", None, "user_ana_202", "Ana Paula", 40,
     "Any tips for integrating with custom APIs?"),
    ("feat2_comment1", "demo_featured_2", None, "user_pedro_101", "Pedro Costa", 30,
     "Great comparative analysis! It helped me pick the right tool."),
    ("feat2_comment2", "demo_featured_2", "feat2_comment1", "user_eduardo",
     "Eduardo Lima", 20,
     "Same as Pedro. The comparison table was really useful."),
]

DEMO_LIKES: dict[str, set[str]] = {
    "demo1": {"admin_vitoca_456", "user_maria_789", "user_pedro_101", "user_ana_202"},
    "demo3": {"demo_user_123", "user_maria_789", "user_pedro_101", "user_ana_202"},
    "demo4": {"user_carlos", "user_pedro_101"},
    "demo5": {"demo_user_123", "admin_vitoca_456"},
    "feat1_comment1": {"demo_user_123", "user_carlos", "user_pedro_101"},
    "feat1_comment2": {"user_maria_789", "user_ana_202"},
    "feat1_comment3": {"demo_user_123"},
    "feat2_comment1": {"user_maria_789", "user_carlos", "admin_vitoca_456"},
    "feat2_comment2": {"user_pedro_101", "user_ana_202"},
}

_BUILDER_ASSETS = "https://cdn.builder.io/api/v1/image/assets%2F4339d2c6c4aa4bf4b61f03263843eb86%2F"
_DICEBEAR = "https://api.dicebear.com/7.x/avataaars/svg?seed="

# Profile pictures of the demo authors, by comment id
DEMO_AVATARS: dict[str, str] = {
    "demo1": f"{_BUILDER_ASSETS}477cc7711bf64b4d94e766b55d18ca30?format=webp&width=800",
    "demo2": f"{_BUILDER_ASSETS}6dcd5f5eb7214b0f8018d668c517123d?format=webp&width=800",
    "demo3": f"{_BUILDER_ASSETS}554fd210b6d1444b8def1042ce46dfda?format=webp&width=800",
    "demo4": f"{_BUILDER_ASSETS}477cc7711bf64b4d94e766b55d18ca30?format=webp&width=800",
    "demo5": f"{_BUILDER_ASSETS}8b93635144674ca9ad3fa486245b728d?format=webp&width=800",
    "feat1_comment1": f"{_DICEBEAR}maria",
    "feat1_comment2": f"{_DICEBEAR}carlos",
    "feat1_comment3": f"{_DICEBEAR}ana",
    "feat2_comment1": f"{_DICEBEAR}pedro",
    "feat2_comment2": f"{_DICEBEAR}eduardo",
}


def seed_demo_comments(store: CommentStore, now: datetime | None = None) -> int:
    """Replace the store contents with the demo threads.

    Returns:
        Number of comments loaded
    """
    now = now or datetime.now(UTC)

    with store.lock:
        store.clear()
        for comment_id, topic_id, parent_id, author_id, name, minutes, content in (
            DEMO_COMMENTS
        ):
            store.put(
                Comment(
                    comment_id=comment_id,
                    topic_id=topic_id,
                    parent_id=parent_id,
                    author_id=author_id,
                    author_name=name,
                    author_avatar=avatar_token(name, DEMO_AVATARS.get(comment_id)),
                    content=content,
                    created_at=now - timedelta(minutes=minutes),
                )
            )
        for comment_id, user_ids in DEMO_LIKES.items():
            store.set_likes(comment_id, user_ids)

    logger.info("demo_comments_seeded", comments=len(DEMO_COMMENTS))
    return len(DEMO_COMMENTS)
