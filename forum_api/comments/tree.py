"""Topic comment tree construction.

The tree shown to clients has exactly three levels:

    root comment -> reply -> sub-reply

Storage depth is unbounded, but anything below a sub-reply stays in the
store and is not attached to the tree. Sub-replies always carry an empty
``replies`` list and ``replies_count == 0``.
"""

from collections import defaultdict

from .models import CommentNode
from .store import CommentStore


def build_comment_tree(
    store: CommentStore,
    topic_id: str,
    viewer_id: str | None = None,
) -> list[CommentNode]:
    """Build the nested reply tree of a topic for one viewer.

    Roots and replies are each ordered by ``created_at`` ascending. The sort
    is stable over the topic's creation-order index, so comments with equal
    timestamps keep insertion order.

    Args:
        store: Comment store to read from
        topic_id: Topic whose comments are returned
        viewer_id: Requesting user; drives ``is_liked`` (False when None)

    Returns:
        Root nodes with replies and sub-replies attached. Unknown or empty
        topics give an empty list.
    """
    with store.lock:
        nodes = []
        for comment_id in store.topic_comment_ids(topic_id):
            comment = store.get(comment_id)
            if comment is None:
                continue
            nodes.append(
                CommentNode(
                    comment=comment,
                    likes=store.like_count(comment_id),
                    is_liked=store.is_liked_by(comment_id, viewer_id),
                )
            )

    if not nodes:
        return []

    roots = sorted(
        (node for node in nodes if node.comment.parent_id is None),
        key=lambda node: node.comment.created_at,
    )
    non_roots = sorted(
        (node for node in nodes if node.comment.parent_id is not None),
        key=lambda node: node.comment.created_at,
    )

    # Group once by parent; list order follows the sorted non-roots
    children: dict[str, list[CommentNode]] = defaultdict(list)
    for node in non_roots:
        children[node.comment.parent_id].append(node)

    for root in roots:
        root.replies = children.get(root.comment_id, [])
        root.replies_count = len(root.replies)
        for reply in root.replies:
            reply.replies = children.get(reply.comment_id, [])
            reply.replies_count = len(reply.replies)
            for sub_reply in reply.replies:
                sub_reply.replies = []
                sub_reply.replies_count = 0

    return roots
