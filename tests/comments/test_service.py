"""Tests for the comment service."""

import threading
from datetime import UTC, datetime, timedelta

import pytest

from forum_api.auth.schemas import ForumUser
from forum_api.comments.demo import DEMO_AVATARS, seed_demo_comments
from forum_api.comments.exceptions import (
    CommentNotFoundError,
    CommentValidationError,
    PermissionDeniedError,
)
from forum_api.comments.service import CommentService, validate_content
from forum_api.comments.store import CommentStore
from forum_api.comments.tree import build_comment_tree


class TestValidateContent:
    """Tests for content length bounds."""

    @pytest.mark.parametrize("length", [1, 500, 1000])
    def test_accepts_lengths_within_bounds(self, length: int) -> None:
        """Lengths from 1 to 1000 inclusive are accepted."""
        content = "x" * length
        assert validate_content(content) == content

    @pytest.mark.parametrize("length", [0, 1001])
    def test_rejects_lengths_outside_bounds(self, length: int) -> None:
        """Empty and over-long content is rejected."""
        with pytest.raises(CommentValidationError, match="between 1 and 1000"):
            validate_content("x" * length)

    def test_counts_code_points(self) -> None:
        """Each emoji counts as a single character."""
        content = "\U0001f600" * 1000
        assert validate_content(content) == content


class TestCreateComment:
    """Tests for comment creation."""

    def test_create_root_comment(
        self, comment_service: CommentService, store: CommentStore, alice: ForumUser
    ) -> None:
        """A root comment is stored with the author's data denormalized."""
        # Act
        comment = comment_service.create_comment("topic_1", "Hello forum", alice)

        # Assert
        assert comment.parent_id is None
        assert comment.topic_id == "topic_1"
        assert comment.author_id == "user_alice"
        assert comment.author_name == "Alice Martins"
        assert comment.author_avatar == "AM"
        assert comment.created_at.tzinfo is not None
        assert store.get(comment.comment_id) == comment
        assert store.topic_comment_ids("topic_1") == [comment.comment_id]

    def test_avatar_url_is_kept(
        self, comment_service: CommentService
    ) -> None:
        """A profile picture URL wins over initials."""
        author = ForumUser(id="u", name="Ana", avatar="https://cdn.example.com/a.png")

        comment = comment_service.create_comment("topic_1", "Hi", author)

        assert comment.author_avatar == "https://cdn.example.com/a.png"

    def test_ids_are_unique(
        self, comment_service: CommentService, alice: ForumUser
    ) -> None:
        """Every comment gets a fresh id."""
        created = {
            comment_service.create_comment("topic_1", "Same text", alice).comment_id
            for _ in range(20)
        }
        assert len(created) == 20

    @pytest.mark.parametrize("length", [1, 1000])
    def test_boundary_lengths_succeed(
        self, comment_service: CommentService, alice: ForumUser, length: int
    ) -> None:
        """Boundary lengths are valid content."""
        comment = comment_service.create_comment("topic_1", "y" * length, alice)
        assert len(comment.content) == length

    @pytest.mark.parametrize("length", [0, 1001])
    def test_invalid_length_stores_nothing(
        self,
        comment_service: CommentService,
        store: CommentStore,
        alice: ForumUser,
        length: int,
    ) -> None:
        """Rejected comments leave the store untouched."""
        with pytest.raises(CommentValidationError):
            comment_service.create_comment("topic_1", "y" * length, alice)
        assert len(store) == 0

    def test_reply_to_existing_parent(
        self, comment_service: CommentService, alice: ForumUser, bob: ForumUser
    ) -> None:
        """Replies reference their parent."""
        root = comment_service.create_comment("topic_1", "Root", alice)

        reply = comment_service.create_comment(
            "topic_1", "Reply", bob, parent_id=root.comment_id
        )

        assert reply.parent_id == root.comment_id
        assert reply.is_root is False

    def test_unknown_parent_rejected(
        self, comment_service: CommentService, store: CommentStore, alice: ForumUser
    ) -> None:
        """Replying to a missing comment fails without storing anything."""
        with pytest.raises(CommentValidationError, match="Parent comment not found"):
            comment_service.create_comment(
                "topic_1", "Reply", alice, parent_id="missing"
            )
        assert len(store) == 0

    def test_parent_in_other_topic_allowed(
        self, comment_service: CommentService, alice: ForumUser
    ) -> None:
        """The parent's topic is not checked against the new comment's topic."""
        root = comment_service.create_comment("topic_1", "Root", alice)

        reply = comment_service.create_comment(
            "topic_2", "Reply", alice, parent_id=root.comment_id
        )

        assert reply.topic_id == "topic_2"
        assert reply.parent_id == root.comment_id

    def test_quote_snapshots_quoted_comment(
        self, comment_service: CommentService, alice: ForumUser, bob: ForumUser
    ) -> None:
        """Quoting copies the quoted comment's content and author."""
        original = comment_service.create_comment("topic_1", "Original point", alice)

        quoting = comment_service.create_comment(
            "topic_1", "I agree", bob, quoted_comment_id=original.comment_id
        )

        assert quoting.quoted_comment is not None
        assert quoting.quoted_comment.comment_id == original.comment_id
        assert quoting.quoted_comment.content == "Original point"
        assert quoting.quoted_comment.author_name == "Alice Martins"
        assert quoting.quoted_comment.author_id == "user_alice"

    def test_quote_survives_quoted_comment_deletion(
        self, comment_service: CommentService, alice: ForumUser, bob: ForumUser
    ) -> None:
        """The snapshot stays after the quoted comment is gone."""
        original = comment_service.create_comment("topic_1", "Original", alice)
        quoting = comment_service.create_comment(
            "topic_1", "Quote", bob, quoted_comment_id=original.comment_id
        )

        comment_service.delete_comment(original.comment_id, alice.id)

        stored = comment_service.get_comment(quoting.comment_id)
        assert stored.quoted_comment is not None
        assert stored.quoted_comment.content == "Original"

    def test_unknown_quote_rejected(
        self, comment_service: CommentService, alice: ForumUser
    ) -> None:
        """Quoting a missing comment fails."""
        with pytest.raises(CommentValidationError, match="Quoted comment not found"):
            comment_service.create_comment(
                "topic_1", "Quote", alice, quoted_comment_id="missing"
            )

    def test_empty_parent_id_creates_root(
        self, comment_service: CommentService, alice: ForumUser
    ) -> None:
        """An empty parent reference is the same as no parent."""
        comment = comment_service.create_comment(
            "topic_1", "Root", alice, parent_id=""
        )

        assert comment.parent_id is None
        assert comment.is_root is True

    def test_empty_quoted_comment_id_is_ignored(
        self, comment_service: CommentService, alice: ForumUser
    ) -> None:
        """An empty quote reference quotes nothing."""
        comment = comment_service.create_comment(
            "topic_1", "No quote", alice, quoted_comment_id=""
        )

        assert comment.quoted_comment is None


class TestGetComment:
    """Tests for single comment lookup."""

    def test_unknown_comment(self, comment_service: CommentService) -> None:
        """Missing ids raise CommentNotFoundError."""
        with pytest.raises(CommentNotFoundError):
            comment_service.get_comment("missing")


class TestDeleteComment:
    """Tests for cascade deletion."""

    def _chain(
        self, service: CommentService, author: ForumUser, depth: int
    ) -> list[str]:
        parent = None
        created = []
        for level in range(depth):
            comment = service.create_comment(
                "topic_1", f"level {level}", author, parent_id=parent
            )
            parent = comment.comment_id
            created.append(parent)
        return created

    def test_cascade_removes_whole_chain(
        self, comment_service: CommentService, store: CommentStore, alice: ForumUser
    ) -> None:
        """Deleting a root removes every descendant, hidden levels included."""
        # Arrange
        chain = self._chain(comment_service, alice, depth=5)

        # Act
        removed = comment_service.delete_comment(chain[0], alice.id)

        # Assert
        assert removed[0] == chain[0]
        assert sorted(removed) == sorted(chain)
        assert len(store) == 0
        assert store.topic_comment_ids("topic_1") == []

    def test_cascade_removes_replies_by_other_authors(
        self,
        comment_service: CommentService,
        store: CommentStore,
        alice: ForumUser,
        bob: ForumUser,
    ) -> None:
        """Ownership is only checked on the target, not on its descendants."""
        root = comment_service.create_comment("topic_1", "Root", alice)
        reply = comment_service.create_comment(
            "topic_1", "Reply", bob, parent_id=root.comment_id
        )

        comment_service.delete_comment(root.comment_id, alice.id)

        assert reply.comment_id not in store

    def test_cascade_follows_replies_in_other_topics(
        self,
        comment_service: CommentService,
        store: CommentStore,
        alice: ForumUser,
    ) -> None:
        """Cross-topic replies are removed with their parent."""
        root = comment_service.create_comment("topic_1", "Root", alice)
        reply = comment_service.create_comment(
            "topic_2", "Reply", alice, parent_id=root.comment_id
        )

        comment_service.delete_comment(root.comment_id, alice.id)

        assert reply.comment_id not in store
        assert store.topic_comment_ids("topic_2") == []

    def test_leaf_delete_removes_only_leaf(
        self,
        comment_service: CommentService,
        store: CommentStore,
        alice: ForumUser,
    ) -> None:
        """A comment without replies is removed alone."""
        root = comment_service.create_comment("topic_1", "Root", alice)
        leaf = comment_service.create_comment(
            "topic_1", "Leaf", alice, parent_id=root.comment_id
        )

        removed = comment_service.delete_comment(leaf.comment_id, alice.id)

        assert removed == [leaf.comment_id]
        assert store.topic_comment_ids("topic_1") == [root.comment_id]

    def test_delete_drops_likes(
        self,
        comment_service: CommentService,
        store: CommentStore,
        alice: ForumUser,
        bob: ForumUser,
    ) -> None:
        """Likes of removed comments disappear."""
        root = comment_service.create_comment("topic_1", "Root", alice)
        comment_service.toggle_like(root.comment_id, bob.id)

        comment_service.delete_comment(root.comment_id, alice.id)

        assert store.like_count(root.comment_id) == 0

    def test_non_author_forbidden(
        self,
        comment_service: CommentService,
        store: CommentStore,
        alice: ForumUser,
        bob: ForumUser,
    ) -> None:
        """Other users cannot delete the comment."""
        root = comment_service.create_comment("topic_1", "Root", alice)

        with pytest.raises(PermissionDeniedError):
            comment_service.delete_comment(root.comment_id, bob.id)
        assert root.comment_id in store

    def test_admin_can_delete_any_comment(
        self,
        comment_service: CommentService,
        store: CommentStore,
        alice: ForumUser,
        admin: ForumUser,
    ) -> None:
        """Admins moderate every thread."""
        root = comment_service.create_comment("topic_1", "Root", alice)

        removed = comment_service.delete_comment(
            root.comment_id, admin.id, requester_is_admin=True
        )

        assert removed == [root.comment_id]
        assert len(store) == 0

    def test_unknown_comment(
        self, comment_service: CommentService, alice: ForumUser
    ) -> None:
        """Deleting a missing comment raises CommentNotFoundError."""
        with pytest.raises(CommentNotFoundError):
            comment_service.delete_comment("missing", alice.id)

    def test_second_delete_not_found(
        self, comment_service: CommentService, alice: ForumUser
    ) -> None:
        """A deleted comment cannot be deleted again."""
        root = comment_service.create_comment("topic_1", "Root", alice)
        comment_service.delete_comment(root.comment_id, alice.id)

        with pytest.raises(CommentNotFoundError):
            comment_service.delete_comment(root.comment_id, alice.id)

    def test_deep_chain_does_not_recurse(
        self, comment_service: CommentService, store: CommentStore, alice: ForumUser
    ) -> None:
        """Chains deeper than the interpreter's recursion limit are deleted."""
        chain = self._chain(comment_service, alice, depth=2000)

        removed = comment_service.delete_comment(chain[0], alice.id)

        assert len(removed) == 2000
        assert len(store) == 0


class TestAtomicity:
    """Tests for creation and cascade delete running under the store lock."""

    def _hold_lock(
        self, store: CommentStore
    ) -> tuple[threading.Thread, threading.Event]:
        """Hold ``store.lock`` from another thread until the returned event is set."""
        acquired = threading.Event()
        release = threading.Event()

        def holder() -> None:
            with store.lock:
                acquired.set()
                release.wait(timeout=5)

        thread = threading.Thread(target=holder)
        thread.start()
        assert acquired.wait(timeout=5)
        return thread, release

    def test_create_waits_for_lock(
        self, comment_service: CommentService, store: CommentStore, alice: ForumUser
    ) -> None:
        """Parent check and insert do not run while another thread holds the lock."""
        # Arrange
        root = comment_service.create_comment("topic_1", "Root", alice)
        holder, release = self._hold_lock(store)

        # Act
        writer = threading.Thread(
            target=comment_service.create_comment,
            args=("topic_1", "Reply", alice, root.comment_id),
        )
        writer.start()
        writer.join(timeout=0.2)

        # Assert
        assert writer.is_alive()
        assert len(store) == 1

        release.set()
        writer.join(timeout=5)
        holder.join(timeout=5)
        assert not writer.is_alive()
        assert len(store) == 2

    def test_cascade_delete_waits_for_lock(
        self, comment_service: CommentService, store: CommentStore, alice: ForumUser
    ) -> None:
        """Cascade delete does not start while another thread holds the lock."""
        root = comment_service.create_comment("topic_1", "Root", alice)
        comment_service.create_comment(
            "topic_1", "Reply", alice, parent_id=root.comment_id
        )
        holder, release = self._hold_lock(store)

        deleter = threading.Thread(
            target=comment_service.delete_comment, args=(root.comment_id, alice.id)
        )
        deleter.start()
        deleter.join(timeout=0.2)

        assert deleter.is_alive()
        assert len(store) == 2

        release.set()
        deleter.join(timeout=5)
        holder.join(timeout=5)
        assert len(store) == 0

    def test_concurrent_replies_and_delete_leave_no_orphans(
        self, comment_service: CommentService, store: CommentStore, alice: ForumUser
    ) -> None:
        """Replies racing a cascade delete never outlive their parent."""
        # Arrange
        root = comment_service.create_comment("topic_1", "Root", alice)
        started = threading.Event()

        def reply_chain() -> None:
            parent_id = root.comment_id
            for index in range(500):
                try:
                    reply = comment_service.create_comment(
                        "topic_1", f"reply {index}", alice, parent_id=parent_id
                    )
                except CommentValidationError:
                    return
                parent_id = reply.comment_id
                if index == 20:
                    started.set()

        def delete_root() -> None:
            started.wait(timeout=5)
            comment_service.delete_comment(root.comment_id, alice.id)

        # Act
        threads = [
            threading.Thread(target=reply_chain),
            threading.Thread(target=delete_root),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        # Assert
        assert root.comment_id not in store
        for comment in store.all_comments():
            assert comment.parent_id is None or comment.parent_id in store
        for comment_id in store.topic_comment_ids("topic_1"):
            assert comment_id in store


class TestToggleLike:
    """Tests for like toggling through the service."""

    def test_toggle(
        self, comment_service: CommentService, alice: ForumUser, bob: ForumUser
    ) -> None:
        """Like, then unlike."""
        root = comment_service.create_comment("topic_1", "Root", alice)

        assert comment_service.toggle_like(root.comment_id, bob.id) == (1, True)
        assert comment_service.toggle_like(root.comment_id, bob.id) == (0, False)

    def test_unknown_comment(self, comment_service: CommentService) -> None:
        """Liking a missing comment raises CommentNotFoundError."""
        with pytest.raises(CommentNotFoundError):
            comment_service.toggle_like("missing", "user_bob")


class TestStatistics:
    """Tests for topic and author statistics."""

    def test_topic_stats(
        self, comment_service: CommentService, alice: ForumUser, bob: ForumUser
    ) -> None:
        """Counts comments and likes, reports the newest timestamp."""
        first = comment_service.create_comment("topic_1", "First", alice)
        second = comment_service.create_comment("topic_1", "Second", bob)
        comment_service.toggle_like(first.comment_id, bob.id)
        comment_service.toggle_like(second.comment_id, alice.id)
        comment_service.toggle_like(second.comment_id, bob.id)

        stats = comment_service.get_topic_stats("topic_1")

        assert stats.topic_id == "topic_1"
        assert stats.comments_count == 2
        assert stats.total_likes == 3
        assert stats.last_comment_at == max(first.created_at, second.created_at)

    def test_empty_topic_stats(self, comment_service: CommentService) -> None:
        """Topics without comments report zeros and no timestamp."""
        stats = comment_service.get_topic_stats("nope")

        assert stats.comments_count == 0
        assert stats.total_likes == 0
        assert stats.last_comment_at is None

    def test_likes_received(
        self,
        comment_service: CommentService,
        alice: ForumUser,
        bob: ForumUser,
        admin: ForumUser,
    ) -> None:
        """Sums likes over the author's comments in every topic."""
        one = comment_service.create_comment("topic_1", "One", alice)
        two = comment_service.create_comment("topic_2", "Two", alice)
        other = comment_service.create_comment("topic_1", "Other", bob)
        comment_service.toggle_like(one.comment_id, bob.id)
        comment_service.toggle_like(two.comment_id, bob.id)
        comment_service.toggle_like(two.comment_id, admin.id)
        comment_service.toggle_like(other.comment_id, alice.id)

        assert comment_service.get_likes_received(alice.id) == 3
        assert comment_service.get_likes_received(bob.id) == 1
        assert comment_service.get_likes_received("nobody") == 0


class TestDemoSeed:
    """Tests for the demo threads."""

    def test_seed_loads_threads(self, store: CommentStore) -> None:
        """Seeding loads all demo comments with likes."""
        now = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)

        loaded = seed_demo_comments(store, now=now)

        assert loaded == len(store) == 10
        assert store.like_count("demo1") == 4
        assert store.get("demo1").created_at == now - timedelta(minutes=120)

    def test_seed_replaces_existing_state(
        self, comment_service: CommentService, store: CommentStore, alice: ForumUser
    ) -> None:
        """Seeding starts from an empty store."""
        comment_service.create_comment("topic_1", "Before seeding", alice)

        seed_demo_comments(store)

        assert store.topic_comment_ids("topic_1") == []
        assert len(store) == 10

    def test_demo_chain_renders_three_levels(self, store: CommentStore) -> None:
        """The five-deep demo chain is capped at sub-replies."""
        seed_demo_comments(store)

        tree = build_comment_tree(store, "1", viewer_id="admin_vitoca_456")

        assert [node.comment_id for node in tree] == ["demo1"]
        assert tree[0].is_liked is True
        reply = tree[0].replies[0]
        assert reply.comment_id == "demo2"
        assert [node.comment_id for node in reply.replies] == ["demo3"]
        assert reply.replies[0].replies == []
        assert "demo5" in store

    def test_demo_statistics(self, comment_service: CommentService) -> None:
        """Stats and likes received over the demo data."""
        now = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)
        seed_demo_comments(comment_service.store, now=now)

        stats = comment_service.get_topic_stats("1")

        assert stats.comments_count == 5
        assert stats.total_likes == 12
        assert stats.last_comment_at == now - timedelta(minutes=80)
        assert comment_service.get_likes_received("demo_user_123") == 6

    def test_demo_avatars(self, store: CommentStore) -> None:
        """Demo authors carry their profile picture URLs."""
        seed_demo_comments(store)

        assert store.get("demo1").author_avatar == DEMO_AVATARS["demo1"]
        assert store.get("feat1_comment1").author_avatar.startswith("https://")
        assert all(
            comment.author_avatar.startswith("https://")
            for comment in store.all_comments()
        )
