"""
Tests for posts: creation, edits, soft delete, likes, shares and reports.
"""

from unittest.mock import patch

import pytest
from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError

from socialnet.errors import InvalidArgument, NotFound
from socialnet.models import Notification, NotificationCategory, Post
from socialnet.services import engagement, graph


@pytest.fixture
def author(make_account):
    return make_account("bob")


@pytest.fixture
def post(db, author):
    return engagement.create_post(db, author.id, "hello world", tags=["#python", "fastapi"])


class TestPostLifecycle:
    """Create, edit and delete posts."""

    def test_create_appends_to_author_posts(self, db, author, post):
        assert post.id in author.post_ids
        assert post.tags == ["python", "fastapi"]
        assert post.deleted is False

    def test_create_needs_text_or_media(self, db, author):
        with pytest.raises(InvalidArgument):
            engagement.create_post(db, author.id, "   ")

        media_only = engagement.create_post(db, author.id, "", media=[{"kind": "image", "url": "http://x/1.png"}])
        assert media_only.media == [{"kind": "image", "url": "http://x/1.png"}]

    def test_bad_media_rejected(self, db, author):
        with pytest.raises(InvalidArgument, match="Media"):
            engagement.create_post(db, author.id, "x", media=[{"kind": "audio", "url": "http://x"}])

    def test_create_for_unknown_author(self, db):
        with pytest.raises(NotFound):
            engagement.create_post(db, 999, "hello")

    def test_edit_changes_only_supplied_fields(self, db, author, post):
        edited = engagement.edit_post(db, author.id, post.id, {"location": "Lisbon"})

        assert edited.location == "Lisbon"
        assert edited.body == "hello world"
        assert edited.tags == ["python", "fastapi"]

    def test_edit_by_other_account_is_not_found(self, db, make_account, post):
        other = make_account()
        with pytest.raises(NotFound):
            engagement.edit_post(db, other.id, post.id, {"body": "hijacked"})

    def test_edit_unknown_field(self, db, author, post):
        with pytest.raises(InvalidArgument, match="Unknown post fields"):
            engagement.edit_post(db, author.id, post.id, {"reported": False})

    def test_edit_cannot_empty_post(self, db, author, post):
        with pytest.raises(InvalidArgument):
            engagement.edit_post(db, author.id, post.id, {"body": ""})

    def test_soft_delete(self, db, author, post):
        engagement.delete_post(db, author.id, post.id)

        assert post.id not in author.post_ids
        assert db.get(Post, post.id) is not None
        with pytest.raises(NotFound):
            engagement.get_post(db, post.id)
        with pytest.raises(NotFound):
            engagement.delete_post(db, author.id, post.id)

    def test_delete_by_other_account(self, db, make_account, post):
        other = make_account()
        with pytest.raises(NotFound):
            engagement.delete_post(db, other.id, post.id)

    def test_list_posts_skips_deleted(self, db, author, post):
        gone = engagement.create_post(db, author.id, "gone")
        engagement.delete_post(db, author.id, gone.id)

        page = engagement.list_posts(db, 1, 10)

        assert [p.id for p in page.items] == [post.id]


class TestLikes:
    """Like is a toggle; each toggle adds or removes only the actor."""

    def test_like_then_unlike_restores_set(self, db, make_account, post):
        fan = make_account("fan")
        before = list(post.like_ids)

        first = engagement.toggle_like(db, fan.id, post.id)
        assert first.liked
        assert first.likes == before + [fan.id]

        second = engagement.toggle_like(db, fan.id, post.id)
        assert not second.liked
        assert second.likes == before

    def test_like_notifies_author(self, db, make_account, author, post):
        fan = make_account("fan")

        result = engagement.toggle_like(db, fan.id, post.id)

        assert result.notification.recipient_id == author.id
        assert result.notification.actor_id == fan.id
        assert result.notification.category is NotificationCategory.like
        assert result.notification.content == "fan liked your post"

    def test_unlike_does_not_notify(self, db, make_account, post):
        fan = make_account()
        engagement.toggle_like(db, fan.id, post.id)

        result = engagement.toggle_like(db, fan.id, post.id)

        assert result.notification is None
        assert db.query(Notification).count() == 1

    def test_self_like_has_no_notification(self, db, author, post):
        result = engagement.toggle_like(db, author.id, post.id)

        assert result.liked
        assert result.notification is None
        assert db.query(Notification).count() == 0

    def test_likes_from_many_accounts_commute(self, db, make_account, post):
        fans = [make_account() for _ in range(3)]
        for f in fans:
            engagement.toggle_like(db, f.id, post.id)
        engagement.toggle_like(db, fans[1].id, post.id)

        assert sorted(post.like_ids) == sorted([fans[0].id, fans[2].id])

    def test_like_deleted_post(self, db, make_account, author, post):
        engagement.delete_post(db, author.id, post.id)
        with pytest.raises(NotFound):
            engagement.toggle_like(db, make_account().id, post.id)

    def test_concurrent_duplicate_like_does_not_notify_twice(self, db, make_account, post):
        fan = make_account()
        engagement.toggle_like(db, fan.id, post.id)

        # the other request's unlike missed the row; its insert then hits the existing one
        with patch.object(engagement.POST_LIKES, "remove", return_value=False):
            raced = engagement.toggle_like(db, fan.id, post.id)

        assert raced.liked is False
        assert raced.notification is None
        assert raced.likes == [fan.id]
        assert db.query(Notification).count() == 1

    def test_like_survives_notification_failure(self, db, make_account, post):
        fan = make_account()

        def fail(mapper, connection, target):
            raise SQLAlchemyError("notifications table unavailable")

        event.listen(Notification, "before_insert", fail)
        try:
            result = engagement.toggle_like(db, fan.id, post.id)
        finally:
            event.remove(Notification, "before_insert", fail)

        assert result.liked
        assert result.likes == [fan.id]
        assert result.notification is None
        db.flush()
        assert db.query(Notification).count() == 0

    def test_scenario_follow_feed_like_unlike(self, db, make_account):
        a, b = make_account("alice"), make_account("bob")
        graph.follow(db, a.id, b.id)
        p = engagement.create_post(db, b.id, "bob's post")

        assert p.id in [x.id for x in graph.compute_feed(db, a.id, 1, 10).items]

        liked = engagement.toggle_like(db, a.id, p.id)
        assert liked.likes == [a.id]
        assert liked.notification.recipient_id == b.id
        assert liked.notification.actor_id == a.id
        assert liked.notification.category is NotificationCategory.like

        unliked = engagement.toggle_like(db, a.id, p.id)
        assert unliked.likes == []
        assert unliked.notification is None
        assert db.query(Notification).filter_by(category=NotificationCategory.like).count() == 1


class TestShares:
    """Shares are recorded once and never withdrawn."""

    def test_share_twice_records_once(self, db, make_account, post):
        fan = make_account()

        first = engagement.toggle_share(db, fan.id, post.id)
        second = engagement.toggle_share(db, fan.id, post.id)

        assert first.recorded and not second.recorded
        assert second.shares == [fan.id]

    def test_share_notifies_only_on_first_share(self, db, make_account, author, post):
        fan = make_account("fan")

        first = engagement.toggle_share(db, fan.id, post.id)
        second = engagement.toggle_share(db, fan.id, post.id)

        assert first.notification.category is NotificationCategory.share
        assert first.notification.recipient_id == author.id
        assert second.notification is None


class TestReports:
    """Only the first report is counted until a moderator dismisses it."""

    def test_three_reporters_count_once(self, db, make_account, post):
        reporters = [make_account() for _ in range(3)]

        results = [engagement.report_post(db, r.id, post.id) for r in reporters]

        assert [r.counted for r in results] == [True, False, False]
        assert all(r.reported for r in results)
        assert results[-1].report_count == 1
        assert post.report_count == 1

    def test_report_missing_post(self, db, make_account):
        with pytest.raises(NotFound):
            engagement.report_post(db, make_account().id, 555)
