"""
Tests for moderation actions and analytics.
"""

from datetime import datetime, timedelta

import pytest

from socialnet.errors import InvalidOperation, NotFound
from socialnet.services import comments, engagement, moderation


@pytest.fixture
def content(db, make_account):
    author, reader = make_account("author"), make_account("reader")
    post = engagement.create_post(db, author.id, "questionable")
    comment = comments.add_comment(db, reader.id, post.id, "also questionable").comment
    return author, reader, post, comment


class TestReports:
    def test_report_then_dismiss_scenario(self, db, make_account, content):
        _, _, post, _ = content
        a, c = make_account("a_reporter"), make_account("c_reporter")

        first = engagement.report_post(db, a.id, post.id)
        assert (first.reported, first.report_count) == (True, 1)

        second = engagement.report_post(db, c.id, post.id)
        assert second.report_count == 1

        moderation.dismiss_report(db, "post", post.id)
        assert post.reported is False
        assert post.report_count == 0

    def test_reported_after_dismiss_counts_again(self, db, make_account, content):
        _, reader, post, _ = content
        engagement.report_post(db, reader.id, post.id)
        moderation.dismiss_report(db, "post", post.id)

        again = engagement.report_post(db, reader.id, post.id)

        assert again.counted and again.report_count == 1

    def test_list_reported_by_kind(self, db, content):
        _, reader, post, comment = content
        engagement.report_post(db, reader.id, post.id)
        comments.report_comment(db, reader.id, comment.id)

        assert [p.id for p in moderation.list_reported(db, "post", 1, 20).items] == [post.id]
        assert [c.id for c in moderation.list_reported(db, "comment", 1, 20).items] == [comment.id]

    def test_invalid_kind(self, db):
        with pytest.raises(InvalidOperation, match="Invalid type"):
            moderation.list_reported(db, "story", 1, 20)


class TestRemoval:
    def test_remove_post_detaches_from_author(self, db, content):
        author, _, post, _ = content

        moderation.remove(db, "post", post.id, moderator_id=1)

        assert post.deleted is True
        assert post.id not in author.post_ids

    def test_remove_comment_detaches_from_post(self, db, content):
        _, _, post, comment = content

        moderation.remove(db, "comment", comment.id)

        assert comment.deleted is True
        assert post.comment_ids == []

    def test_remove_twice_is_not_found(self, db, content):
        _, _, post, _ = content
        moderation.remove(db, "post", post.id)
        with pytest.raises(NotFound):
            moderation.remove(db, "post", post.id)

    def test_dismiss_missing(self, db):
        with pytest.raises(NotFound):
            moderation.dismiss_report(db, "comment", 31337)


class TestAccounts:
    def test_block_and_unblock(self, db, make_account):
        target = make_account()

        assert moderation.block_account(db, target.id).blocked is True
        assert moderation.unblock_account(db, target.id).blocked is False

    def test_block_unknown(self, db):
        with pytest.raises(NotFound):
            moderation.block_account(db, 2024)

    def test_list_accounts_filters(self, db, make_account):
        alpha, beta = make_account("alpha"), make_account("beta")
        moderation.block_account(db, beta.id)

        assert [a.id for a in moderation.list_accounts(db, 1, 20, blocked=True).items] == [beta.id]
        assert [a.id for a in moderation.list_accounts(db, 1, 20, search="ALP").items] == [alpha.id]
        assert moderation.list_accounts(db, 1, 20).total == 2


class TestAnalytics:
    def test_period_start(self):
        now = datetime(2026, 1, 31)
        assert moderation.period_start("1d", now) == now - timedelta(days=1)
        assert moderation.period_start("30d", now) == now - timedelta(days=30)
        assert moderation.period_start("bogus", now) == now - timedelta(days=7)

    def test_counts(self, db, make_account, content):
        author, reader, post, comment = content
        old = engagement.create_post(db, author.id, "old news")
        old.created_at = datetime.utcnow() - timedelta(days=40)
        db.flush()
        engagement.toggle_like(db, reader.id, post.id)
        engagement.report_post(db, reader.id, post.id)
        moderation.block_account(db, make_account().id)

        stats = moderation.compute_analytics(db, moderation.period_start("7d"))

        assert stats["users"] == {"total": 3, "new": 3, "blocked": 1, "active": 1}
        assert stats["posts"] == {"total": 2, "new": 1, "reported": 1, "with_likes": 1}
        assert stats["comments"] == {"total": 1, "new": 1, "reported": 0}
        assert stats["engagement"] == {"total_likes": 1, "average_likes_per_post": 0.5}

    def test_empty_platform(self, db):
        stats = moderation.compute_analytics(db, moderation.period_start("1d"))
        assert stats["engagement"]["average_likes_per_post"] == 0.0
