"""
End-to-end API tests against the in-memory database.
"""

import pytest


def auth(account_id):
    return {"X-Account-Id": str(account_id)}


@pytest.fixture
def accounts(create_account):
    """alice (admin), bob, carol."""
    return {
        "alice": create_account("alice", is_admin=True),
        "bob": create_account("bob"),
        "carol": create_account("carol"),
    }


class TestAuthentication:
    """Caller identity comes from the X-Account-Id header."""

    def test_missing_header(self, client):
        response = client.get("/posts")
        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    @pytest.mark.parametrize("value", ["abc", "999"])
    def test_bad_or_unknown_account(self, client, accounts, value):
        response = client.get("/posts", headers={"X-Account-Id": value})
        assert response.status_code == 401

    def test_blocked_account_forbidden(self, client, accounts):
        alice, bob = accounts["alice"], accounts["bob"]
        assert client.post(f"/admin/accounts/{bob}/block", headers=auth(alice)).status_code == 200

        response = client.get("/posts", headers=auth(bob))

        assert response.status_code == 403
        assert response.json()["error_code"] == "FORBIDDEN"

    def test_admin_routes_need_admin(self, client, accounts):
        response = client.get("/admin/accounts", headers=auth(accounts["bob"]))
        assert response.status_code == 403


class TestGraphApi:
    def test_follow_toggle_and_lists(self, client, accounts):
        alice, bob = accounts["alice"], accounts["bob"]

        followed = client.post(f"/accounts/{bob}/follow", headers=auth(alice)).json()
        assert followed["state"] == "followed" and followed["is_following"] is True

        followers = client.get(f"/accounts/{bob}/followers", headers=auth(alice)).json()
        assert [a["id"] for a in followers["accounts"]] == [alice]

        unfollowed = client.post(f"/accounts/{bob}/follow", headers=auth(alice)).json()
        assert unfollowed["state"] == "unfollowed"
        assert client.get(f"/accounts/{alice}/following", headers=auth(alice)).json()["accounts"] == []

    def test_self_follow_is_invalid_operation(self, client, accounts):
        alice = accounts["alice"]
        response = client.post(f"/accounts/{alice}/follow", headers=auth(alice))
        assert response.status_code == 400
        assert response.json() == {
            "error_code": "INVALID_OPERATION",
            "message": "Cannot follow yourself",
            "details": None,
        }

    def test_follow_missing_account(self, client, accounts):
        response = client.post("/accounts/9999/follow", headers=auth(accounts["alice"]))
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    def test_feed_and_profile(self, client, accounts):
        alice, bob = accounts["alice"], accounts["bob"]
        client.post(f"/accounts/{bob}/follow", headers=auth(alice))
        post = client.post("/posts", json={"body": "hello from bob"}, headers=auth(bob)).json()

        feed = client.get("/accounts/feed", params={"page": 1, "limit": 10}, headers=auth(alice)).json()
        assert [p["id"] for p in feed["posts"]] == [post["id"]]
        assert feed["pagination"]["total"] == 1
        assert feed["pagination"]["has_next"] is False

        profile = client.get(f"/accounts/{bob}", headers=auth(alice)).json()
        assert profile["stats"] == {"posts_count": 1, "followers_count": 1, "following_count": 0}
        assert profile["account"]["posts"] == [post["id"]]

    def test_search(self, client, accounts):
        response = client.get("/accounts/search", params={"q": "CAR"}, headers=auth(accounts["alice"]))
        assert [a["handle"] for a in response.json()["accounts"]] == ["carol"]

    def test_empty_search_is_invalid_argument(self, client, accounts):
        response = client.get("/accounts/search", params={"q": ""}, headers=auth(accounts["alice"]))
        assert response.status_code == 422
        assert response.json()["error_code"] == "INVALID_ARGUMENT"

    def test_update_me(self, client, accounts):
        response = client.patch("/accounts/me", json={"bio": "moderator"}, headers=auth(accounts["alice"]))
        assert response.status_code == 200
        assert response.json()["bio"] == "moderator"
        assert response.json()["display_name"] == "alice"


class TestPostsApi:
    def test_create_edit_delete(self, client, accounts):
        bob = accounts["bob"]
        created = client.post(
            "/posts",
            json={"body": "draft", "tags": ["#news"], "media": [{"kind": "image", "url": "http://img/1.png"}]},
            headers=auth(bob),
        )
        assert created.status_code == 201
        post = created.json()
        assert post["tags"] == ["news"]
        assert post["author"]["handle"] == "bob"

        edited = client.patch(f"/posts/{post['id']}", json={"body": "final"}, headers=auth(bob)).json()
        assert edited["body"] == "final"
        assert edited["tags"] == ["news"]

        assert client.delete(f"/posts/{post['id']}", headers=auth(bob)).status_code == 200
        assert client.get(f"/posts/{post['id']}", headers=auth(bob)).status_code == 404

    def test_non_author_cannot_edit(self, client, accounts):
        post = client.post("/posts", json={"body": "mine"}, headers=auth(accounts["bob"])).json()
        response = client.patch(f"/posts/{post['id']}", json={"body": "x"}, headers=auth(accounts["carol"]))
        assert response.status_code == 404

    def test_like_share_report(self, client, accounts):
        bob, carol = accounts["bob"], accounts["carol"]
        post = client.post("/posts", json={"body": "engage"}, headers=auth(bob)).json()

        liked = client.post(f"/posts/{post['id']}/like", headers=auth(carol)).json()
        assert liked == {"message": "Post liked", "liked": True, "likes": [carol]}
        unliked = client.post(f"/posts/{post['id']}/like", headers=auth(carol)).json()
        assert unliked["likes"] == []

        client.post(f"/posts/{post['id']}/share", headers=auth(carol))
        shared = client.post(f"/posts/{post['id']}/share", headers=auth(carol)).json()
        assert shared["shares"] == [carol] and shared["recorded"] is False

        client.post(f"/posts/{post['id']}/report", headers=auth(carol))
        report = client.post(f"/posts/{post['id']}/report", headers=auth(accounts["alice"])).json()
        assert report["report_count"] == 1

        inbox = client.get("/notifications", headers=auth(bob)).json()
        assert sorted(n["category"] for n in inbox["notifications"]) == ["like", "share"]
        assert inbox["unread_count"] == 2

    def test_list_posts_page_size_bounds(self, client, accounts):
        response = client.get("/posts", params={"limit": 1000}, headers=auth(accounts["bob"]))
        assert response.status_code == 422


class TestCommentsApi:
    def test_thread_listing(self, client, accounts):
        bob, carol = accounts["bob"], accounts["carol"]
        post = client.post("/posts", json={"body": "discuss"}, headers=auth(bob)).json()
        root = client.post("/comments", json={"post_id": post["id"], "body": "root"}, headers=auth(carol)).json()
        reply = client.post(
            "/comments",
            json={"post_id": post["id"], "body": "reply", "parent_comment_id": root["id"]},
            headers=auth(bob),
        ).json()

        listing = client.get(f"/comments/post/{post['id']}", headers=auth(bob)).json()

        assert [c["id"] for c in listing["comments"]] == [root["id"]]
        assert [r["id"] for r in listing["comments"][0]["reply_comments"]] == [reply["id"]]
        assert listing["pagination"]["total"] == 1

    def test_reply_to_reply_rejected(self, client, accounts):
        bob, carol = accounts["bob"], accounts["carol"]
        post = client.post("/posts", json={"body": "discuss"}, headers=auth(bob)).json()
        root = client.post("/comments", json={"post_id": post["id"], "body": "root"}, headers=auth(carol)).json()
        reply = client.post(
            "/comments",
            json={"post_id": post["id"], "body": "reply", "parent_comment_id": root["id"]},
            headers=auth(bob),
        ).json()

        response = client.post(
            "/comments",
            json={"post_id": post["id"], "body": "deeper", "parent_comment_id": reply["id"]},
            headers=auth(carol),
        )

        assert response.status_code == 400

    def test_edit_like_report_delete(self, client, accounts):
        bob, carol = accounts["bob"], accounts["carol"]
        post = client.post("/posts", json={"body": "discuss"}, headers=auth(bob)).json()
        comment = client.post("/comments", json={"post_id": post["id"], "body": "c"}, headers=auth(carol)).json()
        cid = comment["id"]

        assert client.patch(f"/comments/{cid}", json={"body": "c2"}, headers=auth(carol)).json()["body"] == "c2"
        assert client.post(f"/comments/{cid}/like", headers=auth(bob)).json()["likes"] == [bob]
        assert client.post(f"/comments/{cid}/report", headers=auth(bob)).json()["report_count"] == 1
        assert client.delete(f"/comments/{cid}", headers=auth(bob)).status_code == 404
        assert client.delete(f"/comments/{cid}", headers=auth(carol)).status_code == 200


class TestChatApi:
    def test_send_read_and_conversations(self, client, accounts):
        bob, carol = accounts["bob"], accounts["carol"]
        sent = client.post("/chat/messages", json={"receiver_id": carol, "body": "hey"}, headers=auth(bob))
        assert sent.status_code == 201

        history = client.get(f"/chat/messages/{bob}", headers=auth(carol)).json()
        assert [m["body"] for m in history["messages"]] == ["hey"]

        convs = client.get("/chat/conversations", headers=auth(carol)).json()["conversations"]
        assert convs[0]["account"]["id"] == bob
        assert convs[0]["unread_count"] == 0

    def test_unknown_receiver(self, client, accounts):
        response = client.post("/chat/messages", json={"receiver_id": 4040, "body": "?"}, headers=auth(accounts["bob"]))
        assert response.status_code == 404


class TestNotificationsApi:
    def test_read_and_delete(self, client, accounts):
        alice, bob = accounts["alice"], accounts["bob"]
        client.post(f"/accounts/{bob}/follow", headers=auth(alice))
        inbox = client.get("/notifications", headers=auth(bob)).json()
        nid = inbox["notifications"][0]["id"]
        assert inbox["notifications"][0]["content"] == "alice started following you"

        assert client.post(f"/notifications/{nid}/read", headers=auth(bob)).json()["read"] is True
        assert client.get("/notifications", headers=auth(bob)).json()["unread_count"] == 0
        assert client.delete(f"/notifications/{nid}", headers=auth(alice)).status_code == 404
        assert client.delete(f"/notifications/{nid}", headers=auth(bob)).status_code == 200

    def test_read_all(self, client, accounts):
        alice, bob, carol = accounts["alice"], accounts["bob"], accounts["carol"]
        client.post(f"/accounts/{carol}/follow", headers=auth(alice))
        client.post(f"/accounts/{carol}/follow", headers=auth(bob))

        response = client.post("/notifications/read-all", headers=auth(carol)).json()

        assert response["details"] == {"updated": 2}


class TestAdminApi:
    def test_moderation_flow(self, client, accounts):
        alice, bob, carol = accounts["alice"], accounts["bob"], accounts["carol"]
        post = client.post("/posts", json={"body": "spam"}, headers=auth(bob)).json()
        client.post(f"/posts/{post['id']}/report", headers=auth(carol))

        reported = client.get("/admin/reported/post", headers=auth(alice)).json()
        assert [p["id"] for p in reported["posts"]] == [post["id"]]

        dismissed = client.post("/admin/dismiss-report", json={"type": "post", "id": post["id"]}, headers=auth(alice))
        assert dismissed.json()["details"]["report_count"] == 0
        assert client.get("/admin/reported/post", headers=auth(alice)).json()["posts"] == []

        assert client.delete(f"/admin/post/{post['id']}", headers=auth(alice)).status_code == 200
        assert client.get(f"/posts/{post['id']}", headers=auth(bob)).status_code == 404

    def test_invalid_kind(self, client, accounts):
        response = client.get("/admin/reported/story", headers=auth(accounts["alice"]))
        assert response.status_code == 400

    def test_analytics_falls_back_to_week(self, client, accounts):
        response = client.get("/admin/analytics", params={"period": "5y"}, headers=auth(accounts["alice"]))
        body = response.json()
        assert response.status_code == 200
        assert body["period"] == "7d"
        assert body["users"]["total"] == 3

    def test_list_accounts(self, client, accounts):
        response = client.get("/admin/accounts", params={"search": "bo"}, headers=auth(accounts["alice"]))
        assert [a["handle"] for a in response.json()["accounts"]] == ["bob"]
