"""Tests for notification endpoints and the client NotificationCenter."""
from tests.conftest import create_test_user, create_test_snippet, add_collaborator
from vinstack.client.api import ApiClient, ApiError
from vinstack.client.notifications import NotificationCenter


def _seed(client, count=2):
    """Give ``owner`` ``count`` comment notifications."""
    owner = create_test_user(client, username="owner")
    reviewer = create_test_user(client, username="reviewer")
    snippet = create_test_snippet(client, owner["user_id"], visibility="public")
    add_collaborator(client, snippet, reviewer, role="commenter")
    for n in range(count):
        client.post(f"/api/snippets/{snippet['snippet_id']}/comments", json={
            "author_id": reviewer["user_id"], "content": f"comment {n}",
        })
    return owner


class TestNotificationAPI:

    def test_unread_count_and_mark_read(self, client):
        owner = _seed(client, 2)
        count = client.get("/api/notifications/unread-count", params={"user_id": owner["user_id"]}).json()
        assert count == {"unread_count": 2}

        first = client.get("/api/notifications/", params={"user_id": owner["user_id"]}).json()[0]
        resp = client.post(f"/api/notifications/{first['notification_id']}/read")
        assert resp.status_code == 200
        assert resp.json()["is_read"] is True
        # marking again is harmless
        assert client.post(f"/api/notifications/{first['notification_id']}/read").status_code == 200

        unread = client.get("/api/notifications/", params={"user_id": owner["user_id"], "unread_only": True}).json()
        assert len(unread) == 1

    def test_mark_all_read(self, client):
        owner = _seed(client, 3)
        resp = client.post("/api/notifications/read-all", params={"user_id": owner["user_id"]})
        assert resp.json() == {"updated": 3}
        count = client.get("/api/notifications/unread-count", params={"user_id": owner["user_id"]}).json()
        assert count["unread_count"] == 0

    def test_delete(self, client):
        owner = _seed(client, 1)
        note = client.get("/api/notifications/", params={"user_id": owner["user_id"]}).json()[0]
        assert client.delete(f"/api/notifications/{note['notification_id']}").status_code == 204
        assert client.delete(f"/api/notifications/{note['notification_id']}").status_code == 404
        assert client.get("/api/notifications/", params={"user_id": owner["user_id"]}).json() == []

    def test_writes_publish_on_user_channel(self, client, hub):
        received = []
        owner = create_test_user(client, username="owner")
        friend = create_test_user(client, username="friend")
        hub.subscribe(f"notifications:{friend['user_id']}", received.append)

        snippet = create_test_snippet(client, owner["user_id"])
        add_collaborator(client, snippet, friend, accept=False)
        assert [(e.event, e.payload["table"]) for e in received] == [("INSERT", "notifications")]


class _FailingApi(ApiClient):
    """Delegates reads, fails every write after checking the local state was already updated."""

    def __init__(self, http, center_ref):
        super().__init__(http)
        self.center_ref = center_ref
        self.seen_unread = []

    def _fail(self):
        self.seen_unread.append(self.center_ref[0].unread_count)
        raise ApiError(500, "boom")

    def mark_notification_read(self, notification_id):
        self._fail()

    def mark_all_notifications_read(self, user_id):
        self._fail()

    def delete_notification(self, notification_id):
        self._fail()


class TestNotificationCenter:

    def test_mark_all_as_read_zeroes_unread(self, client):
        owner = _seed(client, 2)
        center = NotificationCenter(ApiClient(client), owner["user_id"])
        center.start()
        assert center.unread_count == 2

        center.mark_all_as_read()
        assert center.unread_count == 0
        assert client.get(
            "/api/notifications/unread-count", params={"user_id": owner["user_id"]},
        ).json()["unread_count"] == 0

    def test_failed_write_is_optimistic_then_reconciled(self, client):
        owner = _seed(client, 2)
        ref = []
        api = _FailingApi(client, ref)
        center = NotificationCenter(api, owner["user_id"])
        ref.append(center)
        center.start()
        target = center.notifications[0]["notification_id"]

        center.mark_as_read(target)
        center.mark_all_as_read()
        center.delete(target)

        # local state had changed before each remote call
        assert api.seen_unread == [1, 0, 1]
        # and every failure was reconciled from the server
        assert center.unread_count == 2
        assert len(center.notifications) == 2

    def test_follows_channel(self, client, hub):
        owner = create_test_user(client, username="owner")
        center = NotificationCenter(ApiClient(client), owner["user_id"], hub)
        center.start()
        assert center.notifications == []

        reviewer = create_test_user(client, username="reviewer")
        snippet = create_test_snippet(client, owner["user_id"], visibility="public")
        add_collaborator(client, snippet, reviewer, role="commenter")
        client.post(f"/api/snippets/{snippet['snippet_id']}/comments", json={
            "author_id": reviewer["user_id"], "content": "hello",
        })
        center.process_events()
        assert center.unread_count == 1
        center.stop()
