"""Tests for comment threads: assembly, API operations and the client view."""
from tests.conftest import create_test_user, create_test_snippet, add_collaborator
from vinstack.client.api import ApiClient
from vinstack.client.comments import CommentThreadView
from vinstack.services.comment_tree import build_comment_tree


def _row(cid, parent=None):
    return {"comment_id": cid, "parent_id": parent, "content": cid}


class TestBuildCommentTree:

    def test_nests_replies_in_creation_order(self):
        rows = [_row("a"), _row("b"), _row("a1", "a"), _row("a2", "a"), _row("a1x", "a1")]
        tree = build_comment_tree(rows)
        assert [n["comment_id"] for n in tree] == ["a", "b"]
        assert [n["comment_id"] for n in tree[0]["replies"]] == ["a1", "a2"]
        assert tree[0]["replies"][0]["replies"][0]["comment_id"] == "a1x"
        assert tree[1]["replies"] == []

    def test_reply_listed_before_parent_still_attaches(self):
        tree = build_comment_tree([_row("child", "root"), _row("root")])
        assert [n["comment_id"] for n in tree] == ["root"]
        assert tree[0]["replies"][0]["comment_id"] == "child"

    def test_orphans_are_dropped(self):
        tree = build_comment_tree([_row("a"), _row("lost", "missing")])
        assert [n["comment_id"] for n in tree] == ["a"]
        assert tree[0]["replies"] == []

    def test_empty(self):
        assert build_comment_tree([]) == []

    def test_input_rows_are_not_mutated(self):
        rows = [_row("a"), _row("b", "a")]
        build_comment_tree(rows)
        assert "replies" not in rows[0]


def _setup(client):
    owner = create_test_user(client, username="owner")
    reviewer = create_test_user(client, username="reviewer")
    snippet = create_test_snippet(client, owner["user_id"], visibility="public")
    add_collaborator(client, snippet, reviewer, role="commenter")
    return owner, reviewer, snippet


def _comment(client, snippet, author, content, parent_id=None, line_number=None):
    resp = client.post(f"/api/snippets/{snippet['snippet_id']}/comments", json={
        "author_id": author["user_id"],
        "content": content,
        "parent_id": parent_id,
        "line_number": line_number,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestCommentAPI:

    def test_threaded_listing(self, client):
        owner, reviewer, snippet = _setup(client)
        root = _comment(client, snippet, reviewer, "Why a loop here?", line_number=3)
        _comment(client, snippet, owner, "Readability", parent_id=root["comment_id"])

        threads = client.get(f"/api/snippets/{snippet['snippet_id']}/comments").json()
        assert len(threads) == 1
        assert threads[0]["line_number"] == 3
        assert threads[0]["replies"][0]["content"] == "Readability"

        flat = client.get(f"/api/snippets/{snippet['snippet_id']}/comments", params={"flat": True}).json()
        assert len(flat) == 2

    def test_comment_notifies_owner_but_not_self(self, client):
        owner, reviewer, snippet = _setup(client)
        _comment(client, snippet, reviewer, "Nice")
        _comment(client, snippet, owner, "Thanks")
        notes = client.get("/api/notifications/", params={"user_id": owner["user_id"]}).json()
        assert [n["type"] for n in notes] == ["comment"]
        assert "reviewer" in notes[0]["message"]

    def test_parent_from_other_snippet_rejected(self, client):
        owner, reviewer, snippet = _setup(client)
        other = create_test_snippet(client, owner["user_id"], title="Other")
        foreign = _comment(client, other, owner, "elsewhere")
        resp = client.post(f"/api/snippets/{snippet['snippet_id']}/comments", json={
            "author_id": reviewer["user_id"], "content": "x", "parent_id": foreign["comment_id"],
        })
        assert resp.status_code == 400

    def test_only_author_edits(self, client):
        owner, reviewer, snippet = _setup(client)
        c = _comment(client, snippet, reviewer, "typo")
        url = f"/api/comments/{c['comment_id']}"
        assert client.patch(url, params={"actor_id": owner["user_id"]}, json={"content": "x"}).status_code == 403
        resp = client.patch(url, params={"actor_id": reviewer["user_id"]}, json={"content": "fixed"})
        assert resp.status_code == 200
        assert resp.json()["content"] == "fixed"

    def test_delete_removes_replies(self, client):
        owner, reviewer, snippet = _setup(client)
        root = _comment(client, snippet, reviewer, "root")
        reply = _comment(client, snippet, owner, "reply", parent_id=root["comment_id"])
        _comment(client, snippet, reviewer, "nested", parent_id=reply["comment_id"])
        keep = _comment(client, snippet, reviewer, "keep")

        stranger = create_test_user(client, username="stranger")
        url = f"/api/comments/{root['comment_id']}"
        assert client.delete(url, params={"actor_id": stranger["user_id"]}).status_code == 403
        # snippet owner may delete someone else's comment
        assert client.delete(url, params={"actor_id": owner["user_id"]}).status_code == 204

        flat = client.get(f"/api/snippets/{snippet['snippet_id']}/comments", params={"flat": True}).json()
        assert [c["comment_id"] for c in flat] == [keep["comment_id"]]

    def test_resolve(self, client):
        owner, reviewer, snippet = _setup(client)
        c = _comment(client, snippet, reviewer, "bug on line 2")
        resp = client.post(f"/api/comments/{c['comment_id']}/resolve", params={"actor_id": owner["user_id"]})
        assert resp.status_code == 200
        body = resp.json()
        assert body["is_resolved"] is True
        assert body["resolved_by"] == owner["user_id"]
        assert body["resolved_at"] is not None


class TestCommentThreadView:

    def test_refetches_on_change(self, client, hub):
        owner, reviewer, snippet = _setup(client)
        view = CommentThreadView(ApiClient(client), snippet["snippet_id"], hub)
        view.start()
        assert view.threads == []

        root = _comment(client, snippet, reviewer, "first")
        _comment(client, snippet, owner, "answer", parent_id=root["comment_id"])
        assert view.process_events() >= 2

        assert len(view.threads) == 1
        assert view.threads[0]["replies"][0]["content"] == "answer"
        assert view.unresolved_count == 2

        client.post(f"/api/comments/{root['comment_id']}/resolve", params={"actor_id": owner["user_id"]})
        view.process_events()
        assert view.unresolved_count == 1
        view.stop()

    def test_ignores_unrelated_events(self, client, hub):
        owner, _, snippet = _setup(client)
        view = CommentThreadView(ApiClient(client), snippet["snippet_id"], hub)
        view.start()
        client.put(f"/api/snippets/{snippet['snippet_id']}", params={"actor_id": owner["user_id"]},
                   json={"content": "changed"})
        assert view.process_events() == 1
        assert view.rows == []

    def test_private_thread_follows_viewer(self, client, hub):
        owner = create_test_user(client, username="owner")
        editor = create_test_user(client, username="editor")
        snippet = create_test_snippet(client, owner["user_id"])
        add_collaborator(client, snippet, editor, role="editor")
        _comment(client, snippet, owner, "internal note")

        view = CommentThreadView(ApiClient(client), snippet["snippet_id"], hub, viewer_id=editor["user_id"])
        view.start()
        assert [r["content"] for r in view.rows] == ["internal note"]
        view.stop()

        anonymous = CommentThreadView(ApiClient(client), snippet["snippet_id"], hub)
        assert anonymous.refresh() is False
        assert anonymous.rows == []


class TestCommentPermissions:

    def _private(self, client):
        owner = create_test_user(client, username="owner")
        snippet = create_test_snippet(client, owner["user_id"])
        return owner, snippet

    def test_listing_hidden_from_strangers(self, client):
        owner, snippet = self._private(client)
        stranger = create_test_user(client, username="stranger")
        viewer = create_test_user(client, username="viewer")
        add_collaborator(client, snippet, viewer, role="viewer")
        _comment(client, snippet, owner, "todo: rename")

        url = f"/api/snippets/{snippet['snippet_id']}/comments"
        assert client.get(url).status_code == 403
        assert client.get(url, params={"viewer_id": stranger["user_id"]}).status_code == 403
        visible = client.get(url, params={"viewer_id": viewer["user_id"]})
        assert visible.status_code == 200
        assert [c["content"] for c in visible.json()] == ["todo: rename"]

    def test_viewer_and_stranger_cannot_comment(self, client):
        owner = create_test_user(client, username="owner")
        viewer = create_test_user(client, username="viewer")
        stranger = create_test_user(client, username="stranger")
        snippet = create_test_snippet(client, owner["user_id"], visibility="public")
        add_collaborator(client, snippet, viewer, role="viewer")

        for user in (viewer, stranger):
            resp = client.post(f"/api/snippets/{snippet['snippet_id']}/comments", json={
                "author_id": user["user_id"], "content": "drive-by",
            })
            assert resp.status_code == 403
        assert client.get(f"/api/snippets/{snippet['snippet_id']}/comments").json() == []

    def test_pending_commenter_cannot_comment(self, client):
        owner, snippet = self._private(client)
        pending = create_test_user(client, username="pending")
        add_collaborator(client, snippet, pending, role="commenter", accept=False)
        resp = client.post(f"/api/snippets/{snippet['snippet_id']}/comments", json={
            "author_id": pending["user_id"], "content": "early",
        })
        assert resp.status_code == 403

    def test_editor_and_commenter_may_comment(self, client):
        owner, snippet = self._private(client)
        editor = create_test_user(client, username="editor")
        commenter = create_test_user(client, username="commenter")
        add_collaborator(client, snippet, editor, role="editor")
        add_collaborator(client, snippet, commenter, role="commenter")
        _comment(client, snippet, editor, "from the editor")
        _comment(client, snippet, commenter, "from the commenter")

    def test_only_commenting_roles_resolve(self, client):
        owner, snippet = self._private(client)
        viewer = create_test_user(client, username="viewer")
        commenter = create_test_user(client, username="commenter")
        add_collaborator(client, snippet, viewer, role="viewer")
        add_collaborator(client, snippet, commenter, role="commenter")
        c = _comment(client, snippet, owner, "off by one")
        url = f"/api/comments/{c['comment_id']}/resolve"

        assert client.post(url, params={"actor_id": viewer["user_id"]}).status_code == 403
        resp = client.post(url, params={"actor_id": commenter["user_id"]})
        assert resp.status_code == 200
        assert resp.json()["resolved_by"] == commenter["user_id"]
