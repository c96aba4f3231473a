"""Tests for collaborator invitations, roles and roster listing."""
from tests.conftest import create_test_user, create_test_snippet, add_collaborator


class TestInvitations:

    def test_invite_by_email_notifies_invitee(self, client):
        owner = create_test_user(client, username="owner")
        friend = create_test_user(client, username="friend")
        snippet = create_test_snippet(client, owner["user_id"], title="Parser")

        collab = add_collaborator(client, snippet, friend, role="commenter", accept=False)
        assert collab["user_id"] == friend["user_id"]
        assert collab["username"] == "friend"
        assert collab["role"] == "commenter"
        assert collab["accepted_at"] is None

        notes = client.get("/api/notifications/", params={"user_id": friend["user_id"]}).json()
        assert len(notes) == 1
        assert notes[0]["type"] == "collaboration"
        assert notes[0]["data"]["snippet_id"] == snippet["snippet_id"]

    def test_unknown_email(self, client):
        owner = create_test_user(client, username="owner")
        snippet = create_test_snippet(client, owner["user_id"])
        resp = client.post(f"/api/snippets/{snippet['snippet_id']}/collaborators", json={
            "email": "ghost@example.com", "role": "viewer", "invited_by": owner["user_id"],
        })
        assert resp.status_code == 404

    def test_duplicate_invite_conflicts(self, client):
        owner = create_test_user(client, username="owner")
        friend = create_test_user(client, username="friend")
        snippet = create_test_snippet(client, owner["user_id"])
        add_collaborator(client, snippet, friend, accept=False)
        resp = client.post(f"/api/snippets/{snippet['snippet_id']}/collaborators", json={
            "email": friend["email"], "role": "viewer", "invited_by": owner["user_id"],
        })
        assert resp.status_code == 409

    def test_only_owner_may_invite(self, client):
        owner = create_test_user(client, username="owner")
        friend = create_test_user(client, username="friend")
        third = create_test_user(client, username="third")
        snippet = create_test_snippet(client, owner["user_id"])
        add_collaborator(client, snippet, friend)
        resp = client.post(f"/api/snippets/{snippet['snippet_id']}/collaborators", json={
            "email": third["email"], "role": "viewer", "invited_by": friend["user_id"],
        })
        assert resp.status_code == 403

    def test_owner_role_cannot_be_granted(self, client):
        owner = create_test_user(client, username="owner")
        friend = create_test_user(client, username="friend")
        snippet = create_test_snippet(client, owner["user_id"])
        resp = client.post(f"/api/snippets/{snippet['snippet_id']}/collaborators", json={
            "email": friend["email"], "role": "owner", "invited_by": owner["user_id"],
        })
        assert resp.status_code == 422


class TestRoster:

    def test_accepted_only_roster(self, client):
        owner = create_test_user(client, username="owner")
        accepted = create_test_user(client, username="accepted")
        pending = create_test_user(client, username="pending")
        snippet = create_test_snippet(client, owner["user_id"])
        add_collaborator(client, snippet, accepted)
        add_collaborator(client, snippet, pending, accept=False)

        url = f"/api/snippets/{snippet['snippet_id']}/collaborators"
        as_owner = {"viewer_id": owner["user_id"]}
        assert {c["username"] for c in client.get(url, params=as_owner).json()} == {"accepted", "pending"}
        roster = client.get(url, params={**as_owner, "accepted_only": True}).json()
        assert [c["username"] for c in roster] == ["accepted"]

    def test_update_role_and_remove(self, client):
        owner = create_test_user(client, username="owner")
        friend = create_test_user(client, username="friend")
        snippet = create_test_snippet(client, owner["user_id"])
        add_collaborator(client, snippet, friend, role="viewer")
        url = f"/api/snippets/{snippet['snippet_id']}/collaborators/{friend['user_id']}"
        as_owner = {"actor_id": owner["user_id"]}

        resp = client.patch(url, params=as_owner, json={"role": "editor"})
        assert resp.status_code == 200
        assert resp.json()["role"] == "editor"

        assert client.delete(url, params=as_owner).status_code == 204
        assert client.delete(url, params=as_owner).status_code == 404

    def test_roster_hidden_from_strangers(self, client):
        owner = create_test_user(client, username="owner")
        member = create_test_user(client, username="member")
        stranger = create_test_user(client, username="stranger")
        snippet = create_test_snippet(client, owner["user_id"])
        add_collaborator(client, snippet, member, role="viewer")

        url = f"/api/snippets/{snippet['snippet_id']}/collaborators"
        assert client.get(url).status_code == 403
        assert client.get(url, params={"viewer_id": stranger["user_id"]}).status_code == 403
        roster = client.get(url, params={"viewer_id": member["user_id"]})
        assert roster.status_code == 200
        assert [c["username"] for c in roster.json()] == ["member"]

    def test_public_roster_is_readable(self, client):
        owner = create_test_user(client, username="owner")
        snippet = create_test_snippet(client, owner["user_id"], visibility="public")
        assert client.get(f"/api/snippets/{snippet['snippet_id']}/collaborators").json() == []


class TestRoleChanges:

    def _shared(self, client):
        owner = create_test_user(client, username="owner")
        viewer = create_test_user(client, username="viewer")
        editor = create_test_user(client, username="editor")
        snippet = create_test_snippet(client, owner["user_id"])
        add_collaborator(client, snippet, viewer, role="viewer")
        add_collaborator(client, snippet, editor, role="editor")
        return owner, viewer, editor, snippet

    def test_viewer_cannot_promote_themselves(self, client):
        owner, viewer, _, snippet = self._shared(client)
        url = f"/api/snippets/{snippet['snippet_id']}/collaborators/{viewer['user_id']}"
        resp = client.patch(url, params={"actor_id": viewer["user_id"]}, json={"role": "editor"})
        assert resp.status_code == 403
        roster = client.get(f"/api/snippets/{snippet['snippet_id']}/collaborators",
                            params={"viewer_id": owner["user_id"]}).json()
        assert {c["username"]: c["role"] for c in roster}["viewer"] == "viewer"

    def test_editor_cannot_change_roles(self, client):
        _, viewer, editor, snippet = self._shared(client)
        url = f"/api/snippets/{snippet['snippet_id']}/collaborators/{viewer['user_id']}"
        resp = client.patch(url, params={"actor_id": editor["user_id"]}, json={"role": "editor"})
        assert resp.status_code == 403

    def test_role_change_requires_actor(self, client):
        _, viewer, _, snippet = self._shared(client)
        url = f"/api/snippets/{snippet['snippet_id']}/collaborators/{viewer['user_id']}"
        assert client.patch(url, json={"role": "editor"}).status_code == 422
        assert client.delete(url).status_code == 422

    def test_collaborator_may_leave(self, client):
        _, viewer, _, snippet = self._shared(client)
        url = f"/api/snippets/{snippet['snippet_id']}/collaborators/{viewer['user_id']}"
        assert client.delete(url, params={"actor_id": viewer["user_id"]}).status_code == 204

    def test_collaborator_cannot_remove_others(self, client):
        _, viewer, editor, snippet = self._shared(client)
        url = f"/api/snippets/{snippet['snippet_id']}/collaborators/{viewer['user_id']}"
        assert client.delete(url, params={"actor_id": editor["user_id"]}).status_code == 403
