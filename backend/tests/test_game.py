"""Tests for quest progression: rewards, levels, prerequisites and hints."""
import pytest

from tests.conftest import create_test_user
from vinstack.game.progression import compute_level, quest_rewards, score_from_results
from vinstack.game.quests import QUESTS, get_quest
from vinstack.services.sandbox_service import ExecutionResult, ExecutionStatus


class TestProgressionRules:

    @pytest.mark.parametrize("experience, level", [(0, 1), (999, 1), (1000, 2), (2500, 3)])
    def test_compute_level(self, experience, level):
        assert compute_level(experience) == level

    def test_rewards_are_floored(self):
        quest = get_quest("intro-variables")  # 100 XP, 50 coins
        assert quest_rewards(quest, 100) == (100, 50)
        assert quest_rewards(quest, 85) == (85, 42)
        assert quest_rewards(quest, 0) == (0, 0)

    def test_score_out_of_range(self):
        with pytest.raises(ValueError):
            quest_rewards(get_quest("intro-variables"), 101)

    def test_score_from_results(self):
        assert score_from_results(1, 2) == 50
        assert score_from_results(2, 3) == 66
        assert score_from_results(0, 0) == 0

    def test_catalog_prerequisites_exist(self):
        ids = {q.quest_id for q in QUESTS}
        for quest in QUESTS:
            assert set(quest.prerequisites) <= ids


def _complete(client, user, quest_id, score=100):
    return client.post(f"/api/game/quests/{quest_id}/complete", json={"user_id": user["user_id"], "score": score})


class TestQuestAPI:

    def test_new_player_defaults(self, client):
        user = create_test_user(client)
        player = client.get(f"/api/game/players/{user['user_id']}").json()
        assert player["level"] == 1
        assert player["experience"] == 0
        assert player["code_coins"] == 100
        assert player["completed_quests"] == []

    def test_complete_quest_credits_floor_rewards(self, client):
        user = create_test_user(client)
        resp = _complete(client, user, "intro-variables", score=85)
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert (body["xp_gained"], body["coins_gained"]) == (85, 42)
        assert body["player"]["code_coins"] == 142
        assert body["player"]["completed_quests"] == ["intro-variables"]
        assert body["leveled_up"] is False

    def test_second_completion_rejected(self, client):
        user = create_test_user(client)
        _complete(client, user, "intro-variables")
        resp = _complete(client, user, "intro-variables")
        assert resp.status_code == 409
        player = client.get(f"/api/game/players/{user['user_id']}").json()
        assert player["experience"] == 100
        assert player["quests_completed"] == 1

    def test_prerequisites_enforced(self, client):
        user = create_test_user(client)
        resp = client.post("/api/game/quests/basic-functions/start", json={"user_id": user["user_id"]})
        assert resp.status_code == 409
        assert resp.json()["detail"]["missing"] == ["intro-variables"]

        _complete(client, user, "intro-variables")
        resp = client.post("/api/game/quests/basic-functions/start", json={"user_id": user["user_id"]})
        assert resp.status_code == 200
        assert resp.json()["quest_id"] == "basic-functions"

    def test_premium_quest_needs_paid_tier(self, client, db):
        from vinstack.models.user import Profile, SubscriptionTier
        user = create_test_user(client)
        _complete(client, user, "html-basics")
        resp = client.post("/api/game/quests/css-styling/start", json={"user_id": user["user_id"]})
        assert resp.status_code == 403

        profile = db.query(Profile).filter(Profile.user_id == user["user_id"]).first()
        profile.subscription_tier = SubscriptionTier.pro
        db.commit()
        resp = client.post("/api/game/quests/css-styling/start", json={"user_id": user["user_id"]})
        assert resp.status_code == 200

    def test_unknown_quest(self, client):
        user = create_test_user(client)
        assert _complete(client, user, "no-such-quest").status_code == 404

    def test_level_up(self, client, db):
        from vinstack.models.player import Player
        user = create_test_user(client)
        client.get(f"/api/game/players/{user['user_id']}")
        player = db.query(Player).filter(Player.user_id == user["user_id"]).first()
        player.experience = 950
        db.commit()

        body = _complete(client, user, "intro-variables").json()
        assert body["leveled_up"] is True
        assert body["player"]["level"] == 2
        assert body["player"]["experience"] == 1050

    def test_invalid_score(self, client):
        user = create_test_user(client)
        assert _complete(client, user, "intro-variables", score=120).status_code == 422


class TestHints:

    def test_buy_hint_deducts_coins(self, client):
        user = create_test_user(client)
        resp = client.post("/api/game/quests/intro-variables/hints", json={"user_id": user["user_id"], "level": 2})
        assert resp.status_code == 200
        assert resp.json()["cost"] == 20
        assert resp.json()["code_coins"] == 80
        assert "quotes" in resp.json()["content"]

    def test_insufficient_coins(self, client, db):
        from vinstack.models.player import Player
        user = create_test_user(client)
        client.get(f"/api/game/players/{user['user_id']}")
        player = db.query(Player).filter(Player.user_id == user["user_id"]).first()
        player.code_coins = 5
        db.commit()
        resp = client.post("/api/game/quests/intro-variables/hints", json={"user_id": user["user_id"], "level": 1})
        assert resp.status_code == 402

    def test_unknown_hint_level(self, client):
        user = create_test_user(client)
        resp = client.post("/api/game/quests/intro-variables/hints", json={"user_id": user["user_id"], "level": 9})
        assert resp.status_code == 404


class _StubSandbox:
    """Returns a canned run result instead of spawning a process."""

    def __init__(self, output):
        self.output = output
        self.calls = []

    def execute(self, code, language):
        self.calls.append(language)
        return ExecutionResult(status=ExecutionStatus.success, output=self.output)


class TestSubmitQuest:

    def test_markup_quest_scored_from_source(self, client):
        user = create_test_user(client)
        code = '<h1>Player Profile</h1>\n<section class="player-info"></section>'
        resp = client.post("/api/game/quests/html-basics/submit", json={"user_id": user["user_id"], "code": code})
        assert resp.status_code == 200
        assert resp.json()["score"] == 100
        assert resp.json()["xp_gained"] == 120

    def test_partial_markup_score(self, client):
        user = create_test_user(client)
        resp = client.post("/api/game/quests/html-basics/submit", json={
            "user_id": user["user_id"], "code": "<h1>Player Profile</h1>",
        })
        assert resp.json()["score"] == 50
        assert resp.json()["xp_gained"] == 60

    def test_runnable_quest_scored_from_stdout(self, client):
        from vinstack.deps import get_sandbox
        from vinstack.main import app
        stub = _StubSandbox("Total: 60\nCount: 2\n")
        app.dependency_overrides[get_sandbox] = lambda: stub
        try:
            user = create_test_user(client)
            resp = client.post("/api/game/quests/python-lists/submit", json={
                "user_id": user["user_id"], "code": "print('anything')",
            })
        finally:
            app.dependency_overrides.pop(get_sandbox, None)
        assert resp.status_code == 200
        assert resp.json()["score"] == 50
        assert stub.calls == ["python"]
