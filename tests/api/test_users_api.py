"""사용자 / 진행도 API 테스트 (userId 쿠키)"""

from fastapi.testclient import TestClient


def _register(client: TestClient, username="alice", **fields) -> dict:
    response = client.post("/users", json={"username": username, **fields})
    assert response.status_code == 201
    return response.json()


class TestUsersAPI:
    def test_create_sets_cookie(self, client):
        user = _register(client, level=10, game_edition="Standard")
        assert client.cookies.get("userId") == user["id"]

        me = client.get("/me")
        assert me.status_code == 200
        assert me.json()["username"] == "alice"
        assert me.json()["level"] == 10

    def test_duplicate_username(self, client, client_factory):
        _register(client)
        response = client_factory().post("/users", json={"username": "alice"})
        assert response.status_code == 409

    def test_validation(self, client):
        assert client.post("/users", json={"username": ""}).status_code == 422
        assert client.post("/users", json={"username": "x", "level": 0}).status_code == 422
        assert client.post("/users", json={"username": "x", "fence_rep": 9}).status_code == 422

    def test_missing_cookie(self, client):
        response = client.get("/me")
        assert response.status_code == 401
        assert response.json()["detail"] == "unauthorized"

    def test_unknown_user_cookie(self, client):
        client.cookies.set("userId", "ghost")
        assert client.get("/me").status_code == 401


class TestProgressAPI:
    def test_put_and_get(self, client):
        _register(client, level=10)
        response = client.put(
            "/me/progress",
            json={
                "quests": [{"quest_id": "debut", "status": "completed"}],
                "objectives": [
                    {"quest_id": "checking", "objective_id": "checking_salewa", "collected": 1}
                ],
                "trader_standings": [{"trader_id": "prapor", "level": 2}],
                "level": 15,
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["level"] == 15
        assert data["quests"] == [
            {"questId": "debut", "status": "completed", "completedAt": None}
        ]
        assert data["objectives"] == [
            {"questId": "checking", "objectiveId": "checking_salewa", "collected": 1}
        ]
        assert data["trader_standings"] == [{"traderId": "prapor", "level": 2}]

        assert client.get("/me/progress").json()["level"] == 15

    def test_empty_update(self, client):
        _register(client)
        response = client.put("/me/progress", json={})
        assert response.status_code == 400
        assert response.json()["detail"] == "nothing to update"

    def test_invalid_status(self, client):
        _register(client)
        response = client.put(
            "/me/progress", json={"quests": [{"quest_id": "debut", "status": "done"}]}
        )
        assert response.status_code == 422
