import pytest

KOLLAB_BODY = {
    "goal": "Complete the project successfully",
    "participants": ["user1", "user2"],
    "successCriteria": "All done and dusted",
}


def _post_kollab(client, idea_id, **overrides):
    return client.post("/api/kollabs", json={**KOLLAB_BODY, "ideaId": idea_id, **overrides})


def test_draft_idea_cannot_start_kollab(client, make_idea):
    idea = make_idea(status="draft")

    response = _post_kollab(client, idea["id"])

    assert response.status_code == 403
    body = response.json()
    assert body["success"] is False
    assert body["data"] == {"currentStatus": "draft", "requiredStatus": "approved"}


def test_approved_idea_starts_kollab(client, make_idea):
    idea = make_idea(status="draft")
    client.patch(f"/api/ideas/{idea['id']}", json={"status": "approved"})

    response = _post_kollab(client, idea["id"])

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "active"
    assert data["discussions"] == []
    assert data["ideaId"] == idea["id"]
    assert data["successCriteria"] == KOLLAB_BODY["successCriteria"]


def test_duplicate_active_kollab(client, make_idea):
    idea = make_idea()
    assert _post_kollab(client, idea["id"]).status_code == 201

    response = _post_kollab(client, idea["id"])

    assert response.status_code == 409
    assert response.json()["error"] == "active Kollab already exists"


def test_kollab_for_missing_idea(client):
    response = _post_kollab(client, "missing-idea")

    assert response.status_code == 404


@pytest.mark.parametrize(
    "overrides",
    [
        {"goal": "     "},
        {"successCriteria": ""},
        {"participants": ["user1", "   ", "user2"]},
    ],
)
def test_whitespace_only_kollab_fields(client, make_idea, overrides):
    idea = make_idea()

    response = _post_kollab(client, idea["id"], **overrides)

    assert response.status_code == 422
    assert "whitespace only" in response.json()["error"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"goal": "too short"},
        {"participants": []},
        {"participants": [f"user{index}" for index in range(51)]},
    ],
)
def test_kollab_field_bounds(client, make_idea, overrides):
    idea = make_idea()

    assert _post_kollab(client, idea["id"], **overrides).status_code == 400


def test_get_kollab_includes_idea(client, make_idea, make_kollab):
    idea = make_idea()
    kollab = make_kollab(idea["id"])

    response = client.get(f"/api/kollabs/{kollab['id']}")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["idea"] == {
        "id": idea["id"],
        "title": idea["title"],
        "description": idea["description"],
        "status": "approved",
    }
    assert client.get("/api/kollabs/missing").status_code == 404


def test_discussion_thread(client, make_kollab):
    kollab = make_kollab()

    first = client.post(f"/api/kollabs/{kollab['id']}/discussions", json={"message": "hi", "author": "Bob"})
    assert first.status_code == 201
    assert first.json()["message"] == "Discussion added successfully"
    first_id = first.json()["data"]["id"]

    reply = client.post(
        f"/api/kollabs/{kollab['id']}/discussions",
        json={"message": "reply", "author": "Ann", "parentId": first_id},
    )
    assert reply.status_code == 201
    assert reply.json()["data"]["parentId"] == first_id

    discussions = client.get(f"/api/kollabs/{kollab['id']}").json()["data"]["discussions"]
    assert [item["id"] for item in discussions] == [first_id, reply.json()["data"]["id"]]


def test_discussion_parent_must_belong_to_kollab(client, make_kollab):
    kollab = make_kollab()
    other = make_kollab()
    foreign = client.post(
        f"/api/kollabs/{other['id']}/discussions", json={"message": "there", "author": "Bob"}
    ).json()["data"]

    response = client.post(
        f"/api/kollabs/{kollab['id']}/discussions",
        json={"message": "reply", "author": "Ann", "parentId": foreign["id"]},
    )

    assert response.status_code == 404
    assert response.json()["error"] == "Parent discussion not found"


def test_discussion_on_completed_kollab(client, make_kollab):
    kollab = make_kollab()
    client.patch(f"/api/kollabs/{kollab['id']}", json={"status": "completed"})

    response = client.post(
        f"/api/kollabs/{kollab['id']}/discussions", json={"message": "late", "author": "Bob"}
    )

    assert response.status_code == 409
    assert response.json()["data"] == {"currentStatus": "completed", "requiredStatus": "active"}


def test_discussion_blank_vs_empty(client, make_kollab):
    kollab = make_kollab()
    url = f"/api/kollabs/{kollab['id']}/discussions"

    assert client.post(url, json={"message": "   ", "author": "Bob"}).status_code == 422
    assert client.post(url, json={"message": "hello", "author": "   "}).status_code == 422
    assert client.post(url, json={"message": "", "author": "Bob"}).status_code == 400
    assert client.post(url, json={"message": "x" * 5001, "author": "Bob"}).status_code == 400


def test_update_kollab(client, make_kollab):
    kollab = make_kollab()

    response = client.patch(
        f"/api/kollabs/{kollab['id']}",
        json={"participants": ["user1", "user3"], "status": "cancelled"},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["participants"] == ["user1", "user3"]
    assert data["status"] == "cancelled"
    assert client.patch(f"/api/kollabs/{kollab['id']}", json={"status": "paused"}).status_code == 400


def test_delete_kollab_guard(client, make_kollab):
    kollab = make_kollab()

    blocked = client.delete(f"/api/kollabs/{kollab['id']}")
    assert blocked.status_code == 409

    client.patch(f"/api/kollabs/{kollab['id']}", json={"status": "cancelled"})
    assert client.delete(f"/api/kollabs/{kollab['id']}").status_code == 200
    assert client.get(f"/api/kollabs/{kollab['id']}").status_code == 404
