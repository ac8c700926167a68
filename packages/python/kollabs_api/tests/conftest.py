from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from db_core import use_database


@pytest.fixture()
def client():
    use_database(AsyncMongoMockClient()[f"kollabs_api_test_{uuid4().hex}"])
    from core_server.main import app

    with TestClient(app) as test_client:
        yield test_client
    use_database(None)


@pytest.fixture()
def make_idea(client):
    def _make(status="approved", title="Community garden", created_by="Alice"):
        response = client.post(
            "/api/ideas",
            json={
                "title": title,
                "description": "Turn the empty lot into a community garden",
                "createdBy": created_by,
                "status": status,
            },
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make


@pytest.fixture()
def make_kollab(client, make_idea):
    def _make(idea_id=None):
        if idea_id is None:
            idea_id = make_idea()["id"]
        response = client.post(
            "/api/kollabs",
            json={
                "ideaId": idea_id,
                "goal": "Complete the project successfully",
                "participants": ["Ann"],
                "successCriteria": "All done and dusted",
            },
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make
