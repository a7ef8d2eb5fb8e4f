"""Pytest integration fixtures."""

import pytest
from fastapi.testclient import TestClient

from ella.main import app


@pytest.fixture()
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def session_id(client):
    response = client.post("/sessions")
    assert response.status_code == 201
    return response.json()["session_id"]
