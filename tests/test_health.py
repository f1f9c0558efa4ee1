# tests/test_health.py
from typing import Any


def test_root_responds(client: Any) -> None:
    """Root endpoint describes the API."""
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["name"] == "Penpal Relay API"


def test_health(client: Any) -> None:
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
