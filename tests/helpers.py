from typing import Dict

from fastapi.testclient import TestClient


def auth_headers(client: TestClient, email: str, password: str = "s3cret-pass") -> Dict[str, str]:
    """Register ``email`` (if needed) and return bearer headers for it."""
    client.post("/api/v1/auth/register", json={"email": email, "password": password})
    response = client.post("/api/v1/auth/login", data={"username": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
