"""HTTP helpers for driving the app through ``httpx.AsyncClient``."""

from __future__ import annotations

from httpx import AsyncClient


async def register(client: AsyncClient, email: str = "jamie@example.com", **overrides) -> dict:
    payload = {
        "firstName": "Jamie",
        "lastName": "Lee",
        "email": email,
        "password": "correct-horse",
    }
    payload.update(overrides)
    response = await client.post("/api/auth/register", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
