from datetime import datetime

import pytest

from sqlalchemy import text

from conftest import USER_PAYLOAD


async def test_create_user(client):
    response = await client.post("/api/user", json=USER_PAYLOAD)
    assert response.status_code == 201
    data = response.json()
    assert isinstance(data["id"], int)
    for field, value in USER_PAYLOAD.items():
        assert data[field] == value
    assert datetime.fromisoformat(data["created_at"]).tzinfo is not None


async def test_create_user_ignores_client_assigned_fields(client):
    payload = {**USER_PAYLOAD, "id": 999, "created_at": "1999-01-01T00:00:00Z", "badge": "x"}
    response = await client.post("/api/user", json=payload)
    assert response.status_code == 201
    data = response.json()
    assert data["id"] != 999
    assert not data["created_at"].startswith("1999")
    assert "badge" not in data


async def test_create_user_malformed_body(client):
    response = await client.post(
        "/api/user",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.text == "Invalid request body"
    assert response.headers["content-type"].startswith("text/plain")


async def test_create_user_wrong_field_type(client):
    response = await client.post("/api/user", json={**USER_PAYLOAD, "phone": 5550100})
    assert response.status_code == 400
    assert response.text == "Invalid request body"


async def test_create_user_missing_fields(client):
    response = await client.post("/api/user", json={"first_name": "Alice", "phone": ""})
    assert response.status_code == 400
    assert response.text == "Missing required fields: last_name, phone, email"

    listing = await client.get("/api/users")
    assert listing.json() == []


async def test_create_user_store_error(client, gateway):
    await gateway.exec(text("DROP TABLE users"))
    response = await client.post("/api/user", json=USER_PAYLOAD)
    assert response.status_code == 500
    assert response.text.startswith("Failed to create user: ")


async def test_list_users_empty(client):
    response = await client.get("/api/users")
    assert response.status_code == 200
    assert response.json() == []


async def test_list_users_newest_first(client):
    for name in ("Alice", "Bob", "Carol"):
        await client.post(
            "/api/user",
            json={**USER_PAYLOAD, "first_name": name, "email": f"{name.lower()}@example.com"},
        )

    response = await client.get("/api/users")
    assert response.status_code == 200
    assert [u["first_name"] for u in response.json()] == ["Carol", "Bob", "Alice"]


async def test_list_users_store_error(client, gateway):
    await gateway.exec(text("DROP TABLE users"))
    response = await client.get("/api/users")
    assert response.status_code == 500
    assert "Failed to fetch users" in response.text


async def test_get_user(client):
    created = (await client.post("/api/user", json=USER_PAYLOAD)).json()
    response = await client.get(f"/api/user/{created['id']}")
    assert response.status_code == 200
    assert response.json() == created


async def test_get_user_not_found(client):
    response = await client.get("/api/user/9999")
    assert response.status_code == 404
    assert response.text == "User not found: 9999"


async def test_get_user_non_numeric_id(client):
    response = await client.get("/api/user/abc")
    assert response.status_code == 404


@pytest.mark.parametrize("user_id", ["1_0", "+1", " 1", "١"])
async def test_get_user_requires_plain_digits(client, user_id):
    for i in range(10):
        await client.post("/api/user", json={**USER_PAYLOAD, "email": f"user{i}@example.com"})

    response = await client.get(f"/api/user/{user_id}")
    assert response.status_code == 404
    assert response.text.startswith("User not found")


async def test_unknown_route_is_plain_text(client):
    response = await client.get("/api/nothing-here")
    assert response.status_code == 404
    assert response.headers["content-type"].startswith("text/plain")


async def test_requests_are_logged(client, log_records):
    await client.get("/api/users")
    await client.get("/favicon.ico")
    await client.get("/.well-known/appspecific/com.chrome.devtools.json")

    requests = [r for r in log_records if r["extra"].get("request")]
    assert [r["message"].split(" status=")[0] for r in requests] == [
        "GET /api/users",
        "GET /favicon.ico",
    ]
    assert requests[0]["level"].name == "INFO"
    assert requests[0]["message"].startswith("GET /api/users status=200 duration=")
    assert requests[1]["level"].name == "DEBUG"
    assert requests[0]["function"] == "log_requests"
