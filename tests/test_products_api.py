"""
Name: Product Endpoint Tests

Responsibilities:
  - Walk the full register/login/create/update/delete flow
  - Ensure mutating routes reject missing, malformed and expired tokens
    without touching storage
  - Validate the product view, Location header and problem-shaped 404
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from conftest import TEST_SECRET

pytestmark = pytest.mark.unit

WIDGET = {"name": "Widget", "description": "", "price": 9.99, "stock": 3}


def _parse(timestamp: str) -> datetime:
    return datetime.fromisoformat(timestamp.replace("Z", "+00:00"))


def _create(client, headers, payload=None):
    response = client.post("/api/products", json=payload or WIDGET, headers=headers)
    assert response.status_code == 201
    return response.json()


def test_full_product_flow(client):
    credentials = {"email": "a@x.com", "password": "Secret1!"}
    assert client.post("/api/auth/register", json=credentials).status_code == 200
    assert client.post("/api/auth/register", json=credentials).status_code == 400
    assert (
        client.post(
            "/api/auth/login", json={"email": "a@x.com", "password": "Secret1?"}
        ).status_code
        == 401
    )
    login = client.post("/api/auth/login", json=credentials)
    assert login.status_code == 200
    token = login.json()["token"]
    assert token
    headers = {"Authorization": f"Bearer {token}"}

    created = client.post("/api/products", json=WIDGET, headers=headers)
    assert created.status_code == 201
    body = created.json()
    assert body["id"] == 1
    assert body["createdDate"]
    assert body["lastUpdatedDate"] is None
    assert created.headers["location"].endswith("/api/products/1")

    updated = client.put("/api/products/1", json={**WIDGET, "stock": 0}, headers=headers)
    assert updated.status_code == 204
    fetched = client.get("/api/products/1").json()
    assert fetched["stock"] == 0
    assert fetched["lastUpdatedDate"] is not None
    assert _parse(fetched["lastUpdatedDate"]) >= _parse(fetched["createdDate"])

    assert client.delete("/api/products/1", headers=headers).status_code == 204
    assert client.get("/api/products/1").status_code == 404


def test_product_view_shape(client, auth_headers):
    body = _create(client, auth_headers, {**WIDGET, "description": "Blue"})

    assert set(body) == {
        "id",
        "name",
        "description",
        "price",
        "stock",
        "createdDate",
        "lastUpdatedDate",
    }
    assert body["price"] == 9.99
    assert body["description"] == "Blue"
    assert _parse(body["createdDate"]).tzinfo is not None


def test_list_products_is_public(client, auth_headers):
    _create(client, auth_headers, {**WIDGET, "name": "a"})
    _create(client, auth_headers, {**WIDGET, "name": "b"})

    response = client.get("/api/products")

    assert response.status_code == 200
    assert [item["name"] for item in response.json()] == ["a", "b"]


def test_list_products_empty(client):
    response = client.get("/api/products")

    assert response.status_code == 200
    assert response.json() == []


def test_missing_product_is_problem_shaped(client):
    response = client.get("/api/products/99")

    assert response.status_code == 404
    assert response.headers["content-type"].startswith("application/problem+json")
    body = response.json()
    assert body["status"] == 404
    assert body["title"] == "Not Found"
    assert body["detail"] == "Product with ID '99' was not found."
    assert body["instance"] == "/api/products/99"
    assert body["type"]


def test_update_and_delete_missing_product(client, auth_headers):
    update = client.put("/api/products/99", json=WIDGET, headers=auth_headers)
    delete = client.delete("/api/products/99", headers=auth_headers)

    assert update.status_code == 404
    assert delete.status_code == 404
    assert update.json()["detail"] == "Product with ID '99' was not found."


def test_create_validation_errors(client, auth_headers):
    response = client.post(
        "/api/products",
        json={"name": "", "price": -1, "stock": 1.5},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json() == {
        "name": ["Product name is required."],
        "price": ["Price must be a positive value."],
        "stock": ["Stock must be an integer."],
    }
    assert client.get("/api/products").json() == []


def test_update_validation_leaves_product_untouched(client, auth_headers):
    created = _create(client, auth_headers)

    response = client.put(
        f"/api/products/{created['id']}",
        json={**WIDGET, "price": 0},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert client.get(f"/api/products/{created['id']}").json() == created


def test_non_integer_id_is_a_validation_error(client):
    response = client.get("/api/products/abc")

    assert response.status_code == 400
    assert "id" in response.json()


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": "Bearer"},
        {"Authorization": "Basic dXNlcjpwYXNz"},
        {"Authorization": "Bearer not-a-token"},
    ],
)
def test_create_without_valid_token_is_rejected(client, headers):
    response = client.post("/api/products", json=WIDGET, headers=headers)

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert response.json()["detail"] == "Authentication is required to access this resource."
    assert client.get("/api/products").json() == []


def test_expired_token_is_rejected(client, settings, registered_user):
    issued = datetime.now(tz=timezone.utc) - timedelta(hours=2)
    token = jwt.encode(
        {
            "sub": "someone",
            "email": registered_user["email"],
            "iss": settings.jwt_issuer,
            "aud": settings.jwt_audience,
            "iat": issued,
            "exp": issued + timedelta(minutes=60),
        },
        TEST_SECRET,
        algorithm="HS256",
    )

    response = client.post(
        "/api/products", json=WIDGET, headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == 401


def test_gate_runs_before_body_parsing(client):
    response = client.post(
        "/api/products",
        content=b"{broken",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 401


def test_unauthenticated_update_and_delete_change_nothing(client, auth_headers):
    created = _create(client, auth_headers)
    product_url = f"/api/products/{created['id']}"

    update = client.put(product_url, json={**WIDGET, "stock": 0})
    delete = client.delete(product_url, headers={"Authorization": "Bearer forged"})

    assert update.status_code == 401
    assert delete.status_code == 401
    assert client.get(product_url).json() == created


def test_id_beyond_storage_range_is_not_found(client, auth_headers):
    url = "/api/products/99999999999999999999"

    get = client.get(url)
    update = client.put(url, json=WIDGET, headers=auth_headers)
    delete = client.delete(url, headers=auth_headers)

    assert get.status_code == 404
    assert get.json()["instance"] == url
    assert update.status_code == 404
    assert delete.status_code == 404
