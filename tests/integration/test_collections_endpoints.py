"""Integration tests for the persisted collection endpoints."""

from __future__ import annotations

import json
from http import HTTPStatus

import pytest
from flask.testing import FlaskClient

from eyesoul.backend.app.services.storage import InMemoryStorage

HEADERS = {"X-Client-Id": "browser-1"}

AVIATOR = {
    "id": "p-1",
    "name": {"en": "Aviator Classic", "id": "Aviator Klasik"},
    "slug": "aviator-classic",
    "category": "sunglasses",
    "brand": "eyesoul",
    "price": 60,
    "originPrice": 80,
    "sizes": ["medium", "large"],
    "variation": [{"color": "black", "colorCode": "#1F1F1F", "image": "/a.png"}],
    "frameSize": {"bridgeWidth": 18, "lensWidth": 52},
    "gender": "unisex",
}
ROUND = {"id": "p-2", "name": "Round Reader", "price": 45, "category": "reading-glasses"}


def _stored(storage: InMemoryStorage, key: str, client_id: str = "browser-1"):
    raw = storage.get_item(f"{client_id}:{key}")
    return json.loads(raw) if raw is not None else None


def test_collections_start_empty(client: FlaskClient) -> None:
    response = client.get("/api/v1/collections/wishlist", headers=HEADERS)

    assert response.status_code == HTTPStatus.OK
    assert response.get_json() == {
        "data": [],
        "meta": {"kind": "wishlist", "count": 0, "storage_key": "anvogue_wishlist_v1"},
    }


def test_add_to_cart_normalises_and_persists(client: FlaskClient, storage: InMemoryStorage) -> None:
    response = client.post("/api/v1/collections/cart/items", json=AVIATOR, headers=HEADERS)

    assert response.status_code == HTTPStatus.CREATED
    [item] = response.get_json()["data"]
    assert item["quantity"] == 1
    assert item["selectedSize"] == ""
    assert item["originPrice"] == 80
    assert item["gender"] == "unisex"
    assert item["frameSize"] == {"bridgeWidth": 18.0, "lensWidth": 52.0}
    assert _stored(storage, "anvogue_cart_v1") == [item]


def test_cart_add_update_remove_cycle(client: FlaskClient, storage: InMemoryStorage) -> None:
    client.post("/api/v1/collections/cart/items", json=AVIATOR, headers=HEADERS)
    client.post("/api/v1/collections/cart/items", json=ROUND, headers=HEADERS)

    response = client.patch(
        "/api/v1/collections/cart/items/p-1",
        json={"quantity": 3, "selectedSize": "large", "selectedColor": "black"},
        headers=HEADERS,
    )
    assert response.status_code == HTTPStatus.OK
    first = response.get_json()["data"][0]
    assert (first["quantity"], first["selectedSize"], first["selectedColor"]) == (3, "large", "black")

    client.delete("/api/v1/collections/cart/items/p-1", headers=HEADERS)
    response = client.delete("/api/v1/collections/cart/items/p-2", headers=HEADERS)

    assert response.get_json()["data"] == []
    assert _stored(storage, "anvogue_cart_v1") == []


def test_updating_unknown_item_leaves_cart_unchanged(client: FlaskClient) -> None:
    client.post("/api/v1/collections/cart/items", json=ROUND, headers=HEADERS)
    before = client.get("/api/v1/collections/cart", headers=HEADERS).get_json()["data"]

    response = client.patch(
        "/api/v1/collections/cart/items/missing",
        json={"quantity": 2},
        headers=HEADERS,
    )

    assert response.status_code == HTTPStatus.OK
    assert response.get_json()["data"] == before


def test_duplicate_adds_create_separate_lines(client: FlaskClient) -> None:
    for _ in range(2):
        client.post("/api/v1/collections/wishlist/items", json=ROUND, headers=HEADERS)

    payload = client.get("/api/v1/collections/wishlist", headers=HEADERS).get_json()
    assert payload["meta"]["count"] == 2


def test_compare_can_be_cleared_but_wishlist_cannot(client: FlaskClient) -> None:
    client.post("/api/v1/collections/compare/items", json=AVIATOR, headers=HEADERS)
    client.post("/api/v1/collections/compare/items", json=ROUND, headers=HEADERS)

    cleared = client.delete("/api/v1/collections/compare", headers=HEADERS)
    assert cleared.status_code == HTTPStatus.OK
    assert cleared.get_json()["data"] == []

    rejected = client.delete("/api/v1/collections/wishlist", headers=HEADERS)
    assert rejected.status_code == HTTPStatus.METHOD_NOT_ALLOWED
    assert rejected.get_json()["error"] == "method_not_allowed"


def test_wishlist_items_cannot_be_updated(client: FlaskClient) -> None:
    client.post("/api/v1/collections/wishlist/items", json=ROUND, headers=HEADERS)

    response = client.patch(
        "/api/v1/collections/wishlist/items/p-2",
        json={"quantity": 2},
        headers=HEADERS,
    )

    assert response.status_code == HTTPStatus.METHOD_NOT_ALLOWED


def test_existing_storage_is_hydrated_and_sanitised(client: FlaskClient, storage: InMemoryStorage) -> None:
    storage.set_item(
        "browser-1:anvogue_cart_v1",
        json.dumps([{"id": "p-9", "quantity": "lots"}, {"name": "orphan"}]),
    )
    storage.set_item("browser-1:anvogue_wishlist_v1", "not-json")

    cart = client.get("/api/v1/collections/cart", headers=HEADERS).get_json()
    wishlist = client.get("/api/v1/collections/wishlist", headers=HEADERS).get_json()

    assert cart["data"] == [{"id": "p-9", "quantity": 1, "selectedSize": "", "selectedColor": ""}]
    assert wishlist["data"] == []


def test_clients_are_isolated(client: FlaskClient) -> None:
    client.post("/api/v1/collections/cart/items", json=ROUND, headers=HEADERS)

    other = client.get("/api/v1/collections/cart", headers={"X-Client-Id": "browser-2"})

    assert other.get_json()["data"] == []


def test_client_id_header_is_required(client: FlaskClient) -> None:
    missing = client.get("/api/v1/collections/cart")
    invalid = client.get("/api/v1/collections/cart", headers={"X-Client-Id": "a:b"})

    assert missing.status_code == HTTPStatus.BAD_REQUEST
    assert missing.get_json()["error"] == "bad_request"
    assert invalid.status_code == HTTPStatus.BAD_REQUEST


def test_unknown_collection_kind_is_not_found(client: FlaskClient) -> None:
    response = client.get("/api/v1/collections/basket", headers=HEADERS)

    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.get_json() == {"error": "not_found", "message": "Collection not found"}


def test_invalid_products_are_rejected(client: FlaskClient) -> None:
    missing_id = client.post("/api/v1/collections/cart/items", json={"name": "x"}, headers=HEADERS)
    bad_name = client.post(
        "/api/v1/collections/cart/items",
        json={"id": "p-3", "name": {"id": "Tanpa Inggris"}},
        headers=HEADERS,
    )
    not_json = client.post(
        "/api/v1/collections/cart/items",
        data="nope",
        content_type="text/plain",
        headers=HEADERS,
    )

    assert missing_id.status_code == HTTPStatus.BAD_REQUEST
    assert missing_id.get_json()["error"] == "validation_failed"
    assert missing_id.get_json()["issues"][0]["loc"] == ["id"]
    assert bad_name.status_code == HTTPStatus.BAD_REQUEST
    assert not_json.status_code == HTTPStatus.BAD_REQUEST


def test_quantity_must_be_positive(client: FlaskClient) -> None:
    client.post("/api/v1/collections/cart/items", json=ROUND, headers=HEADERS)

    response = client.patch(
        "/api/v1/collections/cart/items/p-2",
        json={"quantity": 0},
        headers=HEADERS,
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST


def test_cart_summary_resolves_names_for_locale(client: FlaskClient) -> None:
    client.post("/api/v1/collections/cart/items", json=AVIATOR, headers=HEADERS)
    client.patch(
        "/api/v1/collections/cart/items/p-1",
        json={"quantity": 3},
        headers=HEADERS,
    )

    response = client.get(
        "/api/v1/collections/cart/summary?shipping=free&discount_percent=10",
        headers={**HEADERS, "Accept-Language": "id-ID"},
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["locale"] == "id"
    assert payload["items"][0]["name"] == "Aviator Klasik"
    assert payload["summary"]["subtotal"] == 180
    assert payload["summary"]["discount"] == 18
    assert payload["summary"]["shipping"] == 0
    assert payload["summary"]["total"] == 162
    assert 0 < payload["expiry"]["time_left_seconds"] <= 15 * 60


def test_cart_summary_rejects_unknown_shipping(client: FlaskClient) -> None:
    response = client.get("/api/v1/collections/cart/summary?shipping=teleport", headers=HEADERS)

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["error"] == "validation_error"


def test_cart_expiry_reset(client: FlaskClient, storage: InMemoryStorage) -> None:
    response = client.post("/api/v1/collections/cart/expiry/reset", headers=HEADERS)

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["time_left_seconds"] > 14 * 60
    assert storage.get_item("browser-1:eyesoul_cart_expires_at") is not None


@pytest.mark.parametrize(
    "body",
    [
        '{"id": "p-1", "price": Infinity}',
        '{"id": "p-1", "originPrice": NaN}',
        '{"id": "p-1", "frameSize": {"lensWidth": Infinity}}',
        '{"id": "p-1", "weight": -Infinity}',
        '{"id": "p-1", "variation": [{"color": "red", "stock": [1, NaN]}]}',
    ],
)
def test_non_finite_numbers_are_rejected(
    client: FlaskClient, storage: InMemoryStorage, body: str
) -> None:
    client.post("/api/v1/collections/cart/items", json=ROUND, headers=HEADERS)

    response = client.post(
        "/api/v1/collections/cart/items",
        data=body,
        content_type="application/json",
        headers=HEADERS,
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["error"] == "validation_failed"

    client.delete("/api/v1/collections/cart/items/p-2", headers=HEADERS)
    assert _stored(storage, "anvogue_cart_v1") == []


def test_cart_summary_names_are_safe_for_markup(client: FlaskClient) -> None:
    product = {**ROUND, "name": {"en": "Round <Reader>\u0007", "id": "Baca\n<Bulat>"}}
    client.post("/api/v1/collections/cart/items", json=product, headers=HEADERS)

    english = client.get("/api/v1/collections/cart/summary?locale=en", headers=HEADERS)
    indonesian = client.get("/api/v1/collections/cart/summary?locale=id", headers=HEADERS)

    assert english.get_json()["items"][0]["name"] == "Round Reader"
    assert indonesian.get_json()["items"][0]["name"] == "BacaBulat"
