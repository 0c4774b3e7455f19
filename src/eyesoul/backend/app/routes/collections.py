"""REST endpoints for the persisted cart, wishlist and compare collections."""

from __future__ import annotations

import re
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import BadRequest

from eyesoul.backend.app.http import bad_request, not_found
from eyesoul.backend.app.localization import locale_from_request, resolve
from eyesoul.backend.app.models import (
    CartSummaryQuery,
    ProductSnapshot,
    UpdateCartItemRequest,
)
from eyesoul.backend.app.services.cart import summarise_cart
from eyesoul.backend.app.services.collections import CollectionKind, CollectionStore
from eyesoul.backend.app.services.registry import ClientCollections, CollectionRegistry
from eyesoul.backend.app.services.sanitize import sanitize_for_metadata

blueprint = Blueprint("collections", __name__, url_prefix="/api/v1/collections")

CLIENT_ID_HEADER = "X-Client-Id"
REGISTRY_EXTENSION = "eyesoul.collections"

_CLIENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def get_registry() -> CollectionRegistry:
    return current_app.extensions[REGISTRY_EXTENSION]


def _client() -> ClientCollections:
    client_id = (request.headers.get(CLIENT_ID_HEADER) or "").strip()
    if not client_id:
        raise bad_request(f"Missing {CLIENT_ID_HEADER} header")
    if not _CLIENT_ID_PATTERN.match(client_id):
        raise bad_request(f"Invalid {CLIENT_ID_HEADER} header")
    return get_registry().client(client_id)


def _store(kind: str) -> CollectionStore:
    try:
        collection_kind = CollectionKind(kind)
    except ValueError:
        raise not_found("Collection") from None
    return _client().get(collection_kind)


def _json_object() -> Mapping[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")
    return data


def _collection_payload(store: CollectionStore) -> dict[str, Any]:
    items = store.items
    return {
        "data": items,
        "meta": {
            "kind": store.kind.value,
            "count": len(items),
            "storage_key": store.storage_key,
        },
    }


@blueprint.get("/<string:kind>")
def list_items(kind: str) -> tuple[Any, int]:
    return jsonify(_collection_payload(_store(kind))), HTTPStatus.OK


@blueprint.post("/<string:kind>/items")
def add_item(kind: str) -> tuple[Any, int]:
    store = _store(kind)
    product = ProductSnapshot.model_validate(_json_object())
    store.add(product.to_item())
    return jsonify(_collection_payload(store)), HTTPStatus.CREATED


@blueprint.delete("/<string:kind>/items/<string:item_id>")
def remove_item(kind: str, item_id: str) -> tuple[Any, int]:
    store = _store(kind)
    store.remove(item_id)
    return jsonify(_collection_payload(store)), HTTPStatus.OK


@blueprint.patch("/<string:kind>/items/<string:item_id>")
def update_item(kind: str, item_id: str) -> tuple[Any, int]:
    store = _store(kind)
    changes = UpdateCartItemRequest.model_validate(_json_object())
    store.update(
        item_id,
        changes.quantity,
        changes.selected_size,
        changes.selected_color,
    )
    return jsonify(_collection_payload(store)), HTTPStatus.OK


@blueprint.delete("/<string:kind>")
def clear_items(kind: str) -> tuple[Any, int]:
    store = _store(kind)
    store.clear()
    return jsonify(_collection_payload(store)), HTTPStatus.OK


@blueprint.get("/cart/summary")
def cart_summary() -> tuple[Any, int]:
    collections = _client()
    query = CartSummaryQuery.model_validate(request.args.to_dict())
    locale = locale_from_request(request)
    items = collections.cart.items

    summary = summarise_cart(
        items,
        get_registry().configuration.shipping,
        option=query.shipping,
        discount_percent=query.discount_percent,
    )
    lines = [
        {
            "id": item["id"],
            "name": sanitize_for_metadata(resolve(item.get("name"), locale)),
            "quantity": item.get("quantity", 1),
            "selectedSize": item.get("selectedSize", ""),
            "selectedColor": item.get("selectedColor", ""),
            "price": item.get("price", 0),
        }
        for item in items
    ]
    time_left = collections.cart_expiry.time_left()

    return (
        jsonify(
            {
                "locale": locale,
                "items": lines,
                "summary": summary.as_dict(),
                "expiry": {"time_left_seconds": int(time_left.total_seconds())},
            }
        ),
        HTTPStatus.OK,
    )


@blueprint.post("/cart/expiry/reset")
def reset_cart_expiry() -> tuple[Any, int]:
    expiry = _client().cart_expiry
    deadline = expiry.reset()
    return (
        jsonify(
            {
                "expires_at": deadline.isoformat(),
                "time_left_seconds": int(expiry.time_left().total_seconds()),
            }
        ),
        HTTPStatus.OK,
    )


__all__ = ["blueprint", "get_registry", "CLIENT_ID_HEADER", "REGISTRY_EXTENSION"]
