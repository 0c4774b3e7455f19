"""Endpoints resolving bilingual catalogue content."""

from __future__ import annotations

from collections.abc import Mapping
from http import HTTPStatus
from typing import Any

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import BadRequest

from eyesoul.backend.app.localization import (
    has_translation,
    locale_from_request,
    resolve,
    to_translation,
)
from eyesoul.backend.app.models import NormaliseContentRequest, ResolveContentRequest

blueprint = Blueprint("content", __name__, url_prefix="/api/v1/content")


def _json_object() -> Mapping[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")
    return data


@blueprint.post("/resolve")
def resolve_content() -> tuple[Any, int]:
    """Return the display text of a translation value for the negotiated locale."""

    payload = ResolveContentRequest.model_validate(_json_object())
    locale = locale_from_request(request, payload.locale)

    return (
        jsonify(
            {
                "text": resolve(payload.content, locale),
                "locale": locale,
                "has_translation": has_translation(payload.content, locale),
            }
        ),
        HTTPStatus.OK,
    )


@blueprint.post("/normalise")
def normalise_content() -> tuple[Any, int]:
    """Convert legacy plain text into the bilingual shape before saving."""

    payload = NormaliseContentRequest.model_validate(_json_object())
    return jsonify(to_translation(payload.text, payload.existing)), HTTPStatus.OK


__all__ = ["blueprint"]
