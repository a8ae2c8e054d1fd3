"""Request body parsing for routes that accept both JSON and HTML forms."""

from __future__ import annotations

from typing import Any, TypeVar

from fastapi import Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from blogauth.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


async def read_body_fields(request: Request) -> dict[str, Any]:
    """Return top-level body fields from a JSON or form-encoded request."""
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError:
            return {}
        return payload if isinstance(payload, dict) else {}

    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


async def parse_body(request: Request, model: type[ModelT]) -> ModelT:
    """Parse body fields into ``model``, mapping shape errors to ValidationError."""
    fields = await read_body_fields(request)
    try:
        return model.model_validate(fields)
    except PydanticValidationError as exc:
        raise ValidationError() from exc
