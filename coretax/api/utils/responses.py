"""orjson-backed JSON responses.

``ORJSONResponse`` is the application's default response class. Money is
stored as ``Decimal``, which orjson does not serialize natively, so decimals
are rendered as floats.
"""

from decimal import Decimal
from typing import Any

import orjson
from fastapi.responses import JSONResponse
from pydantic import BaseModel


def _default(value: object) -> object:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    raise TypeError(f"Type is not JSON serializable: {type(value).__name__}")


class ORJSONResponse(JSONResponse):
    """JSONResponse rendered with orjson and sorted keys."""

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401
        if isinstance(content, BaseModel):
            content = content.model_dump(mode="json", by_alias=True)
        return orjson.dumps(content, default=_default, option=orjson.OPT_SORT_KEYS)
