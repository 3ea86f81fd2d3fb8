#!/usr/bin python3

# Imports
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Python:
from typing import Any, Dict

# 3rd party:
from orjson import dumps
from pydantic import ValidationError

# Internal:
from vicstats.exceptions import UpstreamShapeError
from .schema import QueryResponse

# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

__all__ = [
    'format_response'
]


def format_response(tree: Dict[str, Any]) -> bytes:
    """
    Validates the response tree against the response models and
    serialises it. Fields that are not in ``tree`` are left out rather
    than exported as ``null``.
    """
    try:
        payload = QueryResponse.model_validate(tree)
    except ValidationError as err:
        # Markers are typed; a value that does not validate
        # means the upstream published something unexpected.
        raise UpstreamShapeError(source="response", details=str(err)) from err

    return dumps(payload.model_dump(mode="json", exclude_unset=True))
