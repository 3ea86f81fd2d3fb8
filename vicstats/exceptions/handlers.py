#!/usr/bin python3

# Imports
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Python:
from logging import getLogger
from http import HTTPStatus

# 3rd party:
from fastapi import Request
from fastapi.responses import JSONResponse

# Internal:
from vicstats.config import Settings

# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

__all__ = [
    'exception_handlers'
]


logger = getLogger(__name__)


def get_custom_dimensions(request: Request, status_code: int, status_detail: str, **context):
    return dict(
        custom_dimensions=dict(
            is_healthcheck=Settings.healthcheck_path in request.url.path,
            url=str(request.url),
            path=str(request.url.path),
            query_string=str(request.query_params),
            status_code=status_code,
            status_detail=status_detail,
            api_environment=Settings.ENVIRONMENT,
            server_location=Settings.server_location,
            is_dev=Settings.DEBUG,
            **context
        )
    )


async def handle_404(request: Request, exc, **context):
    status = HTTPStatus.NOT_FOUND
    status_code = status.value
    status_detail = status.phrase

    custom_dims = get_custom_dimensions(request, status_code, status_detail, **context)
    logger.warning(exc, extra=custom_dims, exc_info=True)

    return JSONResponse(
        content={
            "status_code": status_code,
            "status_detail": status_detail,
        },
        status_code=status_code
    )


async def handle_500(request: Request, exc, **context):
    if hasattr(exc, "status_code"):
        status_code = getattr(exc, "status_code")
        status_detail = getattr(exc, "detail", str())
    else:
        status = HTTPStatus.INTERNAL_SERVER_ERROR
        status_code = status.value
        status_detail = status.phrase

    custom_dims = get_custom_dimensions(request, status_code, status_detail, **context)
    logger.error(exc, extra=custom_dims, exc_info=True)

    return JSONResponse(
        content={
            "status_code": status_code,
            "status_detail": status_detail,
        },
        status_code=status_code
    )


exception_handlers = {
    404: handle_404,
    500: handle_500,
    502: handle_500,
    503: handle_500
}
