#!/usr/bin python3

# Imports
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Python:
import logging
from typing import List, Dict, Any, Callable
from http import HTTPStatus

# 3rd party:
from fastapi import Query, Body, Request as APIRequest
from fastapi.responses import Response as APIResponse
from orjson import dumps

# Internal:
from vicstats.startup import start_app
from vicstats.utils.operations import Response, Request
from vicstats.utils.assets import RequestMethod
from vicstats.exceptions import APIException
from vicstats.engine import get_stats, run_healthcheck
from vicstats.config import Settings

# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

__all__ = [
    'main',
    'main_post',
    'app'
]


logger = logging.getLogger("app")

app = start_app()


async def process_request(method: str, make_request: Callable[[], Request]) -> APIResponse:
    try:
        request = make_request()
        response = await get_stats(request=request)

    except APIException as err:
        logger.info(err)
        content = dumps({"response": err.message, "status_code": err.code})
        response = Response(content=content, status_code=err.code)

    except Exception as err:
        # A generic exception may contain sensitive data and must
        # never be included in the response.
        logger.exception(err)
        err = HTTPStatus.INTERNAL_SERVER_ERROR
        content = dumps({
            "response": (
                "An internal error occurred whilst processing your request, please "
                "try again. If the problem persists, please report as an issue and "
                "include your request."
            ),
            "status_code": err,
            "status": getattr(err, 'phrase')
        })
        response = Response(content=content, status_code=err)

    if method == RequestMethod.Head:
        return APIResponse(
            None,
            status_code=response.status_code,
            headers=response.headers
        )

    return APIResponse(
        response.content,
        status_code=response.status_code,
        headers=response.headers
    )


@app.get("/api/v1/stats")
@app.head("/api/v1/stats")
async def main(req: APIRequest,
               field: List[str] = Query(..., title="Field path",
                                        description="Dot-separated path, e.g. stats.weekly.totalDeaths")):
    return await process_request(
        req.method,
        lambda: Request.from_field_paths(
            fields=field,
            method=req.method,
            url=req.url
        )
    )


@app.post("/api/v1/stats")
async def main_post(req: APIRequest, selection: Dict[str, Any] = Body(...)):
    return await process_request(
        req.method,
        lambda: Request(
            selection=selection,
            method=req.method,
            url=req.url
        )
    )


@app.get(f"/api/v1/{Settings.healthcheck_path}")
@app.head(f"/api/v1/{Settings.healthcheck_path}")
async def healthcheck(req: APIRequest):
    try:
        response = await run_healthcheck()
    except Exception as err:
        logger.exception(err)
        raise err

    if req.method == RequestMethod.Head:
        return APIResponse(None, status_code=HTTPStatus.NO_CONTENT.real)

    return response


if __name__ == "__main__":
    from uvicorn import run as uvicorn_run

    uvicorn_run(app, port=1244)
