#!/usr/bin python3

# Imports
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Python:
from http import HTTPStatus

# 3rd party:

# Internal:
from vicstats.exceptions import BadRequest
from vicstats.upstream import UpstreamClient
from vicstats.utils.assets import RequestMethod
from vicstats.utils.operations import Request, Response
from .aggregator import resolve_stats
from .demand import analyse_selection
from .utils import format_response

# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

__all__ = [
    'get_stats'
]


async def get_stats(*, request: Request) -> Response:
    if request.method not in (RequestMethod.Get, RequestMethod.Head, RequestMethod.Post):
        raise BadRequest()

    demand = analyse_selection(request.selection)

    async with UpstreamClient() as client:
        tree = await resolve_stats(demand, client)

    return Response(
        content=format_response(tree),
        status_code=HTTPStatus.OK.real,
        request=request
    )
