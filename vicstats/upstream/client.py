#!/usr/bin python3

"""
Upstream client
===============

Read-only access to the sources the statistics are published on:

- the structured content API (JSON:API envelope),
- the COVID-19 website pages (HTML) and its CKAN datastore proxy,
- the vaccination doses CSV feed.

Every call either returns the extracted payload or raises a subclass of
``UpstreamFailure``. Nothing is retried.

Author:        vicstats contributors
License:       MIT
Contributors:  vicstats contributors
"""

# Imports
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Python:
from logging import getLogger
from typing import Any, Dict, List, Tuple, Union, Iterable, Optional

# 3rd party:
from httpx import AsyncClient, AsyncBaseTransport, Response as HTTPResponse, HTTPError
from orjson import loads, dumps, JSONDecodeError

# Internal:
from vicstats.config import Settings
from vicstats.exceptions import (
    UpstreamFailure, UpstreamTransportError,
    UpstreamEnvelopeError, UpstreamShapeError
)
from vicstats.middleware.tracers.utils import trace_upstream_call
from vicstats.utils.constants import MarkerIds

# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Header
__author__ = "vicstats contributors"
__copyright__ = "Copyright (c) 2022, vicstats contributors"
__license__ = "MIT"
__version__ = "1.0.0"
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

__all__ = [
    'UpstreamClient',
    'encode_query',
    'JSON_API_CONTENT_TYPE'
]


logger = getLogger("app")

JSON_API_CONTENT_TYPE = "application/vnd.api+json"

QueryParams = List[Tuple[str, str]]


def encode_query(query: Dict[str, Any], prefix: str = str()) -> QueryParams:
    """
    Flattens a nested query object into bracket notation, e.g.

        {"filter": {"c": {"path": "id", "value": ["a", "b"]}}}

    becomes

        filter[c][path]=id&filter[c][value][0]=a&filter[c][value][1]=b

    which is the format the content API expects for sparse fieldsets
    and filters.
    """
    params = list()

    for key, value in query.items():
        name = f"{prefix}[{key}]" if prefix else str(key)

        if isinstance(value, dict):
            params.extend(encode_query(value, name))
        elif isinstance(value, (list, tuple)):
            for index, item in enumerate(value):
                item_name = f"{name}[{index}]"
                if isinstance(item, dict):
                    params.extend(encode_query(item, item_name))
                else:
                    params.append((item_name, str(item)))
        else:
            params.append((name, str(value)))

    return params


class UpstreamClient:
    """
    Thin wrapper around ``httpx.AsyncClient`` - one instance per request,
    shared by all concurrent upstream calls made for that request.

    Parameters
    ----------
    timeout: float
        Timeout (in seconds) for each upstream call.

        Default: ``Settings.upstream_timeout``

    transport: AsyncBaseTransport
        Optional transport - e.g. ``httpx.MockTransport`` in tests.
    """
    _name = "HTTP"

    def __init__(self, timeout: float = Settings.upstream_timeout,
                 transport: Optional[AsyncBaseTransport] = None):
        self.timeout = timeout
        self._client = AsyncClient(
            timeout=timeout,
            transport=transport,
            follow_redirects=True
        )

    async def __aenter__(self) -> 'UpstreamClient':
        await self._client.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self._client.__aexit__(exc_type, exc_val, exc_tb)

    @trace_upstream_call("timeout")
    async def fetch(self, url: str, message: str, accept: Union[str, None] = None,
                    params: Union[QueryParams, None] = None) -> HTTPResponse:
        headers = {"Accept": accept} if accept is not None else None

        try:
            response = await self._client.get(url, headers=headers, params=params)
        except HTTPError as err:
            raise UpstreamFailure(source=message, details=repr(err)) from err

        logger.info(dumps({
            "upstream": message,
            "url": str(response.url),
            "statusCode": response.status_code
        }).decode())

        if not response.is_success:
            raise UpstreamTransportError(
                source=message,
                status_code=response.status_code,
                details=response.text[:500]
            )

        return response

    async def fetch_json(self, url: str, message: str, accept: str = "application/json",
                         params: Union[QueryParams, None] = None) -> Any:
        response = await self.fetch(url, message, accept=accept, params=params)

        try:
            return loads(response.content)
        except JSONDecodeError as err:
            raise UpstreamFailure(
                source=message,
                details=f"malformed JSON ({err}): {response.text[:500]}"
            ) from err

    async def fetch_text(self, url: str, message: str) -> str:
        response = await self.fetch(url, message)
        return response.text

    async def content_api(self, path: str, message: str,
                          query: Union[Dict[str, Any], None] = None) -> Any:
        url = f"{Settings.content_api_url}/{path}"
        params = encode_query(query) if query else None

        response = await self.fetch_json(
            url,
            message,
            accept=JSON_API_CONTENT_TYPE,
            params=params
        )

        if not isinstance(response, dict):
            raise UpstreamShapeError(source=message, details=response)

        if "errors" in response:
            raise UpstreamEnvelopeError(source=message, details=response["errors"])

        if "data" not in response:
            raise UpstreamShapeError(
                source=message,
                details="response contains neither 'data' nor 'errors'"
            )

        return response["data"]

    async def fetch_paragraph(self, record_id: str, message: str) -> str:
        """
        Returns the HTML body of a ``paragraph--basic_text`` record.
        """
        data = await self.content_api(
            f"paragraph/basic_text/{record_id}",
            message,
            {"fields": {"paragraph--basic_text": "field_paragraph_body"}}
        )

        try:
            return data["attributes"]["field_paragraph_body"]["value"]
        except (KeyError, TypeError) as err:
            raise UpstreamShapeError(
                source=message,
                details=f"missing paragraph body: {err!r}"
            ) from err

    async def fetch_stat_records(self, record_ids: Iterable[str],
                                 message: str = "stats") -> List[Tuple[str, str]]:
        """
        Fetches the statistics blocks in ``record_ids`` in one call, filtered
        on the server. Returns flat ``(record ID, value)`` pairs.
        """
        data = await self.content_api(
            "paragraph/statistic_block",
            message,
            {
                "fields": {"paragraph--statistics_block": "field_statistic_heading"},
                "filter": {
                    "c": {
                        "path": "id",
                        "operator": "IN",
                        "value": list(record_ids)
                    }
                }
            }
        )

        try:
            return [
                (item["id"], item["attributes"]["field_statistic_heading"].strip())
                for item in data
            ]
        except (KeyError, TypeError, AttributeError) as err:
            raise UpstreamShapeError(
                source=message,
                details=f"unexpected statistics block: {err!r}"
            ) from err

    async def fetch_exposure_site_count(self, message: str = "exposure sites") -> int:
        url = f"{Settings.covid_site_url}/sdp-ckan"
        params = [
            ("resource_id", MarkerIds.exposure_sites_resource),
            ("limit", "0")
        ]

        data = await self.fetch_json(url, message, params=params)

        if not isinstance(data, dict) or not data.get("success"):
            details = data.get("error") if isinstance(data, dict) else data
            raise UpstreamShapeError(source=message, details=details)

        try:
            return int(data["result"]["total"])
        except (KeyError, TypeError, ValueError) as err:
            raise UpstreamShapeError(source=message, details=data) from err

    async def fetch_home_page(self, message: str = "home page") -> str:
        return await self.fetch_text(Settings.covid_site_url, message)

    async def fetch_doses_csv(self, message: str = "vaccination doses") -> str:
        return await self.fetch_text(Settings.doses_csv_url, message)
