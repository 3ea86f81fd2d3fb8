#!/usr/bin python3

"""
Author:        vicstats contributors
License:       MIT
Contributors:  vicstats contributors
"""

# Imports
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Python:
from typing import Dict

# 3rd party:

# Internal:
from vicstats.upstream import UpstreamClient
from vicstats.utils.constants import MarkerIds
from .aggregator import run_jointly

# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Header
__author__ = "vicstats contributors"
__copyright__ = "Copyright (c) 2022, vicstats contributors"
__license__ = "MIT"
__version__ = "1.0.0"
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

__all__ = [
    'run_healthcheck'
]


async def test_content_api(client: UpstreamClient) -> Dict[str, str]:
    text = await client.fetch_paragraph(MarkerIds.daily, "healthcheck content API")
    return {"content_api": f"healthy - {len(text)} characters"}


async def test_ckan(client: UpstreamClient) -> Dict[str, str]:
    count = await client.fetch_exposure_site_count("healthcheck CKAN")
    return {"ckan": f"healthy - {count} records"}


async def run_healthcheck() -> dict[str, str]:
    async with UpstreamClient() as client:
        results = await run_jointly({
            "content_api": test_content_api(client),
            "ckan": test_ckan(client)
        })

    response = dict()
    for result in results.values():
        response.update(result)

    return response
