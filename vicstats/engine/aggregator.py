#!/usr/bin python3

"""
Upstream aggregation
====================

Turns a ``Demand`` into the response tree: dispatches only the upstream
calls the demand needs, concurrently, then routes and merges the results.

Calls are joined all-or-nothing. The first failure cancels the remaining
calls and is re-raised; no partial tree is ever returned.

Author:        vicstats contributors
License:       MIT
Contributors:  vicstats contributors
"""

# Imports
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Python:
from asyncio import get_event_loop, wait, FIRST_EXCEPTION
from collections import defaultdict
from logging import getLogger
from typing import Any, Awaitable, Callable, Dict, Iterable, List, NamedTuple

# 3rd party:
from orjson import dumps

# Internal:
from vicstats.config import Settings
from vicstats.exceptions import UpstreamShapeError
from vicstats.upstream import UpstreamClient
from vicstats.upstream.doses import compute_vaccination_stats
from vicstats.upstream.markers import (
    parse_home_page_date, parse_data_page_datetime, parse_data_page_heading,
    parse_weekly_week, parse_vax_totals_week, extract_page_marker
)
from vicstats.utils.assets import StatData
from vicstats.utils.constants import Sections, MarkerIds, UPDATED, WEEK
from .demand import Demand, SectionDemand

# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Header
__author__ = "vicstats contributors"
__copyright__ = "Copyright (c) 2022, vicstats contributors"
__license__ = "MIT"
__version__ = "1.0.0"
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

__all__ = [
    'resolve_stats',
    'run_jointly',
    'MarkerSource',
    'get_marker_source'
]


logger = getLogger("app")

STATS_JOB = "stats"

TextFetcher = Callable[[UpstreamClient, str], Awaitable[str]]


class MarkerSource(NamedTuple):
    message: str
    fetch: TextFetcher
    parsers: Dict[str, Callable[[str, str], str]]


def paragraph(record_id: str) -> TextFetcher:
    async def fetch(client: UpstreamClient, message: str) -> str:
        return await client.fetch_paragraph(record_id, message)

    return fetch


async def home_page_text(client: UpstreamClient, message: str) -> str:
    html = await client.fetch_home_page(message)
    return extract_page_marker(html, message)


MARKER_SOURCES: Dict[str, MarkerSource] = {
    Sections.daily: MarkerSource(
        "daily (home page) updated",
        paragraph(MarkerIds.daily),
        {UPDATED: parse_home_page_date}
    ),
    Sections.weekly: MarkerSource(
        "weekly (data page) updated + week",
        paragraph(MarkerIds.weekly),
        {UPDATED: parse_data_page_datetime, WEEK: parse_weekly_week}
    ),
    Sections.vax_percentages: MarkerSource(
        "vaccination percentages (home page) updated",
        paragraph(MarkerIds.vax_percentages),
        {UPDATED: parse_home_page_date}
    ),
    Sections.vax_totals: MarkerSource(
        "vaccination totals (weekly vaccination page) week",
        paragraph(MarkerIds.vax_totals),
        {WEEK: parse_vax_totals_week}
    ),
}

PAGE_MARKER_SOURCES: Dict[str, MarkerSource] = {
    Sections.daily: MarkerSource(
        "daily (home page HTML) updated",
        home_page_text,
        {UPDATED: parse_home_page_date}
    ),
}

HEADING_MARKER_SOURCES: Dict[str, MarkerSource] = {
    Sections.weekly: MarkerSource(
        "weekly (data page heading) updated + week",
        paragraph(MarkerIds.weekly),
        {UPDATED: parse_data_page_heading, WEEK: parse_weekly_week}
    ),
}


def get_marker_source(section: str) -> MarkerSource:
    if Settings.daily_marker_source == "page" and section in PAGE_MARKER_SOURCES:
        return PAGE_MARKER_SOURCES[section]

    if Settings.weekly_updated_format == "heading" and section in HEADING_MARKER_SOURCES:
        return HEADING_MARKER_SOURCES[section]

    return MARKER_SOURCES[section]


async def fetch_markers(client: UpstreamClient, source: MarkerSource,
                        wanted: Iterable[str]) -> Dict[str, str]:
    text = await source.fetch(client, source.message)

    return {
        name: parser(text, source.message)
        for name, parser in source.parsers.items()
        if name in wanted
    }


async def fetch_stats(client: UpstreamClient, record_ids: List[str]) -> Dict[str, Dict[str, str]]:
    """
    Fetches all requested statistics blocks in one call and routes each
    record back to its section using the reverse index.
    """
    records = await client.fetch_stat_records(record_ids, STATS_JOB)

    routed = defaultdict(dict)
    seen = set()

    for record_id, value in records:
        key = StatData.from_record_id.get(record_id)

        if key is None:
            logger.warning(dumps({"unknownRecordId": record_id}).decode())
            continue

        section, stat = key
        routed[section][stat] = value
        seen.add(record_id)

    if missing := sorted(set(record_ids) - seen):
        raise UpstreamShapeError(
            source=STATS_JOB,
            details=f"records not included in the response: {missing}"
        )

    return dict(routed)


async def fetch_exposure_sites(client: UpstreamClient) -> Dict[str, int]:
    return {"count": await client.fetch_exposure_site_count()}


async def fetch_vaccination(client: UpstreamClient) -> Dict[str, str]:
    text = await client.fetch_doses_csv()
    return compute_vaccination_stats(text)


def create_jobs(demand: Demand, client: UpstreamClient) -> Dict[str, Awaitable]:
    jobs = dict()

    for section in MARKER_SOURCES:
        if markers := demand[section].markers:
            jobs[f"markers:{section}"] = fetch_markers(
                client,
                get_marker_source(section),
                markers
            )

    if record_ids := demand.record_ids:
        jobs[STATS_JOB] = fetch_stats(client, record_ids)

    if not demand[Sections.exposure_sites].is_empty:
        jobs[Sections.exposure_sites] = fetch_exposure_sites(client)

    if not demand[Sections.vaccination].is_empty:
        jobs[Sections.vaccination] = fetch_vaccination(client)

    return jobs


async def run_jointly(jobs: Dict[str, Awaitable]) -> Dict[str, Any]:
    """
    Runs ``jobs`` concurrently and returns their results by name.

    Raises the first exception encountered, after cancelling the jobs
    still in progress.
    """
    if not jobs:
        return dict()

    loop = get_event_loop()

    tasks = {
        loop.create_task(job): name
        for name, job in jobs.items()
    }

    done, pending = await wait(tasks, return_when=FIRST_EXCEPTION)

    for task in pending:
        task.cancel()

    if pending:
        await wait(pending)

    errors = [
        task.exception()
        for task in done
        if not task.cancelled() and task.exception() is not None
    ]

    if errors:
        raise errors[0]

    return {tasks[task]: task.result() for task in done}


def set_path(tree: Dict[str, Any], path: str, value: Dict[str, Any]):
    *parents, leaf = path.split(".")

    node = tree
    for name in parents:
        node = node.setdefault(name, dict())

    node[leaf] = value


def merge_section(demand: SectionDemand, results: Dict[str, Any]) -> Dict[str, Any]:
    values = {
        **results.get(f"markers:{demand.section}", dict()),
        **results.get(STATS_JOB, dict()).get(demand.section, dict()),
        **results.get(demand.section, dict()),
    }

    return {
        name: value
        for name, value in values.items()
        if demand.wants(name)
    }


async def resolve_stats(demand: Demand, client: UpstreamClient) -> Dict[str, Any]:
    """
    Resolves ``demand`` into a response tree.

    Parameters
    ----------
    demand: Demand
        Per-section markers and stats requested by the caller.

    client: UpstreamClient
        Open client shared by all upstream calls of the request.

    Returns
    -------
    Dict[str, Any]
        Nested response; sections and fields that were not requested
        are absent.
    """
    jobs = create_jobs(demand, client)

    logger.info(dumps({
        "demand": demand.as_log(),
        "upstreamCalls": list(jobs)
    }).decode())

    results = await run_jointly(jobs)

    tree = dict()
    for section in demand.selected_sections:
        set_path(tree, section.section, merge_section(section, results))

    return tree
