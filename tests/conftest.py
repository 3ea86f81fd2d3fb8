import asyncio
from typing import Callable, Dict, List, Union

import pytest
from httpx import MockTransport, Request, Response

from vicstats.engine.aggregator import resolve_stats
from vicstats.engine.demand import analyse_selection
from vicstats.upstream import UpstreamClient
from vicstats.utils.constants import MarkerIds, STAT_RECORD_IDS, Sections


DAILY_TEXT = "<p>Data last updated Friday&nbsp;16 September 2022.</p>"
WEEKLY_TEXT = (
    "<h2>Updated: 23 September 2022 2:30 pm</h2>"
    "<p>Data from Friday 16 September 2022 - Thursday 22 September 2022.</p>"
)
VAX_PCTS_TEXT = "<p>Data last updated Thursday 15 September 2022</p>"
VAX_TOTALS_TEXT = "<p>From 6 - 12 September 2022</p>"

PLACES = ["AUS", "ACT", "NSW", "NT", "QLD", "SA", "TAS", "VIC", "WA"]


def doses_csv(vic_rows: Dict[str, tuple]) -> str:
    """
    Builds the doses CSV: one row per place per day, with the given
    ``(first pct, second pct)`` values for VIC.
    """
    lines = ["date,place,totalFirst,totalFirstPct,totalSecond,totalSecondPct"]

    for day, (first_pct, second_pct) in vic_rows.items():
        for place in PLACES:
            if place == "VIC":
                lines.append(f"{day},{place},4000000,{first_pct},2500000,{second_pct}")
            else:
                lines.append(f"{day},{place},100,50.00,80,40.00")

    return str.join("\r\n", lines) + "\r\n"


DOSES_CSV = doses_csv({
    "2021-10-03": ("61.80", "39.9"),
    "2021-10-04": ("62.10", "40.2"),
    "2021-10-05": ("62.45", "41.0"),
})

STAT_VALUES = {
    record_id: f"{index + 1},{index:03d}"
    for index, record_id in enumerate(
        record_id
        for stats in STAT_RECORD_IDS.values()
        for record_id in stats.values()
    )
}


def paragraph(text: str) -> Response:
    return Response(200, json={
        "data": {
            "type": "paragraph--basic_text",
            "attributes": {"field_paragraph_body": {"value": text}}
        }
    })


def requested_ids(request: Request) -> List[str]:
    return [
        value
        for key, value in request.url.params.multi_items()
        if key.startswith("filter[c][value]")
    ]


def statistic_blocks(values: Dict[str, str], ignore_filter: bool = False) -> Callable:
    def handler(request: Request) -> Response:
        ids = list(values) if ignore_filter else requested_ids(request)

        return Response(200, json={
            "data": [
                {
                    "type": "paragraph--statistics_block",
                    "id": record_id,
                    # Upstream values are padded.
                    "attributes": {"field_statistic_heading": f" {values[record_id]} "}
                }
                for record_id in ids
                if record_id in values
            ]
        })

    return handler


class FakeUpstream:
    """
    Serves canned upstream responses by URL path and records every request.

    Routes match on the exact path first, then on the path suffix.
    """
    def __init__(self):
        self.requests: List[Request] = list()
        self.routes: Dict[str, Union[Response, Callable]] = {
            f"/paragraph/basic_text/{MarkerIds.daily}": paragraph(DAILY_TEXT),
            f"/paragraph/basic_text/{MarkerIds.weekly}": paragraph(WEEKLY_TEXT),
            f"/paragraph/basic_text/{MarkerIds.vax_percentages}": paragraph(VAX_PCTS_TEXT),
            f"/paragraph/basic_text/{MarkerIds.vax_totals}": paragraph(VAX_TOTALS_TEXT),
            "/paragraph/statistic_block": statistic_blocks(STAT_VALUES),
            "/sdp-ckan": Response(200, json={"success": True, "result": {"total": 42}}),
            "aus-doses-breakdown.csv": Response(200, text=DOSES_CSV),
        }

    def __call__(self, request: Request) -> Response:
        self.requests.append(request)
        path = request.url.path

        handler = self.routes.get(path)
        if handler is None:
            handler = next(
                (route for key, route in self.routes.items() if key != "/" and path.endswith(key)),
                Response(404, text="Not Found")
            )

        if callable(handler):
            return handler(request)

        # Responses are single use.
        return Response(handler.status_code, headers=handler.headers, content=handler.content)

    def requests_to(self, suffix: str) -> List[Request]:
        return [request for request in self.requests if request.url.path.endswith(suffix)]

    def client(self) -> UpstreamClient:
        return UpstreamClient(transport=MockTransport(self))


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def resolve(upstream):
    """Resolves a selection against the fake upstream."""
    def run(selection):
        async def process():
            async with upstream.client() as client:
                return await resolve_stats(analyse_selection(selection), client)

        return asyncio.run(process())

    return run


@pytest.fixture
def weekly_ids():
    return STAT_RECORD_IDS[Sections.weekly]
