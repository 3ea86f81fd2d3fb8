import asyncio

import pytest
from httpx import ConnectError, MockTransport, ReadTimeout, Response

from vicstats.exceptions import (
    UpstreamFailure, UpstreamTransportError, UpstreamEnvelopeError, UpstreamShapeError
)
from vicstats.upstream.client import UpstreamClient, encode_query, JSON_API_CONTENT_TYPE
from vicstats.utils.constants import MarkerIds

from .conftest import requested_ids


def run(upstream, call):
    async def process():
        async with upstream.client() as client:
            return await call(client)

    return asyncio.run(process())


class TestEncodeQuery:
    def test_bracket_notation(self):
        query = {
            "fields": {"paragraph--statistics_block": "field_statistic_heading"},
            "filter": {
                "c": {"path": "id", "operator": "IN", "value": ["a", "b"]}
            }
        }

        assert encode_query(query) == [
            ("fields[paragraph--statistics_block]", "field_statistic_heading"),
            ("filter[c][path]", "id"),
            ("filter[c][operator]", "IN"),
            ("filter[c][value][0]", "a"),
            ("filter[c][value][1]", "b"),
        ]

    def test_flat_query(self):
        assert encode_query({"limit": 0}) == [("limit", "0")]


class TestContentApi:
    def test_stat_records(self, upstream, weekly_ids):
        record_id = weekly_ids["totalDeaths"]

        records = run(upstream, lambda client: client.fetch_stat_records([record_id]))

        assert len(records) == 1
        assert records[0][0] == record_id
        # Padding is stripped.
        assert records[0][1] == records[0][1].strip()

        request, = upstream.requests
        assert request.headers["accept"] == JSON_API_CONTENT_TYPE
        assert requested_ids(request) == [record_id]
        assert request.url.params["filter[c][operator]"] == "IN"
        assert request.url.params["fields[paragraph--statistics_block]"] == "field_statistic_heading"

    def test_paragraph(self, upstream):
        text = run(upstream, lambda client: client.fetch_paragraph(MarkerIds.weekly, "weekly"))

        assert text.startswith("<h2>Updated:")

        request, = upstream.requests
        assert request.url.params["fields[paragraph--basic_text]"] == "field_paragraph_body"

    def test_error_envelope(self, upstream):
        upstream.routes["/paragraph/statistic_block"] = Response(
            200,
            json={"errors": [{"title": "Bad Request", "detail": "Invalid filter"}]}
        )

        with pytest.raises(UpstreamEnvelopeError) as err:
            run(upstream, lambda client: client.fetch_stat_records(["a"]))

        assert err.value.code == 502
        assert "Invalid filter" in err.value.message

    def test_missing_data(self, upstream):
        upstream.routes["/paragraph/statistic_block"] = Response(200, json={"meta": {}})

        with pytest.raises(UpstreamShapeError):
            run(upstream, lambda client: client.fetch_stat_records(["a"]))

    def test_missing_paragraph_body(self, upstream):
        upstream.routes[f"/paragraph/basic_text/{MarkerIds.daily}"] = Response(
            200,
            json={"data": {"attributes": {}}}
        )

        with pytest.raises(UpstreamShapeError):
            run(upstream, lambda client: client.fetch_paragraph(MarkerIds.daily, "daily"))

    def test_unsuccessful_status(self, upstream):
        upstream.routes["/paragraph/statistic_block"] = Response(503, text="Service Unavailable")

        with pytest.raises(UpstreamTransportError) as err:
            run(upstream, lambda client: client.fetch_stat_records(["a"]))

        assert err.value.status_code_upstream == 503
        assert err.value.source == "stats"

    def test_malformed_json(self, upstream):
        upstream.routes["/paragraph/statistic_block"] = Response(200, text="<html>maintenance</html>")

        with pytest.raises(UpstreamFailure) as err:
            run(upstream, lambda client: client.fetch_stat_records(["a"]))

        assert "malformed JSON" in err.value.message


class TestExposureSites:
    def test_count(self, upstream):
        count = run(upstream, lambda client: client.fetch_exposure_site_count())

        assert count == 42

        request, = upstream.requests
        assert request.url.params["resource_id"] == MarkerIds.exposure_sites_resource
        assert request.url.params["limit"] == "0"

    def test_unsuccessful(self, upstream):
        upstream.routes["/sdp-ckan"] = Response(
            200,
            json={"success": False, "error": {"message": "Resource not found"}}
        )

        with pytest.raises(UpstreamShapeError) as err:
            run(upstream, lambda client: client.fetch_exposure_site_count())

        assert "Resource not found" in err.value.message


class TestTransport:
    def test_connection_error(self, upstream):
        def refuse(request):
            raise ConnectError("Connection refused", request=request)

        upstream.routes["/sdp-ckan"] = refuse

        with pytest.raises(UpstreamFailure):
            run(upstream, lambda client: client.fetch_exposure_site_count())

    def test_timeout(self, upstream):
        timeouts = list()

        def time_out(request):
            timeouts.append(request.extensions["timeout"]["read"])
            raise ReadTimeout("Read timed out", request=request)

        upstream.routes["/sdp-ckan"] = time_out

        async def process():
            async with UpstreamClient(timeout=2.5, transport=MockTransport(upstream)) as client:
                return await client.fetch_exposure_site_count()

        with pytest.raises(UpstreamFailure) as err:
            asyncio.run(process())

        assert err.value.code == 502
        assert "ReadTimeout" in err.value.message
        assert timeouts == [2.5]

    def test_error_page_is_truncated(self, upstream):
        page = "<html>" + "x" * 5000 + "</html>"
        upstream.routes["/sdp-ckan"] = Response(502, text=page)

        with pytest.raises(UpstreamTransportError) as err:
            run(upstream, lambda client: client.fetch_exposure_site_count())

        assert err.value.payload == page[:500]
        assert "</html>" not in err.value.message
