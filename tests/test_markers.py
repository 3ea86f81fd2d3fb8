import pytest

from vicstats.exceptions import UpstreamParseError
from vicstats.upstream.markers import (
    to_24_hour, parse_home_page_date, parse_data_page_datetime,
    parse_data_page_heading, parse_weekly_week, parse_vax_totals_week,
    extract_page_marker
)


class TestHomePageDate:
    @pytest.mark.parametrize("text, expected", [
        ("<p>Data last updated Friday 16 September 2022.</p>", "2022-09-16"),
        ("Data last updated Friday&nbsp;16 September 2022", "2022-09-16"),
        ("Data last updated Monday&nbsp;5&nbsp;December 2022", "2022-12-05"),
        ("Data last updated Tuesday\xa01\xa0March 2022", "2022-03-01"),
    ])
    def test_parses_date(self, text, expected):
        assert parse_home_page_date(text) == expected

    def test_missing_marker(self):
        with pytest.raises(UpstreamParseError) as err:
            parse_home_page_date("<p>Coronavirus update</p>", "daily updated")

        assert err.value.code == 502
        assert "daily updated" in err.value.message

    def test_unknown_month(self):
        with pytest.raises(UpstreamParseError):
            parse_home_page_date("Data last updated Friday 16 Septober 2022")


class TestDataPageDatetime:
    @pytest.mark.parametrize("text, expected", [
        ("Updated: 16 September 2022 2:30 pm", "2022-09-16T14:30:00+10:00"),
        ("<h2>Updated: 3 October 2022 9:05 am</h2>", "2022-10-03T09:05:00+10:00"),
        ("Updated: 1 October 2022 12:15 am", "2022-10-01T00:15:00+10:00"),
        ("Updated: 1 October 2022 12:15 pm", "2022-10-01T12:15:00+10:00"),
    ])
    def test_parses_datetime(self, text, expected):
        assert parse_data_page_datetime(text) == expected

    def test_omitted_day_defaults_to_first(self):
        text = "Updated:&nbsp; September 2022 9:05 am"

        assert parse_data_page_datetime(text) == "2022-09-01T09:05:00+10:00"

    def test_omitted_day_with_unicode_space(self):
        text = "Updated:\xa0 September 2022 9:05 am"

        assert parse_data_page_datetime(text) == "2022-09-01T09:05:00+10:00"

    def test_missing_marker(self):
        with pytest.raises(UpstreamParseError):
            parse_data_page_datetime("Updated recently")

    def test_heading_format(self):
        text = "<h2>Updated: 16 September 2022 2:30 pm</h2>"

        assert parse_data_page_heading(text) == "2022-09-16T14:30:00+10:00"

    def test_heading_format_requires_closing_tag(self):
        with pytest.raises(UpstreamParseError):
            parse_data_page_heading("<p>Updated: 16 September 2022 2:30 pm</p>")


class TestClock:
    @pytest.mark.parametrize("hour, am_pm, expected", [
        (12, "a", 0),
        (1, "a", 1),
        (11, "a", 11),
        (12, "p", 12),
        (1, "p", 13),
        (11, "p", 23),
    ])
    def test_to_24_hour(self, hour, am_pm, expected):
        assert to_24_hour(hour, am_pm) == expected


class TestWeekMarkers:
    def test_weekly_week(self):
        text = (
            "<p>Data from Friday 16 September 2022 - Thursday 22 September 2022. "
            "Figures are updated weekly.</p>"
        )

        assert parse_weekly_week(text) == "Friday 16 September 2022 - Thursday 22 September 2022"

    def test_vax_totals_week(self):
        assert parse_vax_totals_week("<p>From 6 - 12 September 2022</p>") == "6 - 12 September 2022"

    def test_vax_totals_week_missing(self):
        with pytest.raises(UpstreamParseError):
            parse_vax_totals_week("<p>No data this week</p>")


class TestPageMarker:
    def test_extracts_marker_text(self):
        html = (
            "<html><body><header>Coronavirus (COVID-19) Victoria</header>"
            "<div class='update'><p>Data last updated Friday&nbsp;16&nbsp;September 2022."
            "</p></div></body></html>"
        )

        text = extract_page_marker(html)

        assert text == "Data last updated Friday&nbsp;16&nbsp;September 2022."
        assert parse_home_page_date(text) == "2022-09-16"

    def test_marker_split_across_elements(self):
        html = "<p>Data last updated <strong>Monday 5 December 2022</strong></p>"

        assert parse_home_page_date(extract_page_marker(html)) == "2022-12-05"

    def test_missing_marker(self):
        with pytest.raises(UpstreamParseError):
            extract_page_marker("<html><body><p>Nothing here</p></body></html>")
