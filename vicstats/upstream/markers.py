#!/usr/bin python3

"""
Marker parsers
==============

Pure functions that extract "last updated" markers from the text published
upstream. Each upstream format has its own parser; none of them touch the
network.

A pattern that fails to match raises ``UpstreamParseError`` - the upstream
format has most likely changed.
"""

# Imports
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Python:
from re import Pattern, Match

# 3rd party:
from bs4 import BeautifulSoup

# Internal:
from vicstats.exceptions import UpstreamParseError
from vicstats.utils.constants import MarkerPatterns, MONTHS, AEST_OFFSET

# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

__all__ = [
    'normalise_spaces',
    'to_24_hour',
    'parse_home_page_date',
    'parse_data_page_datetime',
    'parse_data_page_heading',
    'parse_weekly_week',
    'parse_vax_totals_week',
    'extract_page_marker'
]


NBSP = "&nbsp;"


def normalise_spaces(text: str) -> str:
    # Text extracted from parsed HTML carries U+00A0 where the raw
    # markup carries the entity.
    return text.replace("\xa0", NBSP)


def match_pattern(pattern: Pattern, text: str, source: str) -> Match:
    found = pattern.search(normalise_spaces(text))

    if found is None:
        raise UpstreamParseError(source=source, pattern=pattern.pattern, details=text)

    return found


def month_number(name: str, pattern: Pattern, text: str, source: str) -> str:
    if name not in MONTHS:
        raise UpstreamParseError(source=source, pattern=pattern.pattern, details=text)

    return MONTHS[name]


def to_24_hour(hour: int, am_pm: str) -> int:
    """
    Converts a 12-hour clock hour to the 24-hour clock.

    ``am_pm`` is either ``"a"`` or ``"p"``.
    """
    if hour == 12:
        return 0 if am_pm == "a" else 12

    return hour if am_pm == "a" else hour + 12


def parse_home_page_date(text: str, source: str = "home page updated") -> str:
    """
    "Data last updated Friday 16 September 2022." -> "2022-09-16"
    """
    pattern = MarkerPatterns.home_page_date
    day, month, year = match_pattern(pattern, text, source).groups()

    return f"{year}-{month_number(month, pattern, text, source)}-{day.zfill(2)}"


def format_datetime(year: str, month: str, day: str, hour: str, minute: str,
                    am_pm: str) -> str:
    hour_24 = to_24_hour(int(hour), am_pm)
    return f"{year}-{month}-{day}T{hour_24:02d}:{minute.zfill(2)}:00{AEST_OFFSET}"


def parse_data_page_datetime(text: str, source: str = "data page updated") -> str:
    """
    "Updated: 16 September 2022 2:30 pm" -> "2022-09-16T14:30:00+10:00"

    The website occasionally omits the day of the month, leaving a
    non-breaking space in its place; the day then defaults to the 1st.
    """
    pattern = MarkerPatterns.data_page_datetime
    day, month, year, hour, minute, am_pm = match_pattern(pattern, text, source).groups()

    day = "01" if day == NBSP else day.strip().zfill(2)
    month = month_number(month, pattern, text, source)

    return format_datetime(year, month, day, hour, minute, am_pm)


def parse_data_page_heading(text: str, source: str = "data page updated") -> str:
    """
    Earlier data page format, where the marker closes an ``<h2>`` heading:

    "Updated: 16 September 2022 2:30 pm</h2>" -> "2022-09-16T14:30:00+10:00"
    """
    pattern = MarkerPatterns.data_page_heading
    day, month, year, hour, minute, am_pm = match_pattern(pattern, text, source).groups()

    month = month_number(month, pattern, text, source)

    return format_datetime(year, month, day.zfill(2), hour, minute, am_pm)


def parse_weekly_week(text: str, source: str = "weekly week") -> str:
    """
    "Data from Friday 16 September 2022 - Thursday 22 September 2022."
    -> "Friday 16 September 2022 - Thursday 22 September 2022"
    """
    return match_pattern(MarkerPatterns.weekly_week, text, source).group(1)


def parse_vax_totals_week(text: str, source: str = "vaccination totals week") -> str:
    """
    "<p>From 6 - 12 September 2022</p>" -> "6 - 12 September 2022"
    """
    return match_pattern(MarkerPatterns.vax_totals_week, text, source).group(1)


def extract_page_marker(html: str, source: str = "home page") -> str:
    """
    Finds the text of the element on an HTML page that carries the
    "Data last updated" marker.
    """
    soup = BeautifulSoup(html, "html.parser")
    node = soup.find(string=MarkerPatterns.home_page_text)

    if node is None:
        raise UpstreamParseError(
            source=source,
            pattern=MarkerPatterns.home_page_text.pattern,
            details=html[:500]
        )

    element = node.parent if node.parent is not None else node
    return normalise_spaces(element.get_text(" ", strip=True))
