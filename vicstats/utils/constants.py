#!/usr/bin python3

# Imports
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Python:
from typing import NamedTuple, Dict
import re

# 3rd party:

# Internal:

# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

__all__ = [
    'MONTHS',
    'STAT_RECORD_IDS',
    'MarkerIds',
    'MarkerPatterns',
    'Sections',
    'UPDATED',
    'WEEK',
    'DOSES_REGION',
    'DOSES_TAIL_ROWS',
    'AEST_OFFSET'
]


UPDATED = "updated"
WEEK = "week"

# Published times on the website are local (AEST).
AEST_OFFSET = "+10:00"

# The CSV feed holds one row per place per day: 8 states/territories + national.
DOSES_REGION = "VIC"
DOSES_TAIL_ROWS = 2 * 9

MONTHS: Dict[str, str] = {
    "January": "01",
    "February": "02",
    "March": "03",
    "April": "04",
    "May": "05",
    "June": "06",
    "July": "07",
    "August": "08",
    "September": "09",
    "October": "10",
    "November": "11",
    "December": "12",
}


class Sections(NamedTuple):
    daily = "stats.daily"
    weekly = "stats.weekly"
    vax_percentages = "stats.vax.percentages"
    vax_totals = "stats.vax.totals"
    exposure_sites = "exposureSites"
    vaccination = "vaccinationStats"


# Section -> stat identifier -> upstream record ID (``paragraph--statistics_block``).
# Record IDs are unique across all sections; stat names are only unique
# within a section.
STAT_RECORD_IDS: Dict[str, Dict[str, str]] = {
    Sections.daily: {
        "newCases": "bdbed36c-9a83-4ca5-9e93-2052dcba74d3",
        "newPCRTests": "8454415a-c079-4edb-942d-aae49f9243eb",
        "newRATCases": "08ef30d1-0df5-4709-9f13-c29e2e9e06a1",
        "hospitalCases": "e686ad47-2c6f-4b4a-b4da-7403de0d4f62",
        "icuCases": "9465725a-4321-471c-928c-76be4577ac86",
        "newDeaths": "e9a50592-264e-42d7-adb5-27716cb16d41",
    },
    Sections.weekly: {
        "newCases": "8e545be4-b7ab-4f9b-a04e-eb0ba4c815b8",
        "activeCases": "ec10956c-4f49-4dbf-b751-05e353ef6f27",
        "averageHospitalCases": "589143cd-192c-4813-9aa2-ddaffd02d075",
        "averageICUCases": "b7db172d-7f4c-4cba-9bf0-f987591411fc",
        "averagePCRTests": "957201dc-ed78-4246-9f21-53e7b035d570",
        "averagePositiveRATs": "f862f783-74a1-4479-b096-ae9167e58525",
        "totalPCRCases": "b725902f-6878-4829-b9eb-35d605a1be34",
        "averageDeaths": "a481ad4b-fb95-4645-91fa-19a0eeb2a3cf",
        "totalDeaths": "69a44e8d-e04b-4c9a-ad7e-4dda9c662ad2",
        "totalRecovered": "9c9481a7-d67b-4815-9a2d-bb6d71c1a774",
    },
    Sections.vax_percentages: {
        "dose1": "d675c960-cb31-4d94-8b18-dd31b6454aff",
        "dose2": "4d5012f2-b692-459b-b07f-c91617fcb0d9",
        "dose3": "11fe8010-615b-480b-8af3-8810c914c6f7",
    },
    Sections.vax_totals: {
        "newDoses": "324e92eb-e063-4b00-89f5-50413978d839",
        "totalDoses": "fce9c2cb-a847-494f-b6b4-7e557e5e5000",
        "newAustralianDoses": "d0d0089f-fbbd-457e-aa01-7804030c49e4",
        "newVictorianDoses": "1676357f-540c-49c1-8f09-a79917cc8e84",
    },
}


class MarkerIds(NamedTuple):
    # ``paragraph--basic_text`` records carrying the "last updated" text.
    daily = "bc10ccc5-f19e-4cc5-832d-fdfe86639106"
    weekly = "748ad06f-7143-47f1-8006-1347e9d4dd10"
    vax_percentages = "27c3f771-fdee-4fe9-a014-88c611b81de0"
    vax_totals = "91d22388-aff5-4278-b8a7-aa6357cdf389"
    exposure_sites_resource = "afb52611-6061-4a2b-9110-74c920bede77"


class MarkerPatterns(NamedTuple):
    home_page_date = re.compile(
        r"Data last updated .+?day(?:&nbsp;| )(\d\d?)(?:&nbsp;| )(\w+?) (\d{4})"
    )
    # Format used while the data page heading was a bare ``<h2>``.
    data_page_heading = re.compile(
        r"Updated: (\d\d?) (\w+?) (\d{4}) (\d\d?):(\d\d?) (a|p)m</h2>"
    )
    data_page_datetime = re.compile(
        r"Updated:( \d\d?|&nbsp;) (\w+?) (\d{4}) (\d\d?):(\d\d?) (a|p)m"
    )
    weekly_week = re.compile(r"Data from (.+?)\.")
    vax_totals_week = re.compile(r"From (.+?)<")
    home_page_text = re.compile(r"Data last updated")
