#!/usr/bin python3

"""
Author:        vicstats contributors
License:       MIT
Contributors:  vicstats contributors
"""

# Imports
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Python:
from io import StringIO
from decimal import Decimal, InvalidOperation
from typing import Dict

# 3rd party:
from pandas import DataFrame, read_csv, to_datetime
from pandas.errors import ParserError

# Internal:
from vicstats.exceptions import UpstreamParseError, UpstreamShapeError
from vicstats.utils.constants import DOSES_REGION, DOSES_TAIL_ROWS

# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Header
__author__ = "vicstats contributors"
__copyright__ = "Copyright (c) 2022, vicstats contributors"
__license__ = "MIT"
__version__ = "1.0.0"
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

__all__ = [
    'parse_doses_csv',
    'rate_delta',
    'compute_vaccination_stats'
]


SOURCE = "vaccination doses"

DOSES_COLUMNS = [
    "date", "place", "totalFirst", "totalFirstPct", "totalSecond", "totalSecondPct"
]


def to_decimal(value: str) -> Decimal:
    try:
        return Decimal(value.strip().rstrip("%"))
    except (InvalidOperation, AttributeError) as err:
        raise UpstreamParseError(
            source=SOURCE,
            pattern="decimal number",
            details=value
        ) from err


def rate_delta(today: str, yesterday: str) -> str:
    """
    Day-over-day change of a rate, to exactly two decimal places.

    >>> rate_delta("62.45", "62.10")
    '0.35'
    """
    return f"{to_decimal(today) - to_decimal(yesterday):.2f}"


def parse_doses_csv(text: str, region: str = DOSES_REGION) -> DataFrame:
    """
    Returns the last two rows published for ``region`` - yesterday
    followed by today. Values are kept as published (strings).
    """
    try:
        df = read_csv(
            StringIO(text),
            header=None,
            names=DOSES_COLUMNS,
            usecols=range(len(DOSES_COLUMNS)),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True
        )
    except (ParserError, ValueError) as err:
        raise UpstreamShapeError(source=SOURCE, details=str(err)) from err

    rows = (
        df
        .tail(DOSES_TAIL_ROWS)
        .loc[lambda frame: frame.place == region, :]
        .reset_index(drop=True)
    )

    if len(rows) != 2:
        raise UpstreamShapeError(
            source=SOURCE,
            details=f"expected 2 rows for '{region}' in the last {DOSES_TAIL_ROWS}, got {len(rows)}"
        )

    return rows


def compute_vaccination_stats(text: str) -> Dict[str, str]:
    yesterday, today = (row for _, row in parse_doses_csv(text).iterrows())

    try:
        updated = to_datetime(today["date"]).date().isoformat()
    except (ValueError, TypeError) as err:
        raise UpstreamParseError(source=SOURCE, pattern="date", details=today["date"]) from err

    first_today, first_yesterday = today["totalFirstPct"], yesterday["totalFirstPct"]
    second_today, second_yesterday = today["totalSecondPct"], yesterday["totalSecondPct"]

    return {
        "updated": updated,
        "vaxRate": f"{to_decimal(first_today):.2f}",
        "vaxRateDelta": rate_delta(first_today, first_yesterday),
        # Published formatting is kept as is.
        "vax2Rate": second_today,
        "vax2RateDelta": rate_delta(second_today, second_yesterday),
    }
