#!/usr/bin python3

"""
Response models. Every field is optional: the response only carries what
was requested, and unset fields are excluded on serialisation.
"""

# Imports
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Python:
from datetime import date, datetime
from typing import Optional

# 3rd party:
from pydantic import BaseModel, ConfigDict, Field

# Internal:

# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

__all__ = [
    'QueryResponse'
]


WEEK_DESCRIPTION = (
    "The week that these statistics are for. This will be a range of "
    "dates, such as '{}'."
)


class Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class DailyStats(Section):
    """Daily statistics published on the home page."""
    updated: Optional[date] = None
    newCases: Optional[str] = Field(None, description="new cases (PCR and rapid antigen test)")
    newPCRTests: Optional[str] = Field(None, description="total PCR tests")
    newRATCases: Optional[str] = Field(None, description="rapid antigen test cases")
    hospitalCases: Optional[str] = Field(None, description="cases in hospital")
    icuCases: Optional[str] = Field(None, description="cases in ICU")
    newDeaths: Optional[str] = Field(None, description="lives lost")


class WeeklyStats(Section):
    """Weekly statistics published on the data page."""
    updated: Optional[datetime] = Field(
        None,
        description="If the day isn't available on the website it will default to the 1st."
    )
    week: Optional[str] = Field(
        None,
        description=WEEK_DESCRIPTION.format(
            "Friday 16 September 2022 - Thursday 22 September 2022"
        )
    )
    newCases: Optional[str] = Field(None, description="total cases for the past week")
    activeCases: Optional[str] = Field(None, description="total active cases")
    averageHospitalCases: Optional[str] = Field(
        None, description="cases in hospital (7-day rolling average)"
    )
    averageICUCases: Optional[str] = Field(None, description="cases in ICU (7-day rolling average)")
    averagePCRTests: Optional[str] = Field(None, description="PCR tests (7-day rolling average)")
    averagePositiveRATs: Optional[str] = Field(
        None, description="positive RATs (7-day rolling average)"
    )
    totalPCRCases: Optional[str] = Field(None, description="total cases from PCR")
    averageDeaths: Optional[str] = Field(
        None, description="lives lost on average each day over the past week"
    )
    totalDeaths: Optional[str] = Field(None, description="total lives lost")
    totalRecovered: Optional[str] = Field(None, description="cases recovered")


class VaxPercentageStats(Section):
    updated: Optional[date] = None
    dose1: Optional[str] = Field(None, description="12+ eligible Victorians first dose")
    dose2: Optional[str] = Field(None, description="12+ eligible Victorians second dose")
    dose3: Optional[str] = Field(None, description="18+ eligible Victorians third dose")


class VaxTotalStats(Section):
    week: Optional[str] = Field(
        None,
        description=WEEK_DESCRIPTION.format("6 - 12 September 2022")
    )
    newDoses: Optional[str] = Field(None, description="Total doses administered this week")
    totalDoses: Optional[str] = Field(None, description="Total doses administered")
    newAustralianDoses: Optional[str] = Field(
        None, description="Doses administered by Australian Government"
    )
    newVictorianDoses: Optional[str] = Field(
        None, description="Doses administered by Victorian Government"
    )


class VaxStats(Section):
    percentages: Optional[VaxPercentageStats] = None
    totals: Optional[VaxTotalStats] = None


class Stats(Section):
    daily: Optional[DailyStats] = None
    weekly: Optional[WeeklyStats] = None
    vax: Optional[VaxStats] = None


class ExposureSites(Section):
    count: Optional[int] = None


class VaccinationStats(Section):
    updated: Optional[date] = None
    vaxRate: Optional[str] = None
    vaxRateDelta: Optional[str] = None
    vax2Rate: Optional[str] = None
    vax2RateDelta: Optional[str] = None


class QueryResponse(Section):
    stats: Optional[Stats] = None
    exposureSites: Optional[ExposureSites] = None
    vaccinationStats: Optional[VaccinationStats] = None
