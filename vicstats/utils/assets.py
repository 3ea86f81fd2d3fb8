#!/usr/bin python3

# Imports
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Python:
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Tuple, Dict

# 3rd party:

# Internal:
from vicstats.config import Settings
from . import constants as const

# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

__all__ = [
    'RequestMethod',
    'StatData',
    'build_stat_tables',
    'is_requested',
    'add_cloud_role_name'
]


StatKey = Tuple[str, str]


def build_stat_tables(table: Dict[str, Dict[str, str]]) -> Tuple[Mapping[StatKey, str],
                                                                  Mapping[str, StatKey]]:
    """
    Builds the read-only ``(section, stat) -> record ID`` mapping and
    its reverse index.

    Raises
    ------
    ValueError
        If a record ID is assigned to more than one stat.
    """
    to_id = dict()
    from_id = dict()

    for section, stats in table.items():
        for stat_name, record_id in stats.items():
            if record_id in from_id:
                raise ValueError(
                    f"Record ID '{record_id}' is assigned to both "
                    f"{from_id[record_id]} and {(section, stat_name)}"
                )

            to_id[section, stat_name] = record_id
            from_id[record_id] = (section, stat_name)

    return MappingProxyType(to_id), MappingProxyType(from_id)


_to_id, _from_id = build_stat_tables(const.STAT_RECORD_IDS)


def is_requested(value: Any) -> bool:
    """
    A selected name counts as requested unless its value is ``False``
    or ``None``.
    """
    return value is not None and value is not False


@dataclass()
class RequestMethod:
    Get: str = "GET"
    Head: str = "HEAD"
    Post: str = "POST"


@dataclass()
class StatData:
    to_record_id = _to_id
    from_record_id = _from_id

    # Sections backed by the statistics blocks of the content API.
    batched_sections = frozenset(const.STAT_RECORD_IDS)

    section_fields = MappingProxyType({
        **{
            section: frozenset(stats)
            for section, stats in const.STAT_RECORD_IDS.items()
        },
        const.Sections.exposure_sites: frozenset({"count"}),
        const.Sections.vaccination: frozenset({
            "vaxRate", "vaxRateDelta", "vax2Rate", "vax2RateDelta"
        }),
    })

    # Markers each section publishes.
    section_markers = MappingProxyType({
        const.Sections.daily: frozenset({const.UPDATED}),
        const.Sections.weekly: frozenset({const.UPDATED, const.WEEK}),
        const.Sections.vax_percentages: frozenset({const.UPDATED}),
        const.Sections.vax_totals: frozenset({const.WEEK}),
        const.Sections.exposure_sites: frozenset(),
        const.Sections.vaccination: frozenset({const.UPDATED}),
    })

    sections = tuple(section_fields)

    # Non-section nodes leading to sections, e.g. "stats" and "stats.vax".
    intermediate_paths = frozenset(
        str.join(".", section.split(".")[:depth])
        for section in section_fields
        for depth in range(1, section.count(".") + 1)
    )


def add_cloud_role_name(envelope):
    envelope.tags['ai.cloud.role'] = Settings.cloud_role_name
    return True
