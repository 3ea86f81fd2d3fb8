#!/usr/bin python3

"""
Field demand
============

Narrows a caller's field selection down to the upstream lookups needed to
answer it.

A selection is a plain nested mapping mirroring the response, e.g.

    {"stats": {"weekly": {"totalDeaths": True, "week": True, "newCases": False}}}

A name set to ``False`` or ``None`` is not requested: a leaf with either
value is skipped, and a section with either value is not selected. Any
other value requests the name. Names that do not match a known section,
stat or marker are ignored, so the analysis never fails - it only narrows.

Author:        vicstats contributors
License:       MIT
Contributors:  vicstats contributors
"""

# Imports
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Python:
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Set

# 3rd party:

# Internal:
from vicstats.utils.assets import StatData, is_requested

# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Header
__author__ = "vicstats contributors"
__copyright__ = "Copyright (c) 2022, vicstats contributors"
__license__ = "MIT"
__version__ = "1.0.0"
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

__all__ = [
    'SectionDemand',
    'Demand',
    'analyse_selection'
]


@dataclass
class SectionDemand:
    section: str
    selected: bool = False
    markers: Set[str] = field(default_factory=set)
    stats: Set[str] = field(default_factory=set)

    def add_fields(self, selection: Mapping[str, Any]):
        markers = StatData.section_markers[self.section]
        stats = StatData.section_fields[self.section]

        for name, value in selection.items():
            if not is_requested(value):
                continue

            if name in markers:
                self.markers.add(name)
            elif name in stats:
                self.stats.add(name)

    def wants(self, name: str) -> bool:
        return name in self.markers or name in self.stats

    @property
    def is_empty(self) -> bool:
        return not (self.markers or self.stats)


@dataclass
class Demand:
    sections: Dict[str, SectionDemand] = field(
        default_factory=lambda: {
            section: SectionDemand(section)
            for section in StatData.sections
        }
    )

    def __getitem__(self, section: str) -> SectionDemand:
        return self.sections[section]

    @property
    def record_ids(self) -> List[str]:
        """
        Upstream record IDs of every requested statistics block, in a
        stable order.
        """
        return sorted(
            StatData.to_record_id[section, stat]
            for section, demand in self.sections.items()
            if section in StatData.batched_sections
            for stat in demand.stats
        )

    @property
    def selected_sections(self) -> List[SectionDemand]:
        return [demand for demand in self.sections.values() if demand.selected]

    def as_log(self) -> Dict[str, Dict[str, List[str]]]:
        return {
            demand.section: {
                "markers": sorted(demand.markers),
                "stats": sorted(demand.stats)
            }
            for demand in self.selected_sections
        }


def analyse_selection(selection: Any) -> Demand:
    """
    Walks ``selection`` once and records, per section, the markers and
    stats it requests.

    Parameters
    ----------
    selection: Any
        Nested mapping of requested field names. Names whose value is
        ``False`` or ``None`` are not requested. Anything other than a
        mapping yields an empty demand.

    Returns
    -------
    Demand
    """
    demand = Demand()

    if not isinstance(selection, Mapping):
        return demand

    def walk(node: Mapping[str, Any], path: str):
        for name, child in node.items():
            if not is_requested(child):
                continue

            child_path = f"{path}.{name}" if path else str(name)

            if child_path in demand.sections:
                section = demand[child_path]
                section.selected = True

                if isinstance(child, Mapping):
                    section.add_fields(child)

            elif child_path in StatData.intermediate_paths and isinstance(child, Mapping):
                walk(child, child_path)

    walk(selection, str())

    return demand
