#!/usr/bin python3

# Imports
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Python:
from logging import getLogger
from typing import Any, Dict, List, Mapping, Union, Iterable
import re

# 3rd party:
from starlette.datastructures import URL
from orjson import dumps

# Internal:
from vicstats.exceptions import InvalidQuery, InvalidField
from ..assets import StatData, is_requested

# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

__all__ = [
    'Request',
    'selection_from_paths',
    'paths_from_selection',
    'known_field_paths'
]


logger = getLogger('app')

FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

Selection = Dict[str, Any]


def known_field_paths() -> List[str]:
    return sorted(
        f"{section}.{name}"
        for section in StatData.sections
        for name in StatData.section_fields[section] | StatData.section_markers[section]
    )


def selection_from_paths(paths: Iterable[str]) -> Selection:
    """
    Converts dotted field paths into a nested selection:

        ["stats.weekly.totalDeaths", "stats.weekly.week"]
        -> {"stats": {"weekly": {"totalDeaths": True, "week": True}}}

    Comma-separated paths in a single item are split.
    """
    selection = dict()

    for item in paths:
        for path in filter(None, map(str.strip, item.split(","))):
            names = path.split(".")

            if not all(map(FIELD_NAME.match, names)):
                raise InvalidField(path=path, options=known_field_paths())

            *parents, leaf = names
            node = selection
            for name in parents:
                child = node.get(name)
                if not isinstance(child, dict):
                    child = node[name] = dict()
                node = child

            node.setdefault(leaf, True)

    return selection


def paths_from_selection(selection: Mapping[str, Any], prefix: str = str()) -> List[str]:
    paths = list()

    for name, child in selection.items():
        if not is_requested(child):
            continue

        path = f"{prefix}.{name}" if prefix else str(name)

        if isinstance(child, Mapping) and len(child):
            paths.extend(paths_from_selection(child, path))
        else:
            paths.append(path)

    return paths


class Request:
    selection: Selection
    method: str
    url: URL

    _field_paths: List[str]

    def __init__(self, selection: Any, method: str, url: URL):
        self.method = method
        self.url = url

        if not isinstance(selection, Mapping) or not len(selection):
            raise InvalidQuery(
                details="The selection must be a non-empty object of field names."
            )

        self.selection = dict(selection)

        logger.info(dumps({"requestURL": str(url), "method": method}).decode())

    @classmethod
    def from_field_paths(cls, fields: Union[List[str], str], method: str, url: URL) -> 'Request':
        if isinstance(fields, str):
            fields = [fields]

        return cls(
            selection=selection_from_paths(fields),
            method=method,
            url=url
        )

    @property
    def field_paths(self) -> List[str]:
        if (field_paths := getattr(self, '_field_paths', None)) is not None:
            return field_paths

        self._field_paths = paths_from_selection(self.selection)

        return self._field_paths
