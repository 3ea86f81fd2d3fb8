#!/usr/bin python3

"""
Exceptions for the API
----------------------

Objects in this module contain a ``code`` property that provide the appropriate
HTTP status code for a specific exception. The also contain a ``message`` property
that provides additional information and guidance - either generic or specific
depending on the exception.

Upstream failures (``UpstreamFailure`` and its subclasses) are never recovered
locally: any one of them fails the whole request.

Author:        vicstats contributors
License:       MIT
Contributors:  vicstats contributors
"""

# Imports
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Python:
from http import HTTPStatus
from string import Template
from difflib import SequenceMatcher
from typing import Iterable, Any

# 3rd party:
from fastapi.exceptions import HTTPException
from orjson import dumps, OPT_INDENT_2

# Internal:

# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Header
__author__ = "vicstats contributors"
__copyright__ = "Copyright (c) 2022, vicstats contributors"
__license__ = "MIT"
__version__ = "1.0.0"
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

__all__ = [
    'APIException',
    'InvalidQuery',
    'InvalidField',
    'BadRequest',
    'UpstreamFailure',
    'UpstreamTransportError',
    'UpstreamEnvelopeError',
    'UpstreamParseError',
    'UpstreamShapeError',
]


def get_closest_match(value: str, options: Iterable[str]) -> str:
    """
    Finds the closest match to ``value`` in ``options``.

    Parameters
    ----------
    value: str
        Value whose closest match needs to be found.

    options: Iterable[str]
        Options with which to compare ``value``.

    Returns
    -------
    str
        Closest match to ``value`` from ``options``.
    """
    matcher = SequenceMatcher()
    matcher.set_seq1(value)
    max_ratio = 0
    max_ratio_name = str()

    for item in options:
        matcher.set_seq2(item)
        item_ratio = matcher.ratio()
        if item_ratio > max_ratio:
            max_ratio = item_ratio
            max_ratio_name = item

    return max_ratio_name


def format_payload(payload: Any) -> str:
    if isinstance(payload, (bytes, str)):
        return payload.decode() if isinstance(payload, bytes) else payload

    return dumps(payload, option=OPT_INDENT_2, default=str).decode()


class APIException(HTTPException):
    message = str()
    code: HTTPStatus

    def __init__(self, *args, **kwargs):
        self.message = Template(self.message).safe_substitute(**kwargs)
        super().__init__(status_code=self.code, detail=self.message)

    def __str__(self):
        return self.message


class InvalidQuery(APIException):
    message = (
        "Invalid Query: the query does not conform to the correct "
        "pattern. $details"
    )
    code = HTTPStatus.PRECONDITION_FAILED

    def __init__(self, *, details: str = str()):
        super().__init__(details=details)


class InvalidField(APIException):
    message = (
        "Invalid field path '$path'. Field paths are dot-separated names, "
        "e.g. 'stats.weekly.totalDeaths'. Did you mean '$closest_match'?"
    )
    code = HTTPStatus.PRECONDITION_FAILED

    def __init__(self, *, path: str, options: Iterable[str]):
        super().__init__(path=path, closest_match=get_closest_match(path, options))


class BadRequest(APIException):
    message = 'Bad request syntax or unsupported method'
    code = HTTPStatus.BAD_REQUEST


class UpstreamFailure(APIException):
    message = "Fetching $source failed: $details"
    code = HTTPStatus.BAD_GATEWAY

    def __init__(self, *, source: str, details: Any = str()):
        self.source = source
        self.payload = details
        super().__init__(source=source, details=format_payload(details))


class UpstreamTransportError(UpstreamFailure):
    message = "Fetching $source failed: HTTP status code $status_code. $details"

    def __init__(self, *, source: str, status_code: int, details: Any = str()):
        self.status_code_upstream = status_code
        self.source = source
        self.payload = details
        APIException.__init__(
            self,
            source=source,
            status_code=status_code,
            details=format_payload(details)
        )


class UpstreamEnvelopeError(UpstreamFailure):
    message = "Fetching $source failed with an error envelope: $details"


class UpstreamParseError(UpstreamFailure):
    message = (
        "Fetching $source failed: the expected pattern '$pattern' was not "
        "found - the upstream format may have changed. Content: $details"
    )

    def __init__(self, *, source: str, pattern: str, details: Any = str()):
        self.source = source
        self.payload = details
        APIException.__init__(
            self,
            source=source,
            pattern=pattern,
            details=format_payload(details)
        )


class UpstreamShapeError(UpstreamFailure):
    message = "Fetching $source failed: unsuccessful response. $details"
