#!/usr/bin python3

# Imports
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Python:
from typing import Union, Dict
from urllib.parse import urlencode

# 3rd party:

# Internal:
from vicstats.config import Settings
from .request import Request

# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

__all__ = [
    'Response'
]


API_URL = Settings.service_domain
STATS_PATH = "/api/v1/stats"


class Response:
    _content: Union[bytes, None]
    _request: Union[Request, None]
    status_code: int

    content_type = 'application/json; charset=utf-8'

    def __init__(self, content: Union[bytes, None], status_code: int,
                 request: Union[Request, None] = None):
        self._content = content
        self.status_code = status_code
        self._request = request

    @property
    def permalink(self) -> str:
        query = urlencode([("field", path) for path in self._request.field_paths])
        host = API_URL or self._request.url.netloc
        return f"https://{host}{STATS_PATH}?{query}"

    @property
    def headers(self) -> Dict[str, str]:
        headers = {
            'Content-Type': self.content_type
        }

        # Additional headers for successful responses.
        if self.status_code < 400 and self._request is not None:
            headers.update({
                "Cache-Control": "public, max-age=90, must-revalidate",
                "Content-Location": self.permalink,
                "Content-Language": "en-GB"
            })

        return headers

    @property
    def content(self):
        return self._content
