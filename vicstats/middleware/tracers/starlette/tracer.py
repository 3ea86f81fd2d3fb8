#!/usr/bin python3

# Imports
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Python:
import logging
from typing import Dict, Iterable, Union, Callable

# 3rd party:
from starlette.datastructures import URL
from starlette.types import ASGIApp, Scope, Receive, Send, Message

from opencensus.ext.azure.log_exporter import AzureLogHandler
from opencensus.ext.azure.trace_exporter import AzureExporter
from opencensus.trace.tracer import Tracer
from opencensus.trace.span import SpanKind
from opencensus.trace.attributes_helper import COMMON_ATTRIBUTES
from opencensus.trace import config_integration
from opencensus.trace.propagation.trace_context_http_header_format import TraceContextPropagator

# Internal:

# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

__all__ = [
    'TraceRequestMiddleware'
]


HTTP_URL = COMMON_ATTRIBUTES['HTTP_URL']
HTTP_STATUS_CODE = COMMON_ATTRIBUTES['HTTP_STATUS_CODE']
HTTP_HOST = COMMON_ATTRIBUTES['HTTP_HOST']
HTTP_METHOD = COMMON_ATTRIBUTES['HTTP_METHOD']
HTTP_PATH = COMMON_ATTRIBUTES['HTTP_PATH']


config_integration.trace_integrations(['logging'])


logger = logging.getLogger(__name__)


class TraceRequestMiddleware:
    """
    ASGI middleware that opens a server span for every HTTP request and
    exports it - together with the dependency spans of upstream calls
    made whilst serving the request - to Azure Application Insights.
    """
    def __init__(self, app: ASGIApp, sampler, instrumentation_key: str,
                 cloud_role_name: Callable,
                 extra_attrs: Dict[str, str],
                 logging_instances: Iterable[Iterable[Union[logging.Logger, int]]]):
        self.app = app
        self.sampler = sampler
        self.extra_attrs = extra_attrs

        self.exporter = AzureExporter(connection_string=instrumentation_key)
        self.exporter.add_telemetry_processor(cloud_role_name)

        self.handler = AzureLogHandler(connection_string=instrumentation_key)
        self.handler.add_telemetry_processor(cloud_role_name)

        for log, level in logging_instances:
            log.addHandler(self.handler)
            log.setLevel(level)

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        # Only supports HTTP requests. WebSockets are ignored.
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = {
            key.decode("latin-1"): value.decode("latin-1")
            for key, value in scope["headers"]
        }

        propagator = TraceContextPropagator()
        tracer = Tracer(
            exporter=self.exporter,
            sampler=self.sampler,
            span_context=propagator.from_headers(headers),
            propagator=propagator
        )

        url = URL(scope=scope)
        status_code = None

        async def send_wrapper(message: Message):
            nonlocal status_code

            if message["type"] == "http.response.start":
                status_code = message["status"]

            await send(message)

        with tracer.span("main") as span:
            span.span_kind = SpanKind.SERVER
            tracer.add_attribute_to_current_span(HTTP_URL, str(url))
            tracer.add_attribute_to_current_span(HTTP_HOST, url.hostname)
            tracer.add_attribute_to_current_span(HTTP_METHOD, scope["method"])
            tracer.add_attribute_to_current_span(HTTP_PATH, url.path)
            tracer.add_attribute_to_current_span(
                "x_forwarded_host",
                headers.get("x-forwarded-host")
            )

            for key, value in self.extra_attrs.items():
                tracer.add_attribute_to_current_span(key, value)

            try:
                await self.app(scope, receive, send_wrapper)
            finally:
                if status_code is not None:
                    tracer.add_attribute_to_current_span(HTTP_STATUS_CODE, status_code)
