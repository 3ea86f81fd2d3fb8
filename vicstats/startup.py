#!/usr/bin python3

# Imports
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Python:
import logging
from sys import stdout

# 3rd party:
from fastapi import FastAPI
from fastapi.middleware import Middleware
from fastapi.middleware.cors import CORSMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

# Internal:
from vicstats.utils.assets import add_cloud_role_name
from vicstats.config import Settings
from vicstats.exceptions.handlers import exception_handlers

# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

__all__ = [
    'start_app'
]


logger = logging.getLogger("app")

logging_instances = [
    [logger, getattr(logging, Settings.log_level.upper(), logging.INFO)],
    [logging.getLogger('uvicorn'), logging.WARNING],
    [logging.getLogger('uvicorn.access'), logging.WARNING],
    [logging.getLogger('uvicorn.error'), logging.ERROR],
    [logging.getLogger('httpx'), logging.WARNING],
    [logging.getLogger('azure'), logging.WARNING],
]


def start_app():
    middlewares = [
        Middleware(ProxyHeadersMiddleware, trusted_hosts=Settings.service_domain or "*"),
        Middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "HEAD", "POST", "OPTIONS"],
            allow_headers=["*"]
        ),
    ]

    if Settings.tracing_enabled:
        from opencensus.trace.samplers import AlwaysOnSampler
        from vicstats.middleware.tracers.starlette import TraceRequestMiddleware

        middlewares.append(
            Middleware(
                TraceRequestMiddleware,
                sampler=AlwaysOnSampler(),
                instrumentation_key=Settings.instrumentation_key,
                cloud_role_name=add_cloud_role_name,
                extra_attrs=dict(
                    environment=Settings.ENVIRONMENT,
                    server_location=Settings.server_location
                ),
                logging_instances=logging_instances
            )
        )

    if Settings.DEBUG:
        handler = logging.StreamHandler(stdout)

        for log, level in logging_instances:
            log.addHandler(handler)
            log.setLevel(level)

    app = FastAPI(
        title="Victorian COVID-19 Statistics - API Service",
        version="1.0.0",
        docs_url=(
            "/docs"
            if Settings.ENVIRONMENT == "DEVELOPMENT"
            else None
        ),
        redoc_url=None,
        openapi_url="/api/v1/openapi.json",
        middleware=middlewares,
        exception_handlers=exception_handlers,
    )

    return app
