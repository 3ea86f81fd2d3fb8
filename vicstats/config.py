#!/usr/bin python3

# Imports
# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
# Python:
from dataclasses import dataclass
from os import getenv

# ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~


@dataclass
class Settings:
    TESTING = getenv("IS_DEV", "0") == "1"
    DEBUG = getenv("IS_DEV", "0") == "1"
    ENVIRONMENT = getenv("API_ENV", "PRODUCTION")
    instrumentation_key = f'InstrumentationKey={getenv("APPINSIGHTS_INSTRUMENTATIONKEY", "")}'
    tracing_enabled = (
        getenv("API_ENV", "PRODUCTION") != "DEVELOPMENT" and
        bool(getenv("APPINSIGHTS_INSTRUMENTATIONKEY"))
    )
    service_domain = getenv('URL_LOCATION', str())
    server_location = getenv('SERVER_LOCATION', "N/A")
    log_level = getenv("LOG_LEVEL", "INFO")
    healthcheck_path = "healthcheck"
    cloud_role_name = getenv("WEBSITE_SITE_NAME", "vicstats-api")

    # Upstream sources
    content_api_url = getenv("CONTENT_API_URL", "https://content.vic.gov.au/api/v1")
    covid_site_url = getenv("COVID_SITE_URL", "https://www.coronavirus.vic.gov.au")
    doses_csv_url = getenv(
        "DOSES_CSV_URL",
        "https://www.abc.net.au/dat/news/interactives/covid19-data//aus-doses-breakdown.csv"
    )
    upstream_timeout = float(getenv("UPSTREAM_TIMEOUT", "10"))

    # Either "paragraph" (content API) or "page" (home page HTML).
    daily_marker_source = getenv("DAILY_MARKER_SOURCE", "paragraph")

    # Either "datetime" or "heading" (earlier data page layout, marker closing an <h2>).
    weekly_updated_format = getenv("WEEKLY_UPDATED_FORMAT", "datetime")
