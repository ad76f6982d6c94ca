"""
Application configuration and constants for the AfriCar Back-Office API.

This module centralizes environment-based configuration, input limits,
regular expressions and other constants.

Configuration values can be overridden via environment variables.
"""

from os import environ
from zoneinfo import ZoneInfo


# ---------------------------------------------------------------------------
# Application metadata
# ---------------------------------------------------------------------------
API_TITLE = "AfriCar Back-Office API"
API_VERSION = "1.0.0"


# ---------------------------------------------------------------------------
# Database configuration
# ---------------------------------------------------------------------------
PSQL_DB_DRIVER = environ.get("PSQL_DB_DRIVER", "postgresql")
PSQL_DB_USERNAME = environ.get("PSQL_DB_USERNAME", "postgres")
PSQL_DB_PORT = environ.get("PSQL_DB_PORT", "5432")
PSQL_DB_PASSWORD = environ.get("PSQL_DB_PASSWORD", "password")
PSQL_DB_HOST = environ.get("PSQL_DB_HOST", "localhost")
PSQL_DB_NAME = environ.get("PSQL_DB_NAME", "africar")

# A full SQLAlchemy URL takes precedence over the PSQL_DB_* parts
DB_URL = environ.get(
    "DB_URL",
    f"{PSQL_DB_DRIVER}://{PSQL_DB_USERNAME}:{PSQL_DB_PASSWORD}@{PSQL_DB_HOST}:{PSQL_DB_PORT}/{PSQL_DB_NAME}",
)


# ---------------------------------------------------------------------------
# OpenObserve configuration
# ---------------------------------------------------------------------------
OPENOBSERVE_ENABLED = environ.get("OPENOBSERVE_ENABLED", "false").lower() == "true"
OPENOBSERVE_PROTOCOL = environ.get("OPENOBSERVE_PROTOCOL", "http")
OPENOBSERVE_HOST = environ.get("OPENOBSERVE_HOST", "localhost")
OPENOBSERVE_PORT = environ.get("OPENOBSERVE_PORT", "5080")
OPENOBSERVE_USERNAME = environ.get("OPENOBSERVE_USERNAME", "admin@africar.com")
OPENOBSERVE_PASSWORD = environ.get("OPENOBSERVE_PASSWORD", "password")
OPENOBSERVE_ORG = environ.get("OPENOBSERVE_ORG", "africar")
OPENOBSERVE_STREAM = environ.get("OPENOBSERVE_STREAM", "africar-backoffice")


# ---------------------------------------------------------------------------
# Back-office client configuration
# ---------------------------------------------------------------------------
BACKOFFICE_API_URL = environ.get("BACKOFFICE_API_URL", "http://127.0.0.1:8080/api")
CLIENT_TIMEOUT = 10  # Timeout per request (in seconds)


# ---------------------------------------------------------------------------
# Regex constants (input validation)
# ---------------------------------------------------------------------------
REGEX_LATITUDE = r"^[-+]?(90(\.0+)?|[1-8]?[0-9](\.[0-9]+)?)$"
REGEX_LONGITUDE = r"^[-+]?(180(\.0+)?|(1[0-7][0-9]|[1-9]?[0-9])(\.[0-9]+)?)$"
REGEX_REGISTRATION_NUMBER = r"^[A-Z0-9][A-Z0-9-]{1,15}$"
REGEX_LICENSE_NUMBER = r"^[A-Z0-9][A-Z0-9/-]{3,31}$"


# ---------------------------------------------------------------------------
# Resource limits
# ---------------------------------------------------------------------------
MAX_STATION_CAPACITY = 1000  # Buses a station can hold
MIN_VEHICLE_CAPACITY = 1
MAX_VEHICLE_CAPACITY = 120  # Seats per vehicle
MIN_VEHICLE_YEAR = 1950
MAX_VEHICLE_YEAR = 2100
MAX_PERCENTAGE_DISCOUNT = 100


# ---------------------------------------------------------------------------
# Timezone constants (local day of the operator)
# ---------------------------------------------------------------------------
TMZ_SECONDARY = ZoneInfo("Africa/Abidjan")
