import base64, json, requests
from requests import Response

from backoffice.src.constants import (
    OPENOBSERVE_ENABLED,
    OPENOBSERVE_HOST,
    OPENOBSERVE_ORG,
    OPENOBSERVE_PASSWORD,
    OPENOBSERVE_PORT,
    OPENOBSERVE_PROTOCOL,
    OPENOBSERVE_STREAM,
    OPENOBSERVE_USERNAME,
)

# Basic auth of the ingestion user
credentials = base64.b64encode(
    bytes(OPENOBSERVE_USERNAME + ":" + OPENOBSERVE_PASSWORD, "utf-8")
).decode("utf-8")
headers = {"Content-type": "application/json", "Authorization": "Basic " + credentials}

# JSON ingestion endpoint of the stream
openobserve_host = f"{OPENOBSERVE_PROTOCOL}://{OPENOBSERVE_HOST}:{OPENOBSERVE_PORT}"
openobserve_url = f"{openobserve_host}/api/{OPENOBSERVE_ORG}/{OPENOBSERVE_STREAM}/_json"


def logEvent(eventData: dict) -> Response | None:
    """
    Ship one event to the OpenObserve stream of the back-office.

    The event is posted as JSON (values that are not JSON types, like dates,
    are sent as strings). Nothing is sent unless `OPENOBSERVE_ENABLED` is set.

    Args:
        eventData (dict): The event, as built by `loggers.logEvent`.
            Example:
                {
                    "_method": "POST",
                    "_path": "/api/companies/1/stations",
                    "_app_id": 1,
                    "id": 7,
                    "name": "Gare Nord"
                }

    Returns:
        requests.Response | None: The HTTP response returned by the OpenObserve API,
        or None when shipping is disabled.
    """
    if not OPENOBSERVE_ENABLED:
        return None
    return requests.post(
        openobserve_url, headers=headers, data=json.dumps(eventData, default=str)
    )
