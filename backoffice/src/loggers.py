from logging import getLogger

from backoffice.src import openobserve
from backoffice.src.schemas import RequestInfo

logger = getLogger("uvicorn.error")


def logEvent(requestInfo: RequestInfo, data: dict) -> None:
    """
    Log a mutation event to OpenObserve with request context.

    Args:
        requestInfo (RequestInfo): Metadata about the current request.
        data (dict): The entity as returned to the client.

    Notes:
        - Automatically attaches `_app_id`, `_method` and `_path`.
        - The event is also written to the uvicorn error log at INFO level.
    """
    logDetails = {
        "_method": requestInfo.method,
        "_path": requestInfo.path,
        "_app_id": requestInfo.app_id,
    }
    logDetails.update(data)
    logger.info("%s %s id=%s", requestInfo.method, requestInfo.path, data.get("id"))
    openobserve.logEvent(logDetails)
