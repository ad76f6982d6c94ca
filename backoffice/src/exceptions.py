"""
Errors of the back-office API.

Every error a handler can answer with is an `APIException` subclass carrying
its HTTP status and an `X-Error` header naming the error. Handlers wrap their
body in `try: ... except Exception as e: handle(e)` so database and pydantic
failures come out as the same kind of response.
"""

from enum import IntEnum
from traceback import format_exception
from logging import getLogger
from typing import Any, Dict
from fastapi import status, HTTPException
from sqlalchemy.exc import IntegrityError
from psycopg2.errorcodes import UNIQUE_VIOLATION, FOREIGN_KEY_VIOLATION
from pydantic import ValidationError
from sqlalchemy import Column


# ---------------------------------------------------------------------------
# Utility functions
# ---------------------------------------------------------------------------
def formatIntegrityError(e: IntegrityError) -> str:
    """
    Turn a database integrity error into a readable message.

    PostgreSQL errors carry a detail message (`Key (name)=(x) already exists`),
    other drivers only provide the raw error text.
    """
    diag = getattr(e.orig, "diag", None)
    if diag is not None and diag.message_detail:
        errorMessage: str = diag.message_detail
    else:
        errorMessage = str(e.orig)
    errorMessage = errorMessage.translate({ord(i): None for i in '\\"\\.\\(\\)'})
    errorMessage = errorMessage.replace("Key ", "For ")
    errorMessage = errorMessage.replace("=", " value ")
    return errorMessage


def integrityErrorCode(e: IntegrityError) -> str | None:
    """Return the SQLSTATE of an integrity error, guessing it for non-PostgreSQL drivers."""
    sqlstate = getattr(e.orig, "pgcode", None)
    if sqlstate is not None:
        return sqlstate
    message = str(e.orig).upper()
    if "UNIQUE" in message:
        return UNIQUE_VIOLATION
    if "FOREIGN KEY" in message:
        return FOREIGN_KEY_VIOLATION
    return None


def logException(e: Exception) -> None:
    """Write an unexpected exception and its traceback to the server log."""
    getLogger("uvicorn.error").error("".join(format_exception(e)))


# ---------------------------------------------------------------------------
# Base Exception
# ---------------------------------------------------------------------------
class APIException(HTTPException):
    """
    HTTP error whose status, detail and headers default to the class attributes,
    so subclasses only declare them.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    detail = None
    headers = None

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("status_code", self.status_code)
        kwargs.setdefault("detail", self.detail)
        kwargs.setdefault("headers", self.headers)
        super().__init__(*args, **kwargs)


# ---------------------------------------------------------------------------
# Exception handling entrypoint
# ---------------------------------------------------------------------------
def handle(e: Exception):
    """
    Re-raise any exception caught by a handler as an `APIException`.

    Integrity errors become `UniqueViolation` or `ForeignKeyViolation`,
    pydantic errors `PydanticError`. Anything unexpected is logged and
    re-raised unchanged (a 500).
    """
    if isinstance(e, IntegrityError):
        sqlstate = integrityErrorCode(e)
        if sqlstate == UNIQUE_VIOLATION:
            raise UniqueViolation(formatIntegrityError(e))
        if sqlstate == FOREIGN_KEY_VIOLATION:
            raise ForeignKeyViolation(formatIntegrityError(e))
    if isinstance(e, ValidationError):
        raise PydanticError(
            detail=e.errors(include_url=False, include_context=False)
        )
    if isinstance(e, APIException):
        raise e

    logException(e)
    raise e


# ---------------------------------------------------------------------------
# Exception Classes
# ---------------------------------------------------------------------------
class PydanticError(APIException):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    headers = {"X-Error": "PydanticError"}

    def __init__(self, detail: str):
        super().__init__(detail=detail)


class UniqueViolation(APIException):
    status_code = status.HTTP_409_CONFLICT
    headers = {"X-Error": "UniqueViolation"}

    def __init__(self, detail: str):
        super().__init__(detail=detail)


class ForeignKeyViolation(APIException):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    headers = {"X-Error": "ForeignKeyViolation"}

    def __init__(self, detail: str):
        super().__init__(detail=detail)


class UnknownValue(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    headers = {"X-Error": "UnknownValue"}

    def __init__(self, column_name: Column):
        detail = f"Unknown {column_name.name} provided"
        super().__init__(detail=detail)


class InvalidIdentifier(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "No record has the given ID"
    headers = {"X-Error": "InvalidIdentifier"}


class InvalidWKTStringOrType(APIException):
    status_code = status.HTTP_406_NOT_ACCEPTABLE
    detail = "Invalid WKT string or type"
    headers = {"X-Error": "InvalidWKTStringOrType"}


class InvalidSRID4326(APIException):
    status_code = status.HTTP_406_NOT_ACCEPTABLE
    detail = "The SRID of the geometry is not 4326"
    headers = {"X-Error": "InvalidSRID4326"}


class InvalidForm(APIException):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    headers = {"X-Error": "InvalidForm"}

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__(detail=errors)


class InvalidStateTransition(APIException):
    status_code = status.HTTP_406_NOT_ACCEPTABLE
    headers = {"X-Error": "InvalidStateTransition"}

    def __init__(self, action: IntEnum, state: IntEnum):
        detail = f"The action {action.name} is not allowed in status {state.name}"
        super().__init__(detail=detail)


class InactiveResource(APIException):
    status_code = status.HTTP_412_PRECONDITION_FAILED
    headers = {"X-Error": "InactiveResource"}

    def __init__(self, orm_class):
        detail = f"The {orm_class.__name__} is not active"
        super().__init__(detail=detail)


class RemoteAPIError(APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    headers = {"X-Error": "RemoteAPIError"}

    def __init__(self, detail: Any, remote_status: int | None = None):
        self.remote_status = remote_status
        super().__init__(detail=detail)
