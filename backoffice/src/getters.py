from typing import Set
from fastapi import Request
from sqlalchemy.orm.session import Session

from backoffice.src import schemas
from backoffice.src.db import Station, Vehicle, Staff, User
from backoffice.src.enums import StaffRole


def requestInfo(request: Request) -> schemas.RequestInfo:
    """
    Extract metadata about the incoming request.

    Args:
        request (Request): FastAPI request object.

    Returns:
        schemas.RequestInfo: Pydantic model containing:
            - method (str): HTTP method (GET, POST, etc.).
            - path (str): Path portion of the request URL.
            - app_id (int): Application ID from app state.
    """
    return schemas.RequestInfo(
        method=request.method,
        path=request.url.path,
        app_id=request.scope["app"].state.id,
    )


def _ids(session: Session, column, *filters) -> Set[int]:
    return {row[0] for row in session.query(column).filter(*filters).all()}


def stationIds(session: Session, company_id: int) -> Set[int]:
    """Ids of the stations of a company, used as form reference data."""
    return _ids(session, Station.id, Station.company_id == company_id)


def vehicleIds(session: Session, company_id: int) -> Set[int]:
    """Ids of the vehicles of a company, used as form reference data."""
    return _ids(session, Vehicle.id, Vehicle.company_id == company_id)


def allStationIds(session: Session) -> Set[int]:
    return _ids(session, Station.id)


def driverIds(session: Session) -> Set[int]:
    return _ids(session, Staff.id, Staff.role == StaffRole.DRIVER)


def userIds(session: Session) -> Set[int]:
    return _ids(session, User.id)
