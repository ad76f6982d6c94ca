from datetime import datetime
from decimal import Decimal
from enum import IntEnum
from typing import Annotated, Any, Dict, List, Optional
from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy import or_
from sqlalchemy.orm.session import Session
from pydantic import BaseModel, EmailStr, Field, field_serializer, field_validator
from pydantic_extra_types.phone_numbers import PhoneNumber
from shapely.geometry import Point

from backoffice.api.promotion import detachStations
from backoffice.src.db import Station, sessionMaker
from backoffice.src import exceptions, validators, getters, labels, workflow
from backoffice.src.constants import (
    MAX_STATION_CAPACITY,
    REGEX_LATITUDE,
    REGEX_LONGITUDE,
)
from backoffice.src.enums import EntityKind, OrderIn, StationStatus
from backoffice.src.forms import Draft, EntityForm
from backoffice.src.functions import (
    distance,
    enumStr,
    isSRID4326,
    makeExceptionResponses,
    searchPattern,
    toPoint,
    updateIfChanged,
)
from backoffice.src.loggers import logEvent
from backoffice.src.schemas import ActionForm, IdForm, StatusInfo
from backoffice.src.urls import URL_ACTION, URL_STATION

route_admin = APIRouter()


## Output Schema
class StationSchema(StatusInfo):
    id: int
    company_id: int
    name: str
    city: str
    address: str
    phone_number: Optional[str]
    email_id: Optional[str]
    capacity: int
    latitude: float
    longitude: float
    is_main_station: bool
    has_waiting_room: bool
    has_ticket_office: bool
    has_parking: bool
    status: int
    updated_on: Optional[datetime]
    created_on: datetime


## Input Forms
class StationForm(EntityForm):
    name: str = Field(min_length=1, max_length=128)
    city: str = Field(min_length=1, max_length=64)
    address: str = Field(min_length=1, max_length=512)
    phone_number: PhoneNumber | None = Field(
        default=None, description="Phone number in RFC3966 format"
    )
    email_id: EmailStr | None = Field(
        default=None, description="Email in RFC 5322 format"
    )
    capacity: int = Field(default=0, ge=0, le=MAX_STATION_CAPACITY)
    latitude: str = Field(pattern=REGEX_LATITUDE, description="Decimal degrees")
    longitude: str = Field(pattern=REGEX_LONGITUDE, description="Decimal degrees")
    is_main_station: bool = False
    has_waiting_room: bool = True
    has_ticket_office: bool = True
    has_parking: bool = True

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def numericString(cls, value):
        # Positional notation, str(0.00001) would give "1e-05"
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return format(Decimal(str(value)), "f")
        return value

    @field_serializer("latitude", "longitude")
    def toDegrees(self, value: str) -> float:
        return float(value)

    def crossCheck(self, references: dict) -> Dict[str, str]:
        location = toPoint(float(self.latitude), float(self.longitude))
        if not isSRID4326(location):
            return {"latitude": "The coordinates are not valid WGS84 coordinates"}
        return {}


## Query Parameters
class OrderBy(IntEnum):
    id = 1
    name = 2
    capacity = 3
    location = 4
    updated_on = 5
    created_on = 6


class QueryParams(BaseModel):
    q: str | None = Field(default=None, description="Searches name and city")
    name: str | None = None
    city: str | None = None
    status: StationStatus | None = Field(
        default=None, description=enumStr(StationStatus)
    )
    is_main_station: bool | None = None
    location: str | None = Field(
        default=None, description="Accepts only SRID 4326 (WGS84) POINT"
    )
    # id based
    id: int | None = None
    id_list: List[int] | None = None
    # capacity based
    capacity_ge: int | None = None
    capacity_le: int | None = None
    # created_on based
    created_on_ge: datetime | None = None
    created_on_le: datetime | None = None
    # Ordering
    order_by: OrderBy = Field(default=OrderBy.id, description=enumStr(OrderBy))
    order_in: OrderIn = Field(default=OrderIn.DESC, description=enumStr(OrderIn))
    # Pagination
    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=20, gt=0, le=100)


## Function
def updateStation(station: Station, candidate: StationForm):
    updateIfChanged(
        station,
        candidate.model_dump(),
        [
            Station.name.key,
            Station.city.key,
            Station.address.key,
            Station.phone_number.key,
            Station.email_id.key,
            Station.capacity.key,
            Station.latitude.key,
            Station.longitude.key,
            Station.is_main_station.key,
            Station.has_waiting_room.key,
            Station.has_ticket_office.key,
            Station.has_parking.key,
        ],
    )


def searchStation(
    session: Session, company_id: int, qParam: QueryParams
) -> List[Station]:
    query = session.query(Station).filter(Station.company_id == company_id)

    # Pre-processing
    origin = None
    if qParam.location is not None:
        origin = validators.WKTstring(qParam.location, Point)
        validators.SRID4326(origin)

    # Filters
    if qParam.q is not None:
        pattern = searchPattern(qParam.q)
        query = query.filter(
            or_(
                Station.name.ilike(pattern, escape="\\"),
                Station.city.ilike(pattern, escape="\\"),
            )
        )
    if qParam.name is not None:
        query = query.filter(
            Station.name.ilike(searchPattern(qParam.name), escape="\\")
        )
    if qParam.city is not None:
        query = query.filter(
            Station.city.ilike(searchPattern(qParam.city), escape="\\")
        )
    if qParam.status is not None:
        query = query.filter(Station.status == qParam.status)
    if qParam.is_main_station is not None:
        query = query.filter(Station.is_main_station == qParam.is_main_station)
    # id based
    if qParam.id is not None:
        query = query.filter(Station.id == qParam.id)
    if qParam.id_list is not None:
        query = query.filter(Station.id.in_(qParam.id_list))
    # capacity based
    if qParam.capacity_ge is not None:
        query = query.filter(Station.capacity >= qParam.capacity_ge)
    if qParam.capacity_le is not None:
        query = query.filter(Station.capacity <= qParam.capacity_le)
    # created_on based
    if qParam.created_on_ge is not None:
        query = query.filter(Station.created_on >= qParam.created_on_ge)
    if qParam.created_on_le is not None:
        query = query.filter(Station.created_on <= qParam.created_on_le)

    # Distance ordering is computed on the geodesic, outside the database
    if qParam.order_by == OrderBy.location and origin is not None:
        stations = sorted(
            query.all(),
            key=lambda station: distance(
                origin, toPoint(station.latitude, station.longitude)
            ),
            reverse=qParam.order_in == OrderIn.DESC,
        )
        return stations[qParam.offset : qParam.offset + qParam.limit]

    # Ordering
    if qParam.order_by == OrderBy.location:
        orderingAttribute = Station.id
    else:
        orderingAttribute = getattr(Station, OrderBy(qParam.order_by).name)
    if qParam.order_in == OrderIn.ASC:
        query = query.order_by(orderingAttribute.asc())
    else:
        query = query.order_by(orderingAttribute.desc())

    # Pagination
    query = query.offset(qParam.offset).limit(qParam.limit)
    return query.all()


## API endpoints [Admin]
@route_admin.post(
    URL_STATION,
    tags=["Station"],
    response_model=StationSchema,
    status_code=status.HTTP_201_CREATED,
    responses=makeExceptionResponses(
        [
            exceptions.UnknownValue,
            exceptions.InactiveResource,
            exceptions.InvalidForm,
            exceptions.UniqueViolation,
        ]
    ),
    description="""
    Create a new station for a company.
    The body is validated as a complete `StationForm`; coordinates are decimal
    degree strings (numbers are accepted).
    New stations start in the `ACTIVE` status.
    """,
)
async def create_station(
    company_id: int,
    fParam: Dict[str, Any] = Body(),
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        validators.activeCompany(company_id, session)

        draft = Draft(StationForm)
        draft.stage(**fParam)
        candidate = draft.commit()

        station = Station(
            company_id=company_id,
            status=StationStatus.ACTIVE,
            **candidate.model_dump(),
        )
        session.add(station)
        session.commit()
        session.refresh(station)

        stationData = labels.present(EntityKind.STATION, station)
        logEvent(request_info, stationData)
        return stationData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.patch(
    URL_STATION,
    tags=["Station"],
    response_model=StationSchema,
    responses=makeExceptionResponses(
        [
            exceptions.InvalidIdentifier,
            exceptions.InvalidForm,
            exceptions.UniqueViolation,
        ]
    ),
    description="""
    Update an existing station. The body holds the `id` and the changed fields.
    The edited station is validated as a whole before anything is saved.
    The status can only be changed through the action endpoint.
    """,
)
async def update_station(
    company_id: int,
    fParam: Dict[str, Any] = Body(),
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        identifier = IdForm.model_validate(fParam)
        station = validators.scopedEntity(session, Station, identifier.id, company_id)

        draft = Draft(StationForm, station)
        draft.stage(**fParam)
        candidate = draft.commit()

        updateStation(station, candidate)
        haveUpdates = session.is_modified(station)
        if haveUpdates:
            session.commit()
            session.refresh(station)

        stationData = labels.present(EntityKind.STATION, station)
        if haveUpdates:
            logEvent(request_info, stationData)
        return stationData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.post(
    URL_STATION + URL_ACTION,
    tags=["Station"],
    response_model=StationSchema,
    responses=makeExceptionResponses(
        [exceptions.InvalidIdentifier, exceptions.InvalidStateTransition]
    ),
    description="""
    Apply a workflow action to a station.
    ACTIVE: DEACTIVATE, START_MAINTENANCE.
    INACTIVE: ACTIVATE.
    UNDER_MAINTENANCE: END_MAINTENANCE, DEACTIVATE.
    """,
)
async def act_on_station(
    company_id: int,
    fParam: ActionForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        station = validators.scopedEntity(session, Station, fParam.id, company_id)
        station.status = workflow.transition(
            EntityKind.STATION, station.status, fParam.action
        )
        session.commit()
        session.refresh(station)

        stationData = labels.present(EntityKind.STATION, station)
        logEvent(request_info, stationData)
        return stationData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.delete(
    URL_STATION,
    tags=["Station"],
    status_code=status.HTTP_204_NO_CONTENT,
    description="""
    Delete a station by ID.
    Staff members, vehicles and complaints attached to it are detached,
    and it is removed from the stations of every promotion.
    """,
)
async def delete_station(
    company_id: int,
    fParam: IdForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        station = (
            session.query(Station)
            .filter(Station.id == fParam.id, Station.company_id == company_id)
            .first()
        )
        if station is not None:
            detachStations(session, {station.id})
            session.delete(station)
            session.commit()
            logEvent(request_info, labels.present(EntityKind.STATION, station))
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.get(
    URL_STATION,
    tags=["Station"],
    response_model=List[StationSchema],
    responses=makeExceptionResponses(
        [
            exceptions.UnknownValue,
            exceptions.InvalidWKTStringOrType,
            exceptions.InvalidSRID4326,
        ]
    ),
    description="""
    Retrieve the stations of a company.
    `q` matches name and city, case-insensitively.
    Supports pagination and distance-based sorting when location is provided.
    """,
)
async def fetch_station(
    company_id: int, qParam: Annotated[QueryParams, Query()]
):
    session = sessionMaker()
    try:
        validators.company(company_id, session)
        stations = searchStation(session, company_id, qParam)
        return [labels.present(EntityKind.STATION, station) for station in stations]
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()
