from datetime import date, datetime
from enum import IntEnum
from typing import Annotated, Any, Dict, List, Optional
from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy import or_
from sqlalchemy.orm.session import Session
from pydantic import BaseModel, Field, field_validator

from backoffice.src.db import Vehicle, sessionMaker
from backoffice.src import exceptions, validators, getters, labels, workflow
from backoffice.src.constants import (
    MAX_VEHICLE_CAPACITY,
    MAX_VEHICLE_YEAR,
    MIN_VEHICLE_CAPACITY,
    MIN_VEHICLE_YEAR,
    REGEX_REGISTRATION_NUMBER,
)
from backoffice.src.enums import (
    EntityKind,
    FuelType,
    OrderIn,
    VehicleStatus,
    VehicleType,
)
from backoffice.src.forms import Draft, EntityForm
from backoffice.src.functions import (
    enumStr,
    makeExceptionResponses,
    searchPattern,
    updateIfChanged,
)
from backoffice.src.loggers import logEvent
from backoffice.src.schemas import ActionForm, IdForm, StatusInfo
from backoffice.src.urls import URL_ACTION, URL_VEHICLE

route_admin = APIRouter()


## Output Schema
class VehicleSchema(StatusInfo):
    id: int
    company_id: int
    station_id: Optional[int]
    registration_number: str
    brand: str
    model: str
    type: int
    year: Optional[int]
    capacity: int
    mileage: int
    fuel_type: int
    has_ac: bool
    has_wifi: bool
    has_usb: bool
    has_toilet: bool
    insurance_expiry_date: Optional[date]
    technical_visit_expiry_date: Optional[date]
    next_maintenance_date: Optional[date]
    status: int
    updated_on: Optional[datetime]
    created_on: datetime


## Input Forms
class VehicleForm(EntityForm):
    station_id: int | None = None
    registration_number: str = Field(
        pattern=REGEX_REGISTRATION_NUMBER, description="Stored in upper case"
    )
    brand: str = Field(min_length=1, max_length=32)
    model: str = Field(min_length=1, max_length=32)
    type: VehicleType = Field(default=VehicleType.BUS, description=enumStr(VehicleType))
    year: int | None = Field(default=None, ge=MIN_VEHICLE_YEAR, le=MAX_VEHICLE_YEAR)
    capacity: int = Field(ge=MIN_VEHICLE_CAPACITY, le=MAX_VEHICLE_CAPACITY)
    mileage: int = Field(default=0, ge=0)
    fuel_type: FuelType = Field(default=FuelType.DIESEL, description=enumStr(FuelType))
    has_ac: bool = True
    has_wifi: bool = True
    has_usb: bool = True
    has_toilet: bool = False
    insurance_expiry_date: date | None = None
    technical_visit_expiry_date: date | None = None
    next_maintenance_date: date | None = None

    @field_validator("registration_number", mode="before")
    @classmethod
    def upperCase(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    def crossCheck(self, references: dict) -> Dict[str, str]:
        if self.station_id is not None:
            if self.station_id not in references.get("station_ids", set()):
                return {"station_id": "The station does not belong to the company"}
        return {}


## Query Parameters
class OrderBy(IntEnum):
    id = 1
    registration_number = 2
    capacity = 3
    year = 4
    mileage = 5
    next_maintenance_date = 6
    updated_on = 7
    created_on = 8


class QueryParams(BaseModel):
    q: str | None = Field(
        default=None, description="Searches registration number, brand and model"
    )
    type: VehicleType | None = Field(default=None, description=enumStr(VehicleType))
    fuel_type: FuelType | None = Field(default=None, description=enumStr(FuelType))
    status: VehicleStatus | None = Field(
        default=None, description=enumStr(VehicleStatus)
    )
    station_id: int | None = None
    # id based
    id: int | None = None
    id_list: List[int] | None = None
    # capacity based
    capacity_ge: int | None = None
    capacity_le: int | None = None
    # Date based
    insurance_expiry_date_le: date | None = None
    next_maintenance_date_le: date | None = None
    # Ordering
    order_by: OrderBy = Field(default=OrderBy.id, description=enumStr(OrderBy))
    order_in: OrderIn = Field(default=OrderIn.DESC, description=enumStr(OrderIn))
    # Pagination
    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=20, gt=0, le=100)


## Function
def searchVehicle(
    session: Session, company_id: int, qParam: QueryParams
) -> List[Vehicle]:
    query = session.query(Vehicle).filter(Vehicle.company_id == company_id)

    # Filters
    if qParam.q is not None:
        pattern = searchPattern(qParam.q)
        query = query.filter(
            or_(
                Vehicle.registration_number.ilike(pattern, escape="\\"),
                Vehicle.brand.ilike(pattern, escape="\\"),
                Vehicle.model.ilike(pattern, escape="\\"),
            )
        )
    if qParam.type is not None:
        query = query.filter(Vehicle.type == qParam.type)
    if qParam.fuel_type is not None:
        query = query.filter(Vehicle.fuel_type == qParam.fuel_type)
    if qParam.status is not None:
        query = query.filter(Vehicle.status == qParam.status)
    if qParam.station_id is not None:
        query = query.filter(Vehicle.station_id == qParam.station_id)
    # id based
    if qParam.id is not None:
        query = query.filter(Vehicle.id == qParam.id)
    if qParam.id_list is not None:
        query = query.filter(Vehicle.id.in_(qParam.id_list))
    # capacity based
    if qParam.capacity_ge is not None:
        query = query.filter(Vehicle.capacity >= qParam.capacity_ge)
    if qParam.capacity_le is not None:
        query = query.filter(Vehicle.capacity <= qParam.capacity_le)
    # Date based
    if qParam.insurance_expiry_date_le is not None:
        query = query.filter(
            Vehicle.insurance_expiry_date <= qParam.insurance_expiry_date_le
        )
    if qParam.next_maintenance_date_le is not None:
        query = query.filter(
            Vehicle.next_maintenance_date <= qParam.next_maintenance_date_le
        )

    # Ordering
    orderingAttribute = getattr(Vehicle, OrderBy(qParam.order_by).name)
    if qParam.order_in == OrderIn.ASC:
        query = query.order_by(orderingAttribute.asc())
    else:
        query = query.order_by(orderingAttribute.desc())

    # Pagination
    query = query.offset(qParam.offset).limit(qParam.limit)
    return query.all()


## API endpoints [Admin]
@route_admin.post(
    URL_VEHICLE,
    tags=["Vehicle"],
    response_model=VehicleSchema,
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
    Register a new vehicle in the fleet of a company.
    The registration number must be unique within the company.
    New vehicles start in the `ACTIVE` status.
    """,
)
async def create_vehicle(
    company_id: int,
    fParam: Dict[str, Any] = Body(),
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        validators.activeCompany(company_id, session)

        draft = Draft(
            VehicleForm,
            references={"station_ids": getters.stationIds(session, company_id)},
        )
        draft.stage(**fParam)
        candidate = draft.commit()

        vehicle = Vehicle(
            company_id=company_id,
            status=VehicleStatus.ACTIVE,
            **candidate.model_dump(),
        )
        session.add(vehicle)
        session.commit()
        session.refresh(vehicle)

        vehicleData = labels.present(EntityKind.VEHICLE, vehicle)
        logEvent(request_info, vehicleData)
        return vehicleData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.patch(
    URL_VEHICLE,
    tags=["Vehicle"],
    response_model=VehicleSchema,
    responses=makeExceptionResponses(
        [
            exceptions.InvalidIdentifier,
            exceptions.InvalidForm,
            exceptions.UniqueViolation,
        ]
    ),
    description="""
    Update a vehicle. The body holds the `id` and the changed fields.
    """,
)
async def update_vehicle(
    company_id: int,
    fParam: Dict[str, Any] = Body(),
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        identifier = IdForm.model_validate(fParam)
        vehicle = validators.scopedEntity(session, Vehicle, identifier.id, company_id)

        draft = Draft(
            VehicleForm,
            vehicle,
            {"station_ids": getters.stationIds(session, company_id)},
        )
        draft.stage(**fParam)
        candidate = draft.commit()

        updateIfChanged(vehicle, candidate.model_dump(), list(VehicleForm.model_fields))
        haveUpdates = session.is_modified(vehicle)
        if haveUpdates:
            session.commit()
            session.refresh(vehicle)

        vehicleData = labels.present(EntityKind.VEHICLE, vehicle)
        if haveUpdates:
            logEvent(request_info, vehicleData)
        return vehicleData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.post(
    URL_VEHICLE + URL_ACTION,
    tags=["Vehicle"],
    response_model=VehicleSchema,
    responses=makeExceptionResponses(
        [exceptions.InvalidIdentifier, exceptions.InvalidStateTransition]
    ),
    description="""
    Apply a workflow action to a vehicle.
    ACTIVE: START_MAINTENANCE, DEACTIVATE.
    MAINTENANCE: END_MAINTENANCE, DEACTIVATE.
    INACTIVE: ACTIVATE.
    """,
)
async def act_on_vehicle(
    company_id: int,
    fParam: ActionForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        vehicle = validators.scopedEntity(session, Vehicle, fParam.id, company_id)
        vehicle.status = workflow.transition(
            EntityKind.VEHICLE, vehicle.status, fParam.action
        )
        session.commit()
        session.refresh(vehicle)

        vehicleData = labels.present(EntityKind.VEHICLE, vehicle)
        logEvent(request_info, vehicleData)
        return vehicleData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.delete(
    URL_VEHICLE,
    tags=["Vehicle"],
    status_code=status.HTTP_204_NO_CONTENT,
    description="""
    Delete a vehicle by ID. Drivers assigned to it lose their assignment.
    """,
)
async def delete_vehicle(
    company_id: int,
    fParam: IdForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        vehicle = (
            session.query(Vehicle)
            .filter(Vehicle.id == fParam.id, Vehicle.company_id == company_id)
            .first()
        )
        if vehicle is not None:
            session.delete(vehicle)
            session.commit()
            logEvent(request_info, labels.present(EntityKind.VEHICLE, vehicle))
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.get(
    URL_VEHICLE,
    tags=["Vehicle"],
    response_model=List[VehicleSchema],
    responses=makeExceptionResponses([exceptions.UnknownValue]),
    description="""
    Retrieve the vehicles of a company.
    `q` matches registration number, brand and model, case-insensitively.
    """,
)
async def fetch_vehicle(company_id: int, qParam: Annotated[QueryParams, Query()]):
    session = sessionMaker()
    try:
        validators.company(company_id, session)
        vehicles = searchVehicle(session, company_id, qParam)
        return [labels.present(EntityKind.VEHICLE, vehicle) for vehicle in vehicles]
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()
