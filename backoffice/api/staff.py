from datetime import date, datetime
from enum import IntEnum
from typing import Annotated, Any, Dict, List, Optional
from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy import or_
from sqlalchemy.orm.session import Session
from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic_extra_types.phone_numbers import PhoneNumber

from backoffice.src.db import Staff, sessionMaker
from backoffice.src import exceptions, validators, getters, labels, workflow
from backoffice.src.constants import REGEX_LICENSE_NUMBER
from backoffice.src.enums import EntityKind, OrderIn, StaffRole, StaffStatus
from backoffice.src.forms import Draft, EntityForm
from backoffice.src.functions import (
    enumStr,
    makeExceptionResponses,
    searchPattern,
    updateIfChanged,
)
from backoffice.src.loggers import logEvent
from backoffice.src.schemas import ActionForm, IdForm, StatusInfo
from backoffice.src.urls import URL_ACTION, URL_DRIVER, URL_STAFF

route_admin = APIRouter()

AGENT_ROLES = (StaffRole.CASHIER, StaffRole.TICKET_CONTROLLER)
DRIVER_FIELDS = ("license_number", "license_expiry_date", "assigned_vehicle_id")
AGENT_FIELDS = ("can_process_payments", "can_scan_tickets", "can_validate_manually")


## Output Schema
class StaffSchema(StatusInfo):
    id: int
    company_id: int
    station_id: Optional[int]
    role: int
    role_label: str
    first_name: str
    last_name: str
    phone_number: str
    email_id: Optional[str]
    address: Optional[str]
    city: Optional[str]
    join_date: date
    license_number: Optional[str]
    license_expiry_date: Optional[date]
    assigned_vehicle_id: Optional[int]
    can_process_payments: bool
    can_scan_tickets: bool
    can_validate_manually: bool
    status: int
    updated_on: Optional[datetime]
    created_on: datetime


## Input Forms
class StaffForm(EntityForm):
    station_id: int | None = None
    role: StaffRole = Field(default=StaffRole.DRIVER, description=enumStr(StaffRole))
    first_name: str = Field(min_length=1, max_length=32)
    last_name: str = Field(min_length=1, max_length=32)
    phone_number: PhoneNumber = Field(description="Phone number in RFC3966 format")
    email_id: EmailStr | None = Field(
        default=None, description="Email in RFC 5322 format"
    )
    address: str | None = Field(default=None, max_length=512)
    city: str | None = Field(default=None, max_length=64)
    join_date: date = Field(default=None, validate_default=True)
    # Drivers only
    license_number: str | None = Field(default=None, pattern=REGEX_LICENSE_NUMBER)
    license_expiry_date: date | None = None
    assigned_vehicle_id: int | None = None
    # Cashiers and ticket controllers only
    can_process_payments: bool = False
    can_scan_tickets: bool = False
    can_validate_manually: bool = False

    @field_validator("join_date", mode="before")
    @classmethod
    def joinedToday(cls, value):
        if value is None:
            return date.today()
        return value

    @field_validator("license_number", mode="before")
    @classmethod
    def upperCase(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    def crossCheck(self, references: dict) -> Dict[str, str]:
        errors = {}
        if self.station_id is not None:
            if self.station_id not in references.get("station_ids", set()):
                errors["station_id"] = "The station does not belong to the company"

        if self.role == StaffRole.DRIVER:
            if self.license_number is None:
                errors["license_number"] = "A driver needs a license number"
            if self.license_expiry_date is None:
                errors["license_expiry_date"] = "A driver needs a license expiry date"
            if self.assigned_vehicle_id is not None:
                if self.assigned_vehicle_id not in references.get("vehicle_ids", set()):
                    errors["assigned_vehicle_id"] = (
                        "The vehicle does not belong to the company"
                    )
        else:
            for field in DRIVER_FIELDS:
                if getattr(self, field) is not None:
                    errors[field] = "Only drivers can have this field"

        if self.role not in AGENT_ROLES:
            for field in AGENT_FIELDS:
                if getattr(self, field):
                    errors[field] = "Only cashiers and ticket controllers have this right"
        return errors


## Query Parameters
class OrderBy(IntEnum):
    id = 1
    first_name = 2
    last_name = 3
    join_date = 4
    updated_on = 5
    created_on = 6


class QueryParams(BaseModel):
    q: str | None = Field(
        default=None, description="Searches first name, last name and phone number"
    )
    role: StaffRole | None = Field(default=None, description=enumStr(StaffRole))
    status: StaffStatus | None = Field(default=None, description=enumStr(StaffStatus))
    station_id: int | None = None
    assigned_vehicle_id: int | None = None
    # id based
    id: int | None = None
    id_list: List[int] | None = None
    # license_expiry_date based
    license_expiry_date_le: date | None = None
    # Ordering
    order_by: OrderBy = Field(default=OrderBy.id, description=enumStr(OrderBy))
    order_in: OrderIn = Field(default=OrderIn.DESC, description=enumStr(OrderIn))
    # Pagination
    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=20, gt=0, le=100)


## Function
def references(session: Session, company_id: int) -> dict:
    return {
        "station_ids": getters.stationIds(session, company_id),
        "vehicle_ids": getters.vehicleIds(session, company_id),
    }


def presentStaff(staff: Staff) -> dict:
    staffData = labels.present(EntityKind.STAFF, staff)
    staffData["role_label"] = labels.roleLabel(staff.role)
    return staffData


def searchStaff(
    session: Session,
    company_id: int,
    qParam: QueryParams,
    role: StaffRole | None = None,
) -> List[Staff]:
    query = session.query(Staff).filter(Staff.company_id == company_id)

    # Filters
    if role is None:
        role = qParam.role
    if role is not None:
        query = query.filter(Staff.role == role)
    if qParam.q is not None:
        pattern = searchPattern(qParam.q)
        query = query.filter(
            or_(
                Staff.first_name.ilike(pattern, escape="\\"),
                Staff.last_name.ilike(pattern, escape="\\"),
                Staff.phone_number.ilike(pattern, escape="\\"),
            )
        )
    if qParam.status is not None:
        query = query.filter(Staff.status == qParam.status)
    if qParam.station_id is not None:
        query = query.filter(Staff.station_id == qParam.station_id)
    if qParam.assigned_vehicle_id is not None:
        query = query.filter(Staff.assigned_vehicle_id == qParam.assigned_vehicle_id)
    # id based
    if qParam.id is not None:
        query = query.filter(Staff.id == qParam.id)
    if qParam.id_list is not None:
        query = query.filter(Staff.id.in_(qParam.id_list))
    # license_expiry_date based
    if qParam.license_expiry_date_le is not None:
        query = query.filter(Staff.license_expiry_date <= qParam.license_expiry_date_le)

    # Ordering
    orderingAttribute = getattr(Staff, OrderBy(qParam.order_by).name)
    if qParam.order_in == OrderIn.ASC:
        query = query.order_by(orderingAttribute.asc())
    else:
        query = query.order_by(orderingAttribute.desc())

    # Pagination
    query = query.offset(qParam.offset).limit(qParam.limit)
    return query.all()


## API endpoints [Admin]
@route_admin.post(
    URL_STAFF,
    tags=["Staff"],
    response_model=StaffSchema,
    status_code=status.HTTP_201_CREATED,
    responses=makeExceptionResponses(
        [
            exceptions.UnknownValue,
            exceptions.InactiveResource,
            exceptions.InvalidForm,
        ]
    ),
    description="""
    Register a new staff member of a company.
    The fields accepted depend on the `role`:
    - DRIVER: `license_number` and `license_expiry_date` are required, `assigned_vehicle_id` is optional.
    - CASHIER, TICKET_CONTROLLER: the `can_*` rights may be granted.
    - ADMIN: neither.
    New staff members start in the `ACTIVE` status.
    """,
)
async def create_staff(
    company_id: int,
    fParam: Dict[str, Any] = Body(),
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        validators.activeCompany(company_id, session)

        draft = Draft(StaffForm, references=references(session, company_id))
        draft.stage(**fParam)
        candidate = draft.commit()

        staff = Staff(
            company_id=company_id,
            status=StaffStatus.ACTIVE,
            **candidate.model_dump(),
        )
        session.add(staff)
        session.commit()
        session.refresh(staff)

        staffData = presentStaff(staff)
        logEvent(request_info, staffData)
        return staffData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.patch(
    URL_STAFF,
    tags=["Staff"],
    response_model=StaffSchema,
    responses=makeExceptionResponses(
        [exceptions.InvalidIdentifier, exceptions.InvalidForm]
    ),
    description="""
    Update a staff member. The body holds the `id` and the changed fields.
    When the role changes, the fields of the former role have to be cleared (set to null or false) in the same request.
    """,
)
async def update_staff(
    company_id: int,
    fParam: Dict[str, Any] = Body(),
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        identifier = IdForm.model_validate(fParam)
        staff = validators.scopedEntity(session, Staff, identifier.id, company_id)

        draft = Draft(StaffForm, staff, references(session, company_id))
        draft.stage(**fParam)
        candidate = draft.commit()

        updateIfChanged(staff, candidate.model_dump(), list(StaffForm.model_fields))
        haveUpdates = session.is_modified(staff)
        if haveUpdates:
            session.commit()
            session.refresh(staff)

        staffData = presentStaff(staff)
        if haveUpdates:
            logEvent(request_info, staffData)
        return staffData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.post(
    URL_STAFF + URL_ACTION,
    tags=["Staff"],
    response_model=StaffSchema,
    responses=makeExceptionResponses(
        [exceptions.InvalidIdentifier, exceptions.InvalidStateTransition]
    ),
    description="""
    Apply a workflow action to a staff member.
    ACTIVE: DEACTIVATE, SUSPEND, GRANT_LEAVE.
    INACTIVE: ACTIVATE.
    SUSPENDED: REINSTATE, DEACTIVATE.
    ON_LEAVE: END_LEAVE, DEACTIVATE.
    """,
)
async def act_on_staff(
    company_id: int,
    fParam: ActionForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        staff = validators.scopedEntity(session, Staff, fParam.id, company_id)
        staff.status = workflow.transition(EntityKind.STAFF, staff.status, fParam.action)
        session.commit()
        session.refresh(staff)

        staffData = presentStaff(staff)
        logEvent(request_info, staffData)
        return staffData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.delete(
    URL_STAFF,
    tags=["Staff"],
    status_code=status.HTTP_204_NO_CONTENT,
    description="""
    Delete a staff member by ID. Complaints naming them as driver are kept.
    """,
)
async def delete_staff(
    company_id: int,
    fParam: IdForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        staff = (
            session.query(Staff)
            .filter(Staff.id == fParam.id, Staff.company_id == company_id)
            .first()
        )
        if staff is not None:
            session.delete(staff)
            session.commit()
            logEvent(request_info, presentStaff(staff))
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.get(
    URL_STAFF,
    tags=["Staff"],
    response_model=List[StaffSchema],
    responses=makeExceptionResponses([exceptions.UnknownValue]),
    description="""
    Retrieve the staff of a company, optionally filtered by role.
    """,
)
async def fetch_staff(company_id: int, qParam: Annotated[QueryParams, Query()]):
    session = sessionMaker()
    try:
        validators.company(company_id, session)
        staffs = searchStaff(session, company_id, qParam)
        return [presentStaff(staff) for staff in staffs]
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.get(
    URL_DRIVER,
    tags=["Staff"],
    response_model=List[StaffSchema],
    responses=makeExceptionResponses([exceptions.UnknownValue]),
    description="""
    Retrieve the drivers of a company.
    Drivers are staff members with the DRIVER role; they are created and edited through the staff endpoints.
    The `role` filter is ignored here.
    """,
)
async def fetch_driver(
    company_id: int, qParam: Annotated[QueryParams, Query()]
):
    session = sessionMaker()
    try:
        validators.company(company_id, session)
        drivers = searchStaff(session, company_id, qParam, StaffRole.DRIVER)
        return [presentStaff(driver) for driver in drivers]
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()
