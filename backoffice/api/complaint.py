from datetime import datetime, timezone
from enum import IntEnum
from typing import Annotated, Any, Dict, List, Optional
from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy import or_
from sqlalchemy.orm.session import Session
from pydantic import BaseModel, Field

from backoffice.src.db import Complaint, sessionMaker
from backoffice.src import exceptions, validators, getters, labels, workflow
from backoffice.src.enums import (
    ComplaintPriority,
    ComplaintStatus,
    ComplaintType,
    EntityKind,
    OrderIn,
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
from backoffice.src.urls import URL_ACTION, URL_COMPLAINT

route_admin = APIRouter()


## Output Schema
class ComplaintSchema(StatusInfo):
    id: int
    user_id: Optional[int]
    station_id: Optional[int]
    driver_id: Optional[int]
    type: int
    type_label: str
    priority: int
    priority_label: str
    priority_color: str
    subject: str
    description: str
    status: int
    resolved_on: Optional[datetime]
    updated_on: Optional[datetime]
    created_on: datetime


## Input Forms
class ComplaintForm(EntityForm):
    user_id: int | None = None
    station_id: int | None = None
    driver_id: int | None = None
    type: ComplaintType = Field(
        default=ComplaintType.OTHER, description=enumStr(ComplaintType)
    )
    priority: ComplaintPriority = Field(
        default=ComplaintPriority.MEDIUM, description=enumStr(ComplaintPriority)
    )
    subject: str = Field(min_length=1, max_length=128)
    description: str = Field(min_length=1, max_length=4096)

    def crossCheck(self, references: dict) -> Dict[str, str]:
        errors = {}
        if self.user_id is not None and self.user_id not in references["user_ids"]:
            errors["user_id"] = "Unknown user"
        if (
            self.station_id is not None
            and self.station_id not in references["station_ids"]
        ):
            errors["station_id"] = "Unknown station"
        if self.driver_id is not None and self.driver_id not in references["driver_ids"]:
            errors["driver_id"] = "Unknown driver"
        return errors


## Query Parameters
class OrderBy(IntEnum):
    id = 1
    priority = 2
    updated_on = 3
    created_on = 4


class QueryParams(BaseModel):
    q: str | None = Field(default=None, description="Searches subject and description")
    status: ComplaintStatus | None = Field(
        default=None, description=enumStr(ComplaintStatus)
    )
    priority: ComplaintPriority | None = Field(
        default=None, description=enumStr(ComplaintPriority)
    )
    type: ComplaintType | None = Field(default=None, description=enumStr(ComplaintType))
    user_id: int | None = None
    station_id: int | None = None
    driver_id: int | None = None
    # id based
    id: int | None = None
    id_list: List[int] | None = None
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
def references(session: Session, complaint: Complaint | None = None) -> dict:
    driverIds = getters.driverIds(session)
    # The driver named by a complaint stays valid after a change of role
    if complaint is not None and complaint.driver_id is not None:
        driverIds.add(complaint.driver_id)
    return {
        "user_ids": getters.userIds(session),
        "station_ids": getters.allStationIds(session),
        "driver_ids": driverIds,
    }


def presentComplaint(complaint: Complaint) -> dict:
    complaintData = labels.present(EntityKind.COMPLAINT, complaint)
    complaintData["type_label"] = labels.typeLabel(complaint.type)
    complaintData["priority_label"] = labels.priorityLabel(complaint.priority)
    complaintData["priority_color"] = labels.colorName(
        labels.priorityColor(complaint.priority)
    )
    return complaintData


def searchComplaint(session: Session, qParam: QueryParams) -> List[Complaint]:
    query = session.query(Complaint)

    # Filters
    if qParam.q is not None:
        pattern = searchPattern(qParam.q)
        query = query.filter(
            or_(
                Complaint.subject.ilike(pattern, escape="\\"),
                Complaint.description.ilike(pattern, escape="\\"),
            )
        )
    if qParam.status is not None:
        query = query.filter(Complaint.status == qParam.status)
    if qParam.priority is not None:
        query = query.filter(Complaint.priority == qParam.priority)
    if qParam.type is not None:
        query = query.filter(Complaint.type == qParam.type)
    if qParam.user_id is not None:
        query = query.filter(Complaint.user_id == qParam.user_id)
    if qParam.station_id is not None:
        query = query.filter(Complaint.station_id == qParam.station_id)
    if qParam.driver_id is not None:
        query = query.filter(Complaint.driver_id == qParam.driver_id)
    # id based
    if qParam.id is not None:
        query = query.filter(Complaint.id == qParam.id)
    if qParam.id_list is not None:
        query = query.filter(Complaint.id.in_(qParam.id_list))
    # created_on based
    if qParam.created_on_ge is not None:
        query = query.filter(Complaint.created_on >= qParam.created_on_ge)
    if qParam.created_on_le is not None:
        query = query.filter(Complaint.created_on <= qParam.created_on_le)

    # Ordering
    orderingAttribute = getattr(Complaint, OrderBy(qParam.order_by).name)
    if qParam.order_in == OrderIn.ASC:
        query = query.order_by(orderingAttribute.asc())
    else:
        query = query.order_by(orderingAttribute.desc())

    # Pagination
    query = query.offset(qParam.offset).limit(qParam.limit)
    return query.all()


## API endpoints [Admin]
@route_admin.post(
    URL_COMPLAINT,
    tags=["Complaint"],
    response_model=ComplaintSchema,
    status_code=status.HTTP_201_CREATED,
    responses=makeExceptionResponses([exceptions.InvalidForm]),
    description="""
    Record a complaint. The user, station and driver it refers to are optional.
    New complaints start in the `PENDING` status.
    """,
)
async def create_complaint(
    fParam: Dict[str, Any] = Body(),
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        draft = Draft(ComplaintForm, references=references(session))
        draft.stage(**fParam)
        candidate = draft.commit()

        complaint = Complaint(status=ComplaintStatus.PENDING, **candidate.model_dump())
        session.add(complaint)
        session.commit()
        session.refresh(complaint)

        complaintData = presentComplaint(complaint)
        logEvent(request_info, complaintData)
        return complaintData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.patch(
    URL_COMPLAINT,
    tags=["Complaint"],
    response_model=ComplaintSchema,
    responses=makeExceptionResponses(
        [exceptions.InvalidIdentifier, exceptions.InvalidForm]
    ),
    description="""
    Update a complaint, typically to change its priority or type.
    The body holds the `id` and the changed fields.
    """,
)
async def update_complaint(
    fParam: Dict[str, Any] = Body(),
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        identifier = IdForm.model_validate(fParam)
        complaint = validators.scopedEntity(session, Complaint, identifier.id)

        draft = Draft(ComplaintForm, complaint, references(session, complaint))
        draft.stage(**fParam)
        candidate = draft.commit()

        updateIfChanged(
            complaint, candidate.model_dump(), list(ComplaintForm.model_fields)
        )
        haveUpdates = session.is_modified(complaint)
        if haveUpdates:
            session.commit()
            session.refresh(complaint)

        complaintData = presentComplaint(complaint)
        if haveUpdates:
            logEvent(request_info, complaintData)
        return complaintData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.post(
    URL_COMPLAINT + URL_ACTION,
    tags=["Complaint"],
    response_model=ComplaintSchema,
    responses=makeExceptionResponses(
        [exceptions.InvalidIdentifier, exceptions.InvalidStateTransition]
    ),
    description="""
    Apply a workflow action to a complaint.
    PENDING: START_PROCESSING, RESOLVE.
    IN_PROGRESS: RESOLVE.
    RESOLVED is final. Resolving records the resolution time in `resolved_on`.
    """,
)
async def act_on_complaint(
    fParam: ActionForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        complaint = validators.scopedEntity(session, Complaint, fParam.id)
        complaint.status = workflow.transition(
            EntityKind.COMPLAINT, complaint.status, fParam.action
        )
        if complaint.status == ComplaintStatus.RESOLVED:
            complaint.resolved_on = datetime.now(timezone.utc)
        session.commit()
        session.refresh(complaint)

        complaintData = presentComplaint(complaint)
        logEvent(request_info, complaintData)
        return complaintData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.delete(
    URL_COMPLAINT,
    tags=["Complaint"],
    status_code=status.HTTP_204_NO_CONTENT,
    description="""
    Delete a complaint by ID.
    """,
)
async def delete_complaint(
    fParam: IdForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        complaint = session.query(Complaint).filter(Complaint.id == fParam.id).first()
        if complaint is not None:
            session.delete(complaint)
            session.commit()
            logEvent(request_info, presentComplaint(complaint))
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.get(
    URL_COMPLAINT,
    tags=["Complaint"],
    response_model=List[ComplaintSchema],
    description="""
    Retrieve complaints, filtered by status, priority, type or the entities they concern.
    """,
)
async def fetch_complaint(qParam: Annotated[QueryParams, Query()]):
    session = sessionMaker()
    try:
        complaints = searchComplaint(session, qParam)
        return [presentComplaint(complaint) for complaint in complaints]
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()
