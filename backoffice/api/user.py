from datetime import datetime
from enum import IntEnum
from typing import Annotated, Any, Dict, List, Optional
from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy import or_
from sqlalchemy.orm.session import Session
from pydantic import BaseModel, EmailStr, Field
from pydantic_extra_types.phone_numbers import PhoneNumber

from backoffice.src.db import User, sessionMaker
from backoffice.src import exceptions, validators, getters, labels, workflow
from backoffice.src.enums import EntityKind, OrderIn, UserStatus
from backoffice.src.forms import Draft, EntityForm
from backoffice.src.functions import (
    enumStr,
    makeExceptionResponses,
    searchPattern,
    updateIfChanged,
)
from backoffice.src.loggers import logEvent
from backoffice.src.schemas import ActionForm, IdForm, StatusInfo
from backoffice.src.urls import URL_ACTION, URL_USER

route_admin = APIRouter()


## Output Schema
class UserSchema(StatusInfo):
    id: int
    first_name: str
    last_name: str
    phone_number: str
    email_id: Optional[str]
    total_bookings: int
    total_spent: float
    loyalty_points: int
    status: int
    updated_on: Optional[datetime]
    created_on: datetime


## Input Forms
class UserForm(EntityForm):
    first_name: str = Field(min_length=1, max_length=32)
    last_name: str = Field(min_length=1, max_length=32)
    phone_number: PhoneNumber = Field(description="Phone number in RFC3966 format")
    email_id: EmailStr | None = Field(
        default=None, description="Email in RFC 5322 format"
    )


## Query Parameters
class OrderBy(IntEnum):
    id = 1
    last_name = 2
    total_bookings = 3
    total_spent = 4
    loyalty_points = 5
    updated_on = 6
    created_on = 7


class QueryParams(BaseModel):
    q: str | None = Field(
        default=None, description="Searches names, phone number and email"
    )
    status: UserStatus | None = Field(default=None, description=enumStr(UserStatus))
    # id based
    id: int | None = None
    id_list: List[int] | None = None
    # total_bookings based
    total_bookings_ge: int | None = None
    # Ordering
    order_by: OrderBy = Field(default=OrderBy.id, description=enumStr(OrderBy))
    order_in: OrderIn = Field(default=OrderIn.DESC, description=enumStr(OrderIn))
    # Pagination
    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=20, gt=0, le=100)


## Function
def searchUser(session: Session, qParam: QueryParams) -> List[User]:
    query = session.query(User)

    # Filters
    if qParam.q is not None:
        pattern = searchPattern(qParam.q)
        query = query.filter(
            or_(
                User.first_name.ilike(pattern, escape="\\"),
                User.last_name.ilike(pattern, escape="\\"),
                User.phone_number.ilike(pattern, escape="\\"),
                User.email_id.ilike(pattern, escape="\\"),
            )
        )
    if qParam.status is not None:
        query = query.filter(User.status == qParam.status)
    # id based
    if qParam.id is not None:
        query = query.filter(User.id == qParam.id)
    if qParam.id_list is not None:
        query = query.filter(User.id.in_(qParam.id_list))
    if qParam.total_bookings_ge is not None:
        query = query.filter(User.total_bookings >= qParam.total_bookings_ge)

    # Ordering
    orderingAttribute = getattr(User, OrderBy(qParam.order_by).name)
    if qParam.order_in == OrderIn.ASC:
        query = query.order_by(orderingAttribute.asc())
    else:
        query = query.order_by(orderingAttribute.desc())

    # Pagination
    query = query.offset(qParam.offset).limit(qParam.limit)
    return query.all()


## API endpoints [Admin]
@route_admin.post(
    URL_USER,
    tags=["User"],
    response_model=UserSchema,
    status_code=status.HTTP_201_CREATED,
    responses=makeExceptionResponses(
        [exceptions.InvalidForm, exceptions.UniqueViolation]
    ),
    description="""
    Register a passenger account. The phone number must be unique.
    Booking counters start at zero.
    """,
)
async def create_user(
    fParam: Dict[str, Any] = Body(),
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        draft = Draft(UserForm)
        draft.stage(**fParam)
        candidate = draft.commit()

        user = User(status=UserStatus.ACTIVE, **candidate.model_dump())
        session.add(user)
        session.commit()
        session.refresh(user)

        userData = labels.present(EntityKind.USER, user)
        logEvent(request_info, userData)
        return userData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.patch(
    URL_USER,
    tags=["User"],
    response_model=UserSchema,
    responses=makeExceptionResponses(
        [
            exceptions.InvalidIdentifier,
            exceptions.InvalidForm,
            exceptions.UniqueViolation,
        ]
    ),
    description="""
    Update the profile of a user. The body holds the `id` and the changed fields.
    Booking counters and loyalty points are read-only.
    """,
)
async def update_user(
    fParam: Dict[str, Any] = Body(),
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        identifier = IdForm.model_validate(fParam)
        user = validators.scopedEntity(session, User, identifier.id)

        draft = Draft(UserForm, user)
        draft.stage(**fParam)
        candidate = draft.commit()

        updateIfChanged(user, candidate.model_dump(), list(UserForm.model_fields))
        haveUpdates = session.is_modified(user)
        if haveUpdates:
            session.commit()
            session.refresh(user)

        userData = labels.present(EntityKind.USER, user)
        if haveUpdates:
            logEvent(request_info, userData)
        return userData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.post(
    URL_USER + URL_ACTION,
    tags=["User"],
    response_model=UserSchema,
    responses=makeExceptionResponses(
        [exceptions.InvalidIdentifier, exceptions.InvalidStateTransition]
    ),
    description="""
    Apply a workflow action to a user.
    ACTIVE: SUSPEND. SUSPENDED: REINSTATE.
    """,
)
async def act_on_user(
    fParam: ActionForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        user = validators.scopedEntity(session, User, fParam.id)
        user.status = workflow.transition(EntityKind.USER, user.status, fParam.action)
        session.commit()
        session.refresh(user)

        userData = labels.present(EntityKind.USER, user)
        logEvent(request_info, userData)
        return userData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.delete(
    URL_USER,
    tags=["User"],
    status_code=status.HTTP_204_NO_CONTENT,
    description="""
    Delete a user by ID. Their complaints are kept without the user reference.
    """,
)
async def delete_user(
    fParam: IdForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        user = session.query(User).filter(User.id == fParam.id).first()
        if user is not None:
            session.delete(user)
            session.commit()
            logEvent(request_info, labels.present(EntityKind.USER, user))
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.get(
    URL_USER,
    tags=["User"],
    response_model=List[UserSchema],
    description="""
    Retrieve users. `q` matches names, phone number and email, case-insensitively.
    """,
)
async def fetch_user(qParam: Annotated[QueryParams, Query()]):
    session = sessionMaker()
    try:
        users = searchUser(session, qParam)
        return [labels.present(EntityKind.USER, user) for user in users]
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()
