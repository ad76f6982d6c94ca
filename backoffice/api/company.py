from datetime import datetime
from enum import IntEnum
from typing import Annotated, Any, Dict, List, Optional
from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy.orm.session import Session
from pydantic import BaseModel, EmailStr, Field
from pydantic_extra_types.phone_numbers import PhoneNumber

from backoffice.api.promotion import detachStations
from backoffice.src.db import Company, sessionMaker
from backoffice.src import exceptions, validators, getters, labels, workflow
from backoffice.src.enums import CompanyStatus, EntityKind, OrderIn
from backoffice.src.forms import Draft, EntityForm
from backoffice.src.functions import (
    enumStr,
    makeExceptionResponses,
    searchPattern,
    updateIfChanged,
)
from backoffice.src.loggers import logEvent
from backoffice.src.schemas import ActionForm, IdForm, StatusInfo
from backoffice.src.urls import URL_ACTION, URL_COMPANY

route_admin = APIRouter()


## Output Schema
class CompanySchema(StatusInfo):
    id: int
    name: str
    address: str
    phone_number: str
    email_id: str
    status: int
    updated_on: Optional[datetime]
    created_on: datetime


## Input Forms
class CompanyForm(EntityForm):
    name: str = Field(min_length=1, max_length=64)
    address: str = Field(min_length=1, max_length=512)
    phone_number: PhoneNumber = Field(description="Phone number in RFC3966 format")
    email_id: EmailStr = Field(description="Email in RFC 5322 format")


## Query Parameters
class OrderBy(IntEnum):
    id = 1
    name = 2
    updated_on = 3
    created_on = 4


class QueryParams(BaseModel):
    q: str | None = Field(default=None, description="Searches name and email")
    status: CompanyStatus | None = Field(
        default=None, description=enumStr(CompanyStatus)
    )
    id: int | None = None
    # Ordering
    order_by: OrderBy = Field(default=OrderBy.id, description=enumStr(OrderBy))
    order_in: OrderIn = Field(default=OrderIn.DESC, description=enumStr(OrderIn))
    # Pagination
    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=20, gt=0, le=100)


## Function
def searchCompany(session: Session, qParam: QueryParams) -> List[Company]:
    query = session.query(Company)

    # Filters
    if qParam.q is not None:
        pattern = searchPattern(qParam.q)
        query = query.filter(
            Company.name.ilike(pattern, escape="\\")
            | Company.email_id.ilike(pattern, escape="\\")
        )
    if qParam.status is not None:
        query = query.filter(Company.status == qParam.status)
    if qParam.id is not None:
        query = query.filter(Company.id == qParam.id)

    # Ordering
    orderingAttribute = getattr(Company, OrderBy(qParam.order_by).name)
    if qParam.order_in == OrderIn.ASC:
        query = query.order_by(orderingAttribute.asc())
    else:
        query = query.order_by(orderingAttribute.desc())

    # Pagination
    query = query.offset(qParam.offset).limit(qParam.limit)
    return query.all()


## API endpoints [Admin]
@route_admin.post(
    URL_COMPANY,
    tags=["Company"],
    response_model=CompanySchema,
    status_code=status.HTTP_201_CREATED,
    responses=makeExceptionResponses(
        [exceptions.InvalidForm, exceptions.UniqueViolation]
    ),
    description="""
    Register a new transport company. New companies start in the `ACTIVE` status.
    """,
)
async def create_company(
    fParam: Dict[str, Any] = Body(),
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        draft = Draft(CompanyForm)
        draft.stage(**fParam)
        candidate = draft.commit()

        company = Company(status=CompanyStatus.ACTIVE, **candidate.model_dump())
        session.add(company)
        session.commit()
        session.refresh(company)

        companyData = labels.present(EntityKind.COMPANY, company)
        logEvent(request_info, companyData)
        return companyData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.patch(
    URL_COMPANY,
    tags=["Company"],
    response_model=CompanySchema,
    responses=makeExceptionResponses(
        [
            exceptions.InvalidIdentifier,
            exceptions.InvalidForm,
            exceptions.UniqueViolation,
        ]
    ),
    description="""
    Update the contact details of a company. The body holds the `id` and the changed fields.
    """,
)
async def update_company(
    fParam: Dict[str, Any] = Body(),
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        identifier = IdForm.model_validate(fParam)
        company = validators.scopedEntity(session, Company, identifier.id)

        draft = Draft(CompanyForm, company)
        draft.stage(**fParam)
        candidate = draft.commit()

        updateIfChanged(
            company,
            candidate.model_dump(),
            [
                Company.name.key,
                Company.address.key,
                Company.phone_number.key,
                Company.email_id.key,
            ],
        )
        haveUpdates = session.is_modified(company)
        if haveUpdates:
            session.commit()
            session.refresh(company)

        companyData = labels.present(EntityKind.COMPANY, company)
        if haveUpdates:
            logEvent(request_info, companyData)
        return companyData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.post(
    URL_COMPANY + URL_ACTION,
    tags=["Company"],
    response_model=CompanySchema,
    responses=makeExceptionResponses(
        [exceptions.InvalidIdentifier, exceptions.InvalidStateTransition]
    ),
    description="""
    Apply a workflow action to a company.
    ACTIVE: DEACTIVATE. INACTIVE: ACTIVATE.
    """,
)
async def act_on_company(
    fParam: ActionForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        company = validators.scopedEntity(session, Company, fParam.id)
        company.status = workflow.transition(
            EntityKind.COMPANY, company.status, fParam.action
        )
        session.commit()
        session.refresh(company)

        companyData = labels.present(EntityKind.COMPANY, company)
        logEvent(request_info, companyData)
        return companyData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.delete(
    URL_COMPANY,
    tags=["Company"],
    status_code=status.HTTP_204_NO_CONTENT,
    description="""
    Delete a company by ID, together with its stations, staff and vehicles.
    """,
)
async def delete_company(
    fParam: IdForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        company = session.query(Company).filter(Company.id == fParam.id).first()
        if company is not None:
            detachStations(session, getters.stationIds(session, company.id))
            session.delete(company)
            session.commit()
            logEvent(request_info, labels.present(EntityKind.COMPANY, company))
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.get(
    URL_COMPANY,
    tags=["Company"],
    response_model=List[CompanySchema],
    description="""
    Retrieve companies. `q` matches name and email, case-insensitively.
    """,
)
async def fetch_company(qParam: Annotated[QueryParams, Query()]):
    session = sessionMaker()
    try:
        companies = searchCompany(session, qParam)
        return [labels.present(EntityKind.COMPANY, company) for company in companies]
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()
