from datetime import date, datetime
from decimal import Decimal
from enum import IntEnum
from typing import Annotated, Any, Dict, List, Optional, Set
from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy import or_
from sqlalchemy.orm.session import Session
from pydantic import BaseModel, Field

from backoffice.src.db import Promotion, sessionMaker
from backoffice.src import exceptions, validators, getters, labels, workflow
from backoffice.src.constants import MAX_PERCENTAGE_DISCOUNT
from backoffice.src.enums import DiscountType, EntityKind, OrderIn, PromotionStatus
from backoffice.src.forms import Draft, EntityForm
from backoffice.src.functions import (
    enumStr,
    makeExceptionResponses,
    searchPattern,
    updateIfChanged,
)
from backoffice.src.loggers import logEvent
from backoffice.src.schemas import ActionForm, IdForm, StatusInfo
from backoffice.src.urls import URL_ACTION, URL_PROMOTION

route_admin = APIRouter()


## Output Schema
class PromotionSchema(StatusInfo):
    id: int
    title: str
    description: str
    discount_type: int
    discount_value: float
    start_date: date
    end_date: date
    station_ids: List[int]
    minimum_amount: Optional[float]
    max_discount: Optional[float]
    usage_limit: Optional[int]
    usage_count: int
    status: int
    updated_on: Optional[datetime]
    created_on: datetime


## Input Forms
class PromotionForm(EntityForm):
    title: str = Field(min_length=1, max_length=128)
    description: str = Field(default="", max_length=4096)
    discount_type: DiscountType = Field(
        default=DiscountType.PERCENTAGE, description=enumStr(DiscountType)
    )
    discount_value: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    start_date: date
    end_date: date
    station_ids: List[int] = Field(
        default_factory=list, description="Stations it applies to, empty for all"
    )
    minimum_amount: Decimal | None = Field(
        default=None, ge=0, max_digits=12, decimal_places=2
    )
    max_discount: Decimal | None = Field(
        default=None, gt=0, max_digits=12, decimal_places=2
    )
    usage_limit: int | None = Field(default=None, gt=0)

    def crossCheck(self, references: dict) -> Dict[str, str]:
        errors = {}
        if self.end_date < self.start_date:
            errors["end_date"] = "The end date is before the start date"
        if (
            self.discount_type == DiscountType.PERCENTAGE
            and self.discount_value > MAX_PERCENTAGE_DISCOUNT
        ):
            errors["discount_value"] = (
                f"A percentage discount cannot exceed {MAX_PERCENTAGE_DISCOUNT}"
            )
        unknown = set(self.station_ids) - references.get("station_ids", set())
        if unknown:
            errors["station_ids"] = f"Unknown stations: {sorted(unknown)}"
        return errors


## Query Parameters
class OrderBy(IntEnum):
    id = 1
    start_date = 2
    end_date = 3
    discount_value = 4
    updated_on = 5
    created_on = 6


class QueryParams(BaseModel):
    q: str | None = Field(default=None, description="Searches title and description")
    status: PromotionStatus | None = Field(
        default=None, description=enumStr(PromotionStatus)
    )
    discount_type: DiscountType | None = Field(
        default=None, description=enumStr(DiscountType)
    )
    running_on: date | None = Field(
        default=None, description="Promotions whose period includes this date"
    )
    # id based
    id: int | None = None
    id_list: List[int] | None = None
    # end_date based
    end_date_ge: date | None = None
    end_date_le: date | None = None
    # Ordering
    order_by: OrderBy = Field(default=OrderBy.id, description=enumStr(OrderBy))
    order_in: OrderIn = Field(default=OrderIn.DESC, description=enumStr(OrderIn))
    # Pagination
    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=20, gt=0, le=100)


## Function
def detachStations(session: Session, stationIds: Set[int]):
    """
    Remove deleted stations from the promotions naming them.
    `station_ids` has no foreign key, so this runs in the transaction
    deleting the stations. Nothing is committed here.
    """
    if not stationIds:
        return
    for promotion in session.query(Promotion).all():
        remaining = [
            stationId
            for stationId in promotion.station_ids
            if stationId not in stationIds
        ]
        if len(remaining) != len(promotion.station_ids):
            promotion.station_ids = remaining


def searchPromotion(session: Session, qParam: QueryParams) -> List[Promotion]:
    query = session.query(Promotion)

    # Filters
    if qParam.q is not None:
        pattern = searchPattern(qParam.q)
        query = query.filter(
            or_(
                Promotion.title.ilike(pattern, escape="\\"),
                Promotion.description.ilike(pattern, escape="\\"),
            )
        )
    if qParam.status is not None:
        query = query.filter(Promotion.status == qParam.status)
    if qParam.discount_type is not None:
        query = query.filter(Promotion.discount_type == qParam.discount_type)
    if qParam.running_on is not None:
        query = query.filter(
            Promotion.start_date <= qParam.running_on,
            Promotion.end_date >= qParam.running_on,
        )
    # id based
    if qParam.id is not None:
        query = query.filter(Promotion.id == qParam.id)
    if qParam.id_list is not None:
        query = query.filter(Promotion.id.in_(qParam.id_list))
    # end_date based
    if qParam.end_date_ge is not None:
        query = query.filter(Promotion.end_date >= qParam.end_date_ge)
    if qParam.end_date_le is not None:
        query = query.filter(Promotion.end_date <= qParam.end_date_le)

    # Ordering
    orderingAttribute = getattr(Promotion, OrderBy(qParam.order_by).name)
    if qParam.order_in == OrderIn.ASC:
        query = query.order_by(orderingAttribute.asc())
    else:
        query = query.order_by(orderingAttribute.desc())

    # Pagination
    query = query.offset(qParam.offset).limit(qParam.limit)
    return query.all()


## API endpoints [Admin]
@route_admin.post(
    URL_PROMOTION,
    tags=["Promotion"],
    response_model=PromotionSchema,
    status_code=status.HTTP_201_CREATED,
    responses=makeExceptionResponses([exceptions.InvalidForm]),
    description="""
    Create a promotion. New promotions start in the `SCHEDULED` status and
    have to be activated explicitly.
    A percentage discount cannot exceed 100 and the period must not end before it starts.
    """,
)
async def create_promotion(
    fParam: Dict[str, Any] = Body(),
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        draft = Draft(
            PromotionForm,
            references={"station_ids": getters.allStationIds(session)},
        )
        draft.stage(**fParam)
        candidate = draft.commit()

        promotion = Promotion(
            status=PromotionStatus.SCHEDULED, **candidate.model_dump()
        )
        session.add(promotion)
        session.commit()
        session.refresh(promotion)

        promotionData = labels.present(EntityKind.PROMOTION, promotion)
        logEvent(request_info, promotionData)
        return promotionData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.patch(
    URL_PROMOTION,
    tags=["Promotion"],
    response_model=PromotionSchema,
    responses=makeExceptionResponses(
        [exceptions.InvalidIdentifier, exceptions.InvalidForm]
    ),
    description="""
    Update a promotion. The body holds the `id` and the changed fields.
    The usage counter is maintained by the booking flow and cannot be edited.
    """,
)
async def update_promotion(
    fParam: Dict[str, Any] = Body(),
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        identifier = IdForm.model_validate(fParam)
        promotion = validators.scopedEntity(session, Promotion, identifier.id)

        draft = Draft(
            PromotionForm,
            promotion,
            {"station_ids": getters.allStationIds(session)},
        )
        draft.stage(**fParam)
        candidate = draft.commit()

        updateIfChanged(
            promotion, candidate.model_dump(), list(PromotionForm.model_fields)
        )
        haveUpdates = session.is_modified(promotion)
        if haveUpdates:
            session.commit()
            session.refresh(promotion)

        promotionData = labels.present(EntityKind.PROMOTION, promotion)
        if haveUpdates:
            logEvent(request_info, promotionData)
        return promotionData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.post(
    URL_PROMOTION + URL_ACTION,
    tags=["Promotion"],
    response_model=PromotionSchema,
    responses=makeExceptionResponses(
        [exceptions.InvalidIdentifier, exceptions.InvalidStateTransition]
    ),
    description="""
    Apply a workflow action to a promotion.
    SCHEDULED: ACTIVATE, EXPIRE.
    ACTIVE: PAUSE, EXPIRE.
    EXPIRED is final.
    """,
)
async def act_on_promotion(
    fParam: ActionForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        promotion = validators.scopedEntity(session, Promotion, fParam.id)
        promotion.status = workflow.transition(
            EntityKind.PROMOTION, promotion.status, fParam.action
        )
        session.commit()
        session.refresh(promotion)

        promotionData = labels.present(EntityKind.PROMOTION, promotion)
        logEvent(request_info, promotionData)
        return promotionData
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.delete(
    URL_PROMOTION,
    tags=["Promotion"],
    status_code=status.HTTP_204_NO_CONTENT,
    description="""
    Delete a promotion by ID.
    """,
)
async def delete_promotion(
    fParam: IdForm,
    request_info=Depends(getters.requestInfo),
):
    session = sessionMaker()
    try:
        promotion = session.query(Promotion).filter(Promotion.id == fParam.id).first()
        if promotion is not None:
            session.delete(promotion)
            session.commit()
            logEvent(request_info, labels.present(EntityKind.PROMOTION, promotion))
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()


@route_admin.get(
    URL_PROMOTION,
    tags=["Promotion"],
    response_model=List[PromotionSchema],
    description="""
    Retrieve promotions. `running_on` selects those whose period includes a given day.
    """,
)
async def fetch_promotion(qParam: Annotated[QueryParams, Query()]):
    session = sessionMaker()
    try:
        promotions = searchPromotion(session, qParam)
        return [
            labels.present(EntityKind.PROMOTION, promotion) for promotion in promotions
        ]
    except Exception as e:
        exceptions.handle(e)
    finally:
        session.close()
