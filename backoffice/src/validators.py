"""
Guard logic of the back-office API.

This module centralizes checks such as:
- Geometry validation (WKT, SRID)
- Existence and status of the owning company
- Existence of an entity within its scope

All functions raise appropriate exceptions from `backoffice.src.exceptions`
when validation fails, ensuring consistent error handling.
"""

from typing import Type
from sqlalchemy.orm.session import Session
from shapely.geometry.base import BaseGeometry

from backoffice.src import exceptions
from backoffice.src.db import Company
from backoffice.src.enums import CompanyStatus
from backoffice.src.functions import isSRID4326, toWKTgeometry


# ---------------------------------------------------------------------------
# Geometry validation
# ---------------------------------------------------------------------------
def WKTstring(wktString: str, expected_type: Type[BaseGeometry]) -> BaseGeometry:
    """
    Validate and parse a WKT string into a Shapely geometry of the expected type.

    Raises:
        exceptions.InvalidWKTStringOrType: If parsing fails or type mismatches.
    """
    wktGeometry = toWKTgeometry(wktString, expected_type)
    if wktGeometry is None:
        raise exceptions.InvalidWKTStringOrType()
    return wktGeometry


def SRID4326(wktGeometry: BaseGeometry) -> bool:
    """
    Validate that the given geometry uses SRID 4326 (WGS84 lat/long bounds).

    Raises:
        exceptions.InvalidSRID4326: If geometry has invalid latitude/longitude.
    """
    if not isSRID4326(wktGeometry):
        raise exceptions.InvalidSRID4326()
    return True


# ---------------------------------------------------------------------------
# Ownership validation
# ---------------------------------------------------------------------------
def company(company_id: int, session: Session) -> Company:
    """
    Fetch the company a request is scoped to.

    Raises:
        exceptions.UnknownValue: If no company has this id.
    """
    company = session.query(Company).filter(Company.id == company_id).first()
    if company is None:
        raise exceptions.UnknownValue(Company.id)
    return company


def activeCompany(company_id: int, session: Session) -> Company:
    """
    Fetch the company a request is scoped to, requiring it to be active.
    Used before adding resources to a company.

    Raises:
        exceptions.UnknownValue: If no company has this id.
        exceptions.InactiveResource: If the company is not active.
    """
    row = company(company_id, session)
    if row.status != CompanyStatus.ACTIVE:
        raise exceptions.InactiveResource(Company)
    return row


def scopedEntity(session: Session, model, id: int, company_id: int | None = None):
    """
    Fetch an entity by id, optionally within a company.

    Raises:
        exceptions.InvalidIdentifier: If the entity does not exist (in the company).
    """
    query = session.query(model).filter(model.id == id)
    if company_id is not None:
        query = query.filter(model.company_id == company_id)
    entity = query.first()
    if entity is None:
        raise exceptions.InvalidIdentifier()
    return entity
