from typing import Any, Dict, Iterable, List, Optional, Sequence, Type
from shapely import wkt, errors
from shapely.geometry import Point
from shapely.geometry.base import BaseGeometry
import pyproj

from backoffice.src import schemas
from backoffice.src.exceptions import APIException

# WGS 84 ellipsoid used for distances between stations
geod = pyproj.Geod(ellps="WGS84")


def makeExceptionResponses(exceptions: List[APIException]) -> Dict[int, dict]:
    """
    Generate OpenAPI response documentation by fusing multiple APIException
    classes or instances.

    Exceptions whose constructor needs arguments are passed as classes,
    the others may be passed either way.

    Args:
        exceptions (List[APIException]): Exception classes or instances.

    Returns:
        Dict[int, dict]: A dictionary of OpenAPI response specs grouped by status code.
    """
    responses = {}

    for exception in exceptions:
        status_code = exception.status_code
        example_key = (
            exception.__name__ if isinstance(exception, type) else type(exception).__name__
        )
        example_value = {
            "summary": str(exception.headers),
            "value": {"detail": exception.detail},
        }

        if status_code not in responses:
            responses[status_code] = {
                "model": schemas.ErrorResponse,
                "content": {
                    "application/json": {"examples": {example_key: example_value}}
                },
            }
        else:
            responses[status_code]["content"]["application/json"]["examples"][
                example_key
            ] = example_value

    return responses


def enumStr(enumClass) -> str:
    """
    Convert an Enum class into a comma-separated string of its members.

    Each enum member is formatted as "<NAME>: <VALUE>".

    Example:
        >>> enumStr(StationStatus)
        'ACTIVE: 1, INACTIVE: 2, UNDER_MAINTENANCE: 3'
    """
    return ", ".join(f"{x.name}: {x.value}" for x in enumClass)


def toWKTgeometry(wktString: str, type: Type[BaseGeometry]) -> Optional[BaseGeometry]:
    """
    Convert a WKT (Well-Known Text) string into a Shapely geometry of the expected type.

    Returns `None` if parsing fails or the geometry is not an instance of `type`.

    Example:
        >>> toWKTgeometry("POINT (-4.0083 5.3600)", Point)
        <POINT (-4.008 5.36)>
        >>> toWKTgeometry("POINT (30 10)", Polygon) is None
        True
    """
    try:
        geom = wkt.loads(wktString)
        if not isinstance(geom, type):
            return None
        return geom
    except errors.ShapelyError:
        return None


def isSRID4326(wktGeom: BaseGeometry) -> bool:
    """
    Validate whether a Shapely geometry uses coordinates consistent with SRID 4326 (WGS84).

    Latitude must be within [-90, 90] and longitude within [-180, 180].
    Coordinates are stored as (longitude, latitude).

    Example:
        >>> isSRID4326(Point(-4.0083, 5.3600))
        True
        >>> isSRID4326(Point(200, 95))
        False
    """
    if wktGeom.is_empty:
        return False
    for longitude, latitude in wktGeom.coords:
        if not (-90 <= latitude <= 90) or not (-180 <= longitude <= 180):
            return False
    return True


def toPoint(latitude: float, longitude: float) -> Point:
    """Build a WGS84 point from a latitude and a longitude."""
    return Point(longitude, latitude)


def distance(origin: Point, target: Point) -> float:
    """
    Geodesic distance in meters between two WGS84 points.

    Abidjan to Dakar is roughly 1800 km.
    """
    _, _, meters = geod.inv(origin.x, origin.y, target.x, target.y)
    return meters


def isValidTransition(
    transitions: dict[Any, dict[Any, Any]], old_state: Any, action: Any
) -> bool:
    """
    Check if an action is valid in the given state.

    Args:
        transitions (dict[Any, dict[Any, Any]]): Mapping of state to the
            actions allowed in it and the state each action leads to.
            Example:
                {
                    "SCHEDULED": {"ACTIVATE": "ACTIVE"},
                    "ACTIVE": {"PAUSE": "SCHEDULED"},
                }
        old_state (Any): Current state value.
        action (Any): Requested action.

    Notes:
        - If `old_state` is not in the transitions mapping, this will return False.
    """
    if not transitions:
        return False
    if old_state not in transitions:
        return False
    return action in transitions[old_state]


def updateIfChanged(targetObj, sourceObj, fields: List[str]) -> None:
    """
    Update attributes on a target object from a source object
    only if the values differ.

    Designed for use with SQLAlchemy models, where `fields` are typically
    provided as `Model.field.key`. The source (an object or a mapping) is a
    fully validated candidate, so `None` is a legitimate value
    (e.g. clearing an optional email).

    Example:
        >>> updateIfChanged(station, candidate, [Station.name.key, Station.city.key])
    """
    for field in fields:
        new_value = _fieldValue(sourceObj, field)
        old_value = getattr(targetObj, field)
        if old_value != new_value:
            setattr(targetObj, field, new_value)


def _fieldValue(record: Any, field: str) -> Any:
    if isinstance(record, dict):
        return record.get(field)
    return getattr(record, field, None)


def filterRecords(
    records: Iterable[Any], query: Optional[str], fields: Sequence[str]
) -> List[Any]:
    """
    Case-insensitive substring search over one or more text fields.

    The input is never modified: a new list holding the matching records,
    in their original order, is returned. Records may be mappings or
    objects. An empty (or `None`) query matches every record.

    Example:
        >>> filterRecords([{"name": "Dakar"}, {"name": "Abidjan"}], "dakar", ["name"])
        [{'name': 'Dakar'}]
    """
    if not query:
        return list(records)
    needle = query.casefold()
    matches = []
    for record in records:
        for field in fields:
            value = _fieldValue(record, field)
            if value is not None and needle in str(value).casefold():
                matches.append(record)
                break
    return matches


def searchPattern(query: str) -> str:
    """
    Build an `ilike` pattern matching `query` as a literal substring.

    `%`, `_` and the escape character itself are escaped, so the pattern
    has to be used with `escape="\\\\"`.
    """
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
