from typing import Any, List
from pydantic import BaseModel, Field

from backoffice.src.enums import Action


class RequestInfo(BaseModel):
    method: str
    path: str
    app_id: int


class HealthStatus(BaseModel):
    status: str
    version: str


class ErrorResponse(BaseModel):
    detail: Any


class StatusInfo(BaseModel):
    status_label: str
    status_color: str
    actions: List[int]


## Input Forms shared by every resource
class IdForm(BaseModel):
    id: int


class ActionForm(IdForm):
    action: Action = Field(
        description=", ".join(f"{x.name}: {x.value}" for x in Action)
    )
