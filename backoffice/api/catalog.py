from typing import Dict, List
from fastapi import APIRouter
from pydantic import BaseModel

from backoffice.src import labels
from backoffice.src.workflow import TRANSITIONS
from backoffice.src.urls import URL_LABELS, URL_WORKFLOWS

route_admin = APIRouter()


## Output Schema
class LabelSchema(BaseModel):
    value: int
    name: str
    label: str
    color: str | None = None


class ActionSchema(BaseModel):
    action: int
    name: str
    label: str
    to: int


class StateSchema(BaseModel):
    status: int
    name: str
    terminal: bool
    actions: List[ActionSchema]


## Function
def workflows() -> Dict[str, List[dict]]:
    tables = {}
    for kind, states in TRANSITIONS.items():
        tables[kind.name] = [
            {
                "status": int(state),
                "name": state.name,
                "terminal": not actions,
                "actions": [
                    {
                        "action": int(action),
                        "name": action.name,
                        "label": labels.label(type(action), action),
                        "to": int(target),
                    }
                    for action, target in sorted(actions.items())
                ],
            }
            for state, actions in states.items()
        ]
    return tables


## API endpoints [Admin]
@route_admin.get(
    URL_LABELS,
    tags=["Catalog"],
    response_model=Dict[str, List[LabelSchema]],
    description="""
    Display labels of every enumerated value, keyed by enum name.
    Statuses and priorities also carry a color: success, info, warning or error.
    """,
)
async def fetch_labels():
    return labels.catalog()


@route_admin.get(
    URL_WORKFLOWS,
    tags=["Catalog"],
    response_model=Dict[str, List[StateSchema]],
    description="""
    Status workflow of every entity kind: for each status, the actions
    allowed and the status each one leads to.
    """,
)
async def fetch_workflows():
    return workflows()
