"""
Status state machines of the managed entities.

Each entity kind owns a transition table mapping a status to the actions
allowed in it and the status each action leads to. Statuses with no
allowed action are terminal. All status changes go through `transition`,
so the tables below are the single source of truth for what a client may
offer in each status.
"""

from enum import IntEnum
from typing import Dict, List, Type

from backoffice.src import exceptions
from backoffice.src.enums import (
    Action,
    EntityKind,
    CompanyStatus,
    StationStatus,
    StaffStatus,
    VehicleStatus,
    ComplaintStatus,
    PromotionStatus,
    UserStatus,
)
from backoffice.src.functions import isValidTransition


STATUS_ENUMS: Dict[EntityKind, Type[IntEnum]] = {
    EntityKind.COMPANY: CompanyStatus,
    EntityKind.STATION: StationStatus,
    EntityKind.STAFF: StaffStatus,
    EntityKind.VEHICLE: VehicleStatus,
    EntityKind.COMPLAINT: ComplaintStatus,
    EntityKind.PROMOTION: PromotionStatus,
    EntityKind.USER: UserStatus,
}

TRANSITIONS: Dict[EntityKind, Dict[IntEnum, Dict[Action, IntEnum]]] = {
    EntityKind.COMPANY: {
        CompanyStatus.ACTIVE: {Action.DEACTIVATE: CompanyStatus.INACTIVE},
        CompanyStatus.INACTIVE: {Action.ACTIVATE: CompanyStatus.ACTIVE},
    },
    EntityKind.STATION: {
        StationStatus.ACTIVE: {
            Action.DEACTIVATE: StationStatus.INACTIVE,
            Action.START_MAINTENANCE: StationStatus.UNDER_MAINTENANCE,
        },
        StationStatus.INACTIVE: {Action.ACTIVATE: StationStatus.ACTIVE},
        StationStatus.UNDER_MAINTENANCE: {
            Action.END_MAINTENANCE: StationStatus.ACTIVE,
            Action.DEACTIVATE: StationStatus.INACTIVE,
        },
    },
    EntityKind.STAFF: {
        StaffStatus.ACTIVE: {
            Action.DEACTIVATE: StaffStatus.INACTIVE,
            Action.SUSPEND: StaffStatus.SUSPENDED,
            Action.GRANT_LEAVE: StaffStatus.ON_LEAVE,
        },
        StaffStatus.INACTIVE: {Action.ACTIVATE: StaffStatus.ACTIVE},
        StaffStatus.SUSPENDED: {
            Action.REINSTATE: StaffStatus.ACTIVE,
            Action.DEACTIVATE: StaffStatus.INACTIVE,
        },
        StaffStatus.ON_LEAVE: {
            Action.END_LEAVE: StaffStatus.ACTIVE,
            Action.DEACTIVATE: StaffStatus.INACTIVE,
        },
    },
    EntityKind.VEHICLE: {
        VehicleStatus.ACTIVE: {
            Action.START_MAINTENANCE: VehicleStatus.MAINTENANCE,
            Action.DEACTIVATE: VehicleStatus.INACTIVE,
        },
        VehicleStatus.MAINTENANCE: {
            Action.END_MAINTENANCE: VehicleStatus.ACTIVE,
            Action.DEACTIVATE: VehicleStatus.INACTIVE,
        },
        VehicleStatus.INACTIVE: {Action.ACTIVATE: VehicleStatus.ACTIVE},
    },
    EntityKind.COMPLAINT: {
        ComplaintStatus.PENDING: {
            Action.START_PROCESSING: ComplaintStatus.IN_PROGRESS,
            Action.RESOLVE: ComplaintStatus.RESOLVED,
        },
        ComplaintStatus.IN_PROGRESS: {Action.RESOLVE: ComplaintStatus.RESOLVED},
        ComplaintStatus.RESOLVED: {},
    },
    EntityKind.PROMOTION: {
        PromotionStatus.SCHEDULED: {
            Action.ACTIVATE: PromotionStatus.ACTIVE,
            Action.EXPIRE: PromotionStatus.EXPIRED,
        },
        PromotionStatus.ACTIVE: {
            Action.PAUSE: PromotionStatus.SCHEDULED,
            Action.EXPIRE: PromotionStatus.EXPIRED,
        },
        PromotionStatus.EXPIRED: {},
    },
    EntityKind.USER: {
        UserStatus.ACTIVE: {Action.SUSPEND: UserStatus.SUSPENDED},
        UserStatus.SUSPENDED: {Action.REINSTATE: UserStatus.ACTIVE},
    },
}


def availableActions(kind: EntityKind, status: int) -> List[Action]:
    """List the actions allowed for an entity of `kind` in `status`, in enum order."""
    state = STATUS_ENUMS[kind](status)
    return sorted(TRANSITIONS[kind][state])


def isTerminal(kind: EntityKind, status: int) -> bool:
    return not availableActions(kind, status)


def transition(kind: EntityKind, status: int, action: int) -> IntEnum:
    """
    Compute the status an entity moves to when `action` is applied.

    Args:
        kind (EntityKind): Type of the entity.
        status (int): Current status value of the entity.
        action (int): Requested `Action`.

    Returns:
        IntEnum: The new status, as a member of the kind's status enum.

    Raises:
        exceptions.InvalidStateTransition: If the action is not valid for the
            current status (including every action on a terminal status).
    """
    state = STATUS_ENUMS[kind](status)
    action = Action(action)
    transitions = TRANSITIONS[kind]
    if not isValidTransition(transitions, state, action):
        raise exceptions.InvalidStateTransition(action, state)
    return transitions[state][action]
