import pytest

from backoffice.src import exceptions, workflow
from backoffice.src.enums import (
    Action,
    EntityKind,
    ComplaintStatus,
    PromotionStatus,
    StaffStatus,
    StationStatus,
)


def test_every_status_has_a_transition_entry():
    for kind, statusEnum in workflow.STATUS_ENUMS.items():
        assert set(workflow.TRANSITIONS[kind]) == set(statusEnum)


def test_transitions_stay_within_the_status_enum():
    for kind, states in workflow.TRANSITIONS.items():
        statusEnum = workflow.STATUS_ENUMS[kind]
        for actions in states.values():
            for target in actions.values():
                assert isinstance(target, statusEnum)


def test_station_maintenance_cycle():
    status = workflow.transition(
        EntityKind.STATION, StationStatus.ACTIVE, Action.START_MAINTENANCE
    )
    assert status == StationStatus.UNDER_MAINTENANCE
    status = workflow.transition(EntityKind.STATION, status, Action.END_MAINTENANCE)
    assert status == StationStatus.ACTIVE


def test_transition_accepts_raw_integers():
    status = workflow.transition(EntityKind.STAFF, 1, int(Action.GRANT_LEAVE))
    assert status == StaffStatus.ON_LEAVE


def test_scheduled_promotion_activates_once():
    status = workflow.transition(
        EntityKind.PROMOTION, PromotionStatus.SCHEDULED, Action.ACTIVATE
    )
    assert status == PromotionStatus.ACTIVE
    with pytest.raises(exceptions.InvalidStateTransition) as error:
        workflow.transition(EntityKind.PROMOTION, status, Action.ACTIVATE)
    assert error.value.status_code == 406
    assert "ACTIVATE" in error.value.detail


def test_terminal_statuses_reject_everything():
    assert workflow.isTerminal(EntityKind.COMPLAINT, ComplaintStatus.RESOLVED)
    assert workflow.isTerminal(EntityKind.PROMOTION, PromotionStatus.EXPIRED)
    for action in Action:
        with pytest.raises(exceptions.InvalidStateTransition):
            workflow.transition(EntityKind.COMPLAINT, ComplaintStatus.RESOLVED, action)


def test_available_actions_are_sorted():
    actions = workflow.availableActions(EntityKind.STAFF, StaffStatus.ACTIVE)
    assert actions == [Action.DEACTIVATE, Action.SUSPEND, Action.GRANT_LEAVE]


def test_unknown_status_is_rejected():
    with pytest.raises(ValueError):
        workflow.availableActions(EntityKind.STATION, 99)
