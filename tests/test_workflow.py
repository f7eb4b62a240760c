"""
Transition table tests: every (current, target) status pair for each trigger.
"""

import pytest

from exceptions import InvalidTransition
from models.application import APPLICATION_STATUSES
from services import workflow

_ALLOWED = {
    workflow.SUBMIT: {("DRAFT", "SUBMITTED")},
    workflow.UPDATE_STATUS: {
        ("SUBMITTED", "PROCESSING"),
        ("SUBMITTED", "REJECTED"),
        ("PROCESSING", "APPROVED"),
    },
}

_PAIRS = [
    (trigger, current, target)
    for trigger in (workflow.SUBMIT, workflow.UPDATE_STATUS)
    for current in APPLICATION_STATUSES
    for target in APPLICATION_STATUSES
]


@pytest.mark.parametrize("trigger,current,target", _PAIRS)
def test_check_transition_matches_table(trigger, current, target):
    if (current, target) in _ALLOWED[trigger]:
        workflow.check_transition(current, target, trigger)
    else:
        with pytest.raises(InvalidTransition):
            workflow.check_transition(current, target, trigger)


def test_submit_rejection_message():
    with pytest.raises(InvalidTransition, match="Only draft applications can be submitted"):
        workflow.check_transition("SUBMITTED", "SUBMITTED", workflow.SUBMIT)


def test_update_status_rejection_lists_allowed_targets():
    with pytest.raises(InvalidTransition) as exc:
        workflow.check_transition("SUBMITTED", "APPROVED", workflow.UPDATE_STATUS)
    assert "PROCESSING" in exc.value.message
    assert "REJECTED" in exc.value.message


def test_terminal_statuses_have_no_targets():
    for status in workflow.TERMINAL:
        assert workflow.allowed_targets(status) == []


@pytest.mark.parametrize("status", APPLICATION_STATUSES)
def test_check_cancellable(status):
    if status in ("DRAFT", "SUBMITTED"):
        workflow.check_cancellable(status)
    else:
        with pytest.raises(InvalidTransition, match="Cannot cancel application"):
            workflow.check_cancellable(status)


@pytest.mark.parametrize("role,allowed", [
    ("SUPER_ADMIN", True),
    ("ADMIN", True),
    ("PETUGAS", True),
    ("PENDUDUK", False),
])
def test_update_status_roles(role, allowed):
    assert workflow.can_trigger(role, workflow.UPDATE_STATUS) is allowed
