"""
Application status machine.

    DRAFT --submit--> SUBMITTED --update_status--> PROCESSING --update_status--> APPROVED
                          |
                          +------update_status--> REJECTED

DRAFT is the only initial status; APPROVED and REJECTED are terminal.
``cancel`` deletes the application and is allowed from DRAFT or SUBMITTED.
The table is fixed: every status change goes through ``check_transition``
before the row is touched.
"""

from exceptions import InvalidTransition
from models.user import PRIVILEGED_ROLES

DRAFT = "DRAFT"
SUBMITTED = "SUBMITTED"
PROCESSING = "PROCESSING"
APPROVED = "APPROVED"
REJECTED = "REJECTED"

SUBMIT = "submit"
UPDATE_STATUS = "update_status"

# (dari, ke) -> trigger yang boleh menjalankannya
TRANSITIONS = {
    (DRAFT, SUBMITTED): SUBMIT,
    (SUBMITTED, PROCESSING): UPDATE_STATUS,
    (SUBMITTED, REJECTED): UPDATE_STATUS,
    (PROCESSING, APPROVED): UPDATE_STATUS,
}

CANCELLABLE = (DRAFT, SUBMITTED)
TERMINAL = (APPROVED, REJECTED)

# Siapa yang boleh menjalankan trigger; submit dan cancel dicek lewat kepemilikan
TRIGGER_ROLES = {
    UPDATE_STATUS: PRIVILEGED_ROLES,
}


def allowed_targets(status, trigger=UPDATE_STATUS):
    return [target for (source, target), t in TRANSITIONS.items() if source == status and t == trigger]


def check_transition(current, target, trigger):
    if TRANSITIONS.get((current, target)) == trigger:
        return
    if trigger == SUBMIT:
        raise InvalidTransition("Only draft applications can be submitted")
    allowed = allowed_targets(current, trigger)
    hint = f"; allowed: {', '.join(allowed)}" if allowed else ""
    raise InvalidTransition(f"Cannot change application status from {current} to {target}{hint}")


def check_cancellable(status):
    if status not in CANCELLABLE:
        raise InvalidTransition(f"Cannot cancel application in current status ({status})")


def can_trigger(role, trigger):
    return role in TRIGGER_ROLES.get(trigger, ())
