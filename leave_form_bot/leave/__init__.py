"""Leave form workflow: button, modal, submission and announcement."""

from .dispatch import DISPATCH_TABLE, dispatch, register_listeners
from .handlers import (
    HandlerContext,
    announce_form_button,
    handle_leave_submission,
    present_leave_form,
)
from .interactions import EventKind, Interaction
from .messages import OPEN_LEAVE_FORM_ACTION_ID
from .modal import SUBMIT_LEAVE_FORM_CALLBACK_ID, build_leave_modal
from .models import LeaveRequest, Outcome, OutcomeStatus

__all__ = [
    "DISPATCH_TABLE",
    "EventKind",
    "HandlerContext",
    "Interaction",
    "LeaveRequest",
    "OPEN_LEAVE_FORM_ACTION_ID",
    "Outcome",
    "OutcomeStatus",
    "SUBMIT_LEAVE_FORM_CALLBACK_ID",
    "announce_form_button",
    "build_leave_modal",
    "dispatch",
    "handle_leave_submission",
    "present_leave_form",
    "register_listeners",
]
