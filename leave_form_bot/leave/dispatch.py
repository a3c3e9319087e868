"""Routing of Slack interactions to the leave form handlers."""

from __future__ import annotations

import re
from typing import Callable, Dict, Tuple
from uuid import uuid4

from slack_bolt import App as SlackApp
import structlog
from structlog.contextvars import bind_contextvars, get_contextvars, unbind_contextvars

from .handlers import HandlerContext, handle_leave_submission, present_leave_form
from .interactions import (
    EventKind,
    Interaction,
    interaction_from_action,
    interaction_from_view_submission,
)
from .messages import OPEN_LEAVE_FORM_ACTION_ID
from .modal import SUBMIT_LEAVE_FORM_CALLBACK_ID
from .models import Outcome

Handler = Callable[[HandlerContext, Interaction], Outcome]

DISPATCH_TABLE: Dict[Tuple[EventKind, str], Handler] = {
    (EventKind.BUTTON, OPEN_LEAVE_FORM_ACTION_ID): present_leave_form,
    (EventKind.VIEW_SUBMISSION, SUBMIT_LEAVE_FORM_CALLBACK_ID): handle_leave_submission,
}

_ANY_ID = re.compile(r".*")


def dispatch(context: HandlerContext, interaction: Interaction) -> Outcome:
    """Run the handler registered for the interaction, or ignore it."""

    handler = DISPATCH_TABLE.get((interaction.kind, interaction.identifier))
    if handler is None:
        structlog.get_logger().debug(
            "interaction_ignored",
            kind=interaction.kind.value,
            identifier=interaction.identifier,
        )
        return Outcome.ignored()
    return handler(context, interaction)


def _traced_dispatch(context: HandlerContext, interaction: Interaction) -> Outcome:
    # keep the request-level trace id when the HTTP route already bound one
    owns_trace = "trace_id" not in get_contextvars()
    if owns_trace:
        bind_contextvars(trace_id=str(uuid4()))
    try:
        structlog.get_logger().info(
            "interaction_received",
            kind=interaction.kind.value,
            identifier=interaction.identifier,
            user_id=interaction.user_id,
        )
        return dispatch(context, interaction)
    finally:
        if owns_trace:
            unbind_contextvars("trace_id")


def handle_block_action(ack, body, context: HandlerContext) -> Outcome:
    ack()
    return _traced_dispatch(context, interaction_from_action(body))


def handle_view_submission(ack, body, context: HandlerContext) -> Outcome:
    # closing the modal first; the announcement result is reported privately
    ack()
    return _traced_dispatch(context, interaction_from_view_submission(body))


def register_listeners(bolt_app: SlackApp, context: HandlerContext) -> None:
    """Acknowledge every action and view submission and route it through ``dispatch``."""

    @bolt_app.action(_ANY_ID)
    def on_block_action(ack, body):
        handle_block_action(ack, body, context)

    @bolt_app.view(_ANY_ID)
    def on_view_submission(ack, body):
        handle_view_submission(ack, body, context)
