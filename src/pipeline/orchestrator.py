"""Chat turn orchestrator for NagarSeva.

Coordinates one user turn end to end: attachment parsing, restart
handling, reply generation, context merging, action planning and
execution, and rendering the action result into the reply.  The
state machine reducers are pure; every side effect happens here.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import structlog

from src.models.chat import ActionResult, ChatMessage, TurnResult
from src.models.conversation import Attachment, GrievanceDraft
from src.models.enums import ActionType, MessageSender
from src.pipeline.cards import duplicate_grievance_card, render_reply
from src.pipeline.state_machine import (
    filed_grievance_id,
    is_restart_command,
    merge_turn,
    plan_action,
    record_filed,
    restarted,
)
from src.services.messages import MAIN_MENU, RESTARTED, localized
from src.services.structured_data import display_text, parse_attachment_marker

if TYPE_CHECKING:
    from src.pipeline.actions import ActionExecutor
    from src.services.response_generator import ResponseGenerator
    from src.services.sessions import ChatSession

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class ChatOrchestrator:
    """Turn processing pipeline.

    The caller is expected to hold ``session.lock`` so that two turns of
    the same session never interleave.  The notification poller may still
    append bot messages while a turn is generating; the turn works on a
    history snapshot and only appends.
    """

    __slots__ = ("_executor", "_generator")

    def __init__(self, generator: ResponseGenerator, executor: ActionExecutor) -> None:
        self._generator = generator
        self._executor = executor

    async def process_message(
        self,
        session: ChatSession,
        text: str,
        attachment: Attachment | None = None,
    ) -> TurnResult:
        """Process one user turn and return the reply plus the new context.

        *attachment* is an attachment uploaded alongside the message.  When
        absent, *text* is checked for an inline ``[ATTACHMENT: ...]`` marker.
        """
        start = time.perf_counter()
        log = logger.bind(session_id=session.id, flow=session.context.current_flow)

        if attachment is None:
            display, attachment = parse_attachment_marker(text)
        else:
            display = text.strip() or display_text(attachment)

        history = session.history()
        user_message = ChatMessage(text=display, sender=MessageSender.USER, attachment=attachment)
        session.append(user_message)

        if attachment is None and is_restart_command(display):
            context = restarted(session.context)
            session.context = context
            reply = ChatMessage(
                text=f"{localized(RESTARTED, context.language)}\n\n{localized(MAIN_MENU, context.language)}",
                sender=MessageSender.BOT,
            )
            session.append(reply)
            log.info("turn.restarted")
            return TurnResult(reply=reply, user_message=user_message, context=context)

        # -- Generate against the context that already holds the attachment -----
        generated = await self._generator.generate(
            display,
            history,
            merge_turn(session.context, attachment=attachment),
            has_attachment=attachment is not None,
        )
        data = generated.structured_data
        # Data first: closing a filed draft must not drop this turn's attachment.
        context = merge_turn(session.context, data, attachment)
        message = generated.message

        # -- Action -------------------------------------------------------------
        action: ActionResult | None = None
        payload = plan_action(data, context)
        if isinstance(payload, GrievanceDraft) and (existing := filed_grievance_id(context)) is not None:
            log.info("turn.grievance_already_filed", grievance_id=existing)
            message = f"{message}\n\n{duplicate_grievance_card(existing, context.language)}"
            action = ActionResult(
                type=ActionType.GRIEVANCE_CREATED,
                success=True,
                data={"grievance_id": existing, "duplicate": True},
            )
        elif payload is not None:
            action = await self._executor.execute(payload, session.citizen_id)
            if action is not None:
                if action.type == ActionType.GRIEVANCE_CREATED and action.success and action.data:
                    context = record_filed(context, action.data["grievance_id"])
                message = render_reply(message, payload, action, context.language)

        session.context = context
        reply = ChatMessage(text=message, sender=MessageSender.BOT)
        session.append(reply)

        log.info(
            "turn.completed",
            new_flow=context.current_flow,
            declared_type=data.type if data is not None else None,
            action=action.type if action is not None else None,
            action_success=action.success if action is not None else None,
            total_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return TurnResult(reply=reply, user_message=user_message, context=context, action=action)
