"""Reply generation: language model first, keyword fallback second.

The generator never raises.  Any exception from the model call (network,
quota, SDK) or an empty model reply degrades to the deterministic
:class:`FallbackResponder`.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from src.models.chat import ChatMessage, GeneratedReply
from src.models.conversation import ConversationContext
from src.services.fallback_rules import FallbackResponder, TurnInput
from src.services.hinglish import HinglishProcessor
from src.services.llm import LLMService
from src.services.structured_data import extract_structured_data

logger = structlog.get_logger(__name__)


class ResponseGenerator:
    """Drafts the bot reply for a turn.

    Parameters
    ----------
    llm:
        Vertex AI service, or ``None`` to always use the fallback
        (demo mode, no GCP project configured).
    fallback:
        Keyword rule table runner.
    history_window:
        Number of most recent messages sent to the model.
    """

    __slots__ = ("_fallback", "_history_window", "_llm")

    def __init__(
        self,
        llm: LLMService | None,
        fallback: FallbackResponder | None = None,
        *,
        history_window: int = 10,
    ) -> None:
        self._llm = llm
        self._fallback = fallback or FallbackResponder()
        self._history_window = history_window

    @property
    def llm_enabled(self) -> bool:
        return self._llm is not None

    async def generate(
        self,
        text: str,
        history: Sequence[ChatMessage],
        context: ConversationContext,
        *,
        has_attachment: bool = False,
    ) -> GeneratedReply:
        """Return ``{message, structured_data?}`` for the user turn *text*.

        *context* already includes this turn's attachment.  *history* is a
        snapshot of the session's messages before this turn.
        """
        turn = TurnInput(text=text, context=context, has_attachment=has_attachment)
        if self._llm is None:
            return self._fallback.respond(turn)

        window = list(history)[-self._history_window :]
        try:
            result = await self._llm.generate(
                text,
                window,
                context,
                detected_language=HinglishProcessor.detect_language(text),
            )
        except Exception:
            logger.warning("response.llm_failed_using_fallback", exc_info=True)
            return self._fallback.respond(turn)

        message, data = extract_structured_data(result.answer)
        if not message:
            logger.warning("response.llm_empty_using_fallback")
            return self._fallback.respond(turn)

        logger.info(
            "response.llm_reply",
            has_structured_data=data is not None,
            declared_type=data.type if data is not None else None,
        )
        return GeneratedReply(message=message, structured_data=data)
