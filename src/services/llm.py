"""Vertex AI Gemini LLM service for the citizen services bot.

Wraps the ``vertexai`` SDK to draft chat replies.  The model is asked to
append a ``[STRUCTURED_DATA]`` block whenever it has collected fields for
a service request; parsing that block is the response generator's job.

Calls are not retried; a failed call propagates to the caller, which falls
back to the keyword rule table.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Final

import orjson
import structlog
import vertexai
from vertexai.generative_models import (
    Content,
    GenerationConfig,
    GenerativeModel,
    Part,
)

from src.models.chat import ChatMessage
from src.models.conversation import ConversationContext
from src.models.enums import ChatLanguage, ConversationFlow, MessageSender

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# System prompt
# ---------------------------------------------------------------------------

SYSTEM_PROMPT: Final[str] = """\
You are a WhatsApp-based Citizen Services Chatbot for VMC (Vadodara \
Municipal Corporation), Gujarat, India. Your goal is to help citizens \
access public services in a simple, respectful and reliable way.

ROLE AND SCOPE
- Act as a virtual front desk for municipal services.
- Understand English, Hinglish (mixed Hindi and English) and simple Hindi, \
and reply in the citizen's chosen language.
- Guide citizens step by step and emit structured data the backend stores.

SERVICES
1. Bill payments: electricity, water, property tax.
2. Grievances: water supply, roads/potholes, garbage, street lights, \
drainage, other.
3. Certificates: birth, income, caste, domicile (informational only).
4. Licenses: shop, trade, parking permit, event permission \
(informational only).
5. Status tracking by grievance ID (GR#####) or application ID (APP#####).
6. General information: office timings, contacts, required documents.

FLOWS
Bill payment: ask which bill, then the consumer number, then show the \
amount and due date. The system attaches the payment link.
Grievance: acknowledge the issue, then collect in this exact order: \
category, location (ward/area), landmark, short description, and a photo \
of the issue. The photo is MANDATORY. If the citizen replies with text \
instead of a photo, ask for the photo again. Never announce that a \
grievance is registered and never invent an ID; the system does that.
Certificates and licenses: explain the process and the documents, and \
point to https://vmc.gov.in. Do not collect application data.
Status tracking: ask for the grievance or application ID.

STRUCTURED DATA
Whenever you learn any of these fields, append this block at the END of \
your reply, one "key: value" per line, omitting unknown keys:

[STRUCTURED_DATA]
type: grievance|application|bill|status_query|info
category: <roads|water_supply|garbage|street_lights|drainage|other>
citizen_name: <name>
phone: <phone>
location: <ward/area>
landmark: <landmark>
description: <description>
consumer_number: <for bills>
grievance_id: <for tracking>
application_id: <for tracking>
[/STRUCTURED_DATA]

STYLE AND SAFETY
- Short messages, simple words, a clear next step in every reply.
- Never invent rules, fees, laws or URLs. If unsure, say so and suggest \
the official office.
- For emergencies (gas leak, accident) recommend calling the control \
room 0265-2423101 immediately.\
"""

_LANGUAGE_NAMES: Final[dict[ChatLanguage, str]] = {
    ChatLanguage.EN: "English",
    ChatLanguage.HI: "Hindi (Devanagari script)",
    ChatLanguage.HINGLISH: "Hinglish (Romanised Hindi mixed with English)",
}

# Approximate cost per million tokens for Gemini Flash (USD).
_COST_PER_M_INPUT_TOKENS: Final[float] = 0.30
_COST_PER_M_OUTPUT_TOKENS: Final[float] = 2.50


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class LLMResult:
    """Result returned by :meth:`LLMService.generate`."""

    answer: str
    tokens_used: dict[str, int]
    cost_usd: float
    processing_time_ms: float
    provider: str = field(default="gemini")


# ---------------------------------------------------------------------------
# LLMService
# ---------------------------------------------------------------------------


class LLMService:
    """Async interface to Vertex AI Gemini for drafting chat replies."""

    def __init__(
        self,
        project_id: str,
        region: str = "asia-south1",
        model_name: str = "gemini-2.5-flash",
        temperature: float = 0.3,
    ) -> None:
        self._project_id = project_id
        self._region = region
        self._model_name = model_name
        self._temperature = temperature
        self._model: GenerativeModel | None = None
        self._initialized = False

    # -- lifecycle ----------------------------------------------------------

    def _initialize(self) -> None:
        """Lazily initialize the Vertex AI SDK and model handle."""
        if self._initialized:
            return
        vertexai.init(project=self._project_id, location=self._region)
        self._model = GenerativeModel(
            model_name=self._model_name,
            system_instruction=[Part.from_text(SYSTEM_PROMPT)],
        )
        self._initialized = True
        logger.info(
            "llm.initialized",
            project=self._project_id,
            region=self._region,
            model=self._model_name,
        )

    def _get_model(self) -> GenerativeModel:
        self._initialize()
        assert self._model is not None  # noqa: S101
        return self._model

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def build_turn_text(
        user_text: str,
        context: ConversationContext,
        detected_language: ChatLanguage | None = None,
    ) -> str:
        """Compose the current user turn with flow state and language hints."""
        parts: list[str] = []
        if context.current_flow != ConversationFlow.IDLE:
            collected = context.collected_data.model_dump(mode="json", exclude={"attachments"}, exclude_none=True)
            parts.append(f"Current flow: {context.current_flow}")
            parts.append(f"Collected data: {orjson.dumps(collected).decode()}")
            parts.append(f"Attachments received: {len(context.collected_data.attachments)}")
        reply_language = context.language or detected_language
        if reply_language is not None:
            parts.append(f"Reply in: {_LANGUAGE_NAMES[reply_language]}")
        parts.append(f"Citizen: {user_text}")
        return "\n".join(parts)

    @staticmethod
    def conversation_turns(history: Sequence[ChatMessage], turn_text: str) -> list[tuple[str, str]]:
        """Fold *history* and the current turn into ``(role, text)`` pairs.

        The result starts with a ``user`` turn and alternates roles.  Bot
        messages before the first user message (the welcome) are dropped and
        consecutive messages from one side are joined.
        """
        turns: list[tuple[str, str]] = []
        messages = [(m.sender == MessageSender.USER, m.text) for m in history if m.text]
        messages.append((True, turn_text))
        for from_user, text in messages:
            role = "user" if from_user else "model"
            if not turns and role != "user":
                continue
            if turns and turns[-1][0] == role:
                turns[-1] = (role, f"{turns[-1][1]}\n\n{text}")
            else:
                turns.append((role, text))
        return turns

    @classmethod
    def _build_contents(cls, history: Sequence[ChatMessage], turn_text: str) -> list[Content]:
        """Assemble a ``contents`` list suitable for ``generate_content_async``."""
        return [
            Content(role=role, parts=[Part.from_text(text)])
            for role, text in cls.conversation_turns(history, turn_text)
        ]

    @staticmethod
    def _estimate_cost(input_tokens: int, output_tokens: int) -> float:
        return round(
            (input_tokens / 1_000_000) * _COST_PER_M_INPUT_TOKENS
            + (output_tokens / 1_000_000) * _COST_PER_M_OUTPUT_TOKENS,
            8,
        )

    # -- public API ---------------------------------------------------------

    async def generate(
        self,
        user_text: str,
        history: Sequence[ChatMessage],
        context: ConversationContext,
        detected_language: ChatLanguage | None = None,
    ) -> LLMResult:
        """Draft the bot reply for one turn.

        Parameters
        ----------
        user_text:
            The citizen's message (attachment markers already replaced by
            their display text).
        history:
            Recent messages, oldest first; the caller trims the window.
        context:
            Conversation state: flow, collected fields and language.
        detected_language:
            Register guessed from the message, used when the citizen has
            not picked a language yet.
        """
        start = time.perf_counter()
        model = self._get_model()

        turn_text = self.build_turn_text(user_text, context, detected_language)
        contents = self._build_contents(history, turn_text)

        generation_config = GenerationConfig(
            temperature=self._temperature,
            top_p=0.95,
            top_k=40,
            max_output_tokens=1024,
        )

        response = await model.generate_content_async(
            contents=contents,
            generation_config=generation_config,
        )

        elapsed_ms = (time.perf_counter() - start) * 1000

        answer_text = response.text if response.text else ""

        usage = response.usage_metadata
        input_tokens = usage.prompt_token_count if usage else 0
        output_tokens = usage.candidates_token_count if usage else 0
        cost = self._estimate_cost(input_tokens, output_tokens)

        result = LLMResult(
            answer=answer_text,
            tokens_used={"input": input_tokens, "output": output_tokens},
            cost_usd=cost,
            processing_time_ms=round(elapsed_ms, 2),
        )

        logger.info(
            "llm.generate",
            prompt_length=len(user_text),
            answer_length=len(answer_text),
            history_messages=len(history),
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_usd=cost,
            processing_time_ms=result.processing_time_ms,
        )
        return result
