"""PydanticAI agent that plays the absent party in a donation chat."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from loguru import logger
from openai import AsyncAzureOpenAI
from pydantic_ai import Agent, ModelRequest, ModelResponse, RunContext, TextPart, UserPromptPart
from pydantic_ai.models.instrumented import InstrumentationSettings
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from aidbridge.config import Settings, get_settings
from aidbridge.domain.models import ChatMessage, DonatedItem, UserType

OFFLINE_REPLY = "Thank you for your message. We will get back to you shortly."


@dataclass
class ReplyDeps:
    """Per-run context injected into the agent's instructions."""

    item_name: str
    role: UserType


# ---------------------------------------------------------------------------
# Instructions
# ---------------------------------------------------------------------------

ROLE_DESCRIPTIONS: dict[UserType, str] = {
    UserType.DONOR: "You are a friendly Donor who wants to donate an item.",
    UserType.NGO: (
        "You are a representative from a verified NGO, coordinating the pickup "
        "of a donated item."
    ),
}


def build_instructions(item_name: str, role: UserType) -> str:
    return (
        "You are simulating a conversation on AidBridge.\n"
        f"{ROLE_DESCRIPTIONS[role]}\n"
        f'The conversation is about the item: "{item_name}".\n'
        "Keep your replies concise, friendly, and focused on arranging the "
        "donation. Do not use markdown."
    )


# ---------------------------------------------------------------------------
# Agent factory
# ---------------------------------------------------------------------------


def create_reply_agent(
    settings: Settings | None = None, *, instrument: InstrumentationSettings | bool | None = None
) -> Agent[ReplyDeps, str] | None:
    """Create the reply agent, or return None when no model is configured.

    Args:
        settings: Optional Settings override (defaults to get_settings()).
        instrument: Agent instrumentation, usually from
            ``telemetry.get_instrumentation_settings``; None leaves it off.
    """
    s = settings or get_settings()
    if not s.reply_model_configured:
        logger.warning("Azure OpenAI is not configured; chat replies will be canned.")
        return None

    client = AsyncAzureOpenAI(
        api_key=s.azure_openai_api_key,
        azure_endpoint=s.azure_openai_endpoint,
        api_version=s.azure_openai_api_version,
    )
    model = OpenAIChatModel(
        s.azure_openai_chat_deployment,
        provider=OpenAIProvider(openai_client=client),
    )

    agent = Agent(
        model=model,
        deps_type=ReplyDeps,
        output_type=str,
        instrument=instrument,
    )

    @agent.instructions
    def conversation_instructions(ctx: RunContext[ReplyDeps]) -> str:
        return build_instructions(ctx.deps.item_name, ctx.deps.role)

    return agent


# ---------------------------------------------------------------------------
# Oracle
# ---------------------------------------------------------------------------


class PydanticAIReplyOracle:
    """Generates the simulated counterpart's next message.

    Parameters
    ----------
    agent:
        The configured reply agent, or ``None`` to always answer with
        ``OFFLINE_REPLY``.
    history_limit:
        Number of most recent messages sent to the model.
    """

    def __init__(self, agent: Agent[ReplyDeps, str] | None, history_limit: int = 10) -> None:
        self.agent = agent
        self.history_limit = history_limit

    async def generate_reply(
        self,
        history: Sequence[ChatMessage],
        item: DonatedItem,
        role: UserType,
    ) -> str:
        """Return the reply text.  Model errors propagate to the caller."""
        if self.agent is None:
            return OFFLINE_REPLY

        recent = list(history)[-self.history_limit :]
        if not recent:
            raise ValueError("history must not be empty")

        message_history = self._build_history(recent[:-1])
        result = await self.agent.run(
            recent[-1].text,
            deps=ReplyDeps(item_name=item.item_name, role=role),
            message_history=message_history if message_history else None,
        )
        return result.output

    @staticmethod
    def _build_history(prior: Sequence[ChatMessage]) -> list[ModelRequest | ModelResponse]:
        """Machine-generated messages become model turns, the rest user turns."""
        converted: list[ModelRequest | ModelResponse] = []
        for msg in prior:
            if msg.is_machine:
                converted.append(ModelResponse(parts=[TextPart(content=msg.text)]))
            else:
                converted.append(ModelRequest(parts=[UserPromptPart(content=msg.text)]))
        return converted
