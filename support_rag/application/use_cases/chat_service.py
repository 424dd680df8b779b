"""Chat orchestration: retrieval, two-stage LLM flow, confirmation handshake.

States per inbound message: Idle -> ToolCheck -> {NeedsConfirmation, Answering} -> Idle.
LLM and confirmation failures come back as ``Result.failure``; history is
only written once every fallible step of a turn has succeeded.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta

from support_rag.application.dto.chat_dto import (
    ChatReply,
    ConfirmationRequest,
    DirectAnswer,
    ResolutionOutcome,
)
from support_rag.application.ports.chatbot_config_port import ChatbotConfigProvider
from support_rag.application.ports.clock_port import ClockPort
from support_rag.application.ports.confirmation_store_port import PendingConfirmationStore
from support_rag.application.ports.escalation_port import (
    EscalationCategoryProvider,
    EscalationExecutor,
)
from support_rag.application.prompts import (
    DECLINE_NOTICE,
    DECLINE_REPLY,
    ESCALATION_APOLOGY,
    build_system_prompt,
    escalation_success_notice,
    escalation_success_reply,
    preview,
)
from support_rag.application.services.conversation import ConversationHistory
from support_rag.application.services.llm_client import RetryingLLMClient
from support_rag.application.services.retrieval import KnowledgeRetriever, render_context
from support_rag.application.tools import (
    NoToolCall,
    ToolDecision,
    ToolInvoked,
    build_escalation_tool,
    parse_tool_decision,
)
from support_rag.domain.errors import (
    ConfirmationExpired,
    ConfirmationForbidden,
    DomainError,
    EscalationExecutionFailed,
    LLMError,
    ToolSelectionAmbiguous,
    ValidationError,
)
from support_rag.domain.models import (
    ChatbotConfig,
    ChatMessage,
    ConversationKey,
    EscalationCategory,
    EscalationOutcome,
    PendingToolConfirmation,
)
from support_rag.domain.services.confirmations import (
    DEFAULT_TTL,
    evict_expired,
    is_expired,
    make_confirmation_id,
)
from support_rag.domain.services.segmenting import DEFAULT_MAX_LENGTH, split_response
from support_rag.domain.types import Result

logger = logging.getLogger(__name__)

LLMFactory = Callable[[ChatbotConfig], RetryingLLMClient]
Resolution = Result[ResolutionOutcome, DomainError]

TOOL_CHECK_TEMPERATURE = 0.3
ANSWER_TEMPERATURE = 0.7


class ChatbotService:
    """
    Application use case behind every chatbot message.

    - handle_message(): DirectAnswer or ConfirmationRequest, never raises for LLM errors
    - resolve(): at-most-once resolution of a pending escalation, owner only
    - wait_for_resolution(): request-scoped future the transport can await
    """

    def __init__(
        self,
        *,
        llm_factory: LLMFactory,
        history: ConversationHistory,
        confirmations: PendingConfirmationStore,
        categories: EscalationCategoryProvider,
        executor: EscalationExecutor,
        configs: ChatbotConfigProvider,
        clock: ClockPort,
        retriever: KnowledgeRetriever | None = None,
        confirmation_ttl: timedelta = DEFAULT_TTL,
        segment_max_length: int = DEFAULT_MAX_LENGTH,
        max_tokens: int = 2000,
    ) -> None:
        self.llm_factory = llm_factory
        self.history = history
        self.confirmations = confirmations
        self.categories = categories
        self.executor = executor
        self.configs = configs
        self.clock = clock
        self.retriever = retriever
        self.confirmation_ttl = confirmation_ttl
        self.segment_max_length = segment_max_length
        self.max_tokens = max_tokens
        self._waiters: dict[str, tuple[datetime, asyncio.Future[Resolution]]] = {}

    # ---------- inbound message ----------

    async def handle_message(
        self,
        user_message: str,
        user_id: str,
        config: ChatbotConfig,
        channel_id: str,
    ) -> Result[ChatReply, DomainError]:
        if not user_message or not user_message.strip():
            return Result.failure(ValidationError("message must not be empty"))

        key = ConversationKey(guild_id=config.guild_id, user_id=user_id)
        llm = self.llm_factory(config)
        context = await self._search_context(user_message, config.guild_id)
        categories = await self._load_categories(config.guild_id)

        try:
            if categories:
                decision = await self._check_tools(llm, config, key, user_message, context, categories)
                if isinstance(decision, ToolInvoked):
                    return Result.success(
                        self._request_confirmation(decision, user_message, user_id, config, channel_id)
                    )
            answer = await self._answer(llm, config, key, user_message, context)
        except LLMError as ex:
            logger.error("Error processing message for user %s: %s", user_id, ex)
            return Result.failure(ex)
        return Result.success(answer)

    async def _search_context(self, query: str, guild_id: str) -> str | None:
        if self.retriever is None:
            return None
        try:
            ranked = await self.retriever.retrieve(query, guild_id)
        except DomainError as ex:
            logger.error("Error searching knowledge context: %s", ex)
            return None
        return render_context(ranked)

    async def _load_categories(self, guild_id: str) -> list[EscalationCategory]:
        try:
            return list(await self.categories.list_enabled(guild_id))
        except Exception as ex:
            logger.error("Error getting escalation categories for %s: %s", guild_id, ex)
            return []

    async def _conversation(
        self, system_prompt: str, key: ConversationKey, user_message: str
    ) -> list[ChatMessage]:
        return [
            ChatMessage(role="system", content=system_prompt),
            *await self.history.messages(key),
            ChatMessage(role="user", content=user_message),
        ]

    async def _check_tools(
        self,
        llm: RetryingLLMClient,
        config: ChatbotConfig,
        key: ConversationKey,
        user_message: str,
        context: str | None,
        categories: Sequence[EscalationCategory],
    ) -> ToolDecision:
        messages = await self._conversation(
            build_system_prompt(config, context, include_tools=True), key, user_message
        )
        completion = await llm.invoke(
            messages,
            config.model_name,
            tools=build_escalation_tool(categories),
            tool_choice="auto",
            temperature=TOOL_CHECK_TEMPERATURE,
            max_tokens=self.max_tokens,
        )
        try:
            return parse_tool_decision(completion, categories)
        except ToolSelectionAmbiguous as ex:
            logger.warning("Ignoring tool call: %s", ex)
            return NoToolCall(content=completion.content)

    async def _answer(
        self,
        llm: RetryingLLMClient,
        config: ChatbotConfig,
        key: ConversationKey,
        user_message: str,
        context: str | None,
    ) -> DirectAnswer:
        messages = await self._conversation(build_system_prompt(config, context), key, user_message)
        completion = await llm.invoke(
            messages,
            config.model_name,
            temperature=ANSWER_TEMPERATURE,
            max_tokens=self.max_tokens,
        )
        text = (completion.content or "").strip()
        if not text:
            raise LLMError("No response content from LLM")
        await self.history.append_exchange(key, user_message, text)
        return DirectAnswer(text=text, segments=self.split_response(text))

    # ---------- confirmation handshake ----------

    def _sweep(self, now: datetime) -> dict[str, PendingToolConfirmation]:
        survivors = evict_expired(now, self.confirmations.snapshot(), self.confirmation_ttl)
        self.confirmations.replace_all(survivors)
        for cid in [c for c, (created, _) in self._waiters.items() if now - created > self.confirmation_ttl]:
            _, fut = self._waiters.pop(cid)
            if not fut.done():
                fut.set_result(Result.failure(ConfirmationExpired()))
            logger.debug("Cleaned up expired confirmation: %s", cid)
        return survivors

    def _request_confirmation(
        self,
        decision: ToolInvoked,
        user_message: str,
        user_id: str,
        config: ChatbotConfig,
        channel_id: str,
    ) -> ConfirmationRequest:
        now = self.clock.now()
        live = self._sweep(now)
        cid = make_confirmation_id(user_id, now, taken=live.keys() | self._waiters.keys())
        record = PendingToolConfirmation(
            id=cid,
            category_id=decision.category.id,
            category_name=decision.category.name,
            user_message=user_message,
            guild_id=config.guild_id,
            channel_id=channel_id,
            user_id=user_id,
            tool_message=decision.explanation,
            created_at=now,
        )
        self.confirmations.put(record)
        self._waiters[cid] = (now, asyncio.get_running_loop().create_future())
        logger.debug("Stored pending escalation with ID: %s", cid)
        return ConfirmationRequest(
            confirmation_id=cid,
            category_id=decision.category.id,
            category_name=decision.category.name,
            explanation=decision.explanation,
            user_message_preview=preview(user_message),
            expires_at=now + self.confirmation_ttl,
        )

    async def resolve(
        self, confirmation_id: str, confirmed: bool, resolving_user_id: str
    ) -> Resolution:
        record = self.confirmations.get(confirmation_id)
        if record is None or is_expired(record, self.clock.now(), self.confirmation_ttl):
            if record is not None:
                self.confirmations.pop(confirmation_id)
            result: Resolution = Result.failure(ConfirmationExpired(confirmation_id))
            self._settle(confirmation_id, result)
            return result
        if record.user_id != resolving_user_id:
            logger.warning(
                "User %s tried to resolve confirmation %s owned by %s",
                resolving_user_id,
                confirmation_id,
                record.user_id,
            )
            return Result.failure(ConfirmationForbidden(confirmation_id))

        # consumed before any side effect
        self.confirmations.pop(confirmation_id)
        key = ConversationKey(guild_id=record.guild_id, user_id=record.user_id)
        if confirmed:
            result = await self._escalate(record, key)
        else:
            await self.history.append_exchange(key, record.user_message, DECLINE_REPLY)
            result = Result.success(ResolutionOutcome(success=True, message=DECLINE_NOTICE))
        self._settle(confirmation_id, result)
        return result

    async def _escalate(self, record: PendingToolConfirmation, key: ConversationKey) -> Resolution:
        try:
            outcome = await self.executor.create(
                record.guild_id,
                record.category_id,
                record.user_message,
                user_id=record.user_id,
            )
        except Exception as ex:
            logger.exception("Escalation executor raised for confirmation %s", record.id)
            outcome = EscalationOutcome(success=False, error=str(ex))

        if not outcome.success or not outcome.resource_ref:
            await self.history.append_exchange(key, record.user_message, ESCALATION_APOLOGY)
            detail = outcome.error or "ticket was created but no resource reference was returned"
            return Result.failure(EscalationExecutionFailed(detail))

        await self.history.append_exchange(
            key,
            record.user_message,
            escalation_success_reply(outcome.ticket_number, outcome.resource_ref),
        )
        logger.info(
            "Created ticket #%s via assistant for user %s", outcome.ticket_number, record.user_id
        )
        return Result.success(
            ResolutionOutcome(
                success=True,
                message=escalation_success_notice(outcome.resource_ref),
                resource_ref=outcome.resource_ref,
            )
        )

    def _settle(self, confirmation_id: str, result: Resolution) -> None:
        entry = self._waiters.get(confirmation_id)
        if entry is not None and not entry[1].done():
            entry[1].set_result(result)

    async def wait_for_resolution(self, confirmation_id: str, timeout: float) -> Resolution:
        """Wait until ``resolve`` settles this confirmation or ``timeout`` seconds pass."""
        entry = self._waiters.get(confirmation_id)
        if entry is None:
            return Result.failure(ConfirmationExpired(confirmation_id))
        try:
            result = await asyncio.wait_for(asyncio.shield(entry[1]), timeout)
        except asyncio.TimeoutError:
            return Result.failure(ConfirmationExpired(confirmation_id))
        self._waiters.pop(confirmation_id, None)
        return result

    # ---------- misc ----------

    async def clear_history(self, user_id: str, guild_id: str) -> bool:
        try:
            await self.history.clear(ConversationKey(guild_id=guild_id, user_id=user_id))
        except Exception as ex:
            logger.error("Error clearing history for user %s: %s", user_id, ex)
            return False
        return True

    async def get_config(self, channel_id: str) -> ChatbotConfig | None:
        try:
            return await self.configs.get_by_channel(channel_id)
        except Exception as ex:
            logger.error("Error finding config by channel ID %s: %s", channel_id, ex)
            return None

    def split_response(self, text: str) -> list[str]:
        return split_response(text, self.segment_max_length)
