"""Agent loop implementation."""

from __future__ import annotations

import itertools
import re
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..conversation_logger import ConversationLogger, get_conversation_logger
from ..memory import Memory, MemoryKind, MemoryStore, Preference
from .backend import Backend, BackendError, GroqBackend
from .directives import extract
from .prompt import PromptBuilder, format_tool_result

if TYPE_CHECKING:
    from .roles import RoleConfig

# "key: value" or "key = value" inside a preference directive
PREFERENCE_PAIR = re.compile(r"^\s*([\w][\w .-]*?)\s*[:=]\s*(.+?)\s*$")
LEARNED_CATEGORY = "learned"


class StopReason(Enum):
    """Reasons for ending a turn."""

    COMPLETE = "complete"
    MAX_ROUNDS = "max_rounds"


@dataclass
class AgentConfig:
    """Configuration for the agent loop."""

    model: str = "llama-3.3-70b-versatile"
    max_rounds: int | None = 25


@dataclass
class TurnResult:
    """Result of one user turn."""

    visible_text: str
    stop_reason: StopReason
    rounds: int
    delegate_to: str | None = None
    memories_stored: list[Memory] = field(default_factory=list)
    tool_calls: list[dict[str, Any]] = field(default_factory=list)


def new_session_id() -> str:
    """Generate a new session ID."""
    return f"session-{uuid.uuid4().hex[:8]}"


class AgentLoop:
    """One agent (role) bound to one session: think, act, observe.

    The session's persisted conversation log is the only context replayed
    to the backend. Callers must not run overlapping turns on a session.
    """

    def __init__(
        self,
        role_config: RoleConfig,
        store: MemoryStore,
        backend: Backend | None = None,
        session_id: str | None = None,
        config: AgentConfig | None = None,
        conversation_logger: ConversationLogger | None = None,
    ) -> None:
        self.role_config = role_config
        self.store = store
        self.backend = backend or GroqBackend()
        self.session_id = session_id or new_session_id()
        self.config = config or AgentConfig()
        self.prompt_builder = PromptBuilder(store)
        self.conv_logger = conversation_logger or get_conversation_logger()

    def get_role(self) -> str:
        return self.role_config.role

    def get_name(self) -> str:
        return self.role_config.name

    def get_session_id(self) -> str:
        return self.session_id

    @property
    def model(self) -> str:
        return self.role_config.model or self.config.model

    async def run_turn(self, user_text: str) -> TurnResult:
        """Run one user turn to completion.

        Args:
            user_text: The new user message.

        Returns:
            TurnResult with the visible reply, delegation target and
            stored memories.

        Raises:
            BackendError: If the reasoning backend fails. The user turn
                stays persisted.
            StoreUnavailableError: If a store read or write fails.
        """
        role = self.get_role()
        registry = self.role_config.registry

        self.store.append_turn(self.session_id, "user", user_text)
        self.conv_logger.log_user_message(self.session_id, user_text, role)

        instructions = self.prompt_builder.build(self.role_config.system_prompt, role)
        messages: list[dict[str, Any]] = [
            turn.to_message() for turn in self.store.get_history(self.session_id)
        ]
        tools = registry.get_tools_schema()
        tool_calls_log: list[dict[str, Any]] = []

        rounds = range(self.config.max_rounds) if self.config.max_rounds else itertools.count()
        round_number = 0
        for round_number in rounds:
            self.conv_logger.log_backend_request(
                self.session_id,
                model=self.model,
                messages_count=len(messages),
                tools_count=len(tools),
                round_number=round_number + 1,
            )

            try:
                response = await self.backend.complete(
                    model=self.model,
                    instructions=instructions,
                    messages=messages,
                    tools=tools,
                )
            except BackendError as e:
                self.conv_logger.log_error(self.session_id, str(e), context="backend")
                raise

            tool_calls = response.tool_calls
            self.conv_logger.log_backend_response(
                self.session_id,
                stop_reason=response.stop_reason,
                tool_calls_count=len(tool_calls),
                has_text=bool(response.text),
            )

            if not response.needs_tools:
                return self._finish(response.text, round_number + 1, tool_calls_log)

            results: list[dict[str, Any]] = []
            for call in tool_calls:
                tool_calls_log.append({"name": call.name, "input": call.input})
                self.conv_logger.log_tool_call(
                    self.session_id,
                    tool_name=call.name,
                    tool_input=call.input,
                    tool_call_id=call.id,
                )

                start_time = time.time()
                result = await registry.dispatch(call.name, call.input)
                duration_ms = (time.time() - start_time) * 1000

                self.conv_logger.log_tool_result(
                    self.session_id,
                    tool_name=call.name,
                    success=result.success,
                    output=result.output,
                    error=result.error,
                    tool_call_id=call.id,
                    duration_ms=duration_ms,
                )
                results.append({
                    "type": "tool_result",
                    "tool_use_id": call.id,
                    "content": format_tool_result(result.success, result.output, result.error),
                    "is_error": not result.success,
                })

            messages.append({"role": "assistant", "content": response.content})
            messages.append({"role": "user", "content": results})

        return self._stop_at_round_limit(round_number + 1, tool_calls_log)

    def _finish(
        self,
        raw_text: str,
        rounds: int,
        tool_calls_log: list[dict[str, Any]],
    ) -> TurnResult:
        """Extract directives, persist the reply and store memories."""
        role = self.get_role()
        extraction = extract(raw_text, agent_role=role)
        self.conv_logger.log_directives(
            self.session_id,
            delegate_to=extraction.delegate_to,
            memories_count=len(extraction.memories),
        )

        self.store.append_turn(self.session_id, "assistant", extraction.visible_text, role)
        self.conv_logger.log_assistant_message(self.session_id, extraction.visible_text, role)

        stored = [self._store_memory(memory) for memory in extraction.memories]

        self.conv_logger.log_agent_stop(
            self.session_id,
            stop_reason=StopReason.COMPLETE.value,
            rounds=rounds,
            tool_calls_total=len(tool_calls_log),
        )
        return TurnResult(
            visible_text=extraction.visible_text,
            stop_reason=StopReason.COMPLETE,
            rounds=rounds,
            delegate_to=extraction.delegate_to,
            memories_stored=stored,
            tool_calls=tool_calls_log,
        )

    def _store_memory(self, memory: Memory) -> Memory:
        """Save an extracted memory; 'key: value' preferences are also upserted."""
        saved = self.store.save_memory(memory)
        if memory.kind is MemoryKind.PREFERENCE:
            match = PREFERENCE_PAIR.match(memory.content)
            if match:
                self.store.save_preference(
                    Preference(key=match.group(1), value=match.group(2), category=LEARNED_CATEGORY)
                )
        return saved

    def _stop_at_round_limit(
        self,
        rounds: int,
        tool_calls_log: list[dict[str, Any]],
    ) -> TurnResult:
        """End a turn whose backend never produced a final answer."""
        text = f"Stopped: no final answer after {rounds} rounds."
        self.store.append_turn(self.session_id, "assistant", text, self.get_role())
        self.conv_logger.log_assistant_message(self.session_id, text, self.get_role())
        self.conv_logger.log_agent_stop(
            self.session_id,
            stop_reason=StopReason.MAX_ROUNDS.value,
            rounds=rounds,
            tool_calls_total=len(tool_calls_log),
        )
        return TurnResult(
            visible_text=text,
            stop_reason=StopReason.MAX_ROUNDS,
            rounds=rounds,
            tool_calls=tool_calls_log,
        )
