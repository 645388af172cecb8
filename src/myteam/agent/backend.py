"""Reasoning backend protocol and the Groq adapter.

The agent loop talks to the backend in a neutral message format:

- ``{"role": "user" | "assistant", "content": str}`` for plain turns;
- ``{"role": "assistant", "content": [blocks]}`` echoing a tool-use
  response, where blocks are ``{"type": "text", "text": ...}`` or
  ``{"type": "tool_use", "id": ..., "name": ..., "input": {...}}``;
- ``{"role": "user", "content": [blocks]}`` carrying
  ``{"type": "tool_result", "tool_use_id": ..., "content": ..., "is_error": bool}``
  blocks, one per tool-use id.

Adapters translate this to and from a provider's wire format.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Protocol

import groq
from groq import AsyncGroq

logger = logging.getLogger(__name__)

STOP_TOOL_USE = "tool_use"
STOP_END_TURN = "end_turn"


class BackendError(Exception):
    """Raised when the reasoning backend cannot produce a response."""


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the backend."""

    id: str
    name: str
    input: dict[str, Any]


@dataclass
class BackendResponse:
    """One response from the reasoning backend."""

    stop_reason: str
    content: list[dict[str, Any]] = field(default_factory=list)

    @property
    def needs_tools(self) -> bool:
        """True if the backend is waiting for tool results."""
        return self.stop_reason == STOP_TOOL_USE and bool(self.tool_calls)

    @property
    def tool_calls(self) -> list[ToolCall]:
        """Requested tool calls, in request order."""
        return [
            ToolCall(id=block["id"], name=block["name"], input=block.get("input") or {})
            for block in self.content
            if block.get("type") == "tool_use"
        ]

    @property
    def text(self) -> str:
        """The first text block, or an empty string."""
        for block in self.content:
            if block.get("type") == "text":
                return block.get("text") or ""
        return ""


class Backend(Protocol):
    """A reasoning backend the agent loop can call."""

    async def complete(
        self,
        *,
        model: str,
        instructions: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> BackendResponse:
        """Send one round and return the backend's response."""
        ...


def to_groq_tools(tools: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Convert tool declarations to Groq function-calling format."""
    return [
        {
            "type": "function",
            "function": {
                "name": tool["name"],
                "description": tool["description"],
                "parameters": tool["input_schema"],
            },
        }
        for tool in tools
    ]


def to_groq_messages(instructions: str, messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Convert neutral messages to Groq chat messages, system prompt first."""
    converted: list[dict[str, Any]] = [{"role": "system", "content": instructions}]

    for message in messages:
        content = message["content"]
        if isinstance(content, str):
            converted.append({"role": message["role"], "content": content})
            continue

        if message["role"] == "assistant":
            text = "".join(b.get("text", "") for b in content if b.get("type") == "text")
            entry: dict[str, Any] = {"role": "assistant", "content": text or None}
            tool_uses = [b for b in content if b.get("type") == "tool_use"]
            if tool_uses:
                entry["tool_calls"] = [
                    {
                        "id": block["id"],
                        "type": "function",
                        "function": {
                            "name": block["name"],
                            "arguments": json.dumps(block.get("input") or {}),
                        },
                    }
                    for block in tool_uses
                ]
            converted.append(entry)
            continue

        for block in content:
            if block.get("type") == "tool_result":
                converted.append({
                    "role": "tool",
                    "tool_call_id": block["tool_use_id"],
                    "content": block["content"],
                })
            elif block.get("type") == "text":
                converted.append({"role": "user", "content": block["text"]})

    return converted


def from_groq_response(response: Any) -> BackendResponse:
    """Convert a Groq chat completion to a BackendResponse."""
    message = response.choices[0].message
    content: list[dict[str, Any]] = []

    if message.content:
        content.append({"type": "text", "text": message.content})

    for tool_call in message.tool_calls or []:
        try:
            tool_input = json.loads(tool_call.function.arguments or "{}")
        except json.JSONDecodeError:
            logger.warning("Unparseable arguments for tool %s", tool_call.function.name)
            tool_input = {}
        if not isinstance(tool_input, dict):
            tool_input = {}
        content.append({
            "type": "tool_use",
            "id": tool_call.id,
            "name": tool_call.function.name,
            "input": tool_input,
        })

    stop_reason = STOP_TOOL_USE if message.tool_calls else STOP_END_TURN
    return BackendResponse(stop_reason=stop_reason, content=content)


class GroqBackend:
    """Backend implementation that wraps AsyncGroq chat completions."""

    def __init__(
        self,
        client: AsyncGroq | None = None,
        max_tokens: int = 4096,
    ) -> None:
        """Initialize the Groq backend.

        Args:
            client: The AsyncGroq client to use. Created from GROQ_API_KEY if None.
            max_tokens: Completion token limit per round.
        """
        self._client = client or AsyncGroq(api_key=os.getenv("GROQ_API_KEY"))
        self._max_tokens = max_tokens

    async def complete(
        self,
        *,
        model: str,
        instructions: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> BackendResponse:
        """Send one round to Groq.

        Raises:
            BackendError: On any Groq API failure (network, auth, rate limit).
        """
        request: dict[str, Any] = {
            "model": model,
            "messages": to_groq_messages(instructions, messages),
            "max_tokens": self._max_tokens,
        }
        if tools:
            request["tools"] = to_groq_tools(tools)
            request["tool_choice"] = "auto"

        try:
            response = await self._client.chat.completions.create(**request)
        except groq.APIError as e:
            raise BackendError(f"Groq request failed: {e}") from e

        return from_groq_response(response)
