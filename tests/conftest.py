"""Shared fixtures for the test suite."""

from pathlib import Path
from typing import Any

import pytest

from myteam.agent import BackendResponse
from myteam.config import Settings
from myteam.conversation_logger import ConversationLogger
from myteam.logging import JSONLLogger
from myteam.memory import MemoryStore


class ScriptedBackend:
    """Backend that replays canned responses and records every request."""

    def __init__(self, responses: list[BackendResponse]) -> None:
        self.responses = list(responses)
        self.requests: list[dict[str, Any]] = []

    async def complete(
        self,
        *,
        model: str,
        instructions: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> BackendResponse:
        # Copy so later appends by the loop don't rewrite history
        self.requests.append({
            "model": model,
            "instructions": instructions,
            "messages": list(messages),
            "tools": tools,
        })
        if not self.responses:
            raise AssertionError("ScriptedBackend ran out of responses")
        return self.responses.pop(0)


def final(text: str) -> BackendResponse:
    """A final-answer response with one text block."""
    return BackendResponse(stop_reason="end_turn", content=[{"type": "text", "text": text}])


def tool_use(*calls: tuple[str, str, dict[str, Any]]) -> BackendResponse:
    """A tool-use response; each call is (id, name, input)."""
    return BackendResponse(
        stop_reason="tool_use",
        content=[
            {"type": "tool_use", "id": call_id, "name": name, "input": tool_input}
            for call_id, name, tool_input in calls
        ],
    )


@pytest.fixture
def store(tmp_path: Path) -> MemoryStore:
    """Create a MemoryStore with a temporary database."""
    store = MemoryStore(tmp_path / "team.db")
    store.init_db()
    yield store
    store.close()


@pytest.fixture
def conv_logger(tmp_path: Path) -> ConversationLogger:
    return ConversationLogger(log_dir=tmp_path / "conversations")


@pytest.fixture
def app_logger(tmp_path: Path) -> JSONLLogger:
    return JSONLLogger(log_dir=tmp_path / "logs")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(api_key="test-key", home_dir=tmp_path / "home")


@pytest.fixture
def scripted():
    """Factory for ScriptedBackend instances."""
    return ScriptedBackend


@pytest.fixture
def responses():
    """Helpers for building backend responses."""

    class Responses:
        final = staticmethod(final)
        tool_use = staticmethod(tool_use)

    return Responses
