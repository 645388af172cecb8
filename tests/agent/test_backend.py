"""Tests for the Groq backend adapter."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import groq
import httpx
import pytest

from myteam.agent.backend import (
    STOP_END_TURN,
    STOP_TOOL_USE,
    BackendError,
    BackendResponse,
    GroqBackend,
    from_groq_response,
    to_groq_messages,
    to_groq_tools,
)


def groq_completion(content=None, tool_calls=None):
    """Build an object shaped like a Groq chat completion."""
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def groq_tool_call(call_id: str, name: str, arguments: str):
    return SimpleNamespace(
        id=call_id,
        function=SimpleNamespace(name=name, arguments=arguments),
    )


class TestBackendResponse:
    def test_text_is_first_text_block(self):
        response = BackendResponse(
            stop_reason=STOP_END_TURN,
            content=[{"type": "text", "text": "one"}, {"type": "text", "text": "two"}],
        )
        assert response.text == "one"
        assert not response.needs_tools

    def test_text_floor(self):
        assert BackendResponse(stop_reason=STOP_END_TURN).text == ""

    def test_tool_calls(self):
        response = BackendResponse(
            stop_reason=STOP_TOOL_USE,
            content=[
                {"type": "text", "text": "Let me check."},
                {"type": "tool_use", "id": "c1", "name": "read_file", "input": {"path": "a"}},
            ],
        )
        [call] = response.tool_calls
        assert (call.id, call.name, call.input) == ("c1", "read_file", {"path": "a"})
        assert response.needs_tools


class TestConversion:
    def test_to_groq_tools(self):
        tools = to_groq_tools([
            {"name": "echo", "description": "Echo", "input_schema": {"type": "object"}},
        ])
        assert tools == [{
            "type": "function",
            "function": {"name": "echo", "description": "Echo", "parameters": {"type": "object"}},
        }]

    def test_to_groq_messages(self):
        messages = to_groq_messages("system text", [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": [
                {"type": "text", "text": "Checking."},
                {"type": "tool_use", "id": "c1", "name": "echo", "input": {"text": "x"}},
            ]},
            {"role": "user", "content": [
                {"type": "tool_result", "tool_use_id": "c1", "content": "x", "is_error": False},
            ]},
        ])

        assert messages[0] == {"role": "system", "content": "system text"}
        assert messages[1] == {"role": "user", "content": "hi"}
        assert messages[2]["role"] == "assistant"
        assert messages[2]["content"] == "Checking."
        [tool_call] = messages[2]["tool_calls"]
        assert tool_call["id"] == "c1"
        assert tool_call["function"]["name"] == "echo"
        assert json.loads(tool_call["function"]["arguments"]) == {"text": "x"}
        assert messages[3] == {"role": "tool", "tool_call_id": "c1", "content": "x"}

    def test_assistant_without_text_has_none_content(self):
        messages = to_groq_messages("s", [
            {"role": "assistant", "content": [
                {"type": "tool_use", "id": "c1", "name": "echo", "input": {}},
            ]},
        ])
        assert messages[1]["content"] is None

    def test_from_groq_final_answer(self):
        response = from_groq_response(groq_completion(content="Hello."))
        assert response.stop_reason == STOP_END_TURN
        assert response.text == "Hello."

    def test_from_groq_tool_calls(self):
        response = from_groq_response(groq_completion(
            tool_calls=[groq_tool_call("c1", "echo", '{"text": "x"}')],
        ))
        assert response.stop_reason == STOP_TOOL_USE
        [call] = response.tool_calls
        assert call.input == {"text": "x"}

    def test_unparseable_arguments_become_empty(self):
        response = from_groq_response(groq_completion(
            tool_calls=[groq_tool_call("c1", "echo", "{not json")],
        ))
        assert response.tool_calls[0].input == {}


class TestGroqBackend:
    @pytest.fixture
    def client(self):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=groq_completion(content="Hi."))
        return client

    @pytest.mark.asyncio
    async def test_complete(self, client):
        backend = GroqBackend(client=client, max_tokens=100)
        tools = [{"name": "echo", "description": "Echo", "input_schema": {"type": "object"}}]

        response = await backend.complete(
            model="m",
            instructions="sys",
            messages=[{"role": "user", "content": "hey"}],
            tools=tools,
        )

        assert response.text == "Hi."
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "m"
        assert kwargs["max_tokens"] == 100
        assert kwargs["tool_choice"] == "auto"
        assert kwargs["messages"][0] == {"role": "system", "content": "sys"}

    @pytest.mark.asyncio
    async def test_no_tools_omits_tool_choice(self, client):
        backend = GroqBackend(client=client)
        await backend.complete(model="m", instructions="sys", messages=[], tools=[])

        kwargs = client.chat.completions.create.call_args.kwargs
        assert "tools" not in kwargs
        assert "tool_choice" not in kwargs

    @pytest.mark.asyncio
    async def test_api_error_becomes_backend_error(self, client):
        client.chat.completions.create = AsyncMock(
            side_effect=groq.APIConnectionError(request=httpx.Request("POST", "https://api.groq.com"))
        )
        backend = GroqBackend(client=client)

        with pytest.raises(BackendError):
            await backend.complete(model="m", instructions="sys", messages=[], tools=[])
