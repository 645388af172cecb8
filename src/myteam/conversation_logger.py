"""Conversation logger for detailed analysis.

Each session gets its own JSONL file per day with every event of the
agent loop: user messages, backend rounds, tool calls and results,
extracted directives and final replies.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


class ConversationLogger:
    """Logs complete conversations for analysis."""

    def __init__(self, log_dir: Path | str | None = None) -> None:
        """Initialize the conversation logger.

        Args:
            log_dir: Directory to store logs. Defaults to ~/.myteam/logs/conversations.
        """
        if log_dir is None:
            log_dir = Path.home() / ".myteam" / "logs" / "conversations"
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def _get_log_file(self, session_id: str) -> Path:
        """Get log file path for a session."""
        date_str = datetime.now().strftime("%Y-%m-%d")
        return self.log_dir / f"{date_str}_{session_id}.jsonl"

    def _write(self, session_id: str, entry: dict[str, Any]) -> None:
        """Write an entry to the session's log file."""
        entry["timestamp"] = datetime.now(timezone.utc).isoformat()
        entry["session_id"] = session_id

        with open(self._get_log_file(session_id), "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, ensure_ascii=False, default=str) + "\n")

    def log_user_message(self, session_id: str, content: str, agent_role: str) -> None:
        """Log an incoming user message."""
        self._write(session_id, {
            "event": "user_message",
            "role": "user",
            "agent_role": agent_role,
            "content": content,
        })

    def log_assistant_message(self, session_id: str, content: str, agent_role: str) -> None:
        """Log the visible reply of a turn."""
        self._write(session_id, {
            "event": "assistant_message",
            "role": "assistant",
            "agent_role": agent_role,
            "content": content,
        })

    def log_backend_request(
        self,
        session_id: str,
        model: str,
        messages_count: int,
        tools_count: int,
        round_number: int,
    ) -> None:
        """Log a request to the reasoning backend."""
        self._write(session_id, {
            "event": "backend_request",
            "model": model,
            "messages_count": messages_count,
            "tools_count": tools_count,
            "round": round_number,
        })

    def log_backend_response(
        self,
        session_id: str,
        stop_reason: str,
        tool_calls_count: int,
        has_text: bool,
    ) -> None:
        """Log a response from the reasoning backend."""
        self._write(session_id, {
            "event": "backend_response",
            "stop_reason": stop_reason,
            "tool_calls_count": tool_calls_count,
            "has_text": has_text,
        })

    def log_tool_call(
        self,
        session_id: str,
        tool_name: str,
        tool_input: dict[str, Any],
        tool_call_id: str,
    ) -> None:
        """Log a tool call requested by the backend."""
        self._write(session_id, {
            "event": "tool_call",
            "tool_name": tool_name,
            "tool_input": tool_input,
            "tool_call_id": tool_call_id,
        })

    def log_tool_result(
        self,
        session_id: str,
        tool_name: str,
        success: bool,
        output: str,
        error: str | None = None,
        tool_call_id: str | None = None,
        duration_ms: float | None = None,
    ) -> None:
        """Log the result of a tool execution."""
        entry: dict[str, Any] = {
            "event": "tool_result",
            "tool_name": tool_name,
            "success": success,
            "output": output[:2000] if output else "",  # Truncate long outputs
            "tool_call_id": tool_call_id,
        }
        if error:
            entry["error"] = error
        if duration_ms is not None:
            entry["duration_ms"] = duration_ms

        self._write(session_id, entry)

    def log_directives(
        self,
        session_id: str,
        delegate_to: str | None,
        memories_count: int,
    ) -> None:
        """Log directives extracted from a final answer."""
        self._write(session_id, {
            "event": "directives",
            "delegate_to": delegate_to,
            "memories_count": memories_count,
        })

    def log_error(self, session_id: str, error: str, context: str | None = None) -> None:
        """Log an error."""
        entry = {"event": "error", "error": error}
        if context:
            entry["context"] = context
        self._write(session_id, entry)

    def log_agent_stop(
        self,
        session_id: str,
        stop_reason: str,
        rounds: int,
        tool_calls_total: int,
    ) -> None:
        """Log when a turn finishes."""
        self._write(session_id, {
            "event": "agent_stop",
            "stop_reason": stop_reason,
            "rounds": rounds,
            "tool_calls_total": tool_calls_total,
        })


# Global instance
_conversation_logger: ConversationLogger | None = None


def get_conversation_logger(log_dir: Path | str | None = None) -> ConversationLogger:
    """Get or create the global conversation logger."""
    global _conversation_logger
    if _conversation_logger is None:
        _conversation_logger = ConversationLogger(log_dir=log_dir)
    return _conversation_logger


def reset_conversation_logger() -> None:
    """Reset the global conversation logger (for testing)."""
    global _conversation_logger
    _conversation_logger = None
