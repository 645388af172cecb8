"""JSONL logging for application events."""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


@dataclass
class LogEntry:
    """A single log entry."""

    timestamp: str
    event: str
    session_id: str | None = None
    agent_role: str | None = None
    duration_ms: float | None = None
    stopped_reason: str | None = None
    error: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict, excluding None values."""
        data = asdict(self)
        return {k: v for k, v in data.items() if v is not None and v != {} and v != []}


class JSONLLogger:
    """Logger that writes structured logs in JSONL format."""

    def __init__(
        self,
        log_dir: str | Path | None = None,
        filename: str = "logs.jsonl",
        max_size_mb: float = 10.0,
    ) -> None:
        if log_dir is None:
            log_dir = Path.home() / ".myteam" / "logs"
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.filename = filename
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)
        self._current_session_id: str | None = None

    @property
    def log_path(self) -> Path:
        """Current log file path."""
        return self.log_dir / self.filename

    def set_session_id(self, session_id: str | None) -> None:
        """Set the current session_id for all subsequent logs."""
        self._current_session_id = session_id

    def _rotate_if_needed(self) -> None:
        """Rotate log file if it exceeds max size."""
        if not self.log_path.exists():
            return

        if self.log_path.stat().st_size >= self.max_size_bytes:
            timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
            rotated_name = f"{self.log_path.stem}_{timestamp}.jsonl"
            self.log_path.rename(self.log_dir / rotated_name)

    def _write(self, entry: LogEntry) -> None:
        """Write a log entry to the file."""
        self._rotate_if_needed()

        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry.to_dict(), default=str) + "\n")

    def log(
        self,
        event: str,
        *,
        session_id: str | None = None,
        agent_role: str | None = None,
        duration_ms: float | None = None,
        stopped_reason: str | None = None,
        error: str | None = None,
        **extra: Any,
    ) -> None:
        """Log an event."""
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            event=event,
            session_id=session_id or self._current_session_id,
            agent_role=agent_role,
            duration_ms=duration_ms,
            stopped_reason=stopped_reason,
            error=error,
            extra=extra if extra else {},
        )
        self._write(entry)

    def log_turn(
        self,
        agent_role: str,
        stopped_reason: str,
        *,
        session_id: str | None = None,
        rounds: int | None = None,
        duration_ms: float | None = None,
        delegate_to: str | None = None,
        memories_stored: int = 0,
    ) -> None:
        """Log a finished turn."""
        self.log(
            "turn",
            session_id=session_id,
            agent_role=agent_role,
            stopped_reason=stopped_reason,
            duration_ms=duration_ms,
            rounds=rounds,
            delegate_to=delegate_to,
            memories_stored=memories_stored,
        )

    def log_delegation(
        self,
        from_role: str,
        to_role: str,
        *,
        session_id: str | None = None,
        followed: bool = True,
    ) -> None:
        """Log a hand-off between agents."""
        self.log(
            "delegation",
            session_id=session_id,
            agent_role=from_role,
            to_role=to_role,
            followed=followed,
        )


# Global logger instance
_logger: JSONLLogger | None = None


def get_logger() -> JSONLLogger:
    """Get the global logger instance."""
    global _logger
    if _logger is None:
        _logger = JSONLLogger()
    return _logger


def configure_logger(log_dir: str | Path | None = None, max_size_mb: float = 10.0) -> JSONLLogger:
    """Configure and return the global logger."""
    global _logger
    _logger = JSONLLogger(log_dir=log_dir, max_size_mb=max_size_mb)
    return _logger
