"""Tests for JSONL logging."""

import json
from pathlib import Path

from myteam.logging import JSONLLogger, LogEntry, configure_logger, get_logger


def read_entries(logger: JSONLLogger) -> list[dict]:
    return [json.loads(line) for line in logger.log_path.read_text().splitlines()]


class TestLogEntry:
    def test_to_dict_excludes_empty(self):
        entry = LogEntry(timestamp="2024-01-01T00:00:00Z", event="test")
        assert entry.to_dict() == {"timestamp": "2024-01-01T00:00:00Z", "event": "test"}

    def test_to_dict_keeps_values(self):
        entry = LogEntry(
            timestamp="t",
            event="turn",
            session_id="s1",
            duration_ms=12.5,
            extra={"rounds": 2},
        )
        data = entry.to_dict()
        assert data["session_id"] == "s1"
        assert data["duration_ms"] == 12.5
        assert data["extra"] == {"rounds": 2}


class TestJSONLLogger:
    def test_creates_log_dir(self, tmp_path: Path):
        log_dir = tmp_path / "nested" / "logs"
        JSONLLogger(log_dir=log_dir)
        assert log_dir.is_dir()

    def test_log_writes_line(self, tmp_path: Path):
        logger = JSONLLogger(log_dir=tmp_path)
        logger.log("session_start", session_id="s1", agent_role="dev", custom="x")

        [entry] = read_entries(logger)
        assert entry["event"] == "session_start"
        assert entry["session_id"] == "s1"
        assert entry["agent_role"] == "dev"
        assert entry["extra"] == {"custom": "x"}
        assert "timestamp" in entry

    def test_current_session_used_by_default(self, tmp_path: Path):
        logger = JSONLLogger(log_dir=tmp_path)
        logger.set_session_id("s-default")
        logger.log("ping")
        logger.log("pong", session_id="s-explicit")

        first, second = read_entries(logger)
        assert first["session_id"] == "s-default"
        assert second["session_id"] == "s-explicit"

    def test_log_turn(self, tmp_path: Path):
        logger = JSONLLogger(log_dir=tmp_path)
        logger.log_turn("research", "complete", session_id="s1", rounds=3, memories_stored=1)

        [entry] = read_entries(logger)
        assert entry["event"] == "turn"
        assert entry["stopped_reason"] == "complete"
        assert entry["extra"] == {"rounds": 3, "delegate_to": None, "memories_stored": 1}

    def test_log_delegation(self, tmp_path: Path):
        logger = JSONLLogger(log_dir=tmp_path)
        logger.log_delegation("orchestrator", "intern", session_id="s1", followed=False)

        [entry] = read_entries(logger)
        assert entry["agent_role"] == "orchestrator"
        assert entry["extra"] == {"to_role": "intern", "followed": False}

    def test_rotation(self, tmp_path: Path):
        logger = JSONLLogger(log_dir=tmp_path, max_size_mb=0.0001)
        for i in range(20):
            logger.log("event", index=i)

        rotated = list(tmp_path.glob("logs_*.jsonl"))
        assert rotated
        assert logger.log_path.exists()


def test_configure_logger_replaces_global(tmp_path: Path):
    logger = configure_logger(tmp_path / "configured")
    assert get_logger() is logger
    assert logger.log_dir == tmp_path / "configured"
