"""Data models for the memory system."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class MemoryKind(str, Enum):
    """Kinds of long-term memory records."""

    PREFERENCE = "preference"
    FACT = "fact"
    TASK = "task"
    CONVERSATION = "conversation"


class TaskStatus(str, Enum):
    """Lifecycle states of a task. Any state may overwrite any other."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Memory:
    """A long-term memory. Immutable once written.

    Attributes:
        kind: What sort of memory this is.
        content: The remembered text. Never empty.
        metadata: Free-form key/value data attached by the writer.
        agent_role: Role that owns the memory, None for shared memories.
        id: Store-assigned identifier, None for unsaved memories.
        created_at: UTC timestamp assigned by the store.
    """

    kind: MemoryKind
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    agent_role: str | None = None
    id: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class Preference:
    """A learned user preference. One current value per key."""

    key: str
    value: str
    category: str
    learned_at: datetime | None = None


@dataclass(frozen=True)
class Task:
    """A unit of work tracked across agents."""

    description: str
    status: TaskStatus = TaskStatus.PENDING
    assigned_role: str | None = None
    result: str | None = None
    id: str | None = None
    created_at: datetime | None = None
    completed_at: datetime | None = None


@dataclass(frozen=True)
class ConversationTurn:
    """One message in a session's conversation log."""

    session_id: str
    role: str
    content: str
    agent_role: str | None = None
    timestamp: datetime | None = None

    def to_message(self) -> dict[str, Any]:
        """Return the turn in backend message format."""
        return {"role": self.role, "content": self.content}
