"""Memory module: persistent storage for the agent team."""

from .models import ConversationTurn, Memory, MemoryKind, Preference, Task, TaskStatus
from .store import MemoryStore, StoreUnavailableError, generate_id
from .tools import ForgetPreferenceTool, SaveFindingTool, SavePreferenceTool, SearchKnowledgeTool

__all__ = [
    "ConversationTurn",
    "ForgetPreferenceTool",
    "Memory",
    "MemoryKind",
    "MemoryStore",
    "Preference",
    "SaveFindingTool",
    "SavePreferenceTool",
    "SearchKnowledgeTool",
    "StoreUnavailableError",
    "Task",
    "TaskStatus",
    "generate_id",
]
