"""Memory tools for explicit preference and knowledge management."""

from typing import Any

from ..tools.base import Tool, ToolResult
from .models import Memory, MemoryKind, Preference
from .store import MemoryStore


class SavePreferenceTool(Tool):
    """Tool for saving a learned user preference."""

    def __init__(self, store: MemoryStore) -> None:
        self.store = store

    @property
    def name(self) -> str:
        return "save_preference"

    @property
    def description(self) -> str:
        return (
            "Save a user preference that has been learned. "
            "Overwrites any previous value for the same key."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "key": {
                    "type": "string",
                    "description": "Preference key (e.g., 'coding_style')",
                },
                "value": {"type": "string", "description": "Preference value"},
                "category": {
                    "type": "string",
                    "description": (
                        "Category (e.g., 'development', 'communication', 'scheduling')"
                    ),
                },
            },
            "required": ["key", "value", "category"],
        }

    async def execute(self, **kwargs: Any) -> ToolResult:
        key = kwargs.get("key", "").strip()
        value = kwargs.get("value", "").strip()
        category = kwargs.get("category", "").strip() or "general"

        if not key or not value:
            return ToolResult(
                success=False,
                output="",
                error="Both 'key' and 'value' are required",
            )

        saved = self.store.save_preference(
            Preference(key=key, value=value, category=category)
        )
        return ToolResult(
            success=True,
            output=f"Preference saved: {saved.key} = {saved.value}",
        )


class ForgetPreferenceTool(Tool):
    """Tool for removing a user preference."""

    def __init__(self, store: MemoryStore) -> None:
        self.store = store

    @property
    def name(self) -> str:
        return "forget_preference"

    @property
    def description(self) -> str:
        return "Remove a stored user preference. Use when the user asks to forget it."

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "key": {"type": "string", "description": "Preference key to forget"},
            },
            "required": ["key"],
        }

    async def execute(self, **kwargs: Any) -> ToolResult:
        key = kwargs.get("key", "").strip()
        if not key:
            return ToolResult(success=False, output="", error="'key' is required")

        if self.store.delete_preference(key):
            return ToolResult(success=True, output=f"Forgot preference: {key}")
        return ToolResult(success=True, output=f"No preference stored for '{key}'")


class SearchKnowledgeTool(Tool):
    """Tool for searching saved findings and facts."""

    def __init__(self, store: MemoryStore, limit: int = 10) -> None:
        self.store = store
        self.limit = limit

    @property
    def name(self) -> str:
        return "search_knowledge"

    @property
    def description(self) -> str:
        return "Search previously saved research and facts"

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Text to look for"},
            },
            "required": ["query"],
        }

    async def execute(self, **kwargs: Any) -> ToolResult:
        memories = self.store.search_memories(kwargs["query"], limit=self.limit)
        if not memories:
            return ToolResult(success=True, output="No relevant past research found.")
        return ToolResult(
            success=True,
            output="\n\n".join(f"[{m.kind.value}] {m.content}" for m in memories),
        )


class SaveFindingTool(Tool):
    """Tool for saving a research finding as a role-scoped fact."""

    def __init__(self, store: MemoryStore, agent_role: str) -> None:
        self.store = store
        self.agent_role = agent_role

    @property
    def name(self) -> str:
        return "save_finding"

    @property
    def description(self) -> str:
        return "Save an important research finding for future reference"

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "content": {"type": "string", "description": "The finding to save"},
                "topic": {"type": "string", "description": "Topic or category"},
                "source": {
                    "type": "string",
                    "description": "Source URL or reference (optional)",
                },
            },
            "required": ["content", "topic"],
        }

    async def execute(self, **kwargs: Any) -> ToolResult:
        content = kwargs["content"].strip()
        if not content:
            return ToolResult(success=False, output="", error="'content' must not be empty")

        metadata = {"topic": kwargs["topic"]}
        if kwargs.get("source"):
            metadata["source"] = kwargs["source"]

        self.store.save_memory(
            Memory(
                kind=MemoryKind.FACT,
                content=content,
                metadata=metadata,
                agent_role=self.agent_role,
            )
        )
        return ToolResult(success=True, output=f"Finding saved under topic: {kwargs['topic']}")
