"""Task tracking tools shared by the orchestrator and workflow agents."""

from datetime import datetime, timezone
from typing import Any

from ..memory.models import Task, TaskStatus
from ..memory.store import MemoryStore
from .base import Tool, ToolResult

STATUS_VALUES = [status.value for status in TaskStatus]


class CreateTaskTool(Tool):
    """Create a task, optionally assigned to a teammate."""

    def __init__(self, store: MemoryStore, assignable_roles: list[str]) -> None:
        self.store = store
        self.assignable_roles = list(assignable_roles)

    @property
    def name(self) -> str:
        return "create_task"

    @property
    def description(self) -> str:
        return "Create a new task and optionally assign it to a specialist agent"

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "description": {"type": "string", "description": "Task description"},
                "assign_to": {
                    "type": "string",
                    "enum": self.assignable_roles,
                    "description": "Agent to assign the task to",
                },
            },
            "required": ["description"],
        }

    async def execute(self, **kwargs: Any) -> ToolResult:
        description = kwargs["description"].strip()
        if not description:
            return ToolResult(success=False, output="", error="'description' must not be empty")

        task = self.store.save_task(
            Task(description=description, assigned_role=kwargs.get("assign_to"))
        )
        return ToolResult(
            success=True,
            output=(
                f"Task created: {task.id}\n"
                f"Description: {task.description}\n"
                f"Assigned to: {task.assigned_role or 'unassigned'}"
            ),
            metadata={"task_id": task.id},
        )


class ListTasksTool(Tool):
    """List tasks grouped by status."""

    def __init__(self, store: MemoryStore, assignable_roles: list[str]) -> None:
        self.store = store
        self.assignable_roles = list(assignable_roles)

    @property
    def name(self) -> str:
        return "list_tasks"

    @property
    def description(self) -> str:
        return "List current tasks, optionally filtered by status or agent"

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "status": {
                    "type": "string",
                    "enum": STATUS_VALUES,
                    "description": "Filter by status",
                },
                "assigned_to": {
                    "type": "string",
                    "enum": self.assignable_roles,
                    "description": "Filter by assigned agent",
                },
            },
            "required": [],
        }

    async def execute(self, **kwargs: Any) -> ToolResult:
        status = kwargs.get("status")
        tasks = self.store.get_tasks(
            status=TaskStatus(status) if status else None,
            assigned_role=kwargs.get("assigned_to"),
        )
        if not tasks:
            return ToolResult(success=True, output="No tasks found.")

        grouped: dict[TaskStatus, list[Task]] = {}
        for task in tasks:
            grouped.setdefault(task.status, []).append(task)

        lines: list[str] = []
        for task_status, status_tasks in grouped.items():
            lines.append(f"## {task_status.value.upper()}")
            for task in status_tasks:
                line = f"- [{task.id}] {task.description}"
                if task.assigned_role:
                    line += f" (@{task.assigned_role})"
                lines.append(line)
        return ToolResult(success=True, output="\n".join(lines))


class UpdateTaskTool(Tool):
    """Change a task's status and record its result."""

    def __init__(self, store: MemoryStore) -> None:
        self.store = store

    @property
    def name(self) -> str:
        return "update_task"

    @property
    def description(self) -> str:
        return "Update a task status or mark it complete. The task id may be partial."

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "task_id": {"type": "string", "description": "Task ID (can be partial)"},
                "status": {
                    "type": "string",
                    "enum": STATUS_VALUES,
                    "description": "New status",
                },
                "result": {
                    "type": "string",
                    "description": "Result or notes about the task",
                },
            },
            "required": ["task_id", "status"],
        }

    async def execute(self, **kwargs: Any) -> ToolResult:
        task = self.store.find_task(kwargs["task_id"].strip())
        if task is None:
            return ToolResult(
                success=False,
                output="",
                error=f"Task not found: {kwargs['task_id']}",
            )

        status = TaskStatus(kwargs["status"])
        completed_at = datetime.now(timezone.utc) if status is TaskStatus.COMPLETED else None
        updated = self.store.update_task(
            task.id,
            status=status,
            result=kwargs.get("result"),
            completed_at=completed_at,
        )
        assert updated is not None
        return ToolResult(
            success=True,
            output=f"Task updated: {updated.description} -> {updated.status.value}",
        )
