"""Reusable workflow templates for the workflow agent."""

import json
import logging
import re
from pathlib import Path
from typing import Any

from .base import Tool, ToolResult

logger = logging.getLogger(__name__)


def workflow_filename(name: str) -> str:
    """Turn a workflow name into its file name."""
    slug = re.sub(r"[^\w-]+", "-", name.strip().lower()).strip("-")
    return f"{slug or 'workflow'}.json"


class SaveWorkflowTool(Tool):
    """Save a workflow template as JSON."""

    def __init__(self, workflows_dir: Path) -> None:
        self.workflows_dir = Path(workflows_dir)

    @property
    def name(self) -> str:
        return "save_workflow"

    @property
    def description(self) -> str:
        return "Save a reusable workflow template"

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Workflow name"},
                "description": {"type": "string", "description": "What this workflow does"},
                "steps": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "action": {"type": "string"},
                            "agent": {"type": "string"},
                            "params": {"type": "object"},
                        },
                    },
                    "description": "Workflow steps",
                },
            },
            "required": ["name", "description", "steps"],
        }

    async def execute(self, **kwargs: Any) -> ToolResult:
        workflow = {
            "name": kwargs["name"],
            "description": kwargs["description"],
            "steps": kwargs["steps"],
        }
        filename = workflow_filename(kwargs["name"])
        try:
            self.workflows_dir.mkdir(parents=True, exist_ok=True)
            (self.workflows_dir / filename).write_text(
                json.dumps(workflow, indent=2), encoding="utf-8"
            )
        except OSError as e:
            return ToolResult(success=False, output="", error=f"Error saving workflow: {e}")
        return ToolResult(success=True, output=f"Workflow saved: {filename}")


class ListWorkflowsTool(Tool):
    """List saved workflow templates."""

    def __init__(self, workflows_dir: Path) -> None:
        self.workflows_dir = Path(workflows_dir)

    @property
    def name(self) -> str:
        return "list_workflows"

    @property
    def description(self) -> str:
        return "List saved workflow templates"

    @property
    def parameters(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}, "required": []}

    async def execute(self, **kwargs: Any) -> ToolResult:
        if not self.workflows_dir.is_dir():
            return ToolResult(success=True, output="No workflows saved yet.")

        lines: list[str] = []
        for path in sorted(self.workflows_dir.glob("*.json")):
            try:
                workflow = json.loads(path.read_text(encoding="utf-8"))
                lines.append(f"- {workflow['name']}: {workflow['description']}")
            except (OSError, json.JSONDecodeError, KeyError, TypeError) as e:
                logger.warning("Skipping unreadable workflow %s: %s", path, e)

        if not lines:
            return ToolResult(success=True, output="No workflows saved yet.")
        return ToolResult(success=True, output="\n".join(lines))
