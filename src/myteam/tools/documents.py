"""Drafting tools for the comms agent."""

from pathlib import Path
from typing import Any

from .base import Tool, ToolResult
from .files import resolve_path

TEMPLATES: dict[str, str] = {
    "email": (
        "Subject: <subject>\n\n"
        "Hi <name>,\n\n"
        "<one-line purpose>\n\n"
        "<details>\n\n"
        "<clear ask or next step>\n\n"
        "Thanks,\n<sender>"
    ),
    "status_update": (
        "# Status update: <project>\n\n"
        "## Done\n- \n\n"
        "## In progress\n- \n\n"
        "## Blocked\n- \n\n"
        "## Next\n- "
    ),
    "meeting_notes": (
        "# <meeting> (<date>)\n\n"
        "Attendees: <names>\n\n"
        "## Decisions\n- \n\n"
        "## Action items\n- [ ] <owner>: <item>"
    ),
    "proposal": (
        "# <title>\n\n"
        "## Problem\n\n"
        "## Proposal\n\n"
        "## Alternatives considered\n\n"
        "## Cost and timeline\n\n"
        "## Ask"
    ),
}


class SaveDraftTool(Tool):
    """Save a draft document under the drafts directory."""

    def __init__(self, drafts_dir: Path) -> None:
        self.drafts_dir = Path(drafts_dir)

    @property
    def name(self) -> str:
        return "save_draft"

    @property
    def description(self) -> str:
        return "Save a draft document for review"

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Path to save the draft"},
                "content": {"type": "string", "description": "Draft content"},
            },
            "required": ["path", "content"],
        }

    async def execute(self, **kwargs: Any) -> ToolResult:
        path = resolve_path(self.drafts_dir, kwargs["path"])
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(kwargs["content"], encoding="utf-8")
        except OSError as e:
            return ToolResult(success=False, output="", error=f"Error saving draft: {e}")
        return ToolResult(success=True, output=f"Draft saved: {path}")


class GetTemplateTool(Tool):
    """Return a skeleton for a common document type."""

    @property
    def name(self) -> str:
        return "get_template"

    @property
    def description(self) -> str:
        return "Get a template for a common document type"

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "type": {
                    "type": "string",
                    "enum": list(TEMPLATES),
                    "description": "Template type",
                },
            },
            "required": ["type"],
        }

    async def execute(self, **kwargs: Any) -> ToolResult:
        return ToolResult(success=True, output=TEMPLATES[kwargs["type"]])
