"""File tools for the dev and comms agents.

Relative paths resolve against the agent's workspace directory.
"""

import re
from pathlib import Path
from typing import Any

from .base import Tool, ToolResult

MAX_SEARCH_MATCHES = 50


def resolve_path(workspace: Path, path: str) -> Path:
    """Resolve a user-supplied path against the workspace."""
    candidate = Path(path).expanduser()
    if not candidate.is_absolute():
        candidate = workspace / candidate
    return candidate


class ReadFileTool(Tool):
    """Read a text file."""

    def __init__(
        self,
        workspace: Path,
        name: str = "read_file",
        max_chars: int = 100_000,
    ) -> None:
        self.workspace = Path(workspace)
        self._name = name
        self.max_chars = max_chars

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return "Read the contents of a file"

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Path to the file"},
            },
            "required": ["path"],
        }

    async def execute(self, **kwargs: Any) -> ToolResult:
        path = resolve_path(self.workspace, kwargs["path"])
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return ToolResult(success=False, output="", error=f"Error reading file: {e}")

        if len(content) > self.max_chars:
            content = content[: self.max_chars] + "\n... [content truncated]"
        return ToolResult(success=True, output=content)


class WriteFileTool(Tool):
    """Write a text file, creating parent directories."""

    def __init__(self, workspace: Path, name: str = "write_file") -> None:
        self.workspace = Path(workspace)
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return "Write content to a file"

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Path to the file"},
                "content": {"type": "string", "description": "Content to write"},
            },
            "required": ["path", "content"],
        }

    async def execute(self, **kwargs: Any) -> ToolResult:
        path = resolve_path(self.workspace, kwargs["path"])
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(kwargs["content"], encoding="utf-8")
        except OSError as e:
            return ToolResult(success=False, output="", error=f"Error writing file: {e}")
        return ToolResult(success=True, output=f"File written: {path}")


class ListDirectoryTool(Tool):
    """List a directory's entries."""

    def __init__(self, workspace: Path) -> None:
        self.workspace = Path(workspace)

    @property
    def name(self) -> str:
        return "list_directory"

    @property
    def description(self) -> str:
        return "List files and directories in a path"

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Directory path"},
            },
            "required": ["path"],
        }

    async def execute(self, **kwargs: Any) -> ToolResult:
        path = resolve_path(self.workspace, kwargs["path"])
        try:
            entries = sorted(path.iterdir(), key=lambda p: p.name)
        except OSError as e:
            return ToolResult(success=False, output="", error=f"Error listing directory: {e}")

        if not entries:
            return ToolResult(success=True, output="(empty directory)")
        return ToolResult(
            success=True,
            output="\n".join(
                f"{'[DIR]' if entry.is_dir() else '[FILE]'} {entry.name}" for entry in entries
            ),
        )


class SearchCodeTool(Tool):
    """Search files for a regular expression."""

    def __init__(self, workspace: Path, max_matches: int = MAX_SEARCH_MATCHES) -> None:
        self.workspace = Path(workspace)
        self.max_matches = max_matches

    @property
    def name(self) -> str:
        return "search_code"

    @property
    def description(self) -> str:
        return "Search for a pattern (regex) in files under a directory"

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "pattern": {"type": "string", "description": "Search pattern (regex)"},
                "path": {"type": "string", "description": "Directory to search in"},
                "file_type": {
                    "type": "string",
                    "description": "File extension to filter (e.g., 'ts', 'py')",
                },
            },
            "required": ["pattern", "path"],
        }

    async def execute(self, **kwargs: Any) -> ToolResult:
        try:
            regex = re.compile(kwargs["pattern"])
        except re.error as e:
            return ToolResult(success=False, output="", error=f"Invalid pattern: {e}")

        root = resolve_path(self.workspace, kwargs["path"])
        if not root.is_dir():
            return ToolResult(success=False, output="", error=f"Not a directory: {root}")

        glob = f"*.{kwargs['file_type'].lstrip('.')}" if kwargs.get("file_type") else "*"
        matches: list[str] = []
        for file in sorted(root.rglob(glob)):
            if not file.is_file() or any(part.startswith(".") for part in file.relative_to(root).parts):
                continue
            try:
                lines = file.read_text(encoding="utf-8").splitlines()
            except (OSError, UnicodeDecodeError):
                continue
            for lineno, line in enumerate(lines, start=1):
                if regex.search(line):
                    matches.append(f"{file.relative_to(root)}:{lineno}: {line.strip()}")
                    if len(matches) >= self.max_matches:
                        return ToolResult(success=True, output="\n".join(matches))

        if not matches:
            return ToolResult(success=True, output="No matches found")
        return ToolResult(success=True, output="\n".join(matches))
