"""Tool registry and tool implementations."""

from .base import Tool, ToolResult
from .documents import GetTemplateTool, SaveDraftTool
from .files import ListDirectoryTool, ReadFileTool, SearchCodeTool, WriteFileTool
from .registry import ToolRegistry
from .tasks import CreateTaskTool, ListTasksTool, UpdateTaskTool
from .web_fetch import FetchUrlTool
from .workflows import ListWorkflowsTool, SaveWorkflowTool

__all__ = [
    "CreateTaskTool",
    "FetchUrlTool",
    "GetTemplateTool",
    "ListDirectoryTool",
    "ListTasksTool",
    "ListWorkflowsTool",
    "ReadFileTool",
    "SaveDraftTool",
    "SaveWorkflowTool",
    "SearchCodeTool",
    "Tool",
    "ToolRegistry",
    "ToolResult",
    "UpdateTaskTool",
    "WriteFileTool",
]
