"""Agent loop and core logic."""

from .backend import Backend, BackendError, BackendResponse, GroqBackend, ToolCall
from .directives import Extraction, extract
from .loop import AgentConfig, AgentLoop, StopReason, TurnResult, new_session_id
from .prompt import PromptBuilder
from .roles import ROLE_NAMES, RoleConfig, build_role

__all__ = [
    "AgentConfig",
    "AgentLoop",
    "Backend",
    "BackendError",
    "BackendResponse",
    "Extraction",
    "GroqBackend",
    "PromptBuilder",
    "ROLE_NAMES",
    "RoleConfig",
    "StopReason",
    "ToolCall",
    "TurnResult",
    "build_role",
    "extract",
    "new_session_id",
]
