"""Built-in personas: prompts and private tool sets."""

from dataclasses import dataclass, field

from ..config import Settings
from ..memory import (
    ForgetPreferenceTool,
    MemoryStore,
    SaveFindingTool,
    SavePreferenceTool,
    SearchKnowledgeTool,
)
from ..tools import (
    CreateTaskTool,
    FetchUrlTool,
    GetTemplateTool,
    ListDirectoryTool,
    ListTasksTool,
    ListWorkflowsTool,
    ReadFileTool,
    SaveDraftTool,
    SaveWorkflowTool,
    SearchCodeTool,
    ToolRegistry,
    UpdateTaskTool,
    WriteFileTool,
)

ORCHESTRATOR = "orchestrator"
DEV = "dev"
RESEARCH = "research"
COMMS = "comms"
WORKFLOW = "workflow"

ROLE_NAMES = (ORCHESTRATOR, DEV, RESEARCH, COMMS, WORKFLOW)
SPECIALISTS = (DEV, RESEARCH, COMMS, WORKFLOW)


@dataclass
class RoleConfig:
    """A named persona: static prompt plus its own tool registry."""

    role: str
    name: str
    description: str
    system_prompt: str
    registry: ToolRegistry = field(default_factory=ToolRegistry)
    model: str | None = None


DIRECTIVES_GUIDE = """
Control markers (hidden from the user):
- [DELEGATE:<role>] hands the conversation to a teammate: dev, research, comms, workflow.
- [REMEMBER:<kind>|<content>] stores a memory. Kinds: preference, fact, task, conversation.
  For preferences you can write "key: value" to keep a named preference."""

ORCHESTRATOR_PROMPT = """You run a small team of specialist agents for one person, your boss.

Rules:
- Answer in one to three sentences.
- Act instead of describing what you could do.
- Never list your capabilities or ask how you can help.
- If you are missing something you need, ask exactly one question.

Route work to the right specialist:
- dev: code, debugging, files
- research: looking things up and summarizing
- comms: emails, documents, announcements
- workflow: tasks, plans, repeatable processes
""" + DIRECTIVES_GUIDE

DEV_PROMPT = """You are the team's developer. Your boss wants working code, fast.

Rules:
- Show code, not explanations.
- Fix problems instead of diagnosing them at length.
- If you need specifics, ask one question.

You can read, write and list files and search code in the workspace.
""" + DIRECTIVES_GUIDE

RESEARCH_PROMPT = """You are the team's researcher. You find, check and summarize information.

- Research thoroughly and keep summaries organized with bullets and headers.
- Cite sources when you have them.
- Check saved knowledge before fetching new pages.
- Save findings worth keeping with save_finding.
""" + DIRECTIVES_GUIDE

COMMS_PROMPT = """You are the team's writer. You draft emails, documents and announcements.

Rules:
- Give the draft itself, no preamble.
- Match the boss's tone, professional unless told otherwise.
- If you need a recipient or context, ask one question.

You can read documents, start from templates and save drafts.
""" + DIRECTIVES_GUIDE

WORKFLOW_PROMPT = """You are the team's productivity specialist.

- Track tasks across projects and keep their status current.
- Break large projects into small, concrete tasks.
- Turn repeated processes into saved workflows.
- Follow up on tasks that are stuck.
""" + DIRECTIVES_GUIDE


def build_orchestrator(store: MemoryStore, settings: Settings) -> RoleConfig:
    return RoleConfig(
        role=ORCHESTRATOR,
        name="Orchestrator",
        description="Routes requests, tracks tasks, learns preferences",
        system_prompt=ORCHESTRATOR_PROMPT,
        registry=ToolRegistry([
            CreateTaskTool(store, list(SPECIALISTS)),
            ListTasksTool(store, list(SPECIALISTS)),
            UpdateTaskTool(store),
            SavePreferenceTool(store),
            ForgetPreferenceTool(store),
        ]),
    )


def build_dev(store: MemoryStore, settings: Settings) -> RoleConfig:
    assert settings.workspace_dir is not None
    return RoleConfig(
        role=DEV,
        name="Dev",
        description="Code, debugging, architecture",
        system_prompt=DEV_PROMPT,
        registry=ToolRegistry([
            ReadFileTool(settings.workspace_dir),
            WriteFileTool(settings.workspace_dir),
            ListDirectoryTool(settings.workspace_dir),
            SearchCodeTool(settings.workspace_dir),
        ]),
    )


def build_research(store: MemoryStore, settings: Settings) -> RoleConfig:
    return RoleConfig(
        role=RESEARCH,
        name="Research",
        description="Finds and synthesizes information",
        system_prompt=RESEARCH_PROMPT,
        registry=ToolRegistry([
            FetchUrlTool(),
            SearchKnowledgeTool(store),
            SaveFindingTool(store, agent_role=RESEARCH),
        ]),
    )


def build_comms(store: MemoryStore, settings: Settings) -> RoleConfig:
    assert settings.workspace_dir is not None
    return RoleConfig(
        role=COMMS,
        name="Comms",
        description="Emails, docs, reports",
        system_prompt=COMMS_PROMPT,
        registry=ToolRegistry([
            ReadFileTool(settings.workspace_dir, name="read_document"),
            SaveDraftTool(settings.drafts_dir),
            GetTemplateTool(),
        ]),
    )


def build_workflow(store: MemoryStore, settings: Settings) -> RoleConfig:
    return RoleConfig(
        role=WORKFLOW,
        name="Workflow",
        description="Tasks, planning, automation",
        system_prompt=WORKFLOW_PROMPT,
        registry=ToolRegistry([
            CreateTaskTool(store, list(ROLE_NAMES)),
            ListTasksTool(store, list(ROLE_NAMES)),
            UpdateTaskTool(store),
            SaveWorkflowTool(settings.workflows_dir),
            ListWorkflowsTool(settings.workflows_dir),
        ]),
    )


ROLE_BUILDERS = {
    ORCHESTRATOR: build_orchestrator,
    DEV: build_dev,
    RESEARCH: build_research,
    COMMS: build_comms,
    WORKFLOW: build_workflow,
}


def build_role(role: str, store: MemoryStore, settings: Settings) -> RoleConfig:
    """Build the configuration for a built-in role.

    Raises:
        KeyError: If the role is unknown.
    """
    if role not in ROLE_BUILDERS:
        raise KeyError(f"Unknown role: {role}")
    config = ROLE_BUILDERS[role](store, settings)
    config.model = settings.model
    return config
