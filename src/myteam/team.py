"""Team of agents sharing one session, following delegation hand-offs."""

from dataclasses import dataclass

from .agent import AgentConfig, AgentLoop, Backend, TurnResult, build_role, new_session_id
from .agent.roles import ORCHESTRATOR, ROLE_NAMES
from .config import Settings
from .conversation_logger import ConversationLogger
from .logging import JSONLLogger, get_logger
from .memory import MemoryStore


class SessionBusyError(Exception):
    """Raised when a turn is started while another is running on the session."""


@dataclass
class TeamReply:
    """One agent's reply within a team exchange."""

    role: str
    name: str
    result: TurnResult


class Team:
    """All built-in agents on one shared session.

    A message goes to one agent. If its reply delegates to another known
    agent, that agent answers the same message on the same session. Only
    one hand-off is followed per message.
    """

    BUSY_MESSAGE = "Still working on the previous message. Wait for it to finish."

    def __init__(
        self,
        store: MemoryStore,
        backend: Backend,
        settings: Settings,
        session_id: str | None = None,
        conversation_logger: ConversationLogger | None = None,
        logger: JSONLLogger | None = None,
    ) -> None:
        self.store = store
        self.backend = backend
        self.settings = settings
        self.session_id = session_id or new_session_id()
        self.conversation_logger = conversation_logger
        self.logger = logger or get_logger()
        self.config = AgentConfig(model=settings.model, max_rounds=settings.max_rounds)
        self._agents: dict[str, AgentLoop] = {}
        self._busy = False

    def agent(self, role: str) -> AgentLoop:
        """Get (or create) the agent for a role on this session.

        Raises:
            KeyError: If the role is unknown.
        """
        if role not in self._agents:
            self._agents[role] = AgentLoop(
                build_role(role, self.store, self.settings),
                self.store,
                backend=self.backend,
                session_id=self.session_id,
                config=self.config,
                conversation_logger=self.conversation_logger,
            )
        return self._agents[role]

    def is_busy(self) -> bool:
        return self._busy

    async def chat(self, message: str, role: str = ORCHESTRATOR) -> list[TeamReply]:
        """Send a message to an agent and follow at most one delegation.

        Raises:
            SessionBusyError: If a turn is already running on this session.
            KeyError: If the role is unknown.
        """
        if self._busy:
            raise SessionBusyError(self.BUSY_MESSAGE)

        self._busy = True
        try:
            replies = [await self._turn(role, message)]

            target = replies[0].result.delegate_to
            if target and target != role:
                followed = target in ROLE_NAMES
                self.logger.log_delegation(
                    role, target, session_id=self.session_id, followed=followed
                )
                if followed:
                    replies.append(await self._turn(target, message))
            return replies
        finally:
            self._busy = False

    async def _turn(self, role: str, message: str) -> TeamReply:
        agent = self.agent(role)
        result = await agent.run_turn(message)
        self.logger.log_turn(
            role,
            result.stop_reason.value,
            session_id=self.session_id,
            rounds=result.rounds,
            delegate_to=result.delegate_to,
            memories_stored=len(result.memories_stored),
        )
        return TeamReply(role=role, name=agent.get_name(), result=result)
