"""CLI interface for myteam."""

from groq import AsyncGroq

from .agent import ROLE_NAMES, Backend, BackendError, GroqBackend, new_session_id
from .agent.roles import ORCHESTRATOR, ROLE_BUILDERS
from .config import Settings, load_settings
from .conversation_logger import ConversationLogger
from .logging import configure_logger, get_logger
from .memory import MemoryStore, StoreUnavailableError
from .team import SessionBusyError, Team, TeamReply

BANNER = """
╔══════════════════════════════════════════╗
║              myteam v0.1.0               ║
║      Your personal team of agents        ║
╚══════════════════════════════════════════╝

Commands:
  /agent <role>  - Talk to a specific agent
  /agents        - List agents
  /tasks         - Show tasks
  /prefs         - Show learned preferences
  /memories      - Show recent memories
  /sessions      - List stored sessions
  /reset         - Start a new session
  /help          - Show this help
  /exit, /quit   - Exit the CLI

Type your message and press Enter.
"""


class CLI:
    """Interactive command-line interface for the agent team."""

    def __init__(
        self,
        settings: Settings | None = None,
        backend: Backend | None = None,
        store: MemoryStore | None = None,
    ) -> None:
        self.settings = settings or load_settings()

        if store is None:
            assert self.settings.db_path is not None
            store = MemoryStore(self.settings.db_path)
        self.store = store
        self.store.init_db()

        self.backend = backend or GroqBackend(AsyncGroq(api_key=self.settings.api_key))
        assert self.settings.log_dir is not None
        self.conversation_logger = ConversationLogger(self.settings.log_dir / "conversations")
        self.logger = get_logger()
        self.role = ORCHESTRATOR
        self.team = self._new_team()

    @property
    def session_id(self) -> str:
        return self.team.session_id

    def _new_team(self) -> Team:
        team = Team(
            self.store,
            self.backend,
            self.settings,
            session_id=new_session_id(),
            conversation_logger=self.conversation_logger,
            logger=self.logger,
        )
        self.logger.set_session_id(team.session_id)
        self.logger.log("session_start", session_id=team.session_id)
        return team

    def _reset(self) -> None:
        """Start a new session."""
        old_session_id = self.session_id
        self.team = self._new_team()
        self.logger.log(
            "session_reset", old_session_id=old_session_id, session_id=self.session_id
        )
        print(f"\n✓ New session: {self.session_id}")

    def _format_reply(self, reply: TeamReply) -> str:
        """Format one agent's reply for display."""
        output = ["\n" + "─" * 40, f"{reply.name}: {reply.result.visible_text}"]
        if reply.result.delegate_to:
            output.append(f"→ handing off to {reply.result.delegate_to}")
        if reply.result.memories_stored:
            output.append(f"✎ remembered {len(reply.result.memories_stored)} item(s)")
        output.append("─" * 40)
        return "\n".join(output)

    def _format_tasks(self) -> str:
        tasks = self.store.get_tasks()
        if not tasks:
            return "No tasks."
        lines = []
        for task in tasks[:20]:
            owner = f" (@{task.assigned_role})" if task.assigned_role else ""
            lines.append(f"[{task.status.value}] {task.id}: {task.description}{owner}")
        return "\n".join(lines)

    def _format_preferences(self) -> str:
        preferences = self.store.get_preferences()
        if not preferences:
            return "No preferences learned yet."
        return "\n".join(f"[{p.category}] {p.key}: {p.value}" for p in preferences)

    def _format_memories(self) -> str:
        memories = self.store.get_memories(limit=20)
        if not memories:
            return "No memories yet."
        return "\n".join(
            f"[{m.kind.value}] {m.content}" + (f" (@{m.agent_role})" if m.agent_role else "")
            for m in memories
        )

    def _format_sessions(self) -> str:
        sessions = self.store.list_sessions()
        if not sessions:
            return "No sessions yet."
        return "\n".join(
            f" {'*' if session_id == self.session_id else ' '} {session_id}"
            for session_id in sessions[:20]
        )

    async def _process_message(self, message: str) -> None:
        """Send a message to the current agent and print the replies."""
        try:
            replies = await self.team.chat(message, role=self.role)
        except SessionBusyError as e:
            print(f"\n⏳ {e}")
            return
        except (BackendError, StoreUnavailableError) as e:
            print(f"\n❌ Error: {e}")
            self.logger.log("error", session_id=self.session_id, agent_role=self.role, error=str(e))
            return

        for reply in replies:
            print(self._format_reply(reply))

    async def _handle_command(self, command: str) -> bool:
        """Handle a special command. Returns True if should continue, False to exit."""
        parts = command.strip().split()
        cmd = parts[0].lower() if parts else ""

        if cmd in ("/exit", "/quit", "exit", "quit"):
            print("\n👋 Goodbye!")
            self.logger.log("session_end", session_id=self.session_id)
            return False

        if cmd == "/agent":
            if len(parts) != 2 or parts[1].lower() not in ROLE_NAMES:
                print(f"Usage: /agent <{'|'.join(ROLE_NAMES)}>")
            else:
                self.role = parts[1].lower()
                print(f"Now talking to {self.role}.")
        elif cmd == "/agents":
            for role in ROLE_NAMES:
                marker = "*" if role == self.role else " "
                config = ROLE_BUILDERS[role](self.store, self.settings)
                print(f" {marker} {role:<13} {config.description}")
        elif cmd == "/tasks":
            print(self._format_tasks())
        elif cmd == "/prefs":
            print(self._format_preferences())
        elif cmd == "/memories":
            print(self._format_memories())
        elif cmd == "/sessions":
            print(self._format_sessions())
        elif cmd == "/reset":
            self._reset()
        elif cmd == "/help":
            print(BANNER)
        else:
            print(f"Unknown command: {cmd}. Type /help.")

        return True

    async def run(self) -> None:
        """Run the interactive CLI."""
        print(BANNER)
        print(f"Session: {self.session_id}\n")

        try:
            while True:
                try:
                    user_input = input(f"you → {self.role}> ").strip()
                except KeyboardInterrupt:
                    print("\n\n⚡ Interrupted")
                    break
                except EOFError:
                    print("\n👋 Goodbye!")
                    break

                if not user_input:
                    continue

                if user_input.startswith("/") or user_input.lower() in ("exit", "quit"):
                    if not await self._handle_command(user_input):
                        break
                    continue

                await self._process_message(user_input)
        finally:
            self.store.close()


async def run_cli() -> None:
    """Run the CLI with configuration from the environment."""
    settings = load_settings()
    configure_logger(settings.log_dir)

    if not settings.api_key:
        print("❌ Error: GROQ_API_KEY environment variable not set")
        print("Please set it in your .env file or environment")
        return

    cli = CLI(settings=settings)
    await cli.run()
