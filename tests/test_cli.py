"""Tests for the CLI."""

from pathlib import Path

import pytest

from myteam.agent import BackendError
from myteam.cli import CLI
from myteam.config import Settings
from myteam.logging import configure_logger
from myteam.memory import Memory, MemoryKind, Preference, Task


class FailingBackend:
    async def complete(self, **kwargs):
        raise BackendError("service unavailable")


@pytest.fixture
def cli_settings(tmp_path: Path) -> Settings:
    return Settings(api_key="test-key", home_dir=tmp_path / "home")


@pytest.fixture(autouse=True)
def isolated_logger(tmp_path: Path):
    configure_logger(tmp_path / "app-logs")


def make_cli(settings: Settings, backend) -> CLI:
    return CLI(settings=settings, backend=backend)


class TestCLICommands:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("command", ["/exit", "/quit", "exit"])
    async def test_exit(self, command, cli_settings, scripted):
        cli = make_cli(cli_settings, scripted([]))
        assert await cli._handle_command(command) is False

    @pytest.mark.asyncio
    async def test_switch_agent(self, cli_settings, scripted, capsys):
        cli = make_cli(cli_settings, scripted([]))

        assert await cli._handle_command("/agent research") is True
        assert cli.role == "research"

        await cli._handle_command("/agent intern")
        assert cli.role == "research"
        assert "Usage" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_agents_listing(self, cli_settings, scripted, capsys):
        cli = make_cli(cli_settings, scripted([]))
        await cli._handle_command("/agents")

        out = capsys.readouterr().out
        for role in ("orchestrator", "dev", "research", "comms", "workflow"):
            assert role in out
        assert "* orchestrator" in out

    @pytest.mark.asyncio
    async def test_tasks_prefs_memories(self, cli_settings, scripted, capsys):
        cli = make_cli(cli_settings, scripted([]))

        await cli._handle_command("/tasks")
        await cli._handle_command("/prefs")
        await cli._handle_command("/memories")
        out = capsys.readouterr().out
        assert "No tasks." in out
        assert "No preferences learned yet." in out
        assert "No memories yet." in out

        cli.store.save_task(Task(description="write docs", assigned_role="comms"))
        cli.store.save_preference(Preference(key="tone", value="casual", category="comms"))
        cli.store.save_memory(Memory(kind=MemoryKind.FACT, content="likes tea", agent_role="dev"))

        await cli._handle_command("/tasks")
        await cli._handle_command("/prefs")
        await cli._handle_command("/memories")
        out = capsys.readouterr().out
        assert "write docs (@comms)" in out
        assert "[comms] tone: casual" in out
        assert "[fact] likes tea (@dev)" in out

    @pytest.mark.asyncio
    async def test_reset_starts_new_session(self, cli_settings, scripted):
        cli = make_cli(cli_settings, scripted([]))
        old = cli.session_id

        await cli._handle_command("/reset")

        assert cli.session_id != old

    @pytest.mark.asyncio
    async def test_sessions_listing_marks_current(
        self, cli_settings, scripted, responses, capsys
    ):
        cli = make_cli(cli_settings, scripted([responses.final("Hi."), responses.final("Hey.")]))

        await cli._handle_command("/sessions")
        assert "No sessions yet." in capsys.readouterr().out

        await cli._process_message("hello")
        first = cli.session_id
        await cli._handle_command("/reset")
        await cli._process_message("hello again")
        capsys.readouterr()

        await cli._handle_command("/sessions")
        lines = capsys.readouterr().out.splitlines()
        assert lines == [f" * {cli.session_id}", f"   {first}"]

    @pytest.mark.asyncio
    async def test_unknown_command(self, cli_settings, scripted, capsys):
        cli = make_cli(cli_settings, scripted([]))
        assert await cli._handle_command("/dance") is True
        assert "Unknown command" in capsys.readouterr().out


class TestCLIMessages:
    @pytest.mark.asyncio
    async def test_prints_replies(self, cli_settings, scripted, responses, capsys):
        backend = scripted([
            responses.final("Asking research. [DELEGATE:research][REMEMBER:fact|wants numbers]"),
            responses.final("Numbers attached."),
        ])
        cli = make_cli(cli_settings, backend)

        await cli._process_message("how big is the market?")

        out = capsys.readouterr().out
        assert "Orchestrator: Asking research." in out
        assert "→ handing off to research" in out
        assert "✎ remembered 1 item(s)" in out
        assert "Research: Numbers attached." in out
        assert "[DELEGATE" not in out

    @pytest.mark.asyncio
    async def test_backend_error_reported(self, cli_settings, capsys):
        cli = make_cli(cli_settings, FailingBackend())

        await cli._process_message("hello")

        assert "Error: service unavailable" in capsys.readouterr().out
        assert [t.content for t in cli.store.get_history(cli.session_id)] == ["hello"]

    @pytest.mark.asyncio
    async def test_run_exits_on_eof(self, cli_settings, scripted, monkeypatch, capsys):
        cli = make_cli(cli_settings, scripted([]))

        def eof(prompt):
            raise EOFError

        monkeypatch.setattr("builtins.input", eof)
        await cli.run()

        assert "Goodbye" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_run_processes_input(self, cli_settings, scripted, responses, monkeypatch, capsys):
        cli = make_cli(cli_settings, scripted([responses.final("Hi!")]))
        inputs = iter(["", "hello", "/exit"])
        monkeypatch.setattr("builtins.input", lambda prompt: next(inputs))

        await cli.run()

        assert "Orchestrator: Hi!" in capsys.readouterr().out
