"""Runtime configuration loaded from environment variables."""

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_MODEL = "llama-3.3-70b-versatile"
DEFAULT_MAX_ROUNDS = 25


@dataclass
class Settings:
    """Settings shared by every agent in the team.

    Attributes:
        api_key: Groq API key.
        model: Default model for all roles.
        home_dir: Base directory for data and logs.
        db_path: SQLite database file (defaults to home_dir/team.db).
        log_dir: Log directory (defaults to home_dir/logs).
        workspace_dir: Directory file tools resolve relative paths against.
        max_rounds: Backend rounds allowed per turn, None for unbounded.
    """

    api_key: str | None = None
    model: str = DEFAULT_MODEL
    home_dir: Path | None = None
    db_path: Path | None = None
    log_dir: Path | None = None
    workspace_dir: Path | None = None
    max_rounds: int | None = DEFAULT_MAX_ROUNDS

    def __post_init__(self) -> None:
        if self.home_dir is None:
            self.home_dir = Path.home() / ".myteam"
        if self.db_path is None:
            self.db_path = self.home_dir / "team.db"
        if self.log_dir is None:
            self.log_dir = self.home_dir / "logs"
        if self.workspace_dir is None:
            self.workspace_dir = self.home_dir / "workspace"
        if self.max_rounds is not None and self.max_rounds < 1:
            raise ValueError("max_rounds must be at least 1 (or None for unbounded)")

    @property
    def drafts_dir(self) -> Path:
        assert self.workspace_dir is not None
        return self.workspace_dir / "drafts"

    @property
    def workflows_dir(self) -> Path:
        assert self.home_dir is not None
        return self.home_dir / "workflows"


def _path_from_env(name: str) -> Path | None:
    value = os.getenv(name)
    return Path(value).expanduser() if value else None


def load_settings() -> Settings:
    """Load settings from environment variables.

    Raises:
        ValueError: If MYTEAM_MAX_ROUNDS is not an integer.
    """
    raw_rounds = os.getenv("MYTEAM_MAX_ROUNDS", str(DEFAULT_MAX_ROUNDS))
    try:
        max_rounds = int(raw_rounds)
    except ValueError:
        raise ValueError(f"MYTEAM_MAX_ROUNDS must be an integer, got {raw_rounds!r}") from None

    return Settings(
        api_key=os.getenv("GROQ_API_KEY"),
        model=os.getenv("MYTEAM_MODEL", DEFAULT_MODEL),
        home_dir=_path_from_env("MYTEAM_HOME"),
        db_path=_path_from_env("MYTEAM_DB_PATH"),
        log_dir=_path_from_env("MYTEAM_LOG_DIR"),
        workspace_dir=_path_from_env("MYTEAM_WORKSPACE"),
        max_rounds=max_rounds if max_rounds > 0 else None,
    )
