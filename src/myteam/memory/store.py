"""SQLite storage for memories, tasks, preferences and conversations."""

import json
import logging
import sqlite3
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .models import ConversationTurn, Memory, MemoryKind, Preference, Task, TaskStatus

logger = logging.getLogger(__name__)

TURN_ROLES = ("user", "assistant")

SCHEMA = """
CREATE TABLE IF NOT EXISTS memories (
    id          TEXT PRIMARY KEY,
    type        TEXT NOT NULL,
    content     TEXT NOT NULL,
    metadata    TEXT,
    agent_role  TEXT,
    created_at  TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS tasks (
    id            TEXT PRIMARY KEY,
    description   TEXT NOT NULL,
    status        TEXT NOT NULL DEFAULT 'pending'
                  CHECK (status IN ('pending', 'in_progress', 'completed', 'failed')),
    assigned_to   TEXT,
    result        TEXT,
    created_at    TEXT NOT NULL,
    completed_at  TEXT
);

CREATE TABLE IF NOT EXISTS preferences (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,
    category    TEXT NOT NULL,
    learned_at  TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS conversations (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id  TEXT NOT NULL,
    role        TEXT NOT NULL,
    content     TEXT NOT NULL,
    agent_role  TEXT,
    timestamp   TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_memories_type ON memories(type);
CREATE INDEX IF NOT EXISTS idx_memories_agent ON memories(agent_role);
CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);
CREATE INDEX IF NOT EXISTS idx_conversations_session ON conversations(session_id);
"""


class StoreUnavailableError(Exception):
    """Raised when the underlying database cannot complete an operation."""


def generate_id() -> str:
    """Generate a unique record id: epoch millis plus a random suffix."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _to_text(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat(timespec="microseconds")


def _from_text(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value)


def _escape_like(query: str) -> str:
    return query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class MemoryStore:
    """Persistent storage for the agent team using SQLite.

    A single store is shared by every agent and session. Each write is
    committed on its own; there are no transactions spanning a turn.
    The composer owns the lifecycle: call ``init_db`` before use and
    ``close`` when done.
    """

    def __init__(self, db_path: Path) -> None:
        """Initialize the store with a database path.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create the database connection."""
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self.db_path)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    @contextmanager
    def _guard(self, action: str) -> Iterator[sqlite3.Connection]:
        """Yield the connection, converting storage failures.

        A failed write is rolled back so a later commit can't persist it.
        """
        try:
            yield self._get_connection()
        except (sqlite3.Error, OSError) as e:
            self._rollback()
            raise StoreUnavailableError(f"Memory store could not {action}: {e}") from e

    def _rollback(self) -> None:
        """Discard any pending transaction on the connection."""
        if self._conn is None:
            return
        try:
            self._conn.rollback()
        except sqlite3.Error as e:
            logger.warning("Rollback failed on %s: %s", self.db_path, e)

    def init_db(self) -> None:
        """Create the tables and indexes if they don't exist."""
        with self._guard("initialize schema") as conn:
            conn.executescript(SCHEMA)
            conn.commit()

    # Memories

    def save_memory(self, memory: Memory) -> Memory:
        """Append a memory.

        Args:
            memory: The memory to save. Its id and created_at are ignored.

        Returns:
            The memory with its assigned id and created_at.

        Raises:
            ValueError: If the content is empty.
            StoreUnavailableError: If the write fails.
        """
        if not memory.content.strip():
            raise ValueError("Memory content must not be empty")

        saved = replace(memory, id=generate_id(), created_at=_now())
        with self._guard("save memory") as conn:
            conn.execute(
                """
                INSERT INTO memories (id, type, content, metadata, agent_role, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    saved.id,
                    MemoryKind(saved.kind).value,
                    saved.content,
                    json.dumps(saved.metadata),
                    saved.agent_role,
                    _to_text(saved.created_at),
                ),
            )
            conn.commit()
        return saved

    def get_memories(
        self,
        kind: MemoryKind | None = None,
        agent_role: str | None = None,
        limit: int = 50,
    ) -> list[Memory]:
        """Get memories, most recent first.

        Args:
            kind: Only return memories of this kind.
            agent_role: Only return memories owned by this role.
            limit: Maximum number of memories to return.
        """
        query = "SELECT * FROM memories WHERE 1=1"
        params: list[Any] = []
        if kind is not None:
            query += " AND type = ?"
            params.append(MemoryKind(kind).value)
        if agent_role is not None:
            query += " AND agent_role = ?"
            params.append(agent_role)
        query += " ORDER BY created_at DESC, rowid DESC LIMIT ?"
        params.append(limit)

        with self._guard("read memories") as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_memory(row) for row in rows]

    def search_memories(self, query: str, limit: int = 20) -> list[Memory]:
        """Find memories whose content contains ``query``, most recent first."""
        with self._guard("search memories") as conn:
            rows = conn.execute(
                """
                SELECT * FROM memories
                WHERE content LIKE ? ESCAPE '\\'
                ORDER BY created_at DESC, rowid DESC
                LIMIT ?
                """,
                (f"%{_escape_like(query)}%", limit),
            ).fetchall()
        return [self._row_to_memory(row) for row in rows]

    # Preferences

    def save_preference(self, preference: Preference) -> Preference:
        """Insert or overwrite the preference for ``preference.key``.

        Returns:
            The preference with its learned_at timestamp.

        Raises:
            ValueError: If the key or value is empty.
            StoreUnavailableError: If the write fails.
        """
        if not preference.key.strip() or not preference.value.strip():
            raise ValueError("Preference key and value must not be empty")

        saved = replace(preference, learned_at=_now())
        with self._guard("save preference") as conn:
            conn.execute(
                """
                INSERT INTO preferences (key, value, category, learned_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    category = excluded.category,
                    learned_at = excluded.learned_at
                """,
                (saved.key, saved.value, saved.category, _to_text(saved.learned_at)),
            )
            conn.commit()
        return saved

    def get_preference(self, key: str) -> Preference | None:
        """Get the current preference for a key, if any."""
        with self._guard("read preference") as conn:
            row = conn.execute(
                "SELECT * FROM preferences WHERE key = ?", (key,)
            ).fetchone()
        return self._row_to_preference(row) if row else None

    def get_preferences(self, category: str | None = None) -> list[Preference]:
        """Get preferences, most recently learned first."""
        query = "SELECT * FROM preferences"
        params: list[Any] = []
        if category is not None:
            query += " WHERE category = ?"
            params.append(category)
        query += " ORDER BY learned_at DESC, key"

        with self._guard("read preferences") as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_preference(row) for row in rows]

    def delete_preference(self, key: str) -> bool:
        """Delete a preference. Returns True if one was removed."""
        with self._guard("delete preference") as conn:
            cursor = conn.execute("DELETE FROM preferences WHERE key = ?", (key,))
            conn.commit()
        return cursor.rowcount > 0

    # Tasks

    def save_task(self, task: Task) -> Task:
        """Create a task and return it with its id and created_at."""
        if not task.description.strip():
            raise ValueError("Task description must not be empty")

        saved = replace(task, id=generate_id(), created_at=_now())
        with self._guard("save task") as conn:
            conn.execute(
                """
                INSERT INTO tasks
                    (id, description, status, assigned_to, result, created_at, completed_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    saved.id,
                    saved.description,
                    TaskStatus(saved.status).value,
                    saved.assigned_role,
                    saved.result,
                    _to_text(saved.created_at),
                    _to_text(saved.completed_at),
                ),
            )
            conn.commit()
        return saved

    def update_task(
        self,
        task_id: str,
        status: TaskStatus | None = None,
        result: str | None = None,
        completed_at: datetime | None = None,
    ) -> Task | None:
        """Update a task in place.

        Only the given fields change. Returns the updated task, or None
        if no task has this id.
        """
        sets: list[str] = []
        params: list[Any] = []
        if status is not None:
            sets.append("status = ?")
            params.append(TaskStatus(status).value)
        if result is not None:
            sets.append("result = ?")
            params.append(result)
        if completed_at is not None:
            sets.append("completed_at = ?")
            params.append(_to_text(completed_at))

        if sets:
            params.append(task_id)
            with self._guard("update task") as conn:
                conn.execute(f"UPDATE tasks SET {', '.join(sets)} WHERE id = ?", params)
                conn.commit()
        return self.get_task(task_id)

    def get_task(self, task_id: str) -> Task | None:
        """Get a task by its exact id."""
        with self._guard("read task") as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        return self._row_to_task(row) if row else None

    def find_task(self, partial_id: str) -> Task | None:
        """Get a task by exact id, or else the newest task whose id contains ``partial_id``."""
        task = self.get_task(partial_id)
        if task is not None or not partial_id:
            return task
        with self._guard("read task") as conn:
            row = conn.execute(
                """
                SELECT * FROM tasks WHERE id LIKE ? ESCAPE '\\'
                ORDER BY created_at DESC, rowid DESC LIMIT 1
                """,
                (f"%{_escape_like(partial_id)}%",),
            ).fetchone()
        return self._row_to_task(row) if row else None

    def get_tasks(
        self,
        status: TaskStatus | None = None,
        assigned_role: str | None = None,
    ) -> list[Task]:
        """Get tasks, newest first, optionally filtered."""
        query = "SELECT * FROM tasks WHERE 1=1"
        params: list[Any] = []
        if status is not None:
            query += " AND status = ?"
            params.append(TaskStatus(status).value)
        if assigned_role is not None:
            query += " AND assigned_to = ?"
            params.append(assigned_role)
        query += " ORDER BY created_at DESC, rowid DESC"

        with self._guard("read tasks") as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_task(row) for row in rows]

    # Conversations

    def append_turn(
        self,
        session_id: str,
        role: str,
        content: str,
        agent_role: str | None = None,
    ) -> ConversationTurn:
        """Append a turn to a session's conversation log.

        The timestamp never goes backwards within a session, even if the
        wall clock does.

        Raises:
            ValueError: If role is not 'user' or 'assistant'.
            StoreUnavailableError: If the write fails.
        """
        if role not in TURN_ROLES:
            raise ValueError(f"Invalid turn role: {role!r}")

        timestamp = _now()
        with self._guard("append conversation turn") as conn:
            row = conn.execute(
                "SELECT MAX(timestamp) AS latest FROM conversations WHERE session_id = ?",
                (session_id,),
            ).fetchone()
            latest = _from_text(row["latest"])
            if latest is not None and latest > timestamp:
                timestamp = latest
            conn.execute(
                """
                INSERT INTO conversations (session_id, role, content, agent_role, timestamp)
                VALUES (?, ?, ?, ?, ?)
                """,
                (session_id, role, content, agent_role, _to_text(timestamp)),
            )
            conn.commit()

        return ConversationTurn(
            session_id=session_id,
            role=role,
            content=content,
            agent_role=agent_role,
            timestamp=timestamp,
        )

    def get_history(self, session_id: str, limit: int | None = None) -> list[ConversationTurn]:
        """Get a session's turns in chronological order (oldest first).

        Args:
            session_id: The session to read.
            limit: If given, only the most recent ``limit`` turns.
        """
        with self._guard("read conversation history") as conn:
            if limit is None:
                rows = conn.execute(
                    """
                    SELECT * FROM conversations WHERE session_id = ?
                    ORDER BY timestamp ASC, id ASC
                    """,
                    (session_id,),
                ).fetchall()
            else:
                rows = conn.execute(
                    """
                    SELECT * FROM conversations WHERE session_id = ?
                    ORDER BY timestamp DESC, id DESC LIMIT ?
                    """,
                    (session_id, limit),
                ).fetchall()
                rows = list(reversed(rows))
        return [self._row_to_turn(row) for row in rows]

    def list_sessions(self) -> list[str]:
        """List session ids, most recently active first."""
        with self._guard("list sessions") as conn:
            rows = conn.execute(
                """
                SELECT session_id, MAX(timestamp) AS latest, MAX(id) AS last_id
                FROM conversations GROUP BY session_id ORDER BY latest DESC, last_id DESC
                """
            ).fetchall()
        return [row["session_id"] for row in rows]

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _row_to_memory(self, row: sqlite3.Row) -> Memory:
        return Memory(
            id=row["id"],
            kind=MemoryKind(row["type"]),
            content=row["content"],
            metadata=json.loads(row["metadata"] or "{}"),
            agent_role=row["agent_role"],
            created_at=_from_text(row["created_at"]),
        )

    def _row_to_preference(self, row: sqlite3.Row) -> Preference:
        return Preference(
            key=row["key"],
            value=row["value"],
            category=row["category"],
            learned_at=_from_text(row["learned_at"]),
        )

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        return Task(
            id=row["id"],
            description=row["description"],
            status=TaskStatus(row["status"]),
            assigned_role=row["assigned_to"],
            result=row["result"],
            created_at=_from_text(row["created_at"]),
            completed_at=_from_text(row["completed_at"]),
        )

    def _row_to_turn(self, row: sqlite3.Row) -> ConversationTurn:
        return ConversationTurn(
            session_id=row["session_id"],
            role=row["role"],
            content=row["content"],
            agent_role=row["agent_role"],
            timestamp=_from_text(row["timestamp"]),
        )
