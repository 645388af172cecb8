"""Tests for file tools."""

from pathlib import Path

import pytest

from myteam.tools import ListDirectoryTool, ReadFileTool, SearchCodeTool, WriteFileTool


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "workspace"
    (root / "src").mkdir(parents=True)
    (root / "src" / "app.py").write_text("def main():\n    return 42\n")
    (root / "src" / "util.ts").write_text("export function main() {}\n")
    (root / ".git").mkdir()
    (root / ".git" / "config").write_text("main = yes\n")
    (root / "README.md").write_text("# Demo\n")
    return root


class TestReadFileTool:
    @pytest.mark.asyncio
    async def test_reads_relative_path(self, workspace: Path):
        result = await ReadFileTool(workspace).execute(path="README.md")
        assert result.success
        assert result.output == "# Demo\n"

    @pytest.mark.asyncio
    async def test_reads_absolute_path(self, workspace: Path):
        result = await ReadFileTool(workspace).execute(path=str(workspace / "README.md"))
        assert result.output == "# Demo\n"

    @pytest.mark.asyncio
    async def test_missing_file(self, workspace: Path):
        result = await ReadFileTool(workspace).execute(path="nope.txt")
        assert not result.success
        assert result.error.startswith("Error reading file")

    @pytest.mark.asyncio
    async def test_truncates(self, workspace: Path):
        (workspace / "big.txt").write_text("x" * 50)
        result = await ReadFileTool(workspace, max_chars=10).execute(path="big.txt")
        assert result.output == "x" * 10 + "\n... [content truncated]"

    def test_custom_name(self, workspace: Path):
        assert ReadFileTool(workspace, name="read_document").name == "read_document"


class TestWriteFileTool:
    @pytest.mark.asyncio
    async def test_creates_parents(self, workspace: Path):
        result = await WriteFileTool(workspace).execute(path="out/notes.txt", content="hello")

        assert result.success
        assert (workspace / "out" / "notes.txt").read_text() == "hello"
        assert result.output == f"File written: {workspace / 'out' / 'notes.txt'}"


class TestListDirectoryTool:
    @pytest.mark.asyncio
    async def test_lists_sorted(self, workspace: Path):
        result = await ListDirectoryTool(workspace).execute(path="src")
        assert result.output == "[FILE] app.py\n[FILE] util.ts"

    @pytest.mark.asyncio
    async def test_marks_directories(self, workspace: Path):
        result = await ListDirectoryTool(workspace).execute(path=".")
        assert "[DIR] src" in result.output.splitlines()
        assert "[FILE] README.md" in result.output.splitlines()

    @pytest.mark.asyncio
    async def test_empty(self, workspace: Path):
        (workspace / "empty").mkdir()
        result = await ListDirectoryTool(workspace).execute(path="empty")
        assert result.output == "(empty directory)"

    @pytest.mark.asyncio
    async def test_missing(self, workspace: Path):
        result = await ListDirectoryTool(workspace).execute(path="missing")
        assert not result.success


class TestSearchCodeTool:
    @pytest.mark.asyncio
    async def test_finds_matches_skipping_hidden(self, workspace: Path):
        result = await SearchCodeTool(workspace).execute(pattern=r"main", path=".")

        assert result.success
        lines = result.output.splitlines()
        assert lines == [
            f"{Path('src/app.py')}:1: def main():",
            f"{Path('src/util.ts')}:1: export function main() {{}}",
        ]

    @pytest.mark.asyncio
    async def test_file_type_filter(self, workspace: Path):
        result = await SearchCodeTool(workspace).execute(pattern="main", path=".", file_type="py")
        assert result.output == f"{Path('src/app.py')}:1: def main():"

    @pytest.mark.asyncio
    async def test_no_matches(self, workspace: Path):
        result = await SearchCodeTool(workspace).execute(pattern="zebra", path=".")
        assert result.output == "No matches found"

    @pytest.mark.asyncio
    async def test_match_cap(self, workspace: Path):
        (workspace / "many.txt").write_text("hit\n" * 10)
        result = await SearchCodeTool(workspace, max_matches=3).execute(pattern="hit", path=".")
        assert len(result.output.splitlines()) == 3

    @pytest.mark.asyncio
    async def test_invalid_pattern(self, workspace: Path):
        result = await SearchCodeTool(workspace).execute(pattern="(", path=".")
        assert not result.success
        assert result.error.startswith("Invalid pattern")

    @pytest.mark.asyncio
    async def test_not_a_directory(self, workspace: Path):
        result = await SearchCodeTool(workspace).execute(pattern="x", path="README.md")
        assert not result.success
        assert result.error.startswith("Not a directory")
