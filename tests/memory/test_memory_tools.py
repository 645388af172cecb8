"""Tests for memory tools."""

import pytest

from myteam.memory import (
    ForgetPreferenceTool,
    Memory,
    MemoryKind,
    MemoryStore,
    Preference,
    SaveFindingTool,
    SavePreferenceTool,
    SearchKnowledgeTool,
)


class TestSavePreferenceTool:
    @pytest.mark.asyncio
    async def test_saves_preference(self, store: MemoryStore):
        tool = SavePreferenceTool(store)
        result = await tool.execute(key="tone", value="casual", category="comms")

        assert result.success
        assert result.output == "Preference saved: tone = casual"
        assert store.get_preference("tone").category == "comms"

    @pytest.mark.asyncio
    async def test_blank_category_becomes_general(self, store: MemoryStore):
        tool = SavePreferenceTool(store)
        await tool.execute(key="tone", value="casual", category="  ")
        assert store.get_preference("tone").category == "general"

    @pytest.mark.asyncio
    async def test_requires_key_and_value(self, store: MemoryStore):
        tool = SavePreferenceTool(store)
        result = await tool.execute(key="tone", value=" ", category="comms")

        assert not result.success
        assert store.get_preferences() == []


class TestForgetPreferenceTool:
    @pytest.mark.asyncio
    async def test_forgets(self, store: MemoryStore):
        store.save_preference(Preference(key="tone", value="casual", category="comms"))
        result = await ForgetPreferenceTool(store).execute(key="tone")

        assert result.success
        assert "Forgot" in result.output
        assert store.get_preference("tone") is None

    @pytest.mark.asyncio
    async def test_missing_key_is_not_an_error(self, store: MemoryStore):
        result = await ForgetPreferenceTool(store).execute(key="tone")
        assert result.success
        assert "No preference stored" in result.output


class TestSearchKnowledgeTool:
    @pytest.mark.asyncio
    async def test_formats_matches(self, store: MemoryStore):
        store.save_memory(Memory(kind=MemoryKind.FACT, content="python 3.13 is out"))
        store.save_memory(Memory(kind=MemoryKind.TASK, content="upgrade python"))

        result = await SearchKnowledgeTool(store).execute(query="python")

        assert result.success
        assert result.output == "[task] upgrade python\n\n[fact] python 3.13 is out"

    @pytest.mark.asyncio
    async def test_no_matches(self, store: MemoryStore):
        result = await SearchKnowledgeTool(store).execute(query="rust")
        assert result.output == "No relevant past research found."


class TestSaveFindingTool:
    @pytest.mark.asyncio
    async def test_saves_role_scoped_fact(self, store: MemoryStore):
        tool = SaveFindingTool(store, agent_role="research")
        result = await tool.execute(
            content="SQLite supports upserts", topic="databases", source="https://sqlite.org"
        )

        assert result.success
        assert result.output == "Finding saved under topic: databases"
        [memory] = store.get_memories(agent_role="research")
        assert memory.kind is MemoryKind.FACT
        assert memory.metadata == {"topic": "databases", "source": "https://sqlite.org"}

    @pytest.mark.asyncio
    async def test_empty_content(self, store: MemoryStore):
        tool = SaveFindingTool(store, agent_role="research")
        result = await tool.execute(content="  ", topic="x")

        assert not result.success
        assert store.get_memories() == []
