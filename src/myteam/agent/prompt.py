"""Memory-augmented prompt builder for the agents."""

from ..memory import MemoryStore, Preference

PREFERENCES_HEADER = "## User Preferences (learned over time)"
RECENT_CONTEXT_HEADER = "## Recent Context"

# Memories fetched per role, and how many of those reach the prompt
RECENT_MEMORY_FETCH = 20
RECENT_MEMORY_SHOWN = 10


class PromptBuilder:
    """Builds a role's instructions from its static prompt and the store.

    Preferences are global to the user and always included. Memories are
    scoped to the calling role.
    """

    def __init__(self, store: MemoryStore) -> None:
        self.store = store

    def build(self, static_prompt: str, role: str) -> str:
        """Compose the instruction text for one turn.

        Args:
            static_prompt: The role's fixed system prompt.
            role: The role whose recent memories are injected.

        Returns:
            The static prompt, then a preferences section grouped by
            category, then a recent context section. Empty sections are
            omitted.
        """
        prompt = static_prompt

        preferences_block = format_preferences(self.store.get_preferences())
        if preferences_block:
            prompt += "\n\n" + preferences_block

        memories = self.store.get_memories(agent_role=role, limit=RECENT_MEMORY_FETCH)
        if memories:
            lines = [
                f"- [{memory.kind.value}] {memory.content}"
                for memory in memories[:RECENT_MEMORY_SHOWN]
            ]
            prompt += "\n\n" + RECENT_CONTEXT_HEADER + "\n" + "\n".join(lines)

        return prompt


def format_preferences(preferences: list[Preference]) -> str:
    """Format preferences as a markdown section grouped by category."""
    if not preferences:
        return ""

    grouped: dict[str, list[Preference]] = {}
    for preference in preferences:
        grouped.setdefault(preference.category, []).append(preference)

    sections = [PREFERENCES_HEADER]
    for category, prefs in grouped.items():
        lines = "\n".join(f"- {p.key}: {p.value}" for p in prefs)
        sections.append(f"### {category}\n{lines}")
    return "\n\n".join(sections)


def format_tool_result(success: bool, output: str, error: str | None) -> str:
    """Format a tool result for the conversation."""
    if success:
        return output
    return f"Error: {error}"
