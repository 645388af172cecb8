"""In-band directives carried in an agent's final answer.

Two bracketed forms are recognized:

    [DELEGATE:<role>]            hand the conversation to another agent
    [REMEMBER:<kind>|<content>]  store a memory of the given kind

Both are removed from the visible reply. Only the first delegation is
honored. Any other bracketed text is ordinary prose.
"""

import re
from dataclasses import dataclass, field

from ..memory import Memory, MemoryKind

DELEGATE_PATTERN = re.compile(r"\[DELEGATE:(\w+)\]")
REMEMBER_PATTERN = re.compile(r"\[REMEMBER:(\w+)\|(.*?)\]")


@dataclass
class Extraction:
    """Visible text plus the directives found in a reply."""

    visible_text: str
    delegate_to: str | None = None
    memories: list[Memory] = field(default_factory=list)


def memory_kind(token: str) -> MemoryKind:
    """Map a directive kind token to a MemoryKind; unknown tokens are facts."""
    try:
        return MemoryKind(token.lower())
    except ValueError:
        return MemoryKind.FACT


def extract(raw_text: str, agent_role: str | None = None) -> Extraction:
    """Parse directives out of a final answer.

    Args:
        raw_text: The backend's final text.
        agent_role: Role attached to every extracted memory.

    Returns:
        The stripped visible text, the first delegation target, and one
        memory per non-blank REMEMBER directive.
    """
    text = raw_text
    delegate_to: str | None = None
    memories: list[Memory] = []

    # Removing a directive can join surrounding text into a new one
    while True:
        delegations = DELEGATE_PATTERN.findall(text)
        remembers = REMEMBER_PATTERN.findall(text)
        if not delegations and not remembers:
            break

        if delegate_to is None and delegations:
            delegate_to = delegations[0]
        for kind_token, content in remembers:
            content = content.strip()
            if content:
                memories.append(
                    Memory(
                        kind=memory_kind(kind_token),
                        content=content,
                        metadata={},
                        agent_role=agent_role,
                    )
                )

        text = DELEGATE_PATTERN.sub("", text)
        text = REMEMBER_PATTERN.sub("", text)

    return Extraction(visible_text=text.strip(), delegate_to=delegate_to, memories=memories)
