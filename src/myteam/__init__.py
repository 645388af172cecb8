"""myteam: a team of conversational agents sharing memory."""

__version__ = "0.1.0"
