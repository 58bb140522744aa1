"""Client-side voting session: ordering, optimistic votes and phase routing."""

from .client import ApiClient
from .engine import VotingSession
from .shuffle import fisher_yates
from .state import ConversationSnapshot, Phase, SessionComment, SessionState, SkippedSnapshot

__all__ = [
    "ApiClient",
    "ConversationSnapshot",
    "Phase",
    "SessionComment",
    "SessionState",
    "SkippedSnapshot",
    "VotingSession",
    "fisher_yates",
]
