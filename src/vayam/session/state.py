"""Client-side session data: phases, local comment copies and the session value object."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from vayam.models.comment import FLAG_STATUS_PENDING, HIDDEN_FLAG_STATUSES
from vayam.services.votes import Tallies


class Phase(str, Enum):
    """Sub-state of a voting session."""

    LOADING = "loading"
    FIRST_PASS = "first_pass"
    STATS_PROMPT = "stats_prompt"
    SKIPPED_REVIEW = "skipped_review"
    SKIPPED_DECISION_PROMPT = "skipped_decision_prompt"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class SessionComment:
    """Local copy of a comment and every current vote on it, keyed by uid."""

    tid: int
    zid: int
    txt: str
    is_seed: bool = False
    flag_status: str = "rejected"
    active: bool = True
    votes: dict[int, int] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> SessionComment:
        """Build from a comment object as returned by the conversation API."""
        return cls(
            tid=payload["tid"],
            zid=payload["zid"],
            txt=payload["txt"],
            is_seed=payload.get("is_seed", False),
            flag_status=payload.get("flag_status") or "rejected",
            active=payload.get("active", True),
            votes={v["uid"]: v["vote"] for v in payload.get("votes", [])},
        )

    @property
    def is_visible(self) -> bool:
        return self.active and self.flag_status not in HIDDEN_FLAG_STATUSES

    @property
    def under_review(self) -> bool:
        return self.flag_status == FLAG_STATUS_PENDING

    @property
    def tallies(self) -> Tallies:
        values = list(self.votes.values())
        return Tallies(
            like_count=values.count(1),
            dislike_count=values.count(-1),
            neutral_count=values.count(0),
        )

    def vote_of(self, uid: int) -> int | None:
        return self.votes.get(uid)

    def set_vote(self, uid: int, value: int | None) -> None:
        """Replace the user's vote, or remove it when `value` is None."""
        if value is None:
            self.votes.pop(uid, None)
        else:
            self.votes[uid] = value


@dataclass(frozen=True)
class ConversationSnapshot:
    """Conversation data a session is built from."""

    zid: int
    topic: str
    comments: list[SessionComment]


@dataclass(frozen=True)
class SkippedSnapshot:
    """Server view of what the user has not voted on yet."""

    skipped: list[SessionComment]
    skipped_count: int
    total_count: int
    participation_percentage: float


@dataclass
class SessionState:
    """Everything the engine knows about one user's pass over one conversation.

    Rebuilt from server data on every load; never persisted.
    """

    zid: int
    phase: Phase = Phase.LOADING
    topic: str = ""
    comments: dict[int, SessionComment] = field(default_factory=dict)
    # Visible tids in creation order.
    visible: list[int] = field(default_factory=list)
    # Shuffled visible tids for the first pass.
    order: list[int] = field(default_factory=list)
    # Skipped tids in creation order for the review pass.
    review: list[int] = field(default_factory=list)
    cursor: int = 0
    viewed: int = 0
    participation_percentage: float = 0.0
    error: str | None = None

    @property
    def sequence(self) -> list[int]:
        """Return the tids the cursor walks in the current phase."""
        if self.phase is Phase.SKIPPED_REVIEW:
            return self.review
        if self.phase is Phase.FIRST_PASS:
            return self.order
        return []

    @property
    def visible_count(self) -> int:
        return len(self.visible)

    def unvoted(self, uid: int) -> list[int]:
        """Return visible tids with no local vote by `uid`, in creation order."""
        return [tid for tid in self.visible if self.comments[tid].vote_of(uid) is None]
