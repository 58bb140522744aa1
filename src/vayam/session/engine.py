"""Voting session engine.

Walks one user through a conversation's comments one at a time. Votes are
applied to the local copy first and the cursor moves on at once; the
server write runs as a background task and only the local copy is restored
if it fails.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Protocol

from vayam.core.settings import settings
from vayam.services.errors import DuplicateVoteError, ValidationError, VayamError
from vayam.services.participation import StatsRoute, stats_route
from vayam.session.shuffle import fisher_yates
from vayam.session.state import (
    ConversationSnapshot,
    Phase,
    SessionComment,
    SessionState,
    SkippedSnapshot,
)

logger = logging.getLogger(__name__)

SWIPE_THRESHOLD = 100

_ROUTE_PHASES = {
    StatsRoute.FIRST_PASS: Phase.FIRST_PASS,
    StatsRoute.STATS_PROMPT: Phase.STATS_PROMPT,
    StatsRoute.COMPLETED: Phase.COMPLETED,
}


class SessionApi(Protocol):
    """Server operations the engine depends on (see ApiClient)."""

    async def get_conversation(self, zid: int) -> ConversationSnapshot: ...

    async def get_skipped(self, zid: int) -> SkippedSnapshot: ...

    async def cast_vote(self, zid: int, tid: int, vote: int) -> object: ...

    async def create_comment(self, zid: int, txt: str) -> object: ...


class VotingSession:
    """One user's voting session over one conversation."""

    def __init__(
        self,
        api: SessionApi,
        zid: int,
        uid: int,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.api = api
        self.uid = uid
        self.state = SessionState(zid=zid)
        self._rng = rng or random.Random()
        self._tasks: set[asyncio.Task[None]] = set()
        self._locks: dict[int, asyncio.Lock] = {}
        self._seq: dict[int, int] = {}
        self._confirmed: dict[int, int | None] = {}

    @property
    def phase(self) -> Phase:
        return self.state.phase

    # Loading

    def _rebuild(self, snapshot: ConversationSnapshot, *, keep_viewed: bool = False) -> None:
        viewed = self.state.viewed if keep_viewed else 0
        comments = {c.tid: c for c in snapshot.comments}
        visible = [c.tid for c in snapshot.comments if c.is_visible]
        permutation = fisher_yates(len(visible), self._rng)
        self.state = SessionState(
            zid=snapshot.zid,
            phase=Phase.LOADING,
            topic=snapshot.topic,
            comments=comments,
            visible=visible,
            order=[visible[i] for i in permutation],
            viewed=viewed,
        )
        self._confirmed = {tid: c.vote_of(self.uid) for tid, c in comments.items()}
        self._seq.clear()

    async def load(self) -> Phase:
        """Fetch the conversation, shuffle it and pick the opening phase.

        A failed conversation fetch is terminal (ERROR). A failed stats
        fetch only means the session opens on the first pass.
        """
        await self.drain()
        zid = self.state.zid
        self.state = SessionState(zid=zid)
        try:
            snapshot = await self.api.get_conversation(zid)
        except VayamError as err:
            logger.error("Loading conversation zid=%s failed: %s", zid, err)
            self.state.phase = Phase.ERROR
            self.state.error = err.message
            return self.phase

        self._rebuild(snapshot)
        if not self.state.visible:
            self.state.phase = Phase.COMPLETED
            return self.phase

        try:
            skipped = await self.api.get_skipped(zid)
        except VayamError as err:
            logger.warning("Stats for zid=%s unavailable, starting first pass: %s", zid, err)
            self.state.phase = Phase.FIRST_PASS
            return self.phase

        self.state.participation_percentage = skipped.participation_percentage
        self.state.phase = _ROUTE_PHASES[stats_route(skipped.participation_percentage)]
        return self.phase

    # Cursor

    def current_comment(self) -> SessionComment | None:
        """Return the comment under the cursor, or None outside a voting phase."""
        sequence = self.state.sequence
        if self.state.cursor >= len(sequence):
            return None
        return self.state.comments[sequence[self.state.cursor]]

    async def _advance(self) -> None:
        self.state.cursor += 1
        self.state.viewed += 1
        if self.state.cursor < len(self.state.sequence):
            return
        if self.state.phase is Phase.FIRST_PASS:
            await self._finish_first_pass()
        else:
            self.state.phase = Phase.COMPLETED

    def _voted_locally(self, tid: int) -> bool:
        comment = self.state.comments.get(tid)
        return comment is not None and comment.vote_of(self.uid) is not None

    async def _pending_skips(self) -> list[int]:
        # Writes still in flight are not awaited; local votes cover them.
        try:
            skipped = await self.api.get_skipped(self.state.zid)
        except VayamError as err:
            logger.warning("Skipped comments unavailable, using local votes: %s", err)
            return self.state.unvoted(self.uid)
        self.state.participation_percentage = skipped.participation_percentage
        return [
            c.tid for c in skipped.skipped if c.is_visible and not self._voted_locally(c.tid)
        ]

    async def _finish_first_pass(self) -> None:
        if await self._pending_skips():
            self.state.phase = Phase.SKIPPED_DECISION_PROMPT
        else:
            self.state.phase = Phase.COMPLETED

    async def _enter_review(self) -> None:
        review = []
        for tid in await self._pending_skips():
            # Comments authored since the last load are not in the local copy yet.
            if tid in self.state.comments:
                review.append(tid)
        self.state.review = review
        self.state.cursor = 0
        self.state.phase = Phase.SKIPPED_REVIEW if review else Phase.COMPLETED

    # Actions

    async def vote(self, value: int) -> bool:
        """Vote on the current comment and move on.

        Returns True when a server write was dispatched, False when the
        vote already matched and nothing was sent.
        """
        if value not in (-1, 0, 1):
            raise ValidationError("Vote must be between -1 and 1")
        comment = self.current_comment()
        if comment is None:
            raise ValidationError(f"No comment to vote on in phase {self.phase.value}")

        if comment.vote_of(self.uid) == value:
            await self._advance()
            return False

        comment.set_vote(self.uid, value)
        seq = self._seq.get(comment.tid, 0) + 1
        self._seq[comment.tid] = seq
        task = asyncio.create_task(self._write_vote(comment, value, seq))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        await self._advance()
        return True

    async def _write_vote(self, comment: SessionComment, value: int, seq: int) -> None:
        tid = comment.tid
        lock = self._locks.setdefault(tid, asyncio.Lock())
        async with lock:
            if self._seq.get(tid) != seq:
                logger.debug("Vote seq=%s on tid=%s superseded before sending", seq, tid)
                return
            try:
                await self.api.cast_vote(comment.zid, tid, value)
            except DuplicateVoteError:
                pass
            except VayamError as err:
                logger.warning("Vote on tid=%s failed, restoring local state: %s", tid, err)
                if self._seq.get(tid) == seq:
                    comment.set_vote(self.uid, self._confirmed.get(tid))
                return
            self._confirmed[tid] = value

    async def skip(self) -> None:
        """Move past the current comment without voting."""
        if self.current_comment() is None:
            raise ValidationError(f"No comment to skip in phase {self.phase.value}")
        await self._advance()

    async def gesture(self, dx: float, dy: float) -> str | None:
        """Apply a swipe measured in screen pixels (negative `dy` is upward).

        Right is agree, left is disagree and up is skip. Short or downward
        swipes do nothing. Returns the action taken.
        """
        if abs(dx) > abs(dy):
            if abs(dx) > SWIPE_THRESHOLD:
                value = 1 if dx > 0 else -1
                await self.vote(value)
                return "agree" if value == 1 else "disagree"
            return None
        if -dy > SWIPE_THRESHOLD:
            await self.skip()
            return "skip"
        return None

    async def tap(self) -> str | None:
        """Vote neutral, unless the current vote already is neutral."""
        comment = self.current_comment()
        if comment is None or comment.vote_of(self.uid) == 0:
            return None
        await self.vote(0)
        return "neutral"

    async def answer_stats_prompt(self, review_skipped: bool) -> Phase:
        """Leave the opening stats prompt for the review pass or the first pass."""
        if self.phase is not Phase.STATS_PROMPT:
            raise ValidationError(f"No stats prompt in phase {self.phase.value}")
        if review_skipped:
            await self._enter_review()
        else:
            self.state.cursor = 0
            self.state.phase = Phase.FIRST_PASS
        return self.phase

    async def answer_skipped_prompt(self, continue_review: bool) -> Phase:
        """Leave the end-of-pass prompt for the review pass or completion."""
        if self.phase is not Phase.SKIPPED_DECISION_PROMPT:
            raise ValidationError(f"No skipped-comments prompt in phase {self.phase.value}")
        if continue_review:
            await self._enter_review()
        else:
            self.state.phase = Phase.COMPLETED
        return self.phase

    # Authoring

    def authoring_threshold(self) -> int:
        return min(settings.min_viewed_before_authoring, self.state.visible_count)

    def can_author(self) -> bool:
        """Return True once enough comments were viewed in this session."""
        return self.state.viewed >= self.authoring_threshold()

    async def author_comment(self, text: str) -> Phase:
        """Submit the user's own comment, then refresh and re-route.

        Raises:
            ValidationError: If the viewing threshold is not met yet.
            VayamError: Whatever the server rejected the comment with.
        """
        if not self.can_author():
            raise ValidationError(
                f"View at least {self.authoring_threshold()} comments before adding your own"
            )
        await self.api.create_comment(self.state.zid, text)
        await self.refresh()
        return self.phase

    async def refresh(self) -> None:
        """Reload after an external change and route to the skipped prompt or completion."""
        await self.drain()
        try:
            snapshot = await self.api.get_conversation(self.state.zid)
        except VayamError as err:
            logger.warning("Refresh of zid=%s failed, keeping local copy: %s", self.state.zid, err)
        else:
            self._rebuild(snapshot, keep_viewed=True)
        await self._finish_first_pass()

    async def drain(self) -> None:
        """Wait for every in-flight vote write to settle."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
