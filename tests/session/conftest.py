# tests/session/conftest.py
"""Fixtures and an in-memory stand-in for the HTTP API used by session tests."""

from __future__ import annotations

import asyncio
import copy
import random
from collections.abc import Callable

import pytest

from vayam.services.errors import DuplicateVoteError, TransientNetworkError
from vayam.services.participation import participation_percentage
from vayam.session import VotingSession
from vayam.session.state import ConversationSnapshot, SessionComment, SkippedSnapshot

UID = 7


def make_comments(count: int, zid: int = 1, **flags: str) -> list[SessionComment]:
    """Build `count` comments with tids 1..count; `flags` maps "t<tid>" to a flag status."""
    return [
        SessionComment(
            tid=tid,
            zid=zid,
            txt=f"Comment {tid}",
            is_seed=tid == 1,
            flag_status=flags.get(f"t{tid}", "rejected"),
        )
        for tid in range(1, count + 1)
    ]


class FakeApi:
    """Serves a single conversation and records every call."""

    def __init__(self, comments: list[SessionComment], zid: int = 1, uid: int = UID) -> None:
        self.zid = zid
        self.uid = uid
        self.comments = comments
        self.calls: list[tuple] = []
        self.fail_conversation = False
        self.fail_skipped = False
        self.fail_votes = 0
        self.fail_tids: set[int] = set()
        self.release: asyncio.Event | None = None

    def server_vote(self, tid: int) -> int | None:
        return next(c for c in self.comments if c.tid == tid).vote_of(self.uid)

    async def get_conversation(self, zid: int) -> ConversationSnapshot:
        self.calls.append(("get_conversation", zid))
        if self.fail_conversation:
            raise TransientNetworkError("offline")
        return ConversationSnapshot(zid=zid, topic="Topic", comments=copy.deepcopy(self.comments))

    async def get_skipped(self, zid: int) -> SkippedSnapshot:
        self.calls.append(("get_skipped", zid))
        if self.fail_skipped:
            raise TransientNetworkError("offline")
        skipped = [copy.deepcopy(c) for c in self.comments if c.vote_of(self.uid) is None]
        total = len(self.comments)
        return SkippedSnapshot(
            skipped=skipped,
            skipped_count=len(skipped),
            total_count=total,
            participation_percentage=participation_percentage(total, len(skipped)),
        )

    async def cast_vote(self, zid: int, tid: int, vote: int) -> dict:
        self.calls.append(("cast_vote", tid, vote))
        if self.release is not None:
            await self.release.wait()
        if self.fail_votes > 0 or tid in self.fail_tids:
            self.fail_votes = max(0, self.fail_votes - 1)
            raise TransientNetworkError("timeout")
        comment = next(c for c in self.comments if c.tid == tid)
        if comment.vote_of(self.uid) == vote:
            raise DuplicateVoteError()
        comment.set_vote(self.uid, vote)
        return {"success": True}

    async def create_comment(self, zid: int, txt: str) -> dict:
        self.calls.append(("create_comment", txt))
        tid = max((c.tid for c in self.comments), default=0) + 1
        self.comments.append(SessionComment(tid=tid, zid=zid, txt=txt))
        return {"comment": {"tid": tid}}

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


@pytest.fixture()
def uid() -> int:
    return UID


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture()
def make_api() -> Callable[..., FakeApi]:
    """Return a factory building a FakeApi over `count` comments."""

    def _make(count: int, **flags: str) -> FakeApi:
        return FakeApi(make_comments(count, **flags))

    return _make


@pytest.fixture()
def api(make_api: Callable[..., FakeApi]) -> FakeApi:
    """Three plain comments, nothing voted yet."""
    return make_api(3)


@pytest.fixture()
def make_session(rng: random.Random) -> Callable[[FakeApi], VotingSession]:
    def _make(fake: FakeApi) -> VotingSession:
        return VotingSession(fake, zid=fake.zid, uid=fake.uid, rng=rng)

    return _make


@pytest.fixture()
def session(api: FakeApi, make_session: Callable[[FakeApi], VotingSession]) -> VotingSession:
    return make_session(api)
