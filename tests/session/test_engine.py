# tests/session/test_engine.py
"""Tests for the voting session engine."""

import asyncio

import pytest

from vayam.services.errors import ValidationError
from vayam.session import Phase

pytestmark = pytest.mark.asyncio


async def _walk_to(session, tid):
    while session.current_comment().tid != tid:
        await session.skip()


# Loading and routing


async def test_fresh_user_starts_first_pass(session, api):
    assert await session.load() is Phase.FIRST_PASS

    state = session.state
    assert state.visible == [1, 2, 3]
    assert sorted(state.order) == [1, 2, 3]
    assert (state.cursor, state.viewed) == (0, 0)
    assert session.current_comment().tid == state.order[0]
    assert api.count("get_skipped") == 1


async def test_flagged_and_accepted_comments_are_hidden(make_api, make_session):
    api = make_api(4, t2="flagged", t3="accepted", t4="pending")
    session = make_session(api)

    await session.load()

    assert session.state.visible == [1, 4]
    assert sorted(session.state.order) == [1, 4]
    assert session.state.comments[4].under_review is True
    assert session.state.comments[1].under_review is False


async def test_inactive_comments_are_left_out(make_api, make_session):
    api = make_api(3)
    api.comments[1].active = False
    session = make_session(api)

    await session.load()

    assert session.state.visible == [1, 3]
    assert session.state.visible_count == 2
    assert session.authoring_threshold() == 2


async def test_load_failure_is_terminal(session, api):
    api.fail_conversation = True

    assert await session.load() is Phase.ERROR

    assert session.state.error == "offline"
    assert session.current_comment() is None
    assert api.count("get_conversation") == 1
    assert api.count("get_skipped") == 0


async def test_stats_failure_falls_back_to_first_pass(session, api):
    api.fail_skipped = True
    assert await session.load() is Phase.FIRST_PASS


async def test_returning_user_sees_stats_prompt(session, api, uid):
    api.comments[0].set_vote(uid, 1)

    assert await session.load() is Phase.STATS_PROMPT
    assert session.state.participation_percentage == 33.33
    assert session.current_comment() is None


async def test_finished_user_goes_straight_to_completed(session, api, uid):
    for comment in api.comments:
        comment.set_vote(uid, -1)

    assert await session.load() is Phase.COMPLETED


async def test_empty_conversation_completes_and_allows_authoring(make_api, make_session):
    api = make_api(0)
    session = make_session(api)

    assert await session.load() is Phase.COMPLETED
    assert session.can_author() is True
    assert api.count("get_skipped") == 0


async def test_stats_prompt_choices(session, api, uid):
    api.comments[1].set_vote(uid, 0)
    await session.load()

    assert await session.answer_stats_prompt(review_skipped=True) is Phase.SKIPPED_REVIEW
    assert session.state.review == [1, 3]

    await session.load()
    assert await session.answer_stats_prompt(review_skipped=False) is Phase.FIRST_PASS
    assert session.state.cursor == 0


async def test_prompt_answers_are_phase_checked(session):
    await session.load()
    with pytest.raises(ValidationError):
        await session.answer_stats_prompt(True)
    with pytest.raises(ValidationError):
        await session.answer_skipped_prompt(True)


# Vote application


async def test_vote_advances_before_write_completes(session, api, uid):
    api.release = asyncio.Event()
    await session.load()
    comment = session.current_comment()

    assert await session.vote(1) is True

    assert (session.state.cursor, session.state.viewed) == (1, 1)
    assert comment.vote_of(uid) == 1
    assert comment.tallies.like_count == 1
    assert api.server_vote(comment.tid) is None

    api.release.set()
    await session.drain()
    assert api.server_vote(comment.tid) == 1


async def test_failed_write_rolls_back_vote_but_not_cursor(session, api, uid):
    # Deliberate: the user keeps moving even when the write is lost.
    api.fail_votes = 1
    await session.load()
    comment = session.current_comment()

    await session.vote(-1)
    await session.drain()

    assert comment.vote_of(uid) is None
    assert comment.tallies.dislike_count == 0
    assert session.state.cursor == 1
    assert session.phase is Phase.FIRST_PASS
    assert api.count("cast_vote") == 1


async def test_failed_write_restores_previous_vote(session, api, uid):
    api.comments[0].set_vote(uid, 1)
    await session.load()
    await session.answer_stats_prompt(review_skipped=False)
    await _walk_to(session, 1)
    comment = session.current_comment()

    api.fail_votes = 1
    await session.vote(-1)
    await session.drain()

    assert comment.vote_of(uid) == 1


async def test_same_vote_advances_without_network(session, api, uid):
    api.comments[0].set_vote(uid, 1)
    await session.load()
    await session.answer_stats_prompt(review_skipped=False)
    await _walk_to(session, 1)
    cursor = session.state.cursor

    assert await session.vote(1) is False

    assert session.state.cursor == cursor + 1
    assert api.count("cast_vote") == 0


async def test_duplicate_from_server_counts_as_success(session, api, uid):
    await session.load()
    comment = session.current_comment()
    # Another device already recorded the same vote.
    next(c for c in api.comments if c.tid == comment.tid).set_vote(uid, 1)

    await session.vote(1)
    await session.drain()

    assert comment.vote_of(uid) == 1
    assert api.count("cast_vote") == 1


async def test_superseded_write_is_never_sent(session, api, uid):
    await session.load()
    comment = session.current_comment()

    await session.vote(1)
    session.state.cursor = 0
    await session.vote(-1)
    await session.drain()

    assert [c for c in api.calls if c[0] == "cast_vote"] == [("cast_vote", comment.tid, -1)]
    assert api.server_vote(comment.tid) == -1
    assert comment.vote_of(uid) == -1


async def test_stale_failure_does_not_undo_newer_vote(session, api, uid):
    api.release = asyncio.Event()
    api.fail_votes = 1
    await session.load()
    comment = session.current_comment()

    await session.vote(1)
    await asyncio.sleep(0)  # first write is now in flight
    session.state.cursor = 0
    await session.vote(-1)
    api.release.set()
    await session.drain()

    assert api.count("cast_vote") == 2
    assert api.server_vote(comment.tid) == -1
    assert comment.vote_of(uid) == -1


async def test_vote_outside_voting_phase(session, api, uid):
    for comment in api.comments:
        comment.set_vote(uid, 1)
    await session.load()

    with pytest.raises(ValidationError):
        await session.vote(1)
    with pytest.raises(ValidationError):
        await session.skip()


async def test_invalid_vote_value(session):
    await session.load()
    with pytest.raises(ValidationError):
        await session.vote(3)


# Passes


async def test_last_vote_does_not_wait_for_write(make_api, make_session, uid):
    api = make_api(1)
    api.release = asyncio.Event()
    session = make_session(api)
    await session.load()

    await asyncio.wait_for(session.vote(1), timeout=1)

    assert session.phase is Phase.COMPLETED
    assert session.state.cursor == 1
    assert api.server_vote(1) is None

    api.release.set()
    await session.drain()
    assert api.server_vote(1) == 1


async def test_unconfirmed_votes_are_not_offered_for_review(session, api):
    api.release = asyncio.Event()
    await session.load()
    await session.vote(1)
    skipped_tid = session.current_comment().tid
    await session.skip()
    await asyncio.wait_for(session.vote(-1), timeout=1)

    assert session.phase is Phase.SKIPPED_DECISION_PROMPT
    await session.answer_skipped_prompt(continue_review=True)
    assert session.state.review == [skipped_tid]

    api.release.set()
    await session.drain()


async def test_first_pass_with_skips_ends_in_prompt(session, api):
    await session.load()
    await session.vote(1)
    skipped_tid = session.current_comment().tid
    await session.skip()
    await session.vote(-1)

    assert session.phase is Phase.SKIPPED_DECISION_PROMPT
    assert session.state.viewed == 3

    assert await session.answer_skipped_prompt(continue_review=True) is Phase.SKIPPED_REVIEW
    assert session.state.review == [skipped_tid]
    assert session.current_comment().tid == skipped_tid

    await session.vote(0)
    await session.drain()
    assert session.phase is Phase.COMPLETED


async def test_declining_review_completes(session):
    await session.load()
    for _ in range(3):
        await session.skip()

    assert await session.answer_skipped_prompt(continue_review=False) is Phase.COMPLETED


async def test_voting_everything_completes(session, api):
    await session.load()
    for value in (1, 0, -1):
        await session.vote(value)

    assert session.phase is Phase.COMPLETED
    await session.drain()
    assert api.count("cast_vote") == 3


async def test_review_uses_creation_order(make_api, make_session):
    api = make_api(5)
    session = make_session(api)
    await session.load()
    for _ in range(5):
        await session.skip()

    await session.answer_skipped_prompt(continue_review=True)

    assert session.state.review == [1, 2, 3, 4, 5]


async def test_review_refetches_skipped_comments(make_api, make_session, uid):
    api = make_api(4)
    session = make_session(api)
    await session.load()
    for _ in range(4):
        await session.skip()

    api.comments[1].set_vote(uid, 1)
    await session.answer_skipped_prompt(continue_review=True)

    assert session.state.review == [1, 3, 4]


async def test_review_falls_back_to_local_votes(session, api):
    await session.load()
    await session.vote(1)
    await session.skip()
    await session.skip()
    await session.drain()

    api.fail_skipped = True
    await session.answer_skipped_prompt(continue_review=True)

    assert len(session.state.review) == 2
    assert session.state.order[0] not in session.state.review


# Gestures


@pytest.mark.parametrize(
    ("dx", "dy", "action", "value"),
    [
        (150, 10, "agree", 1),
        (-150, 20, "disagree", -1),
        (5, -150, "skip", None),
        (60, 0, None, None),
        (0, 150, None, None),
    ],
)
async def test_gesture_mapping(session, uid, dx, dy, action, value):
    await session.load()
    comment = session.current_comment()

    assert await session.gesture(dx, dy) == action
    await session.drain()

    assert session.state.cursor == (0 if action is None else 1)
    assert comment.vote_of(uid) == value


async def test_tap_votes_neutral(session, uid):
    await session.load()
    comment = session.current_comment()

    assert await session.tap() == "neutral"
    await session.drain()
    assert comment.vote_of(uid) == 0


async def test_tap_on_neutral_comment_does_nothing(session, api, uid):
    await session.load()
    session.current_comment().set_vote(uid, 0)

    assert await session.tap() is None
    assert session.state.cursor == 0
    assert api.count("cast_vote") == 0


# Authoring


async def test_authoring_requires_five_views(make_api, make_session):
    api = make_api(7)
    session = make_session(api)
    await session.load()

    for _ in range(4):
        await session.skip()
    assert session.can_author() is False
    with pytest.raises(ValidationError):
        await session.author_comment("Too soon")
    assert api.count("create_comment") == 0

    await session.skip()
    assert session.can_author() is True


async def test_small_conversation_threshold(session):
    await session.load()
    assert session.authoring_threshold() == 3
    await session.skip()
    await session.skip()
    assert session.can_author() is False
    await session.vote(1)
    assert session.can_author() is True


async def test_authoring_refreshes_and_routes(make_api, make_session, uid):
    api = make_api(5)
    session = make_session(api)
    await session.load()
    for value in (1, 1, -1, 0, 1):
        await session.vote(value)
    assert session.phase is Phase.COMPLETED

    assert await session.author_comment("We need more bike lanes") is Phase.SKIPPED_DECISION_PROMPT

    assert api.count("create_comment") == 1
    assert session.state.visible_count == 6
    assert session.state.viewed == 5
    assert session.state.comments[6].vote_of(uid) is None
