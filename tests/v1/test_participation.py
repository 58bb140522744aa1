# tests/v1/test_participation.py
"""Tests for the skipped-comments and participation endpoint."""

from fastapi import status

from vayam.models import Comment, Conversation

SKIPPED_URL = "/api/v1/user/conversations/skipped-comments"


def _vote(client, headers, zid, tid, value=1):
    return client.post(
        "/api/v1/votes",
        json={"zid": zid, "tid": tid, "vote": value},
        headers=headers,
    )


def _skipped(client, headers, zid):
    return client.get(SKIPPED_URL, params={"zid": zid}, headers=headers)


def test_two_of_three_voted(client, voter, voter_headers, conversation, comment_tids):
    _vote(client, voter_headers, conversation.zid, comment_tids[0])
    _vote(client, voter_headers, conversation.zid, comment_tids[2], -1)

    response = _skipped(client, voter_headers, conversation.zid)

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["uid"] == voter.uid
    assert body["stats"] == {
        "skipped_comments_count": 1,
        "total_comments_count": 3,
        "participation_percentage": "66.67",
    }
    assert [c["tid"] for c in body["skipped_comments"]] == [comment_tids[1]]


def test_nothing_voted(client, voter_headers, conversation, comment_tids):
    body = _skipped(client, voter_headers, conversation.zid).json()

    assert body["stats"]["participation_percentage"] == "0.00"
    assert [c["tid"] for c in body["skipped_comments"]] == comment_tids


def test_empty_conversation_is_zero_percent(client, db_session, owner, voter_headers):
    empty = Conversation(topic="Empty", description="Nothing here yet", owner=owner.uid)
    db_session.add(empty)
    db_session.commit()

    body = _skipped(client, voter_headers, empty.zid).json()

    assert body["stats"] == {
        "skipped_comments_count": 0,
        "total_comments_count": 0,
        "participation_percentage": "0.00",
    }


def test_voting_on_every_skipped_comment_completes(client, voter_headers, conversation):
    skipped = _skipped(client, voter_headers, conversation.zid).json()["skipped_comments"]
    for comment in skipped:
        assert _vote(client, voter_headers, conversation.zid, comment["tid"], 0).status_code == 201

    body = _skipped(client, voter_headers, conversation.zid).json()

    assert body["stats"]["skipped_comments_count"] == 0
    assert body["stats"]["participation_percentage"] == "100.00"
    assert body["skipped_comments"] == []


def test_percentage_never_decreases_while_voting(client, voter_headers, conversation, comment_tids):
    def percentage() -> float:
        stats = _skipped(client, voter_headers, conversation.zid).json()["stats"]
        return float(stats["participation_percentage"])

    seen = [percentage()]
    for tid in comment_tids:
        _vote(client, voter_headers, conversation.zid, tid)
        seen.append(percentage())

    assert seen == sorted(seen)
    assert seen[-1] == 100.0


def test_inactive_comments_are_not_counted(client, db_session, voter_headers, conversation, comment_tids):
    db_session.get(Comment, comment_tids[1]).active = False
    db_session.commit()

    stats = _skipped(client, voter_headers, conversation.zid).json()["stats"]

    assert stats["total_comments_count"] == 2
    assert stats["skipped_comments_count"] == 2


def test_unknown_conversation(client, voter_headers):
    response = _skipped(client, voter_headers, 9999)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_zid_is_required(client, voter_headers):
    response = client.get(SKIPPED_URL, headers=voter_headers)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
