# tests/v1/test_users.py
"""Tests for per-user endpoints."""

from fastapi import status


def test_subscription_round_trip(client, voter_headers, conversation):
    url = "/api/v1/user/subscribe"
    params = {"zid": conversation.zid}

    assert client.get(url, params=params, headers=voter_headers).json()["is_subscribed"] is False

    on = client.post(url, json={"zid": conversation.zid, "subscribe": True}, headers=voter_headers)
    assert on.status_code == status.HTTP_200_OK
    assert on.json() == {"zid": conversation.zid, "is_subscribed": True}
    # Subscribing twice is harmless.
    client.post(url, json={"zid": conversation.zid, "subscribe": True}, headers=voter_headers)
    assert client.get(url, params=params, headers=voter_headers).json()["is_subscribed"] is True

    off = client.post(url, json={"zid": conversation.zid, "subscribe": False}, headers=voter_headers)
    assert off.json()["is_subscribed"] is False
    assert client.get(url, params=params, headers=voter_headers).json()["is_subscribed"] is False


def test_subscribe_unknown_conversation(client, voter_headers):
    response = client.post(
        "/api/v1/user/subscribe",
        json={"zid": 9999, "subscribe": True},
        headers=voter_headers,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_owned_conversations_carry_live_counts(
    client, owner_headers, voter_headers, conversation, comment_tids
):
    client.post(
        "/api/v1/votes",
        json={"zid": conversation.zid, "tid": comment_tids[0], "vote": 1},
        headers=voter_headers,
    )

    owned = client.get("/api/v1/user/conversations", headers=owner_headers).json()
    not_owned = client.get("/api/v1/user/conversations", headers=voter_headers).json()

    assert not_owned == []
    [item] = owned
    assert item["zid"] == conversation.zid
    assert item["comments_count"] == 3
    assert item["participant_count"] == 2
    assert item["like_count"] == 1
