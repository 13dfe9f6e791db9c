# tests/v1/test_direct_messages.py
"""Tests for one-to-one direct messages."""

import pytest
from fastapi import status

from commung.models import Notification

MESSAGES = "/api/v1/app/messages"


@pytest.fixture()
def pair(community, add_member, auth_headers, tenant_headers):
    """Two members who message each other, with their app headers."""
    alice_user, alice = add_member(community, "alice")
    bob_user, bob = add_member(community, "bob")
    return (
        (alice, tenant_headers(auth_headers(alice_user))),
        (bob, tenant_headers(auth_headers(bob_user))),
    )


def _send(client, sender, headers, receiver_id: str, content: str = "안녕"):
    return client.post(
        MESSAGES,
        json={"receiver_id": receiver_id, "content": content},
        params={"profile_id": sender.id},
        headers=headers,
    )


def test_send_and_read_conversation(client, db_session, pair) -> None:
    (alice, alice_headers), (bob, bob_headers) = pair

    r = _send(client, alice, alice_headers, bob.id)
    assert r.status_code == status.HTTP_201_CREATED
    assert r.json()["data"]["is_sender"] is True
    _send(client, alice, alice_headers, bob.id, "두 번째")

    notification = db_session.query(Notification).filter(Notification.recipient_id == bob.id).first()
    assert notification.type == "message"

    bob_params = {"profile_id": bob.id}
    r = client.get(f"{MESSAGES}/unread-count", params=bob_params, headers=bob_headers)
    assert r.json() == {"data": {"count": 2}}

    conversations = client.get(
        f"{MESSAGES}/conversations", params=bob_params, headers=bob_headers
    ).json()
    assert conversations["total"] == 1
    row = conversations["data"][0]
    assert row["other_profile"]["id"] == alice.id
    assert row["unread_count"] == 2
    assert row["last_message"]["is_sender"] is False

    thread = client.get(
        f"{MESSAGES}/conversations/{alice.id}", params=bob_params, headers=bob_headers
    ).json()
    assert thread["total"] == 2
    assert {message["content"] for message in thread["data"]} == {"안녕", "두 번째"}

    r = client.post(f"{MESSAGES}/conversations/{alice.id}/read", params=bob_params, headers=bob_headers)
    assert r.json() == {"data": {"updated": 2}}
    r = client.post(f"{MESSAGES}/conversations/{alice.id}/read", params=bob_params, headers=bob_headers)
    assert r.json() == {"data": {"updated": 0}}
    r = client.get(f"{MESSAGES}/unread-count", params=bob_params, headers=bob_headers)
    assert r.json() == {"data": {"count": 0}}


def test_cannot_message_self(client, pair) -> None:
    (alice, alice_headers), _ = pair
    r = _send(client, alice, alice_headers, alice.id)
    assert r.status_code == status.HTTP_400_BAD_REQUEST


def test_unknown_receiver(client, pair) -> None:
    (alice, alice_headers), _ = pair
    r = _send(client, alice, alice_headers, "nobody")
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_empty_message_is_rejected(client, pair) -> None:
    (alice, alice_headers), (bob, _) = pair
    r = _send(client, alice, alice_headers, bob.id, "  ")
    assert r.status_code == status.HTTP_400_BAD_REQUEST


def test_read_all(client, pair) -> None:
    (alice, alice_headers), (bob, bob_headers) = pair
    _send(client, alice, alice_headers, bob.id)
    r = client.post(f"{MESSAGES}/read-all", params={"profile_id": bob.id}, headers=bob_headers)
    assert r.json() == {"data": {"updated": 1}}


def test_reactions_and_deletion(client, pair) -> None:
    (alice, alice_headers), (bob, bob_headers) = pair
    message_id = _send(client, alice, alice_headers, bob.id).json()["data"]["id"]
    bob_params = {"profile_id": bob.id}

    url = f"{MESSAGES}/{message_id}/reactions"
    assert client.post(url, json={"emoji": "❤️"}, params=bob_params, headers=bob_headers).status_code == status.HTTP_201_CREATED
    assert client.post(url, json={"emoji": "❤️"}, params=bob_params, headers=bob_headers).status_code == status.HTTP_400_BAD_REQUEST

    thread = client.get(f"{MESSAGES}/conversations/{alice.id}", params=bob_params, headers=bob_headers).json()
    assert list(thread["data"][0]["reactions"]) == ["❤️"]

    r = client.delete(url, params={**bob_params, "emoji": "❤️"}, headers=bob_headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT

    r = client.delete(f"{MESSAGES}/{message_id}", params=bob_params, headers=bob_headers)
    assert r.status_code == status.HTTP_403_FORBIDDEN
    r = client.delete(f"{MESSAGES}/{message_id}", params={"profile_id": alice.id}, headers=alice_headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT

    thread = client.get(f"{MESSAGES}/conversations/{alice.id}", params=bob_params, headers=bob_headers).json()
    assert thread["total"] == 0


def test_outsiders_cannot_react(client, community, pair, add_member, auth_headers, tenant_headers) -> None:
    (alice, alice_headers), (bob, _) = pair
    message_id = _send(client, alice, alice_headers, bob.id).json()["data"]["id"]
    carol_user, carol = add_member(community, "carol")

    r = client.post(
        f"{MESSAGES}/{message_id}/reactions",
        json={"emoji": "👀"},
        params={"profile_id": carol.id},
        headers=tenant_headers(auth_headers(carol_user)),
    )
    assert r.status_code == status.HTTP_403_FORBIDDEN
