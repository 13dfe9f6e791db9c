# tests/v1/test_notifications.py
"""Tests for per-profile notifications."""

import pytest
from fastapi import status

NOTIFICATIONS = "/api/v1/app/notifications"


@pytest.fixture()
def mentioned(client, community, owner_profile, owner_app_headers, add_member, auth_headers, tenant_headers):
    """A member who has been mentioned twice by the owner."""
    user, profile = add_member(community, "member1")
    for n in range(2):
        client.post(
            "/api/v1/app/posts",
            json={"content": f"@member1 {n}"},
            params={"profile_id": owner_profile.id},
            headers=owner_app_headers,
        )
    return profile, tenant_headers(auth_headers(user))


def test_list_and_count(client, mentioned) -> None:
    profile, headers = mentioned
    params = {"profile_id": profile.id}

    body = client.get(NOTIFICATIONS, params=params, headers=headers).json()
    assert len(body["data"]) == 2
    assert {row["type"] for row in body["data"]} == {"mention"}
    assert body["data"][0]["sender"]["username"] == "admin"
    assert body["hasMore"] is False

    r = client.get(f"{NOTIFICATIONS}/unread-count", params=params, headers=headers)
    assert r.json() == {"data": {"count": 2}}


def test_read_and_unread(client, mentioned) -> None:
    profile, headers = mentioned
    params = {"profile_id": profile.id}
    notification_id = client.get(NOTIFICATIONS, params=params, headers=headers).json()["data"][0]["id"]

    r = client.post(f"{NOTIFICATIONS}/{notification_id}/read", params=params, headers=headers)
    first_read_at = r.json()["data"]["read_at"]
    assert first_read_at is not None
    r = client.post(f"{NOTIFICATIONS}/{notification_id}/read", params=params, headers=headers)
    assert r.json()["data"]["read_at"] == first_read_at

    unread = client.get(NOTIFICATIONS, params={**params, "unread_only": True}, headers=headers).json()
    assert len(unread["data"]) == 1

    r = client.post(f"{NOTIFICATIONS}/{notification_id}/unread", params=params, headers=headers)
    assert r.json()["data"]["read_at"] is None


def test_read_all(client, mentioned) -> None:
    profile, headers = mentioned
    params = {"profile_id": profile.id}

    r = client.post(f"{NOTIFICATIONS}/read-all", params=params, headers=headers)
    assert r.json() == {"data": {"updated": 2}}
    r = client.get(f"{NOTIFICATIONS}/unread-count", params=params, headers=headers)
    assert r.json() == {"data": {"count": 0}}


def test_notifications_of_other_profiles_are_hidden(client, mentioned, owner_profile, owner_app_headers) -> None:
    profile, headers = mentioned
    notification_id = client.get(
        NOTIFICATIONS, params={"profile_id": profile.id}, headers=headers
    ).json()["data"][0]["id"]

    r = client.post(
        f"{NOTIFICATIONS}/{notification_id}/read",
        params={"profile_id": owner_profile.id},
        headers=owner_app_headers,
    )
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_profile_id_is_required(client, mentioned) -> None:
    _, headers = mentioned
    r = client.get(NOTIFICATIONS, headers=headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST
