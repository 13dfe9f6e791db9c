# tests/v1/test_bots.py
"""Tests for bot management and the token-authenticated bot API."""

import pytest
from fastapi import status

from commung.core import security
from commung.models import BotToken

BOTS = "/api/v1/console/communities/test/bots"


@pytest.fixture()
def bot(client, community, owner_headers) -> dict:
    r = client.post(
        BOTS,
        json={"name": "날씨봇", "profile_name": "날씨", "profile_username": "weather_bot"},
        headers=owner_headers,
    )
    assert r.status_code == status.HTTP_201_CREATED
    return r.json()["data"]


@pytest.fixture()
def bot_token(client, bot, owner_headers) -> str:
    r = client.post(f"{BOTS}/{bot['id']}/tokens", json={"name": "cron"}, headers=owner_headers)
    assert r.status_code == status.HTTP_201_CREATED
    return r.json()["data"]["token"]


def _bot_posts_url(community_id: str) -> str:
    return f"/api/v1/bot/communities/{community_id}/posts"


def test_token_is_shown_once_and_stored_hashed(client, db_session, bot, bot_token, owner_headers) -> None:
    assert bot_token.startswith("cmb_")

    listed = client.get(f"{BOTS}/{bot['id']}/tokens", headers=owner_headers).json()["data"]
    assert len(listed) == 1
    assert "token" not in listed[0]
    assert listed[0]["token_hint"] == bot_token[-4:]

    stored = db_session.query(BotToken).one()
    assert stored.token_digest == security.token_digest(bot_token)
    assert stored.token_digest != bot_token


def test_only_owner_manages_bots(client, community, add_member, auth_headers) -> None:
    moderator, _ = add_member(community, "mod", role="moderator")
    r = client.get(BOTS, headers=auth_headers(moderator))
    assert r.status_code == status.HTTP_403_FORBIDDEN


def test_bot_posts_as_its_profile(client, db_session, community, bot, bot_token) -> None:
    headers = {"Authorization": f"Bearer {bot_token}"}
    url = _bot_posts_url(community.id)

    r = client.post(url, json={"content": "오늘은 맑음", "announcement": True}, headers=headers)
    assert r.status_code == status.HTTP_201_CREATED
    post = r.json()["data"]
    assert post["author"]["username"] == "weather_bot"
    assert post["announcement"] is False

    listing = client.get(url, headers=headers).json()
    assert [row["id"] for row in listing["data"]] == [post["id"]]

    r = client.put(f"{url}/{post['id']}", json={"content": "오후에 비"}, headers=headers)
    assert r.json()["data"]["content"] == "오후에 비"

    r = client.post(f"{url}/{post['id']}/reactions", json={"emoji": "☀️"}, headers=headers)
    assert r.status_code == status.HTTP_201_CREATED

    r = client.delete(f"{url}/{post['id']}", headers=headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT

    db_session.expire_all()
    assert db_session.query(BotToken).one().last_used_at is not None


def test_bot_profile_is_not_an_acting_profile(client, community, bot, owner_app_headers) -> None:
    r = client.get(
        "/api/v1/app/notifications",
        params={"profile_id": bot["profile_id"]},
        headers=owner_app_headers,
    )
    assert r.status_code == status.HTTP_403_FORBIDDEN

    profiles = client.get("/api/v1/app/profiles/mine", headers=owner_app_headers).json()["data"]
    assert bot["profile_id"] not in [profile["id"] for profile in profiles]


def test_revoked_token_is_rejected(client, community, bot, bot_token, owner_headers) -> None:
    token_id = client.get(f"{BOTS}/{bot['id']}/tokens", headers=owner_headers).json()["data"][0]["id"]
    r = client.delete(f"{BOTS}/{bot['id']}/tokens/{token_id}", headers=owner_headers)
    assert r.json()["data"]["revoked_at"] is not None

    r = client.get(_bot_posts_url(community.id), headers={"Authorization": f"Bearer {bot_token}"})
    assert r.status_code == status.HTTP_401_UNAUTHORIZED


def test_deleting_bot_revokes_tokens(client, community, bot, bot_token, owner_headers) -> None:
    assert client.delete(f"{BOTS}/{bot['id']}", headers=owner_headers).status_code == status.HTTP_204_NO_CONTENT
    r = client.get(_bot_posts_url(community.id), headers={"Authorization": f"Bearer {bot_token}"})
    assert r.status_code == status.HTTP_401_UNAUTHORIZED


def test_unknown_token_is_rejected(client, community) -> None:
    r = client.get(_bot_posts_url(community.id), headers={"Authorization": "Bearer cmb_nope"})
    assert r.status_code == status.HTTP_401_UNAUTHORIZED


def test_token_for_another_community_is_forbidden(client, community, bot_token) -> None:
    r = client.get(_bot_posts_url("another-community"), headers={"Authorization": f"Bearer {bot_token}"})
    assert r.status_code == status.HTTP_403_FORBIDDEN
