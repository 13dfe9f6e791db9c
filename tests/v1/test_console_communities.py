# tests/v1/test_console_communities.py
"""Tests for console community management."""

from datetime import timedelta

import pytest
from fastapi import status

from commung.db.time import utcnow
from commung.models import Post, Profile

BASE = "/api/v1/console/communities"


def test_create_community_makes_owner_profile(client, db_session, owner, owner_headers, community_payload) -> None:
    r = client.post(BASE, json=community_payload(slug="new-commu"), headers=owner_headers)
    assert r.status_code == status.HTTP_201_CREATED
    data = r.json()["data"]
    assert data["slug"] == "new-commu"
    assert data["owner_id"] == owner.id
    assert sorted(data["hashtags"]) == sorted(["자캐", "판타지"])

    profile = db_session.query(Profile).filter(Profile.community_id == data["id"]).one()
    assert profile.username == "admin"
    assert profile.is_primary

    r = client.get(f"{BASE}/mine", headers=owner_headers)
    assert r.status_code == status.HTTP_200_OK
    mine = r.json()["data"]
    assert [(row["slug"], row["role"]) for row in mine] == [("new-commu", "owner")]


def test_duplicate_slug_conflicts(client, community, owner_headers, community_payload) -> None:
    r = client.post(BASE, json=community_payload(), headers=owner_headers)
    assert r.status_code == status.HTTP_409_CONFLICT


def test_schedule_must_end_after_start(client, owner_headers, community_payload) -> None:
    now = utcnow()
    payload = community_payload(
        slug="bad-dates",
        starts_at=now.isoformat(),
        ends_at=(now - timedelta(hours=1)).isoformat(),
    )
    r = client.post(BASE, json=payload, headers=owner_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST


def test_recruiting_window_must_end_after_start(client, owner_headers, community_payload) -> None:
    now = utcnow()
    payload = community_payload(
        slug="bad-recruit",
        recruiting_starts_at=now.isoformat(),
        recruiting_ends_at=now.isoformat(),
    )
    r = client.post(BASE, json=payload, headers=owner_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST


def test_invalid_owner_username_is_rejected(client, owner_headers, community_payload) -> None:
    r = client.post(
        BASE,
        json=community_payload(slug="bad-user", profile_username="운영자"),
        headers=owner_headers,
    )
    assert r.status_code == status.HTTP_400_BAD_REQUEST


def test_get_community_is_public(client, community) -> None:
    r = client.get(f"{BASE}/test")
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["data"]["name"] == "테스트 커뮤"


def test_unknown_community_is_not_found(client) -> None:
    r = client.get(f"{BASE}/nope")
    assert r.status_code == status.HTTP_404_NOT_FOUND
    assert r.json()["error"] == "커뮤를 찾을 수 없습니다"


def test_owner_updates_hashtags(client, community, owner_headers) -> None:
    r = client.put(
        f"{BASE}/test",
        json={"name": "바뀐 이름", "hashtags": ["판타지", "신규"]},
        headers=owner_headers,
    )
    assert r.status_code == status.HTTP_200_OK
    data = r.json()["data"]
    assert data["name"] == "바뀐 이름"
    assert sorted(data["hashtags"]) == sorted(["판타지", "신규"])


def test_update_rechecks_merged_schedule(client, community, owner_headers) -> None:
    too_early = (community.starts_at - timedelta(days=1)).isoformat()
    r = client.put(f"{BASE}/test", json={"ends_at": too_early}, headers=owner_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.parametrize("field", ["name", "starts_at", "ends_at", "is_recruiting", "mute_new_members"])
def test_update_rejects_null_for_required_fields(client, community, owner_headers, field) -> None:
    r = client.put(f"{BASE}/test", json={field: None}, headers=owner_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert field in r.json()["error"]

    r = client.get(f"{BASE}/test")
    assert r.json()["data"]["name"] == "테스트 커뮤"


def test_update_can_clear_optional_fields(client, community, owner_headers) -> None:
    r = client.put(
        f"{BASE}/test",
        json={"description": None, "recruiting_ends_at": None},
        headers=owner_headers,
    )
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["data"]["description"] is None


def test_only_owner_updates(client, community, add_member, auth_headers) -> None:
    moderator, _ = add_member(community, "mod", role="moderator")
    r = client.put(f"{BASE}/test", json={"name": "x"}, headers=auth_headers(moderator))
    assert r.status_code == status.HTTP_403_FORBIDDEN


def test_recruiting_listing(client, community) -> None:
    r = client.get(f"{BASE}/recruiting")
    assert r.status_code == status.HTTP_200_OK
    assert [row["slug"] for row in r.json()["data"]] == ["test"]


def test_delete_community_soft_deletes_posts(client, db_session, community, owner_profile, owner_headers) -> None:
    db_session.add(
        Post(
            community_id=community.id,
            author_id=owner_profile.id,
            created_by_user_id=community.owner_id,
            content="hello",
        )
    )
    db_session.commit()

    r = client.delete(f"{BASE}/test", headers=owner_headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT

    assert client.get(f"{BASE}/test").status_code == status.HTTP_404_NOT_FOUND
    db_session.expire_all()
    assert all(post.deleted_at is not None for post in db_session.query(Post).all())


def test_owner_cannot_leave(client, community, owner_headers) -> None:
    r = client.post(f"{BASE}/test/leave", headers=owner_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST


def test_member_leaves(client, community, add_member, auth_headers, tenant_headers) -> None:
    user, _ = add_member(community, "leaver")
    headers = auth_headers(user)

    r = client.post(f"{BASE}/test/leave", headers=headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT

    r = client.get("/api/v1/app/me", headers=tenant_headers(headers))
    assert r.status_code == status.HTTP_403_FORBIDDEN
