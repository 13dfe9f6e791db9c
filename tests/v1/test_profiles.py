# tests/v1/test_profiles.py
"""Tests for multiple profiles per member."""

from fastapi import status

PROFILES = "/api/v1/app/profiles"


def test_add_switch_and_delete_profiles(client, community, owner_profile, owner_app_headers) -> None:
    r = client.post(PROFILES, json={"name": "부캐", "username": "alt"}, headers=owner_app_headers)
    assert r.status_code == status.HTTP_201_CREATED
    alt = r.json()["data"]
    assert alt["is_primary"] is False

    mine = client.get(f"{PROFILES}/mine", headers=owner_app_headers).json()["data"]
    assert [profile["username"] for profile in mine] == ["admin", "alt"]

    r = client.post(f"{PROFILES}/{alt['id']}/primary", headers=owner_app_headers)
    assert r.json()["data"]["is_primary"] is True
    mine = client.get(f"{PROFILES}/mine", headers=owner_app_headers).json()["data"]
    assert [profile["username"] for profile in mine] == ["alt", "admin"]

    r = client.delete(f"{PROFILES}/{alt['id']}", headers=owner_app_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST

    r = client.delete(f"{PROFILES}/{owner_profile.id}", headers=owner_app_headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT
    mine = client.get(f"{PROFILES}/mine", headers=owner_app_headers).json()["data"]
    assert [profile["username"] for profile in mine] == ["alt"]


def test_username_is_unique_per_community(client, community, owner_app_headers, add_member) -> None:
    add_member(community, "taken")
    r = client.post(PROFILES, json={"name": "x", "username": "taken"}, headers=owner_app_headers)
    assert r.status_code == status.HTTP_409_CONFLICT


def test_lookup_by_username(client, community, owner_profile, owner_app_headers) -> None:
    client.post(
        "/api/v1/app/posts",
        json={"content": "자기소개"},
        params={"profile_id": owner_profile.id},
        headers=owner_app_headers,
    )

    r = client.get(f"{PROFILES}/admin", headers=owner_app_headers)
    assert r.json()["data"]["id"] == owner_profile.id

    posts = client.get(f"{PROFILES}/admin/posts", headers=owner_app_headers).json()
    assert [post["content"] for post in posts["data"]] == ["자기소개"]

    assert client.get(f"{PROFILES}/nobody", headers=owner_app_headers).status_code == status.HTTP_404_NOT_FOUND


def test_update_profile(client, community, owner_profile, owner_app_headers, add_member) -> None:
    add_member(community, "other")
    url = f"{PROFILES}/{owner_profile.id}"

    r = client.put(url, json={"bio": "운영자입니다", "name": "관리자"}, headers=owner_app_headers)
    data = r.json()["data"]
    assert data["bio"] == "운영자입니다"
    assert data["name"] == "관리자"
    assert data["username"] == "admin"

    r = client.put(url, json={"username": "other"}, headers=owner_app_headers)
    assert r.status_code == status.HTTP_409_CONFLICT


def test_cannot_edit_someone_elses_profile(client, community, owner_app_headers, add_member) -> None:
    _, profile = add_member(community, "member1")
    r = client.put(f"{PROFILES}/{profile.id}", json={"bio": "hacked"}, headers=owner_app_headers)
    assert r.status_code == status.HTTP_403_FORBIDDEN


def test_directory_lists_members(client, community, owner_app_headers, add_member) -> None:
    add_member(community, "zed")
    body = client.get(PROFILES, headers=owner_app_headers).json()
    assert body["total"] == 2
    assert [profile["username"] for profile in body["data"]] == ["admin", "zed"]
