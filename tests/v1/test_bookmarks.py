# tests/v1/test_bookmarks.py
"""Tests for post bookmarks and edit history."""

from fastapi import status

POSTS = "/api/v1/app/posts"
BOOKMARKS = "/api/v1/app/bookmarks"


def _post(client, headers, profile_id: str, content: str = "hello") -> str:
    r = client.post(POSTS, json={"content": content}, params={"profile_id": profile_id}, headers=headers)
    return r.json()["data"]["id"]


def test_bookmark_lifecycle(client, community, owner_profile, owner_app_headers) -> None:
    params = {"profile_id": owner_profile.id}
    first = _post(client, owner_app_headers, owner_profile.id, "first")
    second = _post(client, owner_app_headers, owner_profile.id, "second")

    for post_id in (first, second):
        r = client.post(f"{POSTS}/{post_id}/bookmark", params=params, headers=owner_app_headers)
        assert r.status_code == status.HTTP_201_CREATED

    r = client.post(f"{POSTS}/{first}/bookmark", params=params, headers=owner_app_headers)
    assert r.status_code == status.HTTP_409_CONFLICT

    r = client.get(BOOKMARKS, params={**params, "limit": 1}, headers=owner_app_headers)
    page = r.json()
    assert [row["id"] for row in page["data"]] == [second]
    assert page["hasMore"] is True

    r = client.get(BOOKMARKS, params={**params, "cursor": page["nextCursor"]}, headers=owner_app_headers)
    assert [row["id"] for row in r.json()["data"]] == [first]

    r = client.delete(f"{POSTS}/{first}/bookmark", params=params, headers=owner_app_headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT
    r = client.delete(f"{POSTS}/{first}/bookmark", params=params, headers=owner_app_headers)
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_bookmarks_of_deleted_posts_are_hidden(client, community, owner_profile, owner_app_headers) -> None:
    params = {"profile_id": owner_profile.id}
    post_id = _post(client, owner_app_headers, owner_profile.id)
    client.post(f"{POSTS}/{post_id}/bookmark", params=params, headers=owner_app_headers)
    client.delete(f"{POSTS}/{post_id}", params=params, headers=owner_app_headers)

    r = client.get(BOOKMARKS, params=params, headers=owner_app_headers)
    assert r.json()["data"] == []


def test_bookmarks_are_per_profile(client, community, owner_profile, owner_app_headers, add_member, auth_headers, tenant_headers) -> None:
    post_id = _post(client, owner_app_headers, owner_profile.id)
    client.post(f"{POSTS}/{post_id}/bookmark", params={"profile_id": owner_profile.id}, headers=owner_app_headers)

    user, profile = add_member(community, "reader")
    r = client.get(BOOKMARKS, params={"profile_id": profile.id}, headers=tenant_headers(auth_headers(user)))
    assert r.json()["data"] == []


def test_edit_history_keeps_previous_versions(client, community, owner_profile, owner_app_headers) -> None:
    params = {"profile_id": owner_profile.id}
    post_id = _post(client, owner_app_headers, owner_profile.id, "v1")

    r = client.get(f"{POSTS}/{post_id}/history", headers=owner_app_headers)
    assert r.json()["data"] == []

    for content in ("v2", "v3"):
        r = client.put(f"{POSTS}/{post_id}", json={"content": content}, params=params, headers=owner_app_headers)
        assert r.status_code == status.HTTP_200_OK

    r = client.get(f"{POSTS}/{post_id}/history", headers=owner_app_headers)
    assert r.status_code == status.HTTP_200_OK
    history = r.json()["data"]
    assert [entry["content"] for entry in history] == ["v2", "v1"]
    assert history[0]["edited_by"]["username"] == "admin"
    assert client.get(f"{POSTS}/{post_id}", headers=owner_app_headers).json()["data"]["content"] == "v3"
