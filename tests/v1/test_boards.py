# tests/v1/test_boards.py
"""Tests for console board management and app board posts."""

import pytest
from fastapi import status

CONSOLE = "/api/v1/console/communities/test/boards"
APP = "/api/v1/app/boards"


@pytest.fixture()
def board(client, community, owner_headers) -> dict:
    r = client.post(
        CONSOLE,
        json={"name": "자유게시판", "slug": "free", "description": "아무 이야기"},
        headers=owner_headers,
    )
    assert r.status_code == status.HTTP_201_CREATED
    return r.json()["data"]


def test_staff_manage_boards(client, board, owner_headers) -> None:
    r = client.post(CONSOLE, json={"name": "중복", "slug": "free"}, headers=owner_headers)
    assert r.status_code == status.HTTP_409_CONFLICT

    r = client.put(
        f"{CONSOLE}/{board['id']}",
        json={"name": "잡담", "allow_comments": False},
        headers=owner_headers,
    )
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["data"]["name"] == "잡담"
    assert r.json()["data"]["allow_comments"] is False
    assert r.json()["data"]["slug"] == "free"

    r = client.delete(f"{CONSOLE}/{board['id']}", headers=owner_headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT
    assert client.get(CONSOLE, headers=owner_headers).json()["data"] == []


def test_members_cannot_manage_boards(client, community, add_member, auth_headers) -> None:
    member, _ = add_member(community, "member1")
    r = client.post(CONSOLE, json={"name": "x", "slug": "x"}, headers=auth_headers(member))
    assert r.status_code == status.HTTP_403_FORBIDDEN


def test_invalid_board_slug(client, community, owner_headers) -> None:
    r = client.post(CONSOLE, json={"name": "x", "slug": "Not Valid"}, headers=owner_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST


def test_board_posts_and_replies(client, board, owner_profile, owner_app_headers) -> None:
    params = {"profile_id": owner_profile.id}
    assert [row["slug"] for row in client.get(APP, headers=owner_app_headers).json()["data"]] == ["free"]

    r = client.post(
        f"{APP}/{board['id']}/posts",
        json={"title": "제목", "content": "본문"},
        params=params,
        headers=owner_app_headers,
    )
    assert r.status_code == status.HTTP_201_CREATED
    post_id = r.json()["data"]["id"]
    posts_url = f"{APP}/{board['id']}/posts"

    listing = client.get(posts_url, headers=owner_app_headers).json()
    assert listing["total"] == 1
    assert listing["data"][0]["title"] == "제목"

    replies_url = f"{posts_url}/{post_id}/replies"
    first = client.post(replies_url, json={"content": "댓글"}, params=params, headers=owner_app_headers)
    assert first.status_code == status.HTTP_201_CREATED
    first_id = first.json()["data"]["id"]
    nested = client.post(
        replies_url,
        json={"content": "대댓글", "in_reply_to_id": first_id},
        params=params,
        headers=owner_app_headers,
    ).json()["data"]
    assert nested["depth"] == 1
    assert nested["root_reply_id"] == first_id

    tree = client.get(replies_url, headers=owner_app_headers).json()["data"]
    assert tree["replies"][0]["replies"][0]["id"] == nested["id"]
    assert tree["display_rows"] == [
        {"id": first_id, "indent": 0},
        {"id": nested["id"], "indent": 1},
    ]

    r = client.delete(f"{replies_url}/{first_id}", params=params, headers=owner_app_headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT
    tree = client.get(replies_url, headers=owner_app_headers).json()["data"]
    assert tree == {"replies": [], "display_rows": []}


def test_comments_can_be_disabled(client, board, owner_headers, owner_profile, owner_app_headers) -> None:
    client.put(f"{CONSOLE}/{board['id']}", json={"allow_comments": False}, headers=owner_headers)
    params = {"profile_id": owner_profile.id}
    post_id = client.post(
        f"{APP}/{board['id']}/posts",
        json={"title": "제목", "content": "본문"},
        params=params,
        headers=owner_app_headers,
    ).json()["data"]["id"]

    r = client.post(
        f"{APP}/{board['id']}/posts/{post_id}/replies",
        json={"content": "댓글"},
        params=params,
        headers=owner_app_headers,
    )
    assert r.status_code == status.HTTP_403_FORBIDDEN


def test_only_author_edits_board_post(client, board, community, owner_profile, owner_app_headers, add_member, auth_headers, tenant_headers) -> None:
    post_id = client.post(
        f"{APP}/{board['id']}/posts",
        json={"title": "제목", "content": "본문"},
        params={"profile_id": owner_profile.id},
        headers=owner_app_headers,
    ).json()["data"]["id"]
    user, profile = add_member(community, "member1")
    headers = tenant_headers(auth_headers(user))

    r = client.put(
        f"{APP}/{board['id']}/posts/{post_id}",
        json={"title": "탈취"},
        params={"profile_id": profile.id},
        headers=headers,
    )
    assert r.status_code == status.HTTP_403_FORBIDDEN

    r = client.put(
        f"{APP}/{board['id']}/posts/{post_id}",
        json={"title": "수정됨"},
        params={"profile_id": owner_profile.id},
        headers=owner_app_headers,
    )
    assert r.json()["data"]["title"] == "수정됨"
    assert r.json()["data"]["content"] == "본문"


def test_deleting_post_hides_it(client, board, owner_profile, owner_app_headers) -> None:
    params = {"profile_id": owner_profile.id}
    post_id = client.post(
        f"{APP}/{board['id']}/posts",
        json={"title": "제목", "content": "본문"},
        params=params,
        headers=owner_app_headers,
    ).json()["data"]["id"]

    r = client.delete(f"{APP}/{board['id']}/posts/{post_id}", params=params, headers=owner_app_headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT
    r = client.get(f"{APP}/{board['id']}/posts/{post_id}", headers=owner_app_headers)
    assert r.status_code == status.HTTP_404_NOT_FOUND
