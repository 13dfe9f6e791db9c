# tests/v1/test_timeline.py
"""Tests for timeline posts, reply threads, reactions and deletion."""

from datetime import timedelta

import pytest
from fastapi import status

from commung.db.time import utcnow
from commung.models import Community, ModerationLog, Notification

POSTS = "/api/v1/app/posts"


@pytest.fixture()
def member(community, add_member, auth_headers, tenant_headers):
    """A plain member with ready-to-use app headers."""
    user, profile = add_member(community, "member1")
    return profile, tenant_headers(auth_headers(user))


def _post(client, headers, profile_id: str, **body):
    body.setdefault("content", "hello")
    return client.post(POSTS, json=body, params={"profile_id": profile_id}, headers=headers)


def test_create_and_list(client, community, owner_profile, owner_app_headers) -> None:
    r = _post(client, owner_app_headers, owner_profile.id, content="첫 글", content_warning="스포")
    assert r.status_code == status.HTTP_201_CREATED
    post = r.json()["data"]
    assert post["author"]["username"] == "admin"
    assert post["depth"] == 0
    assert post["content_warning"] == "스포"

    r = client.get(POSTS, headers=owner_app_headers)
    body = r.json()
    assert [row["id"] for row in body["data"]] == [post["id"]]
    assert body["hasMore"] is False
    assert body["nextCursor"] is None


def test_cursor_pages_do_not_overlap(client, community, owner_profile, owner_app_headers) -> None:
    created = {
        _post(client, owner_app_headers, owner_profile.id, content=f"글 {n}").json()["data"]["id"]
        for n in range(3)
    }

    first = client.get(POSTS, params={"limit": 2}, headers=owner_app_headers).json()
    assert len(first["data"]) == 2
    assert first["hasMore"] is True

    second = client.get(
        POSTS,
        params={"limit": 2, "cursor": first["nextCursor"]},
        headers=owner_app_headers,
    ).json()
    assert second["hasMore"] is False
    seen = [row["id"] for row in first["data"] + second["data"]]
    assert sorted(seen) == sorted(created)


def test_unknown_cursor_is_an_empty_page(client, community, owner_app_headers) -> None:
    r = client.get(POSTS, params={"cursor": "does-not-exist"}, headers=owner_app_headers)
    assert r.json()["data"] == []


def test_reply_notifies_parent_author(client, db_session, community, owner_profile, owner_app_headers, member) -> None:
    profile, headers = member
    parent_id = _post(client, owner_app_headers, owner_profile.id).json()["data"]["id"]

    r = _post(client, headers, profile.id, content="답글 @admin", in_reply_to_id=parent_id)
    assert r.status_code == status.HTTP_201_CREATED
    assert r.json()["data"]["depth"] == 1

    notifications = (
        db_session.query(Notification).filter(Notification.recipient_id == owner_profile.id).all()
    )
    # The mention of the reply recipient is folded into the reply notification.
    assert [n.type for n in notifications] == ["reply"]


def test_mention_notifies_mentioned_profile(client, db_session, community, owner_profile, owner_app_headers, member) -> None:
    profile, _ = member
    _post(client, owner_app_headers, owner_profile.id, content="@member1 @member1 안녕")

    notifications = db_session.query(Notification).filter(Notification.recipient_id == profile.id).all()
    assert [n.type for n in notifications] == ["mention"]
    assert notifications[0].profile_id == owner_profile.id


def test_announcements_are_owner_only(client, community, owner_profile, owner_app_headers, member) -> None:
    profile, headers = member
    r = _post(client, headers, profile.id, announcement=True)
    assert r.status_code == status.HTTP_403_FORBIDDEN

    r = _post(client, owner_app_headers, owner_profile.id, content="공지", announcement=True)
    assert r.status_code == status.HTTP_201_CREATED
    _post(client, owner_app_headers, owner_profile.id, content="일반 글")

    r = client.get(f"{POSTS}/announcements", headers=owner_app_headers)
    assert [row["content"] for row in r.json()["data"]] == ["공지"]


def test_muted_profile_cannot_post(client, community, add_member, auth_headers, tenant_headers) -> None:
    user, profile = add_member(community, "quiet", muted=True)
    r = _post(client, tenant_headers(auth_headers(user)), profile.id)
    assert r.status_code == status.HTTP_403_FORBIDDEN


def test_empty_post_is_rejected(client, community, owner_profile, owner_app_headers) -> None:
    r = _post(client, owner_app_headers, owner_profile.id, content="   ")
    assert r.status_code == status.HTTP_400_BAD_REQUEST


def test_reply_to_missing_post_is_not_found(client, community, owner_profile, owner_app_headers) -> None:
    r = _post(client, owner_app_headers, owner_profile.id, in_reply_to_id="missing")
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_detail_has_tree_rows_and_parent_thread(client, community, owner_profile, owner_app_headers) -> None:
    root = _post(client, owner_app_headers, owner_profile.id, content="root").json()["data"]["id"]
    parent_id = root
    chain = []
    for n in range(5):
        parent_id = _post(
            client, owner_app_headers, owner_profile.id, content=f"reply {n}", in_reply_to_id=parent_id
        ).json()["data"]["id"]
        chain.append(parent_id)

    detail = client.get(f"{POSTS}/{root}", headers=owner_app_headers).json()["data"]
    assert detail["parent_thread"] == []
    assert [row["indent"] for row in detail["display_rows"]] == [0, 1, 2, 3, 3]
    assert [row["id"] for row in detail["display_rows"]] == chain
    assert detail["replies"][0]["replies"][0]["id"] == chain[1]

    middle = client.get(f"{POSTS}/{chain[1]}", headers=owner_app_headers).json()["data"]
    assert [row["id"] for row in middle["parent_thread"]] == [root, chain[0]]
    assert [row["id"] for row in middle["display_rows"]] == chain[2:]


def test_reply_depth_is_limited(client, community, owner_profile, owner_app_headers) -> None:
    parent_id = _post(client, owner_app_headers, owner_profile.id).json()["data"]["id"]
    for _ in range(10):
        r = _post(client, owner_app_headers, owner_profile.id, in_reply_to_id=parent_id)
        assert r.status_code == status.HTTP_201_CREATED
        parent_id = r.json()["data"]["id"]

    r = _post(client, owner_app_headers, owner_profile.id, in_reply_to_id=parent_id)
    assert r.status_code == status.HTTP_400_BAD_REQUEST


def test_replies_are_not_on_the_timeline(client, community, owner_profile, owner_app_headers) -> None:
    root = _post(client, owner_app_headers, owner_profile.id).json()["data"]["id"]
    _post(client, owner_app_headers, owner_profile.id, in_reply_to_id=root)

    rows = client.get(POSTS, headers=owner_app_headers).json()["data"]
    assert [row["id"] for row in rows] == [root]
    assert rows[0]["reply_count"] == 1


def test_reactions(client, db_session, community, owner_profile, owner_app_headers, member) -> None:
    profile, headers = member
    post_id = _post(client, owner_app_headers, owner_profile.id).json()["data"]["id"]
    url = f"{POSTS}/{post_id}/reactions"

    r = client.post(url, json={"emoji": "👍"}, params={"profile_id": profile.id}, headers=headers)
    assert r.status_code == status.HTTP_201_CREATED
    r = client.post(url, json={"emoji": "👍"}, params={"profile_id": profile.id}, headers=headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST

    detail = client.get(f"{POSTS}/{post_id}", headers=headers).json()["data"]
    assert [p["username"] for p in detail["reactions"]["👍"]] == ["member1"]
    assert (
        db_session.query(Notification)
        .filter(Notification.recipient_id == owner_profile.id, Notification.type == "reaction")
        .count()
        == 1
    )

    params = {"profile_id": profile.id, "emoji": "👍"}
    assert client.delete(url, params=params, headers=headers).status_code == status.HTTP_204_NO_CONTENT
    assert client.delete(url, params=params, headers=headers).status_code == status.HTTP_404_NOT_FOUND


def test_author_edits_own_post(client, community, owner_profile, owner_app_headers, member) -> None:
    profile, headers = member
    post_id = _post(client, headers, profile.id).json()["data"]["id"]

    r = client.put(
        f"{POSTS}/{post_id}",
        json={"content": "edited"},
        params={"profile_id": profile.id},
        headers=headers,
    )
    assert r.json()["data"]["content"] == "edited"

    r = client.put(
        f"{POSTS}/{post_id}",
        json={"content": "not yours"},
        params={"profile_id": owner_profile.id},
        headers=owner_app_headers,
    )
    assert r.status_code == status.HTTP_403_FORBIDDEN


def test_delete_own_post(client, community, member) -> None:
    profile, headers = member
    post_id = _post(client, headers, profile.id).json()["data"]["id"]

    r = client.delete(f"{POSTS}/{post_id}", params={"profile_id": profile.id}, headers=headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT
    assert client.get(f"{POSTS}/{post_id}", headers=headers).status_code == status.HTTP_404_NOT_FOUND


def test_member_cannot_delete_others_post(client, community, owner_profile, owner_app_headers, member) -> None:
    profile, headers = member
    post_id = _post(client, owner_app_headers, owner_profile.id).json()["data"]["id"]

    r = client.delete(f"{POSTS}/{post_id}", params={"profile_id": profile.id}, headers=headers)
    assert r.status_code == status.HTTP_403_FORBIDDEN


def test_staff_delete_is_logged(client, db_session, community, owner_profile, owner_app_headers, member) -> None:
    profile, headers = member
    post_id = _post(client, headers, profile.id, content="규칙 위반").json()["data"]["id"]

    r = client.delete(
        f"{POSTS}/{post_id}", params={"profile_id": owner_profile.id}, headers=owner_app_headers
    )
    assert r.status_code == status.HTTP_204_NO_CONTENT

    log = db_session.query(ModerationLog).one()
    assert log.action == "delete_post"
    assert log.target_post_id == post_id
    assert log.target_profile_id == profile.id
    assert "규칙 위반" in log.description


def test_only_staff_post_before_start(client, db_session, community, owner_profile, owner_app_headers, member) -> None:
    row = db_session.get(Community, community.id)
    row.starts_at = utcnow() + timedelta(days=1)
    db_session.commit()
    profile, headers = member

    assert _post(client, headers, profile.id).status_code == status.HTTP_403_FORBIDDEN
    assert _post(client, owner_app_headers, owner_profile.id).status_code == status.HTTP_201_CREATED


def test_nobody_posts_after_end(client, db_session, community, owner_profile, owner_app_headers) -> None:
    row = db_session.get(Community, community.id)
    row.starts_at = utcnow() - timedelta(days=10)
    row.ends_at = utcnow() - timedelta(days=1)
    db_session.commit()

    r = _post(client, owner_app_headers, owner_profile.id)
    assert r.status_code == status.HTTP_403_FORBIDDEN
    assert r.json()["error"] == "커뮤가 종료되었습니다"
