# tests/v1/test_members.py
"""Tests for member listing and role management."""

from fastapi import status

from commung.models import Community, Membership

BASE = "/api/v1/console/communities/test/members"


def _membership(db_session, user) -> Membership:
    return db_session.query(Membership).filter(Membership.user_id == user.id).one()


def test_owner_lists_members_with_assignable_roles(client, community, owner, owner_headers, add_member) -> None:
    member, _ = add_member(community, "member1")

    r = client.get(BASE, headers=owner_headers)
    assert r.status_code == status.HTTP_200_OK
    body = r.json()
    assert body["total"] == 2
    rows = {row["user_id"]: row for row in body["data"]}
    assert rows[owner.id]["assignable_roles"] == []
    assert rows[member.id]["assignable_roles"] == ["owner", "moderator", "member"]
    assert rows[member.id]["profiles"][0]["username"] == "member1"


def test_moderator_is_never_offered_owner(client, community, add_member, auth_headers) -> None:
    moderator, _ = add_member(community, "mod", role="moderator")
    add_member(community, "member1")

    r = client.get(BASE, headers=auth_headers(moderator))
    assert r.status_code == status.HTTP_200_OK
    for row in r.json()["data"]:
        assert "owner" not in row["assignable_roles"]
        if row["role"] == "owner":
            assert row["assignable_roles"] == []


def test_members_cannot_list(client, community, add_member, auth_headers) -> None:
    member, _ = add_member(community, "member1")
    r = client.get(BASE, headers=auth_headers(member))
    assert r.status_code == status.HTTP_403_FORBIDDEN


def test_moderator_cannot_assign_owner(client, db_session, community, add_member, auth_headers) -> None:
    moderator, _ = add_member(community, "mod", role="moderator")
    member, _ = add_member(community, "member1")

    r = client.put(
        f"{BASE}/{_membership(db_session, member).id}/role",
        json={"role": "owner"},
        headers=auth_headers(moderator),
    )
    assert r.status_code == status.HTTP_403_FORBIDDEN


def test_moderator_promotes_member(client, db_session, community, add_member, auth_headers) -> None:
    moderator, _ = add_member(community, "mod", role="moderator")
    member, _ = add_member(community, "member1")

    r = client.put(
        f"{BASE}/{_membership(db_session, member).id}/role",
        json={"role": "moderator"},
        headers=auth_headers(moderator),
    )
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["data"]["role"] == "moderator"


def test_owner_role_cannot_be_changed(client, db_session, community, owner, owner_headers) -> None:
    r = client.put(
        f"{BASE}/{_membership(db_session, owner).id}/role",
        json={"role": "member"},
        headers=owner_headers,
    )
    assert r.status_code == status.HTTP_400_BAD_REQUEST


def test_unknown_role_is_rejected(client, db_session, community, owner_headers, add_member) -> None:
    member, _ = add_member(community, "member1")
    r = client.put(
        f"{BASE}/{_membership(db_session, member).id}/role",
        json={"role": "admin"},
        headers=owner_headers,
    )
    assert r.status_code == status.HTTP_400_BAD_REQUEST


def test_assigning_owner_transfers_ownership(client, db_session, community, owner, owner_headers, add_member) -> None:
    member, _ = add_member(community, "heir")

    r = client.put(
        f"{BASE}/{_membership(db_session, member).id}/role",
        json={"role": "owner"},
        headers=owner_headers,
    )
    assert r.status_code == status.HTTP_200_OK

    db_session.expire_all()
    assert _membership(db_session, member).role == "owner"
    assert _membership(db_session, owner).role == "moderator"
    assert db_session.get(Community, community.id).owner_id == member.id


def test_owner_removes_member(client, db_session, community, owner_headers, add_member, auth_headers, tenant_headers) -> None:
    member, _ = add_member(community, "gone")

    r = client.delete(f"{BASE}/{_membership(db_session, member).id}", headers=owner_headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT

    r = client.get("/api/v1/app/me", headers=tenant_headers(auth_headers(member)))
    assert r.status_code == status.HTTP_403_FORBIDDEN

    r = client.get(BASE, headers=owner_headers)
    assert r.json()["total"] == 1


def test_moderator_cannot_remove(client, db_session, community, add_member, auth_headers) -> None:
    moderator, _ = add_member(community, "mod", role="moderator")
    member, _ = add_member(community, "member1")

    r = client.delete(
        f"{BASE}/{_membership(db_session, member).id}",
        headers=auth_headers(moderator),
    )
    assert r.status_code == status.HTTP_403_FORBIDDEN
