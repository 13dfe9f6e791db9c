# tests/v1/test_applications.py
"""Tests for the join-application workflow."""

from fastapi import status

from commung.models import Community, Membership, Profile

BASE = "/api/v1/console/communities/test/applications"


def _apply(client, headers, username: str = "newbie"):
    return client.post(
        BASE,
        json={"profile_name": "뉴비", "profile_username": username, "message": "잘 부탁드립니다"},
        headers=headers,
    )


def test_apply_and_approve(client, db_session, community, make_user, auth_headers, owner_headers, tenant_headers) -> None:
    applicant = make_user("applicant")
    headers = auth_headers(applicant)

    r = _apply(client, headers)
    assert r.status_code == status.HTTP_201_CREATED
    application = r.json()["data"]
    assert application["status"] == "pending"

    r = client.get(BASE, params={"status": "pending"}, headers=owner_headers)
    assert [row["id"] for row in r.json()["data"]] == [application["id"]]

    r = client.post(f"{BASE}/{application['id']}/approve", headers=owner_headers)
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["data"]["status"] == "approved"

    membership = db_session.query(Membership).filter(Membership.user_id == applicant.id).one()
    assert membership.role == "member"
    profile = db_session.query(Profile).filter(Profile.user_id == applicant.id).one()
    assert profile.username == "newbie"
    assert profile.is_primary
    assert not profile.is_muted

    r = client.get("/api/v1/app/me", headers=tenant_headers(headers))
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["data"]["role"] == "member"


def test_approval_mutes_when_community_mutes_new_members(client, db_session, community, make_user, auth_headers, owner_headers) -> None:
    db_session.get(Community, community.id).mute_new_members = True
    db_session.commit()
    applicant = make_user("quiet")

    application_id = _apply(client, auth_headers(applicant)).json()["data"]["id"]
    client.post(f"{BASE}/{application_id}/approve", headers=owner_headers)

    profile = db_session.query(Profile).filter(Profile.user_id == applicant.id).one()
    assert profile.is_muted


def test_second_pending_application_conflicts(client, community, make_user, auth_headers) -> None:
    headers = auth_headers(make_user("eager"))
    assert _apply(client, headers).status_code == status.HTTP_201_CREATED
    r = _apply(client, headers)
    assert r.status_code == status.HTTP_409_CONFLICT


def test_members_cannot_apply(client, community, add_member, auth_headers) -> None:
    member, _ = add_member(community, "already")
    r = _apply(client, auth_headers(member), username="again")
    assert r.status_code == status.HTTP_409_CONFLICT


def test_cannot_apply_when_not_recruiting(client, db_session, community, make_user, auth_headers) -> None:
    db_session.get(Community, community.id).is_recruiting = False
    db_session.commit()
    r = _apply(client, auth_headers(make_user("late")))
    assert r.status_code == status.HTTP_400_BAD_REQUEST


def test_reject_with_reason(client, community, make_user, auth_headers, owner_headers) -> None:
    headers = auth_headers(make_user("rejected"))
    application_id = _apply(client, headers).json()["data"]["id"]

    r = client.post(
        f"{BASE}/{application_id}/reject",
        json={"reason": "정원 초과"},
        headers=owner_headers,
    )
    assert r.status_code == status.HTTP_200_OK
    data = r.json()["data"]
    assert data["status"] == "rejected"
    assert data["rejection_reason"] == "정원 초과"

    r = client.post(f"{BASE}/{application_id}/approve", headers=owner_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST

    r = client.get("/api/v1/console/applications/mine", headers=headers)
    assert [row["status"] for row in r.json()["data"]] == ["rejected"]


def test_members_cannot_review(client, community, make_user, add_member, auth_headers) -> None:
    application_id = _apply(client, auth_headers(make_user("hopeful"))).json()["data"]["id"]
    member, _ = add_member(community, "plain")

    r = client.post(f"{BASE}/{application_id}/approve", headers=auth_headers(member))
    assert r.status_code == status.HTTP_403_FORBIDDEN


def test_applicant_edits_and_withdraws(client, community, make_user, auth_headers, owner_headers) -> None:
    headers = auth_headers(make_user("editor"))
    application_id = _apply(client, headers).json()["data"]["id"]

    r = client.put(
        f"{BASE}/{application_id}",
        json={"profile_username": "renamed"},
        headers=headers,
    )
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["data"]["profile_username"] == "renamed"

    r = client.delete(f"{BASE}/{application_id}", headers=headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT

    r = client.get(BASE, headers=owner_headers)
    assert r.json()["data"] == []


def test_other_users_cannot_edit(client, community, make_user, auth_headers) -> None:
    application_id = _apply(client, auth_headers(make_user("first"))).json()["data"]["id"]
    r = client.put(
        f"{BASE}/{application_id}",
        json={"message": "hijack"},
        headers=auth_headers(make_user("second")),
    )
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_approval_conflicts_when_username_taken(client, community, make_user, auth_headers, owner_headers) -> None:
    application_id = _apply(
        client, auth_headers(make_user("copycat")), username="admin"
    ).json()["data"]["id"]

    r = client.post(f"{BASE}/{application_id}/approve", headers=owner_headers)
    assert r.status_code == status.HTTP_409_CONFLICT


def test_returning_member_gets_old_profiles_back(client, db_session, community, make_user, auth_headers, owner_headers) -> None:
    returning = make_user("returning")
    headers = auth_headers(returning)

    application_id = _apply(client, headers, username="first").json()["data"]["id"]
    client.post(f"{BASE}/{application_id}/approve", headers=owner_headers)
    r = client.post("/api/v1/console/communities/test/leave", headers=headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT

    application_id = _apply(client, headers, username="second").json()["data"]["id"]
    r = client.post(f"{BASE}/{application_id}/approve", headers=owner_headers)
    assert r.status_code == status.HTTP_200_OK

    db_session.expire_all()
    profiles = {
        profile.username: profile
        for profile in db_session.query(Profile).filter(Profile.user_id == returning.id).all()
    }
    assert set(profiles) == {"first", "second"}
    assert all(profile.activated_at is not None for profile in profiles.values())
    assert profiles["first"].is_primary
    assert not profiles["second"].is_primary
