"""Console endpoints for join applications."""

from typing import Any, Literal

from fastapi import APIRouter, Query, status

from commung.api.v1.dependencies import ConsoleCommunityDep, CurrentUserDep, SessionDep
from commung.schemas.common import DataResponse
from commung.schemas.membership import (
    ApplicationCreate,
    ApplicationReject,
    ApplicationResponse,
    ApplicationUpdate,
)
from commung.services import membership_service

router = APIRouter(prefix="/console", tags=["applications"])


@router.get("/applications/mine", response_model=DataResponse[list[ApplicationResponse]])
async def list_my_applications(db: SessionDep, user: CurrentUserDep) -> dict[str, Any]:
    return {"data": membership_service.list_my_applications(db, user)}


@router.post(
    "/communities/{slug}/applications",
    response_model=DataResponse[ApplicationResponse],
    status_code=status.HTTP_201_CREATED,
)
async def apply_to_community(
    data: ApplicationCreate,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> dict[str, Any]:
    """Apply to join a recruiting community."""
    application = membership_service.apply(db, user, community, data)
    return {"data": application}


@router.get(
    "/communities/{slug}/applications",
    response_model=DataResponse[list[ApplicationResponse]],
)
async def list_applications(
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
    status_filter: Literal["pending", "approved", "rejected"] | None = Query(None, alias="status"),
) -> dict[str, Any]:
    membership_service.require_staff(db, user, community)
    return {"data": membership_service.list_applications(db, community, status_filter)}


@router.put(
    "/communities/{slug}/applications/{application_id}",
    response_model=DataResponse[ApplicationResponse],
)
async def update_my_application(
    application_id: str,
    data: ApplicationUpdate,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> dict[str, Any]:
    application = membership_service.get_own_application(db, user, community, application_id)
    return {"data": membership_service.update_application(db, application, data)}


@router.delete(
    "/communities/{slug}/applications/{application_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def withdraw_my_application(
    application_id: str,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> None:
    application = membership_service.get_own_application(db, user, community, application_id)
    membership_service.withdraw_application(db, application)


@router.post(
    "/communities/{slug}/applications/{application_id}/approve",
    response_model=DataResponse[ApplicationResponse],
)
async def approve_application(
    application_id: str,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> dict[str, Any]:
    membership_service.require_staff(db, user, community)
    application = membership_service.get_application(db, community, application_id)
    return {"data": membership_service.approve_application(db, community, user, application)}


@router.post(
    "/communities/{slug}/applications/{application_id}/reject",
    response_model=DataResponse[ApplicationResponse],
)
async def reject_application(
    application_id: str,
    data: ApplicationReject,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> dict[str, Any]:
    membership_service.require_staff(db, user, community)
    application = membership_service.get_application(db, community, application_id)
    return {"data": membership_service.reject_application(db, user, application, data.reason)}
