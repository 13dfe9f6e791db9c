"""Console account endpoints: signup, login sessions and password management."""

from typing import Any

from fastapi import APIRouter, status

from commung.api.v1.dependencies import CurrentSessionDep, CurrentUserDep, SessionDep
from commung.schemas.common import DataResponse
from commung.schemas.user import (
    LoginRequest,
    LoginResponse,
    PasswordChangeRequest,
    SignupRequest,
    UserOut,
)
from commung.services import auth_service

router = APIRouter(prefix="/console/account", tags=["account"])


@router.post(
    "/signup",
    response_model=DataResponse[UserOut],
    status_code=status.HTTP_201_CREATED,
)
async def signup(data: SignupRequest, db: SessionDep) -> dict[str, Any]:
    """Create a console account."""
    user = auth_service.signup(db, data)
    return {"data": user}


@router.post("/login", response_model=DataResponse[LoginResponse])
async def login(data: LoginRequest, db: SessionDep) -> dict[str, Any]:
    """Open a session and return its bearer token.

    Raises:
        Unauthorized: If the login name or password is wrong.
    """
    token, session, user = auth_service.login(db, data)
    return {
        "data": {
            "session_token": token,
            "token_type": "bearer",
            "expires_at": session.expires_at,
            "user": user,
        }
    }


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(db: SessionDep, session: CurrentSessionDep) -> None:
    auth_service.logout(db, session)


@router.get("", response_model=DataResponse[UserOut])
async def read_me(user: CurrentUserDep) -> dict[str, Any]:
    return {"data": user}


@router.post("/password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    data: PasswordChangeRequest,
    db: SessionDep,
    user: CurrentUserDep,
) -> None:
    auth_service.change_password(db, user, data.current_password, data.new_password)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(db: SessionDep, user: CurrentUserDep) -> None:
    """Soft-delete the caller's account and revoke every session."""
    auth_service.delete_account(db, user)
