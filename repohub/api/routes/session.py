from fastapi import APIRouter, Depends

from repohub.api.dependencies.auth import AuthenticationState, authenticated
from repohub.api.schemas.session import SessionResponse, SessionUser

router = APIRouter(prefix="/api/auth")


@router.get("/session", response_model=SessionResponse)
async def get_session(
    auth: AuthenticationState = Depends(authenticated),
) -> SessionResponse:
    """Who the session token belongs to."""
    return SessionResponse(
        user=SessionUser(
            identity_id=auth.identity_id,
            username=auth.username,
            name=auth.name,
            email=auth.email,
        )
    )
