import structlog
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from repohub.api.dependencies.database import get_db_session
from repohub.auth.auth_state import AuthenticationState
from repohub.auth.session import read_session_token
from repohub.config import Settings, get_settings
from repohub.models.user import User

log = get_logger(__name__)


def _get_auth_token(
    request: Request,
    authorization: HTTPAuthorizationCredentials = Depends(HTTPBearer(auto_error=False)),
):
    """Get the auth token from the Authorization header or session cookie."""
    if authorization:
        return authorization.credentials
    token = read_session_token(request)
    if not token:
        raise HTTPException(status_code=403, detail="Authorization header missing")
    return token


def _get_auth_state(
    request: Request,
    token: str = Depends(_get_auth_token),
):
    """Reuse the state resolved by the auth gate, or introspect the token now."""
    auth_state = getattr(request.state, "auth_state", None)
    if auth_state is not None and auth_state.token == token:
        return auth_state
    return AuthenticationState(token)


def authenticated(
    auth_state: AuthenticationState = Depends(_get_auth_state),
    settings: Settings = Depends(get_settings),
) -> AuthenticationState:
    """Ensure the user is authenticated (i.e., has a valid token)"""
    auth_state.assert_is_authenticated()
    auth_state.assert_has_scope(settings.REPOHUB_DEFAULT_SCOPE)
    return auth_state


async def authed_user(
    db: AsyncSession = Depends(get_db_session),
    auth: AuthenticationState = Depends(authenticated),
) -> User:
    try:
        user, created = await User.get_or_create(
            db,
            identity_id=auth.identity_id,
        )

        if created:
            # populate fields we can get from the auth token
            user.name = auth.name
            user.email = auth.email
            user.username = auth.username
            await db.commit()
            log.info(
                "Added new user",
                username=auth.username,
                user_identity_id=auth.identity_id,
            )
    except Exception:
        log.exception("Error saving new authed_user")
        await db.rollback()
        raise HTTPException(status_code=500, detail="Internal Server Error")

    # include username and id in any logs emitted by authed_user-dependants
    with structlog.contextvars.bound_contextvars(
        username=auth.username, user_identity_id=auth.identity_id
    ):
        yield user
