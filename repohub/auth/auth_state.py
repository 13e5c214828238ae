import typing as t
import uuid

import globus_sdk
from fastapi import HTTPException

from repohub.auth.globus_auth import introspect_token


class AuthenticationState:
    """
    Who is calling the service, resolved from a session token.

    The token is introspected with Globus Auth and the identity, username and
    scopes of the caller are kept for the rest of the request. Authorization
    decisions (who may touch which repository) are left to the routes.
    """

    def __init__(self, token: t.Optional[str]) -> None:
        self.token = token

        self.introspect_data: t.Optional[globus_sdk.GlobusHTTPResponse] = None
        self.identity_id: t.Optional[uuid.UUID] = None
        self.username: t.Optional[str] = None
        self.name: t.Optional[str] = None
        self.email: t.Optional[str] = None
        self.scopes: t.Set[str] = set()

        if token:
            self._handle_token()

    def _handle_token(self) -> None:
        """Given a token, flesh out the AuthenticationState."""
        self.introspect_data = introspect_token(t.cast(str, self.token))
        self.username = self.introspect_data.get("username")
        self.name = self.introspect_data.get("name")
        self.email = self.introspect_data.get("email")
        self.identity_id = (
            uuid.UUID(self.introspect_data["sub"])
            if self.introspect_data.get("sub")
            else None
        )
        self.scopes = set((self.introspect_data.get("scope") or "").split())

    @property
    def is_authenticated(self):
        return self.identity_id is not None

    def assert_is_authenticated(self):
        """
        This tests that is_authenticated=True, and raises an Unauthorized error
        (401) if it is not.
        """
        if not self.is_authenticated:
            raise HTTPException(
                status_code=401, detail="method requires token authenticated access"
            )

    def assert_has_scope(self, scope: str) -> None:
        if scope not in self.scopes:
            raise HTTPException(status_code=403, detail="Missing Scopes")
