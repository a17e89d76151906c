"""Bearer credential parsing and access token verification."""
from __future__ import annotations

import re
from typing import Optional, Sequence

from jose import JWTError, jwt

from .models import AuthenticatedUser

_BEARER_PATTERN = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header."""

    if not authorization:
        return None
    match = _BEARER_PATTERN.match(authorization.strip())
    if not match:
        return None
    token = match.group(1).strip()
    return token or None


class AccessTokenVerifier:
    """Verifies access tokens issued by the hosted auth provider.

    Tokens are HS256 JWTs signed with the project's JWT secret. The subject
    claim carries the user id.
    """

    def __init__(
        self,
        secret: str,
        *,
        audience: Optional[str] = "authenticated",
        algorithms: Sequence[str] = ("HS256",),
    ) -> None:
        if not secret:
            raise ValueError("secret must be provided")
        self._secret = secret
        self._audience = audience
        self._algorithms = list(algorithms)

    def verify(self, token: str) -> Optional[AuthenticatedUser]:
        """Return the caller for a valid token, ``None`` otherwise."""

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=self._algorithms,
                audience=self._audience,
                options={"verify_aud": self._audience is not None},
            )
        except JWTError:
            return None

        subject = claims.get("sub")
        if not subject:
            return None
        email = claims.get("email")
        return AuthenticatedUser(id=str(subject), email=str(email) if email else None)
