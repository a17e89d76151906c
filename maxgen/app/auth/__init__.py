"""Caller identity: bearer tokens, profiles, and roles.

Request dependencies live in :mod:`maxgen.app.auth.dependencies`.
"""

from .models import AuthenticatedUser, UserRole
from .repository import PostgresProfileRepository, ProfileRepository
from .tokens import AccessTokenVerifier, extract_bearer_token

__all__ = [
    "AccessTokenVerifier",
    "AuthenticatedUser",
    "PostgresProfileRepository",
    "ProfileRepository",
    "UserRole",
    "extract_bearer_token",
]
