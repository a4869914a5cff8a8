from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.models.user import ROLE_ADMIN
from app.utils.security import decode_access_token
from app.utils.errors import Unauthenticated, Forbidden
from app.utils.validators import normalize_email
from app.services.user_service import resolve_role

# auto_error=False so that a missing header yields our own Unauthenticated response
security = HTTPBearer(auto_error=False)


def authenticate(credentials: Optional[HTTPAuthorizationCredentials]) -> str:
    """
    Verify a bearer credential and return the asserted email.
    Every failure mode produces the same error so callers learn nothing about which check failed.
    """
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise Unauthenticated()

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise Unauthenticated()

    email = payload.get("email") or payload.get("sub")
    if not email or not isinstance(email, str):
        raise Unauthenticated()

    return normalize_email(email)


def ensure_identity_matches(asserted_email: str, owner_email: Optional[str]) -> None:
    """The single authorization predicate: the authenticated caller must be the resource owner"""
    if not owner_email or normalize_email(owner_email) != asserted_email:
        raise Forbidden()


async def get_current_user_email(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """Extract the caller's verified email from the JWT"""
    return authenticate(credentials)


async def get_path_matched_email(
    email: str,
    current_email: str = Depends(get_current_user_email)
) -> str:
    """For routes with an {email} path parameter: the path must name the caller"""
    ensure_identity_matches(current_email, email)
    return current_email


async def get_current_admin_email(
    current_email: str = Depends(get_current_user_email)
) -> str:
    """Role gate: re-reads the stored role on every call, never trusts the token for it"""
    role = await resolve_role(current_email)
    if role != ROLE_ADMIN:
        raise Forbidden("Forbidden - Admins Only")
    return current_email
