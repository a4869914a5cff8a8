import hmac
import logging
from typing import Optional
from fastapi import APIRouter, Header
from app.config import settings
from app.schemas.auth import TokenRequest, TokenResponse
from app.services.user_service import get_or_create_user
from app.utils.errors import Unauthenticated
from app.utils.security import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


def _check_issuer_key(presented: Optional[str]) -> None:
    expected = settings.TOKEN_ISSUER_KEY
    if not expected:
        return
    if not presented or not hmac.compare_digest(presented.encode(), expected.encode()):
        logger.warning("[AUTH] Token request rejected: missing or wrong issuer key")
        raise Unauthenticated()


@router.post("/jwt", response_model=TokenResponse)
async def issue_token(
    request: TokenRequest,
    x_issuer_key: Optional[str] = Header(None)
):
    """
    Sign in (registering the user on first sign-in) and get an access token.

    WARNING: the email in the body is taken at face value. Without TOKEN_ISSUER_KEY
    anyone can obtain a token for any email, including an admin's. Production
    deployments must set TOKEN_ISSUER_KEY and call this route only from the
    trusted sign-in front end that has verified the user.
    """
    _check_issuer_key(x_issuer_key)

    user, _ = await get_or_create_user(
        email=request.email,
        name=request.name,
        photo_url=request.photo_url,
    )

    # No role claim; privileged calls re-read the stored role
    token = create_access_token(data={"sub": user["email"], "email": user["email"]})

    return TokenResponse(token=token, token_type="bearer")
