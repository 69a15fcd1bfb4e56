import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse, Response

from app.api.deps import get_optional_user
from app.core import config
from app.models.domain import ActionResult, UserOut
from app.models.sql import User
from app.services.auth import decode_session_token

logger = logging.getLogger("proposal_server.auth")

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get("/me", response_model=Optional[UserOut])
def me(user: Optional[User] = Depends(get_optional_user)):
    return user


@router.post("/logout", response_model=ActionResult)
def logout(response: Response):
    response.delete_cookie(config.COOKIE_NAME, path="/")
    return ActionResult()


@router.get("/auto-login")
def auto_login(token: Optional[str] = None):
    if not token:
        raise HTTPException(status_code=400, detail="Token is required")
    claims = decode_session_token(token)
    logger.info(f"Auto login for {claims['sub']}")

    response = RedirectResponse(url="/", status_code=302)
    response.set_cookie(
        config.COOKIE_NAME,
        token,
        max_age=config.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        path="/",
    )
    return response
