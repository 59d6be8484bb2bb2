# cardapp/profiles/router.py
from fastapi import APIRouter, HTTPException, Header
from pydantic import BaseModel

from cardapp.core.config import settings
from cardapp.core.errors import NotFoundError, ProfileSourceError
from cardapp.profiles.mock import mock_profile
from cardapp.profiles.twitter import fetch_twitter_profile
from cardapp.profiles import service as svc

router = APIRouter(prefix="/api", tags=["profiles"])


class UsernameIn(BaseModel):
    username: str | None = None


def _require_username(payload: UsernameIn) -> str:
    username = (payload.username or "").strip().lstrip("@")
    if not username:
        raise HTTPException(status_code=400, detail="username is required")
    return username


def _bearer(authorization: str | None) -> str | None:
    # token de la sesión OAuth si viene; si no, el token de app
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1].strip() or None
    return settings.TWITTER_BEARER_TOKEN


@router.post("/profiles/twitter/")
async def twitter_profile(payload: UsernameIn, authorization: str | None = Header(None)):
    username = _require_username(payload)
    token = _bearer(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="twitter api access not available")

    try:
        profile = await fetch_twitter_profile(username, token)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="user not found")
    except ProfileSourceError:
        raise HTTPException(status_code=502, detail="failed to fetch twitter profile")
    return {"profile": profile.model_dump(by_alias=True), "source": "twitter"}


@router.post("/profiles/mock/")
async def mock(payload: UsernameIn):
    username = _require_username(payload)
    return {
        "profile": mock_profile(username).model_dump(by_alias=True),
        "source": "mock",
        "message": "profile generated with mock data",
    }


@router.post("/profiles/resolve/")
async def resolve(payload: UsernameIn, authorization: str | None = Header(None)):
    """Twitter real → mock. El primero que funcione gana."""
    username = _require_username(payload)
    result = await svc.resolve_profile(username, token=_bearer(authorization))
    if isinstance(result, svc.ProfileErr):
        raise HTTPException(status_code=502, detail=result.reason)
    return {"profile": result.profile.model_dump(by_alias=True), "source": result.source}


@router.get("/oauth-status/")
async def oauth_status():
    ok = settings.has_twitter_credentials
    return {
        "hasTwitterCredentials": ok,
        "message": "Twitter OAuth is configured" if ok else "Twitter OAuth is not configured",
    }
