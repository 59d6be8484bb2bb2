# cardapp/profiles/twitter.py
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from cardapp.core.config import settings
from cardapp.core.errors import NotFoundError, ProfileSourceError
from cardapp.registry.schemas import ProfileSnapshot

log = logging.getLogger("uvicorn")

USER_FIELDS = "description,profile_image_url,public_metrics,verified,location"


def _big_avatar(url: str | None) -> str | None:
    # Twitter devuelve el avatar de 48px ("_normal"); para la tarjeta queremos 400x400
    # solo el sufijo del nombre de archivo ("abc_normal.jpg"), nunca el path
    if not url:
        return url
    head, slash, name = url.rpartition("/")
    stem, dot, ext = name.rpartition(".")
    if not dot:
        stem, ext = name, ""
    if not stem.endswith("_normal"):
        return url
    return f"{head}{slash}{stem[:-len('_normal')]}_400x400{dot}{ext}"


def snapshot_from_twitter(data: dict[str, Any]) -> ProfileSnapshot:
    """Convierte el `data` de /2/users/by/username al snapshot del front."""
    metrics = data.get("public_metrics") or {}
    return ProfileSnapshot(
        username=data.get("username"),
        display_name=data.get("name"),
        profile_image=_big_avatar(data.get("profile_image_url")),
        bio=data.get("description") or "",
        followers=metrics.get("followers_count") or 0,
        following=metrics.get("following_count") or 0,
        verified=bool(data.get("verified")),
        location=data.get("location") or "",
    )


async def fetch_twitter_profile(
    username: str,
    token: str,
    *,
    client: httpx.AsyncClient | None = None,
) -> ProfileSnapshot:
    """
    GET /2/users/by/username/{username} con Bearer token.
    Lanza NotFoundError si Twitter no devuelve `data`,
    ProfileSourceError si responde no-2xx o no se puede conectar.
    """
    url = f"{settings.TWITTER_API_BASE.rstrip('/')}/2/users/by/username/{quote(username, safe='')}"
    headers = {
        "Authorization": f"Bearer {token}",
        "Accept": "application/json",
    }
    params = {"user.fields": USER_FIELDS}

    try:
        if client is None:
            timeout = httpx.Timeout(settings.TWITTER_TIMEOUT, connect=5.0)
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as c:
                r = await c.get(url, headers=headers, params=params)
        else:
            r = await client.get(url, headers=headers, params=params)
    except httpx.HTTPError as e:
        log.warning("Twitter API inalcanzable para %r: %r", username, e)
        raise ProfileSourceError(f"twitter request failed: {e!r}") from e

    if r.status_code < 200 or r.status_code >= 300:
        log.warning("Twitter API error %s para %r: %s", r.status_code, username, r.text[:500])
        raise ProfileSourceError(f"twitter api error: {r.status_code}")

    try:
        payload = r.json()
    except ValueError as e:
        raise ProfileSourceError("twitter api returned invalid JSON") from e

    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, dict):
        raise NotFoundError(f"twitter user {username!r} not found")

    return snapshot_from_twitter(data)
