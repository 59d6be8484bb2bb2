# cardapp/profiles/service.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Awaitable, Callable, List, Tuple, Union

from cardapp.core.config import settings
from cardapp.core.errors import NotFoundError, ProfileSourceError
from cardapp.profiles.mock import mock_profile
from cardapp.profiles.twitter import fetch_twitter_profile
from cardapp.registry.schemas import ProfileSnapshot

log = logging.getLogger("uvicorn")


@dataclass(frozen=True)
class ProfileOk:
    source: str
    profile: ProfileSnapshot


@dataclass(frozen=True)
class ProfileErr:
    source: str
    reason: str


ProfileResult = Union[ProfileOk, ProfileErr]
Strategy = Callable[[str], Awaitable[ProfileResult]]


async def twitter_source(username: str, token: str) -> ProfileResult:
    try:
        profile = await fetch_twitter_profile(username, token)
    except (ProfileSourceError, NotFoundError) as e:
        return ProfileErr("twitter", str(e))
    return ProfileOk("twitter", profile)


async def mock_source(username: str) -> ProfileResult:
    return ProfileOk("mock", mock_profile(username))


def build_strategies(token: str | None, allow_mock: bool) -> List[Tuple[str, Strategy]]:
    """Orden: Twitter real (si hay token) → mock (si está permitido)."""
    strategies: List[Tuple[str, Strategy]] = []
    if token:
        strategies.append(("twitter", partial(twitter_source, token=token)))
    if allow_mock:
        strategies.append(("mock", mock_source))
    return strategies


async def resolve_profile(
    username: str,
    *,
    token: str | None = None,
    allow_mock: bool | None = None,
) -> ProfileResult:
    """
    Prueba las fuentes en orden y devuelve el primer ProfileOk.
    Si todas fallan, un ProfileErr con el motivo de cada una.
    """
    token = token or settings.TWITTER_BEARER_TOKEN
    if allow_mock is None:
        allow_mock = settings.ALLOW_MOCK_PROFILES

    reasons: list[str] = []
    for name, strategy in build_strategies(token, allow_mock):
        result = await strategy(username)
        if isinstance(result, ProfileOk):
            return result
        log.warning(f"⚠️ fuente {name} falló para {username!r}: {result.reason}")
        reasons.append(f"{result.source}: {result.reason}")

    return ProfileErr("none", "; ".join(reasons) or "no profile source available")
