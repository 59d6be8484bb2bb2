# cardapp/registry/service.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardapp.core.config import settings
from cardapp.core.errors import NotFoundError, StorageError, ValidationError
from cardapp.registry import repository as repo
from cardapp.registry.models import UserCard
from cardapp.registry.schemas import ProfileSnapshot, RecentUserOut, RegistryStats

log = logging.getLogger("uvicorn")


@dataclass
class RegistrationResult:
    user_number: int
    is_new_user: bool
    user: UserCard


# tope de BIGINT (Postgres y SQLite): más grande ni llega a la DB
MAX_COUNT = 2**63 - 1


def validate_profile(profile: ProfileSnapshot) -> None:
    for field, label in (("username", "username"), ("display_name", "displayName")):
        value = getattr(profile, field)
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{label} is required")
    for field in ("followers", "following"):
        value = getattr(profile, field)
        if value is None:
            continue
        if value < 0:
            raise ValidationError(f"{field} must be >= 0")
        if value > MAX_COUNT:
            raise ValidationError(f"{field} is too large")


async def _register_once(db: AsyncSession, profile: ProfileSnapshot) -> RegistrationResult:
    card = await repo.get_by_username(db, profile.username)
    if card:
        repo.apply_profile(card, profile)
        await db.flush()
        return RegistrationResult(card.user_number, False, card)

    # alta nueva: contador + fila en la MISMA transacción
    await repo.ensure_counter(db)
    number = await repo.increment_counter(db)
    card = await repo.create_user_card(db, user_number=number, profile=profile)
    return RegistrationResult(number, True, card)


async def register_or_update(
    db: AsyncSession,
    profile: ProfileSnapshot,
    *,
    max_attempts: int | None = None,
) -> RegistrationResult:
    """
    Devuelve el número permanente del username, creándolo solo si
    nunca se vio. Hace commit/rollback él mismo: el alta (contador + fila)
    es todo o nada.

    Si dos altas del mismo username chocan, el UNIQUE de username hace
    fallar al perdedor; hacemos rollback (se deshace su +1 del contador)
    y reintentamos, y en el reintento ya cae en la rama de "existe".
    """
    validate_profile(profile)
    attempts = max(1, max_attempts or settings.REGISTER_MAX_ATTEMPTS)

    for attempt in range(1, attempts + 1):
        try:
            result = await _register_once(db, profile)
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            log.warning(
                "⚠️ conflicto registrando %r (intento %s/%s): %s",
                profile.username, attempt, attempts, e.orig,
            )
            continue
        except SQLAlchemyError as e:
            await db.rollback()
            log.error(f"❌ DB falló registrando {profile.username!r}: {e!r}")
            raise StorageError("storage unavailable") from e
        except Exception:
            await db.rollback()
            raise

        if result.is_new_user:
            log.info(f"🆕 {profile.username!r} registrado con número {result.user_number}")
        else:
            log.info(f"👤 {profile.username!r} actualizado (número {result.user_number})")
        return result

    raise StorageError(f"could not register {profile.username!r} after {attempts} attempts")


async def lookup(db: AsyncSession, username: str) -> UserCard:
    """Búsqueda exacta (sin lower/strip)."""
    try:
        card = await repo.get_by_username(db, username)
    except SQLAlchemyError as e:
        raise StorageError("storage unavailable") from e
    if card is None:
        raise NotFoundError(f"user {username!r} not found")
    return card


async def get_stats(db: AsyncSession, *, limit: int | None = None) -> RegistryStats:
    try:
        total = await repo.count_users(db)
        counter = await repo.get_counter(db)
        recent = await repo.list_recent(db, limit or settings.RECENT_USERS_LIMIT)
    except SQLAlchemyError as e:
        raise StorageError("storage unavailable") from e

    return RegistryStats(
        total_users=total,
        current_counter=counter or 0,
        recent_users=[RecentUserOut.model_validate(u) for u in recent],
    )
