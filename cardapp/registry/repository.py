# cardapp/registry/repository.py
from __future__ import annotations

from typing import List
from sqlalchemy import select, update, func, insert as sa_insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from cardapp.registry.models import UserCard, CardCounter, COUNTER_ID, utcnow
from cardapp.registry.schemas import ProfileSnapshot

# campos que se pisan en cada visita (username/userNumber/createdAt jamás)
MUTABLE_FIELDS = (
    "display_name",
    "profile_image",
    "bio",
    "followers",
    "following",
    "verified",
    "location",
)


async def get_by_username(db: AsyncSession, username: str) -> UserCard | None:
    res = await db.execute(select(UserCard).where(UserCard.username == username))
    return res.scalar_one_or_none()


async def create_user_card(
    db: AsyncSession,
    *,
    user_number: int,
    profile: ProfileSnapshot,
) -> UserCard:
    card = UserCard(username=profile.username, user_number=user_number)
    apply_profile(card, profile)
    db.add(card)
    await db.flush()
    await db.refresh(card)
    return card


def apply_profile(card: UserCard, profile: ProfileSnapshot) -> None:
    """Copia los campos mutables del snapshot y refresca updated_at. No hace flush."""
    for field in MUTABLE_FIELDS:
        setattr(card, field, getattr(profile, field))
    card.updated_at = utcnow()


# -------------------------
# 🔢 contador singleton
# -------------------------


def _insert_for(db: AsyncSession):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    return None


async def ensure_counter(db: AsyncSession) -> None:
    """
    Crea la fila del contador (counter=0) si no existe.
    Idempotente: si ya está, no hace nada.
    """
    insert = _insert_for(db)
    if insert is not None:
        stmt = (
            insert(CardCounter)
            .values(id=COUNTER_ID, counter=0)
            .on_conflict_do_nothing(index_elements=[CardCounter.id])
        )
        await db.execute(stmt)
        return

    # otros motores: sin ON CONFLICT, la PK igual impide duplicados
    res = await db.execute(select(CardCounter.id).where(CardCounter.id == COUNTER_ID))
    if res.scalar_one_or_none() is None:
        await db.execute(sa_insert(CardCounter).values(id=COUNTER_ID, counter=0))


async def increment_counter(db: AsyncSession) -> int:
    """
    UPDATE ... SET counter = counter + 1 RETURNING counter.
    El UPDATE bloquea la fila hasta el commit/rollback del caller,
    así dos altas concurrentes nunca leen el mismo valor.
    """
    stmt = (
        update(CardCounter)
        .where(CardCounter.id == COUNTER_ID)
        .values(counter=CardCounter.counter + 1)
        .returning(CardCounter.counter)
        .execution_options(synchronize_session=False)
    )
    res = await db.execute(stmt)
    return res.scalar_one()


async def get_counter(db: AsyncSession) -> int | None:
    res = await db.execute(select(CardCounter.counter).where(CardCounter.id == COUNTER_ID))
    return res.scalar_one_or_none()


# -------------------------
# 📊 stats
# -------------------------


async def count_users(db: AsyncSession) -> int:
    res = await db.execute(select(func.count()).select_from(UserCard))
    return int(res.scalar_one())


async def list_recent(db: AsyncSession, limit: int = 10) -> List[UserCard]:
    # más nuevos primero (y por número para desempatar)
    res = await db.execute(
        select(UserCard)
        .order_by(UserCard.created_at.desc(), UserCard.user_number.desc())
        .limit(limit)
    )
    return list(res.scalars())
