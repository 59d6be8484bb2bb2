# cardapp/db/init_db.py
import logging
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from cardapp.db.session import engine as default_engine
from cardapp.db.base import Base

# 👇 importa todos los modelos que deben existir en la DB
from cardapp.registry.models import UserCard, CardCounter
from cardapp.registry import repository as repo

log = logging.getLogger("uvicorn")

CARD_TABLES = (CardCounter.__tablename__, UserCard.__tablename__)


async def init_models(engine: AsyncEngine | None = None) -> list[str]:
    """
    Crea/verifica todas las tablas declaradas en Base.metadata y deja
    el contador en 0 si no existía. Se puede llamar N veces.
    Devuelve las tablas de tarjetas que quedaron en la DB.
    """
    engine = engine or default_engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSession(engine, expire_on_commit=False) as db:
        await repo.ensure_counter(db)
        await db.commit()

    async with engine.connect() as conn:
        names = await conn.run_sync(lambda c: inspect(c).get_table_names())

    tables = [t for t in CARD_TABLES if t in names]
    log.info(f"✅ DB init: tablas creadas/verificadas {tables}.")
    return tables


async def check_database(db: AsyncSession) -> dict:
    """
    Prueba de conexión: asegura la fila del contador y cuenta tarjetas.
    """
    await repo.ensure_counter(db)
    await db.commit()
    counter = await repo.get_counter(db)
    user_count = await repo.count_users(db)
    return {
        "counter": counter or 0,
        "user_count": user_count,
        "tables": list(CARD_TABLES),
    }
