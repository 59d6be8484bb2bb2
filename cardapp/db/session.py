# cardapp/db/session.py
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from cardapp.core.config import settings


def build_engine(db_url: str, *, timeout: int | None = None) -> AsyncEngine:
    """
    Crea el engine async según el driver de la URL.
    Timeouts cortos: si la DB no responde → falla rápido.
    """
    timeout = timeout or settings.DB_CONNECT_TIMEOUT
    kwargs: dict = {"pool_pre_ping": True}

    if db_url.startswith("postgresql+psycopg"):
        # psycopg (async) usa 'connect_timeout' en segundos
        connect_args = {"connect_timeout": timeout}
    elif db_url.startswith("postgresql+asyncpg"):
        # asyncpg usa 'timeout' (segundos) y podemos fijar UTF-8 en la sesión
        connect_args = {
            "timeout": timeout,
            "server_settings": {"client_encoding": "UTF8"},
        }
    elif db_url.startswith("sqlite+aiosqlite"):
        # en sqlite 'timeout' es cuánto espera un writer al lock de la DB
        connect_args = {"timeout": timeout}
    else:
        connect_args = {}

    if not db_url.startswith("sqlite"):
        kwargs.update(pool_recycle=300, pool_size=5, max_overflow=10)

    return create_async_engine(db_url, connect_args=connect_args, **kwargs)


engine = build_engine(settings.DATABASE_URL)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            # si quedó una transacción abierta (cancelación, error), close() la aborta
            await session.close()
