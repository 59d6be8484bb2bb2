# cardapp/db/router.py
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardapp.db.session import get_session
from cardapp.db import init_db

log = logging.getLogger("uvicorn")

router = APIRouter(prefix="/api/db", tags=["db"])


@router.get("/init/")
async def init_schema():
    """Crea tablas + contador (idempotente)."""
    try:
        tables = await init_db.init_models()
    except SQLAlchemyError as e:
        log.error(f"❌ creación de schema falló: {e!r}")
        raise HTTPException(status_code=500, detail="schema creation failed")
    return {"success": True, "message": "database schema ready", "tables": tables}


@router.get("/check/")
async def check(db: AsyncSession = Depends(get_session)):
    try:
        info = await init_db.check_database(db)
    except SQLAlchemyError as e:
        await db.rollback()
        log.error(f"❌ conexión a DB falló: {e!r}")
        raise HTTPException(status_code=500, detail="database connection failed")
    return {"success": True, "message": "database connection ok", **info}
