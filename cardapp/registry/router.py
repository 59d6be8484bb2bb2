# cardapp/registry/router.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cardapp.db.session import get_session
from cardapp.core.errors import NotFoundError, StorageError, ValidationError
from cardapp.registry import service as svc
from cardapp.registry.schemas import (
    ProfileSnapshot,
    RegisterOut,
    LookupOut,
    StatsOut,
    UserCardOut,
)

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("/", response_model=RegisterOut)
async def register(payload: ProfileSnapshot, db: AsyncSession = Depends(get_session)):
    """
    Registra (o actualiza) la tarjeta del username y devuelve su número.
    El commit/rollback lo hace el service.
    """
    try:
        result = await svc.register_or_update(db, payload)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageError:
        raise HTTPException(status_code=500, detail="internal error")

    return RegisterOut(
        user_number=result.user_number,
        is_new_user=result.is_new_user,
        user=UserCardOut.model_validate(result.user),
    )


@router.get("/", response_model=LookupOut)
async def get_user(
    username: str | None = Query(None),
    db: AsyncSession = Depends(get_session),
):
    if not username:
        raise HTTPException(status_code=400, detail="username parameter is required")
    try:
        card = await svc.lookup(db, username)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="user not found")
    except StorageError:
        raise HTTPException(status_code=500, detail="internal error")
    return LookupOut(user=UserCardOut.model_validate(card))


@router.get("/stats/", response_model=StatsOut)
async def stats(db: AsyncSession = Depends(get_session)):
    try:
        data = await svc.get_stats(db)
    except StorageError:
        raise HTTPException(status_code=500, detail="internal error")
    return StatsOut(stats=data)
