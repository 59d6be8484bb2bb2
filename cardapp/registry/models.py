# cardapp/registry/models.py
import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, Integer, BigInteger, Boolean, DateTime, CheckConstraint, false, func
from cardapp.db.base import Base

# id fijo de la única fila del contador
COUNTER_ID = "singleton"


def _new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserCard(Base):
    __tablename__ = "user_cards"
    __table_args__ = (
        CheckConstraint('"userNumber" > 0', name="ck_user_cards_user_number_positive"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    # exacto, tal cual llega (sin lower/strip): "Alice" y "alice" son dos tarjetas
    username: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column("displayName", Text, nullable=False)
    # 👉 se asigna una sola vez, nunca cambia
    user_number: Mapped[int] = mapped_column("userNumber", Integer, unique=True, nullable=False)
    profile_image: Mapped[str | None] = mapped_column("profileImage", Text, nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    followers: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    following: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        "updatedAt", DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )


class CardCounter(Base):
    __tablename__ = "card_counter"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=COUNTER_ID)
    # el último userNumber emitido
    counter: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
