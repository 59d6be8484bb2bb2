# cardapp/registry/schemas.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, AliasChoices


class ProfileSnapshot(BaseModel):
    """
    Foto de un perfil (real de Twitter, OAuth o mock) que llega para
    registrar la tarjeta. Acepta camelCase (front) y snake_case.
    username/displayName se validan en el service, no aquí,
    para responder 400 como siempre.
    """
    model_config = ConfigDict(populate_by_name=True)

    username: Optional[str] = None
    display_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("displayName", "display_name", "name"),
        serialization_alias="displayName",
    )
    profile_image: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("profileImage", "profile_image", "profile_image_url"),
        serialization_alias="profileImage",
    )
    bio: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("bio", "description"),
    )
    followers: Optional[int] = None
    following: Optional[int] = None
    verified: bool = False
    location: Optional[str] = None


# 👇 salida en camelCase (lo que espera el front). alias + populate_by_name
# para poder construirlos por nombre de campo y que FastAPI los re-valide.


class UserCardOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    username: str
    display_name: str = Field(alias="displayName")
    user_number: int = Field(alias="userNumber")
    profile_image: Optional[str] = Field(default=None, alias="profileImage")
    bio: Optional[str] = None
    followers: Optional[int] = None
    following: Optional[int] = None
    verified: bool = False
    location: Optional[str] = None
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


class RegisterOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    user_number: int = Field(alias="userNumber")
    is_new_user: bool = Field(alias="isNewUser")
    user: UserCardOut


class LookupOut(BaseModel):
    success: bool = True
    user: UserCardOut


class RecentUserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    username: str
    display_name: str = Field(alias="displayName")
    user_number: int = Field(alias="userNumber")
    created_at: datetime = Field(alias="createdAt")


class RegistryStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_users: int = Field(alias="totalUsers")
    current_counter: int = Field(alias="currentCounter")
    recent_users: List[RecentUserOut] = Field(alias="recentUsers")


class StatsOut(BaseModel):
    success: bool = True
    stats: RegistryStats
