"""Request bodies accepted by the JSON API."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RegisterIn(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""


class LoginIn(BaseModel):
    email: str = ""
    password: str = ""


class ChangePasswordIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field("", alias="currentPassword")
    new_password: str = Field("", alias="newPassword")


class EventIn(BaseModel):
    title: str = Field(min_length=1)
    category: str = Field(min_length=1)
    date: str = Field(min_length=1, description="YYYY-MM-DD")
    time: str = Field(min_length=1, description="HH:MM")
    location: str = Field(min_length=1)
    description: str = Field(min_length=1)
    capacity: int
    price: float


class EventUpdateIn(BaseModel):
    title: Optional[str] = None
    category: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    capacity: Optional[int] = None
    price: Optional[float] = None
