from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Credentials(BaseModel):
    """Body of both ``/register`` and ``/login``. Patterns are checked by the auth service."""

    name: str
    password: str

    model_config = {
        "json_schema_extra": {
            "example": {"name": "tester_1", "password": "password123"}
        },
    }


class LoginResponse(BaseModel):
    auth: bool = True
    token: str


class MessageResponse(BaseModel):
    message: str


class AccountRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    password_hash: str
    last_login_at: Optional[datetime] = None
