from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ..deps.services import get_auth_service
from ..schemas.auth import Credentials, LoginResponse, MessageResponse
from ..services.auth import AuthService

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED, summary="Create an account")
async def register(payload: Credentials, auth: AuthService = Depends(get_auth_service)):
    await auth.register(payload.name, payload.password)
    return MessageResponse(message="User registered successfully")


@router.post("/login", response_model=LoginResponse, summary="Exchange credentials for a bearer token")
async def login(payload: Credentials, auth: AuthService = Depends(get_auth_service)):
    token = await auth.login(payload.name, payload.password)
    return LoginResponse(auth=True, token=token)
