from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..identity import Session, request_password_reset, sign_in, sign_out, sign_up
from ..supabase import UserContext, get_user_context
from ..validation import validate_credentials, validate_email

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])
logger = logging.getLogger(__name__)


class SignInPayload(BaseModel):
    email: str
    password: str


class SignUpPayload(BaseModel):
    email: str
    password: str
    confirm_password: str


class PasswordResetPayload(BaseModel):
    email: str
    redirect_to: Optional[str] = None


class MeResponse(BaseModel):
    user_id: str
    email: Optional[str] = None


@router.post("/sign-in", response_model=Session)
async def sign_in_endpoint(payload: SignInPayload) -> Session:
    email = validate_credentials(payload.email, payload.password)
    return await sign_in(email, payload.password)


@router.post("/sign-up", response_model=Session)
async def sign_up_endpoint(payload: SignUpPayload) -> Session:
    email = validate_credentials(
        payload.email,
        payload.password,
        confirm_password=payload.confirm_password,
        sign_up=True,
    )
    session = await sign_up(email, payload.password)
    if session.confirmation_required:
        logger.info("sign up awaiting email confirmation", extra={"user_id": session.user_id})
    return session


@router.post("/password-reset")
async def password_reset_endpoint(payload: PasswordResetPayload) -> dict:
    email = validate_email(payload.email)
    await request_password_reset(email, redirect_to=payload.redirect_to)
    return {"status": "sent"}


@router.post("/sign-out")
async def sign_out_endpoint(auth: UserContext = Depends(get_user_context)) -> dict:
    await sign_out(auth.access_token)
    return {"status": "signed_out"}


@router.get("/me", response_model=MeResponse)
async def me_endpoint(auth: UserContext = Depends(get_user_context)) -> MeResponse:
    return MeResponse(user_id=auth.user_id, email=auth.user_email)
