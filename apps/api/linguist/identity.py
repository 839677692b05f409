"""Supabase auth (GoTrue) calls for sign-in, sign-up and password recovery."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import HTTPException
from pydantic import BaseModel

from .supabase import AUTH_TIMEOUT, backend_settings

logger = logging.getLogger(__name__)

INVALID_LOGIN_MESSAGE = "Invalid email or password. Please check and try again."


class Session(BaseModel):
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    user_id: str
    email: Optional[str] = None
    confirmation_required: bool = False


async def _auth_request(
    method: str,
    path: str,
    *,
    json: Optional[Dict[str, Any]] = None,
    params: Optional[Dict[str, Any]] = None,
    token: Optional[str] = None,
) -> httpx.Response:
    settings = backend_settings()
    headers = {"apikey": settings.anon_key, "Content-Type": "application/json"}
    headers["Authorization"] = f"Bearer {token or settings.anon_key}"
    async with httpx.AsyncClient(timeout=AUTH_TIMEOUT) as client:
        return await client.request(
            method,
            f"{settings.url}/auth/v1/{path}",
            params=params,
            json=json,
            headers=headers,
        )


def _error_message(resp: httpx.Response, fallback: str) -> str:
    try:
        data = resp.json()
    except ValueError:
        return fallback
    if not isinstance(data, dict):
        return fallback
    return data.get("error_description") or data.get("msg") or data.get("message") or fallback


def _session_from_payload(data: Dict[str, Any]) -> Session:
    user = data.get("user") or data
    user_id = user.get("id")
    if not user_id:
        raise HTTPException(status_code=502, detail="Auth response did not include a user.")
    access_token = data.get("access_token")
    return Session(
        access_token=access_token,
        refresh_token=data.get("refresh_token"),
        expires_in=data.get("expires_in"),
        user_id=user_id,
        email=user.get("email"),
        confirmation_required=access_token is None,
    )


async def sign_in(email: str, password: str) -> Session:
    resp = await _auth_request(
        "POST",
        "token",
        params={"grant_type": "password"},
        json={"email": email, "password": password},
    )
    if resp.status_code >= 400:
        message = _error_message(resp, INVALID_LOGIN_MESSAGE)
        if "invalid login credentials" in message.lower():
            message = INVALID_LOGIN_MESSAGE
        logger.info("sign in rejected", extra={"status": resp.status_code})
        raise HTTPException(status_code=401, detail=message)
    return _session_from_payload(resp.json())


async def sign_up(email: str, password: str) -> Session:
    resp = await _auth_request("POST", "signup", json={"email": email, "password": password})
    if resp.status_code >= 400:
        raise HTTPException(status_code=400, detail=_error_message(resp, "Sign up failed."))
    return _session_from_payload(resp.json())


async def request_password_reset(email: str, *, redirect_to: Optional[str] = None) -> None:
    payload: Dict[str, Any] = {"email": email}
    params = {"redirect_to": redirect_to} if redirect_to else None
    resp = await _auth_request("POST", "recover", json=payload, params=params)
    if resp.status_code >= 400:
        raise HTTPException(status_code=400, detail=_error_message(resp, "Password reset failed."))


async def sign_out(access_token: str) -> None:
    resp = await _auth_request("POST", "logout", token=access_token)
    if resp.status_code >= 400 and resp.status_code != 401:
        raise HTTPException(status_code=resp.status_code, detail=_error_message(resp, "Sign out failed."))
