"""Access to the hosted backend: token checks and a PostgREST table client.

Every call is made with the signed-in parent's access token, so row-level
security on the backend scopes what each request can see or change.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

import httpx
import jwt
from fastapi import Header, HTTPException
from jwt import PyJWKClient

from .config import CONFIG

REST_TIMEOUT = 15.0
AUTH_TIMEOUT = 10.0
TOKEN_ERROR = "Invalid or expired token."


@dataclass(frozen=True)
class BackendSettings:
    url: str
    anon_key: str
    jwt_audience: Optional[str]
    jwt_secret: Optional[str]
    jwks_url: str


@lru_cache
def backend_settings() -> BackendSettings:
    url = os.getenv("SUPABASE_URL") or CONFIG.supabase_url
    anon_key = os.getenv("SUPABASE_ANON_KEY") or CONFIG.supabase_anon_key
    if not url or not anon_key:
        raise RuntimeError("Missing SUPABASE_URL/SUPABASE_ANON_KEY for backend access.")
    url = url.rstrip("/")
    return BackendSettings(
        url=url,
        anon_key=anon_key,
        jwt_audience=os.getenv("SUPABASE_JWT_AUD", "authenticated") or None,
        jwt_secret=os.getenv("SUPABASE_JWT_SECRET") or None,
        jwks_url=os.getenv("SUPABASE_JWKS_URL") or f"{url}/auth/v1/keys",
    )


@lru_cache
def _jwks_client() -> PyJWKClient:
    return PyJWKClient(backend_settings().jwks_url)


def _bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing authorization token.")
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or " " in token:
        raise HTTPException(status_code=401, detail="Invalid authorization token.")
    return token


def resolve_optional_uuid(value: Optional[str], label: str) -> Optional[str]:
    """Canonical UUID text for ``value``; None when empty, 400 when malformed."""

    if not value:
        return None
    try:
        return str(UUID(value))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid {label}.") from exc


def requested_child_id(header_value: Optional[str], query_value: Optional[str]) -> Optional[str]:
    """The child a request names, or None when it names none or names it badly."""

    candidate = header_value or query_value
    if not candidate:
        return None
    try:
        return str(UUID(candidate))
    except ValueError:
        return None


def _decode_with_jwks(token: str, settings: BackendSettings) -> Optional[Dict[str, Any]]:
    try:
        signing_key = _jwks_client().get_signing_key_from_jwt(token)
        return jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256", "ES256"],
            audience=settings.jwt_audience,
            options={"verify_aud": settings.jwt_audience is not None},
        )
    except jwt.PyJWTError:
        return None


def _decode_with_secret(token: str, settings: BackendSettings) -> Dict[str, Any]:
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=["HS256"],
            audience=settings.jwt_audience,
            options={"verify_aud": settings.jwt_audience is not None},
        )
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=401, detail=TOKEN_ERROR) from exc


async def _fetch_auth_user(token: str, settings: BackendSettings) -> Dict[str, Any]:
    async with httpx.AsyncClient(timeout=AUTH_TIMEOUT) as client:
        resp = await client.get(
            f"{settings.url}/auth/v1/user",
            headers={"Authorization": f"Bearer {token}", "apikey": settings.anon_key},
        )
    if resp.status_code >= 400 or not resp.content:
        raise HTTPException(status_code=401, detail=TOKEN_ERROR)
    user = resp.json()
    return {"sub": user.get("id"), "email": user.get("email")}


async def verify_access_token(token: str) -> Tuple[str, Optional[str]]:
    """Return ``(user_id, email)`` for a valid access token, else raise 401.

    Signed keys are tried first, then the shared secret when one is
    configured, then the auth server itself.
    """

    settings = backend_settings()
    claims = _decode_with_jwks(token, settings)
    if claims is None and settings.jwt_secret:
        claims = _decode_with_secret(token, settings)
    if claims is None:
        claims = await _fetch_auth_user(token, settings)

    subject = claims.get("sub")
    try:
        user_id = str(UUID(subject or ""))
    except ValueError as exc:
        raise HTTPException(status_code=401, detail=TOKEN_ERROR) from exc
    return user_id, claims.get("email")


def _error_body(resp: httpx.Response) -> str:
    try:
        return resp.text or "<empty response>"
    except UnicodeDecodeError:
        return "<unreadable response>"


def _total_from_content_range(value: Optional[str]) -> Optional[int]:
    # PostgREST answers "0-24/3573" or "*/0" when asked for an exact count.
    if not value or "/" not in value:
        return None
    total = value.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else None


@dataclass
class SupabaseClient:
    """Table and RPC calls against ``/rest/v1`` on behalf of one user."""

    base_url: str
    anon_key: str
    access_token: str

    def _headers(self, prefer: Optional[str]) -> Dict[str, str]:
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _send(
        self,
        method: str,
        path: str,
        action: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        prefer: Optional[str] = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(timeout=REST_TIMEOUT) as client:
            resp = await client.request(
                method,
                f"{self.base_url}/rest/v1/{path}",
                params=params,
                json=json,
                headers=self._headers(prefer),
            )
        if resp.status_code >= 400:
            raise HTTPException(
                status_code=resp.status_code,
                detail=f"Supabase {action} failed ({path}): status={resp.status_code}, body={_error_body(resp)}",
            )
        return resp

    @staticmethod
    def _rows(resp: httpx.Response) -> List[Dict[str, Any]]:
        return resp.json() if resp.content else []

    async def select(self, table: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        return self._rows(await self._send("GET", table, "select", params=params))

    async def count(self, table: str, params: Dict[str, Any]) -> int:
        resp = await self._send(
            "HEAD",
            table,
            "count",
            params={**params, "select": "id"},
            prefer="count=exact",
        )
        total = _total_from_content_range(resp.headers.get("content-range"))
        if total is not None:
            return total
        return len(await self.select(table, {**params, "select": "id"}))

    async def insert(
        self,
        table: str,
        payload: Any,
        *,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        resp = await self._send(
            "POST", table, "insert", params=params, json=payload, prefer="return=representation"
        )
        return self._rows(resp)

    async def upsert(self, table: str, payload: Any, *, on_conflict: str) -> List[Dict[str, Any]]:
        resp = await self._send(
            "POST",
            table,
            "upsert",
            params={"on_conflict": on_conflict},
            json=payload,
            prefer="resolution=merge-duplicates,return=representation",
        )
        return self._rows(resp)

    async def update(
        self,
        table: str,
        payload: Dict[str, Any],
        params: Dict[str, Any],
    ) -> List[Dict[str, Any]]:
        resp = await self._send(
            "PATCH", table, "update", params=params, json=payload, prefer="return=representation"
        )
        return self._rows(resp)

    async def delete(self, table: str, params: Dict[str, Any]) -> None:
        await self._send("DELETE", table, "delete", params=params)

    async def rpc(self, fn: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        resp = await self._send("POST", f"rpc/{fn}", "rpc", json=payload or {})
        return resp.json() if resp.content else None


@dataclass
class UserContext:
    user_id: str
    user_email: Optional[str]
    access_token: str
    supabase: SupabaseClient


async def get_user_context(authorization: Optional[str] = Header(None)) -> UserContext:
    token = _bearer_token(authorization)
    user_id, email = await verify_access_token(token)
    settings = backend_settings()
    return UserContext(
        user_id=user_id,
        user_email=email,
        access_token=token,
        supabase=SupabaseClient(base_url=settings.url, anon_key=settings.anon_key, access_token=token),
    )
