# app/schemas/auth.py

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ──────────────── Login ────────────────
class LoginRequest(BaseModel):
    # Both optional so a missing field gets the dashboard's own 400 message
    email: Optional[str] = None
    password: Optional[str] = None


# ──────────────── Signup ────────────────
class SignupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    password: Optional[str] = None
    tenant_name: Optional[str] = Field(None, alias="tenantName")


# ──────────────── Me ────────────────
class MeUser(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    role: Optional[str] = None
    tenant_id: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class MeResponse(BaseModel):
    ok: bool = True
    # The browser needs the raw token for Supabase Realtime + RLS
    access_token: str
    user: MeUser
