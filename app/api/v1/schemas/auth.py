"""Request and response schemas for user authentication."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    name: str = Field(min_length=1, max_length=255)
    role: Literal["admin", "ca"] = "admin"
    company_name: str | None = Field(default=None, max_length=255)
    company_gstin: str | None = Field(default=None, max_length=15)
    company_state: str | None = Field(
        default=None,
        max_length=100,
        description="State of the issuing business; decides CGST+SGST vs IGST",
    )


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Access token lifetime in seconds")


class UserProfile(BaseModel):
    id: str
    email: str
    name: str | None
    role: str
    company_name: str | None
    company_gstin: str | None
    company_state: str | None
    created_at: datetime | None

    class Config:
        from_attributes = True
