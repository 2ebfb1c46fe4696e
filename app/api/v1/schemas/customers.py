"""Request and response schemas for customers, projects and bank accounts."""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


def _upper(value: str | None) -> str | None:
    return value.strip().upper() if value else value


class CustomerCreate(BaseModel):
    model_config = {"extra": "forbid"}

    name: str = Field(min_length=1, max_length=255)
    company_name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=30)
    gstin: str | None = Field(default=None, max_length=15)
    street: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    pincode: str | None = Field(default=None, max_length=10)
    country: str = Field(default="India", max_length=100)

    @field_validator("gstin")
    @classmethod
    def normalize_gstin(cls, value: str | None) -> str | None:
        return _upper(value)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value else value


class CustomerUpdate(BaseModel):
    model_config = {"extra": "forbid"}

    name: str | None = Field(default=None, min_length=1, max_length=255)
    company_name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=30)
    gstin: str | None = Field(default=None, max_length=15)
    street: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    pincode: str | None = Field(default=None, max_length=10)
    country: str | None = Field(default=None, max_length=100)

    @field_validator("gstin")
    @classmethod
    def normalize_gstin(cls, value: str | None) -> str | None:
        return _upper(value)


class CustomerOut(BaseModel):
    id: str
    name: str
    company_name: str | None = None
    email: str | None = None
    phone: str | None = None
    gstin: str | None = None
    street: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    country: str | None = None
    created_at: datetime | None = None


class ProjectCreate(BaseModel):
    model_config = {"extra": "forbid"}

    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    customer_id: UUID | None = None
    status: Literal["active", "completed", "on-hold"] = "active"


class ProjectUpdate(BaseModel):
    model_config = {"extra": "forbid"}

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    customer_id: UUID | None = None
    status: Literal["active", "completed", "on-hold"] | None = None


class ProjectOut(BaseModel):
    id: str
    name: str
    description: str | None = None
    customer_id: str | None = None
    status: str
    created_at: datetime | None = None


class BankCreate(BaseModel):
    model_config = {"extra": "forbid"}

    account_holder_name: str = Field(min_length=1, max_length=255)
    account_number: str = Field(min_length=4, max_length=34)
    ifsc: str = Field(min_length=11, max_length=11)
    bank_name: str = Field(min_length=1, max_length=255)
    branch: str | None = Field(default=None, max_length=255)
    account_type: Literal["savings", "current"] = "current"
    is_default: bool = False
    is_company_account: bool = True
    customer_id: UUID | None = None

    @field_validator("ifsc")
    @classmethod
    def normalize_ifsc(cls, value: str | None) -> str | None:
        return _upper(value)


class BankUpdate(BaseModel):
    model_config = {"extra": "forbid"}

    account_holder_name: str | None = Field(default=None, min_length=1, max_length=255)
    account_number: str | None = Field(default=None, min_length=4, max_length=34)
    ifsc: str | None = Field(default=None, min_length=11, max_length=11)
    bank_name: str | None = Field(default=None, min_length=1, max_length=255)
    branch: str | None = Field(default=None, max_length=255)
    account_type: Literal["savings", "current"] | None = None
    is_default: bool | None = None

    @field_validator("ifsc")
    @classmethod
    def normalize_ifsc(cls, value: str | None) -> str | None:
        return _upper(value)


class BankOut(BaseModel):
    id: str
    account_holder_name: str
    account_number: str
    ifsc: str
    bank_name: str
    branch: str | None = None
    account_type: str
    is_default: bool
    is_company_account: bool
    customer_id: str | None = None
