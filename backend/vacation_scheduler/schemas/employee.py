# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, Field


class UpsertEmployeeRequest(BaseModel):
    """Request body for upserting an employee in the stub registry."""

    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=1, max_length=255)
    position: str | None = Field(default=None, max_length=255)
    hire_date: date


class EmployeeResponse(BaseModel):
    """Response schema for an employee."""

    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    position: str | None
    hire_date: date


class EmployeeListResponse(BaseModel):
    """List of employees."""

    items: list[EmployeeResponse]
    total: int
