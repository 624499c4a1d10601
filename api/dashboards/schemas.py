"""
Pydantic schemas for dashboard endpoints.

`options` and `data` are opaque JSON objects; their contents are never
validated here.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# dashboard.id and dashboard_items.id are bigserial.
MAX_ROW_ID = 2**63 - 1


class CreateDashboardRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    options: dict[str, Any] | None = None


class DashboardRef(BaseModel):
    dashboard: int = Field(..., ge=1, le=MAX_ROW_ID)


class GetDashboardRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class AddItemRequest(DashboardRef):
    name: str = Field(..., max_length=255)
    directive: str = Field(..., min_length=1, max_length=255)
    data: dict[str, Any] = Field(default_factory=dict)


class ItemPayload(BaseModel):
    id: int = Field(..., ge=1, le=MAX_ROW_ID)
    name: str = Field(..., max_length=255)
    directive: str = Field(..., min_length=1, max_length=255)
    data: dict[str, Any] = Field(default_factory=dict)


class UpdateItemsRequest(DashboardRef):
    items: list[ItemPayload] = Field(default_factory=list)


class UpdateOptionsRequest(DashboardRef):
    options: dict[str, Any] | None = None


class RenameItemRequest(DashboardRef):
    id: int = Field(..., ge=1, le=MAX_ROW_ID)
    name: str = Field(..., max_length=255)


class RemoveItemRequest(DashboardRef):
    id: int = Field(..., ge=1, le=MAX_ROW_ID)


class DashboardResponse(BaseModel):
    id: int
    name: str
    options: dict[str, Any] | None = None


class DashboardItemResponse(BaseModel):
    id: int
    name: str
    directive: str
    data: dict[str, Any] | None = None


class SuccessResponse(BaseModel):
    ok: bool = True
    message: str | None = None


class ItemCreatedResponse(SuccessResponse):
    id: int
