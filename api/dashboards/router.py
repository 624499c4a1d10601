"""
Dashboard API endpoints.

All endpoints are POST with a JSON body; the tenant comes from the
`project` header.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter(prefix="/ui/dashboard")


@router.post("/create")
async def create_dashboard(
    request: schemas.CreateDashboardRequest,
    project_id: int = Depends(auth_dependencies.get_project_id),
) -> schemas.DashboardResponse:
    return await service.create_dashboard(project_id, request)


@router.post("/delete")
async def delete_dashboard(
    request: schemas.DashboardRef,
    project_id: int = Depends(auth_dependencies.get_project_id),
) -> schemas.SuccessResponse:
    """
    Delete a dashboard with all of its items.
    """
    return await service.delete_dashboard(project_id, request)


@router.post("/get")
async def get_dashboard(
    request: schemas.GetDashboardRequest,
    project_id: int = Depends(auth_dependencies.get_project_id),
) -> list[schemas.DashboardItemResponse]:
    return await service.get_dashboard_items(project_id, request)


@router.post("/list")
async def list_dashboards(
    project_id: int = Depends(auth_dependencies.get_project_id),
) -> list[schemas.DashboardResponse]:
    return await service.list_dashboards(project_id)


@router.post("/add_item")
async def add_item(
    request: schemas.AddItemRequest,
    project_id: int = Depends(auth_dependencies.get_project_id),
) -> schemas.ItemCreatedResponse:
    return await service.add_item(project_id, request)


@router.post("/update_dashboard_items")
async def update_dashboard_items(
    request: schemas.UpdateItemsRequest,
    project_id: int = Depends(auth_dependencies.get_project_id),
) -> schemas.SuccessResponse:
    """
    Replace name, directive and data of several items atomically.
    """
    return await service.update_items(project_id, request)


@router.post("/update_dashboard_options")
async def update_dashboard_options(
    request: schemas.UpdateOptionsRequest,
    project_id: int = Depends(auth_dependencies.get_project_id),
) -> schemas.SuccessResponse:
    return await service.update_dashboard_options(project_id, request)


@router.post("/rename_item")
async def rename_item(
    request: schemas.RenameItemRequest,
    project_id: int = Depends(auth_dependencies.get_project_id),
) -> schemas.SuccessResponse:
    return await service.rename_item(project_id, request)


@router.post("/delete_item")
async def delete_item(
    request: schemas.RemoveItemRequest,
    project_id: int = Depends(auth_dependencies.get_project_id),
) -> schemas.SuccessResponse:
    return await service.remove_item(project_id, request)
