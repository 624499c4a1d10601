"""
Dashboard business logic.

Thin layer over the repository: converts request schemas into store calls,
store entities into response schemas, and store failures into HTTP errors.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException, status

from core import settings

from . import repository, schemas
from .entities import Dashboard, DashboardItem, ItemUpdate
from .errors import AlreadyExists, NotFound, StorageFailure

logger = logging.getLogger(__name__)


@contextmanager
def _http_errors(operation: str, project_id: int) -> Iterator[None]:
    try:
        yield
    except AlreadyExists as exc:
        logger.info("dashboard_exists op=%s project_id=%s name=%s", operation, project_id, exc.name)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StorageFailure as exc:
        logger.exception("dashboard_storage_failure op=%s project_id=%s", operation, project_id)
        # Storage details stay in the logs.
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Dashboard storage failure.",
        ) from exc


def _to_dashboard_response(dashboard: Dashboard) -> schemas.DashboardResponse:
    return schemas.DashboardResponse(id=dashboard.id, name=dashboard.name, options=dashboard.options)


def _to_item_response(item: DashboardItem) -> schemas.DashboardItemResponse:
    return schemas.DashboardItemResponse(
        id=item.id,
        name=item.name,
        directive=item.directive,
        data=item.data,
    )


async def create_dashboard(
    project_id: int,
    payload: schemas.CreateDashboardRequest,
) -> schemas.DashboardResponse:
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Dashboard name is required.")

    with _http_errors("create", project_id):
        dashboard = await repository.create_dashboard(
            project_id=project_id,
            name=name,
            options=payload.options,
        )
    return _to_dashboard_response(dashboard)


async def delete_dashboard(project_id: int, payload: schemas.DashboardRef) -> schemas.SuccessResponse:
    with _http_errors("delete", project_id):
        await repository.delete_dashboard(
            project_id=project_id,
            dashboard_id=payload.dashboard,
            strict=settings.strict_missing(),
        )
    return schemas.SuccessResponse()


async def get_dashboard_items(
    project_id: int,
    payload: schemas.GetDashboardRequest,
) -> list[schemas.DashboardItemResponse]:
    with _http_errors("get", project_id):
        items = await repository.get_dashboard_items(project_id=project_id, name=payload.name.strip())
    return [_to_item_response(item) for item in items]


async def list_dashboards(project_id: int) -> list[schemas.DashboardResponse]:
    with _http_errors("list", project_id):
        dashboards = await repository.list_dashboards(project_id=project_id)
    return [_to_dashboard_response(d) for d in dashboards]


async def add_item(project_id: int, payload: schemas.AddItemRequest) -> schemas.ItemCreatedResponse:
    with _http_errors("add_item", project_id):
        item_id = await repository.add_item(
            project_id=project_id,
            dashboard_id=payload.dashboard,
            name=payload.name,
            directive=payload.directive,
            data=payload.data,
        )
    return schemas.ItemCreatedResponse(id=item_id)


async def update_items(project_id: int, payload: schemas.UpdateItemsRequest) -> schemas.SuccessResponse:
    updates = [
        ItemUpdate(id=item.id, name=item.name, directive=item.directive, data=item.data)
        for item in payload.items
    ]
    with _http_errors("update_items", project_id):
        await repository.update_items(
            project_id=project_id,
            dashboard_id=payload.dashboard,
            items=updates,
            strict=settings.strict_missing(),
        )
    return schemas.SuccessResponse()


async def update_dashboard_options(
    project_id: int,
    payload: schemas.UpdateOptionsRequest,
) -> schemas.SuccessResponse:
    with _http_errors("update_options", project_id):
        await repository.update_dashboard_options(
            project_id=project_id,
            dashboard_id=payload.dashboard,
            options=payload.options,
            strict=settings.strict_missing(),
        )
    return schemas.SuccessResponse()


async def rename_item(project_id: int, payload: schemas.RenameItemRequest) -> schemas.SuccessResponse:
    with _http_errors("rename_item", project_id):
        await repository.rename_item(
            project_id=project_id,
            dashboard_id=payload.dashboard,
            item_id=payload.id,
            name=payload.name,
            strict=settings.strict_missing(),
        )
    return schemas.SuccessResponse()


async def remove_item(project_id: int, payload: schemas.RemoveItemRequest) -> schemas.SuccessResponse:
    with _http_errors("remove_item", project_id):
        await repository.remove_item(
            project_id=project_id,
            dashboard_id=payload.dashboard,
            item_id=payload.id,
            strict=settings.strict_missing(),
        )
    return schemas.SuccessResponse()
