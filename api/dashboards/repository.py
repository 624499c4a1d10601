"""
Dashboard persistence (raw SQL).

Every query is scoped by `project_id`. Item-level statements reach the
project through `dashboard_items.dashboard -> dashboard.project_id`, so an
item id from another project never matches.

Payload columns (`dashboard.options`, `dashboard_items.data`) are JSON text.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from typing import Any, Iterator, Sequence

import asyncpg

from core import codec, db

from .entities import Dashboard, DashboardItem, ItemUpdate
from .errors import AlreadyExists, NotFound, StorageFailure

logger = logging.getLogger(__name__)

STORAGE_ERRORS: tuple[type[BaseException], ...] = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)

# Scalar subquery: the dashboard id when it belongs to the project, else NULL.
_OWNED_DASHBOARD = "(SELECT id FROM dashboard WHERE id = ${dashboard} AND project_id = ${project})"


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except STORAGE_ERRORS as exc:
        raise StorageFailure(f"{operation} failed: {exc.__class__.__name__}") from exc
    except codec.CodecError as exc:
        raise StorageFailure(f"{operation} failed: {exc}") from exc


def _owned_dashboard(dashboard_param: int, project_param: int) -> str:
    return _OWNED_DASHBOARD.format(dashboard=dashboard_param, project=project_param)


def _to_dashboard(row: dict[str, Any]) -> Dashboard:
    return Dashboard(
        id=int(row["id"]),
        project_id=int(row["project_id"]),
        name=str(row["name"]),
        options=codec.decode_mapping(row["options"], nullable=True),
    )


def _to_item(row: dict[str, Any]) -> DashboardItem:
    return DashboardItem(
        id=int(row["id"]),
        dashboard_id=int(row["dashboard"]),
        name=str(row["name"]),
        directive=str(row["directive"]),
        data=codec.decode_mapping(row["data"], nullable=True),
    )


async def create_dashboard(
    *,
    project_id: int,
    name: str,
    options: dict[str, Any] | None = None,
) -> Dashboard:
    """
    Insert a dashboard and return it with its generated id.

    A failed insert is classified by looking the name up again rather than
    by inspecting the error: if the name exists for the project the caller
    lost a uniqueness race (or retried) and gets AlreadyExists.
    """
    with _storage_errors("create_dashboard"):
        options_text = codec.encode(options)
        async with db.connection() as conn:
            try:
                row = await conn.fetchrow(
                    """
                    INSERT INTO dashboard (project_id, name, options)
                    VALUES ($1, $2, $3)
                    RETURNING id
                    """,
                    project_id,
                    name,
                    options_text,
                )
            except STORAGE_ERRORS as exc:
                existing = await conn.fetchrow(
                    """
                    SELECT 1 AS ok
                    FROM dashboard
                    WHERE project_id = $1
                      AND name = $2
                    """,
                    project_id,
                    name,
                )
                if existing is not None:
                    raise AlreadyExists(name) from exc
                raise

    if row is None:
        raise StorageFailure("create_dashboard failed: insert returned no id.")

    dashboard_id = int(row["id"])
    logger.info("dashboard_created project_id=%s id=%s", project_id, dashboard_id)
    return Dashboard(id=dashboard_id, project_id=project_id, name=name, options=options)


async def delete_dashboard(*, project_id: int, dashboard_id: int, strict: bool = False) -> None:
    """
    Delete a dashboard and its items in one transaction, items first.

    A missing dashboard is a no-op unless `strict`.
    """
    statements = [
        db.Statement(
            f"DELETE FROM dashboard_items WHERE dashboard = {_owned_dashboard(1, 2)}",
            (dashboard_id, project_id),
        ),
        db.Statement(
            "DELETE FROM dashboard WHERE id = $1 AND project_id = $2",
            (dashboard_id, project_id),
            require_rows=strict,
        ),
    ]
    try:
        with _storage_errors("delete_dashboard"):
            counts = await db.run_in_transaction(statements)
    except db.NoRowsAffected as exc:
        raise NotFound("Dashboard", dashboard_id) from exc

    logger.info(
        "dashboard_deleted project_id=%s id=%s items=%s found=%s",
        project_id,
        dashboard_id,
        counts[0],
        bool(counts[1]),
    )


async def get_dashboard_items(*, project_id: int, name: str) -> list[DashboardItem]:
    """
    Items of the project's dashboard called `name`, ordered by id.
    Unknown name yields an empty list.
    """
    with _storage_errors("get_dashboard_items"):
        rows = await db.fetch_all(
            """
            SELECT i.id, i.dashboard, i.name, i.directive, i.data
            FROM dashboard_items i
            JOIN dashboard d ON d.id = i.dashboard
            WHERE d.project_id = $1
              AND d.name = $2
            ORDER BY i.id
            """,
            project_id,
            name,
        )
        return [_to_item(row) for row in rows]


async def list_dashboards(*, project_id: int) -> list[Dashboard]:
    with _storage_errors("list_dashboards"):
        rows = await db.fetch_all(
            """
            SELECT id, project_id, name, options
            FROM dashboard
            WHERE project_id = $1
            ORDER BY id
            """,
            project_id,
        )
        return [_to_dashboard(row) for row in rows]


async def add_item(
    *,
    project_id: int,
    dashboard_id: int,
    name: str,
    directive: str,
    data: dict[str, Any],
) -> int:
    """
    Insert an item into a dashboard owned by the project. Returns the item id.
    """
    with _storage_errors("add_item"):
        row = await db.fetch_one(
            """
            INSERT INTO dashboard_items (dashboard, name, directive, data)
            SELECT d.id, $3::text, $4::text, $5::text
            FROM dashboard d
            WHERE d.id = $1
              AND d.project_id = $2
            RETURNING id
            """,
            dashboard_id,
            project_id,
            name,
            directive,
            codec.encode(data),
        )
    if row is None:
        raise NotFound("Dashboard", dashboard_id)
    return int(row["id"])


async def update_items(
    *,
    project_id: int,
    dashboard_id: int,
    items: Sequence[ItemUpdate],
    strict: bool = False,
) -> None:
    """
    Replace name, directive and data of each listed item, all or nothing.

    Ids that are not items of this dashboard are skipped, or fail the whole
    batch when `strict`.
    """
    owned = _owned_dashboard(5, 6)
    try:
        with _storage_errors("update_items"):
            statements = [
                db.Statement(
                    f"""
                    UPDATE dashboard_items
                    SET name = $2, directive = $3, data = $4
                    WHERE id = $1
                      AND dashboard = {owned}
                    """,
                    (item.id, item.name, item.directive, codec.encode(item.data), dashboard_id, project_id),
                    require_rows=strict,
                )
                for item in items
            ]
            counts = await db.run_in_transaction(statements)
    except db.NoRowsAffected as exc:
        raise NotFound("Dashboard item", items[exc.index].id) from exc

    logger.info(
        "dashboard_items_updated project_id=%s dashboard_id=%s requested=%s updated=%s",
        project_id,
        dashboard_id,
        len(statements),
        sum(counts),
    )


async def update_dashboard_options(
    *,
    project_id: int,
    dashboard_id: int,
    options: dict[str, Any] | None,
    strict: bool = False,
) -> None:
    try:
        with _storage_errors("update_dashboard_options"):
            await db.run_in_transaction(
                [
                    db.Statement(
                        "UPDATE dashboard SET options = $3 WHERE id = $1 AND project_id = $2",
                        (dashboard_id, project_id, codec.encode(options)),
                        require_rows=strict,
                    )
                ]
            )
    except db.NoRowsAffected as exc:
        raise NotFound("Dashboard", dashboard_id) from exc


async def rename_item(
    *,
    project_id: int,
    dashboard_id: int,
    item_id: int,
    name: str,
    strict: bool = False,
) -> None:
    with _storage_errors("rename_item"):
        count = await db.execute(
            f"""
            UPDATE dashboard_items
            SET name = $2
            WHERE id = $1
              AND dashboard = {_owned_dashboard(3, 4)}
            """,
            item_id,
            name,
            dashboard_id,
            project_id,
        )
    if strict and count == 0:
        raise NotFound("Dashboard item", item_id)


async def remove_item(
    *,
    project_id: int,
    dashboard_id: int,
    item_id: int,
    strict: bool = False,
) -> None:
    """
    Delete one item. Deleting an id that is not there is a no-op unless `strict`.
    """
    with _storage_errors("remove_item"):
        count = await db.execute(
            f"""
            DELETE FROM dashboard_items
            WHERE id = $1
              AND dashboard = {_owned_dashboard(2, 3)}
            """,
            item_id,
            dashboard_id,
            project_id,
        )
    if strict and count == 0:
        raise NotFound("Dashboard item", item_id)
