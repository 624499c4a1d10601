"""
Dashboard entities, materialized fresh from the database on every read.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Dashboard:
    id: int
    project_id: int
    name: str
    options: dict[str, Any] | None = None


@dataclass(frozen=True)
class DashboardItem:
    id: int
    dashboard_id: int
    name: str
    directive: str
    data: dict[str, Any] | None


@dataclass(frozen=True)
class ItemUpdate:
    """
    Replacement values for one item in a batch update.
    """

    id: int
    name: str
    directive: str
    data: dict[str, Any]
