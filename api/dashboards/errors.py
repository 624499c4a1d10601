"""
Dashboard store failures.

The repository raises these; the service layer maps them to HTTP responses.
"""

from __future__ import annotations


class DashboardError(RuntimeError):
    pass


class AlreadyExists(DashboardError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Dashboard '{name}' already exists.")
        self.name = name


class NotFound(DashboardError):
    def __init__(self, kind: str, ident: int | str) -> None:
        super().__init__(f"{kind} {ident} not found.")
        self.kind = kind
        self.ident = ident


# Connectivity loss, unexpected constraint violations, corrupt stored payloads.
class StorageFailure(DashboardError):
    pass
