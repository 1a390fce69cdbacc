"""Dependency injection for API handlers."""

from typing import Annotated

from fastapi import Depends, Request

from rbxstatus.config import Settings
from rbxstatus.core.service import StatusService


def get_settings_dependency(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings


SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]


def get_status_service(request: Request) -> StatusService:
    """Get the application's shared status service."""
    return request.app.state.status_service


StatusServiceDep = Annotated[StatusService, Depends(get_status_service)]


def get_request_id(request: Request) -> str | None:
    """Extract request ID from request state.

    The request ID is set by the request ID middleware.
    """
    return getattr(request.state, "request_id", None)


RequestIdDep = Annotated[str | None, Depends(get_request_id)]
