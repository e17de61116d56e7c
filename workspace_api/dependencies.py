"""Dependency injection for FastAPI endpoints.

This module exposes the components built by the lifespan as FastAPI
dependencies, so controllers never reach into global state directly.

Usage in controllers:
    from workspace_api.dependencies import Store

    @router.get("/api/files")
    async def list_files(store: Store):
        return store.list_tree()
"""

from typing import Annotated

from fastapi import Depends

from workspace_api import state
from workspace_api.errors import ServiceUnavailableError
from workspace_api.sandbox import PackageInstaller, ProcessRunner
from workspace_api.workspace import WorkspaceStore


def get_store() -> WorkspaceStore:
    """Get the workspace store.

    Raises:
        ServiceUnavailableError: If the workspace is not initialized.
    """
    if state.store is None:
        raise ServiceUnavailableError(detail="Workspace not initialized")
    return state.store


def get_runner() -> ProcessRunner:
    """Get the process runner.

    Raises:
        ServiceUnavailableError: If code execution is disabled or not initialized.
    """
    if state.runner is None:
        raise ServiceUnavailableError(detail="Code execution is not available")
    return state.runner


def get_installer() -> PackageInstaller:
    """Get the package installer.

    Raises:
        ServiceUnavailableError: If package installation is disabled or not initialized.
    """
    if state.installer is None:
        raise ServiceUnavailableError(detail="Package installation is not available")
    return state.installer


Store = Annotated[WorkspaceStore, Depends(get_store)]
Runner = Annotated[ProcessRunner, Depends(get_runner)]
Installer = Annotated[PackageInstaller, Depends(get_installer)]
