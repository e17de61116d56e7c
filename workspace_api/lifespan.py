"""Lifespan management for the FastAPI application.

Builds the workspace and sandbox components from settings at startup and
clears them on shutdown. The workspace root is handed to each component
explicitly through its ``PathResolver``.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI

from workspace_api import state
from workspace_api.config import Settings, get_settings
from workspace_api.sandbox import PackageInstaller, ProcessRunner
from workspace_api.workspace import PathResolver, WorkspaceStore

logger = logging.getLogger(__name__)


@dataclass
class LifespanResources:
    """Container for resources initialized during lifespan."""

    store: WorkspaceStore | None = None
    runner: ProcessRunner | None = None
    installer: PackageInstaller | None = None


def init_workspace(settings: Settings) -> WorkspaceStore:
    """Create the workspace store and make sure the root directory exists."""
    store = WorkspaceStore(PathResolver(settings.workspace.root))
    store.ensure_root()
    logger.info("Workspace root: %s", store.root)
    return store


def init_sandbox(
    settings: Settings, store: WorkspaceStore
) -> tuple[ProcessRunner | None, PackageInstaller | None]:
    """Create the process runner and installer unless execution is disabled."""
    if not settings.sandbox.enabled:
        logger.warning("Code execution disabled (SANDBOX_ENABLED=0)")
        return None, None

    runner = ProcessRunner(
        store.resolver,
        timeout=settings.sandbox.execute_timeout_sec,
        max_output_chars=settings.sandbox.max_output_chars,
        drain_grace=settings.sandbox.drain_grace_sec,
    )
    installer = PackageInstaller(
        runner,
        pip_command=settings.sandbox.pip_command,
        timeout=settings.sandbox.install_timeout_sec,
    )
    return runner, installer


def setup_resources(settings: Settings | None = None) -> LifespanResources:
    """Set up all shared resources and publish them on ``state``."""
    settings = settings or get_settings()
    resources = LifespanResources()
    resources.store = init_workspace(settings)
    resources.runner, resources.installer = init_sandbox(settings, resources.store)

    state.store = resources.store
    state.runner = resources.runner
    state.installer = resources.installer
    return resources


def cleanup_resources(resources: LifespanResources) -> None:
    """Clear global state on shutdown."""
    resources.store = None
    resources.runner = None
    resources.installer = None
    state.store = None
    state.runner = None
    state.installer = None


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    resources = setup_resources()
    try:
        yield
    finally:
        cleanup_resources(resources)
