import os
import sys
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

import pytest
from fastapi.testclient import TestClient

from workspace_api.config import clear_settings_cache
from workspace_api.sandbox import PackageInstaller, ProcessRunner
from workspace_api.workspace import PathResolver, WorkspaceStore


@pytest.fixture
def workspace_root(tmp_path):
    root = tmp_path / "ws"
    root.mkdir()
    return root.resolve()


@pytest.fixture
def resolver(workspace_root):
    return PathResolver(workspace_root)


@pytest.fixture
def store(resolver):
    return WorkspaceStore(resolver)


@pytest.fixture
def runner(resolver):
    return ProcessRunner(resolver, timeout=10, drain_grace=0.5)


@pytest.fixture
def installer(runner):
    return PackageInstaller(runner, timeout=10)


@pytest.fixture
def client(monkeypatch, workspace_root):
    monkeypatch.setenv("WORKSPACE_ROOT", str(workspace_root))
    monkeypatch.setenv("SANDBOX_EXECUTE_TIMEOUT_SEC", "10")
    clear_settings_cache()

    import workspace_api.main as main

    with TestClient(main.app) as c:
        yield c
    clear_settings_cache()
