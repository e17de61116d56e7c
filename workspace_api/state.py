from typing import Optional

from workspace_api.sandbox import PackageInstaller, ProcessRunner
from workspace_api.workspace import WorkspaceStore

# Global runtime state initialized in lifespan.setup_resources
store: Optional[WorkspaceStore] = None
runner: Optional[ProcessRunner] = None
installer: Optional[PackageInstaller] = None
