from workspace_api.workspace.paths import PathResolver
from workspace_api.workspace.store import WorkspaceStore, sanitize_filename

__all__ = ["PathResolver", "WorkspaceStore", "sanitize_filename"]
