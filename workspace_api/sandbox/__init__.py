from workspace_api.sandbox.installer import (
    PackageInstaller,
    is_valid_package_name,
    validate_package_names,
)
from workspace_api.sandbox.languages import LANGUAGES, Interpreter, get_interpreter
from workspace_api.sandbox.runner import ExecutionResult, ProcessRunner, RunOutcome

__all__ = [
    "ExecutionResult",
    "Interpreter",
    "LANGUAGES",
    "PackageInstaller",
    "ProcessRunner",
    "RunOutcome",
    "get_interpreter",
    "is_valid_package_name",
    "validate_package_names",
]
