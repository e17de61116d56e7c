"""Validated package installation through the process runner."""

import logging
import re
from typing import Iterable

from workspace_api.errors import BadRequestError, InvalidPackageNameError
from workspace_api.sandbox.languages import unsupported_ecosystem_message
from workspace_api.sandbox.runner import ExecutionResult, ProcessRunner

_logger = logging.getLogger("workspace_api.sandbox")

DEFAULT_INSTALL_TIMEOUT = 120.0

# Name, optional extras and version specifiers. Never an option flag.
PACKAGE_NAME_PATTERN = re.compile(r"[a-zA-Z0-9][a-zA-Z0-9_\-\[\]<>=.]*")


def is_valid_package_name(name: object) -> bool:
    return (
        isinstance(name, str)
        and not name.startswith("-")
        and PACKAGE_NAME_PATTERN.fullmatch(name) is not None
    )


def validate_package_names(names: Iterable[str]) -> list[str]:
    """Return the unique names in order, or reject the whole request.

    Raises:
        BadRequestError: If no names were given.
        InvalidPackageNameError: If any name fails validation.
    """
    unique = list(dict.fromkeys(names))
    if not unique:
        raise BadRequestError(detail="No packages specified")
    invalid = [name for name in unique if not is_valid_package_name(name)]
    if invalid:
        raise InvalidPackageNameError(invalid=invalid)
    return unique


class PackageInstaller:
    def __init__(
        self,
        runner: ProcessRunner,
        pip_command: str = "pip3",
        timeout: float = DEFAULT_INSTALL_TIMEOUT,
    ) -> None:
        self._runner = runner
        self._timeout = timeout
        self._managers: dict[str, list[str]] = {
            "python": [pip_command, "install"],
        }

    @property
    def timeout(self) -> float:
        return self._timeout

    def supported_ecosystems(self) -> list[str]:
        return list(self._managers)

    async def install(
        self,
        packages: Iterable[str],
        ecosystem: str,
        timeout: float | None = None,
    ) -> ExecutionResult:
        manager = self._managers.get(ecosystem)
        if manager is None:
            return ExecutionResult(output=unsupported_ecosystem_message(ecosystem))

        names = validate_package_names(packages)
        limit = timeout if timeout is not None else self._timeout
        outcome = await self._runner.run([*manager, *names], timeout=limit)

        if outcome.spawn_error is not None:
            output = f"Installation error: {outcome.spawn_error}"
        elif outcome.timed_out:
            output = outcome.output + f"\nInstallation timeout after {limit:g}s"
        else:
            output = outcome.output + f"\nExit code: {outcome.exit_code}"

        _logger.info(
            "Package install: ecosystem=%s packages=%s exit_code=%s timed_out=%s duration=%dms",
            ecosystem,
            " ".join(names),
            outcome.exit_code,
            outcome.timed_out,
            outcome.duration_ms,
        )
        return ExecutionResult(
            output=output,
            exit_code=outcome.exit_code,
            timed_out=outcome.timed_out,
            duration_ms=outcome.duration_ms,
        )
