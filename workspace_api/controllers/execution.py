from dataclasses import asdict

from fastapi import APIRouter

from workspace_api.dependencies import Installer, Runner
from workspace_api.models.execution import (
    ExecuteRequest,
    ExecutionResultResponse,
    InstallRequest,
)

router = APIRouter(prefix="/api", tags=["execution"])


@router.post("/execute", response_model=ExecutionResultResponse)
async def execute_code(body: ExecuteRequest, runner: Runner) -> ExecutionResultResponse:
    result = await runner.execute(body.code, body.language, target_path=body.file_path)
    return ExecutionResultResponse(**asdict(result))


@router.post("/install-packages", response_model=ExecutionResultResponse)
async def install_packages(body: InstallRequest, installer: Installer) -> ExecutionResultResponse:
    result = await installer.install(body.packages, body.language)
    return ExecutionResultResponse(**asdict(result))
