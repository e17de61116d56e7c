from fastapi import APIRouter
from typing import Dict

from workspace_api import state

router = APIRouter()


@router.get("/health")
async def health() -> Dict[str, str]:
    workspace_status = "uninitialized"
    if state.store:
        workspace_status = "ready" if state.store.root.is_dir() else "missing"

    execution_status = "enabled" if state.runner else "disabled"
    return {"status": "ok", "workspace": workspace_status, "execution": execution_status}
