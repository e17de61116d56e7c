from pydantic import BaseModel, Field


class ExecuteRequest(BaseModel):
    code: str
    language: str
    file_path: str | None = Field(default=None, alias="filePath")

    model_config = {"populate_by_name": True}


class InstallRequest(BaseModel):
    packages: list[str]
    language: str = "python"


class ExecutionResultResponse(BaseModel):
    output: str
    exit_code: int | None = None
    timed_out: bool = False
    duration_ms: int = 0
