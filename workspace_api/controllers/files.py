from fastapi import APIRouter, File, Query, UploadFile

from workspace_api.dependencies import Store
from workspace_api.models.workspace import (
    FileContentResponse,
    FileTreeResponse,
    FolderRequest,
    SuccessResponse,
    UploadResponse,
    WriteFileRequest,
)

router = APIRouter(prefix="/api", tags=["files"])


@router.get("/files", response_model=FileTreeResponse, response_model_exclude_none=True)
def list_files(store: Store) -> FileTreeResponse:
    root = store.list_tree()
    return FileTreeResponse(tree=root.children or [])


@router.get("/file", response_model=FileContentResponse)
def read_file(
    store: Store,
    path: str = Query(..., description="File path relative to the workspace root"),
) -> FileContentResponse:
    data = store.read_file(path)
    try:
        return FileContentResponse(path=path, content=data.decode("utf-8"))
    except UnicodeDecodeError:
        return FileContentResponse(
            path=path, content=data.decode("utf-8", errors="replace"), lossy=True
        )


@router.put("/file", response_model=SuccessResponse)
@router.post("/file", response_model=SuccessResponse)
def write_file(body: WriteFileRequest, store: Store) -> SuccessResponse:
    store.write_file(body.path, body.content)
    return SuccessResponse()


@router.delete("/file", response_model=SuccessResponse)
def delete_file(
    store: Store,
    path: str = Query(..., description="File or directory path relative to the workspace root"),
) -> SuccessResponse:
    store.delete_file(path)
    return SuccessResponse()


@router.post("/folder", response_model=SuccessResponse)
def create_folder(body: FolderRequest, store: Store) -> SuccessResponse:
    store.make_directory(body.path)
    return SuccessResponse()


@router.post("/upload", response_model=UploadResponse)
def upload_files(
    store: Store,
    files: list[UploadFile] = File(..., description="Files to store under the workspace root"),
) -> UploadResponse:
    stored = []
    for upload in files:
        content = upload.file.read()
        stored.append(store.store_uploaded(upload.filename, content))
    return UploadResponse(files=stored)
