from typing import Literal

from pydantic import BaseModel


class FileNode(BaseModel):
    name: str
    kind: Literal["file", "directory"]
    path: str
    children: list["FileNode"] | None = None


class FileTreeResponse(BaseModel):
    tree: list[FileNode]


class FileContentResponse(BaseModel):
    """File text. ``lossy`` is set when undecodable bytes were replaced with U+FFFD."""

    path: str
    content: str
    lossy: bool = False


class WriteFileRequest(BaseModel):
    path: str
    content: str = ""


class FolderRequest(BaseModel):
    path: str


class UploadResponse(BaseModel):
    success: bool = True
    files: list[str]


class SuccessResponse(BaseModel):
    success: bool = True
