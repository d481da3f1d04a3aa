"""
API routes for tenant file operations.

The tenant comes from the X-Tenant-Id header, set by the authenticating
gateway in front of this service. Tenant ids found in bodies or query
strings are never used to scope an operation.
"""

from __future__ import annotations

from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, File, Form, Header, HTTPException, Query, Response, UploadFile
from pydantic import BaseModel, Field

from src.backend.fs import ArchiveLimits
from src.backend.fs.errors import (
    AlreadyExistsError,
    FileStorageError,
    InvalidNameError,
    InvalidPathError,
    IsDirectoryError,
    NoFilesProvidedError,
    NotFoundError,
    NoValidFilesError,
    TenantRequiredError,
    TooManyFilesError,
    TotalSizeExceededError,
)

from .models import UploadItem, content_disposition
from .service import FileStorageEngine


_STATUS_BY_ERROR: dict[type, int] = {
    InvalidPathError: 400,
    InvalidNameError: 400,
    NoFilesProvidedError: 400,
    TooManyFilesError: 400,
    TotalSizeExceededError: 400,
    IsDirectoryError: 400,
    TenantRequiredError: 401,
    NotFoundError: 404,
    NoValidFilesError: 404,
    AlreadyExistsError: 409,
}


class EntryOut(BaseModel):
    id: str
    name: str
    type: str
    size: Optional[int] = None
    modified: str
    path: str


class ListFilesOut(BaseModel):
    files: list[EntryOut]


class UploadedFileOut(BaseModel):
    name: str
    size: int
    path: str
    etag: str


class ItemFailureOut(BaseModel):
    name: str
    error: str


class UploadOut(BaseModel):
    message: str
    files: list[UploadedFileOut]
    failed: list[ItemFailureOut]


class DeleteOut(BaseModel):
    message: str
    permanent: bool
    trash_path: Optional[str] = None


class BulkDeleteIn(BaseModel):
    paths: list[str] = Field(default_factory=list)


class BulkDeleteOut(BaseModel):
    message: str
    deleted_count: int
    requested_count: int
    failed: list[ItemFailureOut]


class CreateFolderIn(BaseModel):
    path: str = "/"
    name: str = ""


class FolderOut(BaseModel):
    name: str
    path: str
    type: str


class CreateFolderOut(BaseModel):
    message: str
    folder: FolderOut


class DownloadZipIn(BaseModel):
    file_paths: list[str] = Field(default_factory=list, alias="filePaths")


def _http_error(exc: FileStorageError) -> HTTPException:
    status = _STATUS_BY_ERROR.get(type(exc), 500)
    return HTTPException(status_code=status, detail={"code": exc.code, "message": exc.message})


def tenant_header(x_tenant_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Trusted tenant id forwarded by the authenticating gateway."""
    return x_tenant_id


def create_files_router(
    *,
    engine: FileStorageEngine,
    archive_limits: Callable[[], ArchiveLimits],
) -> APIRouter:
    """
    Create the file API router.

    Args:
        engine: The file storage engine.
        archive_limits: Returns the limits to apply to each archive export.

    Returns:
        FastAPI router with upload, listing, download and archive endpoints.
    """
    router = APIRouter(tags=["files"])

    @router.get("/api/uploads", response_model=ListFilesOut, response_model_exclude_none=True)
    def list_files(
        path: str = Query(default="/"),
        tenant_id: Optional[str] = Depends(tenant_header),
    ) -> ListFilesOut:
        try:
            entries = engine.list(tenant_id, path)
        except FileStorageError as exc:
            raise _http_error(exc) from exc
        return ListFilesOut(files=[EntryOut(**e.to_public_dict()) for e in entries])

    @router.post("/api/uploads", response_model=UploadOut)
    def upload_files(
        file: Optional[List[UploadFile]] = File(default=None),
        path: str = Form(default="/"),
        tenant_id: Optional[str] = Depends(tenant_header),
    ) -> UploadOut:
        items = [UploadItem(name=f.filename or "", stream=f.file) for f in (file or [])]
        try:
            result = engine.ingest(tenant_id, path, items)
        except FileStorageError as exc:
            raise _http_error(exc) from exc

        return UploadOut(
            message=f"Successfully uploaded {len(result.files)} file(s)",
            files=[UploadedFileOut(**s.to_public_dict()) for s in result.files],
            failed=[ItemFailureOut(**f.to_public_dict()) for f in result.failed],
        )

    @router.delete("/api/uploads", response_model=DeleteOut)
    def delete_file(
        path: Optional[str] = Query(default=None),
        tenant_id: Optional[str] = Depends(tenant_header),
    ) -> DeleteOut:
        if not path:
            raise HTTPException(
                status_code=400,
                detail={"code": InvalidPathError.code, "message": "Path parameter required"},
            )
        try:
            result = engine.remove(tenant_id, path)
        except FileStorageError as exc:
            raise _http_error(exc) from exc

        message = "File deleted permanently" if result.permanent else "File moved to trash"
        return DeleteOut(message=message, permanent=result.permanent, trash_path=result.trash_path)

    @router.post("/api/uploads/bulk-delete", response_model=BulkDeleteOut)
    def bulk_delete(
        body: BulkDeleteIn,
        tenant_id: Optional[str] = Depends(tenant_header),
    ) -> BulkDeleteOut:
        try:
            result = engine.remove_many(tenant_id, body.paths)
        except FileStorageError as exc:
            raise _http_error(exc) from exc

        return BulkDeleteOut(
            message=f"{len(result.removed)} file(s) deleted successfully",
            deleted_count=len(result.removed),
            requested_count=len(body.paths),
            failed=[ItemFailureOut(**f.to_public_dict()) for f in result.failed],
        )

    @router.post("/api/uploads/folder", response_model=CreateFolderOut, status_code=201)
    def create_folder(
        body: CreateFolderIn,
        tenant_id: Optional[str] = Depends(tenant_header),
    ) -> CreateFolderOut:
        try:
            entry = engine.create_folder(tenant_id, body.path, body.name)
        except FileStorageError as exc:
            raise _http_error(exc) from exc

        return CreateFolderOut(
            message="Folder created successfully",
            folder=FolderOut(name=entry.name, path=entry.path, type=entry.kind.value),
        )

    @router.get("/api/uploads/download")
    def download_file(
        path: Optional[str] = Query(default=None),
        tenant_id: Optional[str] = Depends(tenant_header),
    ) -> Response:
        if not path:
            raise HTTPException(
                status_code=400,
                detail={"code": InvalidPathError.code, "message": "Path parameter required"},
            )
        try:
            content = engine.read(tenant_id, path)
        except FileStorageError as exc:
            raise _http_error(exc) from exc
        return Response(content=content.data, headers=content.attachment_headers())

    @router.post("/api/uploads/download-zip")
    def download_zip(
        body: DownloadZipIn,
        tenant_id: Optional[str] = Depends(tenant_header),
    ) -> Response:
        try:
            result = engine.export(tenant_id, body.file_paths, archive_limits())
        except FileStorageError as exc:
            raise _http_error(exc) from exc

        return Response(
            content=result.data,
            headers={
                "Content-Type": "application/zip",
                "Content-Disposition": content_disposition(result.filename),
                "Content-Length": str(len(result.data)),
                "Cache-Control": "no-cache, no-store, must-revalidate",
                "Pragma": "no-cache",
                "Expires": "0",
            },
        )

    @router.get("/api/files/{path:path}")
    def serve_file(
        path: str,
        tenant_id: Optional[str] = Depends(tenant_header),
        if_none_match: Optional[str] = Header(default=None),
    ) -> Response:
        try:
            content = engine.read(tenant_id, path)
        except FileStorageError as exc:
            raise _http_error(exc) from exc

        headers = content.inline_headers()
        if if_none_match is not None and if_none_match.strip() == headers["ETag"]:
            return Response(
                status_code=304,
                headers={"ETag": headers["ETag"], "Cache-Control": headers["Cache-Control"]},
            )
        return Response(content=content.data, headers=headers)

    return router
