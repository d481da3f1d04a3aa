"""
Content type detection by file extension.
"""

from __future__ import annotations

from pathlib import PurePosixPath


DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Static extension -> MIME lookup, text types are served as UTF-8
CONTENT_TYPES: dict[str, str] = {
    ".txt": "text/plain; charset=utf-8",
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".ppt": "application/vnd.ms-powerpoint",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
    ".zip": "application/zip",
    ".rar": "application/x-rar-compressed",
    ".json": "application/json; charset=utf-8",
    ".xml": "application/xml; charset=utf-8",
    ".html": "text/html; charset=utf-8",
    ".css": "text/css; charset=utf-8",
    ".js": "application/javascript; charset=utf-8",
    ".ts": "application/typescript; charset=utf-8",
    ".mp4": "video/mp4",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".avi": "video/x-msvideo",
    ".mov": "video/quicktime",
}


def get_content_type(filename: str) -> str:
    """
    Get the MIME type for a file name.

    Args:
        filename: File name or path; only the last extension is used.

    Returns:
        MIME type string, or application/octet-stream when unknown.
    """
    ext = PurePosixPath(filename.replace("\\", "/")).suffix.lower()
    return CONTENT_TYPES.get(ext, DEFAULT_CONTENT_TYPE)
