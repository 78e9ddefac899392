"""OneSky API request and response models.

WHY: Every OneSky response is a ``{meta, data}`` envelope whose ``data``
shape depends on both the endpoint and the status. Typed models make the
envelope, the entities and the request arguments explicit instead of
passing raw dicts around.

HOW: The envelope is decoded into one of two variants, ApiSuccess or
ApiError, by looking at ``meta.status`` first. Entities are pydantic
models whose aliases come from the underscore naming strategy, so they
validate straight from the wire payload. Request argument structures
are plain dataclasses whose fields become wire keys.

RULES:
- Entity fields all have defaults; absent keys leave the default in place
- A field whose wire key differs from its Python name sets Field(alias=...)
- Unknown keys in a payload are ignored
- Request argument fields left as None are not sent
- FileContent is the only value type that turns a request into multipart
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import IO, Any, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field

from onesky.naming import to_underscore


# ---------------------------------------------------------------------------
# Binary request content
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FileContent:
    """Binary content sent as one part of a multipart/form-data request.

    The form part is always named after the argument key it is passed
    under; ``filename`` only sets the filename in the part's
    Content-Disposition header and is left out when None.
    """

    content: bytes | IO[bytes]
    filename: str | None = None
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: str | Path, content_type: str | None = None) -> FileContent:
        """Read a file from disk into a FileContent part."""
        path = Path(path)
        return cls(
            content=path.read_bytes(),
            filename=path.name,
            content_type=content_type or "application/octet-stream",
        )


# ---------------------------------------------------------------------------
# Response envelope
# ---------------------------------------------------------------------------


class ApiModel(BaseModel):
    """Base for everything decoded from a OneSky payload."""

    model_config = ConfigDict(alias_generator=to_underscore, populate_by_name=True)


class ResponseMeta(ApiModel):
    """The ``meta`` object of a OneSky response envelope."""

    status: int
    message: Optional[str] = None
    record_count: Optional[int] = None
    page_count: Optional[int] = None
    next_page: Optional[str] = None
    prev_page: Optional[str] = None
    first_page: Optional[str] = None
    last_page: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status <= 299


@dataclass
class ApiSuccess:
    """Envelope variant for a 2xx ``meta.status``; ``data`` is the payload."""

    meta: ResponseMeta
    data: Any = None


@dataclass
class ApiError:
    """Envelope variant for any status outside 200–299.

    ``data`` keeps whatever error payload the server sent (often None).
    """

    meta: ResponseMeta
    data: Any = None

    @property
    def message(self) -> str:
        return self.meta.message or f"Generic API error {self.meta.status}"


ApiResponse = Union[ApiSuccess, ApiError]


def decode_envelope(payload: dict) -> ApiResponse:
    """Decode a raw JSON envelope into ApiSuccess or ApiError.

    WHY: The ``data`` member means different things for successful and
    failed calls. Deciding the variant up front means nothing downstream
    ever interprets an error payload as a result.

    HOW: Validates ``meta`` first and branches on its status.

    RULES:
    - Raises KeyError/TypeError when ``meta`` is missing and a pydantic
      ValidationError (a ValueError) when it is malformed; the client
      turns these into OneSkyAPIError
    """
    meta = ResponseMeta.model_validate(payload["meta"])
    data = payload.get("data")
    if meta.is_success:
        return ApiSuccess(meta=meta, data=data)
    return ApiError(meta=meta, data=data)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


class ApiName(ApiModel):
    """Generic name-only entity, e.g. the result of deleting a file."""

    name: Optional[str] = None


class ApiIdName(ApiName):
    """An id + name pair: project groups, projects."""

    id: int = 0


class ApiLastImport(ApiModel):
    id: int = 0
    status: Optional[str] = None


class ApiFileInfo(ApiModel):
    """One entry of the uploaded file list of a project."""

    file_name: Optional[str] = None
    string_count: int = 0
    last_import: Optional[ApiLastImport] = None
    uploaded_at: Optional[datetime] = None
    uploaded_at_timestamp: int = 0


class ApiLanguage(ApiModel):
    """A language as reported by upload results and project language lists.

    The progress/publishing fields are only present on the project
    language list.
    """

    code: Optional[str] = None
    english_name: Optional[str] = None
    local_name: Optional[str] = None
    locale: Optional[str] = None
    region: Optional[str] = None
    is_base_language: Optional[bool] = None
    is_ready_to_publish: Optional[bool] = None
    translation_progress: Optional[str] = None


class ApiImport(ApiModel):
    """The import job created by a file upload."""

    id: int = 0
    created_at: Optional[datetime] = None
    created_at_timestamp: int = 0


class ApiFileUploadInfo(ApiModel):
    """Result of uploading a source file."""

    name: Optional[str] = None
    format: Optional[str] = None
    language: Optional[ApiLanguage] = None
    import_: Optional[ApiImport] = Field(default=None, alias="import")


# ---------------------------------------------------------------------------
# Request arguments
# ---------------------------------------------------------------------------


@dataclass
class PageArgs:
    page: int | None = None
    per_page: int | None = None


@dataclass
class UploadFileArgs:
    """Arguments of ``POST projects/{id}/files``.

    ``file_format`` is one of OneSky's format codes, e.g. ``HIERARCHICAL_JSON``
    or ``GNU_PO``. Without ``locale`` the project's base language is used.
    """

    file: FileContent
    file_format: str
    locale: str | None = None
    is_keeping_all_strings: bool | None = None


@dataclass
class ExportTranslationArgs:
    """Arguments of ``GET projects/{id}/translations``."""

    locale: str
    source_file_name: str
    export_file_name: str | None = None


# ---------------------------------------------------------------------------
# Raw download metadata
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HttpResponseInfo:
    """Status line and headers of a file download.

    Holds copies only, so it stays valid after the response is closed.
    """

    status_code: int
    reason_phrase: str
    headers: httpx.Headers

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")
