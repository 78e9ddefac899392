"""OneSky API client package: async HTTP interface to the OneSky platform.

WHY: Translation tooling needs to list projects and files, upload source
files and download translations. This package encapsulates all OneSky
API communication behind an async client class.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. OneSkyClient signs and
shapes requests; the Serializer decodes envelope payloads into the typed
dataclasses defined in models.py.

RULES:
- All HTTP calls go through OneSkyClient (no direct httpx usage elsewhere)
- Authentication is the api_key/timestamp/dev_hash query triple
- Errors are raised, never retried
"""

from onesky.api.client import (
    FileDownloadError,
    OneSkyAPIError,
    OneSkyClient,
    OneSkyError,
    RequestShapeError,
    compute_dev_hash,
)
from onesky.api.models import (
    ApiError,
    ApiFileInfo,
    ApiFileUploadInfo,
    ApiIdName,
    ApiImport,
    ApiLanguage,
    ApiLastImport,
    ApiName,
    ApiResponse,
    ApiSuccess,
    ExportTranslationArgs,
    FileContent,
    HttpResponseInfo,
    PageArgs,
    ResponseMeta,
    UploadFileArgs,
)
from onesky.api.serialization import Serializer

__all__ = [
    "ApiError",
    "ApiFileInfo",
    "ApiFileUploadInfo",
    "ApiIdName",
    "ApiImport",
    "ApiLanguage",
    "ApiLastImport",
    "ApiName",
    "ApiResponse",
    "ApiSuccess",
    "ExportTranslationArgs",
    "FileContent",
    "FileDownloadError",
    "HttpResponseInfo",
    "OneSkyAPIError",
    "OneSkyClient",
    "OneSkyError",
    "PageArgs",
    "RequestShapeError",
    "ResponseMeta",
    "Serializer",
    "UploadFileArgs",
    "compute_dev_hash",
]
