"""OneSky Platform API client: typed async access to the OneSky REST API.

WHY: OneSky authenticates every call with a per-request signature and
wraps every answer in a generic ``{meta, data}`` envelope. Callers should
work with typed results and plain Python exceptions instead of signing
URLs and unpacking envelopes by hand.

HOW: Three layers: naming (PascalCase ↔ wire keys), serialization
(argument shaping and typed decoding) and the async client (signing,
dispatch, envelope extraction, pagination, file download).

RULES:
- All HTTP traffic goes through OneSkyClient
- Credentials and base URL are fixed when the client is constructed
- No retries anywhere: failures are raised to the caller
"""

from onesky.api import (
    ApiError,
    ApiFileInfo,
    ApiFileUploadInfo,
    ApiIdName,
    ApiName,
    ApiSuccess,
    FileContent,
    FileDownloadError,
    HttpResponseInfo,
    OneSkyAPIError,
    OneSkyClient,
    OneSkyError,
    RequestShapeError,
)

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "ApiFileInfo",
    "ApiFileUploadInfo",
    "ApiIdName",
    "ApiName",
    "ApiSuccess",
    "FileContent",
    "FileDownloadError",
    "HttpResponseInfo",
    "OneSkyAPIError",
    "OneSkyClient",
    "OneSkyError",
    "RequestShapeError",
]
