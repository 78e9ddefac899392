"""Async HTTP client for the OneSky Platform API.

WHY: Every OneSky call has to be signed with the account's secret key,
its arguments shaped into either a query string or a body, and its
``{meta, data}`` envelope unpacked before the caller sees a result. This
module does all of that behind one client class so callers only deal in
paths, argument structures and result types.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. OneSkyClient is an
async context manager. Enter it to open the connection pool, exit to
close it. Every call goes through one dispatch path:
build_request (sign + shape) → send → process (envelope or raw stream).

RULES:
- Always use the async context manager (async with OneSkyClient(...) as client:)
- Signature: dev_hash = md5(timestamp + secret_key), lowercase hex
- GET/DELETE send all arguments in the query string; POST/PUT send a JSON
  object, or multipart/form-data as soon as one argument is FileContent
- FileContent in a GET/DELETE request is rejected before any I/O
- No retries: httpx errors propagate unchanged, API errors raise OneSkyAPIError
- A single client may be shared by concurrent tasks
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import IO, Any, TypeVar

import httpx

from onesky.api.models import (
    ApiError,
    ApiFileInfo,
    ApiFileUploadInfo,
    ApiIdName,
    ApiLanguage,
    ApiName,
    ApiResponse,
    ExportTranslationArgs,
    FileContent,
    HttpResponseInfo,
    UploadFileArgs,
    decode_envelope,
)
from onesky.api.serialization import DEFAULT_SERIALIZER, Serializer
from onesky.config import (
    DEFAULT_PER_PAGE,
    ONESKY_BASE_URL,
    REQUEST_TIMEOUT_S,
    load_credentials,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SIMPLE_METHODS = frozenset({"GET", "DELETE"})
COMPLEX_METHODS = frozenset({"POST", "PUT"})


class OneSkyError(Exception):
    """Base class for errors raised by this library (not by httpx)."""


class OneSkyAPIError(OneSkyError):
    """Raised when the OneSky envelope reports a non-2xx status.

    WHY: Callers need a typed exception to tell API rejections apart from
    network errors, which propagate as httpx exceptions.

    HOW: Carries ``meta.status`` and the server's message. The exception
    text is exactly the message.

    RULES:
    - message is meta.message when present, else "Generic API error {status}"
    - Also raised when the response is not a OneSky envelope at all
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class FileDownloadError(OneSkyError):
    """Raised by get_file() when the HTTP status is not 200 OK."""

    def __init__(self, status_code: int, reason_phrase: str) -> None:
        self.status_code = status_code
        self.reason_phrase = reason_phrase
        super().__init__(
            f"File could not be loaded, server returned {status_code} {reason_phrase}"
        )


class RequestShapeError(OneSkyError, ValueError):
    """Raised when arguments cannot be encoded for the chosen HTTP method."""


def compute_dev_hash(timestamp: str, secret_key: str) -> str:
    """Return the OneSky request signature for a timestamp.

    The digest is MD5 over ``timestamp + secret_key``, hex-encoded in
    lowercase without separators.
    """
    return hashlib.md5((timestamp + secret_key).encode("utf-8")).hexdigest()


@dataclass
class ApiRequest:
    """One outgoing call: method, relative path and wire-key arguments.

    ``args`` is the client's private copy and is consumed while the
    request is shaped.
    """

    method: str
    path: str
    args: dict[str, Any] = field(default_factory=dict)

    @property
    def is_simple(self) -> bool:
        return self.method in SIMPLE_METHODS


class OneSkyClient:
    """Async client for the OneSky Platform API.

    WHY: Provides one signed, typed entry point for every OneSky endpoint:
    generic verbs (get/post/put/delete), auto-paginated lists, raw file
    downloads, and a few typed endpoint helpers on top.

    HOW: Wraps httpx.AsyncClient with the base URL and a 15 minute
    timeout. Credentials and the Serializer are fixed at construction.

    RULES:
    - Use as: async with OneSkyClient() as client: ...
    - public_key/secret_key default to load_credentials() from .env when
      both are omitted
    - base_url defaults to ONESKY_BASE_URL from config
    - Empty credentials or an empty base_url raise ValueError immediately
    """

    def __init__(
        self,
        public_key: str | None = None,
        secret_key: str | None = None,
        base_url: str | None = None,
        *,
        serializer: Serializer | None = None,
        timeout: float = REQUEST_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if public_key is None and secret_key is None:
            public_key, secret_key = load_credentials()
        if not public_key:
            raise ValueError("OneSky public key must not be empty")
        if not secret_key:
            raise ValueError("OneSky secret key must not be empty")
        if base_url is None:
            base_url = ONESKY_BASE_URL
        if not base_url:
            raise ValueError("OneSky base URL must not be empty")

        self._public_key = public_key
        self._secret_key = secret_key
        self._base_url = base_url if base_url.endswith("/") else base_url + "/"
        self._serializer = serializer or DEFAULT_SERIALIZER
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def serializer(self) -> Serializer:
        return self._serializer

    async def __aenter__(self) -> OneSkyClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "OneSkyClient must be used as an async context manager: "
                "async with OneSkyClient() as client: ..."
            )
        return self._client

    # ------------------------------------------------------------------
    # Signing and request shaping
    # ------------------------------------------------------------------

    def _auth_params(self) -> list[tuple[str, str]]:
        timestamp = str(int(time.time()))
        return [
            ("api_key", self._public_key),
            ("timestamp", timestamp),
            ("dev_hash", compute_dev_hash(timestamp, self._secret_key)),
        ]

    def build_request(self, method: str, path: str, args: Any = None) -> httpx.Request:
        """Sign a call and shape its arguments into an httpx.Request.

        WHY: Signing and payload shaping are the only non-trivial parts of
        talking to OneSky; keeping them apart from sending makes the exact
        wire form observable.

        HOW: Adds api_key/timestamp/dev_hash to the query. Simple methods
        (GET, DELETE) move every argument into the query and clear the
        argument dict. Complex methods (POST, PUT) get a multipart body if
        any argument is FileContent, otherwise one JSON object.

        RULES:
        - path is relative to the base URL, without a leading slash
        - args may be None, a mapping, (key, value) pairs or a dataclass
        - Raises RequestShapeError for FileContent in a simple request
        - Raises ValueError for methods other than GET/POST/PUT/DELETE
        """
        client = self._ensure_client()
        method = method.upper()
        if method not in SIMPLE_METHODS | COMPLEX_METHODS:
            raise ValueError(f"Unsupported HTTP method for OneSky: {method}")

        path, _, query = path.partition("?")
        request = ApiRequest(method, path, self._serializer.normalize_args(args))
        # httpx replaces a query embedded in the URL when params= is given
        params = list(httpx.QueryParams(query).multi_items()) + self._auth_params()
        fmt = self._serializer.format_query_value

        if request.is_simple:
            for key, value in request.args.items():
                if isinstance(value, FileContent):
                    raise RequestShapeError(
                        f"Simple requests cannot have multipart content "
                        f"({method} {path}, argument {key!r})"
                    )
                params.append((key, fmt(value)))
            request.args.clear()
            return client.build_request(method, path, params=params)

        if any(isinstance(value, FileContent) for value in request.args.values()):
            data: dict[str, str] = {}
            files: list[tuple[str, tuple[str | None, Any, str]]] = []
            for key, value in request.args.items():
                if isinstance(value, FileContent):
                    files.append((key, (value.filename, value.content, value.content_type)))
                else:
                    data[key] = fmt(value)
            return client.build_request(
                method, path, params=params, data=data or None, files=files
            )

        return client.build_request(
            method,
            path,
            params=params,
            content=self._serializer.dumps(request.args),
            headers={"Content-Type": "application/json"},
        )

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def _send(
        self,
        method: str,
        path: str,
        args: Any,
        process: Callable[[httpx.Response], Awaitable[T]],
    ) -> T:
        """Build, send and hand the streamed response to ``process``.

        The whole round trip, body included, must finish within the
        client timeout; otherwise httpx.TimeoutException is raised.
        """
        client = self._ensure_client()
        request = self.build_request(method, path, args)
        logger.debug("OneSky %s %s", request.method, request.url.path)

        async def round_trip() -> T:
            response = await client.send(request, stream=True)
            try:
                logger.debug(
                    "OneSky %s %s -> %s",
                    request.method,
                    request.url.path,
                    response.status_code,
                )
                return await process(response)
            finally:
                await response.aclose()

        try:
            return await asyncio.wait_for(round_trip(), self._timeout)
        except asyncio.TimeoutError as exc:
            raise httpx.TimeoutException(
                f"OneSky {request.method} {request.url.path} did not complete "
                f"within {self._timeout}s",
                request=request,
            ) from exc

    async def send_request(self, method: str, path: str, args: Any = None) -> ApiResponse:
        """Send a signed request and decode the response envelope.

        Returns ApiSuccess or ApiError; use get_data() to extract a result.
        """
        return await self._send(method, path, args, _read_envelope)

    def get_data(self, response: ApiResponse, result_type: Any = None) -> Any:
        """Check the envelope status and decode ``data`` into ``result_type``.

        RULES:
        - ApiError raises OneSkyAPIError with the server message or
          "Generic API error {status}"
        - result_type=None returns the raw JSON data
        """
        if isinstance(response, ApiError):
            raise OneSkyAPIError(response.meta.status, response.message)
        return self._serializer.decode(response.data, result_type)

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    async def get(self, path: str, args: Any = None, result_type: Any = None) -> Any:
        """GET a JSON resource. For files use get_file() instead."""
        return self.get_data(await self.send_request("GET", path, args), result_type)

    async def post(self, path: str, args: Any = None, result_type: Any = None) -> Any:
        return self.get_data(await self.send_request("POST", path, args), result_type)

    async def put(self, path: str, args: Any = None, result_type: Any = None) -> Any:
        return self.get_data(await self.send_request("PUT", path, args), result_type)

    async def delete(self, path: str, args: Any = None, result_type: Any = None) -> Any:
        return self.get_data(await self.send_request("DELETE", path, args), result_type)

    async def get_all(
        self,
        path: str,
        item_type: Any = None,
        args: Any = None,
        per_page: int | None = None,
    ) -> list:
        """GET every page of a list resource and return the items in order.

        WHY: OneSky list endpoints are paginated; most callers want the
        whole list.

        HOW: Sends ``page`` = 1, 2, ... with a fixed ``per_page`` and stops
        after the first page holding fewer than ``per_page`` items.

        RULES:
        - Page size: per_page argument, else per_page in args, else 100
        - The resolved page size is sent with every request
        - A page whose data is null counts as empty and ends the loop
        - Any failing page raises; items collected so far are discarded
        - No page limit and no deduplication

        Args:
            path: Relative path of the list endpoint.
            item_type: Type each list element is decoded into (None = raw).
            args: Extra query arguments.
            per_page: Page size override.

        Returns:
            All items of all pages.
        """
        query = self._serializer.normalize_args(args)
        if per_page is None:
            per_page = int(query.get("per_page", DEFAULT_PER_PAGE))
        if per_page < 1:
            raise ValueError(f"per_page must be at least 1, got {per_page}")
        query["per_page"] = per_page
        page_type = list if item_type is None else list[item_type]

        results: list = []
        page = 1
        while True:
            query["page"] = page
            items = await self.get(path, query, page_type) or []
            results.extend(items)
            if len(items) < per_page:
                break
            page += 1
        logger.debug("Fetched %d items from %s in %d page(s)", len(results), path, page)
        return results

    async def get_file(
        self,
        path: str,
        target: IO[bytes],
        args: Any = None,
        check_status: bool = True,
    ) -> HttpResponseInfo:
        """Stream a raw GET response body into ``target``.

        RULES:
        - With check_status, anything but 200 OK raises FileDownloadError
          before a single byte is written
        - target only needs a write(bytes) method
        - The returned HttpResponseInfo holds copies, no live response
        """

        async def copy_body(response: httpx.Response) -> HttpResponseInfo:
            if check_status and response.status_code != httpx.codes.OK:
                raise FileDownloadError(response.status_code, response.reason_phrase)
            async for chunk in response.aiter_bytes():
                target.write(chunk)
            return HttpResponseInfo(
                status_code=response.status_code,
                reason_phrase=response.reason_phrase,
                headers=httpx.Headers(response.headers),
            )

        return await self._send("GET", path, args, copy_body)

    # ------------------------------------------------------------------
    # Endpoint helpers
    # ------------------------------------------------------------------

    async def list_project_groups(self) -> list[ApiIdName]:
        return await self.get_all("project-groups", ApiIdName)

    async def list_projects(self, project_group_id: int) -> list[ApiIdName]:
        return await self.get(
            f"project-groups/{project_group_id}/projects", result_type=list[ApiIdName]
        )

    async def list_project_languages(self, project_id: int) -> list[ApiLanguage]:
        return await self.get(
            f"projects/{project_id}/languages", result_type=list[ApiLanguage]
        )

    async def list_files(self, project_id: int) -> list[ApiFileInfo]:
        """List all uploaded source files of a project (all pages)."""
        return await self.get_all(f"projects/{project_id}/files", ApiFileInfo)

    async def upload_file(self, project_id: int, args: UploadFileArgs) -> ApiFileUploadInfo:
        """Upload a source file; OneSky imports it asynchronously."""
        return await self.post(f"projects/{project_id}/files", args, ApiFileUploadInfo)

    async def delete_file(self, project_id: int, file_name: str) -> ApiName:
        return await self.delete(
            f"projects/{project_id}/files", {"file_name": file_name}, ApiName
        )

    async def export_translation(
        self,
        project_id: int,
        args: ExportTranslationArgs,
        target: IO[bytes],
    ) -> HttpResponseInfo:
        """Download one translated file into ``target``.

        OneSky answers 202 Accepted with an empty body while the file is
        still being generated; that raises FileDownloadError here.
        """
        return await self.get_file(f"projects/{project_id}/translations", target, args)


# ---------------------------------------------------------------------------
# Response processing (module-private)
# ---------------------------------------------------------------------------


async def _read_envelope(response: httpx.Response) -> ApiResponse:
    """Read the whole body and decode the OneSky envelope.

    Bodies that are not JSON or carry no ``meta`` object raise
    OneSkyAPIError with the HTTP status line.
    """
    body = await response.aread()
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("OneSky response body: %s", body.decode("utf-8", errors="replace"))
    try:
        return decode_envelope(json.loads(body))
    except (ValueError, KeyError, TypeError) as exc:
        raise OneSkyAPIError(
            response.status_code,
            f"Unexpected response from OneSky: {response.status_code} "
            f"{response.reason_phrase}",
        ) from exc
