"""HTTP exchange: one network call, one audit log entry."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol
from urllib.parse import urlencode

import aiohttp

from ravensync._constants import USER_AGENT
from ravensync._redact import mask_exchange_bodies, mask_headers, redact_for_log
from ravensync.audit import AuditLog
from ravensync.exceptions import (
    RavenHttpError,
    RavenNetworkError,
    RavenUnauthorizedError,
    RavenValidationError,
)

_logger = logging.getLogger(__name__)

_NETWORK_ERROR_STATUS_TEXT = "Network Error"


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (:class:`HttpExchange`) concrete.
    """

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        base_url: str = "",
        body: Any = None,
        token: str | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Any:
        ...


def _is_absolute(endpoint: str) -> bool:
    return endpoint.startswith(("http://", "https://"))


def _decode_body(raw: bytes, charset: str | None) -> tuple[str, ValueError | LookupError | None]:
    """Decode *raw* with the declared charset (UTF-8 when none).

    Undecodable bytes are replaced so the text can still be logged; the
    decode error is returned alongside.
    """
    encoding = charset or "utf-8"
    try:
        return raw.decode(encoding), None
    except (UnicodeDecodeError, LookupError) as exc:
        return raw.decode("utf-8", errors="replace"), exc


class HttpExchange:
    """Performs single HTTP calls and records each one in an :class:`AuditLog`.

    Exactly one entry is recorded per call, before control returns to the
    caller, whether the call succeeded, returned a non-2xx status or never
    got a response.
    """

    def __init__(
        self,
        http_session: aiohttp.ClientSession,
        audit_log: AuditLog,
        *,
        timeout: float | None = None,
    ) -> None:
        self._http = http_session
        self._audit = audit_log
        self._timeout = aiohttp.ClientTimeout(total=timeout) if timeout is not None else None

    @property
    def audit_log(self) -> AuditLog:
        return self._audit

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        base_url: str = "",
        body: Any = None,
        token: str | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON payload.

        Parameters
        ----------
        method : str
            HTTP verb.
        endpoint : str
            Path appended to *base_url*, or an absolute URL.
        base_url : str
            API root, e.g. ``https://api.example.com/v1``.
        body : Any
            JSON-serialisable request body.
        token : str or None
            Bearer token; omitted for unauthenticated calls.
        params : Mapping or None
            Query string parameters.

        Returns
        -------
        Any
            Parsed JSON, or ``None`` for an empty body.

        Raises
        ------
        RavenUnauthorizedError
            On HTTP 401.
        RavenHttpError
            On any other non-2xx status.
        RavenNetworkError
            When no response was received.
        RavenValidationError
            When a 2xx body is not JSON.
        """
        method = method.upper()
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        data: str | None = None
        if body is not None:
            data = json.dumps(body)
            headers["content-type"] = "application/json"
        if token:
            headers["authorization"] = f"Bearer {token}"

        url = endpoint if _is_absolute(endpoint) else f"{base_url}{endpoint}"
        log_endpoint = f"{endpoint}?{urlencode(params)}" if params else endpoint

        kwargs: dict[str, Any] = {"data": data, "headers": headers}
        if params:
            kwargs["params"] = dict(params)
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout

        _logger.debug("%s %s body=%s", method, url, redact_for_log(body))

        try:
            async with self._http.request(method, url, **kwargs) as resp:
                status = resp.status
                status_text = resp.reason or ""
                raw = await resp.read()
                charset = resp.charset
        except (aiohttp.ClientError, TimeoutError) as exc:
            self._record(
                log_endpoint,
                method,
                headers,
                data,
                status=0,
                status_text=_NETWORK_ERROR_STATUS_TEXT,
                response_body=str(exc) or type(exc).__name__,
            )
            raise RavenNetworkError(
                f"Request to {log_endpoint} failed: {exc or type(exc).__name__}",
                endpoint=log_endpoint,
            ) from exc

        text, decode_error = _decode_body(raw, charset)
        self._record(log_endpoint, method, headers, data, status=status, status_text=status_text, response_body=text)
        _logger.debug("%s %s -> %s %s", method, url, status, status_text)

        if not 200 <= status < 300:
            error_cls = RavenUnauthorizedError if status == 401 else RavenHttpError
            raise error_cls(
                f"HTTP {status} from {log_endpoint}: {text[:200]}",
                status=status,
                status_text=status_text,
                body=text,
                endpoint=log_endpoint,
            )

        if decode_error is not None:
            raise RavenValidationError(
                f"Undecodable response body from {log_endpoint}: {decode_error}",
                endpoint=log_endpoint,
            ) from decode_error
        if not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise RavenValidationError(
                f"Invalid JSON from {log_endpoint}: {text[:200]}",
                endpoint=log_endpoint,
            ) from exc

    def _record(
        self,
        endpoint: str,
        method: str,
        headers: Mapping[str, str],
        request_body: str | None,
        *,
        status: int,
        status_text: str,
        response_body: str | None,
    ) -> None:
        request_body, response_body = mask_exchange_bodies(endpoint, request_body, response_body)
        self._audit.record(
            endpoint=endpoint,
            method=method,
            request_headers=mask_headers(headers),
            request_body=request_body,
            status=status,
            status_text=status_text,
            ok=200 <= status < 300,
            response_body=response_body,
        )
