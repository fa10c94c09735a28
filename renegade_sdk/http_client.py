"""
Renegade SDK - HTTP Client

Authenticated async HTTP transport for the Renegade auth server.

Every request is built in two phases: the full header set (including the
expiration header) is assembled and the body serialized first, then the
signature is computed over exactly those values and attached as the one
remaining header. What is signed is byte-for-byte what is sent.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

import httpx

from .auth import (
    RENEGADE_AUTH_EXPIRATION_HEADER,
    RENEGADE_AUTH_HEADER,
    REQUEST_SIGNATURE_DURATION_MS,
    RequestSigner,
    decode_auth_key,
)
from .bigjson import BigJSONCodec, DEFAULT_CODEC

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 30.0


def _now_ms() -> int:
    return int(time.time() * 1000)


class RelayerHttpError(Exception):
    """HTTP request failed (network error or non-2xx status)."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"HTTP {self.status_code}: {self.message}"


@dataclass(frozen=True)
class HttpResponse:
    """Decoded response. data is None for 204 / empty bodies."""
    status: int
    data: Any = None

    @property
    def is_empty(self) -> bool:
        return self.data is None


class RelayerHttpClient:
    """
    HTTP client that signs every request with the API secret.

    Usage:
        async with RelayerHttpClient(base_url, api_secret) as http:
            resp = await http.post("/v0/matching-engine/quote", body, headers)
            if resp.is_empty:
                ...
    """

    def __init__(self, base_url: str, auth_key: str,
                 codec: Optional[BigJSONCodec] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 timeout: float = DEFAULT_TIMEOUT_S,
                 clock_ms: Optional[Callable[[], int]] = None):
        """
        Initialize the transport.

        Args:
            base_url: Base URL of the auth server
            auth_key: Base64-encoded API secret used for request signing
            codec: JSON codec for bodies (BigInt-safe default)
            transport: Optional httpx transport (tests use httpx.MockTransport)
            timeout: httpx timeout in seconds
            clock_ms: Epoch-millisecond clock used for the expiration header

        Raises:
            InvalidAuthKeyError: auth_key is not valid base64
        """
        self.base_url = base_url.rstrip("/")
        self.codec = codec or DEFAULT_CODEC
        self.signer = RequestSigner(decode_auth_key(auth_key), codec=self.codec)
        self._clock_ms = clock_ms or _now_ms
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"content-type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "RelayerHttpClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    # ═══════════════════════════════════════════════════════════════════════
    # REQUEST CONSTRUCTION
    # ═══════════════════════════════════════════════════════════════════════

    def build_headers(self, path: str, body: Optional[Union[str, bytes]],
                      headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """
        Build the final header set for a request, signature included.

        Args:
            path: Path relative to the base URL, with query string
            body: Serialized body exactly as it will be sent
            headers: Extra headers from the caller (names are lower-cased)

        Returns:
            New header dict carrying expiration and signature headers
        """
        unsigned = {"content-type": "application/json"}
        for name, value in (headers or {}).items():
            name = name.lower()
            if name in (RENEGADE_AUTH_HEADER, RENEGADE_AUTH_EXPIRATION_HEADER):
                continue
            unsigned[name] = str(value)

        expiry = self._clock_ms() + REQUEST_SIGNATURE_DURATION_MS
        unsigned[RENEGADE_AUTH_EXPIRATION_HEADER] = str(expiry)

        signature = self.signer.sign(path, unsigned, body if body is not None else "")
        return {**unsigned, RENEGADE_AUTH_HEADER: signature}

    def serialize_body(self, body: Any) -> Optional[Union[str, bytes]]:
        """Serialize a body once; the result is both signed and sent. Raw bytes pass through."""
        if body is None:
            return None
        if isinstance(body, str):
            return body
        if isinstance(body, (bytes, bytearray)):
            return bytes(body)
        return self.codec.encode(body)

    # ═══════════════════════════════════════════════════════════════════════
    # SEND
    # ═══════════════════════════════════════════════════════════════════════

    async def send(self, method: str, path: str, body: Any = None,
                   headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        """
        Send a signed request.

        Args:
            method: HTTP method
            path: Path relative to the base URL, with query string
            body: Request body (domain record, dict, or pre-serialized str/bytes)
            headers: Extra headers (x-renegade-* ones are signed)

        Returns:
            HttpResponse, with data None on 204 / empty body

        Raises:
            RelayerHttpError: network failure or non-2xx status
        """
        payload = self.serialize_body(body)
        final_headers = self.build_headers(path, payload, headers)
        content = payload.encode("utf-8") if isinstance(payload, str) else payload

        try:
            response = await self._client.request(
                method, path, content=content, headers=final_headers
            )
        except httpx.HTTPError as e:
            log.error(f"{method} {path} failed: {e}")
            raise RelayerHttpError(f"Request failed: {e}") from e

        log.debug(f"{method} {path} -> {response.status_code}")

        if not response.is_success:
            message = response.text.strip() or response.reason_phrase or "Request failed"
            raise RelayerHttpError(message, response.status_code)

        if response.status_code == 204 or not response.content.strip():
            return HttpResponse(response.status_code, None)

        return HttpResponse(response.status_code, self.codec.decode(response.content))

    async def get(self, path: str, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        """Send a signed GET request."""
        return await self.send("GET", path, headers=headers)

    async def post(self, path: str, body: Any,
                   headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        """Send a signed POST request."""
        return await self.send("POST", path, body=body, headers=headers)
