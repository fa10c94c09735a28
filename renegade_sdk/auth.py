"""
Renegade SDK - Request Authentication

HMAC-SHA256 request signing for the Renegade auth server.

Signed message (fed to the MAC in order):
    1. request path including query string
    2. every x-renegade-* header except x-renegade-auth, sorted by name,
       as name bytes followed by value bytes
    3. request body exactly as transmitted ("" when there is none)

The signature is the base64 MAC digest with the trailing '=' removed.
"""

import base64
import binascii
import hashlib
import hmac
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .bigjson import BigJSONCodec, DEFAULT_CODEC

# ═══════════════════════════════════════════════════════════════════════════════
# HEADERS
# ═══════════════════════════════════════════════════════════════════════════════

RENEGADE_HEADER_PREFIX = "x-renegade"
RENEGADE_AUTH_HEADER = "x-renegade-auth"
RENEGADE_AUTH_EXPIRATION_HEADER = "x-renegade-auth-expiration"
RENEGADE_API_KEY_HEADER = "x-renegade-api-key"
RENEGADE_SDK_VERSION_HEADER = "x-renegade-sdk-version"

# Signatures are valid for 10 seconds
REQUEST_SIGNATURE_DURATION_MS = 10 * 1000


class InvalidAuthKeyError(ValueError):
    """API secret is not valid base64."""
    pass


def decode_auth_key(secret: str) -> bytes:
    """
    Decode the base64 API secret into raw MAC key bytes.

    Raises:
        InvalidAuthKeyError: secret is empty or not base64
    """
    if not secret:
        raise InvalidAuthKeyError("API secret is empty")
    try:
        key = base64.b64decode(secret, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidAuthKeyError(f"API secret is not valid base64: {e}") from e
    if not key:
        raise InvalidAuthKeyError("API secret decodes to an empty key")
    return key


def encode_signature(digest: bytes) -> str:
    """Base64 encode a MAC digest without padding."""
    return base64.b64encode(digest).decode("ascii").rstrip("=")


def mask_secret(secret: str, visible_prefix: int = 4, visible_suffix: int = 4) -> str:
    """Mask a secret for safe logging. NEVER log full keys."""
    if not secret or len(secret) <= visible_prefix + visible_suffix:
        return "***"
    return f"{secret[:visible_prefix]}...{secret[-visible_suffix:]}"


def filter_signed_headers(headers: Mapping[str, Any]) -> List[Tuple[str, str]]:
    """
    Select the headers covered by the signature.

    Returns:
        (name, value) pairs in signing order
    """
    selected = [
        (name, str(value))
        for name, value in headers.items()
        if name.lower().startswith(RENEGADE_HEADER_PREFIX)
        and name.lower() != RENEGADE_AUTH_HEADER
    ]
    return sorted(selected, key=lambda item: item[0])


class RequestSigner:
    """
    Computes x-renegade-auth signatures.

    The key is decoded once and never mutated, so a single signer can be
    shared by concurrent requests.

    Usage:
        signer = RequestSigner.from_secret(api_secret)
        sig = signer.sign("/v0/matching-engine/quote?disable_gas_sponsorship=false",
                          headers, body)
    """

    def __init__(self, auth_key: bytes, codec: Optional[BigJSONCodec] = None):
        if not auth_key:
            raise InvalidAuthKeyError("Auth key must not be empty")
        self._key = bytes(auth_key)
        self.codec = codec or DEFAULT_CODEC

    @classmethod
    def from_secret(cls, secret: str, codec: Optional[BigJSONCodec] = None) -> "RequestSigner":
        """Build a signer from a base64 API secret."""
        return cls(decode_auth_key(secret), codec=codec)

    def _body_bytes(self, body: Any) -> bytes:
        if body is None:
            return b""
        if isinstance(body, (bytes, bytearray)):
            return bytes(body)
        if isinstance(body, str):
            return body.encode("utf-8")
        # Objects must go through the wire codec, not a generic dump
        return self.codec.encode(body).encode("utf-8")

    def sign(self, path: str, headers: Mapping[str, Any], body: Any = None) -> str:
        """
        Sign a request.

        Args:
            path: Path relative to the base URL, including the query string
            headers: Final header set of the request (any auth header is ignored)
            body: Serialized body as sent, or None

        Returns:
            Base64 signature without padding
        """
        mac = hmac.new(self._key, digestmod=hashlib.sha256)
        mac.update(path.encode("utf-8"))

        for name, value in filter_signed_headers(headers):
            mac.update(name.encode("utf-8"))
            mac.update(value.encode("utf-8"))

        mac.update(self._body_bytes(body))
        return encode_signature(mac.digest())

    def verify(self, path: str, headers: Mapping[str, Any], body: Any = None) -> bool:
        """Check the x-renegade-auth header of a request against its content."""
        lowered: Dict[str, Any] = {k.lower(): v for k, v in headers.items()}
        provided = lowered.get(RENEGADE_AUTH_HEADER)
        if provided is None:
            return False
        expected = self.sign(path, headers, body)
        return hmac.compare_digest(expected, str(provided))
