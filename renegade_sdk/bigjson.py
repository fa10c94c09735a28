"""
Renegade SDK - BigInt JSON

JSON codec that keeps on-chain amounts exact.

Token amounts are 256-bit integers. Python's int is arbitrary precision,
so the codec only has to make sure integers never pass through float on
either side of the wire and that the serialized form is deterministic,
because the request signer hashes the exact string that gets sent.
"""

import json
import logging
from enum import Enum
from typing import Any

log = logging.getLogger(__name__)


class BigJSONDecodeError(ValueError):
    """Response body is not valid JSON (strict mode only)."""
    def __init__(self, message: str, raw: str):
        self.raw = raw
        super().__init__(message)


def _to_wire(value: Any) -> Any:
    """Reduce domain records and enums to plain JSON values."""
    if hasattr(value, "to_dict"):
        return _to_wire(value.to_dict())
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): _to_wire(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_wire(v) for v in value]
    return value


class BigJSONCodec:
    """
    Deterministic JSON codec for request and response bodies.

    Integers are emitted as bare literals of any width and decoded back to
    Python ints. Floats never stand in for integers.

    Usage:
        codec = BigJSONCodec()
        body = codec.encode({"amount": 2**200})
        assert codec.decode(body)["amount"] == 2**200
    """

    def __init__(self, strict: bool = False):
        """
        Args:
            strict: Raise BigJSONDecodeError on malformed input instead of
                returning the raw text.
        """
        self.strict = strict

    def encode(self, value: Any) -> str:
        """Serialize value to compact JSON."""
        return json.dumps(
            _to_wire(value),
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )

    def decode(self, text: Any) -> Any:
        """
        Parse JSON text.

        Args:
            text: JSON document as str or bytes

        Returns:
            The parsed value. In lenient mode a malformed document is
            returned unchanged.

        Raises:
            BigJSONDecodeError: malformed input in strict mode
        """
        if isinstance(text, (bytes, bytearray)):
            try:
                text = text.decode("utf-8")
            except UnicodeDecodeError as e:
                return self._malformed(text, e)
        if not isinstance(text, str):
            return text

        try:
            return json.loads(text, parse_int=int)
        except ValueError as e:
            return self._malformed(text, e)

    def _malformed(self, raw: Any, error: Exception) -> Any:
        if self.strict:
            raise BigJSONDecodeError(f"Failed to parse JSON with BigInt: {error}", raw) from error
        log.warning(f"Failed to parse JSON with BigInt: {error}")
        return raw


DEFAULT_CODEC = BigJSONCodec()


def parse_big_json(text: Any) -> Any:
    """Parse JSON that may contain integers wider than a double."""
    return DEFAULT_CODEC.decode(text)


def stringify_big_json(value: Any) -> str:
    """Serialize value, keeping large integers exact."""
    return DEFAULT_CODEC.encode(value)
