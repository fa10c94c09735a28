"""
Shared fixtures for the SDK test suite.
"""

import base64
import json

import httpx
import pytest
import pytest_asyncio

from renegade_sdk import ExternalMatchClient
from renegade_sdk.http_client import RelayerHttpClient

BASE_URL = "https://test.auth-server.renegade.fi"
API_KEY = "test-api-key"
AUTH_KEY = bytes(range(32))
API_SECRET = base64.b64encode(AUTH_KEY).decode()

USDC = "0xdf8d259c04020562717557f2b5a3cf28e92707d1"
WETH = "0xc3414a7ef14aaaa9c4522dfc00a4e66e74e9c25a"

# Wider than a double can represent exactly
HUGE = 2**200 + 12345


class RecordingServer:
    """Mock auth server: returns queued responses and records requests."""

    def __init__(self):
        self.requests = []
        self.responses = []

    def respond(self, status: int, body=None, raw: bytes = None):
        if raw is None:
            raw = b"" if body is None else json.dumps(body).encode()
        self.responses.append(httpx.Response(status, content=raw))

    def fail_with(self, exc: Exception):
        self.responses.append(exc)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def quote_payload(quote_amount=20_000_000, base_amount=HUGE, with_sponsorship=False):
    signed_quote = {
        "quote": {
            "order": {
                "quote_mint": USDC,
                "base_mint": WETH,
                "side": "Buy",
                "base_amount": 0,
                "quote_amount": quote_amount,
                "exact_base_output": 0,
                "exact_quote_output": 0,
                "min_fill_size": 0,
            },
            "match_result": {
                "quote_mint": USDC,
                "base_mint": WETH,
                "quote_amount": quote_amount,
                "base_amount": base_amount,
                "direction": "Buy",
            },
            "fees": {"relayer_fee": 1000, "protocol_fee": 500},
            "send": {"mint": USDC, "amount": quote_amount},
            "receive": {"mint": WETH, "amount": base_amount - 1500},
            "price": {"price": "0.000000000291", "timestamp": 1717000000000},
            "timestamp": 1717000000123,
        },
        "signature": "c2lnbmF0dXJl",
    }
    payload = {"signed_quote": signed_quote}
    if with_sponsorship:
        payload["gas_sponsorship_info"] = {
            "gas_sponsorship_info": {
                "refund_amount": 123456789012345678901,
                "refund_native_eth": False,
                "refund_address": "0x000000000000000000000000000000000000dEaD",
            },
            "signature": "c3BvbnNvcg",
        }
    return payload


def match_payload(base_amount=HUGE):
    return {
        "match_bundle": {
            "match_result": {
                "quote_mint": USDC,
                "base_mint": WETH,
                "quote_amount": 20_000_000,
                "base_amount": base_amount,
                "direction": "Buy",
            },
            "fees": {"relayer_fee": 1000, "protocol_fee": 500},
            "receive": {"mint": WETH, "amount": base_amount - 1500},
            "send": {"mint": USDC, "amount": 20_000_000},
            "settlement_tx": {
                "tx_type": "eip1559",
                "to": "0x44f16eD65a5D6F6A4C9fC2B6bA4e7B4E3e5D1a2B",
                "data": "0xdeadbeef",
                "value": "0x0",
            },
        },
        "gas_sponsored": False,
    }


@pytest.fixture
def server():
    return RecordingServer()


@pytest.fixture
def fixed_clock():
    return lambda: 1_700_000_000_000


@pytest_asyncio.fixture
async def http(server, fixed_clock):
    client = RelayerHttpClient(
        BASE_URL, API_SECRET,
        transport=httpx.MockTransport(server.handler),
        clock_ms=fixed_clock,
    )
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def client(server):
    match_client = ExternalMatchClient(
        API_KEY, API_SECRET, BASE_URL,
        transport=httpx.MockTransport(server.handler),
    )
    yield match_client
    await match_client.aclose()
