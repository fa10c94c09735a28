"""
Tests for the authenticated HTTP transport.
"""

import httpx
import pytest

from renegade_sdk.auth import (
    RENEGADE_AUTH_EXPIRATION_HEADER,
    RENEGADE_AUTH_HEADER,
    RequestSigner,
)
from renegade_sdk.http_client import RelayerHttpClient, RelayerHttpError
from renegade_sdk.auth import InvalidAuthKeyError

from conftest import API_SECRET, AUTH_KEY, BASE_URL, HUGE

PATH = "/v0/matching-engine/quote?disable_gas_sponsorship=false"


def wire_path(request: httpx.Request) -> str:
    return request.url.raw_path.decode()


class TestSigning:

    @pytest.mark.asyncio
    async def test_expiration_is_now_plus_window(self, http, server):
        server.respond(204)
        await http.post(PATH, {"a": 1})
        assert server.last.headers[RENEGADE_AUTH_EXPIRATION_HEADER] == "1700000010000"

    @pytest.mark.asyncio
    async def test_signature_covers_bytes_on_the_wire(self, http, server):
        server.respond(204)
        await http.post(PATH, {"amount": HUGE}, {"x-renegade-api-key": "key"})

        request = server.last
        body = request.content.decode()
        assert str(HUGE) in body

        verifier = RequestSigner(AUTH_KEY)
        assert verifier.verify(wire_path(request), dict(request.headers), body)

    @pytest.mark.asyncio
    async def test_exactly_one_signature_and_expiry(self, http, server):
        server.respond(204)
        await http.post(PATH, {}, {RENEGADE_AUTH_HEADER: "stale", "x-renegade-api-key": "key"})
        headers = server.last.headers
        assert len(headers.get_list(RENEGADE_AUTH_HEADER)) == 1
        assert len(headers.get_list(RENEGADE_AUTH_EXPIRATION_HEADER)) == 1
        assert headers[RENEGADE_AUTH_HEADER] != "stale"

    @pytest.mark.asyncio
    async def test_mixed_case_expiry_is_replaced(self, http, server):
        server.respond(204)
        await http.post(PATH, {}, {"X-Renegade-Auth-Expiration": "1", "X-Renegade-Api-Key": "key"})
        request = server.last
        assert request.headers.get_list(RENEGADE_AUTH_EXPIRATION_HEADER) == ["1700000010000"]
        assert RequestSigner(AUTH_KEY).verify(wire_path(request), dict(request.headers),
                                              request.content)

    def test_caller_header_names_lower_cased(self, fixed_clock):
        http = RelayerHttpClient(BASE_URL, API_SECRET, clock_ms=fixed_clock)
        built = http.build_headers(PATH, "{}", {"X-Renegade-Api-Key": "key"})
        assert built["x-renegade-api-key"] == "key"
        assert "X-Renegade-Api-Key" not in built

    @pytest.mark.asyncio
    async def test_raw_bytes_body_sent_unchanged(self, http, server):
        server.respond(204)
        raw = b"\xff\xfe{}"
        await http.post(PATH, raw, {"x-renegade-api-key": "key"})
        request = server.last
        assert request.content == raw
        assert RequestSigner(AUTH_KEY).verify(wire_path(request), dict(request.headers), raw)

    @pytest.mark.asyncio
    async def test_get_signs_empty_body(self, http, server):
        server.respond(200, {"tokens": []})
        await http.get("/v0/supported-tokens", {"x-renegade-api-key": "key"})
        request = server.last
        assert request.content == b""
        assert RequestSigner(AUTH_KEY).verify(wire_path(request), dict(request.headers), "")

    def test_invalid_secret_fails_at_construction(self):
        with pytest.raises(InvalidAuthKeyError):
            RelayerHttpClient(BASE_URL, "%%%not-base64%%%")

    def test_build_headers_is_pure(self, fixed_clock):
        http = RelayerHttpClient(BASE_URL, API_SECRET, clock_ms=fixed_clock)
        extra = {"x-renegade-api-key": "key"}
        first = http.build_headers(PATH, "{}", extra)
        second = http.build_headers(PATH, "{}", extra)
        assert first == second
        assert extra == {"x-renegade-api-key": "key"}


class TestResponses:

    @pytest.mark.asyncio
    async def test_decodes_big_integers(self, http, server):
        server.respond(200, raw=b'{"amount": %d}' % HUGE)
        response = await http.post(PATH, {})
        assert response.status == 200
        assert response.data == {"amount": HUGE}

    @pytest.mark.asyncio
    async def test_no_content_is_empty(self, http, server):
        server.respond(204)
        response = await http.post(PATH, {})
        assert response.status == 204
        assert response.is_empty

    @pytest.mark.asyncio
    async def test_blank_body_is_empty(self, http, server):
        server.respond(200, raw=b"  ")
        response = await http.post(PATH, {})
        assert response.is_empty

    @pytest.mark.asyncio
    async def test_malformed_body_passes_through(self, http, server):
        server.respond(200, raw=b"<html>oops</html>")
        response = await http.post(PATH, {})
        assert response.data == "<html>oops</html>"

    @pytest.mark.asyncio
    async def test_server_error_carries_status(self, http, server):
        server.respond(500, raw=b"internal error")
        with pytest.raises(RelayerHttpError) as exc:
            await http.post(PATH, {})
        assert exc.value.status_code == 500
        assert exc.value.message == "internal error"

    @pytest.mark.asyncio
    async def test_unauthorized(self, http, server):
        server.respond(401, raw=b"")
        with pytest.raises(RelayerHttpError) as exc:
            await http.post(PATH, {})
        assert exc.value.status_code == 401

    @pytest.mark.asyncio
    async def test_network_error_has_no_status(self, http, server):
        server.fail_with(httpx.ConnectError("connection refused"))
        with pytest.raises(RelayerHttpError) as exc:
            await http.post(PATH, {})
        assert exc.value.status_code is None
        assert "connection refused" in str(exc.value)
