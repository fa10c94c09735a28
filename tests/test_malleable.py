"""
Tests for malleable match bundles.
"""

import json

import pytest

from renegade_sdk import ExternalOrder, OrderSide
from renegade_sdk.malleable import (
    BASE_AMOUNT_OFFSET,
    MalleableExternalMatchResponse,
    MalleableMatchError,
    set_calldata_word,
)

from conftest import USDC, WETH, quote_payload

NATIVE_ETH = "0xEeeeeEeeeEeEeEeEeEeeEEEeeeeEeeeeeeeEEeE"
SELECTOR = "aabbccdd"
CALLDATA = "0x" + SELECTOR + "00" * 32 + "ff" * 32


def malleable_payload(direction="Buy", base_mint=WETH, price="0.5",
                      min_base=100, max_base=10**6):
    return {
        "match_bundle": {
            "match_result": {
                "quote_mint": USDC,
                "base_mint": base_mint,
                "price": price,
                "min_base_amount": min_base,
                "max_base_amount": max_base,
                "direction": direction,
            },
            "fee_rates": {"relayer_fee_rate": "0.001", "protocol_fee_rate": "0.0002"},
            "max_receive": {"mint": base_mint, "amount": max_base},
            "min_receive": {"mint": base_mint, "amount": min_base},
            "max_send": {"mint": USDC, "amount": max_base // 2},
            "min_send": {"mint": USDC, "amount": min_base // 2},
            "settlement_tx": {
                "tx_type": "eip1559",
                "to": "0x44f16ed65a5d6f6a4c9fc2b6ba4e7b4e3e5d1a2b",
                "data": CALLDATA,
                "value": "0x0",
            },
        },
        "gas_sponsored": False,
    }


def bundle(**kwargs) -> MalleableExternalMatchResponse:
    return MalleableExternalMatchResponse.from_dict(malleable_payload(**kwargs))


class TestAmounts:

    def test_bounds(self):
        assert bundle().base_bounds() == (100, 10**6)

    def test_buy_amounts(self):
        b = bundle(direction="Buy")
        assert b.send_amount_at_base(10**6) == 500_000
        # 0.12% total fee on the base received
        assert b.receive_amount_at_base(10**6) == 10**6 - 1200

    def test_sell_amounts(self):
        b = bundle(direction="Sell")
        assert b.send_amount_at_base(10**6) == 10**6
        assert b.receive_amount_at_base(10**6) == 500_000 - 600

    def test_quote_rounds_down(self):
        b = bundle(price="0.333")
        assert b.quote_amount_at_base(10) == 3

    def test_huge_amounts_exact(self):
        base = 2**200
        b = bundle(direction="Buy", max_base=2**201)
        assert b.quote_amount_at_base(base) == 2**199
        assert b.receive_amount_at_base(base) == base - (base * 12) // 10000

    def test_defaults_to_max_base(self):
        b = bundle(direction="Buy")
        assert b.send_amount() == b.send_amount_at_base(10**6)
        assert b.receive_amount() == b.receive_amount_at_base(10**6)


class TestSetBaseAmount:

    def test_rewrites_calldata(self):
        b = bundle()
        recv = b.set_base_amount(500)
        data = bytes.fromhex(b.settlement_tx.data[2:])
        assert data[:BASE_AMOUNT_OFFSET].hex() == SELECTOR
        assert int.from_bytes(data[4:36], "big") == 500
        assert data[36:] == b"\xff" * 32
        assert recv == b.receive_amount_at_base(500)
        assert b.send_amount() == 250

    def test_out_of_bounds(self):
        b = bundle()
        with pytest.raises(MalleableMatchError):
            b.set_base_amount(99)
        with pytest.raises(MalleableMatchError):
            b.set_base_amount(10**6 + 1)
        assert b.settlement_tx.data == CALLDATA

    def test_native_eth_sell_sets_value(self):
        b = bundle(direction="Sell", base_mint=NATIVE_ETH)
        assert b.is_native_eth_sell()
        b.set_base_amount(12345)
        assert b.settlement_tx.value_wei() == 12345

    def test_buy_leaves_value(self):
        b = bundle(direction="Buy", base_mint=NATIVE_ETH)
        b.set_base_amount(12345)
        assert b.settlement_tx.value_wei() == 0

    def test_short_calldata(self):
        with pytest.raises(MalleableMatchError):
            set_calldata_word("0xaabbccdd", BASE_AMOUNT_OFFSET, 1)


class TestAssembleMalleable:

    @pytest.mark.asyncio
    async def test_assemble(self, client, server):
        server.respond(200, quote_payload())
        quote = await client.request_quote(
            ExternalOrder(quote_mint=USDC, base_mint=WETH, side=OrderSide.BUY, quote_amount=10)
        )

        server.respond(200, malleable_payload())
        result = await client.assemble_malleable_quote(quote)

        assert server.last.url.path == "/v0/matching-engine/assemble-malleable-external-match"
        assert "signed_quote" in json.loads(server.last.content)
        assert result.base_bounds() == (100, 10**6)

    @pytest.mark.asyncio
    async def test_no_content(self, client, server):
        server.respond(200, quote_payload())
        quote = await client.request_quote(
            ExternalOrder(quote_mint=USDC, base_mint=WETH, side=OrderSide.BUY, quote_amount=10)
        )
        server.respond(204)
        assert await client.assemble_malleable_quote(quote) is None
