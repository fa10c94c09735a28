"""
Renegade SDK - Malleable Matches

A malleable match fixes the price but lets the caller pick the base
amount at settlement time, anywhere within [min_base_amount, max_base_amount].

Choosing a base amount rewrites the settlement calldata in place: the
base amount is the first argument of the settlement call, a 32-byte
big-endian word right after the 4-byte selector.
"""

import logging
from dataclasses import replace
from decimal import Decimal, localcontext
from typing import Optional, Tuple

from .match_types import (
    GasSponsorshipInfo,
    MalleableAtomicMatchApiBundle,
    OrderSide,
    SettlementTransaction,
)

log = logging.getLogger(__name__)

# Calldata offset of the base amount word (after the function selector)
BASE_AMOUNT_OFFSET = 4
WORD_SIZE = 32

# Sentinel mint used for native ETH
NATIVE_ETH_ADDRESS = "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"

# Enough digits for 256-bit amounts times an 18-decimal price
_DECIMAL_PRECISION = 120


class MalleableMatchError(ValueError):
    """Invalid base amount or settlement calldata."""
    pass


def _mul_floor(amount: int, factor: Decimal) -> int:
    with localcontext() as ctx:
        ctx.prec = _DECIMAL_PRECISION
        return int(Decimal(amount) * factor)


def set_calldata_word(calldata: str, offset: int, value: int) -> str:
    """
    Overwrite a 32-byte word of hex calldata.

    Args:
        calldata: 0x-prefixed hex calldata
        offset: Byte offset of the word
        value: Unsigned value to write (big-endian)

    Returns:
        New 0x-prefixed calldata
    """
    if value < 0 or value >= 1 << (8 * WORD_SIZE):
        raise MalleableMatchError(f"Value {value} does not fit in a uint256")
    raw = calldata[2:] if calldata.lower().startswith("0x") else calldata
    try:
        data = bytearray(bytes.fromhex(raw))
    except ValueError as e:
        raise MalleableMatchError(f"Settlement calldata is not hex: {e}") from e
    if len(data) < offset + WORD_SIZE:
        raise MalleableMatchError(
            f"Settlement calldata too short ({len(data)} bytes) for word at offset {offset}"
        )
    data[offset:offset + WORD_SIZE] = value.to_bytes(WORD_SIZE, "big")
    return "0x" + data.hex()


class MalleableExternalMatchResponse:
    """
    Assembled malleable match.

    Usage:
        bundle = await client.assemble_malleable_quote(quote)
        lo, hi = bundle.base_bounds()
        recv = bundle.set_base_amount(hi)
        tx = bundle.match_bundle.settlement_tx
    """

    def __init__(self, match_bundle: MalleableAtomicMatchApiBundle,
                 gas_sponsored: bool = False,
                 gas_sponsorship_info: Optional[GasSponsorshipInfo] = None,
                 base_amount: Optional[int] = None):
        self.match_bundle = match_bundle
        self.gas_sponsored = gas_sponsored
        self.gas_sponsorship_info = gas_sponsorship_info
        self.base_amount = base_amount

    @classmethod
    def from_dict(cls, data: dict) -> "MalleableExternalMatchResponse":
        info = data.get("gas_sponsorship_info")
        return cls(
            match_bundle=MalleableAtomicMatchApiBundle.from_dict(data["match_bundle"]),
            gas_sponsored=bool(data.get("gas_sponsored", False)),
            gas_sponsorship_info=GasSponsorshipInfo.from_dict(info) if info else None,
        )

    # ═══════════════════════════════════════════════════════════════════════
    # AMOUNTS
    # ═══════════════════════════════════════════════════════════════════════

    @property
    def direction(self) -> OrderSide:
        return self.match_bundle.match_result.direction

    def base_bounds(self) -> Tuple[int, int]:
        """(min_base_amount, max_base_amount), inclusive."""
        result = self.match_bundle.match_result
        return result.min_base_amount, result.max_base_amount

    def quote_amount_at_base(self, base_amount: int) -> int:
        """Quote amount implied by the match price, rounded down."""
        return _mul_floor(base_amount, Decimal(self.match_bundle.match_result.price))

    def send_amount_at_base(self, base_amount: int) -> int:
        """Amount the caller sends if the match settles at base_amount."""
        if self.direction == OrderSide.BUY:
            return self.quote_amount_at_base(base_amount)
        return base_amount

    def receive_amount_at_base(self, base_amount: int) -> int:
        """Amount the caller receives at base_amount, net of fees."""
        if self.direction == OrderSide.BUY:
            pre_fee = base_amount
        else:
            pre_fee = self.quote_amount_at_base(base_amount)
        fee = _mul_floor(pre_fee, self.match_bundle.fee_rates.total())
        return pre_fee - fee

    def send_amount(self) -> int:
        """Send amount at the chosen base amount (max bound if none chosen)."""
        return self.send_amount_at_base(self._current_base())

    def receive_amount(self) -> int:
        """Receive amount at the chosen base amount (max bound if none chosen)."""
        return self.receive_amount_at_base(self._current_base())

    def _current_base(self) -> int:
        if self.base_amount is not None:
            return self.base_amount
        return self.base_bounds()[1]

    # ═══════════════════════════════════════════════════════════════════════
    # SETTLEMENT
    # ═══════════════════════════════════════════════════════════════════════

    def is_native_eth_sell(self) -> bool:
        result = self.match_bundle.match_result
        return (self.direction == OrderSide.SELL
                and result.base_mint.lower() == NATIVE_ETH_ADDRESS)

    def set_base_amount(self, base_amount: int) -> int:
        """
        Choose the base amount to settle at.

        Rewrites the settlement calldata (and the tx value for native ETH
        sells) to carry the new amount.

        Returns:
            The receive amount at the new base amount

        Raises:
            MalleableMatchError: amount outside base_bounds()
        """
        low, high = self.base_bounds()
        if not low <= base_amount <= high:
            raise MalleableMatchError(
                f"Base amount {base_amount} outside bounds [{low}, {high}]"
            )

        tx = self.match_bundle.settlement_tx
        new_tx = replace(tx, data=set_calldata_word(tx.data, BASE_AMOUNT_OFFSET, base_amount))
        if self.is_native_eth_sell():
            new_tx = replace(new_tx, value=hex(base_amount))

        self.match_bundle = replace(self.match_bundle, settlement_tx=new_tx)
        self.base_amount = base_amount
        log.debug(f"Malleable match base amount set to {base_amount}")
        return self.receive_amount_at_base(base_amount)

    @property
    def settlement_tx(self) -> SettlementTransaction:
        return self.match_bundle.settlement_tx
