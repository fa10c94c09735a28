"""
Renegade SDK - Data Types

Value records for the external match API.

All amounts, fees and timestamps are Python ints: they are 256-bit
on-chain quantities and must never be rounded through float. Prices and
fee rates travel as decimal strings.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional


class OrderSide(Enum):
    """Order side from the external party's point of view."""
    BUY = "Buy"
    SELL = "Sell"


def _opt_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# ═══════════════════════════════════════════════════════════════════════════════
# ORDERS
# ═══════════════════════════════════════════════════════════════════════════════

SIZING_FIELDS = ("base_amount", "quote_amount", "exact_base_output", "exact_quote_output")


@dataclass(frozen=True)
class ExternalOrder:
    """
    External order - what the caller wants to trade.

    Exactly one sizing field should be set:
      - base_amount / quote_amount: size of the input side
      - exact_base_output / exact_quote_output: exact size of the output side
    min_fill_size optionally bounds partial fills.
    """
    quote_mint: str
    base_mint: str
    side: OrderSide
    base_amount: Optional[int] = None
    quote_amount: Optional[int] = None
    exact_base_output: Optional[int] = None
    exact_quote_output: Optional[int] = None
    min_fill_size: Optional[int] = None

    def validate(self) -> None:
        """
        Check the order before sending it.

        Raises:
            ValueError: missing mints, or not exactly one positive sizing field
        """
        if not self.quote_mint or not self.base_mint:
            raise ValueError("Order must specify both quote_mint and base_mint")
        sizes = {name: getattr(self, name) for name in SIZING_FIELDS}
        set_sizes = [name for name, value in sizes.items() if value]
        if len(set_sizes) != 1:
            raise ValueError(
                f"Order must set exactly one of {', '.join(SIZING_FIELDS)} "
                f"(got {set_sizes or 'none'})"
            )
        if sizes[set_sizes[0]] < 0:
            raise ValueError(f"{set_sizes[0]} must be positive")
        if self.min_fill_size is not None and self.min_fill_size < 0:
            raise ValueError("min_fill_size must not be negative")

    def to_dict(self) -> dict:
        return _drop_none({
            "quote_mint": self.quote_mint,
            "base_mint": self.base_mint,
            "side": self.side.value,
            "base_amount": self.base_amount,
            "quote_amount": self.quote_amount,
            "exact_base_output": self.exact_base_output,
            "exact_quote_output": self.exact_quote_output,
            "min_fill_size": self.min_fill_size,
        })

    @classmethod
    def from_dict(cls, data: dict) -> "ExternalOrder":
        return cls(
            quote_mint=data["quote_mint"],
            base_mint=data["base_mint"],
            side=OrderSide(data["side"]),
            base_amount=_opt_int(data.get("base_amount")),
            quote_amount=_opt_int(data.get("quote_amount")),
            exact_base_output=_opt_int(data.get("exact_base_output")),
            exact_quote_output=_opt_int(data.get("exact_quote_output")),
            min_fill_size=_opt_int(data.get("min_fill_size")),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# QUOTE COMPONENTS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ApiExternalAssetTransfer:
    """A token movement: mint and amount."""
    mint: str
    amount: int

    def to_dict(self) -> dict:
        return {"mint": self.mint, "amount": self.amount}

    @classmethod
    def from_dict(cls, data: dict) -> "ApiExternalAssetTransfer":
        return cls(mint=data["mint"], amount=int(data["amount"]))


@dataclass(frozen=True)
class ApiTimestampedPrice:
    price: str
    timestamp: int

    def to_dict(self) -> dict:
        return {"price": self.price, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: dict) -> "ApiTimestampedPrice":
        return cls(price=str(data["price"]), timestamp=int(data["timestamp"]))


@dataclass(frozen=True)
class ApiExternalMatchResult:
    quote_mint: str
    base_mint: str
    quote_amount: int
    base_amount: int
    direction: OrderSide

    def to_dict(self) -> dict:
        return {
            "quote_mint": self.quote_mint,
            "base_mint": self.base_mint,
            "quote_amount": self.quote_amount,
            "base_amount": self.base_amount,
            "direction": self.direction.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ApiExternalMatchResult":
        return cls(
            quote_mint=data["quote_mint"],
            base_mint=data["base_mint"],
            quote_amount=int(data["quote_amount"]),
            base_amount=int(data["base_amount"]),
            direction=OrderSide(data["direction"]),
        )


@dataclass(frozen=True)
class FeeTake:
    relayer_fee: int
    protocol_fee: int

    def total(self) -> int:
        return self.relayer_fee + self.protocol_fee

    def to_dict(self) -> dict:
        return {"relayer_fee": self.relayer_fee, "protocol_fee": self.protocol_fee}

    @classmethod
    def from_dict(cls, data: dict) -> "FeeTake":
        return cls(relayer_fee=int(data["relayer_fee"]), protocol_fee=int(data["protocol_fee"]))


@dataclass(frozen=True)
class ApiExternalQuote:
    """
    Quote issued by the auth server.

    Structure:
      - order: the order as the server understood it
      - match_result: resolved mints, amounts and direction
      - fees: relayer and protocol fee take
      - send / receive: transfers from the caller's point of view
      - price: price used for the match
      - timestamp: quote creation time (ms)
    """
    order: ExternalOrder
    match_result: ApiExternalMatchResult
    fees: FeeTake
    send: ApiExternalAssetTransfer
    receive: ApiExternalAssetTransfer
    price: ApiTimestampedPrice
    timestamp: int

    def to_dict(self) -> dict:
        return {
            "order": self.order.to_dict(),
            "match_result": self.match_result.to_dict(),
            "fees": self.fees.to_dict(),
            "send": self.send.to_dict(),
            "receive": self.receive.to_dict(),
            "price": self.price.to_dict(),
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ApiExternalQuote":
        return cls(
            order=ExternalOrder.from_dict(data["order"]),
            match_result=ApiExternalMatchResult.from_dict(data["match_result"]),
            fees=FeeTake.from_dict(data["fees"]),
            send=ApiExternalAssetTransfer.from_dict(data["send"]),
            receive=ApiExternalAssetTransfer.from_dict(data["receive"]),
            price=ApiTimestampedPrice.from_dict(data["price"]),
            timestamp=int(data["timestamp"]),
        )


@dataclass(frozen=True)
class ApiSignedExternalQuote:
    """Quote plus the server signature that makes it assemblable."""
    quote: ApiExternalQuote
    signature: str

    def to_dict(self) -> dict:
        return {"quote": self.quote.to_dict(), "signature": self.signature}

    @classmethod
    def from_dict(cls, data: dict) -> "ApiSignedExternalQuote":
        return cls(quote=ApiExternalQuote.from_dict(data["quote"]), signature=data["signature"])


# ═══════════════════════════════════════════════════════════════════════════════
# GAS SPONSORSHIP
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class GasSponsorshipInfo:
    refund_amount: int
    refund_native_eth: bool
    refund_address: Optional[str] = None

    def to_dict(self) -> dict:
        return _drop_none({
            "refund_amount": self.refund_amount,
            "refund_native_eth": self.refund_native_eth,
            "refund_address": self.refund_address,
        })

    @classmethod
    def from_dict(cls, data: dict) -> "GasSponsorshipInfo":
        return cls(
            refund_amount=int(data["refund_amount"]),
            refund_native_eth=bool(data["refund_native_eth"]),
            refund_address=data.get("refund_address"),
        )


@dataclass(frozen=True)
class SignedGasSponsorshipInfo:
    gas_sponsorship_info: GasSponsorshipInfo
    signature: str

    def to_dict(self) -> dict:
        return {
            "gas_sponsorship_info": self.gas_sponsorship_info.to_dict(),
            "signature": self.signature,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SignedGasSponsorshipInfo":
        return cls(
            gas_sponsorship_info=GasSponsorshipInfo.from_dict(data["gas_sponsorship_info"]),
            signature=data["signature"],
        )


@dataclass(frozen=True)
class SignedExternalQuote:
    """Signed quote as handed to callers, with any gas sponsorship attached."""
    quote: ApiExternalQuote
    signature: str
    gas_sponsorship_info: Optional[SignedGasSponsorshipInfo] = None

    def to_api_signed_quote(self) -> ApiSignedExternalQuote:
        """Strip gas sponsorship metadata; the assemble endpoint expects the bare quote."""
        return ApiSignedExternalQuote(quote=self.quote, signature=self.signature)

    def to_dict(self) -> dict:
        return _drop_none({
            "quote": self.quote.to_dict(),
            "signature": self.signature,
            "gas_sponsorship_info": (self.gas_sponsorship_info.to_dict()
                                     if self.gas_sponsorship_info else None),
        })


# ═══════════════════════════════════════════════════════════════════════════════
# MATCH BUNDLES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SettlementTransaction:
    """Transaction that settles the match on-chain."""
    tx_type: str
    to: str
    data: str
    value: str = "0x0"

    def value_wei(self) -> int:
        """Transaction value as an int (accepts hex or decimal strings)."""
        if not self.value:
            return 0
        text = str(self.value)
        return int(text, 16) if text.lower().startswith("0x") else int(text)

    def to_dict(self) -> dict:
        return {"tx_type": self.tx_type, "to": self.to, "data": self.data, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict) -> "SettlementTransaction":
        value = data.get("value")
        return cls(
            tx_type=str(data.get("tx_type", data.get("type", ""))),
            to=data["to"],
            data=data.get("data", data.get("input", "0x")),
            value="0x0" if value is None else str(value),
        )


@dataclass(frozen=True)
class AtomicMatchApiBundle:
    match_result: ApiExternalMatchResult
    fees: FeeTake
    receive: ApiExternalAssetTransfer
    send: ApiExternalAssetTransfer
    settlement_tx: SettlementTransaction

    def to_dict(self) -> dict:
        return {
            "match_result": self.match_result.to_dict(),
            "fees": self.fees.to_dict(),
            "receive": self.receive.to_dict(),
            "send": self.send.to_dict(),
            "settlement_tx": self.settlement_tx.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AtomicMatchApiBundle":
        return cls(
            match_result=ApiExternalMatchResult.from_dict(data["match_result"]),
            fees=FeeTake.from_dict(data["fees"]),
            receive=ApiExternalAssetTransfer.from_dict(data["receive"]),
            send=ApiExternalAssetTransfer.from_dict(data["send"]),
            settlement_tx=SettlementTransaction.from_dict(data["settlement_tx"]),
        )


@dataclass(frozen=True)
class FeeTakeRate:
    """Fee rates as decimal strings (fraction of the receive amount)."""
    relayer_fee_rate: str
    protocol_fee_rate: str

    def total(self) -> Decimal:
        return Decimal(self.relayer_fee_rate) + Decimal(self.protocol_fee_rate)

    def to_dict(self) -> dict:
        return {"relayer_fee_rate": self.relayer_fee_rate, "protocol_fee_rate": self.protocol_fee_rate}

    @classmethod
    def from_dict(cls, data: dict) -> "FeeTakeRate":
        return cls(
            relayer_fee_rate=str(data["relayer_fee_rate"]),
            protocol_fee_rate=str(data["protocol_fee_rate"]),
        )


@dataclass(frozen=True)
class ApiBoundedMatchResult:
    """Match result whose base amount is chosen at settlement time."""
    quote_mint: str
    base_mint: str
    price: str
    min_base_amount: int
    max_base_amount: int
    direction: OrderSide

    def to_dict(self) -> dict:
        return {
            "quote_mint": self.quote_mint,
            "base_mint": self.base_mint,
            "price": self.price,
            "min_base_amount": self.min_base_amount,
            "max_base_amount": self.max_base_amount,
            "direction": self.direction.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ApiBoundedMatchResult":
        return cls(
            quote_mint=data["quote_mint"],
            base_mint=data["base_mint"],
            price=str(data["price"]),
            min_base_amount=int(data["min_base_amount"]),
            max_base_amount=int(data["max_base_amount"]),
            direction=OrderSide(data["direction"]),
        )


@dataclass(frozen=True)
class MalleableAtomicMatchApiBundle:
    match_result: ApiBoundedMatchResult
    fee_rates: FeeTakeRate
    max_receive: ApiExternalAssetTransfer
    min_receive: ApiExternalAssetTransfer
    max_send: ApiExternalAssetTransfer
    min_send: ApiExternalAssetTransfer
    settlement_tx: SettlementTransaction

    def to_dict(self) -> dict:
        return {
            "match_result": self.match_result.to_dict(),
            "fee_rates": self.fee_rates.to_dict(),
            "max_receive": self.max_receive.to_dict(),
            "min_receive": self.min_receive.to_dict(),
            "max_send": self.max_send.to_dict(),
            "min_send": self.min_send.to_dict(),
            "settlement_tx": self.settlement_tx.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MalleableAtomicMatchApiBundle":
        return cls(
            match_result=ApiBoundedMatchResult.from_dict(data["match_result"]),
            fee_rates=FeeTakeRate.from_dict(data["fee_rates"]),
            max_receive=ApiExternalAssetTransfer.from_dict(data["max_receive"]),
            min_receive=ApiExternalAssetTransfer.from_dict(data["min_receive"]),
            max_send=ApiExternalAssetTransfer.from_dict(data["max_send"]),
            min_send=ApiExternalAssetTransfer.from_dict(data["min_send"]),
            settlement_tx=SettlementTransaction.from_dict(data["settlement_tx"]),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# REQUESTS / RESPONSES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ExternalQuoteRequest:
    external_order: ExternalOrder

    def to_dict(self) -> dict:
        return {"external_order": self.external_order.to_dict()}


@dataclass(frozen=True)
class ExternalQuoteResponse:
    signed_quote: ApiSignedExternalQuote
    gas_sponsorship_info: Optional[SignedGasSponsorshipInfo] = None

    def to_signed_quote(self) -> SignedExternalQuote:
        return SignedExternalQuote(
            quote=self.signed_quote.quote,
            signature=self.signed_quote.signature,
            gas_sponsorship_info=self.gas_sponsorship_info,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "ExternalQuoteResponse":
        info = data.get("gas_sponsorship_info")
        return cls(
            signed_quote=ApiSignedExternalQuote.from_dict(data["signed_quote"]),
            gas_sponsorship_info=SignedGasSponsorshipInfo.from_dict(info) if info else None,
        )


@dataclass(frozen=True)
class AssembleExternalMatchRequest:
    signed_quote: ApiSignedExternalQuote
    do_gas_estimation: bool = False
    allow_shared: bool = False
    receiver_address: Optional[str] = None
    updated_order: Optional[ExternalOrder] = None

    def to_dict(self) -> dict:
        return _drop_none({
            "do_gas_estimation": self.do_gas_estimation,
            "allow_shared": self.allow_shared,
            "receiver_address": self.receiver_address,
            "signed_quote": self.signed_quote.to_dict(),
            "updated_order": self.updated_order.to_dict() if self.updated_order else None,
        })


@dataclass(frozen=True)
class ExternalMatchResponse:
    match_bundle: AtomicMatchApiBundle
    gas_sponsored: bool = False
    gas_sponsorship_info: Optional[GasSponsorshipInfo] = None

    def to_dict(self) -> dict:
        return _drop_none({
            "match_bundle": self.match_bundle.to_dict(),
            "gas_sponsored": self.gas_sponsored,
            "gas_sponsorship_info": (self.gas_sponsorship_info.to_dict()
                                     if self.gas_sponsorship_info else None),
        })

    @classmethod
    def from_dict(cls, data: dict) -> "ExternalMatchResponse":
        info = data.get("gas_sponsorship_info")
        return cls(
            match_bundle=AtomicMatchApiBundle.from_dict(data["match_bundle"]),
            gas_sponsored=bool(data.get("gas_sponsored", False)),
            gas_sponsorship_info=GasSponsorshipInfo.from_dict(info) if info else None,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# MARKET INFO
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TokenInfo:
    address: str
    symbol: str

    @classmethod
    def from_dict(cls, data: dict) -> "TokenInfo":
        return cls(address=data["address"], symbol=data["symbol"])


@dataclass(frozen=True)
class TokenPrice:
    base_token: str
    quote_token: str
    price: float

    @classmethod
    def from_dict(cls, data: dict) -> "TokenPrice":
        return cls(
            base_token=data["base_token"],
            quote_token=data["quote_token"],
            price=float(data["price"]),
        )


@dataclass(frozen=True)
class DepthSide:
    """Aggregate liquidity on one side of the book."""
    total_quantity: int
    total_quantity_usd: float

    @classmethod
    def from_dict(cls, data: dict) -> "DepthSide":
        return cls(
            total_quantity=int(data["total_quantity"]),
            total_quantity_usd=float(data["total_quantity_usd"]),
        )


@dataclass(frozen=True)
class OrderBookDepth:
    price: ApiTimestampedPrice
    buy: DepthSide
    sell: DepthSide

    @classmethod
    def from_dict(cls, data: dict) -> "OrderBookDepth":
        return cls(
            price=ApiTimestampedPrice.from_dict(data["price"]),
            buy=DepthSide.from_dict(data["buy"]),
            sell=DepthSide.from_dict(data["sell"]),
        )


def parse_tokens(data: dict) -> List[TokenInfo]:
    return [TokenInfo.from_dict(t) for t in data.get("tokens", [])]


def parse_token_prices(data: dict) -> List[TokenPrice]:
    return [TokenPrice.from_dict(p) for p in data.get("token_prices", [])]
