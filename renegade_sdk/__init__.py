"""
Renegade External Match SDK

Python client for the Renegade darkpool external matching API.

Architecture:
  - Quotes and match bundles come from the auth server over signed HTTP
  - Requests are signed with HMAC-SHA256 (x-renegade-auth, 10s expiry)
  - Bodies use a BigInt-safe JSON codec so 256-bit amounts stay exact
  - Settlement happens on-chain, submitted by the caller's wallet

Usage:
    from renegade_sdk import ExternalMatchClient, ExternalOrder, OrderSide

    client = ExternalMatchClient.new_arbitrum_sepolia_client(api_key, api_secret)

    order = ExternalOrder(quote_mint=USDC, base_mint=WETH,
                          side=OrderSide.BUY, quote_amount=20_000_000)
    quote = await client.request_quote(order)
    if quote:
        bundle = await client.assemble_quote(quote)
"""

from .auth import RequestSigner, InvalidAuthKeyError
from .bigjson import BigJSONCodec, BigJSONDecodeError, parse_big_json, stringify_big_json
from .client import ExternalMatchClient, ExternalMatchClientError
from .http_client import HttpResponse, RelayerHttpClient, RelayerHttpError
from .malleable import MalleableExternalMatchResponse, MalleableMatchError
from .match_types import (
    OrderSide,
    ExternalOrder,
    ApiExternalAssetTransfer,
    ApiTimestampedPrice,
    ApiExternalMatchResult,
    FeeTake,
    FeeTakeRate,
    ApiExternalQuote,
    ApiSignedExternalQuote,
    ApiBoundedMatchResult,
    GasSponsorshipInfo,
    SignedGasSponsorshipInfo,
    SignedExternalQuote,
    SettlementTransaction,
    AtomicMatchApiBundle,
    MalleableAtomicMatchApiBundle,
    ExternalQuoteRequest,
    ExternalQuoteResponse,
    AssembleExternalMatchRequest,
    ExternalMatchResponse,
    TokenInfo,
    TokenPrice,
    DepthSide,
    OrderBookDepth,
)
from .options import RequestQuoteOptions, AssembleExternalMatchOptions
from .settlement import SettlementError, submit_settlement_tx
from .version import __version__

__all__ = [
    # Client
    "ExternalMatchClient", "ExternalMatchClientError",
    "RequestQuoteOptions", "AssembleExternalMatchOptions",
    # Transport
    "RelayerHttpClient", "RelayerHttpError", "HttpResponse",
    "RequestSigner", "InvalidAuthKeyError",
    "BigJSONCodec", "BigJSONDecodeError", "parse_big_json", "stringify_big_json",
    # Types
    "OrderSide", "ExternalOrder", "ApiExternalAssetTransfer", "ApiTimestampedPrice",
    "ApiExternalMatchResult", "FeeTake", "FeeTakeRate", "ApiExternalQuote",
    "ApiSignedExternalQuote", "ApiBoundedMatchResult", "GasSponsorshipInfo",
    "SignedGasSponsorshipInfo", "SignedExternalQuote", "SettlementTransaction",
    "AtomicMatchApiBundle", "MalleableAtomicMatchApiBundle", "ExternalQuoteRequest",
    "ExternalQuoteResponse", "AssembleExternalMatchRequest", "ExternalMatchResponse",
    "TokenInfo", "TokenPrice", "DepthSide", "OrderBookDepth",
    # Malleable matches
    "MalleableExternalMatchResponse", "MalleableMatchError",
    # Settlement
    "SettlementError", "submit_settlement_tx",
    "__version__",
]
