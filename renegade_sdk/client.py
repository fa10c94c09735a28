"""
Renegade SDK - External Match Client

Client for the Renegade external matching API: request quotes, assemble
them into settlement bundles, and read market info.

Every operation is one signed round trip. A 204 from the server means
"nothing available" and is returned as None; any other failure raises
ExternalMatchClientError carrying the HTTP status when there is one.
No retries are made here.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import httpx

from .auth import RENEGADE_API_KEY_HEADER, RENEGADE_SDK_VERSION_HEADER, mask_secret
from .bigjson import BigJSONCodec
from .http_client import HttpResponse, RelayerHttpClient, RelayerHttpError
from .malleable import MalleableExternalMatchResponse
from .match_types import (
    AssembleExternalMatchRequest,
    ExternalMatchResponse,
    ExternalOrder,
    ExternalQuoteRequest,
    ExternalQuoteResponse,
    OrderBookDepth,
    SignedExternalQuote,
    TokenInfo,
    TokenPrice,
    parse_token_prices,
    parse_tokens,
)
from .options import (
    ASSEMBLE_EXTERNAL_MATCH_ROUTE,
    ASSEMBLE_MALLEABLE_EXTERNAL_MATCH_ROUTE,
    AssembleExternalMatchOptions,
    RequestQuoteOptions,
)
from .version import get_sdk_version

log = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# ENDPOINTS
# ═══════════════════════════════════════════════════════════════════════════════

ARBITRUM_SEPOLIA_BASE_URL = "https://arbitrum-sepolia.auth-server.renegade.fi"
ARBITRUM_ONE_BASE_URL = "https://arbitrum-one.auth-server.renegade.fi"
BASE_SEPOLIA_BASE_URL = "https://base-sepolia.auth-server.renegade.fi"
BASE_MAINNET_BASE_URL = "https://base-mainnet.auth-server.renegade.fi"

# Legacy single-chain deployments
SEPOLIA_BASE_URL = "https://testnet.auth-server.renegade.fi"
MAINNET_BASE_URL = "https://mainnet.auth-server.renegade.fi"

ORDER_BOOK_DEPTH_ROUTE = "/v0/order_book/depth"
SUPPORTED_TOKENS_ROUTE = "/v0/supported-tokens"
TOKEN_PRICES_ROUTE = "/v0/token-prices"

API_KEY_ENV = "EXTERNAL_MATCH_KEY"
API_SECRET_ENV = "EXTERNAL_MATCH_SECRET"


class ExternalMatchClientError(Exception):
    """External match request failed. status_code is None for network errors."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (status {self.status_code})"


class ExternalMatchClient:
    """
    Client for the Renegade external matching API.

    Usage:
        async with ExternalMatchClient.new_arbitrum_sepolia_client(key, secret) as client:
            quote = await client.request_quote(order)
            if quote is None:
                return  # no liquidity right now
            bundle = await client.assemble_quote(quote)
    """

    def __init__(self, api_key: str, api_secret: str, base_url: str,
                 codec: Optional[BigJSONCodec] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 timeout: float = 30.0):
        """
        Initialize the client.

        Args:
            api_key: API key sent in x-renegade-api-key
            api_secret: Base64 API secret used to sign requests
            base_url: Auth server base URL
            codec: JSON codec override
            transport: httpx transport override (testing)
            timeout: HTTP timeout in seconds

        Raises:
            InvalidAuthKeyError: api_secret is not valid base64
        """
        self.api_key = api_key
        self.base_url = base_url
        self.http_client = RelayerHttpClient(
            base_url, api_secret, codec=codec, transport=transport, timeout=timeout
        )
        log.debug(f"External match client for {base_url} (key {mask_secret(api_key)})")

    # ═══════════════════════════════════════════════════════════════════════
    # FACTORIES
    # ═══════════════════════════════════════════════════════════════════════

    @classmethod
    def new_arbitrum_sepolia_client(cls, api_key: str, api_secret: str, **kwargs) -> "ExternalMatchClient":
        return cls(api_key, api_secret, ARBITRUM_SEPOLIA_BASE_URL, **kwargs)

    @classmethod
    def new_arbitrum_one_client(cls, api_key: str, api_secret: str, **kwargs) -> "ExternalMatchClient":
        return cls(api_key, api_secret, ARBITRUM_ONE_BASE_URL, **kwargs)

    @classmethod
    def new_base_sepolia_client(cls, api_key: str, api_secret: str, **kwargs) -> "ExternalMatchClient":
        return cls(api_key, api_secret, BASE_SEPOLIA_BASE_URL, **kwargs)

    @classmethod
    def new_base_mainnet_client(cls, api_key: str, api_secret: str, **kwargs) -> "ExternalMatchClient":
        return cls(api_key, api_secret, BASE_MAINNET_BASE_URL, **kwargs)

    @classmethod
    def new_sepolia_client(cls, api_key: str, api_secret: str, **kwargs) -> "ExternalMatchClient":
        return cls(api_key, api_secret, SEPOLIA_BASE_URL, **kwargs)

    @classmethod
    def new_mainnet_client(cls, api_key: str, api_secret: str, **kwargs) -> "ExternalMatchClient":
        return cls(api_key, api_secret, MAINNET_BASE_URL, **kwargs)

    @classmethod
    def from_env(cls, base_url: str = ARBITRUM_SEPOLIA_BASE_URL, **kwargs) -> "ExternalMatchClient":
        """
        Build a client from EXTERNAL_MATCH_KEY / EXTERNAL_MATCH_SECRET.

        Raises:
            ExternalMatchClientError: a credential variable is unset
        """
        api_key = os.getenv(API_KEY_ENV, "")
        api_secret = os.getenv(API_SECRET_ENV, "")
        missing = [name for name, value in ((API_KEY_ENV, api_key), (API_SECRET_ENV, api_secret))
                   if not value]
        if missing:
            raise ExternalMatchClientError(
                f"Missing API credentials: set {', '.join(missing)}"
            )
        return cls(api_key, api_secret, base_url, **kwargs)

    async def __aenter__(self) -> "ExternalMatchClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.http_client.aclose()

    # ═══════════════════════════════════════════════════════════════════════
    # QUOTES
    # ═══════════════════════════════════════════════════════════════════════

    async def request_quote(self, order: ExternalOrder,
                            options: Optional[RequestQuoteOptions] = None) -> Optional[SignedExternalQuote]:
        """
        Request a quote for an order.

        Args:
            order: Order to quote
            options: Gas sponsorship options (defaults if None)

        Returns:
            SignedExternalQuote, or None when no quote is available

        Raises:
            ExternalMatchClientError: request failed
        """
        options = options or RequestQuoteOptions()
        try:
            order.validate()
        except ValueError as e:
            raise ExternalMatchClientError(f"Invalid order: {e}") from e

        request = ExternalQuoteRequest(external_order=order)
        path = options.build_request_path()
        response = await self._post(path, request, "Failed to request quote")
        if response.is_empty:
            log.info("No quote available")
            return None

        quote_resp = self._parse(ExternalQuoteResponse.from_dict, response.data, "quote")
        return quote_resp.to_signed_quote()

    async def assemble_quote(self, quote: SignedExternalQuote,
                             options: Optional[AssembleExternalMatchOptions] = None) -> Optional[ExternalMatchResponse]:
        """
        Assemble a signed quote into a settlement bundle.

        Args:
            quote: Quote returned by request_quote
            options: Assembly options (defaults if None)

        Returns:
            ExternalMatchResponse, or None when the match is no longer available

        Raises:
            ExternalMatchClientError: request failed
        """
        options = options or AssembleExternalMatchOptions()
        request = self._assemble_request(quote, options)
        path = options.build_request_path(ASSEMBLE_EXTERNAL_MATCH_ROUTE)
        response = await self._post(path, request, "Failed to assemble quote")
        if response.is_empty:
            log.info("No match available")
            return None
        return self._parse(ExternalMatchResponse.from_dict, response.data, "match bundle")

    async def assemble_malleable_quote(self, quote: SignedExternalQuote,
                                       options: Optional[AssembleExternalMatchOptions] = None
                                       ) -> Optional[MalleableExternalMatchResponse]:
        """
        Assemble a signed quote into a malleable bundle whose base amount
        is chosen at settlement time.

        Returns:
            MalleableExternalMatchResponse, or None when no match is available

        Raises:
            ExternalMatchClientError: request failed
        """
        options = options or AssembleExternalMatchOptions()
        request = self._assemble_request(quote, options)
        path = options.build_request_path(ASSEMBLE_MALLEABLE_EXTERNAL_MATCH_ROUTE)
        response = await self._post(path, request, "Failed to assemble malleable quote")
        if response.is_empty:
            log.info("No malleable match available")
            return None
        return self._parse(MalleableExternalMatchResponse.from_dict, response.data,
                           "malleable match bundle")

    # ═══════════════════════════════════════════════════════════════════════
    # MARKET INFO
    # ═══════════════════════════════════════════════════════════════════════

    async def get_order_book_depth(self, mint: str) -> OrderBookDepth:
        """Order book depth for a base token."""
        response = await self._get(f"{ORDER_BOOK_DEPTH_ROUTE}/{mint}",
                                   "Failed to get order book depth")
        if response.is_empty:
            raise ExternalMatchClientError("No order book depth returned", response.status)
        return self._parse(OrderBookDepth.from_dict, response.data, "order book depth")

    async def get_supported_tokens(self) -> List[TokenInfo]:
        """Tokens tradable through the external match API."""
        response = await self._get(SUPPORTED_TOKENS_ROUTE, "Failed to get supported tokens")
        if response.is_empty:
            return []
        return self._parse(parse_tokens, response.data, "supported tokens")

    async def get_token_prices(self) -> List[TokenPrice]:
        """Current prices of supported tokens."""
        response = await self._get(TOKEN_PRICES_ROUTE, "Failed to get token prices")
        if response.is_empty:
            return []
        return self._parse(parse_token_prices, response.data, "token prices")

    # ═══════════════════════════════════════════════════════════════════════
    # INTERNALS
    # ═══════════════════════════════════════════════════════════════════════

    def _headers(self) -> Dict[str, str]:
        return {
            RENEGADE_API_KEY_HEADER: self.api_key,
            RENEGADE_SDK_VERSION_HEADER: get_sdk_version(),
        }

    @staticmethod
    def _assemble_request(quote: SignedExternalQuote,
                          options: AssembleExternalMatchOptions) -> AssembleExternalMatchRequest:
        return AssembleExternalMatchRequest(
            signed_quote=quote.to_api_signed_quote(),
            do_gas_estimation=options.do_gas_estimation,
            allow_shared=options.allow_shared,
            receiver_address=options.receiver_address,
            updated_order=options.updated_order,
        )

    async def _post(self, path: str, body: Any, error_message: str) -> HttpResponse:
        try:
            return await self.http_client.post(path, body, self._headers())
        except RelayerHttpError as e:
            raise ExternalMatchClientError(e.message or error_message, e.status_code) from e

    async def _get(self, path: str, error_message: str) -> HttpResponse:
        try:
            return await self.http_client.get(path, self._headers())
        except RelayerHttpError as e:
            raise ExternalMatchClientError(e.message or error_message, e.status_code) from e

    @staticmethod
    def _parse(parser, data: Any, what: str):
        """Map a decoded body onto a record; a malformed body surfaces here."""
        if not isinstance(data, dict):
            raise ExternalMatchClientError(f"Unexpected {what} response: {data!r:.200}")
        try:
            return parser(data)
        except (KeyError, TypeError, ValueError) as e:
            raise ExternalMatchClientError(f"Malformed {what} response: {e}") from e
