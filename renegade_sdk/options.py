"""
Renegade SDK - Request Options

Immutable option records for quote and assemble requests.

Build with keyword arguments and derive variants with with_options():

    opts = RequestQuoteOptions(gas_refund_address="0x...")
    no_sponsor = opts.with_options(disable_gas_sponsorship=True)
"""

from dataclasses import dataclass, replace
from typing import Optional
from urllib.parse import urlencode

from .match_types import ExternalOrder

# ═══════════════════════════════════════════════════════════════════════════════
# ROUTES / QUERY PARAMETERS
# ═══════════════════════════════════════════════════════════════════════════════

REQUEST_EXTERNAL_QUOTE_ROUTE = "/v0/matching-engine/quote"
ASSEMBLE_EXTERNAL_MATCH_ROUTE = "/v0/matching-engine/assemble-external-match"
ASSEMBLE_MALLEABLE_EXTERNAL_MATCH_ROUTE = "/v0/matching-engine/assemble-malleable-external-match"

DISABLE_GAS_SPONSORSHIP_QUERY_PARAM = "disable_gas_sponsorship"
GAS_REFUND_ADDRESS_QUERY_PARAM = "refund_address"
REFUND_NATIVE_ETH_QUERY_PARAM = "refund_native_eth"


def _bool_param(value: bool) -> str:
    return "true" if value else "false"


@dataclass(frozen=True)
class RequestQuoteOptions:
    """
    Options for requesting a quote.

    Args:
        disable_gas_sponsorship: Opt out of server-side gas sponsorship
        gas_refund_address: Address that receives the gas refund
        refund_native_eth: Refund gas in native ETH instead of the buy token
    """
    disable_gas_sponsorship: bool = False
    gas_refund_address: Optional[str] = None
    refund_native_eth: bool = False

    def with_options(self, **changes) -> "RequestQuoteOptions":
        return replace(self, **changes)

    def build_request_path(self) -> str:
        """Quote route with query parameters. disable_gas_sponsorship is always sent."""
        params = [(DISABLE_GAS_SPONSORSHIP_QUERY_PARAM, _bool_param(self.disable_gas_sponsorship))]
        if self.gas_refund_address:
            params.append((GAS_REFUND_ADDRESS_QUERY_PARAM, self.gas_refund_address))
        if self.refund_native_eth:
            params.append((REFUND_NATIVE_ETH_QUERY_PARAM, _bool_param(self.refund_native_eth)))
        return f"{REQUEST_EXTERNAL_QUOTE_ROUTE}?{urlencode(params)}"


@dataclass(frozen=True)
class AssembleExternalMatchOptions:
    """
    Options for assembling a quote into a match bundle.

    Args:
        do_gas_estimation: Ask the server to estimate gas for the settlement tx
        allow_shared: Allow the match to be shared with other external parties
        receiver_address: Address that receives the output tokens
        updated_order: Replacement order (must stay within the quote)
        request_gas_sponsorship: Deprecated, request sponsorship on the quote instead
        gas_refund_address: Deprecated, set on the quote instead
    """
    do_gas_estimation: bool = False
    allow_shared: bool = False
    receiver_address: Optional[str] = None
    updated_order: Optional[ExternalOrder] = None
    request_gas_sponsorship: bool = False
    gas_refund_address: Optional[str] = None

    def with_options(self, **changes) -> "AssembleExternalMatchOptions":
        return replace(self, **changes)

    def build_request_path(self, route: str = ASSEMBLE_EXTERNAL_MATCH_ROUTE) -> str:
        """
        Assemble route, with a query string only when a gas option is set.

        Default requests keep the bare route so older servers see the
        same URL they always did.
        """
        if not self.request_gas_sponsorship and not self.gas_refund_address:
            return route

        params = []
        if self.request_gas_sponsorship:
            params.append((DISABLE_GAS_SPONSORSHIP_QUERY_PARAM,
                           _bool_param(not self.request_gas_sponsorship)))
        if self.gas_refund_address:
            params.append((GAS_REFUND_ADDRESS_QUERY_PARAM, self.gas_refund_address))
        return f"{route}?{urlencode(params)}"
