"""Infrastructure layer — network registry, escrow ABIs and ledger gateways."""

from x402_deferred.infrastructure.chains import (
    ChainInfo,
    get_chain_by_id,
    get_chain_id_from_network,
    get_rpc_url,
    get_supported_networks,
    resolve_network,
)
from x402_deferred.infrastructure.ledger_gateway import (
    InMemoryLedgerGateway,
    Web3LedgerGateway,
)

__all__ = [
    "ChainInfo",
    "get_chain_by_id",
    "get_chain_id_from_network",
    "get_rpc_url",
    "get_supported_networks",
    "resolve_network",
    "InMemoryLedgerGateway",
    "Web3LedgerGateway",
]
