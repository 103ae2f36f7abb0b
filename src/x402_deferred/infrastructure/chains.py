"""Network registry: x402 network names -> chain id and default RPC endpoint.

Accepts the short x402 names ("base-sepolia") as well as CAIP-2 identifiers
("eip155:84532") for the same chains.
"""

from __future__ import annotations

from dataclasses import dataclass

from x402_deferred.domain.exceptions import UnsupportedNetworkError


@dataclass(frozen=True)
class ChainInfo:
    """A supported EVM chain."""

    network: str
    chain_id: int
    name: str
    rpc_url: str
    testnet: bool = False


SUPPORTED_CHAINS: dict[str, ChainInfo] = {
    chain.network: chain
    for chain in (
        # ----- Mainnets -----
        ChainInfo("ethereum", 1, "Ethereum Mainnet", "https://ethereum-rpc.publicnode.com"),
        ChainInfo("optimism", 10, "OP Mainnet", "https://mainnet.optimism.io"),
        ChainInfo("polygon", 137, "Polygon", "https://polygon-rpc.com"),
        ChainInfo("base", 8453, "Base Mainnet", "https://mainnet.base.org"),
        ChainInfo("arbitrum", 42161, "Arbitrum One", "https://arb1.arbitrum.io/rpc"),
        ChainInfo("celo", 42220, "Celo", "https://forno.celo.org"),
        ChainInfo("avalanche", 43114, "Avalanche C-Chain", "https://api.avax.network/ext/bc/C/rpc"),
        # ----- Testnets -----
        ChainInfo(
            "avalanche-fuji", 43113, "Avalanche Fuji",
            "https://api.avax-test.network/ext/bc/C/rpc", testnet=True,
        ),
        ChainInfo(
            "polygon-amoy", 80002, "Polygon Amoy",
            "https://rpc-amoy.polygon.technology", testnet=True,
        ),
        ChainInfo("base-sepolia", 84532, "Base Sepolia", "https://sepolia.base.org", testnet=True),
        ChainInfo(
            "arbitrum-sepolia", 421614, "Arbitrum Sepolia",
            "https://sepolia-rollup.arbitrum.io/rpc", testnet=True,
        ),
        ChainInfo(
            "sepolia", 11155111, "Ethereum Sepolia",
            "https://ethereum-sepolia-rpc.publicnode.com", testnet=True,
        ),
        ChainInfo(
            "optimism-sepolia", 11155420, "OP Sepolia",
            "https://sepolia.optimism.io", testnet=True,
        ),
    )
}

_BY_CHAIN_ID: dict[int, ChainInfo] = {chain.chain_id: chain for chain in SUPPORTED_CHAINS.values()}


def get_chain_by_id(chain_id: int) -> ChainInfo | None:
    """Look up a chain by its numeric id."""
    return _BY_CHAIN_ID.get(chain_id)


def get_chain_id_from_network(network: str) -> int | None:
    """Map a network name or CAIP-2 id onto a chain id; None if unknown."""
    key = network.strip().lower()
    if key.startswith("eip155:"):
        try:
            chain_id = int(key.split(":", 1)[1])
        except ValueError:
            return None
        return chain_id if chain_id in _BY_CHAIN_ID else None
    chain = SUPPORTED_CHAINS.get(key)
    return chain.chain_id if chain else None


def get_rpc_url(chain_id: int) -> str | None:
    """Default public RPC endpoint for a chain; None if unknown."""
    chain = get_chain_by_id(chain_id)
    return chain.rpc_url if chain else None


def resolve_network(network: str, rpc_url: str | None = None) -> tuple[ChainInfo, str]:
    """Resolve a configured network to its chain and the RPC URL to use.

    Args:
        network: x402 network name or CAIP-2 identifier.
        rpc_url: Optional override of the registry's default endpoint.

    Raises:
        UnsupportedNetworkError: If the network is unknown or has no endpoint.
    """
    chain_id = get_chain_id_from_network(network)
    chain = get_chain_by_id(chain_id) if chain_id is not None else None
    if chain is None:
        raise UnsupportedNetworkError(network)

    endpoint = rpc_url or chain.rpc_url
    if not endpoint:
        raise UnsupportedNetworkError(network)
    return chain, endpoint


def get_supported_networks() -> list[str]:
    """Return the sorted list of supported network names."""
    return sorted(SUPPORTED_CHAINS)
