"""Network profiles for the supported MultiversX networks."""

from __future__ import annotations

from dataclasses import dataclass

from mvx_agent.errors import UnknownNetwork


@dataclass(frozen=True)
class NetworkProfile:
    """A MultiversX network and the chain parameters used to transact on it."""

    name: str
    display_name: str
    api_url: str
    chain_id: str
    explorer_url: str
    wallet_url: str
    warp_url: str
    native_token: str = "EGLD"
    decimals: int = 18
    min_gas_limit: int = 50_000
    gas_per_data_byte: int = 1_500
    min_gas_price: int = 1_000_000_000
    poll_interval_seconds: float = 6.0  # one round
    max_poll_attempts: int = 30

    def explorer_tx_url(self, tx_hash: str) -> str:
        return f"{self.explorer_url}/transactions/{tx_hash}"

    def explorer_account_url(self, address: str) -> str:
        return f"{self.explorer_url}/accounts/{address}"


NETWORKS: dict[str, NetworkProfile] = {
    "devnet": NetworkProfile(
        name="devnet",
        display_name="MultiversX Devnet",
        api_url="https://devnet-api.multiversx.com",
        chain_id="D",
        explorer_url="https://devnet-explorer.multiversx.com",
        wallet_url="https://devnet-wallet.multiversx.com",
        warp_url="https://devnet.usewarp.to",
        native_token="xEGLD",
    ),
    "testnet": NetworkProfile(
        name="testnet",
        display_name="MultiversX Testnet",
        api_url="https://testnet-api.multiversx.com",
        chain_id="T",
        explorer_url="https://testnet-explorer.multiversx.com",
        wallet_url="https://testnet-wallet.multiversx.com",
        warp_url="https://testnet.usewarp.to",
        native_token="xEGLD",
    ),
    "mainnet": NetworkProfile(
        name="mainnet",
        display_name="MultiversX Mainnet",
        api_url="https://api.multiversx.com",
        chain_id="1",
        explorer_url="https://explorer.multiversx.com",
        wallet_url="https://wallet.multiversx.com",
        warp_url="https://usewarp.to",
    ),
}


def resolve(name: str) -> NetworkProfile:
    """Get a network profile by identifier.

    Raises :class:`~mvx_agent.errors.UnknownNetwork` rather than falling
    back to a default: a transfer on the wrong network cannot be undone.
    """
    key = (name or "").strip().lower()
    if key not in NETWORKS:
        raise UnknownNetwork(name, list_network_names())
    return NETWORKS[key]


def list_network_names() -> list[str]:
    """Return the identifiers of all registered networks."""
    return list(NETWORKS.keys())
