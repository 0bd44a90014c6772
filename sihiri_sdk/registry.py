"""
Contract registry: logical contract names to deployed contracts.
"""
import logging
from typing import Dict, Mapping, Optional

from .config import NetworkConfig
from .exceptions import ConfigurationError
from .models import ContractReference, NetworkProfile

logger = logging.getLogger(__name__)

# Logical contracts the SDK talks to
NFT_OWNERSHIP = "nftOwnership"
IDENTITY = "identity"
ROYALTY = "royalty"
MARKETPLACE = "marketplace"


class ContractRegistry:
    """
    Static lookup table keyed by (logical name, network).

    The table is loaded once and never mutated; a missing entry means the
    deployment and the configuration disagree, which is not something a
    retry can fix.
    """

    def __init__(self, table: Mapping[str, Mapping[str, str]], profiles: Optional[Mapping[str, NetworkProfile]] = None):
        """
        Args:
            table: network name -> {logical name -> "address.contract-name"}
            profiles: Optional network profiles keyed by network name
        """
        self._table: Dict[str, Dict[str, str]] = {
            network: dict(contracts) for network, contracts in table.items()
        }
        self._profiles: Dict[str, NetworkProfile] = dict(profiles or {})

    @classmethod
    def from_config(cls) -> "ContractRegistry":
        """Build the registry from the bundled network configuration."""
        networks = NetworkConfig.load_networks()
        table = {name: NetworkConfig.get_contracts(name) for name in networks}
        profiles = {name: NetworkConfig.get_profile(name) for name in networks}
        return cls(table, profiles)

    @property
    def networks(self):
        return sorted(self._table)

    def resolve(self, logical_name: str, network_name: str) -> ContractReference:
        """
        Resolve a logical contract name on a network.

        Raises:
            ConfigurationError: If no deployment is configured for the pair
        """
        if network_name not in self._table:
            raise ConfigurationError(
                f"Unknown network '{network_name}'",
                error_code="UNKNOWN_NETWORK",
                details={"network": network_name},
            )

        full_name = self._table[network_name].get(logical_name)
        if not full_name:
            raise ConfigurationError(
                f"Contract {logical_name} not found in config for network {network_name}",
                error_code="CONTRACT_NOT_CONFIGURED",
                details={"contract": logical_name, "network": network_name},
            )

        address, sep, name = full_name.partition(".")
        if not sep or not address or not name:
            raise ConfigurationError(
                f"Contract {logical_name} on {network_name} must be 'address.name', got {full_name!r}",
                error_code="MALFORMED_CONTRACT_ID",
            )

        return ContractReference(logical_name=logical_name, address=address, on_chain_name=name)

    def profile(self, network_name: str) -> NetworkProfile:
        """
        Raises:
            ConfigurationError: If the network has no profile
        """
        try:
            return self._profiles[network_name]
        except KeyError:
            raise ConfigurationError(f"No network profile for '{network_name}'", error_code="UNKNOWN_NETWORK")


def explorer_tx_url(tx_id: str, profile: NetworkProfile) -> str:
    """Build a block-explorer link for a transaction."""
    if not tx_id.startswith("0x"):
        tx_id = f"0x{tx_id}"
    chain = "mainnet" if profile.is_mainnet else "testnet"
    return f"{profile.explorer_url.rstrip('/')}/txid/{tx_id}?chain={chain}"
