#!/usr/bin/env python3
"""
Example of read-only marketplace queries with network configuration.
"""
import os

from sihiri_sdk import ContractRegistry, NetworkConfig, SihiriError
from sihiri_sdk.contracts import ContractCaller, MarketplaceContract, NFTOwnershipContract


def main():
    """
    Demonstrate read-only contract calls.

    No wallet and no sign-in are needed: read-only calls go straight to the
    node API.
    """
    print("Available networks:")
    for network_name in NetworkConfig.load_networks().keys():
        print(f"  - {network_name}")

    network = os.environ.get("SIHIRI_NETWORK", "local")
    profile = NetworkConfig.get_profile(network)
    registry = ContractRegistry.from_config()
    caller = ContractCaller(registry, profile)

    nft = NFTOwnershipContract(caller)
    marketplace = MarketplaceContract(caller)

    try:
        supply = nft.get_total_supply()
        print(f"Tokens minted on {network}: {supply}")
        for token_id in range(1, min(supply, 5) + 1):
            info = nft.get_token_info(token_id)
            listed = marketplace.is_token_listed(token_id)
            print(f"  #{token_id}: {info} (listed: {listed})")
    except SihiriError as e:
        print(f"Query failed: {e}")


if __name__ == "__main__":
    main()
