#!/usr/bin/env python3
"""
Simple example of minting a work with the SiHiRi SDK.
"""
import json
import os
import sys

from sihiri_sdk import (
    AppDetails,
    SihiriClient,
    SihiriError,
    StorageSettings,
    ValidationError,
    WalletResponse,
)


class ConsoleWallet:
    """
    Stand-in for a browser wallet.

    Prints each request and reads the answer from stdin: paste an auth
    response token to sign in, and a transaction id to approve a call.
    An empty line declines.
    """

    def authenticate(self, app_details):
        print(f"{app_details.name} wants you to sign in.")
        token = input("Auth response token (empty to decline): ").strip()
        return token or None

    def open_contract_call(self, payload):
        print("Contract call to sign:")
        print(json.dumps(payload, indent=2))
        tx_id = input("Transaction id after signing (empty to reject): ").strip()
        if not tx_id:
            return WalletResponse.cancelled()
        return WalletResponse(approved=True, tx_id=tx_id)


def main():
    """
    Demonstrate the mint flow.

    This example shows how to:
    1. Build a client from the environment
    2. Sign in through the wallet
    3. Upload a media file and mint a token for it
    """
    if len(sys.argv) < 2:
        print("usage: simple_usage.py <media-file>")
        return

    # Memory storage unless a pinning service is configured
    os.environ.setdefault("SIHIRI_PINNING_SERVICE", "memory")
    client = SihiriClient.from_env(
        wallet=ConsoleWallet(),
        storage_settings=StorageSettings.from_env(),
    )
    print(f"Network: {client.network.name.value} ({client.network.api_url})")

    if not client.session.is_authenticated():
        if client.sign_in(AppDetails(name="SiHiRi example")) is None:
            print("Sign-in declined")
            return
    print(f"Signed in as {client.address}")

    with open(sys.argv[1], "rb") as f:
        media = f.read()

    fields = {
        "name": os.path.basename(sys.argv[1]),
        "description": "Minted from the SiHiRi Python SDK example",
        "media_type": "image",
        "attributes": [{"trait_type": "Edition", "value": "1 of 1"}],
    }

    try:
        outcome = client.mint_work(
            media,
            fields,
            royalty_percent=10,
            on_cancel=lambda: print("Mint rejected in the wallet"),
        )
    except ValidationError as e:
        print(f"Invalid metadata: {e.fields}")
        return
    except SihiriError as e:
        print(f"Mint failed: {e}")
        return
    finally:
        client.close()

    if outcome.receipt:
        print(f"Transaction: {outcome.receipt.tx_id}")
        print(f"Explorer: {client.explorer_url(outcome.receipt)}")


if __name__ == "__main__":
    main()
