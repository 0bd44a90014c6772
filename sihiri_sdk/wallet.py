"""
Wallet connector protocol.

The wallet (browser extension, mobile app, or a test double) owns the
user's keys. The SDK hands it a contract-call payload and blocks until the
human approves or rejects; it never sees a private key.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol


@dataclass(frozen=True)
class AppDetails:
    """How the application presents itself in the wallet prompt"""
    name: str = "SiHiRi"
    icon: str = "/assets/sihiri-logo.svg"


@dataclass(frozen=True)
class WalletResponse:
    """
    Outcome of a wallet prompt.

    ``approved`` False means the user rejected the request. An approved
    contract call carries either the signed transaction (``tx_raw``) for the
    SDK to broadcast, or the ``tx_id`` of a transaction the wallet already
    broadcast itself.
    """
    approved: bool
    tx_id: Optional[str] = None
    tx_raw: Optional[str] = None

    @classmethod
    def cancelled(cls) -> "WalletResponse":
        return cls(approved=False)


class WalletConnector(Protocol):
    """Protocol for wallet integrations"""

    def authenticate(self, app_details: AppDetails) -> Optional[str]:
        """Run the sign-in handshake; return the auth response token or None if declined"""
        ...

    def open_contract_call(self, payload: Dict[str, Any]) -> WalletResponse:
        """Ask the user to sign a contract call; blocks until they decide"""
        ...
