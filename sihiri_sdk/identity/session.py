"""
Wallet-based sign-in and the local user session.
"""
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..exceptions import AuthenticationError
from ..wallet import AppDetails, WalletConnector
from .auth_token import addresses_from_claims, decode_auth_response
from .session_store import SessionStore
from .types import UserSession

logger = logging.getLogger(__name__)

# Networks that sign with another network's address
_ADDRESS_NETWORK = {"local": "testnet"}


class SessionManager:
    """
    Holds the signed-in user for one application instance.

    The wallet performs the handshake; this class only decodes its answer,
    keeps the result, and persists it when a store is given. Accessors are
    local and never touch the network.
    """

    def __init__(
        self,
        store: Optional[SessionStore] = None,
        wallet: Optional[WalletConnector] = None,
        env_tier: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.wallet = wallet
        self.env_tier = env_tier
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.RLock()
        self._session = self._load()

    def _load(self) -> UserSession:
        if self.store is None:
            return UserSession()
        data = self.store.read()
        if not data:
            return UserSession()
        try:
            session = UserSession.from_dict(data)
        except (TypeError, ValueError) as e:
            self.logger.warning(f"Ignoring unreadable persisted session: {e}")
            return UserSession()
        if session.signed_in:
            self.logger.debug("Restored persisted session")
        return session

    @property
    def session(self) -> UserSession:
        """Current session snapshot."""
        with self._lock:
            return self._session

    def sign_in(self, app_details: Optional[AppDetails] = None) -> Optional[UserSession]:
        """
        Ask the wallet to authenticate the user.

        Returns:
            The new session, or None if the user declined

        Raises:
            ValueError: If no wallet is configured
            AuthenticationError: If the wallet's answer is not acceptable
        """
        if self.wallet is None:
            raise ValueError("A wallet connector is required to sign in")

        token = self.wallet.authenticate(app_details or AppDetails())
        if not token:
            self.logger.info("Sign-in declined by user")
            return None
        return self.handle_pending_sign_in(token)

    def handle_pending_sign_in(self, auth_response: str) -> UserSession:
        """
        Complete a sign-in from an auth response token received out of band
        (for instance as a redirect query parameter).

        Raises:
            AuthenticationError: If the token is rejected or carries no address
        """
        claims = decode_auth_response(auth_response, self.env_tier)
        if claims is None:
            raise AuthenticationError("Auth response token rejected", error_code="INVALID_AUTH_RESPONSE")

        addresses = addresses_from_claims(claims)
        if not addresses:
            raise AuthenticationError("Auth response carries no Stacks address", error_code="NO_ADDRESS")

        profile = claims.get("profile")
        session = UserSession(
            addresses=addresses,
            auth_token=auth_response,
            signed_in=True,
            username=claims.get("username") or None,
            profile=dict(profile) if isinstance(profile, dict) else {},
            signed_in_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._session = session
            if self.store is not None:
                self.store.write(session.to_dict())

        self.logger.info(f"Signed in as {addresses.get('mainnet') or addresses.get('testnet')}")
        return session

    def sign_out(self) -> None:
        """Clear the local session. The wallet's own state is untouched."""
        with self._lock:
            self._session = UserSession()
            if self.store is not None:
                self.store.clear()
        self.logger.info("Signed out")

    def is_authenticated(self) -> bool:
        return self.session.signed_in

    def get_address(self, network: str = "mainnet") -> Optional[str]:
        """The user's address on a network, or None when signed out."""
        session = self.session
        if not session.signed_in:
            return None
        return session.addresses.get(_ADDRESS_NETWORK.get(network, network))

    def get_auth_token(self) -> Optional[str]:
        session = self.session
        return session.auth_token if session.signed_in else None

    def get_profile(self) -> Optional[Dict[str, Any]]:
        session = self.session
        return dict(session.profile) if session.signed_in else None
