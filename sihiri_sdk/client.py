"""
SihiriClient - Main client for the SiHiRi marketplace.
"""
import logging
from typing import Any, Callable, Dict, Mapping, Optional

from .config import NetworkConfig, StorageSettings
from .contracts.adapter import ContractCaller, SubmitOutcome
from .contracts.functions import (
    IdentityContract,
    MarketplaceContract,
    NFTOwnershipContract,
    RoyaltyContract,
    check_nft_ownership,
)
from .identity.session import SessionManager
from .identity.session_store import SessionStore
from .identity.types import UserSession
from .metadata import assemble
from .models import BroadcastReceipt, NetworkProfile, NFTMetadata
from .registry import ContractRegistry, explorer_tx_url
from .storage.store import ContentStore
from .wallet import AppDetails, WalletConnector


class SihiriClient:
    """
    Client for the SiHiRi creative-works marketplace.

    This client wires together:
    1. Content storage (media and metadata on IPFS)
    2. The four marketplace contracts (ownership, identity, marketplace, royalty)
    3. The wallet-backed user session

    All calls are synchronous. State-changing calls block until the user
    approves or rejects them in the wallet.
    """

    def __init__(
        self,
        network: NetworkProfile,
        registry: ContractRegistry,
        storage: ContentStore,
        session: SessionManager,
        wallet: Optional[WalletConnector] = None,
        timeout: int = 30,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the client.

        Args:
            network: Profile of the network to talk to
            registry: Contract registry
            storage: Content store for media and metadata
            session: Session manager holding the signed-in user
            wallet: Wallet connector for signing (defaults to the session's)
            timeout: Socket timeout for node requests in seconds
            logger: Optional logger instance
        """
        self.network = network
        self.registry = registry
        self.storage = storage
        self.session = session
        self.wallet = wallet or session.wallet
        self.logger = logger or logging.getLogger(__name__)

        self.caller = ContractCaller(
            registry,
            network,
            session=session,
            wallet=self.wallet,
            timeout=timeout,
            logger=self.logger,
        )
        self.nft = NFTOwnershipContract(self.caller)
        self.identity = IdentityContract(self.caller)
        self.marketplace = MarketplaceContract(self.caller)
        self.royalty = RoyaltyContract(self.caller)

    @classmethod
    def from_env(
        cls,
        wallet: Optional[WalletConnector] = None,
        network: Optional[str] = None,
        storage_settings: Optional[StorageSettings] = None,
        session_store: Optional[SessionStore] = None,
        **kwargs
    ) -> "SihiriClient":
        """
        Build a client from the bundled network table and the environment.

        Args:
            wallet: Wallet connector used for sign-in and signing
            network: Network name (defaults to the process-wide SIHIRI_NETWORK)
            storage_settings: Storage settings (defaults to StorageSettings.from_env())
            session_store: Session persistence (defaults to the user data directory)

        Raises:
            ConfigurationError: If the network or storage configuration is invalid
        """
        network_name = network or NetworkConfig.active_network_name()
        profile = NetworkConfig.get_profile(network_name)
        settings = storage_settings or StorageSettings.from_env()

        session = SessionManager(store=session_store or SessionStore(), wallet=wallet)
        return cls(
            profile,
            ContractRegistry.from_config(),
            ContentStore.from_settings(settings),
            session,
            wallet=wallet,
            timeout=settings.timeout,
            **kwargs
        )

    # ------------------------------------------------------------------ #
    # Session
    # ------------------------------------------------------------------ #

    def sign_in(self, app_details: Optional[AppDetails] = None) -> Optional[UserSession]:
        return self.session.sign_in(app_details)

    def sign_out(self) -> None:
        self.session.sign_out()

    @property
    def address(self) -> Optional[str]:
        """The signed-in user's address on this client's network."""
        return self.session.get_address(self.network.name.value)

    # ------------------------------------------------------------------ #
    # Creative works
    # ------------------------------------------------------------------ #

    def mint_work(
        self,
        media: bytes,
        fields: Mapping[str, Any],
        royalty_percent: int,
        transferable: bool = True,
        filename: str = "media",
        on_result: Optional[Callable[[BroadcastReceipt], Any]] = None,
        on_cancel: Optional[Callable[[], Any]] = None
    ) -> SubmitOutcome:
        """
        Upload a work and mint a token for it.

        Stores the media, assembles and stores its metadata document, then
        asks the wallet to sign ``mint`` with the document's ``ipfs://`` URL.
        ``creator`` defaults to the signed-in user.

        Args:
            media: Raw media bytes
            fields: Metadata fields (see ``metadata.assemble``), without image_cid
            royalty_percent: Creator royalty on secondary sales
            transferable: Whether the token may be transferred
            filename: Name reported to the pinning service

        Returns:
            The mint outcome (receipt or cancellation)

        Raises:
            ValidationError: If the metadata fields are invalid
            StorageUnavailable: If no storage backend is configured
            PostConditionError, ConfigurationError, NetworkError: From the mint call
        """
        media_cid = self.storage.put(media, filename=filename)

        document_fields: Dict[str, Any] = dict(fields)
        document_fields["image_cid"] = media_cid
        if not document_fields.get("creator") and self.address:
            document_fields["creator"] = self.address
        metadata = assemble(document_fields)

        metadata_cid = self.storage.put_json(metadata)
        metadata_url = self.storage.format_metadata_url(metadata_cid)
        self.logger.info(f"Minting {metadata.name!r} with metadata {metadata_url}")

        return self.nft.mint(
            metadata_url,
            royalty_percent,
            transferable=transferable,
            on_result=on_result,
            on_cancel=on_cancel,
        )

    def get_work_metadata(self, token_id: int) -> Optional[NFTMetadata]:
        """Fetch the metadata document a token points at, or None if it has none."""
        url = self.nft.get_metadata_url(token_id)
        if not url:
            return None
        return self.storage.fetch_metadata(url)

    def owns(self, token_id: int) -> bool:
        return check_nft_ownership(self.nft, token_id)

    def explorer_url(self, receipt: BroadcastReceipt) -> str:
        return explorer_tx_url(receipt.tx_id, self.network)

    def close(self) -> None:
        self.storage.close()
        self.caller.http.close()
