"""
Typed wrappers around the SiHiRi Clarity contracts.
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from .adapter import ContractCaller, SubmitOutcome
from .post_conditions import max_spend
from .values import (
    bool_cv, contract_principal_cv, list_cv, standard_principal_cv,
    string_ascii_cv, string_utf8_cv, tuple_cv, uint_cv,
)
from ..exceptions import SihiriError
from ..models import BroadcastReceipt
from ..registry import IDENTITY, MARKETPLACE, NFT_OWNERSHIP, ROYALTY

logger = logging.getLogger(__name__)

ResultCallback = Optional[Callable[[BroadcastReceipt], Any]]
CancelCallback = Optional[Callable[[], Any]]


class _ContractWrapper:
    contract_name = ""

    def __init__(self, caller: ContractCaller):
        self.caller = caller

    def _read(self, function_name: str, *args) -> Any:
        return self.caller.call_read_only(self.contract_name, function_name, list(args))

    def _contract_principal(self, logical_name: str):
        """Principal of another configured contract, as a trait argument"""
        ref = self.caller.resolve(logical_name)
        return contract_principal_cv(ref.address, ref.on_chain_name)

    def _require_sender(self, action: str) -> str:
        address = self.caller.current_address()
        if not address:
            raise ValueError(f"A signed-in session is required to {action}")
        return address


class NFTOwnershipContract(_ContractWrapper):
    """nft-ownership: minting, transfers and token lookups"""
    contract_name = NFT_OWNERSHIP

    def get_owner(self, token_id: int) -> Optional[str]:
        return self._read("get-owner", uint_cv(token_id))

    def get_metadata_url(self, token_id: int) -> Optional[str]:
        return self._read("get-token-uri", uint_cv(token_id))

    def get_creator(self, token_id: int) -> Optional[str]:
        return self._read("get-creator", uint_cv(token_id))

    def get_royalty_percent(self, token_id: int) -> Optional[int]:
        return self._read("get-royalty-percent", uint_cv(token_id))

    def is_transferable(self, token_id: int) -> Optional[bool]:
        return self._read("is-transferable", uint_cv(token_id))

    def get_total_supply(self) -> int:
        return self._read("get-last-token-id")

    def get_tokens_by_owner(self, owner: str) -> List[int]:
        return self._read("get-tokens-by-owner", standard_principal_cv(owner))

    def get_token_info(self, token_id: int) -> Optional[Dict[str, Any]]:
        return self._read("get-token-info", uint_cv(token_id))

    def mint(
        self,
        metadata_url: str,
        royalty_percent: int,
        transferable: bool = True,
        on_result: ResultCallback = None,
        on_cancel: CancelCallback = None
    ) -> SubmitOutcome:
        """Mint a token pointing at a stored metadata document (``ipfs://...``)."""
        return self.caller.submit_call(
            self.contract_name,
            "mint",
            [string_utf8_cv(metadata_url), uint_cv(royalty_percent), bool_cv(transferable)],
            on_result=on_result,
            on_cancel=on_cancel,
        )

    def transfer(
        self,
        token_id: int,
        recipient: str,
        on_result: ResultCallback = None,
        on_cancel: CancelCallback = None
    ) -> SubmitOutcome:
        return self.caller.submit_call(
            self.contract_name,
            "transfer",
            [uint_cv(token_id), standard_principal_cv(recipient)],
            on_result=on_result,
            on_cancel=on_cancel,
        )


class IdentityContract(_ContractWrapper):
    """identity: creator profiles and usernames"""
    contract_name = IDENTITY

    def get_profile(self, principal: str) -> Optional[Dict[str, Any]]:
        return self._read("get-profile", standard_principal_cv(principal))

    def is_username_available(self, username: str) -> bool:
        return self._read("is-username-available", string_ascii_cv(username))

    def get_principal_by_username(self, username: str) -> Optional[str]:
        return self._read("get-principal-by-username", string_ascii_cv(username))

    def is_creator_verified(self, principal: str) -> bool:
        return self._read("is-verified", standard_principal_cv(principal))

    def register_profile(
        self,
        username: str,
        display_name: str,
        bio: str,
        avatar_url: str,
        website: str,
        social_links: Iterable[Dict[str, str]] = (),
        creation_categories: Iterable[str] = (),
        on_result: ResultCallback = None,
        on_cancel: CancelCallback = None
    ) -> SubmitOutcome:
        """
        Register a creator profile.

        Args:
            social_links: Items of the form {"platform": ..., "url": ...}
            creation_categories: Free-form category names
        """
        links = list_cv(
            tuple_cv({
                "platform": string_utf8_cv(link["platform"]),
                "url": string_utf8_cv(link["url"]),
            })
            for link in social_links
        )
        categories = list_cv(string_utf8_cv(category) for category in creation_categories)
        return self.caller.submit_call(
            self.contract_name,
            "register-profile",
            [
                string_utf8_cv(username),
                string_utf8_cv(display_name),
                string_utf8_cv(bio),
                string_utf8_cv(avatar_url),
                string_utf8_cv(website),
                links,
                categories,
            ],
            on_result=on_result,
            on_cancel=on_cancel,
        )


class MarketplaceContract(_ContractWrapper):
    """marketplace: fixed-price listings and auctions"""
    contract_name = MARKETPLACE

    def get_listing(self, listing_id: int) -> Optional[Dict[str, Any]]:
        return self._read("get-listing", uint_cv(listing_id))

    def get_auction(self, auction_id: int) -> Optional[Dict[str, Any]]:
        return self._read("get-auction", uint_cv(auction_id))

    def get_highest_bid(self, auction_id: int) -> Optional[Dict[str, Any]]:
        return self._read("get-highest-bid", uint_cv(auction_id))

    def get_listings_by_seller(self, seller: str) -> List[int]:
        return self._read("get-listings-by-seller", standard_principal_cv(seller))

    def get_auctions_by_seller(self, seller: str) -> List[int]:
        return self._read("get-auctions-by-seller", standard_principal_cv(seller))

    def is_token_listed(self, token_id: int) -> bool:
        return self._read("is-token-listed", uint_cv(token_id))

    def create_listing(
        self,
        token_id: int,
        price: int,
        expiry: int,
        on_result: ResultCallback = None,
        on_cancel: CancelCallback = None
    ) -> SubmitOutcome:
        """List a token at ``price`` micro-STX until block height ``expiry``."""
        return self.caller.submit_call(
            self.contract_name,
            "create-listing",
            [self._contract_principal(NFT_OWNERSHIP), uint_cv(token_id), uint_cv(price), uint_cv(expiry)],
            on_result=on_result,
            on_cancel=on_cancel,
        )

    def buy_listing(
        self,
        listing_id: int,
        max_price: int,
        on_result: ResultCallback = None,
        on_cancel: CancelCallback = None
    ) -> SubmitOutcome:
        """Buy a listing, spending at most ``max_price`` micro-STX."""
        buyer = self._require_sender("buy a listing")
        return self.caller.submit_call(
            self.contract_name,
            "buy-listing",
            [uint_cv(listing_id), self._contract_principal(NFT_OWNERSHIP), self._contract_principal(ROYALTY)],
            post_conditions=[max_spend(buyer, max_price)],
            on_result=on_result,
            on_cancel=on_cancel,
        )


class RoyaltyContract(_ContractWrapper):
    """royalty: payment history and creator earnings"""
    contract_name = ROYALTY

    def get_last_payment_id(self) -> int:
        return self._read("get-last-payment-id")

    def get_payment_details(self, payment_id: int) -> Optional[Dict[str, Any]]:
        return self._read("get-payment-details", uint_cv(payment_id))

    def get_creator_earnings(self, creator: str) -> int:
        return self._read("get-creator-earnings", standard_principal_cv(creator))

    def get_creator_token_earnings(self, creator: str, token_id: int) -> int:
        return self._read("get-creator-token-earnings", standard_principal_cv(creator), uint_cv(token_id))

    def direct_payment(
        self,
        recipient: str,
        amount: int,
        payment_type: str,
        context: str,
        on_result: ResultCallback = None,
        on_cancel: CancelCallback = None
    ) -> SubmitOutcome:
        """Pay a creator directly; the spend is capped at ``amount``."""
        payer = self._require_sender("send a payment")
        return self.caller.submit_call(
            self.contract_name,
            "direct-payment",
            [
                standard_principal_cv(recipient),
                uint_cv(amount),
                string_utf8_cv(payment_type),
                string_utf8_cv(context),
            ],
            post_conditions=[max_spend(payer, amount)],
            on_result=on_result,
            on_cancel=on_cancel,
        )


def check_nft_ownership(nft: NFTOwnershipContract, token_id: int) -> bool:
    """
    Whether the signed-in user owns a token.

    Returns False when nobody is signed in or the lookup fails.
    """
    address = nft.caller.current_address()
    if not address:
        return False
    try:
        return nft.get_owner(token_id) == address
    except SihiriError as e:
        logger.error(f"Error checking NFT ownership: {e}")
        return False
