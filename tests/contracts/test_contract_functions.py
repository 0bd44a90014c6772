"""
Tests for the typed contract wrappers.
"""
import pytest
from unittest.mock import MagicMock

from sihiri_sdk.contracts.functions import (
    IdentityContract,
    MarketplaceContract,
    NFTOwnershipContract,
    RoyaltyContract,
    check_nft_ownership,
)
from sihiri_sdk.contracts.adapter import ContractCaller
from sihiri_sdk.contracts.post_conditions import max_spend
from sihiri_sdk.contracts.values import (
    bool_cv,
    contract_principal_cv,
    list_cv,
    none_cv,
    response_ok_cv,
    some_cv,
    standard_principal_cv,
    string_ascii_cv,
    string_utf8_cv,
    true_cv,
    tuple_cv,
    uint_cv,
)
from sihiri_sdk.exceptions import NetworkError

LOCAL_API = "http://localhost:3999"
DEPLOYER = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
USER_TESTNET = "ST8H248H248H248H248H248H248H248H26RCPJ4T"


def read_url(contract, function):
    return f"{LOCAL_API}/v2/contracts/call-read/{DEPLOYER}/{contract}/{function}"


def ok(cv):
    return {"okay": True, "result": response_ok_cv(cv).to_hex()}


class TestNFTOwnership:

    def test_get_token_info(self, caller, requests_mock):
        info = tuple_cv({
            "creator": standard_principal_cv(USER_TESTNET),
            "metadata-url": string_utf8_cv("ipfs://QmMeta"),
            "royalty-percent": uint_cv(10),
            "transferable": true_cv(),
        })
        requests_mock.post(read_url("nft-ownership", "get-token-info"), json=ok(some_cv(info)))

        result = NFTOwnershipContract(caller).get_token_info(7)

        assert result == {
            "creator": USER_TESTNET,
            "metadata-url": "ipfs://QmMeta",
            "royalty-percent": 10,
            "transferable": True,
        }
        assert requests_mock.last_request.json()["arguments"] == [uint_cv(7).to_hex()]

    def test_get_metadata_url_reads_token_uri(self, caller, requests_mock):
        requests_mock.post(read_url("nft-ownership", "get-token-uri"),
                           json=ok(some_cv(string_utf8_cv("ipfs://QmMeta"))))
        assert NFTOwnershipContract(caller).get_metadata_url(1) == "ipfs://QmMeta"

    def test_total_supply(self, caller, requests_mock):
        requests_mock.post(read_url("nft-ownership", "get-last-token-id"), json=ok(uint_cv(12)))
        assert NFTOwnershipContract(caller).get_total_supply() == 12

    def test_tokens_by_owner(self, caller, requests_mock):
        requests_mock.post(read_url("nft-ownership", "get-tokens-by-owner"),
                           json=ok(list_cv([uint_cv(1), uint_cv(3)])))
        assert NFTOwnershipContract(caller).get_tokens_by_owner(USER_TESTNET) == [1, 3]

    def test_mint_arguments(self, caller, wallet):
        NFTOwnershipContract(caller).mint("ipfs://QmMeta", 10)

        payload = wallet.payloads[0]
        assert payload["functionName"] == "mint"
        assert payload["functionArgs"] == [
            string_utf8_cv("ipfs://QmMeta").to_hex(),
            uint_cv(10).to_hex(),
            bool_cv(True).to_hex(),
        ]
        assert payload["postConditions"] == []


class TestOwnershipCheck:

    def test_owner_matches(self, caller, requests_mock):
        requests_mock.post(read_url("nft-ownership", "get-owner"),
                           json=ok(some_cv(standard_principal_cv(USER_TESTNET))))
        assert check_nft_ownership(NFTOwnershipContract(caller), 1) is True

    def test_owner_differs(self, caller, requests_mock):
        requests_mock.post(read_url("nft-ownership", "get-owner"),
                           json=ok(some_cv(standard_principal_cv(DEPLOYER))))
        assert check_nft_ownership(NFTOwnershipContract(caller), 1) is False

    def test_unminted_token(self, caller, requests_mock):
        requests_mock.post(read_url("nft-ownership", "get-owner"), json=ok(none_cv()))
        assert check_nft_ownership(NFTOwnershipContract(caller), 1) is False

    def test_lookup_failure_is_false(self, caller, requests_mock):
        requests_mock.post(read_url("nft-ownership", "get-owner"), status_code=500)
        assert check_nft_ownership(NFTOwnershipContract(caller), 1) is False

    def test_signed_out_is_false_without_io(self, registry, local_profile, signed_out_session, requests_mock):
        caller = ContractCaller(registry, local_profile, session=signed_out_session)
        assert check_nft_ownership(NFTOwnershipContract(caller), 1) is False
        assert requests_mock.call_count == 0


class TestIdentity:

    def test_username_available(self, caller, requests_mock):
        requests_mock.post(read_url("identity", "is-username-available"), json=ok(true_cv()))
        assert IdentityContract(caller).is_username_available("artist") is True
        assert requests_mock.last_request.json()["arguments"] == [string_ascii_cv("artist").to_hex()]

    def test_is_creator_verified_calls_is_verified(self, caller, requests_mock):
        requests_mock.post(read_url("identity", "is-verified"), json=ok(bool_cv(False)))
        assert IdentityContract(caller).is_creator_verified(USER_TESTNET) is False

    def test_register_profile_arguments(self, caller, wallet):
        IdentityContract(caller).register_profile(
            "artist", "The Artist", "bio", "ipfs://QmAvatar", "https://artist.example",
            social_links=[{"platform": "x", "url": "https://x.example/artist"}],
            creation_categories=["painting"],
        )
        args = wallet.payloads[0]["functionArgs"]
        assert len(args) == 7
        assert args[5] == list_cv([tuple_cv({
            "platform": string_utf8_cv("x"),
            "url": string_utf8_cv("https://x.example/artist"),
        })]).to_hex()
        assert args[6] == list_cv([string_utf8_cv("painting")]).to_hex()


class TestMarketplace:

    def test_create_listing_passes_nft_contract(self, caller, wallet):
        MarketplaceContract(caller).create_listing(3, 1_000_000, 5000)
        args = wallet.payloads[0]["functionArgs"]
        assert args[0] == contract_principal_cv(DEPLOYER, "nft-ownership").to_hex()
        assert args[1:] == [uint_cv(3).to_hex(), uint_cv(1_000_000).to_hex(), uint_cv(5000).to_hex()]

    def test_buy_listing_caps_spend(self, caller, wallet):
        MarketplaceContract(caller).buy_listing(4, 2_500_000)
        payload = wallet.payloads[0]
        assert payload["functionName"] == "buy-listing"
        assert payload["postConditions"] == [max_spend(USER_TESTNET, 2_500_000).to_hex()]
        assert payload["functionArgs"] == [
            uint_cv(4).to_hex(),
            contract_principal_cv(DEPLOYER, "nft-ownership").to_hex(),
            contract_principal_cv(DEPLOYER, "royalty").to_hex(),
        ]

    def test_buy_listing_requires_session(self, registry, local_profile, signed_out_session, wallet):
        caller = ContractCaller(registry, local_profile, session=signed_out_session, wallet=wallet)
        with pytest.raises(ValueError):
            MarketplaceContract(caller).buy_listing(4, 2_500_000)
        assert wallet.payloads == []

    def test_is_token_listed(self, caller, requests_mock):
        requests_mock.post(read_url("marketplace", "is-token-listed"), json=ok(true_cv()))
        assert MarketplaceContract(caller).is_token_listed(3) is True


class TestRoyalty:

    def test_direct_payment_caps_spend(self, caller, wallet):
        on_result = MagicMock()
        outcome = RoyaltyContract(caller).direct_payment(DEPLOYER, 750_000, "tip", "thanks",
                                                         on_result=on_result)
        payload = wallet.payloads[0]
        assert payload["functionName"] == "direct-payment"
        assert payload["postConditions"] == [max_spend(USER_TESTNET, 750_000).to_hex()]
        on_result.assert_called_once_with(outcome.receipt)

    def test_creator_earnings(self, caller, requests_mock):
        requests_mock.post(read_url("royalty", "get-creator-earnings"), json=ok(uint_cv(123)))
        assert RoyaltyContract(caller).get_creator_earnings(USER_TESTNET) == 123

    def test_network_error_propagates(self, caller, requests_mock):
        requests_mock.post(read_url("royalty", "get-last-payment-id"), status_code=502)
        with pytest.raises(NetworkError):
            RoyaltyContract(caller).get_last_payment_id()
