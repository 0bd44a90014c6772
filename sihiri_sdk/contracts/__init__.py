"""
Contract call layer for the SiHiRi SDK.

Clarity values, their codec, post-conditions, and the ContractCaller that
dispatches read-only calls to the node and state-changing calls to the
user's wallet.
"""
from .adapter import (
    CallMode, ContractCallRequest, ContractCaller, SubmitOutcome, PAYMENT_BEARING_FUNCTIONS,
)
from .codec import cv_to_value, deserialize_cv, hex_to_value
from .functions import (
    IdentityContract, MarketplaceContract, NFTOwnershipContract, RoyaltyContract,
    check_nft_ownership,
)
from .post_conditions import (
    FungibleConditionCode, PostConditionMode, STXPostCondition,
    make_standard_stx_post_condition, max_spend,
)
from .values import (
    ClarityType, ClarityValue,
    bool_cv, buffer_cv, contract_principal_cv, false_cv, int_cv, list_cv, none_cv,
    optional_cv, principal_cv, response_err_cv, response_ok_cv, some_cv,
    standard_principal_cv, string_ascii_cv, string_utf8_cv, true_cv, tuple_cv, uint_cv,
)

__all__ = [
    "CallMode",
    "ContractCallRequest",
    "ContractCaller",
    "SubmitOutcome",
    "PAYMENT_BEARING_FUNCTIONS",
    "cv_to_value",
    "deserialize_cv",
    "hex_to_value",
    "IdentityContract",
    "MarketplaceContract",
    "NFTOwnershipContract",
    "RoyaltyContract",
    "check_nft_ownership",
    "FungibleConditionCode",
    "PostConditionMode",
    "STXPostCondition",
    "make_standard_stx_post_condition",
    "max_spend",
    "ClarityType",
    "ClarityValue",
    "bool_cv",
    "buffer_cv",
    "contract_principal_cv",
    "false_cv",
    "int_cv",
    "list_cv",
    "none_cv",
    "optional_cv",
    "principal_cv",
    "response_err_cv",
    "response_ok_cv",
    "some_cv",
    "standard_principal_cv",
    "string_ascii_cv",
    "string_utf8_cv",
    "true_cv",
    "tuple_cv",
    "uint_cv",
]
