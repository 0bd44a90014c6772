"""
ContractCaller - read-only calls and wallet-signed contract calls.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, Optional, Sequence, Tuple, TYPE_CHECKING

import requests

from .codec import hex_to_value
from .post_conditions import PostConditionMode, STXPostCondition
from .values import ClarityValue
from ..exceptions import (
    BroadcastError, ContractCallError, DecodeError, NotFound, PostConditionError,
)
from ..http import create_session, raise_for_server_error, send
from ..models import BroadcastReceipt, ContractReference, NetworkProfile
from ..registry import ContractRegistry, MARKETPLACE, ROYALTY
from ..wallet import WalletConnector

if TYPE_CHECKING:
    from ..identity.session import SessionManager

logger = logging.getLogger(__name__)

# Functions that move the caller's STX and therefore need a spending cap
PAYMENT_BEARING_FUNCTIONS: FrozenSet[Tuple[str, str]] = frozenset({
    (MARKETPLACE, "buy-listing"),
    (MARKETPLACE, "place-bid"),
    (ROYALTY, "direct-payment"),
})


class CallMode(str, Enum):
    READ_ONLY = "read-only"
    STATE_CHANGING = "state-changing"


@dataclass(frozen=True)
class ContractCallRequest:
    """A fully resolved contract invocation"""
    contract: ContractReference
    function_name: str
    arguments: Tuple[ClarityValue, ...]
    sender: Optional[str]
    mode: CallMode
    network: NetworkProfile
    post_conditions: Tuple[STXPostCondition, ...] = ()

    @property
    def post_condition_mode(self) -> PostConditionMode:
        return PostConditionMode.DENY if self.post_conditions else PostConditionMode.ALLOW

    def to_payload(self) -> Dict[str, Any]:
        """Render the request in the shape wallets expect"""
        return {
            "contractAddress": self.contract.address,
            "contractName": self.contract.on_chain_name,
            "functionName": self.function_name,
            "functionArgs": [arg.to_hex() for arg in self.arguments],
            "postConditions": [pc.to_hex() for pc in self.post_conditions],
            "postConditionMode": int(self.post_condition_mode),
            "anchorMode": "any",
            "network": self.network.name.value,
            "stxAddress": self.sender,
        }


@dataclass(frozen=True)
class SubmitOutcome:
    """Either a broadcast receipt or a cancellation, never both"""
    receipt: Optional[BroadcastReceipt] = None
    cancelled: bool = False

    def __post_init__(self):
        if self.cancelled == (self.receipt is not None):
            raise ValueError("SubmitOutcome must hold exactly one of receipt or cancellation")

    @classmethod
    def broadcast(cls, receipt: BroadcastReceipt) -> "SubmitOutcome":
        return cls(receipt=receipt)

    @classmethod
    def cancellation(cls) -> "SubmitOutcome":
        return cls(cancelled=True)


class ContractCaller:
    """
    Builds typed contract calls and dispatches them.

    Read-only calls go straight to the node API. State-changing calls are
    handed to the wallet, which blocks until the user approves or rejects;
    no timeout is enforced here.
    """

    def __init__(
        self,
        registry: ContractRegistry,
        network: NetworkProfile,
        session: Optional["SessionManager"] = None,
        wallet: Optional[WalletConnector] = None,
        http_session: Optional[requests.Session] = None,
        timeout: int = 30,
        logger: Optional[logging.Logger] = None
    ):
        """
        Args:
            registry: Contract registry used to resolve logical names
            network: Profile of the network calls are sent to
            session: Optional session manager providing the caller's address
            wallet: Wallet connector for state-changing calls
            http_session: Optional requests session (one is created otherwise)
            timeout: Socket timeout for node requests in seconds
            logger: Optional logger instance
        """
        self.registry = registry
        self.network = network
        self.session = session
        self.wallet = wallet
        self.http = http_session or create_session()
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self.api_url = network.api_url.rstrip('/')

    @property
    def network_name(self) -> str:
        return self.network.name.value

    def resolve(self, logical_name: str) -> ContractReference:
        return self.registry.resolve(logical_name, self.network_name)

    def current_address(self) -> Optional[str]:
        if self.session is None:
            return None
        return self.session.get_address(self.network_name)

    def call_read_only(
        self,
        logical_name: str,
        function_name: str,
        args: Sequence[ClarityValue] = (),
        sender: Optional[str] = None
    ) -> Any:
        """
        Call a read-only contract function and decode its result.

        Args:
            logical_name: Logical contract name (e.g. "nftOwnership")
            function_name: Clarity function name
            args: Function arguments
            sender: Sender override; defaults to the signed-in address, then
                the contract's own address

        Returns:
            The decoded result as plain Python data

        Raises:
            ConfigurationError: If the contract is not configured
            NetworkError: If the node cannot be reached (not retried)
            NotFound: If the node does not know the contract or function
            DecodeError: If the response cannot be decoded
            ContractCallError: If the call fails or returns (err ...)
        """
        request = self.build_call(logical_name, function_name, args, sender=sender, mode=CallMode.READ_ONLY)
        contract = request.contract
        url = (
            f"{self.api_url}/v2/contracts/call-read/"
            f"{contract.address}/{contract.on_chain_name}/{function_name}"
        )
        body = {
            "sender": request.sender,
            "arguments": [arg.to_hex() for arg in request.arguments],
        }
        self.logger.debug(f"Read-only call {contract.contract_id}::{function_name} as {request.sender}")

        response = send(self.http, "POST", url, json=body, timeout=self.timeout)
        raise_for_server_error(response, f"Read-only call {contract.logical_name}.{function_name}")
        if response.status_code == 404:
            raise NotFound(
                f"Contract function {contract.contract_id}::{function_name} not found",
                error_code="FUNCTION_NOT_FOUND",
            )
        if response.status_code >= 400:
            raise ContractCallError(
                f"Read-only call {contract.logical_name}.{function_name} rejected: "
                f"HTTP {response.status_code} {response.text[:200]}",
                error_code="CALL_REJECTED",
            )

        try:
            result = response.json()
        except ValueError as e:
            raise DecodeError(f"Invalid JSON from node: {e}") from e
        if not isinstance(result, dict) or "okay" not in result:
            raise DecodeError(f"Unexpected read-only response shape: {result!r}")

        if not result["okay"]:
            cause = result.get("cause", "unknown cause")
            self.logger.error(f"Error calling {logical_name}.{function_name}: {cause}")
            raise ContractCallError(f"Read-only call failed: {cause}", error_code="CALL_FAILED")

        if not isinstance(result.get("result"), str):
            raise DecodeError(f"Read-only response has no hex result: {result.get('result')!r}")
        return hex_to_value(result["result"])

    def build_call(
        self,
        logical_name: str,
        function_name: str,
        args: Sequence[ClarityValue] = (),
        post_conditions: Iterable[STXPostCondition] = (),
        sender: Optional[str] = None,
        mode: CallMode = CallMode.STATE_CHANGING
    ) -> ContractCallRequest:
        """
        Resolve and validate a contract call without sending it.

        Raises:
            ConfigurationError: If the contract is not configured
            PostConditionError: If the post-conditions do not fit the call
            TypeError: If an argument is not a Clarity value
        """
        contract = self.resolve(logical_name)
        arguments = tuple(args)
        for index, arg in enumerate(arguments):
            if not isinstance(arg, ClarityValue):
                raise TypeError(
                    f"Argument {index} of {logical_name}.{function_name} must be a Clarity value, "
                    f"got {type(arg).__name__}"
                )
        conditions = tuple(post_conditions)

        if mode == CallMode.READ_ONLY:
            if conditions:
                raise PostConditionError("Read-only calls cannot carry post-conditions")
            sender = sender or self.current_address() or contract.address
        else:
            sender = sender or self.current_address()
            if (logical_name, function_name) in PAYMENT_BEARING_FUNCTIONS:
                if not sender:
                    raise PostConditionError(
                        f"{logical_name}.{function_name} moves STX and needs a known sender "
                        f"to cap the amount spent",
                        error_code="MISSING_SENDER",
                    )
                # the cap must bind the paying principal, not a third party
                if not any(pc.bounds_outflow and pc.principal == sender for pc in conditions):
                    raise PostConditionError(
                        f"{logical_name}.{function_name} moves STX and requires a post-condition "
                        f"capping the amount {sender} spends",
                        error_code="MISSING_POST_CONDITION",
                    )

        return ContractCallRequest(
            contract=contract,
            function_name=function_name,
            arguments=arguments,
            sender=sender,
            mode=mode,
            network=self.network,
            post_conditions=conditions,
        )

    def submit_call(
        self,
        logical_name: str,
        function_name: str,
        args: Sequence[ClarityValue] = (),
        post_conditions: Iterable[STXPostCondition] = (),
        on_result: Optional[Callable[[BroadcastReceipt], Any]] = None,
        on_cancel: Optional[Callable[[], Any]] = None
    ) -> SubmitOutcome:
        """
        Send a state-changing call through the wallet's signing flow.

        Blocks until the user acts in the wallet. On approval the signed
        transaction is broadcast and ``on_result`` receives the receipt; on
        rejection ``on_cancel`` is called once and nothing is sent.

        Returns:
            The outcome (receipt or cancellation)

        Raises:
            ConfigurationError: If the contract is not configured
            PostConditionError: If a payment-bearing call lacks a spending cap
            ValueError: If no wallet connector is configured
            BroadcastError: If the node rejects the signed transaction
            NetworkError: If the node cannot be reached
        """
        request = self.build_call(logical_name, function_name, args, post_conditions)
        if self.wallet is None:
            raise ValueError("A wallet connector is required for state-changing calls")

        self.logger.info(f"Requesting wallet approval for {request.contract.contract_id}::{function_name}")
        response = self.wallet.open_contract_call(request.to_payload())

        if not response.approved:
            self.logger.info(f"Transaction canceled: {logical_name}.{function_name}")
            if on_cancel is not None:
                on_cancel()
            return SubmitOutcome.cancellation()

        if response.tx_raw and not response.tx_id:
            tx_id = self.broadcast(response.tx_raw)
        elif response.tx_id:
            tx_id = response.tx_id
        else:
            raise DecodeError("Wallet approved the call but returned no transaction")

        receipt = BroadcastReceipt(
            tx_id=tx_id,
            tx_raw=response.tx_raw,
            contract_id=request.contract.contract_id,
            function_name=function_name,
            network=self.network.name,
        )
        self.logger.info(f"Transaction broadcast: {receipt.tx_id}")
        if on_result is not None:
            on_result(receipt)
        return SubmitOutcome.broadcast(receipt)

    def broadcast(self, tx_raw: str) -> str:
        """
        Broadcast a signed transaction.

        Returns:
            The transaction id reported by the node

        Raises:
            DecodeError: If the transaction is not valid hex
            BroadcastError: If the node rejects the transaction
            NetworkError: If the node cannot be reached
        """
        hex_body = tx_raw[2:] if tx_raw.startswith("0x") else tx_raw
        try:
            payload = bytes.fromhex(hex_body)
        except ValueError as e:
            raise DecodeError(f"Signed transaction is not valid hex: {e}") from e

        response = send(
            self.http,
            "POST",
            f"{self.api_url}/v2/transactions",
            data=payload,
            headers={"Content-Type": "application/octet-stream"},
            timeout=self.timeout,
        )
        raise_for_server_error(response, "Transaction broadcast")
        if response.status_code >= 400:
            try:
                detail = response.json()
            except ValueError:
                detail = None
            if not isinstance(detail, dict):
                detail = {"error": response.text[:200]}
            reason = detail.get("reason") or detail.get("error") or "unknown"
            self.logger.error(f"Failed to broadcast transaction: {reason}")
            raise BroadcastError(
                f"Transaction rejected: {reason}",
                status_code=response.status_code,
                error_code="TX_REJECTED",
                details=detail,
            )

        try:
            tx_id = response.json()
        except ValueError:
            tx_id = response.text.strip()
        if not isinstance(tx_id, str) or not tx_id:
            raise DecodeError(f"Unexpected broadcast response: {response.text[:200]!r}")
        return tx_id.strip('"')
