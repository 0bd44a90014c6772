"""
SiHiRi SDK - Python client for the SiHiRi creative-works marketplace on Stacks.
"""
from .client import SihiriClient
from .config import NetworkConfig, StorageSettings
from .contracts import ContractCaller, SubmitOutcome
from .exceptions import (
    AuthenticationError,
    BroadcastError,
    ConfigurationError,
    ContractCallError,
    DecodeError,
    NetworkError,
    NotFound,
    PostConditionError,
    SihiriError,
    StorageUnavailable,
    UnsupportedSchemaVersion,
    ValidationError,
)
from .identity import SessionManager, SessionStore, UserSession
from .metadata import assemble, parse_metadata
from .models import BroadcastReceipt, MediaType, NetworkName, NFTMetadata
from .registry import ContractRegistry
from .storage import ContentStore
from .version import __version__
from .wallet import AppDetails, WalletConnector, WalletResponse

__all__ = [
    "SihiriClient",
    "NetworkConfig",
    "StorageSettings",
    "ContractCaller",
    "SubmitOutcome",
    "ContractRegistry",
    "ContentStore",
    "SessionManager",
    "SessionStore",
    "UserSession",
    "assemble",
    "parse_metadata",
    "BroadcastReceipt",
    "MediaType",
    "NetworkName",
    "NFTMetadata",
    "AppDetails",
    "WalletConnector",
    "WalletResponse",
    "SihiriError",
    "AuthenticationError",
    "BroadcastError",
    "ConfigurationError",
    "ContractCallError",
    "DecodeError",
    "NetworkError",
    "NotFound",
    "PostConditionError",
    "StorageUnavailable",
    "UnsupportedSchemaVersion",
    "ValidationError",
    "__version__",
]
