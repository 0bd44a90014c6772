"""
Exceptions for the SiHiRi SDK.
"""
from typing import Any, Dict, List, Optional


class SihiriError(Exception):
    """Base exception for SiHiRi SDK errors"""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(SihiriError):
    """Raised when a network or contract mapping is missing or invalid."""
    pass


class NetworkError(SihiriError):
    """Raised when a node, gateway or pinning service cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code


class BroadcastError(NetworkError):
    """Raised when the node rejects a signed transaction."""
    pass


class StorageUnavailable(SihiriError):
    """Raised when the content storage client was never initialized."""
    pass


class DecodeError(SihiriError):
    """Raised when a response or document cannot be decoded."""
    pass


class UnsupportedSchemaVersion(DecodeError):
    """Raised when a metadata document uses a newer schema than this reader knows."""

    def __init__(self, version: Any, supported: int):
        super().__init__(
            f"Metadata schema version {version} is newer than supported version {supported}",
            error_code="UNSUPPORTED_SCHEMA_VERSION",
            details={"version": version, "supported": supported},
        )
        self.version = version
        self.supported = supported


class NotFound(SihiriError):
    """Raised when a requested identifier is absent."""
    pass


class ValidationError(SihiriError):
    """
    Raised when caller input is invalid.

    All violations are collected in ``errors`` so they can be reported
    together rather than one at a time.
    """

    def __init__(self, errors: List[Dict[str, str]], message: Optional[str] = None):
        self.errors = list(errors)
        if message is None:
            summary = "; ".join(f"{e['field']}: {e['message']}" for e in self.errors)
            message = f"Validation failed ({len(self.errors)} error(s)): {summary}"
        super().__init__(message, error_code="VALIDATION_FAILED", details={"errors": self.errors})

    @property
    def fields(self) -> List[str]:
        """Names of the offending fields, in reporting order."""
        return [e["field"] for e in self.errors]


class PostConditionError(SihiriError, ValueError):
    """Raised when a payment-bearing call is built without a post-condition."""
    pass


class ContractCallError(SihiriError):
    """Raised when a read-only call returns an error response."""

    def __init__(self, message: str, value: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.value = value


class AuthenticationError(SihiriError):
    """Raised when a wallet auth response cannot be accepted."""
    pass
