"""
Pinning backends for the content-addressed store.

This module provides an abstraction over the services that accept raw
bytes and return a content identifier: Pinata, a plain IPFS HTTP API node,
nft.storage, and an in-process store for tests and local development.
"""
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

import requests

from ..config import StorageSettings, validate_url
from ..exceptions import ConfigurationError, DecodeError, NetworkError, StorageUnavailable
from ..http import create_session, raise_for_server_error, send
from ..utils import compute_cid

logger = logging.getLogger(__name__)

PINATA_API_URL = "https://api.pinata.cloud"
NFT_STORAGE_API_URL = "https://api.nft.storage"


@dataclass
class AddResult:
    """
    What a backend reports after storing a payload.

    Shared across backend implementations so the content store can treat
    them uniformly.
    """
    cid: str
    size: int = 0
    duplicate: bool = False


class StorageBackend(ABC):
    """
    Abstract base class for pinning backends.

    Every backend must return the same identifier for the same bytes; the
    content store relies on that to recognise duplicate uploads.
    """

    name = "abstract"

    @abstractmethod
    def add(self, data: bytes, filename: str = "upload") -> AddResult:
        """
        Store and pin a payload.

        Args:
            data: Raw bytes to store
            filename: Name reported to the service

        Returns:
            The identifier assigned to the payload

        Raises:
            StorageUnavailable: If the service rejects our credentials
            NetworkError: If the service cannot be reached or fails
            DecodeError: If the service response is malformed
        """
        pass

    def is_available(self) -> bool:
        """Whether the backend is ready to accept uploads."""
        return True

    def cat(self, cid: str) -> Optional[bytes]:
        """Return locally held content, or None when it must come from a gateway."""
        return None

    def close(self) -> None:
        """Close any open connections or resources."""
        pass


def _check_response(response: requests.Response, service: str) -> dict:
    raise_for_server_error(response, f"{service} upload")
    if response.status_code in (401, 403):
        raise StorageUnavailable(
            f"{service} rejected the configured credentials (HTTP {response.status_code})",
            error_code="CREDENTIALS_REJECTED",
        )
    if response.status_code >= 400:
        raise NetworkError(
            f"{service} upload failed: HTTP {response.status_code}",
            status_code=response.status_code,
            error_code="UPLOAD_FAILED",
        )
    content_type = response.headers.get('Content-Type', '')
    if 'application/json' not in content_type:
        logger.warning(f"Unexpected Content-Type from {service}: {content_type} (expected application/json)")
    try:
        result = response.json()
    except ValueError as e:
        raise DecodeError(f"Invalid JSON response from {service}: {e}") from e
    if not isinstance(result, dict):
        raise DecodeError(f"Unexpected response from {service}: {result!r}")
    return result


class PinataBackend(StorageBackend):
    """Pins files through the Pinata API."""

    name = "pinata"

    def __init__(self, api_key: str, secret_key: str, api_url: str = PINATA_API_URL,
                 timeout: int = 30, session: Optional[requests.Session] = None):
        if not api_key or not secret_key:
            raise ConfigurationError("Pinata API key and secret key are required")
        self.api_url = validate_url("pinata_api_url", api_url).rstrip('/')
        self.timeout = timeout
        self.session = session or create_session()
        self.session.headers.update({
            "pinata_api_key": api_key,
            "pinata_secret_api_key": secret_key,
        })

    def add(self, data: bytes, filename: str = "upload") -> AddResult:
        response = send(
            self.session,
            "POST",
            f"{self.api_url}/pinning/pinFileToIPFS",
            files={"file": (filename, data, "application/octet-stream")},
            timeout=self.timeout,
        )
        result = _check_response(response, "Pinata")
        if "IpfsHash" not in result:
            raise DecodeError(f"Missing IpfsHash in Pinata response: {result}")
        return AddResult(
            cid=result["IpfsHash"],
            size=int(result.get("PinSize") or len(data)),
            duplicate=bool(result.get("isDuplicate", False)),
        )

    def close(self) -> None:
        self.session.close()


class IpfsNodeBackend(StorageBackend):
    """Adds and pins files through an IPFS node's HTTP API (``/api/v0/add``)."""

    name = "ipfs"

    def __init__(self, api_url: str, timeout: int = 30, session: Optional[requests.Session] = None):
        self.api_url = validate_url("ipfs_api_url", api_url).rstrip('/')
        self.timeout = timeout
        self.session = session or create_session()

    def add(self, data: bytes, filename: str = "upload") -> AddResult:
        response = send(
            self.session,
            "POST",
            f"{self.api_url}/api/v0/add",
            files={"file": (filename, data, "application/octet-stream")},
            params={"pin": "true", "wrap-with-directory": "false"},
            timeout=self.timeout,
        )
        result = _check_response(response, "IPFS node")
        if "Hash" not in result:
            raise DecodeError(f"Missing Hash in IPFS add response: {result}")
        return AddResult(cid=result["Hash"], size=int(result.get("Size") or len(data)))

    def close(self) -> None:
        self.session.close()


class NFTStorageBackend(StorageBackend):
    """Uploads files to nft.storage."""

    name = "nft.storage"

    def __init__(self, token: str, api_url: str = NFT_STORAGE_API_URL,
                 timeout: int = 30, session: Optional[requests.Session] = None):
        if not token:
            raise ConfigurationError("nft.storage requires an API token")
        self.api_url = validate_url("nft_storage_api_url", api_url).rstrip('/')
        self.timeout = timeout
        self.session = session or create_session()
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    def add(self, data: bytes, filename: str = "upload") -> AddResult:
        response = send(
            self.session,
            "POST",
            f"{self.api_url}/upload",
            data=data,
            headers={"Content-Type": "application/octet-stream"},
            timeout=self.timeout,
        )
        result = _check_response(response, "nft.storage")
        value = result.get("value") or {}
        if not result.get("ok") or "cid" not in value:
            raise DecodeError(f"Missing cid in nft.storage response: {result}")
        return AddResult(cid=value["cid"], size=int(value.get("size") or len(data)))

    def close(self) -> None:
        self.session.close()


class MemoryBackend(StorageBackend):
    """
    In-process content store.

    Identifiers are computed locally from the payload digest, so identical
    bytes always map to the same identifier. Nothing leaves the process.
    """

    name = "memory"

    def __init__(self):
        self._objects: Dict[str, bytes] = {}
        self._lock = threading.RLock()

    def add(self, data: bytes, filename: str = "upload") -> AddResult:
        cid = compute_cid(data)
        with self._lock:
            duplicate = cid in self._objects
            self._objects[cid] = bytes(data)
        logger.debug(f"Stored {len(data)} bytes in memory as {cid}")
        return AddResult(cid=cid, size=len(data), duplicate=duplicate)

    def cat(self, cid: str) -> Optional[bytes]:
        with self._lock:
            return self._objects.get(cid)

    def __contains__(self, cid: str) -> bool:
        with self._lock:
            return cid in self._objects

    def __len__(self) -> int:
        with self._lock:
            return len(self._objects)


def create_backend(settings: StorageSettings) -> Optional[StorageBackend]:
    """
    Build the backend selected by the settings.

    Pinata without credentials falls back to the IPFS node API. Any other
    initialization failure is logged and yields None; uploads then fail
    with StorageUnavailable.

    Returns:
        The backend, or None if it cannot be initialized
    """
    service = settings.pinning_service
    try:
        if service == "memory":
            return MemoryBackend()
        if service == "pinata":
            if settings.has_pinata_credentials:
                return PinataBackend(settings.pinata_api_key, settings.pinata_secret_key, timeout=settings.timeout)
            logger.warning("Pinata credentials not configured, falling back to IPFS node API at %s",
                           settings.ipfs_api_url)
            return IpfsNodeBackend(settings.ipfs_api_url, timeout=settings.timeout)
        if service == "ipfs":
            return IpfsNodeBackend(settings.ipfs_api_url, timeout=settings.timeout)
        if service == "nft.storage":
            return NFTStorageBackend(settings.nft_storage_token, timeout=settings.timeout)
        raise ConfigurationError(f"Unknown pinning service: {service!r}")
    except ConfigurationError as e:
        logger.error(f"Error initializing storage client: {e}")
        return None
