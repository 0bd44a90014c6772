"""
Content-addressed store: uploads, gateway URLs and metadata retrieval.
"""
import json
import logging
import threading
from typing import Any, Optional, Union

import pydantic
import requests
from cachetools import LRUCache

from .._rate_limited_log import rate_limited_log
from ..config import StorageSettings, validate_url
from ..exceptions import DecodeError, NetworkError, NotFound, StorageUnavailable
from ..http import create_session, send
from ..metadata import parse_metadata
from ..models import MirrorReceipt, NFTMetadata
from ..utils import canonical_json, sha256_hex, strip_ipfs_prefix, to_ipfs_uri
from .backends import StorageBackend, create_backend
from .mirror import ArweaveMirror, arweave_url

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY = "https://ipfs.io/ipfs/"
DEFAULT_ARWEAVE_GATEWAY = "https://arweave.net/"


class ContentStore:
    """
    Uploads payloads to the configured pinning backend and reads them back
    through a public gateway.

    Identical payloads map to the same identifier; a payload already stored
    through this instance is not uploaded again.
    """

    def __init__(
        self,
        backend: Optional[StorageBackend],
        gateway: str = DEFAULT_GATEWAY,
        arweave_gateway: str = DEFAULT_ARWEAVE_GATEWAY,
        mirror: Optional[ArweaveMirror] = None,
        timeout: int = 30,
        http_session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.backend = backend
        validate_url("ipfs_gateway", gateway)
        validate_url("arweave_gateway", arweave_gateway)
        self.gateway = gateway if gateway.endswith("/") else gateway + "/"
        self.arweave_gateway = arweave_gateway if arweave_gateway.endswith("/") else arweave_gateway + "/"
        self.mirror_client = mirror
        self.timeout = timeout
        self.session = http_session or create_session()
        self.logger = logger or logging.getLogger(__name__)

        # payload sha256 -> cid
        self._known = LRUCache(maxsize=1024)
        self._known_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Optional[StorageSettings] = None, **kwargs) -> "ContentStore":
        """Build a store (backend and optional mirror) from storage settings."""
        settings = settings or StorageSettings.from_env()
        backend = create_backend(settings)

        mirror = None
        if settings.arweave_mirror and settings.arweave_upload_url:
            mirror = ArweaveMirror(
                settings.arweave_upload_url,
                gateway=settings.arweave_gateway,
                timeout=settings.timeout,
            )
        elif settings.arweave_mirror:
            logger.info("Arweave mirroring enabled but no upload URL configured; mirroring disabled")

        return cls(
            backend,
            gateway=settings.ipfs_gateway,
            arweave_gateway=settings.arweave_gateway,
            mirror=mirror,
            timeout=settings.timeout,
            **kwargs,
        )

    # ------------------------------------------------------------------ #
    # Uploads
    # ------------------------------------------------------------------ #

    def is_duplicate(self, data: bytes) -> bool:
        """Whether these exact bytes were already stored through this instance."""
        digest = sha256_hex(data)
        with self._known_lock:
            return digest in self._known

    def put(self, data: bytes, filename: str = "upload", mirror: bool = True) -> str:
        """
        Store a payload and return its content identifier.

        Args:
            data: Raw bytes to store
            filename: Name reported to the pinning service
            mirror: Replicate to Arweave after a fresh upload

        Returns:
            The content identifier (without ``ipfs://``)

        Raises:
            StorageUnavailable: If no backend is configured
            NetworkError: If the upload fails
        """
        if self.backend is None or not self.backend.is_available():
            raise StorageUnavailable("IPFS client not initialized", error_code="NO_BACKEND")

        digest = sha256_hex(data)
        with self._known_lock:
            known = self._known.get(digest)
        if known is not None:
            self.logger.debug(f"Skipping upload of {filename}: already stored as {known}")
            return known

        result = self.backend.add(data, filename=filename)
        with self._known_lock:
            self._known[digest] = result.cid
        self.logger.info(f"File uploaded to IPFS with CID: {result.cid}")

        if mirror and self.mirror_client is not None:
            self.mirror(data, result.cid)
        return result.cid

    def put_json(self, document: Union[dict, pydantic.BaseModel], filename: str = "metadata.json") -> str:
        """
        Store a JSON document with a deterministic serialization.

        Metadata models are dumped with their wire names. Documents are not
        mirrored.
        """
        if isinstance(document, NFTMetadata):
            document = document.to_document()
        elif isinstance(document, pydantic.BaseModel):
            document = document.model_dump(by_alias=True, exclude_none=True, mode="json")
        return self.put(canonical_json(document), filename=filename, mirror=False)

    def mirror(self, data: bytes, primary_cid: str) -> Optional[MirrorReceipt]:
        """
        Replicate a payload to Arweave.

        Best effort: failures are logged and yield None.
        """
        if self.mirror_client is None:
            return None
        try:
            return self.mirror_client.store(data, primary_cid)
        except Exception as e:
            rate_limited_log(
                f"Arweave mirror failed for {primary_cid}: {e}",
                level="warning",
                logger_instance=self.logger,
            )
            return None

    # ------------------------------------------------------------------ #
    # Addressing
    # ------------------------------------------------------------------ #

    def resolve_url(self, cid: str) -> str:
        """Gateway URL for an identifier, with or without ``ipfs://``."""
        if not cid:
            return ""
        return f"{self.gateway}{strip_ipfs_prefix(cid)}"

    def format_metadata_url(self, cid: str) -> str:
        """The ``ipfs://`` form stored on chain as a token URI."""
        return to_ipfs_uri(cid)

    def arweave_url(self, tx_id: str) -> str:
        return arweave_url(self.arweave_gateway, tx_id)

    # ------------------------------------------------------------------ #
    # Retrieval
    # ------------------------------------------------------------------ #

    def fetch_bytes(self, cid: str) -> bytes:
        """
        Retrieve a payload, from the backend when it holds it locally and
        through the gateway otherwise.

        Raises:
            NotFound: If the gateway does not return the content
            NetworkError: If the gateway cannot be reached
        """
        if not strip_ipfs_prefix(cid or ""):
            raise NotFound("Empty content identifier")

        if self.backend is not None:
            local = self.backend.cat(strip_ipfs_prefix(cid))
            if local is not None:
                return local

        url = self.resolve_url(cid)
        response = send(self.session, "GET", url, timeout=self.timeout)
        if not 200 <= response.status_code < 300:
            raise NotFound(
                f"Failed to fetch {cid}: HTTP {response.status_code}",
                error_code="CONTENT_NOT_FOUND",
                details={"url": url, "status_code": response.status_code},
            )
        return response.content

    def fetch_json(self, cid: str) -> Any:
        """
        Retrieve and parse a JSON document.

        Raises:
            NotFound: If the gateway does not return the content
            NetworkError: If the gateway cannot be reached
            DecodeError: If the content is not valid JSON
        """
        data = self.fetch_bytes(cid)
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise DecodeError(f"Content {cid} is not valid JSON: {e}") from e

    def fetch_metadata(self, cid: str) -> NFTMetadata:
        """
        Retrieve a metadata document.

        Raises:
            UnsupportedSchemaVersion: If the document is from a newer schema
            DecodeError: If the document is not valid metadata
        """
        return parse_metadata(self.fetch_json(cid))

    def check_availability(self, cid: str) -> bool:
        """Whether the gateway serves the identifier right now."""
        if not cid:
            return False
        try:
            response = send(self.session, "HEAD", self.resolve_url(cid), timeout=self.timeout)
        except NetworkError as e:
            self.logger.debug(f"Availability check for {cid} failed: {e}")
            return False
        return 200 <= response.status_code < 300

    def close(self) -> None:
        if self.backend is not None:
            self.backend.close()
        self.session.close()
