"""
Network and storage configuration for the SiHiRi SDK.

Network profiles and contract deployments ship with the package in
``networks.json``. Storage credentials come from the environment. Both are
read once at startup; nothing here is reconfigured at runtime.
"""
import importlib.resources
import json
import logging
import os
import urllib.parse
from typing import Any, Dict, Optional

from pydantic import BaseModel

from .exceptions import ConfigurationError
from .models import NetworkName, NetworkProfile

logger = logging.getLogger(__name__)

NETWORK_ENV_VAR = "SIHIRI_NETWORK"
DEFAULT_NETWORK = NetworkName.TESTNET.value

PINNING_SERVICES = ("pinata", "ipfs", "nft.storage", "memory")


def validate_url(url_name: str, url: str) -> str:
    """
    Require https:// for remote endpoints.

    Plain http is only accepted for localhost/127.0.0.1 (development nodes).

    Raises:
        ConfigurationError: If the URL is insecure or malformed
    """
    parsed = urllib.parse.urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ConfigurationError(f"{url_name} is not a valid URL: {url!r}")
    host = parsed.netloc.split(':')[0]
    is_local = host in ('localhost', '127.0.0.1')
    if parsed.scheme != 'https' and not is_local:
        raise ConfigurationError(f"{url_name} must use https:// for security (got: {parsed.scheme}://)")
    return url


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class NetworkConfig:
    """Access to the bundled network profiles and contract table."""

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None
    _active_network: Optional[str] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load network definitions from the packaged networks.json.

        Returns:
            Mapping of network name to its raw definition
        """
        if cls._networks_cache is not None:
            return cls._networks_cache

        resource = importlib.resources.files("sihiri_sdk").joinpath("networks.json")
        with resource.open("r", encoding="utf-8") as f:
            cls._networks_cache = json.load(f)
        logger.debug("Loaded %d network definitions", len(cls._networks_cache))
        return cls._networks_cache

    @classmethod
    def get_network(cls, network: str) -> Dict[str, Any]:
        """
        Get the raw definition of a network.

        Raises:
            ConfigurationError: If the network is not defined
        """
        networks = cls.load_networks()
        if network not in networks:
            available = ", ".join(sorted(networks))
            raise ConfigurationError(
                f"Network '{network}' not found in configuration. Available networks: {available}"
            )
        return networks[network]

    @classmethod
    def get_api_url(cls, network: str, override: Optional[str] = None) -> str:
        """
        Get the node API URL for a network.

        Precedence: explicit override, then ``<NETWORK>_API_URL`` from the
        environment, then the bundled value.

        Raises:
            ConfigurationError: If the chosen URL is not https (or local)
        """
        if override:
            return validate_url("api_url", override)
        env_var = f"{network.upper().replace('-', '_')}_API_URL"
        env_url = os.environ.get(env_var)
        if env_url:
            return validate_url(env_var, env_url)
        return validate_url(f"{network} apiUrl", cls.get_network(network)["apiUrl"])

    @classmethod
    def get_explorer_url(cls, network: str) -> str:
        return cls.get_network(network)["explorerUrl"]

    @classmethod
    def get_network_id(cls, network: str) -> int:
        return cls.get_network(network)["networkId"]

    @classmethod
    def get_contracts(cls, network: str) -> Dict[str, str]:
        """Get the logical-name to ``address.name`` table of a network."""
        return dict(cls.get_network(network).get("contracts", {}))

    @classmethod
    def get_profile(cls, network: str, api_url: Optional[str] = None) -> NetworkProfile:
        data = cls.get_network(network)
        return NetworkProfile(
            name=network,
            api_url=cls.get_api_url(network, override=api_url),
            explorer_url=data["explorerUrl"],
            network_id=data["networkId"],
        )

    @classmethod
    def active_network_name(cls) -> str:
        """
        Name of the network this process targets.

        Read from SIHIRI_NETWORK on first use (default: testnet) and frozen
        afterwards.
        """
        if cls._active_network is None:
            name = os.environ.get(NETWORK_ENV_VAR) or DEFAULT_NETWORK
            cls.get_network(name)
            cls._active_network = name
            logger.info("Active network: %s", name)
        return cls._active_network

    @classmethod
    def active_profile(cls) -> NetworkProfile:
        return cls.get_profile(cls.active_network_name())

    @classmethod
    def reset(cls) -> None:
        """Drop cached state. Only meant for tests."""
        cls._networks_cache = None
        cls._active_network = None


class StorageSettings(BaseModel):
    """Content storage configuration"""
    pinning_service: str = "pinata"
    pinata_api_key: str = ""
    pinata_secret_key: str = ""
    nft_storage_token: str = ""
    ipfs_api_url: str = "https://ipfs.infura.io:5001"
    ipfs_gateway: str = "https://ipfs.io/ipfs/"
    arweave_gateway: str = "https://arweave.net/"
    arweave_mirror: bool = True
    arweave_upload_url: str = ""
    timeout: int = 30

    @property
    def has_pinata_credentials(self) -> bool:
        return bool(self.pinata_api_key and self.pinata_secret_key)

    @classmethod
    def from_env(cls) -> "StorageSettings":
        """
        Build settings from environment variables.

        Raises:
            ConfigurationError: If a value cannot be parsed
        """
        defaults = cls()
        timeout_raw = os.environ.get("SIHIRI_HTTP_TIMEOUT")
        try:
            timeout = int(timeout_raw) if timeout_raw else defaults.timeout
        except ValueError:
            raise ConfigurationError(f"SIHIRI_HTTP_TIMEOUT must be an integer (got: {timeout_raw!r})")

        ipfs_gateway = validate_url(
            "SIHIRI_IPFS_GATEWAY", os.environ.get("SIHIRI_IPFS_GATEWAY", defaults.ipfs_gateway)
        )
        arweave_gateway = validate_url(
            "SIHIRI_ARWEAVE_GATEWAY", os.environ.get("SIHIRI_ARWEAVE_GATEWAY", defaults.arweave_gateway)
        )

        return cls(
            pinning_service=os.environ.get("SIHIRI_PINNING_SERVICE", defaults.pinning_service).lower(),
            pinata_api_key=os.environ.get("PINATA_API_KEY", ""),
            pinata_secret_key=os.environ.get("PINATA_SECRET_KEY", ""),
            nft_storage_token=os.environ.get("NFT_STORAGE_TOKEN", ""),
            ipfs_api_url=os.environ.get("SIHIRI_IPFS_API_URL", defaults.ipfs_api_url),
            ipfs_gateway=ipfs_gateway,
            arweave_gateway=arweave_gateway,
            arweave_mirror=_env_flag("SIHIRI_ARWEAVE_MIRROR", defaults.arweave_mirror),
            arweave_upload_url=os.environ.get("SIHIRI_ARWEAVE_UPLOAD_URL", ""),
            timeout=timeout,
        )

    class Config:
        frozen = True
