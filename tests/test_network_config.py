"""
Tests for the NetworkConfig module and storage settings.
"""
import pydantic
import pytest
from unittest.mock import patch

from sihiri_sdk.config import NetworkConfig, StorageSettings, validate_url
from sihiri_sdk.exceptions import ConfigurationError
from sihiri_sdk.models import NetworkName

# Sample network configuration
MOCK_NETWORKS = {
    "test-network": {
        "apiUrl": "https://api.test.example.com",
        "explorerUrl": "https://explorer.test.example.com",
        "networkId": 123,
        "contracts": {"nftOwnership": "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM.nft"},
    }
}


class TestNetworkConfig:
    """Test NetworkConfig class."""

    def test_bundled_networks(self):
        networks = NetworkConfig.load_networks()
        assert set(networks) == {"mainnet", "testnet", "local"}

    def test_load_networks_cached(self):
        """Networks are cached after first load."""
        NetworkConfig._networks_cache = MOCK_NETWORKS
        with patch("importlib.resources.files") as mock_files:
            result = NetworkConfig.load_networks()
            mock_files.assert_not_called()
        assert result == MOCK_NETWORKS

    def test_get_network_not_found(self):
        with pytest.raises(ConfigurationError) as exc_info:
            NetworkConfig.get_network("non-existent-network")
        # Error message lists available networks
        assert "mainnet" in str(exc_info.value)
        assert "local" in str(exc_info.value)

    def test_api_url_precedence(self, monkeypatch):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        assert NetworkConfig.get_api_url("test-network") == "https://api.test.example.com"

        monkeypatch.setenv("TEST_NETWORK_API_URL", "https://env.example.com")
        assert NetworkConfig.get_api_url("test-network") == "https://env.example.com"
        assert NetworkConfig.get_api_url("test-network", override="https://arg.example.com") == "https://arg.example.com"

    @pytest.mark.parametrize("url", ["http://node.example.com", "ftp://node.example.com"])
    def test_insecure_api_url_override_rejected(self, monkeypatch, url):
        monkeypatch.setenv("MAINNET_API_URL", url)
        with pytest.raises(ConfigurationError):
            NetworkConfig.get_api_url("mainnet")
        with pytest.raises(ConfigurationError):
            NetworkConfig.get_profile("mainnet")

    def test_insecure_api_url_argument_rejected(self):
        with pytest.raises(ConfigurationError):
            NetworkConfig.get_profile("testnet", api_url="http://node.example.com")

    def test_local_api_url_may_be_http(self, monkeypatch):
        monkeypatch.setenv("LOCAL_API_URL", "http://127.0.0.1:20443")
        assert NetworkConfig.get_profile("local").api_url == "http://127.0.0.1:20443"

    def test_get_contracts_returns_copy(self):
        contracts = NetworkConfig.get_contracts("local")
        contracts["nftOwnership"] = "changed"
        assert NetworkConfig.get_contracts("local")["nftOwnership"] != "changed"

    def test_get_profile(self):
        profile = NetworkConfig.get_profile("mainnet")
        assert profile.name == NetworkName.MAINNET
        assert profile.is_mainnet
        assert profile.network_id == 1
        assert NetworkConfig.get_network_id("testnet") == 2147483648
        assert NetworkConfig.get_explorer_url("local") == "http://localhost:8000"

    def test_active_network_defaults_to_testnet(self, monkeypatch):
        monkeypatch.delenv("SIHIRI_NETWORK", raising=False)
        assert NetworkConfig.active_network_name() == "testnet"

    def test_active_network_is_frozen(self, monkeypatch):
        monkeypatch.setenv("SIHIRI_NETWORK", "local")
        assert NetworkConfig.active_network_name() == "local"
        monkeypatch.setenv("SIHIRI_NETWORK", "mainnet")
        assert NetworkConfig.active_network_name() == "local"
        assert NetworkConfig.active_profile().name == NetworkName.LOCAL

    def test_active_network_must_exist(self, monkeypatch):
        monkeypatch.setenv("SIHIRI_NETWORK", "devnet")
        with pytest.raises(ConfigurationError):
            NetworkConfig.active_network_name()


class TestValidateUrl:

    @pytest.mark.parametrize("url", [
        "https://api.pinata.cloud",
        "http://localhost:3999",
        "http://127.0.0.1:5001",
    ])
    def test_accepted(self, url):
        assert validate_url("url", url) == url

    @pytest.mark.parametrize("url", ["http://example.com", "ftp://example.com", "not a url"])
    def test_rejected(self, url):
        with pytest.raises(ConfigurationError):
            validate_url("url", url)


class TestStorageSettings:

    def test_defaults(self, monkeypatch):
        for name in ("SIHIRI_PINNING_SERVICE", "PINATA_API_KEY", "PINATA_SECRET_KEY",
                     "SIHIRI_IPFS_GATEWAY", "SIHIRI_ARWEAVE_MIRROR", "SIHIRI_HTTP_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)
        settings = StorageSettings.from_env()
        assert settings.pinning_service == "pinata"
        assert settings.ipfs_gateway == "https://ipfs.io/ipfs/"
        assert settings.arweave_mirror is True
        assert settings.timeout == 30
        assert not settings.has_pinata_credentials

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SIHIRI_PINNING_SERVICE", "Memory")
        monkeypatch.setenv("PINATA_API_KEY", "key")
        monkeypatch.setenv("PINATA_SECRET_KEY", "secret")
        monkeypatch.setenv("SIHIRI_ARWEAVE_MIRROR", "false")
        monkeypatch.setenv("SIHIRI_HTTP_TIMEOUT", "5")
        settings = StorageSettings.from_env()
        assert settings.pinning_service == "memory"
        assert settings.has_pinata_credentials
        assert settings.arweave_mirror is False
        assert settings.timeout == 5

    def test_bad_timeout(self, monkeypatch):
        monkeypatch.setenv("SIHIRI_HTTP_TIMEOUT", "soon")
        with pytest.raises(ConfigurationError):
            StorageSettings.from_env()

    def test_settings_are_frozen(self):
        settings = StorageSettings()
        with pytest.raises(pydantic.ValidationError):
            settings.timeout = 1

    @pytest.mark.parametrize("name", ["SIHIRI_IPFS_GATEWAY", "SIHIRI_ARWEAVE_GATEWAY"])
    def test_insecure_gateway_rejected(self, monkeypatch, name):
        monkeypatch.setenv(name, "http://gateway.example/ipfs/")
        with pytest.raises(ConfigurationError):
            StorageSettings.from_env()

    def test_local_gateway_may_be_http(self, monkeypatch):
        monkeypatch.setenv("SIHIRI_IPFS_GATEWAY", "http://localhost:8080/ipfs/")
        assert StorageSettings.from_env().ipfs_gateway == "http://localhost:8080/ipfs/"
