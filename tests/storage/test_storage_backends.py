"""
Tests for the pinning backends and backend selection.
"""
import pytest
import requests
from unittest.mock import patch

from sihiri_sdk.config import StorageSettings
from sihiri_sdk.exceptions import ConfigurationError, DecodeError, NetworkError, StorageUnavailable
from sihiri_sdk.storage.backends import (
    IpfsNodeBackend,
    MemoryBackend,
    NFTStorageBackend,
    PinataBackend,
    create_backend,
)
from sihiri_sdk.utils import compute_cid

PINATA_URL = "https://api.pinata.cloud/pinning/pinFileToIPFS"
IPFS_ADD_URL = "http://localhost:5001/api/v0/add"
NFT_STORAGE_URL = "https://api.nft.storage/upload"


class TestPinataBackend:

    def test_add(self, requests_mock):
        requests_mock.post(PINATA_URL, json={"IpfsHash": "QmPinned", "PinSize": 7, "isDuplicate": True},
                           headers={"Content-Type": "application/json"})
        backend = PinataBackend("key", "secret", session=requests.Session())

        result = backend.add(b"artwork", filename="dawn.png")

        assert result.cid == "QmPinned"
        assert result.size == 7
        assert result.duplicate is True
        request = requests_mock.last_request
        assert request.headers["pinata_api_key"] == "key"
        assert request.headers["pinata_secret_api_key"] == "secret"
        assert b"dawn.png" in request.body

    def test_rejected_credentials(self, requests_mock):
        requests_mock.post(PINATA_URL, status_code=401, json={"error": "Invalid authentication"})
        backend = PinataBackend("key", "wrong", session=requests.Session())
        with pytest.raises(StorageUnavailable):
            backend.add(b"artwork")

    def test_server_error(self, requests_mock):
        requests_mock.post(PINATA_URL, status_code=502)
        backend = PinataBackend("key", "secret", session=requests.Session())
        with pytest.raises(NetworkError) as exc_info:
            backend.add(b"artwork")
        assert exc_info.value.status_code == 502

    def test_missing_hash(self, requests_mock):
        requests_mock.post(PINATA_URL, json={"PinSize": 7})
        backend = PinataBackend("key", "secret", session=requests.Session())
        with pytest.raises(DecodeError):
            backend.add(b"artwork")

    def test_requires_credentials(self):
        with pytest.raises(ConfigurationError):
            PinataBackend("", "secret")


class TestIpfsNodeBackend:

    def test_add(self, requests_mock):
        requests_mock.post(IPFS_ADD_URL, json={"Name": "upload", "Hash": "QmNode", "Size": "15"})
        backend = IpfsNodeBackend("http://localhost:5001", session=requests.Session())

        result = backend.add(b"artwork")

        assert result.cid == "QmNode"
        assert result.size == 15
        assert requests_mock.last_request.qs["pin"] == ["true"]

    def test_invalid_json(self, requests_mock):
        requests_mock.post(IPFS_ADD_URL, text="oops")
        backend = IpfsNodeBackend("http://localhost:5001", session=requests.Session())
        with pytest.raises(DecodeError):
            backend.add(b"artwork")

    def test_requires_https_for_remote_nodes(self):
        with pytest.raises(ConfigurationError):
            IpfsNodeBackend("http://ipfs.example.com:5001")


class TestNFTStorageBackend:

    def test_add(self, requests_mock):
        requests_mock.post(NFT_STORAGE_URL, json={"ok": True, "value": {"cid": "bafyStored", "size": 7}})
        backend = NFTStorageBackend("token", session=requests.Session())

        assert backend.add(b"artwork").cid == "bafyStored"
        assert requests_mock.last_request.headers["Authorization"] == "Bearer token"

    def test_not_ok(self, requests_mock):
        requests_mock.post(NFT_STORAGE_URL, json={"ok": False, "error": {"message": "quota"}})
        backend = NFTStorageBackend("token", session=requests.Session())
        with pytest.raises(DecodeError):
            backend.add(b"artwork")


class TestMemoryBackend:

    def test_deterministic_and_duplicate_flag(self):
        backend = MemoryBackend()
        first = backend.add(b"artwork")
        second = backend.add(b"artwork")
        assert first.cid == second.cid == compute_cid(b"artwork")
        assert not first.duplicate
        assert second.duplicate
        assert first.cid in backend
        assert len(backend) == 1

    def test_cat(self):
        backend = MemoryBackend()
        cid = backend.add(b"artwork").cid
        assert backend.cat(cid) == b"artwork"
        assert backend.cat("QmUnknown") is None


class TestCreateBackend:

    def test_memory(self):
        assert isinstance(create_backend(StorageSettings(pinning_service="memory")), MemoryBackend)

    def test_pinata_with_credentials(self):
        settings = StorageSettings(pinata_api_key="key", pinata_secret_key="secret")
        assert isinstance(create_backend(settings), PinataBackend)

    def test_pinata_without_credentials_falls_back(self):
        with patch("sihiri_sdk.storage.backends.logger") as mock_logger:
            backend = create_backend(StorageSettings())
        assert isinstance(backend, IpfsNodeBackend)
        assert backend.api_url == "https://ipfs.infura.io:5001"
        mock_logger.warning.assert_called_once()

    def test_nft_storage_without_token_yields_none(self):
        with patch("sihiri_sdk.storage.backends.logger") as mock_logger:
            assert create_backend(StorageSettings(pinning_service="nft.storage")) is None
        mock_logger.error.assert_called_once()

    def test_unknown_service(self):
        assert create_backend(StorageSettings(pinning_service="floppy")) is None
