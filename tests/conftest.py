"""
Pytest fixtures for the SiHiRi SDK tests.
"""
import pytest
import jwt
import requests

from sihiri_sdk._rate_limited_log import reset_rate_limits
from sihiri_sdk.config import NetworkConfig
from sihiri_sdk.contracts.adapter import ContractCaller
from sihiri_sdk.identity.session import SessionManager
from sihiri_sdk.identity.session_store import SessionStore
from sihiri_sdk.registry import ContractRegistry
from sihiri_sdk.storage.backends import MemoryBackend
from sihiri_sdk.storage.store import ContentStore
from sihiri_sdk.wallet import WalletResponse

# Deployer of the local contracts (version 26, hash 6d78de7b...)
DEPLOYER = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
# Signed-in user on testnet/local and mainnet (hash 1111...)
USER_TESTNET = "ST8H248H248H248H248H248H248H248H26RCPJ4T"
USER_MAINNET = "SP8H248H248H248H248H248H248H248H24ARTQ82"

LOCAL_API = "http://localhost:3999"

TX_ID = "0x" + "ab" * 32


def make_auth_claims(**overrides):
    claims = {
        "jti": "test-jti",
        "iat": 1700000000,
        "iss": "did:btc-addr:1TestIssuer",
        "username": "artist.id.stx",
        "profile": {
            "stxAddress": {"mainnet": USER_MAINNET, "testnet": USER_TESTNET},
            "name": "Test Artist",
        },
    }
    claims.update(overrides)
    return claims


def make_dev_token(**overrides) -> str:
    """Auth response accepted in the development tier (signature not checked)."""
    return jwt.encode(make_auth_claims(**overrides), "not-checked", algorithm="HS256")


class FakeWallet:
    """Wallet double that records what it was asked and answers as configured."""

    def __init__(self, response=None, auth_token=None):
        self.response = response or WalletResponse(approved=True, tx_id=TX_ID)
        self.auth_token = auth_token
        self.payloads = []
        self.auth_requests = []

    def authenticate(self, app_details):
        self.auth_requests.append(app_details)
        return self.auth_token

    def open_contract_call(self, payload):
        self.payloads.append(payload)
        return self.response


@pytest.fixture(autouse=True)
def _reset_sdk_state():
    """Drop cached network configuration and rate-limit state between tests."""
    NetworkConfig.reset()
    reset_rate_limits()
    yield
    NetworkConfig.reset()
    reset_rate_limits()


@pytest.fixture
def local_profile():
    return NetworkConfig.get_profile("local")


@pytest.fixture
def registry():
    return ContractRegistry.from_config()


@pytest.fixture
def wallet():
    return FakeWallet()


@pytest.fixture
def session_path(tmp_path):
    return str(tmp_path / "sihiri" / "session.json")


@pytest.fixture
def signed_in_session(wallet):
    manager = SessionManager(wallet=wallet, env_tier="development")
    manager.handle_pending_sign_in(make_dev_token())
    return manager


@pytest.fixture
def signed_out_session(wallet):
    return SessionManager(wallet=wallet, env_tier="development")


@pytest.fixture
def caller(registry, local_profile, signed_in_session, wallet):
    return ContractCaller(
        registry,
        local_profile,
        session=signed_in_session,
        wallet=wallet,
        http_session=requests.Session(),
    )


@pytest.fixture
def memory_backend():
    return MemoryBackend()


@pytest.fixture
def content_store(memory_backend):
    return ContentStore(memory_backend, http_session=requests.Session())


@pytest.fixture
def persistent_session(session_path, wallet):
    return SessionManager(store=SessionStore(session_path), wallet=wallet, env_tier="development")


@pytest.fixture
def make_token():
    """Factory for development-tier auth responses; keyword args override claims."""
    return make_dev_token


@pytest.fixture
def auth_claims():
    return make_auth_claims
