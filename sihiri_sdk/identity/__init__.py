"""
Identity module for the SiHiRi SDK.

Wallet sign-in, auth response decoding and the persisted user session.
"""
from .auth_token import (
    ENV_TIER_DEVELOPMENT,
    ENV_TIER_PRODUCTION,
    ENV_TIER_TEST,
    addresses_from_claims,
    decode_auth_response,
    get_environment_tier,
)
from .session import SessionManager
from .session_store import SessionStore, default_session_path
from .types import UserSession

__all__ = [
    'ENV_TIER_DEVELOPMENT',
    'ENV_TIER_PRODUCTION',
    'ENV_TIER_TEST',
    'SessionManager',
    'SessionStore',
    'UserSession',
    'addresses_from_claims',
    'decode_auth_response',
    'default_session_path',
    'get_environment_tier',
]
