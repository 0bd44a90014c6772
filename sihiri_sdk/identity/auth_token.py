"""
Auth response token handling for the SiHiRi SDK.

A wallet answers a sign-in request with an auth response token: a JWT
signed with ES256K by the key listed in its own ``public_keys`` claim.
Verification strictness follows the environment tier, the same way for
every caller.
"""
import os
import logging
from typing import Any, Dict, Optional

import jwt
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec

from ..contracts.c32 import c32_address_decode, is_valid_address

logger = logging.getLogger(__name__)

ENV_TIER_VAR = "SIHIRI_ENV_TIER"

# Environment tiers
ENV_TIER_PRODUCTION = "production"
ENV_TIER_TEST = "test"
ENV_TIER_DEVELOPMENT = "development"

AUTH_RESPONSE_ALGORITHM = "ES256K"

# Unsafe algorithms that should always be rejected
UNSAFE_JWT_ALGORITHMS = ["none", ""]


def get_environment_tier() -> str:
    """
    Get the current environment tier from ``SIHIRI_ENV_TIER``.

    Returns:
        Environment tier string (production, test, or development)
    """
    tier = os.environ.get(ENV_TIER_VAR, ENV_TIER_PRODUCTION).lower()
    if tier in ("prod", "production"):
        return ENV_TIER_PRODUCTION
    elif tier in ("test", "testing", "qa"):
        return ENV_TIER_TEST
    elif tier in ("dev", "development", "local"):
        return ENV_TIER_DEVELOPMENT
    else:
        # Unknown values get the strictest treatment
        logger.warning(f"Unknown environment tier: {tier}, defaulting to production")
        return ENV_TIER_PRODUCTION


def is_safe_jwt_algorithm(algorithm: str) -> bool:
    return algorithm.lower() not in UNSAFE_JWT_ALGORITHMS


def public_key_from_hex(public_key_hex: str) -> ec.EllipticCurvePublicKey:
    """
    Load a secp256k1 public key from its hex SEC1 encoding.

    Raises:
        ValueError: If the value is not a valid secp256k1 point
    """
    return ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), bytes.fromhex(public_key_hex))


def hash160(data: bytes) -> bytes:
    """RIPEMD160(SHA256(data)), the hash behind Stacks single-sig addresses."""
    sha = hashes.Hash(hashes.SHA256())
    sha.update(data)
    ripemd = hashes.Hash(hashes.RIPEMD160())
    ripemd.update(sha.finalize())
    return ripemd.finalize()


def addresses_match_key(claims: Dict[str, Any], public_key_hex: str) -> bool:
    """
    Whether every Stacks address the claims assert is derived from the key.

    Entries that are not valid addresses are ignored here; they never make
    it into a session.
    """
    key_hash = hash160(bytes.fromhex(public_key_hex))
    profile = claims.get("profile")
    stx_address = profile.get("stxAddress") if isinstance(profile, dict) else None
    if not isinstance(stx_address, dict):
        return True
    for address in stx_address.values():
        if isinstance(address, str) and is_valid_address(address):
            if c32_address_decode(address)[1] != key_hash:
                return False
    return True


def decode_auth_response(token: str, env_tier: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Decode an auth response token.

    - Production: ES256K only; the signature must verify against the first
      key in the ``public_keys`` claim, every claimed address must derive
      from that key, and expiry is enforced
    - Test: signature not verified, expiry enforced
    - Development: signature and expiry not verified

    Args:
        token: Auth response token from the wallet
        env_tier: Environment tier (defaults to ``SIHIRI_ENV_TIER``)

    Returns:
        The token claims, or None if the token is rejected
    """
    if not token:
        return None

    if env_tier is None:
        env_tier = get_environment_tier()

    try:
        header = jwt.get_unverified_header(token)
    except jwt.DecodeError:
        logger.warning("Invalid auth response format - could not decode header")
        return None

    algorithm = header.get("alg") or ""
    if not is_safe_jwt_algorithm(algorithm):
        logger.warning(f"Unsafe JWT algorithm: {algorithm!r}. Rejecting auth response.")
        return None

    try:
        if env_tier == ENV_TIER_PRODUCTION:
            if algorithm != AUTH_RESPONSE_ALGORITHM:
                logger.warning(f"Auth response algorithm {algorithm} not allowed in production (expected ES256K)")
                return None

            unverified = jwt.decode(token, options={"verify_signature": False})
            public_keys = unverified.get("public_keys")
            if not isinstance(public_keys, list) or not public_keys or not isinstance(public_keys[0], str):
                logger.warning("Auth response carries no public key")
                return None
            try:
                key = public_key_from_hex(public_keys[0])
            except ValueError as e:
                logger.warning(f"Auth response public key is invalid: {e}")
                return None

            decoded = jwt.decode(
                token,
                key,
                algorithms=[AUTH_RESPONSE_ALGORITHM],
                options={"verify_signature": True, "verify_exp": True},
            )
            if not addresses_match_key(decoded, public_keys[0]):
                logger.warning("Auth response claims an address not derived from its signing key")
                return None
            logger.debug("Auth response signature verified")
            return decoded

        elif env_tier == ENV_TIER_TEST:
            return jwt.decode(token, options={"verify_signature": False, "verify_exp": True})

        else:
            return jwt.decode(token, options={"verify_signature": False, "verify_exp": False})

    except jwt.ExpiredSignatureError:
        logger.warning(f"Auth response has expired (environment: {env_tier})")
        return None
    except jwt.InvalidSignatureError:
        logger.warning(f"Invalid auth response signature (environment: {env_tier})")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning(f"Auth response validation failed: {e}")
        return None


def addresses_from_claims(claims: Dict[str, Any]) -> Dict[str, str]:
    """
    Extract the Stacks addresses from auth response claims.

    Wallets report them under ``profile.stxAddress``; malformed entries are
    dropped.
    """
    profile = claims.get("profile") or {}
    stx_address = profile.get("stxAddress") if isinstance(profile, dict) else None
    if not isinstance(stx_address, dict):
        return {}

    addresses = {}
    for network in ("mainnet", "testnet"):
        address = stx_address.get(network)
        if isinstance(address, str) and is_valid_address(address):
            addresses[network] = address
        elif address is not None:
            logger.warning(f"Ignoring malformed {network} address in auth response")
    return addresses
