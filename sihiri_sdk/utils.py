"""
Utility functions for content addressing and serialization.
"""
import hashlib
import json
from typing import Any

import base58

IPFS_PREFIX = "ipfs://"

# multihash header for a 32-byte sha2-256 digest
_SHA256_MULTIHASH_PREFIX = bytes([0x12, 0x20])


def sha256_hex(data: bytes) -> str:
    """
    Calculate SHA-256 hash and return hex string

    Args:
        data: Bytes to hash

    Returns:
        Hex string of hash
    """
    return hashlib.sha256(data).hexdigest()


def strip_ipfs_prefix(cid: str) -> str:
    """Remove a leading ``ipfs://`` from an identifier, if present."""
    if cid.startswith(IPFS_PREFIX):
        return cid[len(IPFS_PREFIX):]
    return cid


def to_ipfs_uri(cid: str) -> str:
    """Render an identifier as ``ipfs://<cid>``; empty input gives ''."""
    if not cid:
        return ""
    return f"{IPFS_PREFIX}{strip_ipfs_prefix(cid)}"


def compute_cid(data: bytes) -> str:
    """
    Derive a deterministic identifier for a payload.

    The identifier is the base58 sha2-256 multihash of the raw bytes (a
    "Qm..." string). It is stable for identical input but does not match
    the chunked DAG identifiers a real IPFS node assigns.
    """
    digest = hashlib.sha256(data).digest()
    return base58.b58encode(_SHA256_MULTIHASH_PREFIX + digest).decode("ascii")


def canonical_json(document: Any) -> bytes:
    """
    Serialize a JSON document deterministically.

    Keys are sorted and separators compact so equivalent documents always
    produce the same bytes, and therefore the same identifier.
    """
    return json.dumps(
        document, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")
