"""
Content storage: pinning backends, Arweave mirroring and the content store.
"""
from .backends import (
    AddResult,
    IpfsNodeBackend,
    MemoryBackend,
    NFTStorageBackend,
    PinataBackend,
    StorageBackend,
    create_backend,
)
from .mirror import ArweaveMirror, arweave_url
from .store import ContentStore

__all__ = [
    "AddResult",
    "ArweaveMirror",
    "ContentStore",
    "IpfsNodeBackend",
    "MemoryBackend",
    "NFTStorageBackend",
    "PinataBackend",
    "StorageBackend",
    "arweave_url",
    "create_backend",
]
