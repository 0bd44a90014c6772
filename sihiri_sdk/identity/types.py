"""
Data types for the identity module.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class UserSession:
    """
    Snapshot of the signed-in user.

    Attributes:
        addresses: Stacks address per network name ("mainnet", "testnet")
        auth_token: The wallet's auth response token
        signed_in: Whether a user is signed in
        username: Optional BNS username
        profile: Profile claims from the auth response
        signed_in_at: When the session was established
    """
    addresses: Dict[str, str] = field(default_factory=dict)
    auth_token: Optional[str] = None
    signed_in: bool = False
    username: Optional[str] = None
    profile: Dict[str, Any] = field(default_factory=dict)
    signed_in_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "addresses": dict(self.addresses),
            "auth_token": self.auth_token,
            "signed_in": self.signed_in,
            "username": self.username,
            "profile": dict(self.profile),
            "signed_in_at": self.signed_in_at.isoformat() if self.signed_in_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserSession":
        signed_in_at = data.get("signed_in_at")
        return cls(
            addresses=dict(data.get("addresses") or {}),
            auth_token=data.get("auth_token"),
            signed_in=bool(data.get("signed_in")),
            username=data.get("username"),
            profile=dict(data.get("profile") or {}),
            signed_in_at=datetime.fromisoformat(signed_in_at) if signed_in_at else None,
        )
