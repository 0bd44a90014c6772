"""
Replication of uploaded content to Arweave permanent storage.
"""
import logging
from typing import Optional

import requests

from ..config import validate_url
from ..exceptions import DecodeError, NetworkError
from ..http import create_session, raise_for_server_error, send
from ..models import MirrorReceipt

logger = logging.getLogger(__name__)


def arweave_url(gateway: str, tx_id: str) -> str:
    """Gateway URL of an Arweave transaction; empty id gives ''."""
    if not tx_id:
        return ""
    return f"{gateway}{tx_id}"


class ArweaveMirror:
    """
    Posts payloads to an Arweave upload endpoint (a bundler node).

    The IPFS identifier travels as a tag so the permanent copy can be
    matched with its primary.
    """

    def __init__(self, upload_url: str, gateway: str = "https://arweave.net/",
                 timeout: int = 30, session: Optional[requests.Session] = None):
        self.upload_url = validate_url("arweave_upload_url", upload_url)
        self.gateway = gateway
        self.timeout = timeout
        self.session = session or create_session()

    def store(self, data: bytes, primary_cid: str) -> MirrorReceipt:
        """
        Raises:
            NetworkError: If the endpoint cannot be reached or refuses the data
            DecodeError: If the response carries no transaction id
        """
        logger.debug(f"Storing {len(data)} bytes on Arweave with IPFS reference {primary_cid}")
        response = send(
            self.session,
            "POST",
            self.upload_url,
            data=data,
            headers={
                "Content-Type": "application/octet-stream",
                "X-Tag-IPFS-CID": primary_cid,
            },
            timeout=self.timeout,
        )
        raise_for_server_error(response, "Arweave upload")
        if response.status_code >= 400:
            raise NetworkError(
                f"Arweave upload failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            tx_id = response.json()["id"]
        except (ValueError, KeyError, TypeError) as e:
            raise DecodeError(f"Arweave upload response has no transaction id: {e}") from e

        logger.info(f"File stored on Arweave with transaction ID: {tx_id}")
        return MirrorReceipt(tx_id=tx_id, primary_cid=primary_cid, url=arweave_url(self.gateway, tx_id))
