"""
Shared HTTP plumbing for node, gateway and pinning-service requests.

Sessions carry no retry policy; a failed request is reported
to the caller as a NetworkError and the caller decides what to do.
"""
import logging
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter

from .exceptions import NetworkError

logger = logging.getLogger(__name__)

USER_AGENT = "sihiri-python-sdk"


def create_session(user_agent: Optional[str] = None) -> requests.Session:
    """Create a requests session with pooled connections and no retries."""
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent or USER_AGENT})
    session.mount("http://", HTTPAdapter(max_retries=0))
    session.mount("https://", HTTPAdapter(max_retries=0))
    return session


def send(session: requests.Session, method: str, url: str, **kwargs: Any) -> requests.Response:
    """
    Send a request, turning transport failures into NetworkError.

    HTTP error statuses are returned to the caller untouched so each adapter
    can map them to its own error type.

    Raises:
        NetworkError: If the request could not be completed
    """
    try:
        response = session.request(method, url, **kwargs)
    except requests.Timeout as e:
        logger.error(f"{method} {url} timed out: {e}")
        raise NetworkError(f"Request to {url} timed out", error_code="TIMEOUT") from e
    except requests.RequestException as e:
        logger.error(f"{method} {url} failed: {e}")
        raise NetworkError(f"Request to {url} failed: {e}", error_code="CONNECTION_FAILED") from e
    logger.debug("%s %s -> %s", method, url, response.status_code)
    return response


def raise_for_server_error(response: requests.Response, what: str) -> None:
    """
    Raises:
        NetworkError: If the response carries a 5xx status
    """
    if response.status_code >= 500:
        raise NetworkError(
            f"{what} failed: HTTP {response.status_code}",
            status_code=response.status_code,
            error_code="SERVER_ERROR",
        )
