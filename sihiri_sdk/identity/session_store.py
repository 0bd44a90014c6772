"""
Persistent session storage for the identity module.
"""
import os
import json
import stat
import logging
from pathlib import Path
from typing import Dict, Any, Optional

import appdirs
import portalocker

logger = logging.getLogger(__name__)

SESSION_PATH_ENV_VAR = "SIHIRI_SESSION_PATH"
APP_NAME = "sihiri"


def default_session_path() -> Path:
    """``SIHIRI_SESSION_PATH``, or session.json in the user data directory."""
    override = os.environ.get(SESSION_PATH_ENV_VAR)
    if override:
        return Path(os.path.expanduser(override))
    return Path(appdirs.user_data_dir(APP_NAME, appauthor=False)) / "session.json"


class SessionStore:
    """Thread-safe and process-safe session file"""

    def __init__(self, store_path: Optional[str] = None):
        """
        Initialize the session store.

        Args:
            store_path: Optional custom path for the session file
        """
        self.store_path = Path(store_path) if store_path else default_session_path()
        self._ensure_dir()

    def _ensure_dir(self):
        """Ensure the session directory and file exist with owner-only permissions"""
        directory = self.store_path.parent
        if not directory.exists():
            directory.mkdir(parents=True, exist_ok=True)
            if os.name == 'posix':
                os.chmod(directory, stat.S_IRUSR | stat.S_IWUSR | stat.S_IXUSR)  # 0700

        if not self.store_path.exists():
            with open(self.store_path, 'w') as f:
                json.dump({"session": None}, f)

        if os.name == 'posix':
            os.chmod(self.store_path, stat.S_IRUSR | stat.S_IWUSR)  # 0600
        elif os.name == 'nt':
            logger.info("Windows file permissions cannot be restricted to current user only;"
                        " the session file holds an auth token.")

    def _get_lock_path(self) -> str:
        return str(self.store_path) + '.lock'

    def read(self) -> Optional[Dict[str, Any]]:
        """
        Read the persisted session with proper locking.

        Returns:
            The session dictionary, or None if nothing is stored
        """
        with portalocker.Lock(self._get_lock_path(), timeout=10):
            try:
                with open(self.store_path, 'r') as f:
                    data = json.load(f)
            except (json.JSONDecodeError, FileNotFoundError):
                return None
        session = data.get("session") if isinstance(data, dict) else None
        return session if isinstance(session, dict) else None

    def write(self, session: Dict[str, Any]):
        """
        Persist a session with proper locking.

        Args:
            session: Session dictionary to store
        """
        with portalocker.Lock(self._get_lock_path(), timeout=10):
            with open(self.store_path, 'w') as f:
                json.dump({"session": session}, f, indent=2)

    def clear(self):
        """Forget the persisted session"""
        with portalocker.Lock(self._get_lock_path(), timeout=10):
            with open(self.store_path, 'w') as f:
                json.dump({"session": None}, f)
