"""Key-value storage backing the auth client's persisted session.

supabase-py asks its storage for string values by key (the access/refresh
token bundle lives under a single key). FileSessionStorage keeps one file
per key under a directory. Storage is never allowed to break sign-in: any
I/O failure is logged and the operation becomes a no-op.
"""
import hashlib
import logging
from pathlib import Path
from typing import Optional, Union

from supabase_auth import SyncSupportedStorage

logger = logging.getLogger(__name__)


class FileSessionStorage(SyncSupportedStorage):
    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        self.available = True
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Session storage unavailable at {self.directory}: {e}")
            self.available = False

    def _path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode()).hexdigest()[:32]
        return self.directory / f"{digest}.json"

    def get_item(self, key: str) -> Optional[str]:
        if not self.available:
            return None
        try:
            return self._path_for(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Failed to get item from storage: {e}")
            return None

    def set_item(self, key: str, value: str) -> None:
        if not self.available:
            return
        try:
            self._path_for(key).write_text(value, encoding="utf-8")
        except OSError as e:
            logger.warning(f"Failed to set item in storage: {e}")

    def remove_item(self, key: str) -> None:
        if not self.available:
            return
        try:
            self._path_for(key).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to remove item from storage: {e}")
