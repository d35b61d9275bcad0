"""
Per-user cache for the last connected treadmill address.
"""

import json
import logging
import os
import platform
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def user_cache_dir() -> Path:
    """Per-user cache directory for termwatch."""
    cache_home = os.environ.get("XDG_CACHE_HOME")
    if cache_home:
        return Path(cache_home) / "termwatch"
    if platform.system() == "Darwin":
        return Path.home() / "Library" / "Caches" / "termwatch"
    if platform.system() == "Windows":
        base = os.environ.get("LOCALAPPDATA") or str(Path.home() / "AppData" / "Local")
        return Path(base) / "termwatch"
    return Path.home() / ".cache" / "termwatch"


class AddressCache:
    """Remembers the last treadmill address so reconnects skip the scan."""

    FILENAME = "device_address.json"

    def __init__(self, directory: Optional[Path] = None) -> None:
        self._directory = directory

    @property
    def path(self) -> Path:
        return (self._directory or user_cache_dir()) / self.FILENAME

    def load(self) -> str | None:
        try:
            return json.loads(self.path.read_text()).get("address")
        except FileNotFoundError:
            return None
        except Exception as e:
            logger.warning(f"Failed to load cached address: {e}")
            return None

    def save(self, address: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps({"address": address}, indent=2))
            logger.debug(f"Cached treadmill address {address}")
        except Exception as e:
            logger.warning(f"Failed to save cached address: {e}")

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
            logger.info("Cleared cached treadmill address")
        except Exception as e:
            logger.warning(f"Failed to clear cached address: {e}")
