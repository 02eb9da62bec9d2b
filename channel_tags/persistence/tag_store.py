"""
Tag Store for channel tags
Persists the local tag set to JSON so a session can start offline.

File layout:
    {
        "tags": ["a", "b"],          # local tag set, display order
        "last_synced": ["a"],        # last set acknowledged remotely
        "last_updated": "2024-12-11T12:00:00"
    }
"""

import json
import threading
from pathlib import Path
from dataclasses import dataclass, field, asdict
from typing import List, Optional, Sequence
from datetime import datetime

from channel_tags.utils.logging_config import get_logger
from channel_tags.utils.exceptions import TagStoreError

logger = get_logger("tag_store")


@dataclass
class StoredTags:
    """Contents of the tag store file."""
    tags: List[str] = field(default_factory=list)
    last_synced: List[str] = field(default_factory=list)
    last_updated: str = ""

    @property
    def in_sync(self) -> bool:
        return self.tags == self.last_synced


class TagStore:
    """
    JSON-backed local tag persistence.

    Also usable as a RegistrationService: current_tags() reads the stored
    set and update_registration() writes it, which lets a registry run with
    no network at all.
    """

    def __init__(self, path: Optional[str] = None, enabled: bool = True):
        """
        Initialize the tag store.

        Args:
            path: Path to the store file (default: ./channel_tags.json)
            enabled: Whether persistence is enabled
        """
        self._enabled = enabled
        self._path = Path(path) if path is not None else Path.cwd() / "channel_tags.json"
        self._lock = threading.Lock()
        self._stored = StoredTags()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> StoredTags:
        """
        Load stored tags from file.

        Returns:
            A copy of the loaded or default values; later saves do not change it

        Raises:
            TagStoreError: If the file exists but cannot be parsed
        """
        if not self._enabled:
            return self.stored

        with self._lock:
            if not self._path.exists():
                return self._copy()

            try:
                with open(self._path, 'r') as f:
                    data = json.load(f)
            except (OSError, ValueError) as e:
                raise TagStoreError(str(self._path), str(e))

            if not isinstance(data, dict):
                raise TagStoreError(str(self._path), "expected a JSON object")

            self._stored = StoredTags(
                tags=list(data.get('tags', [])),
                last_synced=list(data.get('last_synced', [])),
                last_updated=data.get('last_updated', ''),
            )
            logger.debug(f"Loaded {len(self._stored.tags)} tags from {self._path}")
            return self._copy()

    def save(self, tags: Sequence[str], last_synced: Optional[Sequence[str]] = None) -> None:
        """
        Write the tag set to file.

        Args:
            tags: Current local tag set
            last_synced: Last acknowledged set. Unchanged if None.

        Raises:
            TagStoreError: If the file cannot be written
        """
        if not self._enabled:
            return

        with self._lock:
            self._stored.tags = list(tags)
            if last_synced is not None:
                self._stored.last_synced = list(last_synced)
            self._stored.last_updated = datetime.now().isoformat()

            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with open(self._path, 'w') as f:
                    json.dump(asdict(self._stored), f, indent=2)
            except OSError as e:
                raise TagStoreError(str(self._path), str(e))

    def clear(self) -> None:
        """Forget all stored tags."""
        with self._lock:
            self._stored = StoredTags()

            if self._path.exists():
                self._path.unlink()

    @property
    def stored(self) -> StoredTags:
        """Snapshot of the last loaded or saved contents."""
        with self._lock:
            return self._copy()

    def _copy(self) -> StoredTags:
        return StoredTags(
            tags=list(self._stored.tags),
            last_synced=list(self._stored.last_synced),
            last_updated=self._stored.last_updated,
        )

    # =========================================================================
    # RegistrationService interface (offline mode)
    # =========================================================================

    def current_tags(self) -> List[str]:
        return list(self.load().tags)

    def update_registration(self, tags: Sequence[str]) -> None:
        # Local write only; last_synced tracks remote acknowledgments
        self.save(tags)
