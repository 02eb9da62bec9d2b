"""
TagSyncCoordinator - wires the tag registry to its sync worker and local store.

Wiring (online):
    TagRegistry ──update_registration──▶ RegistrationSyncWorker ──▶ ChannelRegistrationClient
         ▲                                        │
         └──────── mark_synced / registration_failed ◀┘
    TagRegistry ──listener──▶ TagStore (local edits)
    sync acknowledgment ──▶ TagStore (last_synced)

Wiring (offline):
    TagRegistry ──update_registration──▶ TagStore

Seeding:
    Remote tags win unless the store holds unsynced local edits made on top
    of the same remote set; in that case the local edits are re-sent.
    If the remote side cannot be reached, the store seeds the registry.
"""

from typing import List, Optional

import httpx

from channel_tags.config import Config, get_config
from channel_tags.clients import ChannelRegistrationClient
from channel_tags.persistence import TagStore, StoredTags
from channel_tags.registry import TagRegistry, TagChange, TagAction, canonical_tags
from channel_tags.sync import RegistrationSyncWorker
from channel_tags.utils.exceptions import ChannelTagsError
from channel_tags.utils.logging_config import get_logger

logger = get_logger("coordinator")


class TagSyncCoordinator:
    """
    Owns the lifecycle of one channel's tag registry.

    Usage:
        with TagSyncCoordinator(config=config) as coordinator:
            coordinator.registry.add_tag("vip")
        # Pending registration flushed on exit
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        offline: bool = False,
        client: Optional[ChannelRegistrationClient] = None,
        store: Optional[TagStore] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the coordinator with configuration.

        Args:
            config: Configuration object. If None, uses global config.
            offline: If True, only the local store is used
            client: Registration client (created from config if None)
            store: Local tag store (created from config if None)
            transport: httpx transport passed to a created client

        Raises:
            ConfigurationError: If online and channel credentials are missing
        """
        self._config = config or get_config()
        self._offline = offline

        self._store = store or TagStore(
            path=self._config.store.path,
            enabled=self._config.store.enabled,
        )

        self._client: Optional[ChannelRegistrationClient] = None
        self._worker: Optional[RegistrationSyncWorker] = None

        if not offline:
            if client is None:
                self._config.validate()
                client = ChannelRegistrationClient(config=self._config, transport=transport)
            self._client = client
            self._worker = RegistrationSyncWorker(
                client,
                check_interval=self._config.sync.check_interval,
                max_sync_attempts=self._config.sync.max_sync_attempts,
            )

        self._registry: Optional[TagRegistry] = None

    @property
    def registry(self) -> TagRegistry:
        if self._registry is None:
            raise RuntimeError("Coordinator not started")
        return self._registry

    @property
    def offline(self) -> bool:
        return self._offline

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> TagRegistry:
        """
        Seed the registry and start background sync.

        Returns:
            The seeded registry
        """
        if self._registry is not None:
            return self._registry

        stored = self._store.load()

        if self._offline:
            self._registry = self._build_registry(self._store, stored.tags)
            logger.info(f"Started offline with {self._registry.count()} tags")
            return self._registry

        self._worker.set_callbacks(
            on_success=self._on_synced,
            on_failure=self._on_sync_failed,
        )
        self._registry = self._seed_online(stored)
        self._registry.add_listener(self._on_change)
        self._worker.start()

        logger.info(
            f"Started with {self._registry.count()} tags "
            f"(state={self._registry.state.value})"
        )
        return self._registry

    def stop(self) -> None:
        """Flush pending registration and release resources."""
        if self._worker is not None:
            self._worker.stop(flush=True)
        if self._client is not None:
            self._client.close()
        logger.info(f"Stopped. Stats: {self.get_stats()}")

    def __enter__(self) -> "TagSyncCoordinator":
        self.start()
        return self

    def __exit__(self, *args) -> None:
        self.stop()

    def get_stats(self) -> dict:
        """Return counters describing the current session."""
        stats = {
            "offline": self._offline,
            "tags": self._registry.count() if self._registry is not None else 0,
            "state": self._registry.state.value if self._registry is not None else None,
        }
        if self._worker is not None:
            stats["syncs_completed"] = self._worker.syncs_completed
            stats["syncs_failed"] = self._worker.syncs_failed
            stats["coalesced"] = self._worker.queue.coalesced
        return stats

    # =========================================================================
    # Seeding
    # =========================================================================

    def _build_registry(self, service, tags: List[str]) -> TagRegistry:
        return TagRegistry(
            service,
            tags=canonical_tags(tags, self._config.tags.max_length),
            max_tag_length=self._config.tags.max_length,
            sync_enabled=self._config.channel.tag_registration_enabled,
        )

    def _seed_online(self, stored: StoredTags) -> TagRegistry:
        try:
            remote_tags = list(self._worker.current_tags())
        except ChannelTagsError as e:
            logger.warning(f"Could not fetch registered tags, using local store: {e}")
            registry = self._build_registry(self._worker, stored.tags)
            if not stored.in_sync:
                registry.request_sync()
            return registry

        has_local_edits = not stored.in_sync and stored.last_synced == remote_tags
        if has_local_edits:
            logger.info("Re-sending tags edited while offline")
            registry = self._build_registry(self._worker, stored.tags)
            registry.request_sync()
            return registry

        registry = self._build_registry(self._worker, remote_tags)
        self._store.save(registry.tags(), last_synced=registry.tags())
        return registry

    # =========================================================================
    # Callbacks
    # =========================================================================

    def _on_change(self, change: TagChange) -> None:
        if change.action is TagAction.SYNCED:
            return
        self._store.save(change.tags)

    def _on_synced(self, tags: List[str]) -> None:
        self._registry.mark_synced(tags)
        self._store.save(self._registry.tags(), last_synced=tags)

    def _on_sync_failed(self, tags: List[str], error: Exception) -> None:
        self._registry.registration_failed(error)

