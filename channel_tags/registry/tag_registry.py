"""
TagRegistry - authoritative local tag set for a device channel.

Writers (UI intents, sync acknowledgments) are serialized by a single lock.
Readers never lock: every mutation builds a new tuple and swaps it in, so
count()/tag_at()/tags() always see a complete snapshot.

Flow:
    intent (add/remove) → validate → swap snapshot → state DIRTY
        → listeners(TagChange) → service.update_registration(snapshot)
    sync acknowledgment → mark_synced(snapshot) → state CLEAN
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Iterator, List, Optional, Protocol, Sequence, Tuple

from channel_tags.utils.logging_config import get_logger
from channel_tags.utils.exceptions import (
    InvalidTagError,
    TagNotFoundError,
    TagIndexError,
)

logger = get_logger("registry")


DEFAULT_MAX_TAG_LENGTH = 127


class RegistrationState(Enum):
    """Whether the local tag set matches the last acknowledged remote set."""
    CLEAN = "clean"
    DIRTY = "dirty"


class TagAction(Enum):
    """Kind of change reported to registry listeners."""
    ADD = "add"
    REMOVE = "remove"
    SET = "set"
    SYNCED = "synced"


@dataclass(frozen=True)
class TagChange:
    """Event emitted to listeners after a registry change."""
    action: TagAction
    changed: Tuple[str, ...]
    tags: Tuple[str, ...]
    state: RegistrationState


class RegistrationService(Protocol):
    """Remote registration channel the registry seeds from and reports to."""

    def current_tags(self) -> Sequence[str]:
        ...

    def update_registration(self, tags: Sequence[str]) -> None:
        ...


TagListener = Callable[[TagChange], None]


def normalize_tag(value: str, max_length: int = DEFAULT_MAX_TAG_LENGTH) -> str:
    """
    Strip surrounding whitespace and validate a tag value.

    Args:
        value: Raw tag value
        max_length: Maximum allowed length after stripping

    Returns:
        Normalized tag

    Raises:
        InvalidTagError: If the value is not a string, is empty, or is too long
    """
    if not isinstance(value, str):
        raise InvalidTagError(value, "tags must be strings")

    tag = value.strip()
    if not tag:
        raise InvalidTagError(value, "tag is empty")
    if len(tag) > max_length:
        raise InvalidTagError(value, f"longer than {max_length} characters")

    return tag


def canonical_tags(values: Iterable[str], max_length: int = DEFAULT_MAX_TAG_LENGTH) -> List[str]:
    """
    Normalize externally stored tags, dropping invalid and repeated values.

    Unlike mutations, this never raises: persisted or remote data that breaks
    the tag rules is logged and skipped.
    """
    seeded: List[str] = []
    for value in values:
        try:
            tag = normalize_tag(value, max_length)
        except InvalidTagError as e:
            logger.warning(f"Dropping stored tag: {e}")
            continue
        if tag not in seeded:
            seeded.append(tag)
    return seeded


class TagRegistry:
    """
    Ordered set of unique device tags with registration side effects.

    Every successful mutation marks the registry DIRTY, notifies listeners
    and hands the full tag snapshot to the registration service without
    waiting for it. Only an acknowledgment (mark_synced) makes it CLEAN.

    Usage:
        registry = TagRegistry.from_service(service)
        registry.add_tag("vip")
        registry.remove_at(0)

        # Later, from the sync component
        registry.mark_synced(acknowledged_tags)
    """

    def __init__(
        self,
        service: RegistrationService,
        tags: Optional[Iterable[str]] = None,
        max_tag_length: int = DEFAULT_MAX_TAG_LENGTH,
        sync_enabled: bool = True,
    ):
        """
        Initialize the registry from already-persisted tags.

        Args:
            service: Registration service notified after each mutation
            tags: Initial tags, considered in sync with the remote side
            max_tag_length: Maximum tag length after normalization
            sync_enabled: If False, mutations stay local and the service is
                never asked to update the registration

        Raises:
            InvalidTagError: If an initial tag is invalid or duplicated
        """
        self._service = service
        self._max_tag_length = max_tag_length
        self._sync_enabled = sync_enabled

        self._write_lock = threading.RLock()
        self._listeners: List[TagListener] = []

        self._tags: Tuple[str, ...] = self._normalize_batch(tags or ())
        self._last_synced: Tuple[str, ...] = self._tags
        self._state = RegistrationState.CLEAN
        self._last_error: Optional[Exception] = None

    @classmethod
    def from_service(
        cls,
        service: RegistrationService,
        max_tag_length: int = DEFAULT_MAX_TAG_LENGTH,
        sync_enabled: bool = True,
    ) -> "TagRegistry":
        """
        Seed a registry from the service's current tags.

        Invalid and duplicate remote values are dropped with a warning
        instead of failing startup.
        """
        seeded = canonical_tags(service.current_tags() or (), max_tag_length)
        logger.info(f"Seeded registry with {len(seeded)} tags")
        return cls(
            service,
            tags=seeded,
            max_tag_length=max_tag_length,
            sync_enabled=sync_enabled,
        )

    # =========================================================================
    # Reads (lock-free snapshots)
    # =========================================================================

    def count(self) -> int:
        """Return number of tags currently held."""
        return len(self._tags)

    def tag_at(self, index: int) -> str:
        """
        Return the tag at a display position.

        Raises:
            TagIndexError: If index is outside [0, count())
        """
        snapshot = self._tags
        self._check_index(index, snapshot)
        return snapshot[index]

    def tags(self) -> Tuple[str, ...]:
        """Return an immutable snapshot of all tags in display order."""
        return self._tags

    def __len__(self) -> int:
        return len(self._tags)

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __contains__(self, value: object) -> bool:
        if isinstance(value, str):
            value = value.strip()
        return value in self._tags

    def __repr__(self) -> str:
        return f"TagRegistry(tags={list(self._tags)!r}, state={self._state.value})"

    @property
    def state(self) -> RegistrationState:
        return self._state

    @property
    def is_dirty(self) -> bool:
        return self._state is RegistrationState.DIRTY

    @property
    def last_synced(self) -> Tuple[str, ...]:
        """Last tag snapshot acknowledged by the registration channel."""
        return self._last_synced

    @property
    def last_error(self) -> Optional[Exception]:
        """Most recent registration failure, cleared on acknowledgment."""
        return self._last_error

    @property
    def sync_enabled(self) -> bool:
        return self._sync_enabled

    # =========================================================================
    # Mutations
    # =========================================================================

    def add_tag(self, value: str) -> None:
        """
        Append a tag.

        Raises:
            InvalidTagError: If the value is empty, too long, or already present
        """
        tag = normalize_tag(value, self._max_tag_length)

        with self._write_lock:
            if tag in self._tags:
                raise InvalidTagError(value, "already present")
            self._commit(self._tags + (tag,), TagAction.ADD, (tag,))

    def add_tags(self, values: Iterable[str]) -> None:
        """
        Append several tags with a single registration update.

        The batch is validated as a whole; on error nothing is added.

        Raises:
            InvalidTagError: If any value is invalid, repeated, or already present
        """
        batch = self._normalize_batch(values)
        if not batch:
            return

        with self._write_lock:
            present = [tag for tag in batch if tag in self._tags]
            if present:
                raise InvalidTagError(present[0], "already present")
            self._commit(self._tags + batch, TagAction.ADD, batch)

    def remove_tag(self, value: str) -> None:
        """
        Remove a tag by value.

        Raises:
            TagNotFoundError: If the tag is not present
        """
        key = value.strip() if isinstance(value, str) else value

        with self._write_lock:
            if key not in self._tags:
                raise TagNotFoundError(value)
            remaining = tuple(tag for tag in self._tags if tag != key)
            self._commit(remaining, TagAction.REMOVE, (key,))

    def remove_tags(self, values: Iterable[str]) -> None:
        """
        Remove several tags with a single registration update.

        Raises:
            TagNotFoundError: If any value is absent (nothing is removed)
        """
        keys: List[str] = []
        for value in values:
            key = value.strip() if isinstance(value, str) else value
            if key not in keys:
                keys.append(key)
        if not keys:
            return

        with self._write_lock:
            for key in keys:
                if key not in self._tags:
                    raise TagNotFoundError(key)
            remaining = tuple(tag for tag in self._tags if tag not in keys)
            self._commit(remaining, TagAction.REMOVE, tuple(keys))

    def remove_at(self, index: int) -> str:
        """
        Remove the tag at a display position.

        Returns:
            The removed tag

        Raises:
            TagIndexError: If index is outside [0, count())
        """
        with self._write_lock:
            snapshot = self._tags
            self._check_index(index, snapshot)
            tag = snapshot[index]
            self._commit(snapshot[:index] + snapshot[index + 1:], TagAction.REMOVE, (tag,))
            return tag

    def remove_displayed(self, label: Optional[str]) -> bool:
        """
        Remove the tag shown by a display row.

        A row whose label text is missing, empty or not text at all is stale;
        the request is ignored without error and without a registration update.

        Returns:
            True if a tag was removed, False if the request was ignored

        Raises:
            TagNotFoundError: If the label names a tag that is not present
        """
        if not isinstance(label, str) or not label.strip():
            logger.debug("Ignoring removal for display row with empty label")
            return False

        self.remove_tag(label)
        return True

    def set_tags(self, values: Iterable[str]) -> bool:
        """
        Replace the whole tag set.

        Repeated values are dropped, keeping the first occurrence.

        Returns:
            True if the tag set changed

        Raises:
            InvalidTagError: If any value is empty or too long
        """
        replacement: List[str] = []
        for value in values:
            tag = normalize_tag(value, self._max_tag_length)
            if tag not in replacement:
                replacement.append(tag)
        new_tags = tuple(replacement)

        with self._write_lock:
            if new_tags == self._tags:
                return False
            self._commit(new_tags, TagAction.SET, new_tags)
            return True

    # =========================================================================
    # Sync acknowledgment
    # =========================================================================

    def mark_synced(self, tags: Optional[Sequence[str]] = None) -> bool:
        """
        Record that the registration channel accepted a tag snapshot.

        Args:
            tags: Snapshot that was acknowledged. None means the current set.

        Returns:
            True if the registry is now CLEAN, False if the acknowledged
            snapshot is older than the current tag set
        """
        with self._write_lock:
            acked = self._tags if tags is None else tuple(tags)
            self._last_synced = acked
            self._last_error = None

            if acked != self._tags:
                logger.debug(
                    f"Acknowledged snapshot of {len(acked)} tags is stale; staying dirty"
                )
                return False

            if self._state is RegistrationState.DIRTY:
                self._state = RegistrationState.CLEAN
                logger.info(f"Registration in sync ({len(acked)} tags)")
                self._notify_listeners(
                    TagChange(TagAction.SYNCED, (), acked, RegistrationState.CLEAN)
                )
            return True

    def request_sync(self) -> None:
        """
        Mark the registry dirty and re-send the current snapshot.

        Used when the remote side is known to be behind, e.g. tags edited
        offline in a previous session.
        """
        with self._write_lock:
            self._state = RegistrationState.DIRTY
            self._request_registration(self._tags)

    def registration_failed(self, error: Exception) -> None:
        """Record a failed registration attempt. The registry stays dirty."""
        with self._write_lock:
            self._last_error = error
        logger.warning(f"Registration update failed: {error}")

    # =========================================================================
    # Listeners
    # =========================================================================

    def add_listener(self, listener: TagListener) -> None:
        """Register a callback invoked with a TagChange after each change."""
        with self._write_lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove_listener(self, listener: TagListener) -> None:
        with self._write_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    # =========================================================================
    # Internals
    # =========================================================================

    @staticmethod
    def _check_index(index: int, snapshot: Tuple[str, ...]) -> None:
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"tag index must be an integer, not {type(index).__name__}")
        if not 0 <= index < len(snapshot):
            raise TagIndexError(index, len(snapshot))

    def _normalize_batch(self, values: Iterable[str]) -> Tuple[str, ...]:
        batch: List[str] = []
        for value in values:
            tag = normalize_tag(value, self._max_tag_length)
            if tag in batch:
                raise InvalidTagError(value, "repeated in batch")
            batch.append(tag)
        return tuple(batch)

    def _commit(self, new_tags: Tuple[str, ...], action: TagAction, changed: Tuple[str, ...]) -> None:
        """Swap in a new snapshot and fan out the change. Caller holds the write lock."""
        self._tags = new_tags
        self._state = RegistrationState.DIRTY

        logger.info(f"Tags {action.value}: {list(changed)} ({len(new_tags)} total)")

        self._notify_listeners(TagChange(action, changed, new_tags, RegistrationState.DIRTY))
        self._request_registration(new_tags)

    def _notify_listeners(self, change: TagChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception as e:
                logger.error(f"Tag listener {listener!r} failed: {e}")

    def _request_registration(self, tags: Tuple[str, ...]) -> None:
        """Fire-and-forget registration update; failures never reach the caller."""
        if not self._sync_enabled:
            logger.debug("Channel tag registration disabled; keeping tags local")
            return

        try:
            self._service.update_registration(list(tags))
        except Exception as e:
            self._last_error = e
            logger.error(f"Registration update request failed: {e}")
