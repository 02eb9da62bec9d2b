"""
Channel Tags - Device tag registry with background registration sync

Keeps the ordered set of tags for a push notification device channel,
validates edits locally and pushes the resulting tag set to the channel
registration API without blocking the caller.

Usage:
    # Show tags
    python -m channel_tags.main list

    # Add tags
    python -m channel_tags.main add vip beta

    # Local edits only (synced on the next online run)
    python -m channel_tags.main remove vip --offline

Architecture:
    TagRegistry (single-writer lock, immutable snapshots)
          ↓ update_registration (fire-and-forget)
    RegistrationSyncWorker (RegistrationQueue keeps latest snapshot)
          ↓
    ChannelRegistrationClient → PUT /channels/{channel_id}
          ↓ acknowledgment
    TagRegistry.mark_synced → TagStore (channel_tags.json)
"""

from channel_tags.config import get_config, load_config, Config
from channel_tags.registry import (
    TagRegistry,
    RegistrationService,
    RegistrationState,
    TagAction,
    TagChange,
    normalize_tag,
)
from channel_tags.sync import RegistrationQueue, RegistrationSyncWorker
from channel_tags.clients import ChannelRegistrationClient
from channel_tags.persistence import TagStore, StoredTags
from channel_tags.coordination import TagSyncCoordinator
from channel_tags.utils.exceptions import (
    ChannelTagsError,
    InvalidTagError,
    TagNotFoundError,
    TagIndexError,
)

__version__ = "0.1.0"

__all__ = [
    # Config
    "get_config",
    "load_config",
    "Config",
    
    # Registry
    "TagRegistry",
    "RegistrationService",
    "RegistrationState",
    "TagAction",
    "TagChange",
    "normalize_tag",
    
    # Sync
    "RegistrationQueue",
    "RegistrationSyncWorker",
    "ChannelRegistrationClient",
    
    # Persistence
    "TagStore",
    "StoredTags",
    
    # Coordination
    "TagSyncCoordinator",
    
    # Errors
    "ChannelTagsError",
    "InvalidTagError",
    "TagNotFoundError",
    "TagIndexError",
]
