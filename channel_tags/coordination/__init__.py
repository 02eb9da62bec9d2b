"""
Coordination of registry, sync worker and local store.
"""

from channel_tags.coordination.coordinator import TagSyncCoordinator

__all__ = [
    "TagSyncCoordinator",
]
