"""
Local persistence for channel tags.
"""

from channel_tags.persistence.tag_store import TagStore, StoredTags

__all__ = [
    "TagStore",
    "StoredTags",
]
