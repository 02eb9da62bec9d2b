"""
Local tag registry for a device channel.
"""

from channel_tags.registry.tag_registry import (
    TagRegistry,
    RegistrationService,
    RegistrationState,
    TagAction,
    TagChange,
    normalize_tag,
    canonical_tags,
    DEFAULT_MAX_TAG_LENGTH,
)

__all__ = [
    "TagRegistry",
    "RegistrationService",
    "RegistrationState",
    "TagAction",
    "TagChange",
    "normalize_tag",
    "canonical_tags",
    "DEFAULT_MAX_TAG_LENGTH",
]
