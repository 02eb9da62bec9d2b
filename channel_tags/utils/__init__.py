"""
Utility modules for channel tags.
"""

from channel_tags.utils.logging_config import get_logger, setup_file_logging
from channel_tags.utils.exceptions import (
    ChannelTagsError,
    InvalidTagError,
    TagNotFoundError,
    TagIndexError,
    RegistrationAPIError,
    RateLimitExceededError,
    NetworkTimeoutError,
    AuthenticationError,
    ConfigurationError,
    TagStoreError,
)
from channel_tags.utils.retry import retry, is_transient

__all__ = [
    "get_logger",
    "setup_file_logging",
    "ChannelTagsError",
    "InvalidTagError",
    "TagNotFoundError",
    "TagIndexError",
    "RegistrationAPIError",
    "RateLimitExceededError",
    "NetworkTimeoutError",
    "AuthenticationError",
    "ConfigurationError",
    "TagStoreError",
    "retry",
    "is_transient",
]
