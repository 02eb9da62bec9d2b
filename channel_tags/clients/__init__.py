"""
Remote registration clients.
"""

from channel_tags.clients.registration_client import ChannelRegistrationClient

__all__ = [
    "ChannelRegistrationClient",
]
