"""
Background registration sync for channel tags.
"""

from channel_tags.sync.registration_queue import RegistrationQueue
from channel_tags.sync.sync_worker import RegistrationSyncWorker

__all__ = [
    "RegistrationQueue",
    "RegistrationSyncWorker",
]
