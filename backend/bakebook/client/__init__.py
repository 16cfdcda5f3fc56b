"""
Offline Client Package
Keeps a local copy of the user's session and recipes and queues edits made
while disconnected, replaying them against the API when back online.

Components (leaf to root):
    - store.LocalStore: durable key-value slots (user, token, recipes, outbox)
    - outbox.Outbox: ordered queue of pending mutations
    - connectivity.Connectivity: online/offline indicator
    - api_client.ApiClient: authenticated HTTP calls with cache fallback
    - sync.SyncEngine: drains the outbox against the API
    - session.BakeBookSession: the facade a front end talks to
"""

from bakebook.client.store import LocalStore, StorageError
from bakebook.client.outbox import Outbox, OutboxItem
from bakebook.client.connectivity import Connectivity
from bakebook.client.api_client import ApiClient, ApiError
from bakebook.client.sync import SyncEngine, SyncResult
from bakebook.client.session import BakeBookSession, OfflineLoginError

__all__ = [
    "LocalStore",
    "StorageError",
    "Outbox",
    "OutboxItem",
    "Connectivity",
    "ApiClient",
    "ApiError",
    "SyncEngine",
    "SyncResult",
    "BakeBookSession",
    "OfflineLoginError",
]
