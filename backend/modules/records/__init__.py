"""
Records module.

Projects, clients and payments: their models, the remote store boundary,
the live mirror of the current identity's records, and the mutators.

Public API:
- LiveCollectionMirror / CollectionStream: Mirrored lists
- RecordMutator / RecordMutators: add, update, delete per kind
- IDocumentStore: Interface to the remote store
- SupabaseDocumentStore / InMemoryDocumentStore: Store implementations
- Record exceptions: NotAuthenticatedError, RemoteWriteError, RemoteSubscriptionError
"""

from .interfaces import IDocumentStore, IStoreSubscription
from .models import (
    RecordKind,
    ProjectStatus,
    PaymentStatus,
    Record,
    Project,
    Client,
    Payment,
    ProjectDraft,
    ClientDraft,
    PaymentDraft,
    ProjectPatch,
    ClientPatch,
    PaymentPatch,
)
from .mirror import CollectionStream, LiveCollectionMirror, collection_name, parse_snapshot
from .mutator import RecordMutator, RecordMutators
from .store import SupabaseDocumentStore, InMemoryDocumentStore
from .exceptions import NotAuthenticatedError, RemoteWriteError, RemoteSubscriptionError

__all__ = [
    # Interfaces
    "IDocumentStore",
    "IStoreSubscription",
    # Models
    "RecordKind",
    "ProjectStatus",
    "PaymentStatus",
    "Record",
    "Project",
    "Client",
    "Payment",
    "ProjectDraft",
    "ClientDraft",
    "PaymentDraft",
    "ProjectPatch",
    "ClientPatch",
    "PaymentPatch",
    # Mirror and mutators
    "CollectionStream",
    "LiveCollectionMirror",
    "collection_name",
    "parse_snapshot",
    "RecordMutator",
    "RecordMutators",
    # Stores
    "SupabaseDocumentStore",
    "InMemoryDocumentStore",
    # Exceptions
    "NotAuthenticatedError",
    "RemoteWriteError",
    "RemoteSubscriptionError",
]
