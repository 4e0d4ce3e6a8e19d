"""
Record mutators.

Create, update and delete records in the remote store. Mutators never touch
the mirrored lists: the caller sees the effect once the store pushes the
next snapshot.
"""

import logging
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel

from modules.auth.session import Session
from shared.config import Settings, get_settings

from .exceptions import NotAuthenticatedError, RemoteWriteError
from .interfaces import IDocumentStore
from .mirror import collection_name
from .models import DRAFT_MODELS, PATCH_MODELS, RecordKind, utcnow

logger = logging.getLogger(__name__)

Fields = Union[BaseModel, dict[str, Any]]


class RecordMutator:
    """Writes for one record kind."""

    def __init__(
        self,
        kind: RecordKind,
        store: IDocumentStore,
        session: Session,
        settings: Optional[Settings] = None,
        clock: Callable = utcnow,
    ):
        self.kind = kind
        self._store = store
        self._session = session
        self._settings = settings or get_settings()
        self._clock = clock
        self._collection = collection_name(kind, self._settings)
        self._draft_model = DRAFT_MODELS[kind]
        self._patch_model = PATCH_MODELS[kind]

    def _coerce(self, model: type[BaseModel], fields: Fields) -> BaseModel:
        if isinstance(fields, model):
            return fields
        if isinstance(fields, BaseModel):
            fields = fields.model_dump(exclude_unset=True)
        return model.model_validate(fields)

    async def add(self, draft: Fields) -> None:
        """
        Create a record owned by the current identity.

        Raises:
            NotAuthenticatedError: If nobody is signed in (nothing is sent)
            pydantic.ValidationError: If the draft is incomplete or invalid
            RemoteWriteError: If the store rejects the write
        """
        identity = self._session.current_identity
        if identity is None:
            raise NotAuthenticatedError("add")

        now = self._clock().isoformat()
        data = self._coerce(self._draft_model, draft).model_dump(mode="json")
        data.update({
            self._settings.owner_field: identity.id,
            "created_at": now,
            "updated_at": now,
        })

        try:
            record_id = await self._store.add(self._collection, data)
        except RemoteWriteError:
            logger.exception(f"Failed to add {self.kind.value} record")
            raise
        logger.debug(f"Added {self.kind.value} record {record_id}")

    async def update(self, record_id: str, fields: Fields) -> None:
        """
        Update only the supplied fields and stamp ``updated_at``.

        Ownership is enforced by the store's access rules, not here.
        """
        data = self._coerce(self._patch_model, fields).model_dump(mode="json", exclude_unset=True)
        data["updated_at"] = self._clock().isoformat()

        try:
            await self._store.update(self._collection, record_id, data)
        except RemoteWriteError:
            logger.exception(f"Failed to update {self.kind.value} record {record_id}")
            raise
        logger.debug(f"Updated {self.kind.value} record {record_id}: {sorted(data)}")

    async def delete(self, record_id: str) -> None:
        """Delete a record. Payments of a deleted project are left in place."""
        try:
            await self._store.delete(self._collection, record_id)
        except RemoteWriteError:
            logger.exception(f"Failed to delete {self.kind.value} record {record_id}")
            raise
        logger.debug(f"Deleted {self.kind.value} record {record_id}")


class RecordMutators:
    """The per-kind mutators of one application instance."""

    def __init__(
        self,
        store: IDocumentStore,
        session: Session,
        settings: Optional[Settings] = None,
        clock: Callable = utcnow,
    ):
        self.projects = RecordMutator(RecordKind.PROJECTS, store, session, settings, clock)
        self.clients = RecordMutator(RecordKind.CLIENTS, store, session, settings, clock)
        self.payments = RecordMutator(RecordKind.PAYMENTS, store, session, settings, clock)

    def for_kind(self, kind: RecordKind) -> RecordMutator:
        return {
            RecordKind.PROJECTS: self.projects,
            RecordKind.CLIENTS: self.clients,
            RecordKind.PAYMENTS: self.payments,
        }[kind]
