"""Restore engine -- apply a capture document back onto a live record graph.

The whole restore runs inside a single ``host.transaction()``: the root's
attributes are updated first, then every association in the document is
rebuilt.  With ``merge=True`` related records whose identifier matches a
live one are updated in place and everything else is created; live records
the document does not mention are never touched.  With ``merge=False`` every
entry in the document becomes a new record.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from recap.capture.models import AssociationNode, CapturedRecord, CaptureDocument
from recap.capture.serializer import strip_redacted
from recap.core.errors import (
    AssociationResolutionError,
    DepthLimitExceeded,
    IdentityMismatch,
    InvalidInput,
)
from recap.host.base import AssociationKind, Host, Record, ResolvedAssociation

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32


def same_identity(left: Any, right: Any) -> bool:
    """Compare identifiers, tolerating ids that went through JSON as text."""
    if left is None or right is None:
        return False
    return left == right or str(left) == str(right)


def restore_record(
    host: Host,
    record: Any,
    document: CaptureDocument,
    *,
    merge: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> None:
    """Apply *document* to *record* atomically.

    Raises :class:`IdentityMismatch` before touching anything when the
    document was captured from a different record.
    """
    if not isinstance(record, Record):
        raise InvalidInput(
            f"{type(record).__name__} does not provide the record capability"
        )
    if not same_identity(document.record_id, record.identifier):
        raise IdentityMismatch(document.record_id, record.identifier)

    restorer = _Restorer(max_depth=max_depth)
    with host.transaction():
        record.update_attributes(strip_redacted(document.attributes))
        restorer.restore_associations(record, document.associations, merge=merge, path=())

    logger.info(
        "Restored %s %r from capture (merge=%s)",
        record.type_name,
        record.identifier,
        merge,
    )


class _Restorer:
    def __init__(self, *, max_depth: int) -> None:
        self._max_depth = max_depth

    def restore_associations(
        self,
        record: Record,
        associations: Mapping[str, AssociationNode],
        *,
        merge: bool,
        path: tuple[str, ...],
    ) -> None:
        if associations and len(path) >= self._max_depth:
            raise DepthLimitExceeded(self._max_depth, path + (next(iter(associations)),))

        for name, node in associations.items():
            if isinstance(node, list):
                self._restore_collection(record, name, node, merge=merge, path=path + (name,))
            else:
                self._restore_single(record, name, node, merge=merge, path=path + (name,))

    def _restore_collection(
        self,
        record: Record,
        name: str,
        entries: list[CapturedRecord],
        *,
        merge: bool,
        path: tuple[str, ...],
    ) -> None:
        id_key = record.related_identifier_key(name)
        live: list[Record] = []
        if merge:
            live = list(self._resolve(record, name, path).records)

        for entry in entries:
            incoming_id = entry.attributes.get(id_key) if id_key else None
            match = None
            if merge and incoming_id is not None:
                match = next((r for r in live if same_identity(r.identifier, incoming_id)), None)

            if match is not None:
                logger.debug("Merging %s %r in place", name, incoming_id)
                match.update_attributes(strip_redacted(entry.attributes))
                self.restore_associations(match, entry.associations, merge=merge, path=path)
            else:
                created = record.create_related(name, self._creation_attributes(entry, id_key))
                self.restore_associations(created, entry.associations, merge=False, path=path)

    def _restore_single(
        self,
        record: Record,
        name: str,
        entry: CapturedRecord,
        *,
        merge: bool,
        path: tuple[str, ...],
    ) -> None:
        id_key = record.related_identifier_key(name)
        incoming_id = entry.attributes.get(id_key) if id_key else None

        if merge and incoming_id is not None:
            current = self._resolve(record, name, path).record
            if current is not None and same_identity(current.identifier, incoming_id):
                logger.debug("Merging %s %r in place", name, incoming_id)
                current.update_attributes(strip_redacted(entry.attributes))
                self.restore_associations(current, entry.associations, merge=True, path=path)
                return

        created = record.create_related(name, self._creation_attributes(entry, id_key))
        self.restore_associations(created, entry.associations, merge=False, path=path)

    @staticmethod
    def _resolve(record: Record, name: str, path: tuple[str, ...]) -> ResolvedAssociation:
        resolved = record.resolve_association(name)
        if resolved.kind is AssociationKind.UNKNOWN:
            raise AssociationResolutionError(
                name, f"{record.type_name} has no association named {name!r}", path=path
            )
        return resolved

    @staticmethod
    def _creation_attributes(entry: CapturedRecord, id_key: str | None) -> dict[str, Any]:
        attributes = strip_redacted(entry.attributes)
        if id_key is not None:
            attributes.pop(id_key, None)
        return attributes
