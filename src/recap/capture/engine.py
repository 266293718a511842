"""Capture engine -- walk a record and an association spec into a document.

Usage::

    from recap.capture.engine import capture_record

    document = capture_record(record, ["profile", {"posts": ["comments"]}])
"""

from __future__ import annotations

import logging
from typing import Any

from recap.capture.models import (
    AssociationNode,
    CapturedRecord,
    CaptureDocument,
    SpecNode,
    normalize_spec,
)
from recap.capture.serializer import redact_attributes
from recap.core.errors import (
    AssociationResolutionError,
    DepthLimitExceeded,
    InvalidInput,
)
from recap.host.base import AssociationKind, Record

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32


def capture_record(
    record: Any,
    associations: Any = (),
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    redact: bool = False,
) -> CaptureDocument:
    """Capture *record* and the associations named by *associations*.

    Unknown association names are skipped, nil single associations are
    omitted.  Any failure while reading an association aborts the whole
    capture with :class:`AssociationResolutionError`; no partial document is
    ever returned.
    """
    if not isinstance(record, Record):
        raise InvalidInput(
            f"{type(record).__name__} does not provide the record capability"
        )
    if record.identifier is None:
        raise InvalidInput(f"cannot capture unsaved {record.type_name} (identifier is None)")

    spec = normalize_spec(associations)
    walker = _CaptureWalker(max_depth=max_depth, redact=redact)
    root = walker.walk(record, spec, path=())

    logger.debug("Captured %s %r (%d association(s))", record.type_name, record.identifier, len(root.associations))
    return CaptureDocument(
        model=record.type_name,
        record_id=record.identifier,
        attributes=root.attributes,
        associations=root.associations,
    )


class _CaptureWalker:
    def __init__(self, *, max_depth: int, redact: bool) -> None:
        self._max_depth = max_depth
        self._redact = redact

    def walk(self, record: Record, spec: tuple[SpecNode, ...], path: tuple[str, ...]) -> CapturedRecord:
        if len(path) > self._max_depth:
            raise DepthLimitExceeded(self._max_depth, path)

        attributes = dict(record.read_attributes())
        if self._redact:
            attributes = redact_attributes(attributes)

        associations: dict[str, AssociationNode] = {}
        for node in spec:
            captured = self._capture_association(record, node, path + (node.name,))
            if captured is not None:
                associations[node.name] = captured

        return CapturedRecord(attributes=attributes, associations=associations)

    def _capture_association(
        self,
        record: Record,
        node: SpecNode,
        path: tuple[str, ...],
    ) -> AssociationNode | None:
        try:
            resolved = record.resolve_association(node.name)
            if resolved.kind is AssociationKind.SINGLE:
                return self.walk(resolved.record, node.children, path)
            if resolved.kind is AssociationKind.COLLECTION:
                return [self.walk(related, node.children, path) for related in resolved.records]
        except (AssociationResolutionError, DepthLimitExceeded):
            raise
        except Exception as exc:
            raise AssociationResolutionError(node.name, str(exc), path=path) from exc

        if resolved.kind is AssociationKind.UNKNOWN:
            logger.debug("Skipping unknown association %s on %s", node.name, record.type_name)
        return None
