"""Protocols the capture and restore engines require from a host persistence layer.

The engines never talk to an ORM directly.  A host adapter wraps its live
objects in something satisfying :class:`Record` and exposes a
:class:`Host` that knows how to wrap objects and run a block of mutations
atomically.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, ContextManager, Mapping, Protocol, runtime_checkable


class AssociationKind(enum.Enum):
    SINGLE = "single"
    COLLECTION = "collection"
    EMPTY = "empty"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ResolvedAssociation:
    """Result of resolving an association name against a record.

    ``record`` is set for ``SINGLE``; ``records`` for ``COLLECTION``.
    ``EMPTY`` is a known single association with nothing linked, and
    ``UNKNOWN`` means the record has no association by that name.
    """

    kind: AssociationKind
    record: Record | None = None
    records: tuple[Record, ...] = field(default_factory=tuple)

    @classmethod
    def single(cls, record: Record) -> ResolvedAssociation:
        return cls(AssociationKind.SINGLE, record=record)

    @classmethod
    def collection(cls, records: Any) -> ResolvedAssociation:
        return cls(AssociationKind.COLLECTION, records=tuple(records))

    @classmethod
    def empty(cls) -> ResolvedAssociation:
        return cls(AssociationKind.EMPTY)

    @classmethod
    def unknown(cls) -> ResolvedAssociation:
        return cls(AssociationKind.UNKNOWN)


@runtime_checkable
class Record(Protocol):
    """A live, persisted entity as seen by the engines."""

    @property
    def type_name(self) -> str: ...

    @property
    def identifier(self) -> Any: ...

    def read_attributes(self) -> dict[str, Any]: ...

    def resolve_association(self, name: str) -> ResolvedAssociation: ...

    def related_identifier_key(self, name: str) -> str | None:
        """Attribute name holding the identifier of records behind *name*.

        Raises :class:`~recap.core.errors.AssociationResolutionError` when
        the record has no such association.
        """
        ...

    def update_attributes(self, attributes: Mapping[str, Any]) -> None:
        """Apply *attributes* with validation.

        Raises :class:`~recap.core.errors.ValidationFailure` on rejection.
        """
        ...

    def create_related(self, name: str, attributes: Mapping[str, Any]) -> Record:
        """Create a record of the type declared for *name* and link it.

        Collections gain the new record; a single association is
        reassigned to it, replacing any previous link.
        """
        ...


@runtime_checkable
class Host(Protocol):
    """Entry point of a host persistence layer."""

    def wrap(self, obj: Any) -> Record:
        """Return *obj* as a :class:`Record`, raising ``InvalidInput`` if it cannot be."""
        ...

    def transaction(self) -> ContextManager[None]:
        """Run the enclosed block so that any exception undoes all of it."""
        ...
