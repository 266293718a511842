"""Data models for capture documents and association specs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, NamedTuple, Union

from recap.core.errors import InvalidInput, StorageError

REQUIRED_KEYS = ("model", "record_id", "attributes")


class SpecNode(NamedTuple):
    """One association to traverse, plus the spec to apply to its records."""

    name: str
    children: tuple[SpecNode, ...] = ()


def normalize_spec(spec: Any) -> tuple[SpecNode, ...]:
    """Normalise a caller-supplied association spec into :class:`SpecNode` s.

    Accepts a bare name, a mapping of ``name -> nested spec`` or any
    sequence mixing the two::

        ["posts", {"posts": ["comments"]}, {"profile": "avatar"}]

    When a name occurs more than once at the same level the last occurrence
    wins.
    """
    if spec is None:
        return ()
    if isinstance(spec, SpecNode):
        return (spec,)
    if isinstance(spec, str):
        return (SpecNode(spec),)
    if isinstance(spec, Mapping):
        nodes = []
        for name, nested in spec.items():
            if not isinstance(name, str):
                raise InvalidInput(f"association names must be strings, got {name!r}")
            nodes.append(SpecNode(name, normalize_spec(nested)))
        return _dedupe(nodes)
    if isinstance(spec, (list, tuple)):
        nodes = []
        for item in spec:
            nodes.extend(normalize_spec(item))
        return _dedupe(nodes)
    raise InvalidInput(f"unsupported association spec: {spec!r}")


def _dedupe(nodes: list[SpecNode]) -> tuple[SpecNode, ...]:
    by_name: dict[str, SpecNode] = {}
    for node in nodes:
        by_name.pop(node.name, None)
        by_name[node.name] = node
    return tuple(by_name.values())


AssociationNode = Union["CapturedRecord", list["CapturedRecord"]]


@dataclass
class CapturedRecord:
    """Attributes and nested associations of one related record."""

    attributes: dict[str, Any] = field(default_factory=dict)
    associations: dict[str, AssociationNode] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "attributes": self.attributes,
            "associations": _associations_to_dict(self.associations),
        }

    @classmethod
    def from_dict(cls, data: Any) -> CapturedRecord:
        if not isinstance(data, Mapping):
            raise StorageError(
                f"Invalid capture data: expected an object, got {type(data).__name__}"
            )
        attributes = data.get("attributes", {})
        if not isinstance(attributes, Mapping):
            raise StorageError("Invalid capture data: 'attributes' must be an object")
        return cls(
            attributes=dict(attributes),
            associations=_associations_from_dict(data.get("associations")),
        )


@dataclass
class CaptureDocument:
    """Snapshot of a root record and the part of its graph a spec reached."""

    model: str
    record_id: Any
    attributes: dict[str, Any] = field(default_factory=dict)
    associations: dict[str, AssociationNode] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a plain dict in document key order."""
        return {
            "model": self.model,
            "record_id": self.record_id,
            "attributes": self.attributes,
            "associations": _associations_to_dict(self.associations),
        }

    @classmethod
    def from_dict(cls, data: Any) -> CaptureDocument:
        """Reconstruct from a plain dict, raising ``StorageError`` on bad shape."""
        if not isinstance(data, Mapping):
            raise StorageError("Invalid capture format: expected JSON object")
        missing = [key for key in REQUIRED_KEYS if key not in data]
        if missing:
            raise StorageError(f"Invalid capture data: missing keys {', '.join(missing)}")
        root = CapturedRecord.from_dict(data)
        return cls(
            model=data["model"],
            record_id=data["record_id"],
            attributes=root.attributes,
            associations=root.associations,
        )


def _associations_to_dict(associations: Mapping[str, AssociationNode]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for name, node in associations.items():
        if isinstance(node, list):
            out[name] = [entry.to_dict() for entry in node]
        else:
            out[name] = node.to_dict()
    return out


def _associations_from_dict(data: Any) -> dict[str, AssociationNode]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise StorageError("Invalid capture data: 'associations' must be an object")
    out: dict[str, AssociationNode] = {}
    for name, node in data.items():
        if isinstance(node, list):
            out[name] = [CapturedRecord.from_dict(entry) for entry in node]
        else:
            out[name] = CapturedRecord.from_dict(node)
    return out
