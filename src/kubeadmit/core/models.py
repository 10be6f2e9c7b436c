#!/usr/bin/env python3
"""
KUBEADMIT CORE MODELS
---------------------
Defines the fundamental data structures used across the KubeAdmit engine.

A ResourceKind describes one manifest type as an ordered tree of FieldSpecs.
Everything downstream (drafts, violations, canonical records) is keyed by
the dotted field paths that tree declares, e.g. 'spec.service.port'.

Author: KubeAdmit Team
Date: 2026-10-18
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union


class FieldType(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ENUM = "enum"
    OBJECT = "object"


@dataclass(frozen=True)
class FieldSpec:
    """
    One field definition inside a ResourceKind.

    Objects carry their children in `fields`. A gated object names one of
    its boolean children in `gated_by`; the object's other children only
    exist while that child is truthy. Children flagged `required_when_gated`
    must be non-empty whenever the gate is on. `injected` holds fixed
    key/values the serializer adds to the object; they never come from input.
    """
    name: str
    type: FieldType
    required: bool = False
    default: Any = None
    choices: Tuple[str, ...] = ()
    minimum: Optional[int] = None
    maximum: Optional[int] = None
    fields: Tuple["FieldSpec", ...] = ()
    gated_by: Optional[str] = None
    required_when_gated: bool = False
    injected: Optional[Mapping[str, Any]] = field(default=None, hash=False)

    @property
    def has_default(self) -> bool:
        return self.default is not None

    @property
    def is_object(self) -> bool:
        return self.type == FieldType.OBJECT

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FieldSpec":
        """Builds a FieldSpec from its JSON catalog representation."""
        return cls(
            name=data["name"],
            type=FieldType(data["type"]),
            required=bool(data.get("required", False)),
            default=data.get("default"),
            choices=tuple(data.get("choices", ())),
            minimum=data.get("minimum"),
            maximum=data.get("maximum"),
            fields=tuple(cls.from_dict(child) for child in data.get("fields", ())),
            gated_by=data.get("gatedBy"),
            required_when_gated=bool(data.get("requiredWhenGated", False)),
            injected=data.get("injected"),
        )


@dataclass(frozen=True)
class ResourceKind:
    """A registered manifest type: identity plus its ordered field tree."""
    kind: str
    api_version: str
    fields: Tuple[FieldSpec, ...]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ResourceKind":
        return cls(
            kind=data["kind"],
            api_version=data["apiVersion"],
            fields=tuple(FieldSpec.from_dict(f) for f in data["fields"]),
        )

    def iter_fields(self) -> Iterator[Tuple[str, FieldSpec]]:
        """Yields (path, spec) for every field, depth-first in declaration order."""
        def walk(specs: Tuple[FieldSpec, ...], prefix: str):
            for spec in specs:
                path = f"{prefix}{spec.name}"
                yield path, spec
                if spec.is_object:
                    yield from walk(spec.fields, f"{path}.")
        return walk(self.fields, "")

    @cached_property
    def _index(self) -> Dict[str, Tuple[int, FieldSpec]]:
        return {path: (i, spec) for i, (path, spec) in enumerate(self.iter_fields())}

    def field(self, path: str) -> Optional[FieldSpec]:
        entry = self._index.get(path)
        return entry[1] if entry else None

    def order_of(self, path: str) -> int:
        """Declaration index of a path; unknown paths sort last."""
        entry = self._index.get(path)
        return entry[0] if entry else len(self._index)

    def leaf_paths(self) -> List[str]:
        return [path for path, spec in self.iter_fields() if not spec.is_object]

    def gate_for(self, path: str) -> Optional[str]:
        """
        Returns the path of the gate switch governing `path`, if any.
        The gate switch itself is not governed by its own gate.
        """
        parts = path.split(".")
        for depth in range(len(parts) - 1, 0, -1):
            parent = ".".join(parts[:depth])
            spec = self.field(parent)
            if spec is not None and spec.gated_by:
                gate_path = f"{parent}.{spec.gated_by}"
                if path != gate_path:
                    return gate_path
        return None

    def gated_objects(self) -> List[Tuple[str, FieldSpec]]:
        return [(path, spec) for path, spec in self.iter_fields() if spec.is_object and spec.gated_by]

    def injected_values(self) -> Dict[str, Any]:
        """Managed values keyed by path, e.g. 'spec.ingress.annotations'."""
        values = {}
        for path, spec in self.iter_fields():
            if spec.is_object and spec.injected:
                for key, value in spec.injected.items():
                    values[f"{path}.{key}"] = value
        return values


def nest_values(values: Mapping[str, Any], kind: ResourceKind) -> Dict[str, Any]:
    """Expands path-keyed values into a nested dict in schema declaration order."""
    doc: Dict[str, Any] = {}
    for path, spec in kind.iter_fields():
        if path not in values:
            continue
        *parents, leaf = path.split(".")
        node = doc
        for part in parents:
            node = node.setdefault(part, {})
            if not isinstance(node, dict):
                break
        else:
            node[leaf] = values[path]
    return doc


class ViolationKind(str, Enum):
    MISSING_FIELD = "MissingField"
    TYPE_MISMATCH = "TypeMismatch"
    INVALID_ENUM_VALUE = "InvalidEnumValue"
    OUT_OF_RANGE = "OutOfRange"
    CROSS_FIELD_VIOLATION = "CrossFieldViolation"


@dataclass(frozen=True)
class Violation:
    path: str
    kind: ViolationKind
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass
class DraftRecord:
    """
    An in-progress, possibly invalid resource instance.

    Values are keyed by declared field path. Unknown paths never make it in;
    the normalizer and parser record a warning instead.
    """
    kind_id: str
    values: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def get(self, path: str, default: Any = None) -> Any:
        return self.values.get(path, default)

    def set(self, path: str, value: Any):
        self.values[path] = value

    def unset(self, path: str):
        self.values.pop(path, None)

    def __contains__(self, path: str) -> bool:
        return path in self.values

    def to_document(self, kind: ResourceKind) -> Dict[str, Any]:
        return nest_values(self.values, kind)


_PROMOTION_TOKEN = object()


@dataclass(frozen=True, eq=False)
class CanonicalRecord:
    """
    A fully validated, immutable resource instance.

    Only ResourceValidator creates these (through `_promote`); the values are
    a deep copy of the draft so later draft edits cannot leak in.
    """
    kind_id: str
    values: Mapping[str, Any]
    _token: object = field(default=None, repr=False)

    def __post_init__(self):
        if self._token is not _PROMOTION_TOKEN:
            raise TypeError("CanonicalRecord can only be produced by the validator.")

    @classmethod
    def _promote(cls, kind: ResourceKind, values: Mapping[str, Any]) -> "CanonicalRecord":
        ordered = {path: copy.deepcopy(values[path]) for path, _ in kind.iter_fields() if path in values}
        return cls(kind_id=kind.kind, values=MappingProxyType(ordered), _token=_PROMOTION_TOKEN)

    def get(self, path: str, default: Any = None) -> Any:
        return self.values.get(path, default)

    def to_document(self, kind: ResourceKind) -> Dict[str, Any]:
        return copy.deepcopy(nest_values(self.values, kind))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CanonicalRecord):
            return NotImplemented
        return self.kind_id == other.kind_id and dict(self.values) == dict(other.values)

    __hash__ = None

    # mappingproxy does not pickle; rebuild from a plain dict instead.
    def __reduce__(self):
        return _restore_record, (self.kind_id, dict(self.values))

    def __deepcopy__(self, memo: Dict[int, Any]) -> "CanonicalRecord":
        return _restore_record(self.kind_id, copy.deepcopy(dict(self.values), memo))


def _restore_record(kind_id: str, values: Dict[str, Any]) -> CanonicalRecord:
    return CanonicalRecord(kind_id=kind_id, values=MappingProxyType(values), _token=_PROMOTION_TOKEN)


@dataclass(frozen=True)
class Accepted:
    record: CanonicalRecord
    accepted = True
    violations: Tuple[Violation, ...] = ()


@dataclass(frozen=True)
class Rejected:
    violations: Tuple[Violation, ...]
    accepted = False
    record = None


ValidationResult = Union[Accepted, Rejected]
