#!/usr/bin/env python3
"""
KUBEADMIT NORMALIZER - Form Intake
----------------------------------
Turns loosely-typed form state into a DraftRecord keyed by declared field
paths. Form widgets hand over strings ("3", "on", ""), so integers and
booleans are coerced here; anything that refuses to coerce is passed
through untouched for the Validator to report as a TypeMismatch.

Form field names may be given as full paths ('spec.service.port') or in
the short form used by the editor ('service.port', 'name'), which resolve
against the top-level objects of the kind.

Author: KubeAdmit Team
Date: 2026-10-18
"""

import logging
from typing import AbstractSet, Any, Dict, Mapping, Optional

from kubeadmit.core.models import DraftRecord, FieldType, ResourceKind

logger = logging.getLogger("kubeadmit.normalizer")

TRUE_WORDS = {"true", "on", "yes", "1"}
FALSE_WORDS = {"false", "off", "no", "0", ""}


class StructuredNormalizer:
    """Builds DraftRecords from discrete form fields."""

    def normalize(self, fields: Mapping[str, Any], kind: ResourceKind,
                  typed_paths: AbstractSet[str] = frozenset()) -> DraftRecord:
        """
        Builds a draft from form fields. Paths in `typed_paths` hold values
        already typed by the text parser; they are kept as given, identity
        fields included, so values carried over from text keep their type errors.
        """
        draft = DraftRecord(kind_id=kind.kind)
        draft.set("apiVersion", kind.api_version)
        draft.set("kind", kind.kind)

        for path, raw_value in self.canonical_fields(fields, kind).items():
            if kind.field(path) is None:
                self._warn(draft, f"Dropped unknown field '{path}'.")
                continue
            if path in typed_paths:
                draft.set(path, raw_value)
                continue
            if path in ("apiVersion", "kind"):
                # Identity comes from the kind, never from the form.
                continue
            spec = kind.field(path)
            value = self._coerce(raw_value, spec.type)
            if value is None:
                continue
            draft.set(path, value)

        self._fill_defaults(draft, kind)
        self._apply_gates(draft, kind)
        return draft

    def canonical_fields(self, fields: Mapping[str, Any], kind: ResourceKind) -> Dict[str, Any]:
        """
        Flattens form input to one entry per full field path. Short names
        are resolved; unknown names are kept as given so they can be reported.
        """
        return {
            self.resolve(path, kind) or path: value
            for path, value in self._flatten(fields, kind).items()
        }

    def _flatten(self, fields: Mapping[str, Any], kind: ResourceKind, prefix: str = "") -> Dict[str, Any]:
        """Accepts nested mappings as well as dotted keys."""
        flat: Dict[str, Any] = {}
        for key, value in fields.items():
            path = f"{prefix}{key}"
            resolved = self.resolve(path, kind)
            spec = kind.field(resolved) if resolved else None
            if isinstance(value, Mapping) and (spec is None or spec.is_object):
                flat.update(self._flatten(value, kind, prefix=f"{path}."))
            else:
                flat[path] = value
        return flat

    def resolve(self, path: str, kind: ResourceKind) -> Optional[str]:
        if kind.field(path) is not None:
            return path
        candidates = [
            f"{top.name}.{path}" for top in kind.fields
            if top.is_object and kind.field(f"{top.name}.{path}") is not None
        ]
        return candidates[0] if len(candidates) == 1 else None

    def _coerce(self, value: Any, field_type: FieldType) -> Any:
        if value is None:
            return None
        if field_type == FieldType.INTEGER:
            if isinstance(value, str):
                text = value.strip()
                if not text:
                    return None
                try:
                    return int(text)
                except ValueError:
                    return value
            if isinstance(value, float) and value.is_integer():
                return int(value)
            return value
        if field_type == FieldType.BOOLEAN:
            if isinstance(value, str):
                word = value.strip().lower()
                if word in TRUE_WORDS:
                    return True
                if word in FALSE_WORDS:
                    return False
                return value
            if isinstance(value, int) and value in (0, 1):
                return bool(value)
            return value
        if field_type == FieldType.ENUM and isinstance(value, str) and not value.strip():
            return None
        return value

    def _fill_defaults(self, draft: DraftRecord, kind: ResourceKind):
        for path in kind.leaf_paths():
            spec = kind.field(path)
            if path not in draft and spec.has_default:
                draft.set(path, spec.default)

    def _apply_gates(self, draft: DraftRecord, kind: ResourceKind):
        """Strips gated fields whose gate is off; they are omitted, never nulled."""
        for obj_path, spec in kind.gated_objects():
            gate_path = f"{obj_path}.{spec.gated_by}"
            if draft.get(gate_path) is True:
                continue
            for path in list(draft.values):
                if path.startswith(f"{obj_path}.") and path != gate_path:
                    draft.unset(path)

    def _warn(self, draft: DraftRecord, message: str):
        logger.warning(message)
        draft.warnings.append(message)
