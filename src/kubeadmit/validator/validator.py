#!/usr/bin/env python3
"""
KUBEADMIT VALIDATOR - The Judge
-------------------------------
The Validator is the only gate between a DraftRecord and a CanonicalRecord.
It does not fail fast: every problem in the draft is collected so a caller
can show all of them at once, ordered by schema declaration order.

Checks per field, in order: MissingField, TypeMismatch, InvalidEnumValue,
OutOfRange. Cross-field rules run last through the GateRuleEngine.

Author: KubeAdmit Team
Date: 2026-10-18
"""

import logging
from typing import Any, Dict, List, Optional, Set

from kubeadmit.core.models import (
    Accepted,
    CanonicalRecord,
    DraftRecord,
    FieldSpec,
    FieldType,
    Rejected,
    ResourceKind,
    ValidationResult,
    Violation,
    ViolationKind,
)
from kubeadmit.rules.gates import GateRuleEngine

logger = logging.getLogger("kubeadmit.validator")


class ResourceValidator:
    """Promotes DraftRecords to CanonicalRecords, or explains why not."""

    def __init__(self, rules: Optional[GateRuleEngine] = None):
        self.rules = rules or GateRuleEngine()

    def validate(self, draft: DraftRecord, kind: ResourceKind) -> ValidationResult:
        values = draft.values
        effective: Dict[str, Any] = {}
        violations: List[Violation] = []
        mistyped_objects: List[str] = []

        for path, spec in kind.iter_fields():
            if any(path.startswith(f"{obj}.") for obj in mistyped_objects):
                continue
            gate = kind.gate_for(path)
            if gate and not self._gate_on(gate, values, kind):
                continue

            if spec.is_object:
                # Objects only show up in a draft when the input put a scalar there.
                if path in values:
                    violations.append(self._mismatch(path, spec, values[path]))
                    mistyped_objects.append(path)
                continue

            if path not in values:
                if spec.has_default:
                    effective[path] = spec.default
                elif spec.required:
                    violations.append(Violation(path, ViolationKind.MISSING_FIELD, f"'{path}' is required."))
                continue

            violation = self._check_value(path, spec, values[path])
            if violation:
                violations.append(violation)
            else:
                effective[path] = values[path]

        # A gate that is off takes its own switch out of the record too.
        for obj_path, spec in kind.gated_objects():
            gate_path = f"{obj_path}.{spec.gated_by}"
            if effective.get(gate_path) is not True:
                effective.pop(gate_path, None)

        flagged: Set[str] = {v.path for v in violations}
        violations.extend(self.rules.evaluate(kind, effective, flagged))

        if violations:
            ordered = sorted(violations, key=lambda v: kind.order_of(v.path))
            logger.info(f"Rejected {kind.kind} draft with {len(ordered)} violation(s)")
            return Rejected(violations=tuple(ordered))

        return Accepted(record=CanonicalRecord._promote(kind, effective))

    def _gate_on(self, gate_path: str, values: Dict[str, Any], kind: ResourceKind) -> bool:
        if gate_path in values:
            return values[gate_path] is True
        return kind.field(gate_path).default is True

    def _check_value(self, path: str, spec: FieldSpec, value: Any) -> Optional[Violation]:
        if not self._type_matches(spec.type, value):
            return self._mismatch(path, spec, value)

        if spec.type == FieldType.STRING and spec.required and not value.strip():
            return Violation(path, ViolationKind.MISSING_FIELD, f"'{path}' is required.")

        if spec.choices and value not in spec.choices:
            allowed = ", ".join(spec.choices)
            return Violation(path, ViolationKind.INVALID_ENUM_VALUE,
                             f"'{path}' must be one of [{allowed}], got '{value}'.")

        if spec.type == FieldType.INTEGER:
            if spec.minimum is not None and value < spec.minimum:
                return Violation(path, ViolationKind.OUT_OF_RANGE, self._range_message(path, spec, value))
            if spec.maximum is not None and value > spec.maximum:
                return Violation(path, ViolationKind.OUT_OF_RANGE, self._range_message(path, spec, value))
        return None

    def _type_matches(self, field_type: FieldType, value: Any) -> bool:
        if field_type in (FieldType.STRING, FieldType.ENUM):
            return isinstance(value, str)
        if field_type == FieldType.INTEGER:
            # bool is an int subclass; 'replicas: true' is not a count.
            return isinstance(value, int) and not isinstance(value, bool)
        if field_type == FieldType.BOOLEAN:
            return isinstance(value, bool)
        return isinstance(value, dict)

    def _mismatch(self, path: str, spec: FieldSpec, value: Any) -> Violation:
        expected = "map/object" if spec.is_object else spec.type.value
        return Violation(path, ViolationKind.TYPE_MISMATCH,
                         f"'{path}' must be {expected}, got {type(value).__name__} ({value!r}).")

    def _range_message(self, path: str, spec: FieldSpec, value: int) -> str:
        if spec.maximum is None:
            return f"'{path}' must be >= {spec.minimum}, got {value}."
        if spec.minimum is None:
            return f"'{path}' must be <= {spec.maximum}, got {value}."
        return f"'{path}' must be within [{spec.minimum}, {spec.maximum}], got {value}."
