#!/usr/bin/env python3
"""
KUBEADMIT GATE RULES - Cross-Field Policy
-----------------------------------------
The GateRuleEngine evaluates rules that span more than one field. It runs
after every per-field check has passed over the draft, so each rule sees
the effective values (defaults applied, gated-off fields already gone).

Author: KubeAdmit Team
Date: 2026-10-18
"""

from typing import Any, Callable, List, Mapping, Set

from kubeadmit.core.models import ResourceKind, Violation, ViolationKind

Rule = Callable[[ResourceKind, Mapping[str, Any], Set[str]], List[Violation]]


class GateRuleEngine:
    """
    Registry of active cross-field rules, executed in order against
    every draft the Validator sees.
    """

    def __init__(self):
        self.active_rules: List[Rule] = [
            self._rule_gated_fields_present,
        ]

    def evaluate(self, kind: ResourceKind, values: Mapping[str, Any], flagged: Set[str]) -> List[Violation]:
        """
        Runs every active rule. `flagged` holds paths that already carry a
        per-field violation; rules stay quiet about those.
        """
        violations = []
        for rule in self.active_rules:
            violations.extend(rule(kind, values, flagged))
        return violations

    def _rule_gated_fields_present(self, kind: ResourceKind, values: Mapping[str, Any],
                                   flagged: Set[str]) -> List[Violation]:
        """
        Policy: once a gate is switched on, the fields it unlocks and marks
        as required_when_gated must hold non-empty values.
        """
        violations = []
        for obj_path, obj_spec in kind.gated_objects():
            gate_path = f"{obj_path}.{obj_spec.gated_by}"
            if values.get(gate_path) is not True:
                continue
            for child in obj_spec.fields:
                path = f"{obj_path}.{child.name}"
                if not child.required_when_gated or path in flagged:
                    continue
                value = values.get(path)
                if isinstance(value, str) and value.strip():
                    continue
                violations.append(Violation(
                    path=path,
                    kind=ViolationKind.CROSS_FIELD_VIOLATION,
                    message=f"'{path}' must be non-empty when '{gate_path}' is true.",
                ))
        return violations
