#!/usr/bin/env python3
"""
KUBEADMIT VALIDATOR SUITE
-------------------------
Violation taxonomy, accumulation, ordering and promotion to an
immutable canonical record.

Author: KubeAdmit Team
Date: 2026-10-18
"""

import copy
import pickle

import pytest

from kubeadmit.core.models import CanonicalRecord, DraftRecord, ViolationKind
from kubeadmit.schema.coreui import COREUI
from kubeadmit.validator.validator import ResourceValidator

VALID_VALUES = {
    "apiVersion": "microservice.alveotech.com/v1alpha1",
    "kind": "CoreUI",
    "metadata.name": "web",
    "metadata.namespace": "default",
    "spec.replicas": 2,
    "spec.image": "nginx:1.0",
    "spec.service.type": "ClusterIP",
    "spec.service.port": 80,
    "spec.service.targetPort": 8080,
}


def make_draft(**overrides):
    values = dict(VALID_VALUES)
    for path, value in overrides.items():
        path = path.replace("__", ".")
        if value is None:
            values.pop(path, None)
        else:
            values[path] = value
    return DraftRecord(kind_id="CoreUI", values=values)


@pytest.fixture
def validator():
    return ResourceValidator()


def test_valid_draft_is_accepted(validator):
    result = validator.validate(make_draft(), COREUI)
    assert result.accepted
    assert result.violations == ()
    assert result.record.get("spec.replicas") == 2


@pytest.mark.parametrize("path", [
    "apiVersion", "kind", "metadata.name", "metadata.namespace", "spec.image",
])
def test_missing_required_field_reports_exactly_once(validator, path):
    draft = make_draft()
    draft.unset(path)
    result = validator.validate(draft, COREUI)

    assert not result.accepted
    assert [(v.path, v.kind) for v in result.violations] == [(path, ViolationKind.MISSING_FIELD)]


def test_blank_required_string_is_missing(validator):
    result = validator.validate(make_draft(metadata__name="  "), COREUI)
    assert [(v.path, v.kind) for v in result.violations] == [("metadata.name", ViolationKind.MISSING_FIELD)]


def test_defaults_satisfy_required_fields(validator):
    draft = make_draft(spec__replicas=None, spec__service__port=None)
    result = validator.validate(draft, COREUI)
    assert result.accepted
    assert result.record.get("spec.replicas") == 1
    assert result.record.get("spec.service.port") == 80


@pytest.mark.parametrize("path,value", [
    ("spec.replicas", "2"),
    ("spec.replicas", True),
    ("spec.image", 42),
    ("spec.service.type", 1),
    ("spec.ingress.enabled", "yes"),
])
def test_type_mismatch(validator, path, value):
    draft = make_draft()
    draft.set(path, value)
    result = validator.validate(draft, COREUI)
    assert [(v.path, v.kind) for v in result.violations] == [(path, ViolationKind.TYPE_MISMATCH)]


def test_mistyped_object_hides_its_children(validator):
    draft = make_draft()
    for path in [p for p in draft.values if p.startswith("spec.")]:
        draft.unset(path)
    draft.set("spec", "oops")
    result = validator.validate(draft, COREUI)
    assert [(v.path, v.kind) for v in result.violations] == [("spec", ViolationKind.TYPE_MISMATCH)]


def test_invalid_enum_value(validator):
    result = validator.validate(make_draft(spec__service__type="ExternalName"), COREUI)
    assert [(v.path, v.kind) for v in result.violations] == [("spec.service.type", ViolationKind.INVALID_ENUM_VALUE)]


def test_foreign_kind_is_an_enum_violation(validator):
    result = validator.validate(make_draft(kind="Deployment", apiVersion="apps/v1"), COREUI)
    assert [(v.path, v.kind) for v in result.violations] == [
        ("apiVersion", ViolationKind.INVALID_ENUM_VALUE),
        ("kind", ViolationKind.INVALID_ENUM_VALUE),
    ]


@pytest.mark.parametrize("port,accepted", [(8080, True), (1, True), (65535, True), (0, False), (70000, False)])
def test_port_bounds(validator, port, accepted):
    result = validator.validate(make_draft(spec__service__port=port), COREUI)
    assert result.accepted is accepted
    if not accepted:
        assert [(v.path, v.kind) for v in result.violations] == [("spec.service.port", ViolationKind.OUT_OF_RANGE)]


def test_replicas_lower_bound(validator):
    result = validator.validate(make_draft(spec__replicas=0), COREUI)
    assert [(v.path, v.kind) for v in result.violations] == [("spec.replicas", ViolationKind.OUT_OF_RANGE)]


def test_enabled_ingress_requires_host_and_path(validator):
    draft = make_draft(spec__ingress__enabled=True, spec__ingress__path="")
    result = validator.validate(draft, COREUI)
    assert [(v.path, v.kind) for v in result.violations] == [
        ("spec.ingress.host", ViolationKind.CROSS_FIELD_VIOLATION),
        ("spec.ingress.path", ViolationKind.CROSS_FIELD_VIOLATION),
    ]


def test_mistyped_host_is_not_reported_twice(validator):
    draft = make_draft(spec__ingress__enabled=True, spec__ingress__host=7)
    result = validator.validate(draft, COREUI)
    assert [(v.path, v.kind) for v in result.violations] == [("spec.ingress.host", ViolationKind.TYPE_MISMATCH)]


def test_violations_accumulate_in_declaration_order(validator):
    """
    ACCUMULATION TEST: every problem is reported, ordered by schema
    declaration order rather than by the order checks discovered them.
    """
    draft = make_draft(
        spec__ingress__enabled=True,
        spec__service__targetPort=0,
        spec__replicas="many",
        metadata__namespace=None,
        kind="Pod",
    )
    result = validator.validate(draft, COREUI)

    assert [(v.path, v.kind) for v in result.violations] == [
        ("kind", ViolationKind.INVALID_ENUM_VALUE),
        ("metadata.namespace", ViolationKind.MISSING_FIELD),
        ("spec.replicas", ViolationKind.TYPE_MISMATCH),
        ("spec.service.targetPort", ViolationKind.OUT_OF_RANGE),
        ("spec.ingress.host", ViolationKind.CROSS_FIELD_VIOLATION),
    ]


def test_disabled_ingress_leaves_no_trace(validator):
    draft = make_draft(spec__ingress__enabled=False, spec__ingress__host="x.example.com", spec__ingress__path=5)
    result = validator.validate(draft, COREUI)

    assert result.accepted
    assert not any(path.startswith("spec.ingress") for path in result.record.values)
    assert "ingress" not in result.record.to_document(COREUI)["spec"]


def test_canonical_record_does_not_alias_draft(validator):
    draft = make_draft()
    record = validator.validate(draft, COREUI).record

    draft.set("spec.replicas", 9)
    draft.unset("spec.image")

    assert record.get("spec.replicas") == 2
    assert record.get("spec.image") == "nginx:1.0"
    with pytest.raises(TypeError):
        record.values["spec.replicas"] = 5


def test_canonical_record_cannot_be_hand_built():
    with pytest.raises(TypeError):
        CanonicalRecord(kind_id="CoreUI", values={})


def test_accepted_results_copy_and_pickle(validator):
    result = validator.validate(make_draft(), COREUI)

    duplicate = copy.deepcopy(result)
    restored = pickle.loads(pickle.dumps(result))

    for other in (duplicate, restored):
        assert other.accepted
        assert other.record == result.record
        assert other.record is not result.record
        with pytest.raises(TypeError):
            other.record.values["spec.replicas"] = 5
