#!/usr/bin/env python3
"""
KUBEADMIT ENGINE & CLI SUITE
----------------------------
File admission reports, directory scans with safety gates, summaries and
the command-line entry points.

Author: KubeAdmit Team
Date: 2026-10-18
"""

import os

import pytest
from rich.console import Console
from ruamel.yaml import YAML

from kubeadmit.cli.main import KubeAdmitCLI
from kubeadmit.core.config import EngineConfig
from kubeadmit.core.engine import AdmissionEngine
from kubeadmit.core.errors import DocumentSyntaxError, UnknownKind
from kubeadmit.core.models import ViolationKind
from kubeadmit.schema.coreui import DEFAULT_TEMPLATE

GOOD = """\
apiVersion: microservice.alveotech.com/v1alpha1
kind: CoreUI
metadata:
  name: web
  namespace: default
spec:
  image: nginx:1.0
"""

BAD_PORT = GOOD + "  service:\n    port: 70000\n"


@pytest.fixture
def engine():
    return AdmissionEngine()


@pytest.fixture
def cli():
    return KubeAdmitCLI(out=Console(record=True, width=200))


def test_syntax_error_never_reaches_validator(engine, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("validator must not run on unparseable text")

    monkeypatch.setattr(engine.validator, "validate", fail)
    with pytest.raises(DocumentSyntaxError):
        engine.admit_text("not: [valid, yaml")


def test_unregistered_document_kind_is_validated_against_default(engine):
    result, draft = engine.admit_text(GOOD.replace("kind: CoreUI", "kind: Deployment"))
    assert draft.kind_id == "CoreUI"
    assert [(v.path, v.kind) for v in result.violations] == [("kind", ViolationKind.INVALID_ENUM_VALUE)]


def test_unknown_kind_id_is_a_programming_error(engine):
    with pytest.raises(UnknownKind):
        engine.admit_form({"name": "web"}, kind_id="Nope")


def test_admit_file_reports(engine, tmp_path):
    good = tmp_path / "good.yaml"
    good.write_text(GOOD)
    bad = tmp_path / "bad.yaml"
    bad.write_text(BAD_PORT)
    broken = tmp_path / "broken.yaml"
    broken.write_text("spec: [")

    ok = engine.admit_file(good)
    assert ok["status"] == "ACCEPTED"
    assert YAML(typ="safe").load(ok["document"])["spec"]["replicas"] == 1

    rejected = engine.admit_file(bad)
    assert rejected["status"] == "REJECTED"
    assert rejected["document"] is None
    assert [v.kind for v in rejected["violations"]] == [ViolationKind.OUT_OF_RANGE]

    syntax = engine.admit_file(broken)
    assert syntax["status"] == "SYNTAX_ERROR"
    assert syntax["line"] >= 1

    missing = engine.admit_file(tmp_path / "missing.yaml")
    assert missing["status"] == "FILE_NOT_FOUND"


def test_admit_file_handles_bom(engine, tmp_path):
    path = tmp_path / "bom.yaml"
    path.write_bytes(b"\xef\xbb\xbf" + GOOD.encode("utf-8"))
    assert engine.admit_file(path)["status"] == "ACCEPTED"


def test_scan_directory_and_summary(tmp_path):
    (tmp_path / "a.yaml").write_text(GOOD)
    (tmp_path / "nested").mkdir()
    (tmp_path / "nested" / "b.YAML").write_text(BAD_PORT)
    (tmp_path / "notes.txt").write_text("ignored")
    deep = tmp_path / "x" / "y"
    deep.mkdir(parents=True)
    (deep / "c.yaml").write_text(GOOD)
    if os.name != "nt":
        (tmp_path / "link.yaml").symlink_to(tmp_path / "a.yaml")

    engine = AdmissionEngine(config=EngineConfig(max_depth=2))
    progress = []
    reports = engine.scan_directory(tmp_path, progress_callback=lambda done, total: progress.append((done, total)))

    assert [r["file_path"] for r in reports] == ["a.yaml", os.path.join("nested", "b.YAML")]
    assert progress[-1] == (2, 2)

    summary = engine.generate_summary(reports)
    assert summary["total_files"] == 2
    assert summary["accepted"] == 1
    assert summary["rejected"] == 1
    assert summary["success_rate"] == 0.5


def test_invalid_max_depth_falls_back():
    assert EngineConfig(max_depth="deep").max_depth == 10


def test_cli_check_exit_codes(cli, tmp_path):
    good = tmp_path / "good.yaml"
    good.write_text(GOOD)
    assert cli.run(["check", str(good)]) == 0

    (tmp_path / "bad.yaml").write_text(BAD_PORT)
    assert cli.run(["check", str(tmp_path)]) == 1
    output = cli.console.export_text()
    assert "spec.service.port" in output
    assert "OutOfRange" in output


def test_cli_check_missing_path(cli, tmp_path):
    assert cli.run(["check", str(tmp_path / "nope")]) == 2


def test_cli_render_writes_document(cli, tmp_path):
    out = tmp_path / "coreui.yaml"
    code = cli.run([
        "render", "--set", "name=web", "--set", "namespace=default", "--set", "image=nginx:1.0",
        "--set", "ingress.enabled=true", "--set", "ingress.host=x.example.com", "-o", str(out),
    ])
    assert code == 0
    doc = YAML(typ="safe").load(out.read_text())
    assert doc["spec"]["ingress"]["annotations"] == {"kubernetes.io/ingress.class": "nginx"}


def test_cli_render_reports_violations(cli):
    assert cli.run(["render", "--set", "name=web"]) == 1
    assert "MissingField" in cli.console.export_text()


def test_cli_render_rejects_malformed_set(cli):
    assert cli.run(["render", "--set", "name"]) == 2


def test_cli_template(cli, tmp_path):
    out = tmp_path / "template.yaml"
    assert cli.run(["template", "-o", str(out)]) == 0
    assert out.read_text() == DEFAULT_TEMPLATE
