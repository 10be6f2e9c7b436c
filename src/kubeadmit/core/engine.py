#!/usr/bin/env python3
"""
KUBEADMIT ENGINE - The High Orchestrator
----------------------------------------
The AdmissionEngine wires the schema registry to both intake paths, the
validator and the serializer. Callers pick an input mode; the engine
returns either an accepted canonical document or the full violation list.

File-level entry points turn every outcome, including unexpected failures,
into a report dict so batch checks never stop halfway.

Author: KubeAdmit Team
Date: 2026-10-18
"""

import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from kubeadmit.core.config import EngineConfig
from kubeadmit.core.errors import DocumentSyntaxError
from kubeadmit.core.models import CanonicalRecord, DraftRecord, ResourceKind, ValidationResult
from kubeadmit.core.session import EditSession, HandoffSlot
from kubeadmit.export.serializer import CanonicalSerializer
from kubeadmit.intake.normalizer import StructuredNormalizer
from kubeadmit.intake.parser import TextParser
from kubeadmit.schema.registry import SchemaRegistry, default_registry
from kubeadmit.validator.validator import ResourceValidator

logger = logging.getLogger("kubeadmit.engine")


class AdmissionEngine:
    """
    Principal orchestrator for resource admission.
    Holds the shared, read-only registry plus one instance of every stage.
    """

    def __init__(self, registry: Optional[SchemaRegistry] = None, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.registry = registry or default_registry()
        self.normalizer = StructuredNormalizer()
        self.parser = TextParser()
        self.validator = ResourceValidator()
        self.serializer = CanonicalSerializer(self.registry, self.config)
        self.handoff = HandoffSlot()

    # --- Stages ---

    def resolve_kind(self, kind_id: Optional[str] = None) -> ResourceKind:
        """Kinds named by user documents fall back to the default when unregistered."""
        if kind_id and kind_id in self.registry:
            return self.registry.lookup(kind_id)
        return self.registry.lookup(self.config.default_kind)

    def normalize(self, fields: Mapping[str, Any], kind_id: Optional[str] = None) -> DraftRecord:
        return self.normalizer.normalize(fields, self.registry.lookup(kind_id or self.config.default_kind))

    def parse(self, text: str) -> DraftRecord:
        """
        Parses text against the kind it declares.

        Raises:
            DocumentSyntaxError: if the text is not a single YAML mapping.
        """
        data = self.parser.load(text)
        kind = self.resolve_kind(self.parser.peek_kind(data))
        return self.parser.to_draft(data, kind)

    def validate(self, draft: DraftRecord) -> ValidationResult:
        return self.validator.validate(draft, self.registry.lookup(draft.kind_id))

    def serialize(self, record: CanonicalRecord) -> str:
        return self.serializer.serialize(record)

    # --- Admission ---

    def admit_form(self, fields: Mapping[str, Any], kind_id: Optional[str] = None) -> Tuple[ValidationResult, DraftRecord]:
        draft = self.normalize(fields, kind_id)
        return self.validate(draft), draft

    def admit_text(self, text: str) -> Tuple[ValidationResult, DraftRecord]:
        draft = self.parse(text)
        return self.validate(draft), draft

    def open_session(self, kind_id: Optional[str] = None) -> EditSession:
        """
        Starts a new edit session. A template waiting in the hand-off slot
        is consumed and opens the session in text mode.
        """
        session = EditSession(self, self.registry.lookup(kind_id or self.config.default_kind))
        template = self.handoff.take()
        if template is not None:
            text = template if isinstance(template, str) else self.serializer.dump(dict(template))
            session.load_text(text)
            logger.info(f"Session opened from hand-off template '{self.handoff.name}'")
        return session

    # --- Files ---

    def admit_file(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        """Admits one manifest file and reports the outcome."""
        path = Path(file_path)
        if not path.exists():
            return self._file_error(str(file_path), "FILE_NOT_FOUND", f"Path missing: {path}")

        try:
            raw_text = path.read_text(encoding="utf-8-sig")
            result, draft = self.admit_text(raw_text)
        except DocumentSyntaxError as e:
            report = self._file_error(str(file_path), "SYNTAX_ERROR", e.message)
            report.update({"line": e.line, "column": e.column})
            return report
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading {file_path}: {e}")
            return self._file_error(str(file_path), "ENGINE_ERROR", str(e))

        return {
            "file_path": str(file_path),
            "status": "ACCEPTED" if result.accepted else "REJECTED",
            "success": result.accepted,
            "kind": draft.kind_id,
            "violations": list(result.violations),
            "warnings": list(draft.warnings),
            "document": self.serialize(result.record) if result.accepted else None,
            "timestamp": time.time(),
        }

    def scan_directory(self, root: Union[str, Path], extension: Optional[str] = None,
                       progress_callback: Optional[Callable[[int, int], None]] = None) -> List[Dict[str, Any]]:
        """Admits every matching file below root, skipping symlinks and deep paths."""
        root = Path(root).resolve()
        extension = extension or self.config.extension
        patterns = {f"*{extension.lower()}", f"*{extension.upper()}"}

        files = sorted({
            f for p in patterns for f in root.rglob(p)
            if f.is_file() and not f.is_symlink() and len(f.relative_to(root).parts) <= self.config.max_depth
        })

        reports = []
        for processed, file_path in enumerate(files, 1):
            report = self.admit_file(file_path)
            report["file_path"] = str(file_path.relative_to(root))
            reports.append(report)
            if progress_callback:
                progress_callback(processed, len(files))
        return reports

    def generate_summary(self, reports: List[Dict[str, Any]]) -> Dict[str, Any]:
        total = len(reports)
        accepted = sum(1 for r in reports if r.get("status") == "ACCEPTED")
        return {
            "total_files": total,
            "accepted": accepted,
            "rejected": sum(1 for r in reports if r.get("status") == "REJECTED"),
            "syntax_errors": sum(1 for r in reports if r.get("status") == "SYNTAX_ERROR"),
            "system_errors": sum(1 for r in reports if r.get("status") in ("ENGINE_ERROR", "FILE_NOT_FOUND")),
            "success_rate": (accepted / total) if total else 0,
            "summary_timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        }

    def _file_error(self, path: str, status: str, error: str) -> Dict[str, Any]:
        return {
            "file_path": path, "status": status, "error": error,
            "success": False, "kind": "Unknown", "violations": [], "warnings": [],
        }
