#!/usr/bin/env python3
"""
KUBEADMIT PARSER - Text Intake
------------------------------
Loads raw YAML text into a DraftRecord.

Only one failure is decided here: text that is not YAML, or not a single
mapping, raises DocumentSyntaxError with the position ruamel.yaml reports.
Everything semantic (missing apiVersion, wrong types, bad enum values) is
left for the Validator so both intake paths share one error taxonomy.

Author: KubeAdmit Team
Date: 2026-10-18
"""

import logging
from typing import Any, Mapping, Optional

from ruamel.yaml import YAML, YAMLError

from kubeadmit.core.errors import DocumentSyntaxError
from kubeadmit.core.models import DraftRecord, ResourceKind

logger = logging.getLogger("kubeadmit.parser")


class TextParser:
    """Parses serialized documents into DraftRecords."""

    def __init__(self):
        self.yaml = YAML(typ="safe")

    def load(self, text: str) -> Mapping[str, Any]:
        """
        Parses text into its top-level mapping.

        Raises:
            DocumentSyntaxError: malformed YAML, empty input, multiple
                documents, or a top level that is not a mapping.
        """
        text = text.lstrip("\ufeff")
        try:
            data = self.yaml.load(text)
        except YAMLError as e:
            mark = getattr(e, "problem_mark", None) or getattr(e, "context_mark", None)
            problem = getattr(e, "problem", None) or str(e)
            if mark is not None:
                raise DocumentSyntaxError(problem, line=mark.line + 1, column=mark.column + 1) from e
            raise DocumentSyntaxError(problem) from e

        if data is None:
            raise DocumentSyntaxError("Document is empty.", line=1, column=1)
        if not isinstance(data, Mapping):
            raise DocumentSyntaxError(
                f"Expected a mapping at the top level, got {type(data).__name__}.", line=1, column=1
            )
        return data

    def peek_kind(self, data: Mapping[str, Any]) -> Optional[str]:
        kind = data.get("kind")
        return kind if isinstance(kind, str) else None

    def parse(self, text: str, kind: ResourceKind) -> DraftRecord:
        return self.to_draft(self.load(text), kind)

    def to_draft(self, data: Mapping[str, Any], kind: ResourceKind) -> DraftRecord:
        draft = DraftRecord(kind_id=kind.kind)
        self._walk(data, kind, draft, kind.injected_values(), prefix="")
        return draft

    def _walk(self, node: Mapping[str, Any], kind: ResourceKind, draft: DraftRecord,
              injected: Mapping[str, Any], prefix: str):
        for key, value in node.items():
            path = f"{prefix}{key}"

            if "." in str(key):
                # A literal 'spec.replicas' key is not a declared segment.
                self._warn(draft, f"Dropped unknown field '{path}'.")
                continue
            if path in injected:
                # Regenerated on output; only report what would be lost.
                self._check_injected(path, value, injected[path], draft)
                continue

            spec = kind.field(path)
            if spec is None:
                self._warn(draft, f"Dropped unknown field '{path}'.")
                continue
            if value is None:
                continue
            if spec.is_object and isinstance(value, Mapping):
                self._walk(value, kind, draft, injected, prefix=f"{path}.")
            else:
                draft.set(path, value)

    def _check_injected(self, path: str, value: Any, fixed: Any, draft: DraftRecord):
        if value is None or value == fixed:
            return
        if isinstance(value, Mapping) and isinstance(fixed, Mapping):
            for key in value:
                if key not in fixed or value[key] != fixed[key]:
                    self._warn(draft, f"Dropped '{path}.{key}': '{path}' is managed and fixed.")
            return
        self._warn(draft, f"Dropped '{path}': the value is managed and fixed.")

    def _warn(self, draft: DraftRecord, message: str):
        logger.warning(message)
        draft.warnings.append(message)
