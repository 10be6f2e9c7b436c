#!/usr/bin/env python3
"""
KUBEADMIT SERIALIZER - Deterministic Round-Trip
-----------------------------------------------
Renders CanonicalRecords back to YAML. Key order always follows schema
declaration order, never input order, and managed values (the nginx
ingress-class annotation) are injected here so documents built from the
form and documents pasted as text come out identical.

Author: KubeAdmit Team
Date: 2026-10-18
"""

import copy
import io
import json
import logging
from typing import Any, Dict, Optional

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from kubeadmit.core.config import EngineConfig
from kubeadmit.core.models import CanonicalRecord, DraftRecord, ResourceKind
from kubeadmit.schema.registry import SchemaRegistry

logger = logging.getLogger("kubeadmit.serializer")


class CanonicalSerializer:
    """
    The Reconstructor: converts canonical records to wire documents.
    """

    def __init__(self, registry: SchemaRegistry, config: Optional[EngineConfig] = None):
        config = config or EngineConfig()
        self.registry = registry
        self.yaml = YAML(typ="rt")
        # Standard K8s: 2 spaces, sequences indented 4 (offset 2)
        self.yaml.indent(mapping=config.indent_mapping, sequence=config.indent_sequence,
                         offset=config.indent_offset)
        self.yaml.width = config.width

    def build_document(self, record: CanonicalRecord) -> Dict[str, Any]:
        """Nested mapping for the record, managed values included."""
        kind = self.registry.lookup(record.kind_id)
        doc = record.to_document(kind)
        for path, value in kind.injected_values().items():
            *parents, leaf = path.split(".")
            node = doc
            for part in parents:
                node = node.get(part)
                if not isinstance(node, dict):
                    break
            else:
                node[leaf] = copy.deepcopy(value)
        return doc

    def serialize(self, record: CanonicalRecord) -> str:
        logger.debug(f"Serializing {record.kind_id} '{record.get('metadata.name')}'")
        return self.dump(self.build_document(record))

    def to_json(self, record: CanonicalRecord) -> str:
        return json.dumps(self.build_document(record), indent=2)

    def render_draft(self, draft: DraftRecord, kind: ResourceKind) -> str:
        """YAML for an unvalidated draft; used when switching the editor to text."""
        return self.dump(draft.to_document(kind))

    def _to_commented(self, data: Any) -> Any:
        if isinstance(data, dict):
            node = CommentedMap()
            for key, value in data.items():
                node[key] = self._to_commented(value)
            return node
        if isinstance(data, list):
            return [self._to_commented(item) for item in data]
        return data

    def dump(self, doc: Any) -> str:
        stream = io.StringIO()
        self.yaml.dump(self._to_commented(doc), stream)
        return stream.getvalue()
