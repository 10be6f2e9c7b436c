#!/usr/bin/env python3
"""
KUBEADMIT SCHEMA REGISTRY - The Librarian
-----------------------------------------
Holds the field definitions for every supported resource kind.

Registration happens at startup only; afterwards the registry is read-only
and safe to share between concurrent edit sessions. Extra kinds can be
loaded from a distilled JSON catalog on disk.

Author: KubeAdmit Team
Date: 2026-10-18
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Union

from kubeadmit.core.errors import DuplicateKind, RegistryError, UnknownKind
from kubeadmit.core.models import ResourceKind
from kubeadmit.schema.coreui import COREUI

logger = logging.getLogger("kubeadmit.registry")


class SchemaRegistry:
    """Maps kind ids (e.g. 'CoreUI') to their ResourceKind definitions."""

    def __init__(self, kinds: Iterable[ResourceKind] = ()):
        self._kinds: Dict[str, ResourceKind] = {}
        for kind in kinds:
            self.register(kind)

    def register(self, kind: ResourceKind) -> ResourceKind:
        if kind.kind in self._kinds:
            raise DuplicateKind(kind.kind)
        self._kinds[kind.kind] = kind
        logger.debug(f"Registered kind {kind.kind} ({kind.api_version})")
        return kind

    def lookup(self, kind_id: str) -> ResourceKind:
        try:
            return self._kinds[kind_id]
        except KeyError:
            raise UnknownKind(kind_id) from None

    def __contains__(self, kind_id: object) -> bool:
        return kind_id in self._kinds

    def kinds(self) -> List[str]:
        return list(self._kinds)

    def load_catalog(self, catalog_path: Union[str, Path]) -> List[ResourceKind]:
        """
        Registers every kind found in a JSON catalog file.

        The catalog is either a single kind object or {"kinds": [...]}, using
        the same vocabulary as FieldSpec (camelCase keys for gatedBy,
        requiredWhenGated and apiVersion).
        """
        path = Path(catalog_path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                catalog = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError) as e:
            logger.error(f"Unable to load catalog from {path}")
            raise RegistryError(f"Failed to load catalog {path}: {e}") from e

        entries = catalog.get("kinds", [catalog]) if isinstance(catalog, dict) else catalog
        loaded = []
        for entry in entries:
            try:
                kind = ResourceKind.from_dict(entry)
            except (KeyError, TypeError, ValueError) as e:
                raise RegistryError(f"Malformed kind definition in {path}: {e}") from e
            loaded.append(self.register(kind))
        logger.info(f"Loaded {len(loaded)} kind(s) from {path}")
        return loaded


@lru_cache(maxsize=1)
def default_registry() -> SchemaRegistry:
    """The process-wide registry with the built-in kinds, created once."""
    return SchemaRegistry([COREUI])
