"""Engine configuration. Populated from CLI flags; defaults apply otherwise."""

import logging
from dataclasses import dataclass

from kubeadmit.schema.coreui import COREUI_KIND

logger = logging.getLogger("kubeadmit.config")

DEFAULT_MAX_DEPTH = 10


@dataclass
class EngineConfig:
    default_kind: str = COREUI_KIND  # used when a document names no registered kind
    extension: str = ".yaml"
    max_depth: int = DEFAULT_MAX_DEPTH
    indent_mapping: int = 2
    indent_sequence: int = 4
    indent_offset: int = 2
    width: int = 4096

    def __post_init__(self):
        try:
            self.max_depth = int(self.max_depth)
        except (ValueError, TypeError):
            logger.warning(f"Invalid max_depth '{self.max_depth}'. Falling back to default: {DEFAULT_MAX_DEPTH}")
            self.max_depth = DEFAULT_MAX_DEPTH
