#!/usr/bin/env python3
"""
KUBEADMIT EDIT SESSION
----------------------
One user's edit of one resource, from first keystroke to accepted record.

    EMPTY -> EDITING{form|text} -> VALIDATING -> ACCEPTED | REJECTED

A rejected session goes back to EDITING with its draft intact; the
violations stay visible until the next edit. An accepted session is
terminal and refuses further edits.

The HandoffSlot carries one pending template from one caller context to
another and hands it out exactly once.

Author: KubeAdmit Team
Date: 2026-10-18
"""

import logging
import threading
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Set, Tuple, Union

from kubeadmit.core.errors import DocumentSyntaxError, InvalidTransition, SessionClosed
from kubeadmit.core.models import DraftRecord, ResourceKind, ValidationResult, Violation

if TYPE_CHECKING:
    from kubeadmit.core.engine import AdmissionEngine

logger = logging.getLogger("kubeadmit.session")


class SessionState(str, Enum):
    EMPTY = "EMPTY"
    EDITING = "EDITING"
    VALIDATING = "VALIDATING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class EditMode(str, Enum):
    FORM = "form"
    TEXT = "text"


class EditSession:
    """
    Drives the edit state machine over the engine's intake, validation
    and serialization stages. Sessions share nothing but the registry.
    """

    def __init__(self, engine: "AdmissionEngine", kind: ResourceKind):
        self.engine = engine
        self.kind = kind
        self.state = SessionState.EMPTY
        self.mode: Optional[EditMode] = None
        self.form_fields: Dict[str, Any] = {}
        # Paths whose values came from parsed text and must not be coerced
        self.typed_paths: Set[str] = set()
        self.text = ""
        self.draft: Optional[DraftRecord] = None
        self.violations: Tuple[Violation, ...] = ()
        self.syntax_error: Optional[DocumentSyntaxError] = None
        self.result: Optional[ValidationResult] = None

    # --- Editing ---

    def load_form(self, fields: Mapping[str, Any]):
        self._ensure_open()
        self.mode = EditMode.FORM
        self.form_fields = self.engine.normalizer.canonical_fields(fields, self.kind)
        self.typed_paths = set()
        self._renormalize()
        self._touch()

    def load_text(self, text: str):
        self._ensure_open()
        self.mode = EditMode.TEXT
        self.text = text
        self.draft = None
        self._touch()

    def set_field(self, path: str, value: Any):
        self._ensure_open()
        self._require_mode(EditMode.FORM)
        updates = self.engine.normalizer.canonical_fields({path: value}, self.kind)
        self.form_fields.update(updates)
        self.typed_paths.difference_update(updates)
        self._renormalize()
        self._touch()

    def set_text(self, text: str):
        self._ensure_open()
        self._require_mode(EditMode.TEXT)
        self.text = text
        self.draft = None
        self._touch()

    def switch_mode(self) -> EditMode:
        """
        Flips between form and text editing, carrying the draft across.

        Raises:
            DocumentSyntaxError: text cannot become a form; the session
                stays in text mode with the raw text untouched.
        """
        self._ensure_open()
        if self.mode is None:
            raise InvalidTransition("Nothing to switch: the session is still empty.")

        if self.mode == EditMode.FORM:
            self.text = self.engine.serializer.render_draft(self.draft, self.kind)
            self.mode = EditMode.TEXT
        else:
            parsed = self._parse_text()
            self.form_fields = dict(parsed.values)
            self.typed_paths = set(parsed.values)
            self._renormalize()
            self.draft.warnings[:0] = parsed.warnings
            self.mode = EditMode.FORM

        self._touch()
        logger.debug(f"Session switched to {self.mode.value} mode")
        return self.mode

    # --- Validation ---

    def submit(self) -> ValidationResult:
        """
        Validates the current draft.

        Raises:
            DocumentSyntaxError: in text mode, when the text does not parse;
                the attempt is aborted and the session stays EDITING.
        """
        self._ensure_open()
        if self.state == SessionState.EMPTY:
            raise InvalidTransition("Cannot submit an empty session.")

        if self.mode == EditMode.TEXT:
            self.draft = self._parse_text()

        self.state = SessionState.VALIDATING
        result = self.engine.validator.validate(self.draft, self.kind)
        self.result = result
        if result.accepted:
            self.state = SessionState.ACCEPTED
            self.violations = ()
        else:
            self.state = SessionState.REJECTED
            self.violations = result.violations
        return result

    def document(self) -> str:
        if self.state != SessionState.ACCEPTED:
            raise InvalidTransition(f"No accepted record yet (state: {self.state.value}).")
        return self.engine.serializer.serialize(self.result.record)

    # --- Internals ---

    def _parse_text(self) -> DraftRecord:
        try:
            return self.engine.parser.parse(self.text, self.kind)
        except DocumentSyntaxError as e:
            self.syntax_error = e
            self.state = SessionState.EDITING
            raise

    def _renormalize(self):
        self.draft = self.engine.normalizer.normalize(self.form_fields, self.kind, self.typed_paths)

    def _touch(self):
        self.state = SessionState.EDITING
        self.violations = ()
        self.syntax_error = None
        self.result = None

    def _ensure_open(self):
        if self.state == SessionState.ACCEPTED:
            raise SessionClosed("Session already accepted; start a new session to edit again.")

    def _require_mode(self, mode: EditMode):
        if self.mode != mode:
            current = self.mode.value if self.mode else "none"
            raise InvalidTransition(f"Operation needs {mode.value} mode, session is in {current} mode.")


class HandoffSlot:
    """A single named slot holding at most one pending template."""

    def __init__(self, name: str = "selectedTemplate"):
        self.name = name
        self._pending: Optional[Union[str, Mapping[str, Any]]] = None
        self._lock = threading.Lock()

    def put(self, template: Union[str, Mapping[str, Any]]):
        with self._lock:
            if self._pending is not None:
                logger.warning(f"Hand-off slot '{self.name}' already held a template; replacing it.")
            self._pending = template

    def take(self) -> Optional[Union[str, Mapping[str, Any]]]:
        """Returns the pending template and clears the slot."""
        with self._lock:
            template, self._pending = self._pending, None
        return template

    @property
    def pending(self) -> bool:
        return self._pending is not None
