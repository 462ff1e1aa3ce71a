"""Metadata edit session: a two-state machine (idle / editing).

Field edits are applied to the metadata record in place while editing.
Cancelling only clears validation errors and leaves edit mode; it does not
restore the values that were present when the session began.
"""

from __future__ import annotations

import enum
import logging
from typing import Callable, Optional

from .errors import InvalidArgumentError
from .metadata import EditablePackageMetadata

logger = logging.getLogger(__name__)


class EditState(enum.Enum):
    IDLE = "idle"
    EDITING = "editing"


class EditEvent(enum.Enum):
    REBIND = "rebind"  # metadata bindings must be refreshed, stale error display dropped
    MODE_CHANGED = "mode_changed"
    COMMITTED = "committed"
    CANCELLED = "cancelled"


EditListener = Callable[[EditEvent], None]


class EditTransaction:
    def __init__(self, metadata: EditablePackageMetadata, *, listener: Optional[EditListener] = None) -> None:
        if metadata is None:
            raise InvalidArgumentError("metadata is required")
        self.metadata = metadata
        self.state = EditState.IDLE
        self._listener = listener

    @property
    def is_editing(self) -> bool:
        return self.state is EditState.EDITING

    def _emit(self, event: EditEvent) -> None:
        if self._listener is not None:
            self._listener(event)

    def _set_state(self, state: EditState) -> None:
        if self.state is not state:
            self.state = state
            self._emit(EditEvent.MODE_CHANGED)

    def begin_edit(self) -> None:
        """Enter edit mode. Re-entering while editing only re-issues the rebind."""
        self._emit(EditEvent.REBIND)
        self._set_state(EditState.EDITING)

    def cancel_edit(self) -> None:
        self.metadata.reset_errors()
        self._set_state(EditState.IDLE)
        logger.debug("metadata edit cancelled for %s", self.metadata)
        self._emit(EditEvent.CANCELLED)

    def commit_edit(self) -> None:
        self.metadata.reset_errors()
        self._set_state(EditState.IDLE)
        logger.debug("metadata edit committed for %s", self.metadata)
        self._emit(EditEvent.COMMITTED)
