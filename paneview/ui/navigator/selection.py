"""
Active-view selection state.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class SelectionState:
    """
    The single active pane and sub-view.

    Immutable: the content binding replaces it through one transition
    function so pane-changed notifications stay consistent.
    """
    view_id: Optional[str] = None
    sub_id: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.view_id is None

    def matches(self, view_id: Optional[str], sub_id: Optional[str]) -> bool:
        return self.view_id == view_id and self.sub_id == sub_id


class Obsolescence(Enum):
    """
    Whether the pane selection may be stale.

    IDLE: selection is current.
    UNSURE: the tool window was re-shown and an automatic scroll ran;
        the next select() decides: with focus requested the selection
        becomes CONFIRMED obsolete, otherwise it returns to IDLE.
    CONFIRMED: the next select() is swallowed once, then IDLE again.
    """
    IDLE = "idle"
    UNSURE = "unsure"
    CONFIRMED = "confirmed"
