"""Navigator subsystem exceptions."""


class NavigatorError(Exception):
    """Base class for navigator errors."""


class PaneWeightCollisionError(NavigatorError, AssertionError):
    """Two distinct panes declare the same weight.

    A configuration bug: every pane must return a distinct weight so the
    tab order is deterministic.
    """


class InvalidPaneStateError(NavigatorError):
    """Raised by a pane that cannot read its persisted fragment."""


class PaneStateWriteError(NavigatorError):
    """Raised by a pane that cannot serialize its state."""
