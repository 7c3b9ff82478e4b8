"""UI-side services. The navigator subsystem lives in `paneview.ui.navigator`."""
