"""approval-buttons - interactive buttons for exec approval requests."""

__version__ = "4.0.0"
__logo__ = "🔐"
