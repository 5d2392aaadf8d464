"""Command-line interface for approval-buttons."""
