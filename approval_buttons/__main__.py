"""Allow running as ``python -m approval_buttons``."""

from approval_buttons.cli.commands import app

if __name__ == "__main__":
    app()
