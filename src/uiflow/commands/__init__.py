"""CLI commands for uiflow."""
