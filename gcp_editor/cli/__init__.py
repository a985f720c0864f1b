"""CLI module for the GCP editor.

Provides the `gcpedit` command-line interface for importing, tagging,
editing and exporting GCP files.
"""

from gcp_editor.cli.main import app

__all__ = ["app"]
