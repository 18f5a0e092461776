"""Quickproj - project scaffolding from reusable templates.

Builds a rendering context per template, expands multi-valued variables
into concrete paths, and materializes directories, copied sources and
generated files into a project root.
"""

__version__ = "0.1.0"

# Configure logging for library use
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

from .tasks.installation import InstallResult, StageEvent, install

__all__ = ["InstallResult", "StageEvent", "install"]
