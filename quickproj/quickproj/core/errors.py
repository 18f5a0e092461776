"""Error types raised by the template instantiation engine."""

from __future__ import annotations

from pathlib import Path


class QuickprojError(Exception):
    """Base class for every error surfaced to the command line front end."""


class ConfigurationError(QuickprojError):
    """Raised when a template config is missing, malformed, or invalid."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else None
        if self.path is not None:
            message = f"{self.path} -> {message}"
        super().__init__(message)


class TemplateIOError(QuickprojError):
    """Raised when a template file cannot be read or a destination written."""

    def __init__(self, path: Path | str, cause: OSError) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"I/O error with {self.path}: {cause}")


class TemplateRenderError(QuickprojError):
    """Raised when the substitution pass rejects the reconciled template text."""

    def __init__(self, filename: str, cause: Exception) -> None:
        self.filename = filename
        self.cause = cause
        super().__init__(f"Template rendering error for {filename} file: {cause}")


class InstallationError(QuickprojError):
    """Raised when an installation task aborts at one of its stages."""

    def __init__(self, template_name: str, stage: str, cause: Exception) -> None:
        self.template_name = template_name
        self.stage = stage
        self.cause = cause
        super().__init__(
            f"Installation of the `{template_name}` template failed while "
            f"{stage}: {cause}"
        )


class TemplateNotFoundError(QuickprojError):
    """Raised when requested templates are not available in the store."""


class HookError(QuickprojError):
    """Raised when a post-init hook exits with a non-zero status."""

    def __init__(self, command: str, returncode: int) -> None:
        self.command = command
        self.returncode = returncode
        super().__init__(f"Hook `{command}` exited with status {returncode}")
