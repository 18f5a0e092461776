"""Post-init hook execution."""

from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path
from typing import Iterable

from .core.errors import HookError

logger = logging.getLogger(__name__)


def run_hooks(commands: Iterable[str], cwd: Path, shell: str = "/bin/sh") -> int:
    """Run hook command lines in order inside the project root.

    Output is mirrored to the caller. Stops at the first failing command.

    Returns:
        Number of commands executed
    """
    executed = 0
    for command in commands:
        logger.info(f"Running hook: {command}")
        result = subprocess.run(
            [shell, "-c", command],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            check=False,
        )
        if result.stdout:
            sys.stdout.write(result.stdout)
        if result.stderr:
            sys.stderr.write(result.stderr)
        if result.returncode != 0:
            raise HookError(command, result.returncode)
        executed += 1
    return executed
