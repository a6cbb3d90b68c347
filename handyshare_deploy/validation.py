"""Validation helpers and exceptions for the deployment tool.

This module provides the exception hierarchy used throughout the package and
the preflight checks run before any cluster is touched.

Custom Exceptions
-----------------
- ``DeployError``: Base exception for all package errors
- ``ExecutableNotFoundError``: Raised when a required CLI tool is missing
- ``ConfigError``: Raised when a configuration value is out of range
- ``ManifestError``: Raised when a manifest file is missing or malformed
- ``StepFailedError``: Raised when a required command exits non-zero or
  times out

Examples
--------
Verify required executables before proceeding:

    require_exe("docker")
    require_exe("kubectl")

"""

from __future__ import annotations

import shutil
import typing as typ
from pathlib import Path

if typ.TYPE_CHECKING:
    from collections.abc import Sequence


class DeployError(Exception):
    """Base exception for all handyshare_deploy errors."""


class ExecutableNotFoundError(DeployError):
    """Required CLI tool is not installed."""


class ConfigError(DeployError):
    """A configuration value is out of range."""


class ManifestError(DeployError):
    """A manifest file is missing or is not valid Kubernetes YAML."""


class StepFailedError(DeployError):
    """A required command failed.

    Attributes
    ----------
    command : tuple[str, ...]
        The argv that failed.
    returncode : int | None
        Exit status, or ``None`` when the command timed out or could not start.
        ``detail`` then carries the reason.

    """

    def __init__(
        self,
        description: str,
        command: Sequence[str],
        returncode: int | None,
        detail: str = "",
    ) -> None:
        self.command = tuple(command)
        self.returncode = returncode
        status = (
            "did not complete" if returncode is None else f"exit status {returncode}"
        )
        msg = f"{description} failed ({status}): {' '.join(self.command)}"
        if detail:
            msg = f"{msg}\n{detail}"
        super().__init__(msg)


def require_exe(name: str) -> None:
    """Verify a CLI tool is available in PATH.

    Parameters
    ----------
    name : str
        Name of the executable to check for.

    Raises
    ------
    ExecutableNotFoundError
        If the executable is not found in PATH.

    """
    if shutil.which(name) is None:
        msg = f"Required executable '{name}' not found in PATH"
        raise ExecutableNotFoundError(msg)


def require_build_context(context: Path | str) -> Path:
    """Return the build context as a Path after checking it is a directory.

    Raises
    ------
    FileNotFoundError
        If the context path does not exist.
    NotADirectoryError
        If the context path is not a directory.

    """
    context_path = Path(context)
    if not context_path.exists():
        msg = f"Build context path does not exist: {context_path}"
        raise FileNotFoundError(msg)
    if not context_path.is_dir():
        msg = f"Build context must be a directory: {context_path}"
        raise NotADirectoryError(msg)
    return context_path
