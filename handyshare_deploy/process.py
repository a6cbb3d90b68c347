"""Subprocess execution for deployment steps.

Two entry points cover every command the tool issues:

- ``run_step`` runs a mutating command with its output streamed to the
  terminal and applies the step's failure policy.
- ``probe`` runs a read-only command, captures stdout and returns ``None`` on
  any failure so callers can fall back.

Commands are always passed as argv lists (``shell=False``).

"""

from __future__ import annotations

import subprocess
import typing as typ

from handyshare_deploy.logging import get_logger, log_debug, log_warning
from handyshare_deploy.policy import FailurePolicy, Step, policy_for
from handyshare_deploy.validation import StepFailedError

if typ.TYPE_CHECKING:
    from collections.abc import Sequence

logger = get_logger(__name__)

# Default timeouts for subprocess calls (seconds).
DEFAULT_STEP_TIMEOUT = 300
DEFAULT_PROBE_TIMEOUT = 30


def _tolerate_or_raise(
    step: Step,
    description: str,
    args: Sequence[str],
    returncode: int | None,
    detail: str,
) -> bool:
    if policy_for(step) is FailurePolicy.REQUIRED:
        raise StepFailedError(description, args, returncode, detail)

    log_warning(
        logger,
        "%s did not succeed (%s); continuing: %s",
        description,
        detail or f"exit status {returncode}",
        " ".join(args),
    )
    return False


def run_step(
    args: Sequence[str],
    *,
    step: Step,
    description: str,
    timeout: float = DEFAULT_STEP_TIMEOUT,
) -> bool:
    """Run a mutating command under the failure policy for ``step``.

    Parameters
    ----------
    args : Sequence[str]
        Command argv; the executable is resolved via PATH.
    step : Step
        Step kind used to look up the failure policy.
    description : str
        Human-readable step name used in warnings and errors.
    timeout : float
        Subprocess timeout in seconds.

    Returns
    -------
    bool
        True when the command succeeded, False when a best-effort step failed.

    Raises
    ------
    StepFailedError
        If a required step exits non-zero, times out or cannot be started.

    """
    argv = list(args)
    try:
        # S603: argv lists only; executables resolve via PATH
        subprocess.run(  # noqa: S603
            argv,
            text=True,
            check=True,
            timeout=timeout,
        )
    except subprocess.CalledProcessError as e:
        return _tolerate_or_raise(step, description, argv, e.returncode, "")
    except subprocess.TimeoutExpired:
        return _tolerate_or_raise(
            step, description, argv, None, f"timed out after {timeout} seconds"
        )
    except OSError as e:
        return _tolerate_or_raise(step, description, argv, None, str(e))
    return True


def probe(args: Sequence[str], *, timeout: float = DEFAULT_PROBE_TIMEOUT) -> str | None:
    """Run a read-only command and return its stdout.

    Returns
    -------
    str | None
        The captured stdout, or None if the command could not run, timed out
        or exited non-zero.

    """
    argv = list(args)
    try:
        result = subprocess.run(  # noqa: S603
            argv,
            capture_output=True,
            text=True,
            check=False,
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        log_debug(logger, "Probe %s failed: %s", " ".join(argv), e)
        return None

    if result.returncode != 0:
        log_debug(
            logger, "Probe %s exited with %d", " ".join(argv), result.returncode
        )
        return None
    return result.stdout or ""
