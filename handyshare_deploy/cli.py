"""Command-line entry point.

Usage:
    handyshare-deploy             # Full deployment (same as ``deploy``)
    handyshare-deploy deploy      # Build, install add-ons, reconcile apps
    handyshare-deploy status      # Access URLs and filtered cluster listings
    handyshare-deploy access      # Access URLs only

Environment variables:
    HANDYSHARE_MANIFEST_DIR   - Manifest directory (default: k8s)
    HANDYSHARE_WAIT_TIMEOUT   - kubectl wait timeout in seconds (default: 120)
    HANDYSHARE_SETTLE_SECONDS - Pause between delete and apply (default: 5)
    HANDYSHARE_LOG_LEVEL      - Diagnostic log level (default: INFO)
"""

from __future__ import annotations

import sys
import typing as typ
from pathlib import Path

from cyclopts import App, Parameter

from handyshare_deploy import __version__
from handyshare_deploy.config import Config
from handyshare_deploy.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_warning,
)
from handyshare_deploy.orchestration import deploy as run_deploy
from handyshare_deploy.orchestration import show_access, show_status
from handyshare_deploy.validation import DeployError

logger = get_logger(__name__)

app = App(
    name="handyshare-deploy",
    help="Provision a local Kubernetes cluster and deploy app1 and app2",
    version=__version__,
)

LogLevelOption = typ.Annotated[str, Parameter(env_var="HANDYSHARE_LOG_LEVEL")]


def _configure_logging(log_level: str) -> None:
    normalized, invalid = configure_logging(log_level, force=True)
    if invalid:
        log_warning(
            logger,
            "Invalid HANDYSHARE_LOG_LEVEL %r, falling back to %s",
            log_level,
            normalized,
        )


def _run(action: typ.Callable[[], int]) -> int:
    """Run an orchestration action, turning deployment errors into exit 1."""
    try:
        return action()
    except (DeployError, FileNotFoundError, NotADirectoryError) as exc:
        log_error(logger, "Deployment aborted: %s", exc)
        return 1


@app.command
def deploy(
    *,
    skip_build: bool = False,
    manifest_dir: typ.Annotated[
        Path, Parameter(env_var="HANDYSHARE_MANIFEST_DIR")
    ] = Path("k8s"),
    wait_timeout: typ.Annotated[
        int, Parameter(env_var="HANDYSHARE_WAIT_TIMEOUT")
    ] = 120,
    settle_seconds: typ.Annotated[
        float, Parameter(env_var="HANDYSHARE_SETTLE_SECONDS")
    ] = 5.0,
    log_level: LogLevelOption = "INFO",
) -> int:
    """Deploy app1 and app2 to the cluster of the active kubectl context.

    Builds the images, installs MetalLB (non-minikube only) and the Nginx
    Ingress Controller, recreates the application manifests and prints the
    access URLs. Safe to run repeatedly.

    Args:
        skip_build: Reuse existing images instead of running docker build.
        manifest_dir: Directory holding the Kubernetes manifests.
        wait_timeout: Seconds to wait for add-on pods to become ready.
        settle_seconds: Pause between deleting and recreating objects.
        log_level: Diagnostic log level.

    Returns:
        Exit code (0 for success, 1 if a required step failed or a
        setting is out of range).

    """
    _configure_logging(log_level)

    def action() -> int:
        cfg = Config(
            manifest_dir=manifest_dir,
            wait_timeout=wait_timeout,
            settle_seconds=settle_seconds,
        )
        return run_deploy(cfg, skip_build=skip_build)

    return _run(action)


app.default(deploy)


@app.command
def status(*, log_level: LogLevelOption = "INFO") -> int:
    """Show access URLs and the services, ingresses and pods of the deployment.

    Args:
        log_level: Diagnostic log level.

    """
    _configure_logging(log_level)
    return _run(lambda: show_status(Config()))


@app.command
def access(*, log_level: LogLevelOption = "INFO") -> int:
    """Show the URLs the applications can be reached at.

    Args:
        log_level: Diagnostic log level.

    """
    _configure_logging(log_level)
    return _run(lambda: show_access(Config()))


def main() -> int:
    """Entry point for the CLI."""
    return app()


if __name__ == "__main__":
    sys.exit(main())
