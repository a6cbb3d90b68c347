"""Read-only status dump of the deployed objects."""

from __future__ import annotations

import re
import typing as typ

from handyshare_deploy.k8s import get_table
from handyshare_deploy.logging import get_logger, log_warning

if typ.TYPE_CHECKING:
    from handyshare_deploy.config import Config

logger = get_logger(__name__)


def filter_lines(output: str, pattern: str) -> list[str]:
    """Return the lines of ``output`` matching the regular expression."""
    regex = re.compile(pattern)
    return [line for line in output.splitlines() if regex.search(line)]


def _print_listing(title: str, args: tuple[str, ...], pattern: str | None) -> None:
    print()
    print(title)
    output = get_table(*args)
    if output is None:
        log_warning(logger, "kubectl get %s failed", " ".join(args))
        return
    lines = output.splitlines() if pattern is None else filter_lines(output, pattern)
    for line in lines:
        print(line)


def dump_status(cfg: Config) -> None:
    """Print services, ingresses and pods relevant to the deployment."""
    _print_listing(
        "Checking status of services...",
        ("svc", "--all-namespaces"),
        cfg.service_filter,
    )
    _print_listing("Checking status of ingress...", ("ingress",), None)
    _print_listing(
        "Checking status of pods...",
        ("pods", "--all-namespaces"),
        cfg.pod_filter,
    )

    print()
    print("For detailed information on any issues, run:")
    print(f"kubectl describe pods -n {cfg.ingress.namespace}")
