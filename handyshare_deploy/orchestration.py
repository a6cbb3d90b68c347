"""High-level orchestration for CLI commands."""

from __future__ import annotations

import typing as typ

from handyshare_deploy.access import gather_access, print_access
from handyshare_deploy.config import Config, is_minikube
from handyshare_deploy.host import HostFacts, detect_host_facts
from handyshare_deploy.images import build_images, load_images_into_minikube
from handyshare_deploy.ingress import (
    heal_crashed_controller,
    install_ingress_controller,
)
from handyshare_deploy.k8s import current_context
from handyshare_deploy.manifests import load_manifests
from handyshare_deploy.metallb import ensure_metallb
from handyshare_deploy.reconcile import reconcile_manifests
from handyshare_deploy.status import dump_status
from handyshare_deploy.validation import ManifestError, require_exe

if typ.TYPE_CHECKING:
    from pathlib import Path

    from handyshare_deploy.manifests import ManifestDocument


def _detect_host() -> HostFacts:
    print("Detecting host IP address...")
    host = detect_host_facts()
    print(f"Your machine's external IP is: {host.external_ip}")
    return host


def _detect_context() -> str:
    context = current_context()
    print(f"Detected Kubernetes context: {context}")
    return context


def _preflight_manifests(
    cfg: Config, *, with_metallb: bool
) -> dict[Path, list[ManifestDocument]]:
    """Load app manifests and check MetalLB configs before touching the cluster."""
    documents = load_manifests(cfg.app_manifest_paths)
    if with_metallb:
        missing = [p for p in cfg.metallb_config_paths if not p.is_file()]
        if missing:
            msg = f"MetalLB configuration not found: {', '.join(map(str, missing))}"
            raise ManifestError(msg)
    return documents


def deploy(cfg: Config, *, skip_build: bool = False) -> int:
    """Run the full deployment against the active kubectl context.

    Args:
        cfg: Deployment configuration.
        skip_build: Skip docker builds (and minikube image loads), reusing
            images already present.

    Returns:
        Exit code (0 for success).

    Raises:
        DeployError: If a required step fails.

    """
    print("Checking required tools...")
    required_tools = ["kubectl"]
    if not skip_build:
        required_tools.insert(0, "docker")
    for exe in required_tools:
        require_exe(exe)

    host = _detect_host()

    if skip_build:
        print("Skipping Docker build (--skip-build)")
    else:
        print("Building Docker images...")
        build_images(cfg.images)

    context = _detect_context()
    minikube = is_minikube(context)
    documents = _preflight_manifests(cfg, with_metallb=not minikube)

    if minikube:
        require_exe("minikube")
        if not skip_build:
            load_images_into_minikube(cfg.images)
    else:
        ensure_metallb(cfg)

    heal_crashed_controller(cfg)
    install_ingress_controller(cfg, context)

    applied = reconcile_manifests(cfg, documents)
    for ref in applied:
        print(f"  {ref}")

    print()
    print_access(gather_access(cfg, context, host))
    dump_status(cfg)
    return 0


def show_access(cfg: Config) -> int:
    """Print how to reach the applications on the active context."""
    require_exe("kubectl")
    host = _detect_host()
    context = _detect_context()
    if is_minikube(context):
        require_exe("minikube")
    print()
    print_access(gather_access(cfg, context, host))
    return 0


def show_status(cfg: Config) -> int:
    """Print the access report followed by the status dump."""
    show_access(cfg)
    dump_status(cfg)
    return 0
