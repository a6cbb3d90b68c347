"""MetalLB installation for non-minikube clusters."""

from __future__ import annotations

import typing as typ

from handyshare_deploy.k8s import apply_source, namespace_exists, wait_for_pods_ready
from handyshare_deploy.logging import get_logger, log_info
from handyshare_deploy.policy import Step

if typ.TYPE_CHECKING:
    from handyshare_deploy.config import Config

logger = get_logger(__name__)


def install_metallb(cfg: Config) -> None:
    """Apply the pinned MetalLB release and wait for its pods."""
    release = cfg.metallb
    print("Installing MetalLB...")
    apply_source(
        release.manifest_url,
        step=Step.APPLY_ADDON,
        description="Installing MetalLB",
    )

    print("Waiting for MetalLB to be ready...")
    wait_for_pods_ready(release.pod_selector, release.namespace, cfg.wait_timeout)


def configure_metallb(cfg: Config) -> None:
    """Apply the address pool and L2 advertisement manifests."""
    print("Configuring MetalLB...")
    for path in cfg.metallb_config_paths:
        apply_source(
            path,
            step=Step.APPLY_ADDON_CONFIG,
            description=f"Applying MetalLB configuration {path}",
        )


def ensure_metallb(cfg: Config) -> bool:
    """Install MetalLB when absent, then (re)apply its configuration.

    The presence of the MetalLB namespace stands in for "already installed".

    Returns:
        True if MetalLB was installed during this call.

    """
    print("Checking for MetalLB...")
    installed = False
    if namespace_exists(cfg.metallb.namespace):
        log_info(
            logger,
            "Namespace %s exists; skipping MetalLB install",
            cfg.metallb.namespace,
        )
    else:
        install_metallb(cfg)
        installed = True

    configure_metallb(cfg)
    return installed
