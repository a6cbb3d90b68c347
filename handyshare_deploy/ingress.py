"""Nginx Ingress Controller management.

Covers the crash-loop self-heal performed before installation, the install
itself (minikube addon or the pinned bare-metal release), and the queries
against the controller Service used by the access report.

"""

from __future__ import annotations

import time
import typing as typ

from handyshare_deploy.config import is_minikube
from handyshare_deploy.k8s import (
    apply_source,
    delete_namespace,
    get_jsonpath,
    list_pods,
    wait_for_pods_ready,
)
from handyshare_deploy.policy import Step
from handyshare_deploy.process import run_step

if typ.TYPE_CHECKING:
    from handyshare_deploy.config import Config

_NODE_PORT_PATH = "{.spec.ports[0].nodePort}"
_LOAD_BALANCER_IP_PATH = "{.status.loadBalancer.ingress[0].ip}"


def controller_is_crashing(cfg: Config) -> bool:
    """Return True if any controller pod reports a crash loop."""
    output = list_pods(cfg.ingress.namespace, cfg.ingress.pod_selector)
    return bool(output) and cfg.crash_indicator in output


def heal_crashed_controller(cfg: Config) -> bool:
    """Delete the ingress namespace if the controller is crash looping.

    The namespace delete completes before the settle pause, so any reinstall
    starts from an empty namespace.

    Returns:
        True if the namespace was deleted.

    """
    print("Checking for existing ingress controller...")
    if not controller_is_crashing(cfg):
        return False

    print("Found crashed ingress controller, cleaning up...")
    delete_namespace(cfg.ingress.namespace)
    time.sleep(cfg.settle_seconds)
    return True


def install_ingress_controller(cfg: Config, context: str) -> None:
    """Install the ingress controller appropriate for the context."""
    print("Installing Nginx Ingress Controller...")
    if is_minikube(context):
        print("Using Minikube's built-in ingress addon...")
        run_step(
            ["minikube", "addons", "enable", cfg.minikube_addon],
            step=Step.ENABLE_MINIKUBE_ADDON,
            description=f"Enabling minikube addon {cfg.minikube_addon}",
        )
    else:
        apply_source(
            cfg.ingress.manifest_url,
            step=Step.APPLY_ADDON,
            description="Installing Nginx Ingress Controller",
        )

    print("Waiting for Ingress Controller to be ready...")
    wait_for_pods_ready(
        cfg.ingress.pod_selector, cfg.ingress.namespace, cfg.wait_timeout
    )


def controller_node_port(cfg: Config) -> str | None:
    """Return the controller Service's first NodePort, if assigned."""
    return get_jsonpath(
        "svc", cfg.ingress_service, _NODE_PORT_PATH, namespace=cfg.ingress.namespace
    )


def controller_load_balancer_ip(cfg: Config) -> str | None:
    """Return the controller Service's load balancer IP, if assigned."""
    return get_jsonpath(
        "svc",
        cfg.ingress_service,
        _LOAD_BALANCER_IP_PATH,
        namespace=cfg.ingress.namespace,
    )
