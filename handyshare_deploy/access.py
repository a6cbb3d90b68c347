"""Access endpoint resolution and reporting.

Resolution is split from the cluster queries so the fallback rules can be
exercised directly:

- minikube: the node IP (via ``minikube tunnel``) plus, when the controller
  Service has one, NodePort URLs on the same IP.
- other contexts: the load balancer IP when MetalLB assigned one, otherwise
  the host's external IP with the controller NodePort. The load balancer
  field is read once; there is no polling.

"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

from handyshare_deploy.config import is_minikube
from handyshare_deploy.ingress import controller_load_balancer_ip, controller_node_port
from handyshare_deploy.logging import get_logger, log_warning
from handyshare_deploy.process import probe

if typ.TYPE_CHECKING:
    from collections.abc import Sequence

    from handyshare_deploy.config import Config
    from handyshare_deploy.host import HostFacts

logger = get_logger(__name__)

# kubectl prints this literal for some unset fields.
_UNSET_ADDRESS = "none"


class AccessMode(enum.StrEnum):
    """How the applications are reached from the host."""

    MINIKUBE_TUNNEL = "minikube-tunnel"
    LOAD_BALANCER = "load-balancer"
    NODE_PORT = "node-port"
    UNKNOWN = "unknown"


@dataclasses.dataclass(frozen=True, slots=True)
class AppUrl:
    """URL of one application behind the ingress."""

    app: str
    url: str

    @property
    def label(self) -> str:
        """Display label, e.g. ``App1``."""
        return self.app.capitalize()


@dataclasses.dataclass(frozen=True, slots=True)
class AccessInfo:
    """Resolved access endpoints.

    Attributes:
        mode: Access method in effect.
        address: Host the primary URLs point at.
        urls: Primary URLs, one per application.
        node_port_urls: Alternative NodePort URLs (minikube only).

    """

    mode: AccessMode
    address: str | None = None
    urls: tuple[AppUrl, ...] = ()
    node_port_urls: tuple[AppUrl, ...] = ()


def app_urls(
    host: str, paths: Sequence[str], port: str | None = None
) -> tuple[AppUrl, ...]:
    """Build ``http://host[:port]/<path>`` URLs for every app path."""
    authority = f"{host}:{port}" if port else host
    return tuple(AppUrl(app=path, url=f"http://{authority}/{path}") for path in paths)


def has_load_balancer_ip(address: str | None) -> typ.TypeGuard[str]:
    """Return True when a load balancer address is actually assigned."""
    return bool(address) and address != _UNSET_ADDRESS


def resolve_minikube_access(
    node_ip: str | None, node_port: str | None, paths: Sequence[str]
) -> AccessInfo:
    """Resolve access for a minikube cluster."""
    if not node_ip:
        return AccessInfo(mode=AccessMode.MINIKUBE_TUNNEL)
    return AccessInfo(
        mode=AccessMode.MINIKUBE_TUNNEL,
        address=node_ip,
        urls=app_urls(node_ip, paths),
        node_port_urls=app_urls(node_ip, paths, node_port) if node_port else (),
    )


def resolve_cluster_access(
    load_balancer_ip: str | None,
    node_port: str | None,
    external_ip: str,
    paths: Sequence[str],
) -> AccessInfo:
    """Resolve access for a non-minikube cluster.

    The NodePort fallback always pairs the port with the host's external IP,
    never with the unset load balancer field.
    """
    if has_load_balancer_ip(load_balancer_ip):
        return AccessInfo(
            mode=AccessMode.LOAD_BALANCER,
            address=load_balancer_ip,
            urls=app_urls(load_balancer_ip, paths),
        )
    if node_port:
        return AccessInfo(
            mode=AccessMode.NODE_PORT,
            address=external_ip,
            urls=app_urls(external_ip, paths, node_port),
        )
    return AccessInfo(mode=AccessMode.UNKNOWN)


def minikube_ip() -> str | None:
    """Return the minikube node IP, or None if minikube cannot report it."""
    output = probe(["minikube", "ip"])
    address = (output or "").strip()
    if not address:
        log_warning(logger, "minikube ip returned no address")
        return None
    return address


def gather_access(cfg: Config, context: str, host: HostFacts) -> AccessInfo:
    """Query the cluster and resolve the access endpoints for ``context``."""
    if is_minikube(context):
        return resolve_minikube_access(
            minikube_ip(), controller_node_port(cfg), cfg.app_paths
        )

    load_balancer_ip = controller_load_balancer_ip(cfg)
    node_port = (
        None if has_load_balancer_ip(load_balancer_ip) else controller_node_port(cfg)
    )
    return resolve_cluster_access(
        load_balancer_ip, node_port, host.external_ip, cfg.app_paths
    )


def _print_urls(urls: Sequence[AppUrl]) -> None:
    for app_url in urls:
        print(f"- {app_url.label} at: {app_url.url}")


def print_access(info: AccessInfo) -> None:
    """Print the access report for the operator."""
    if info.mode is AccessMode.MINIKUBE_TUNNEL:
        print("You're using Minikube. Using Minikube tunnel to access services...")
        print("In a separate terminal, run: minikube tunnel")
        if info.urls:
            print("You can access applications at:")
            _print_urls(info.urls)
        else:
            print("Unable to determine the minikube IP; run 'minikube ip'.")
        print()
        print("Or you can use NodePort access:")
        _print_urls(info.node_port_urls)
        return

    if info.mode is AccessMode.LOAD_BALANCER:
        print(f"LoadBalancer IP assigned: {info.address}")
        print("You can access applications at:")
        _print_urls(info.urls)
        return

    print("No LoadBalancer IP assigned. Using NodePort access method instead.")
    if info.mode is AccessMode.NODE_PORT:
        print("You can access applications at:")
        _print_urls(info.urls)
    else:
        print(
            "Unable to determine access method. "
            "Please check your cluster configuration."
        )
