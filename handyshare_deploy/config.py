"""Configuration for the local cluster deployment."""

from __future__ import annotations

import dataclasses
from pathlib import Path

from handyshare_deploy.validation import ConfigError

MINIKUBE_CONTEXT = "minikube"

# Bounds accepted by kubectl wait --timeout (seconds).
MIN_WAIT_TIMEOUT = 1
MAX_WAIT_TIMEOUT = 3600


@dataclasses.dataclass(frozen=True, slots=True)
class ImageSpec:
    """A locally built container image.

    Attributes:
        repo: Image repository name (e.g. ``handyshare/app1``).
        tag: Image tag.
        context: Docker build context directory.

    """

    repo: str
    tag: str
    context: Path

    @property
    def name(self) -> str:
        """Return the ``repo:tag`` reference passed to docker."""
        return f"{self.repo}:{self.tag}"


@dataclasses.dataclass(frozen=True, slots=True)
class AddonRelease:
    """A cluster add-on installed from a versioned remote manifest.

    Attributes:
        namespace: Namespace the add-on installs into.
        manifest_url: Versioned URL passed to ``kubectl apply -f``.
        pod_selector: Label selector for the pods gating readiness.

    """

    namespace: str
    manifest_url: str
    pod_selector: str


def _default_images() -> tuple[ImageSpec, ...]:
    return (
        ImageSpec(repo="handyshare/app1", tag="latest", context=Path("app1")),
        ImageSpec(repo="handyshare/app2", tag="latest", context=Path("app2")),
    )


def _default_metallb() -> AddonRelease:
    return AddonRelease(
        namespace="metallb-system",
        manifest_url=(
            "https://raw.githubusercontent.com/metallb/metallb/v0.13.7/"
            "config/manifests/metallb-native.yaml"
        ),
        pod_selector="app=metallb",
    )


def _default_ingress() -> AddonRelease:
    return AddonRelease(
        namespace="ingress-nginx",
        manifest_url=(
            "https://raw.githubusercontent.com/kubernetes/ingress-nginx/"
            "controller-v1.8.2/deploy/static/provider/baremetal/deploy.yaml"
        ),
        pod_selector="app.kubernetes.io/component=controller",
    )


@dataclasses.dataclass(frozen=True, slots=True)
class Config:
    """Configuration for a deployment run.

    All paths are relative to the repository root unless absolute. Manifest
    file names are resolved against ``manifest_dir``.

    Attributes:
        wait_timeout: Seconds passed to ``kubectl wait --timeout``.
        settle_seconds: Pause after deleting resources before recreating them.
        ingress_service: Name of the ingress controller Service queried for
            the load balancer IP and NodePort.
        app_paths: URL paths printed in the access report, one per app.

    """

    images: tuple[ImageSpec, ...] = dataclasses.field(default_factory=_default_images)
    manifest_dir: Path = dataclasses.field(default_factory=lambda: Path("k8s"))
    metallb: AddonRelease = dataclasses.field(default_factory=_default_metallb)
    metallb_configs: tuple[str, ...] = ("pool-1.yaml", "l2advertisement.yml")
    ingress: AddonRelease = dataclasses.field(default_factory=_default_ingress)
    ingress_service: str = "ingress-nginx-controller"
    minikube_addon: str = "ingress"
    app_manifests: tuple[str, ...] = (
        "app1-deployment.yaml",
        "app2-deployment.yaml",
        "ingress.yaml",
    )
    app_paths: tuple[str, ...] = ("app1", "app2")
    wait_timeout: int = 120
    settle_seconds: float = 5.0
    crash_indicator: str = "CrashLoop"
    service_filter: str = "NAMESPACE|ingress-nginx|app"
    pod_filter: str = "NAMESPACE|ingress-nginx|app|metallb"

    def __post_init__(self) -> None:
        """Reject values that would fail part-way through a run.

        Raises:
            ConfigError: If ``wait_timeout`` is outside 1-3600 seconds or
                ``settle_seconds`` is negative.

        """
        if not MIN_WAIT_TIMEOUT <= self.wait_timeout <= MAX_WAIT_TIMEOUT:
            msg = (
                f"wait timeout must be between {MIN_WAIT_TIMEOUT} and "
                f"{MAX_WAIT_TIMEOUT} seconds, got {self.wait_timeout}"
            )
            raise ConfigError(msg)
        if self.settle_seconds < 0:
            msg = f"settle seconds must not be negative, got {self.settle_seconds}"
            raise ConfigError(msg)

    def manifest_path(self, name: str) -> Path:
        """Return the path of a manifest file inside ``manifest_dir``."""
        return self.manifest_dir / name

    @property
    def metallb_config_paths(self) -> tuple[Path, ...]:
        """MetalLB address pool and advertisement manifests."""
        return tuple(self.manifest_path(name) for name in self.metallb_configs)

    @property
    def app_manifest_paths(self) -> tuple[Path, ...]:
        """Application manifests reconciled on every run, in apply order."""
        return tuple(self.manifest_path(name) for name in self.app_manifests)


def is_minikube(context: str) -> bool:
    """Return True when the kubectl context is the stock minikube context."""
    return context == MINIKUBE_CONTEXT
