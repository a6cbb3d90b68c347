"""Shared fixtures for unit and feature tests.

``FakeCluster`` stands in for docker, kubectl, minikube and the host network
tools by replacing ``subprocess.run``. It keeps just enough state (namespaces,
applied objects, enabled addons) for the deployment flow to be checked end to
end without a real cluster.
"""

from __future__ import annotations

import dataclasses
import subprocess
import typing as typ
from pathlib import Path

import pytest
from ruamel.yaml import YAML

REPO_ROOT = Path(__file__).resolve().parents[1]

METALLB_URL_MARKER = "metallb"
INGRESS_URL_MARKER = "ingress-nginx"

RUNNING_CONTROLLER = (
    "NAME                                        READY   STATUS    RESTARTS   AGE\n"
    "ingress-nginx-controller-5d88495688-abcde   1/1     Running   0          2m\n"
)
CRASHING_CONTROLLER = (
    "NAME                                        READY   STATUS             RESTARTS\n"
    "ingress-nginx-controller-5d88495688-abcde   0/1     CrashLoopBackOff   7\n"
)


def _load_documents(path: str) -> list[dict[str, typ.Any]]:
    yaml = YAML(typ="safe")
    text = Path(path).read_text(encoding="utf-8")
    return [doc for doc in yaml.load_all(text) if doc]


@dataclasses.dataclass(slots=True)
class FakeCluster:
    """Simulated cluster and host tooling driven through ``subprocess.run``."""

    context: str = "kind-local"
    namespaces: set[str] = dataclasses.field(
        default_factory=lambda: {"default", "kube-system"}
    )
    objects: dict[tuple[str, str], dict[str, typ.Any]] = dataclasses.field(
        default_factory=dict
    )
    controller_pods: str = RUNNING_CONTROLLER
    load_balancer_ip: str = ""
    node_port: str = "31080"
    minikube_ip: str = "192.168.49.2"
    hostname_output: str = "192.168.1.20 172.17.0.1\n"
    ipconfig: dict[str, str] = dataclasses.field(default_factory=dict)
    failing: set[tuple[str, ...]] = dataclasses.field(default_factory=set)
    enabled_addons: set[str] = dataclasses.field(default_factory=set)
    calls: list[tuple[str, ...]] = dataclasses.field(default_factory=list)
    sleeps: list[float] = dataclasses.field(default_factory=list)

    # Queries -----------------------------------------------------------

    def deployments(self) -> list[str]:
        """Names of every Deployment currently applied."""
        return sorted(name for kind, name in self.objects if kind == "Deployment")

    def service(self, name: str) -> dict[str, typ.Any] | None:
        """Return the applied Service manifest with this name."""
        return self.objects.get(("Service", name))

    def has_call(self, *prefix: str) -> bool:
        """Return True if any recorded call starts with ``prefix``."""
        return any(call[: len(prefix)] == prefix for call in self.calls)

    def index_of(self, *prefix: str) -> int:
        """Index of the first call starting with ``prefix``."""
        for index, call in enumerate(self.calls):
            if call[: len(prefix)] == prefix:
                return index
        msg = f"no call starting with {prefix}"
        raise AssertionError(msg)

    def crash_controller(self) -> None:
        """Make the ingress controller pod report CrashLoopBackOff."""
        self.namespaces.add("ingress-nginx")
        self.controller_pods = CRASHING_CONTROLLER

    def sleep(self, seconds: float) -> None:
        """Record a pause instead of sleeping."""
        self.sleeps.append(seconds)
        self.calls.append(("sleep", str(seconds)))

    # Command handlers --------------------------------------------------

    def _kubectl(self, args: list[str]) -> tuple[str, int]:
        verb = args[1]
        if args[1:3] == ["config", "current-context"]:
            return (f"{self.context}\n", 0) if self.context else ("", 1)
        if verb == "get":
            return self._kubectl_get(args[2:])
        if verb == "apply":
            return self._kubectl_apply(args[3])
        if verb == "delete":
            return self._kubectl_delete(args[2:])
        return "", 0  # wait

    def _kubectl_get(self, rest: list[str]) -> tuple[str, int]:
        resource = rest[0]
        if resource == "namespace":
            return ("", 0) if rest[1] in self.namespaces else ("", 1)
        if "-o" in rest:
            return self._jsonpath(rest[rest.index("-o") + 1])
        if resource == "pods" and "-l" in rest:
            namespace = rest[rest.index("-n") + 1]
            if namespace not in self.namespaces:
                return "", 0
            return self.controller_pods, 0
        return self._table(resource), 0

    def _jsonpath(self, expression: str) -> tuple[str, int]:
        if "nodePort" in expression:
            return self.node_port, 0
        if "loadBalancer" in expression:
            return self.load_balancer_ip, 0
        return "", 0

    def _table(self, resource: str) -> str:
        kind = {"svc": "Service", "ingress": "Ingress", "pods": "Pod"}[resource]
        rows = ["NAMESPACE     NAME"]
        rows.extend(f"default       {name}" for k, name in self.objects if k == kind)
        if kind == "Service" and "ingress-nginx" in self.namespaces:
            rows.append("ingress-nginx ingress-nginx-controller")
        if kind == "Pod":
            rows.extend(
                f"default       {name}-pod" for name in self.deployments()
            )
            rows.append("kube-system   coredns-abc")
        return "\n".join(rows) + "\n"

    def _kubectl_apply(self, source: str) -> tuple[str, int]:
        if source.startswith("https://"):
            if METALLB_URL_MARKER in source:
                self.namespaces.add("metallb-system")
            elif INGRESS_URL_MARKER in source:
                self.namespaces.add("ingress-nginx")
                self.controller_pods = RUNNING_CONTROLLER
            return "", 0
        for doc in _load_documents(source):
            self.objects[(doc["kind"], doc["metadata"]["name"])] = doc
        return "", 0

    def _kubectl_delete(self, rest: list[str]) -> tuple[str, int]:
        if rest[0] == "namespace":
            if rest[1] not in self.namespaces:
                return "", 1
            self.namespaces.discard(rest[1])
            self.controller_pods = ""
            return "", 0
        for doc in _load_documents(rest[1]):
            self.objects.pop((doc["kind"], doc["metadata"]["name"]), None)
        return "", 0

    def _minikube(self, args: list[str]) -> tuple[str, int]:
        if args[1] == "ip":
            return (f"{self.minikube_ip}\n", 0) if self.minikube_ip else ("", 1)
        if args[1:3] == ["addons", "enable"]:
            self.enabled_addons.add(args[3])
            self.namespaces.add("ingress-nginx")
            self.controller_pods = RUNNING_CONTROLLER
        return "", 0

    def _host_tool(self, args: list[str]) -> tuple[str, int]:
        if args[0] == "hostname":
            return self.hostname_output, 0
        address = self.ipconfig.get(args[2])
        return (f"{address}\n", 0) if address else ("", 1)

    def _dispatch(self, args: list[str]) -> tuple[str, int]:
        if any(tuple(args[: len(p)]) == p for p in self.failing):
            return "", 1
        handlers: dict[str, typ.Callable[[list[str]], tuple[str, int]]] = {
            "kubectl": self._kubectl,
            "minikube": self._minikube,
            "hostname": self._host_tool,
            "ipconfig": self._host_tool,
        }
        handler = handlers.get(args[0], lambda _: ("", 0))
        return handler(args)

    def __call__(
        self, args: list[str], **kwargs: object
    ) -> subprocess.CompletedProcess[str]:
        """Handle a subprocess.run call."""
        self.calls.append(tuple(args))
        stdout, returncode = self._dispatch(list(args))
        if kwargs.get("check") and returncode != 0:
            raise subprocess.CalledProcessError(returncode, args, stdout, "")
        return subprocess.CompletedProcess(
            args=args, returncode=returncode, stdout=stdout, stderr=""
        )


@pytest.fixture
def fake_cluster(monkeypatch: pytest.MonkeyPatch) -> FakeCluster:
    """Patch subprocess, PATH lookups and sleeps with a fresh fake cluster.

    The working directory is switched to the repository root so the default
    ``k8s/`` manifests and ``app1``/``app2`` build contexts resolve.
    """
    cluster = FakeCluster()
    monkeypatch.chdir(REPO_ROOT)
    monkeypatch.setattr("subprocess.run", cluster)
    monkeypatch.setattr("shutil.which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr("time.sleep", cluster.sleep)
    return cluster


class FakeLogger:
    """Collects femtologging-style log calls for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object | None, bool]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        """Record the call."""
        self.calls.append((level, message, exc_info, stack_info))
        return message

    def messages(self, level: str) -> list[str]:
        """Messages logged at ``level``."""
        return [message for lvl, message, _, _ in self.calls if lvl == level]


@pytest.fixture
def fake_logger() -> FakeLogger:
    """Provide a logger double to patch onto a module's ``logger``."""
    return FakeLogger()
