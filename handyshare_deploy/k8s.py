"""kubectl operations against the active context.

All functions target whatever context ``kubectl config current-context``
reports; the deployment never rewrites KUBECONFIG. Mutating calls go through
``run_step`` so the failure policy table decides whether an error aborts the
run, and queries go through ``probe``.

Examples
--------
Install an add-on only when its namespace is missing:

    if not namespace_exists("metallb-system"):
        apply_source(url, step=Step.APPLY_ADDON, description="Install MetalLB")

Read a field from a Service:

    node_port = get_jsonpath(
        "svc", "ingress-nginx-controller", "{.spec.ports[0].nodePort}",
        namespace="ingress-nginx",
    )

"""

from __future__ import annotations

import typing as typ

from handyshare_deploy.config import MAX_WAIT_TIMEOUT, MIN_WAIT_TIMEOUT
from handyshare_deploy.policy import Step
from handyshare_deploy.process import probe, run_step
from handyshare_deploy.validation import StepFailedError

if typ.TYPE_CHECKING:
    from pathlib import Path

_APPLY_TIMEOUT = 120
_DELETE_TIMEOUT = 300


def current_context() -> str:
    """Return the name of the active kubectl context.

    Raises
    ------
    StepFailedError
        If kubectl cannot report a context (no kubeconfig, no current
        context set).

    """
    args = ["kubectl", "config", "current-context"]
    output = probe(args)
    context = (output or "").strip()
    if not context:
        raise StepFailedError(
            "Reading kubectl context", args, None, "no current context is set"
        )
    return context


def namespace_exists(namespace: str) -> bool:
    """Check if a Kubernetes namespace exists."""
    return probe(["kubectl", "get", "namespace", namespace]) is not None


def delete_namespace(namespace: str) -> None:
    """Delete a namespace and block until kubectl reports it gone."""
    run_step(
        ["kubectl", "delete", "namespace", namespace],
        step=Step.DELETE_NAMESPACE,
        description=f"Deleting namespace {namespace}",
        timeout=_DELETE_TIMEOUT,
    )


def apply_source(source: str | Path, *, step: Step, description: str) -> bool:
    """Apply a manifest file or URL with ``kubectl apply -f``."""
    return run_step(
        ["kubectl", "apply", "-f", str(source)],
        step=step,
        description=description,
        timeout=_APPLY_TIMEOUT,
    )


def delete_source(source: str | Path, *, step: Step, description: str) -> bool:
    """Delete the objects in a manifest; objects already absent are ignored."""
    return run_step(
        ["kubectl", "delete", "-f", str(source), "--ignore-not-found"],
        step=step,
        description=description,
        timeout=_DELETE_TIMEOUT,
    )


def wait_for_pods_ready(selector: str, namespace: str, timeout: int = 120) -> bool:
    """Wait for pods matching a label selector to become ready.

    Readiness waits are best effort: a timeout is logged and the run goes on.

    Parameters
    ----------
    selector : str
        Label selector for pods (e.g., "app=metallb").
    namespace : str
        Kubernetes namespace containing the pods.
    timeout : int, default 120
        Seconds passed to ``kubectl wait``. Must be between 1 and 3600.

    Returns
    -------
    bool
        True when all matching pods became ready in time.

    Raises
    ------
    ValueError
        If timeout is outside the valid range (1-3600 seconds).

    """
    if not MIN_WAIT_TIMEOUT <= timeout <= MAX_WAIT_TIMEOUT:
        msg = (
            f"timeout must be between {MIN_WAIT_TIMEOUT} and "
            f"{MAX_WAIT_TIMEOUT} seconds, got {timeout}"
        )
        raise ValueError(msg)

    # Add buffer to subprocess timeout beyond kubectl's --timeout
    return run_step(
        [
            "kubectl",
            "wait",
            f"--namespace={namespace}",
            "--for=condition=ready",
            "pod",
            f"--selector={selector}",
            f"--timeout={timeout}s",
        ],
        step=Step.WAIT_ADDON,
        description=f"Waiting for pods {selector} in {namespace}",
        timeout=timeout + 30,
    )


def list_pods(namespace: str, selector: str) -> str | None:
    """Return the ``kubectl get pods`` table for a selector, or None."""
    return probe(["kubectl", "get", "pods", "-n", namespace, "-l", selector])


def get_jsonpath(
    resource: str, name: str, jsonpath: str, *, namespace: str
) -> str | None:
    """Return a jsonpath field of a resource, or None when unset or unreadable."""
    output = probe(
        [
            "kubectl",
            "get",
            resource,
            "-n",
            namespace,
            name,
            "-o",
            f"jsonpath={jsonpath}",
        ]
    )
    if output is None:
        return None
    value = output.strip()
    return value or None


def get_table(*args: str) -> str | None:
    """Return the output of ``kubectl get <args>``, or None on failure."""
    return probe(["kubectl", "get", *args])
