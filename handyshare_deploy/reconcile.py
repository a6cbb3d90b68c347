"""Delete-then-recreate reconciliation of the application manifests.

Each run removes the app Deployments, Services and Ingress and applies them
again, so repeated runs converge on exactly one copy of every object. All
manifests are validated up front; an invalid file aborts the run before any
object is deleted.

"""

from __future__ import annotations

import time
import typing as typ

from handyshare_deploy.k8s import apply_source, delete_source
from handyshare_deploy.manifests import load_manifests
from handyshare_deploy.policy import Step

if typ.TYPE_CHECKING:
    from pathlib import Path

    from handyshare_deploy.config import Config
    from handyshare_deploy.manifests import ManifestDocument


def reconcile_manifests(
    cfg: Config, documents: dict[Path, list[ManifestDocument]] | None = None
) -> list[str]:
    """Recreate the application objects from their manifests.

    Args:
        cfg: Configuration naming the manifests.
        documents: Manifests already loaded by a preflight check; loaded
            here when omitted.

    Returns:
        ``kind/name`` references of every applied object, in apply order.

    Raises:
        ManifestError: If a manifest is missing or malformed.
        StepFailedError: If an apply fails.

    """
    paths = cfg.app_manifest_paths
    if documents is None:
        documents = load_manifests(paths)

    print("Deploying applications...")
    for path in paths:
        delete_source(
            path,
            step=Step.DELETE_MANIFEST,
            description=f"Deleting objects from {path}",
        )

    time.sleep(cfg.settle_seconds)

    applied: list[str] = []
    for path in paths:
        apply_source(
            path,
            step=Step.APPLY_MANIFEST,
            description=f"Applying {path}",
        )
        applied.extend(doc.ref for doc in documents[path])

    print("Deployment completed!")
    return applied
