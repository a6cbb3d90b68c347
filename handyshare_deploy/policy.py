"""Failure policy for deployment steps.

Every command the deployment issues is either required, best effort, or a
read-only probe. Modules look their step up in the table below.

"""

from __future__ import annotations

import enum


class FailurePolicy(enum.StrEnum):
    """How a failing command affects the run."""

    REQUIRED = "required"
    BEST_EFFORT = "best-effort"


class Step(enum.StrEnum):
    """Named mutating steps of a deployment run."""

    BUILD_IMAGE = "build-image"
    LOAD_IMAGE = "load-image"
    APPLY_ADDON = "apply-addon"
    WAIT_ADDON = "wait-addon"
    APPLY_ADDON_CONFIG = "apply-addon-config"
    DELETE_NAMESPACE = "delete-namespace"
    ENABLE_MINIKUBE_ADDON = "enable-minikube-addon"
    DELETE_MANIFEST = "delete-manifest"
    APPLY_MANIFEST = "apply-manifest"


STEP_POLICIES: dict[Step, FailurePolicy] = {
    Step.BUILD_IMAGE: FailurePolicy.REQUIRED,
    Step.LOAD_IMAGE: FailurePolicy.REQUIRED,
    Step.APPLY_ADDON: FailurePolicy.REQUIRED,
    # A slow add-on must not abort the run.
    Step.WAIT_ADDON: FailurePolicy.BEST_EFFORT,
    Step.APPLY_ADDON_CONFIG: FailurePolicy.REQUIRED,
    Step.DELETE_NAMESPACE: FailurePolicy.REQUIRED,
    Step.ENABLE_MINIKUBE_ADDON: FailurePolicy.REQUIRED,
    Step.DELETE_MANIFEST: FailurePolicy.BEST_EFFORT,
    Step.APPLY_MANIFEST: FailurePolicy.REQUIRED,
}


def policy_for(step: Step) -> FailurePolicy:
    """Return the failure policy for a step."""
    return STEP_POLICIES[step]
