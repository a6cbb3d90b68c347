"""Local Kubernetes deployment for the handyshare placeholder apps.

The primary entrypoints are:

- deploy: Build images, install cluster add-ons and recreate the app objects
- show_access: Print the URLs the apps can be reached at
- show_status: Print access URLs plus filtered service, ingress and pod lists

For lower-level operations, import directly from submodules:

- handyshare_deploy.host: OS and external IP detection
- handyshare_deploy.k8s: kubectl primitives
- handyshare_deploy.metallb / handyshare_deploy.ingress: add-on installs
- handyshare_deploy.reconcile: delete-then-recreate of app manifests
- handyshare_deploy.access: access URL resolution
- handyshare_deploy.policy: which failures abort a run

"""

from __future__ import annotations

__version__ = "0.1.0"

from handyshare_deploy.config import Config, ImageSpec
from handyshare_deploy.orchestration import deploy, show_access, show_status
from handyshare_deploy.validation import (
    ConfigError,
    DeployError,
    ExecutableNotFoundError,
    ManifestError,
    StepFailedError,
)

__all__ = [
    "Config",
    "ConfigError",
    "DeployError",
    "ExecutableNotFoundError",
    "ImageSpec",
    "ManifestError",
    "StepFailedError",
    "__version__",
    "deploy",
    "show_access",
    "show_status",
]
