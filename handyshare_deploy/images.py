"""Container image builds.

Images are built with the local docker daemon and never pushed. Under
minikube the cluster runs its own container runtime, so built images are
copied in with ``minikube image load``.

"""

from __future__ import annotations

import typing as typ

from handyshare_deploy.policy import Step
from handyshare_deploy.process import run_step
from handyshare_deploy.validation import require_build_context

if typ.TYPE_CHECKING:
    from collections.abc import Iterable

    from handyshare_deploy.config import ImageSpec

# Timeout for a single docker build or image load (seconds).
_IMAGE_TIMEOUT = 900


def build_image(image: ImageSpec) -> None:
    """Build one image from its context directory.

    Raises:
        FileNotFoundError: If the context path does not exist.
        NotADirectoryError: If the context path is not a directory.
        StepFailedError: If the docker build command fails.

    """
    context = require_build_context(image.context)
    run_step(
        ["docker", "build", "-t", image.name, str(context)],
        step=Step.BUILD_IMAGE,
        description=f"Building image {image.name}",
        timeout=_IMAGE_TIMEOUT,
    )


def build_images(images: Iterable[ImageSpec]) -> None:
    """Build images one after another, in order."""
    for image in images:
        print(f"Building image {image.name} from {image.context}...")
        build_image(image)


def load_images_into_minikube(images: Iterable[ImageSpec]) -> None:
    """Copy locally built images into the minikube node."""
    for image in images:
        print(f"Loading image {image.name} into minikube...")
        run_step(
            ["minikube", "image", "load", image.name],
            step=Step.LOAD_IMAGE,
            description=f"Loading image {image.name} into minikube",
            timeout=_IMAGE_TIMEOUT,
        )
