"""Unit tests for image builds."""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest

from handyshare_deploy.config import Config, ImageSpec
from handyshare_deploy.images import (
    build_image,
    build_images,
    load_images_into_minikube,
)
from handyshare_deploy.validation import StepFailedError

if typ.TYPE_CHECKING:
    from tests.conftest import FakeCluster


class TestBuildImages:
    """Tests for docker builds."""

    def test_builds_in_order(self, fake_cluster: FakeCluster) -> None:
        """app1 is built before app2, each from its own context."""
        build_images(Config().images)
        assert fake_cluster.calls == [
            ("docker", "build", "-t", "handyshare/app1:latest", "app1"),
            ("docker", "build", "-t", "handyshare/app2:latest", "app2"),
        ]

    def test_missing_context(self, fake_cluster: FakeCluster, tmp_path: Path) -> None:
        """A missing build context fails before docker runs."""
        image = ImageSpec(repo="x", tag="latest", context=tmp_path / "absent")
        with pytest.raises(FileNotFoundError, match="does not exist"):
            build_image(image)
        assert fake_cluster.calls == []

    def test_context_must_be_directory(
        self, fake_cluster: FakeCluster, tmp_path: Path
    ) -> None:
        """A file is not a valid build context."""
        context = tmp_path / "Dockerfile"
        context.write_text("FROM scratch\n", encoding="utf-8")
        with pytest.raises(NotADirectoryError):
            build_image(ImageSpec(repo="x", tag="latest", context=context))

    def test_build_failure_is_fatal(self, fake_cluster: FakeCluster) -> None:
        """A failed docker build stops the remaining builds."""
        fake_cluster.failing.add(("docker", "build", "-t", "handyshare/app1:latest"))
        with pytest.raises(StepFailedError, match="handyshare/app1:latest"):
            build_images(Config().images)
        assert len(fake_cluster.calls) == 1


class TestLoadImagesIntoMinikube:
    """Tests for minikube image loads."""

    def test_loads_each_image(self, fake_cluster: FakeCluster) -> None:
        """Every image is copied into the minikube node."""
        load_images_into_minikube(Config().images)
        assert fake_cluster.calls == [
            ("minikube", "image", "load", "handyshare/app1:latest"),
            ("minikube", "image", "load", "handyshare/app2:latest"),
        ]
