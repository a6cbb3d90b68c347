"""Manifest loading and validation.

Manifests are parsed with a YAML 1.2 loader and each document is converted to
a typed ``ManifestDocument`` so malformed files are rejected before the
cluster is touched. Only the identifying fields are modelled; ``spec`` and
everything else are left to the Kubernetes API.

"""

from __future__ import annotations

from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from handyshare_deploy.validation import ManifestError

YAML_VERSION = (1, 2)


class ObjectMeta(msgspec.Struct, kw_only=True, frozen=True):
    """Identifying metadata of a Kubernetes object."""

    name: str
    namespace: str | None = None


class ManifestDocument(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """One YAML document of a manifest file.

    Attributes
    ----------
    api_version : str
        ``apiVersion`` of the object.
    kind : str
        Object kind (``Deployment``, ``Service``, ``Ingress``, ...).
    metadata : ObjectMeta
        Name and optional namespace.

    """

    api_version: str
    kind: str
    metadata: ObjectMeta

    @property
    def ref(self) -> str:
        """Return the ``kind/name`` reference kubectl prints."""
        return f"{self.kind.lower()}/{self.metadata.name}"


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    return yaml


def load_manifest(path: Path | str) -> list[ManifestDocument]:
    """Parse a (possibly multi-document) manifest file.

    Empty documents such as a trailing ``---`` are skipped.

    Raises
    ------
    ManifestError
        If the file cannot be read, is not valid YAML, contains no objects,
        or an object lacks ``apiVersion``, ``kind`` or ``metadata.name``.

    """
    path_obj = Path(path)
    try:
        raw_documents = list(_yaml().load_all(path_obj.read_text(encoding="utf-8")))
    except (OSError, YAMLError) as exc:
        msg = f"{path_obj}: failed to parse YAML: {exc}"
        raise ManifestError(msg) from exc

    documents: list[ManifestDocument] = []
    for index, raw in enumerate(raw_documents):
        if raw is None:
            continue
        try:
            documents.append(msgspec.convert(raw, type=ManifestDocument))
        except msgspec.ValidationError as exc:
            msg = f"{path_obj}: document {index} is not a Kubernetes object: {exc}"
            raise ManifestError(msg) from exc

    if not documents:
        msg = f"{path_obj}: manifest contains no objects"
        raise ManifestError(msg)
    return documents


def load_manifests(paths: tuple[Path, ...]) -> dict[Path, list[ManifestDocument]]:
    """Load every manifest, failing on the first invalid one."""
    return {path: load_manifest(path) for path in paths}
