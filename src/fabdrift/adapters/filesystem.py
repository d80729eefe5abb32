"""Directory-backed topology store for both persisted layouts.

Legacy FGD::

    <base>/<fabric_id>/servers.yaml
    <base>/<fabric_id>/switches.yaml
    <base>/<fabric_id>/connections.yaml

Manifests::

    <base>/<fabric_id>/manifests/{fabric,switches,servers,connections}.yaml
"""

from __future__ import annotations

import shutil
from logging import getLogger
from typing import TYPE_CHECKING

from fabdrift.adapters import fgd, manifests
from fabdrift.adapters.serialization import ParseError
from fabdrift.domain.model import PersistedLayout

if TYPE_CHECKING:
    from pathlib import Path

    from fabdrift.domain.model import TopologyModel

log = getLogger(__name__)

MANIFEST_DIR = "manifests"

type Documents = fgd.FgdDocuments | manifests.ManifestDocuments


def _missing(directory: Path, filenames: tuple[str, ...]) -> list[str]:
    return [name for name in filenames if not (directory / name).is_file()]


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(f"{path.name}: not valid UTF-8 ({exc})", document=path.name) from exc


def detect_layout(path: Path) -> tuple[PersistedLayout, Path] | None:
    """Return the layout found at ``path`` and the directory holding its files."""

    for candidate in (path / MANIFEST_DIR, path):
        if (candidate / manifests.FABRIC_FILE).is_file():
            return PersistedLayout.MANIFEST, candidate
    if any((path / name).is_file() for name in fgd.FGD_FILES):
        return PersistedLayout.LEGACY, path
    return None


def read_documents(path: Path, *, layout: PersistedLayout | None = None) -> Documents:
    """Read the raw texts of one fabric directory, auto-detecting the layout."""

    if layout is None:
        detected = detect_layout(path)
        if detected is None:
            expected = ", ".join(fgd.FGD_FILES)
            raise FileNotFoundError(
                f"No fabric found at {path}: expected {expected} or {MANIFEST_DIR}/"
                f"{manifests.FABRIC_FILE}"
            )
        layout, directory = detected
    elif layout is PersistedLayout.MANIFEST:
        directory = path / MANIFEST_DIR
    else:
        directory = path

    filenames = fgd.FGD_FILES if layout is PersistedLayout.LEGACY else manifests.MANIFEST_FILES
    missing = _missing(directory, filenames)
    if missing:
        raise FileNotFoundError(f"Missing files in {directory}: {', '.join(missing)}")

    texts = {name: _read_text(directory / name) for name in filenames}
    if layout is PersistedLayout.LEGACY:
        return fgd.FgdDocuments(
            servers=texts[fgd.SERVERS_FILE],
            switches=texts[fgd.SWITCHES_FILE],
            connections=texts[fgd.CONNECTIONS_FILE],
        )
    return manifests.ManifestDocuments(
        fabric=texts[manifests.FABRIC_FILE],
        switches=texts[manifests.SWITCHES_FILE],
        servers=texts[manifests.SERVERS_FILE],
        connections=texts[manifests.CONNECTIONS_FILE],
    )


def decode_documents(documents: Documents) -> TopologyModel:
    if isinstance(documents, fgd.FgdDocuments):
        return fgd.decode(documents)
    return manifests.decode(documents)


class FileTopologyStore:
    """``TopologyStore`` implementation writing one directory per fabric."""

    def __init__(self, base_dir: Path, *, namespace: str = "default") -> None:
        self.base_dir = base_dir
        self.namespace = namespace

    def fabric_dir(self, fabric_id: str) -> Path:
        if not fabric_id or fabric_id in {".", ".."} or "/" in fabric_id or "\\" in fabric_id:
            raise ValueError(f"Invalid fabric id: {fabric_id!r}")
        return self.base_dir / fabric_id

    def save(
        self,
        model: TopologyModel,
        fabric_id: str,
        *,
        layout: PersistedLayout = PersistedLayout.LEGACY,
    ) -> Path:
        directory = self.fabric_dir(fabric_id)
        if layout is PersistedLayout.MANIFEST:
            directory = directory / MANIFEST_DIR
            files = manifests.encode(model, namespace=self.namespace).by_filename()
        else:
            files = fgd.encode(model).by_filename()
        directory.mkdir(parents=True, exist_ok=True)
        for name, text in files.items():
            (directory / name).write_text(text, encoding="utf-8")
        log.info(f"Saved fabric {fabric_id} ({layout}) to {directory}")
        return directory

    def load(self, fabric_id: str, *, layout: PersistedLayout | None = None) -> TopologyModel:
        return decode_documents(read_documents(self.fabric_dir(fabric_id), layout=layout))

    def read_documents(self, path: Path) -> Documents:
        return read_documents(path)

    def exists(self, fabric_id: str, *, layout: PersistedLayout | None = None) -> bool:
        directory = self.fabric_dir(fabric_id)
        legacy = not _missing(directory, fgd.FGD_FILES)
        manifest = not _missing(directory / MANIFEST_DIR, manifests.MANIFEST_FILES)
        if layout is PersistedLayout.LEGACY:
            return legacy
        if layout is PersistedLayout.MANIFEST:
            return manifest
        return legacy or manifest

    def list_fabrics(self) -> list[str]:
        if not self.base_dir.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self.base_dir.iterdir()
            if entry.is_dir() and self.exists(entry.name)
        )

    def delete(self, fabric_id: str) -> bool:
        directory = self.fabric_dir(fabric_id)
        if not directory.exists():
            return False
        shutil.rmtree(directory)
        log.info(f"Deleted fabric {fabric_id} from {self.base_dir}")
        return True


__all__ = [
    "MANIFEST_DIR",
    "FileTopologyStore",
    "decode_documents",
    "detect_layout",
    "read_documents",
]
