from __future__ import annotations

import shutil
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from tests.helpers.topologies import make_topology

if TYPE_CHECKING:
    from fabdrift.domain.model import TopologyModel

DATA_DIR = Path(__file__).resolve().parent / "data"

_ENV_VARS = (
    "KUBE_API_SERVER",
    "KUBE_TOKEN",
    "KUBE_VERIFY_TLS",
    "FABDRIFT_NAMESPACE_PREFIX",
    "FABDRIFT_FGD_DIR",
    "FABDRIFT_CAPACITY_WARNING_THRESHOLD",
    "FABDRIFT_POLL_MAX_ATTEMPTS",
    "FABDRIFT_POLL_INITIAL_DELAY",
    "FABDRIFT_POLL_MAX_DELAY",
    "FABDRIFT_POLL_MULTIPLIER",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def legacy_fabric_dir(tmp_path: Path) -> Path:
    target = tmp_path / "legacy" / "dc1"
    shutil.copytree(DATA_DIR / "legacy" / "dc1", target)
    return target


@pytest.fixture
def manifest_fabric_dir(tmp_path: Path) -> Path:
    target = tmp_path / "manifest" / "dc1"
    shutil.copytree(DATA_DIR / "manifest" / "dc1", target)
    return target


@pytest.fixture
def single_class_topology() -> TopologyModel:
    """1 spine, 1 leaf with 8 uplinks and 24 single-homed servers."""
    return make_topology()
