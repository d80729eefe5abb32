"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from fabdrift.adapters.filesystem import FileTopologyStore, decode_documents, read_documents
from fabdrift.adapters.kubernetes import build_kubernetes_fetcher
from fabdrift.adapters.manifests import resources_for
from fabdrift.adapters.serialization import CodecError
from fabdrift.config import (
    get_backoff_policy,
    get_import_config,
    get_kubernetes_config,
    get_storage_config,
)
from fabdrift.domain.clock import utcnow
from fabdrift.domain.importer import TopologyImportError, import_topology
from fabdrift.domain.reconciliation import (
    ReconciliationPoller,
    classify,
    detect_drift,
    namespace_for,
)
from fabdrift.domain.reconciliation.poller import DEFAULT_NAMESPACE_PREFIX

if TYPE_CHECKING:
    import asyncio
    from pathlib import Path

    from fabdrift.config import ImportConfig
    from fabdrift.domain.clock import Clock
    from fabdrift.domain.importer import ImportResult
    from fabdrift.domain.model import PersistedLayout, TopologyModel
    from fabdrift.domain.ports import ResourceFetcher, Scheduler, TopologyStore
    from fabdrift.domain.reconciliation import (
        BackoffPolicy,
        ClassificationPolicy,
        ClassificationResult,
        DriftStatus,
        PollOutcome,
    )

log = getLogger(__name__)


def load_topology(path: Path) -> TopologyModel:
    """Read and decode either persisted layout found at ``path``."""

    try:
        return decode_documents(read_documents(path))
    except (OSError, CodecError) as exc:
        raise TopologyImportError(
            f"Failed to import fabric from {path}: {exc}",
            path=str(path),
        ) from exc


def import_fabric(
    path: Path,
    *,
    config: ImportConfig | None = None,
    clock: Clock = utcnow,
) -> ImportResult:
    """Reconstruct a fabric spec from the files at ``path``."""

    import_config = config or get_import_config()
    model = load_topology(path)
    return import_topology(
        model,
        original_path=str(path),
        clock=clock,
        capacity_warning_threshold=import_config.capacity_warning_threshold,
    )


def convert_fabric(
    source: Path,
    destination: Path,
    *,
    layout: PersistedLayout,
    namespace: str = "default",
) -> Path:
    """Re-encode the fabric at ``source`` into ``layout`` below ``destination``."""

    model = load_topology(source)
    store = FileTopologyStore(destination.parent, namespace=namespace)
    written = store.save(model, destination.name, layout=layout)
    log.info(f"Converted {source} to {layout} at {written}")
    return written


def classify_topologies(
    before: TopologyModel,
    after: TopologyModel,
    *,
    policy: ClassificationPolicy | None = None,
    namespace: str = "default",
) -> ClassificationResult:
    """Classify two topologies through their manifest resources."""

    return classify(
        resources_for(before, namespace=namespace),
        resources_for(after, namespace=namespace),
        policy=policy,
    )


def compare_fabrics(
    before: Path,
    after: Path,
    *,
    policy: ClassificationPolicy | None = None,
) -> ClassificationResult:
    result = classify_topologies(load_topology(before), load_topology(after), policy=policy)
    log.info(
        f"Compared {before} with {after}: valid={result.is_valid}, "
        f"errors={len(result.errors)}, warnings={len(result.warnings)}"
    )
    return result


def check_drift(
    fabric_id: str,
    current: Path,
    *,
    store: TopologyStore | None = None,
    ignore_timestamps: bool = True,
) -> DriftStatus:
    """Compare the topology at ``current`` with the stored copy of ``fabric_id``."""

    active_store = store or FileTopologyStore(get_storage_config().resolve_fgd_dir())
    return detect_drift(
        fabric_id,
        load_topology(current),
        active_store,
        ignore_timestamps=ignore_timestamps,
    )


def wait_for_cluster(
    fabric: Path,
    *,
    run_id: str,
    fetcher: ResourceFetcher | None = None,
    backoff: BackoffPolicy | None = None,
    scheduler: Scheduler | None = None,
    namespace_prefix: str | None = None,
    cancel: asyncio.Event | None = None,
) -> PollOutcome:
    """Poll the cluster until every resource of ``fabric`` exists for ``run_id``.

    Setting ``cancel`` aborts the wait, including a listing still in flight.
    """

    if fetcher is None:
        kube_config = get_kubernetes_config()
        fetcher = build_kubernetes_fetcher(kube_config)
        namespace_prefix = namespace_prefix or kube_config.namespace_prefix
    prefix = namespace_prefix or DEFAULT_NAMESPACE_PREFIX
    namespace = namespace_for(run_id, prefix=prefix)
    expected = resources_for(load_topology(fabric), namespace=namespace)

    poller = ReconciliationPoller(
        fetcher,
        scheduler=scheduler,
        backoff=backoff or get_backoff_policy(),
        namespace_prefix=prefix,
    )
    log.info(f"Waiting for {len(expected)} resources of {fabric} (run {run_id})")
    return poller.run(expected, run_id=run_id, cancel=cancel)


__all__ = [
    "check_drift",
    "classify_topologies",
    "compare_fabrics",
    "convert_fabric",
    "import_fabric",
    "load_topology",
    "wait_for_cluster",
]
