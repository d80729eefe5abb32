"""Text codec for the legacy FGD layout (``servers``/``switches``/``connections``)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fabdrift.adapters.serialization import (
    SchemaError,
    dump_document,
    load_document,
    require_mapping,
    validate_document,
)
from fabdrift.domain.model import TopologyModel

from .schema import FgdConnectionsFile, FgdServersFile, FgdSwitchesFile
from .translator import to_files, to_model

SERVERS_FILE = "servers.yaml"
SWITCHES_FILE = "switches.yaml"
CONNECTIONS_FILE = "connections.yaml"
FGD_FILES = (SERVERS_FILE, SWITCHES_FILE, CONNECTIONS_FILE)


@dataclass(frozen=True, slots=True)
class FgdDocuments:
    servers: str
    switches: str
    connections: str

    def by_filename(self) -> dict[str, str]:
        return {
            SERVERS_FILE: self.servers,
            SWITCHES_FILE: self.switches,
            CONNECTIONS_FILE: self.connections,
        }


def _dump(payload: Any) -> str:
    return dump_document(payload.model_dump(mode="json", by_alias=True, exclude_none=True))


def encode(model: TopologyModel) -> FgdDocuments:
    servers, switches, connections = to_files(model)
    return FgdDocuments(
        servers=_dump(servers),
        switches=_dump(switches),
        connections=_dump(connections),
    )


def decode(documents: FgdDocuments) -> TopologyModel:
    servers = validate_document(
        FgdServersFile,
        require_mapping(
            load_document(documents.servers, document=SERVERS_FILE),
            document=SERVERS_FILE,
            root_key="servers",
        ),
        document=SERVERS_FILE,
    )
    switches = validate_document(
        FgdSwitchesFile,
        require_mapping(
            load_document(documents.switches, document=SWITCHES_FILE),
            document=SWITCHES_FILE,
            root_key="switches",
        ),
        document=SWITCHES_FILE,
    )
    connections = validate_document(
        FgdConnectionsFile,
        require_mapping(
            load_document(documents.connections, document=CONNECTIONS_FILE),
            document=CONNECTIONS_FILE,
            root_key="connections",
        ),
        document=CONNECTIONS_FILE,
    )
    try:
        return to_model(servers, switches, connections)
    except ValueError as exc:
        raise SchemaError(
            f"{CONNECTIONS_FILE}: {exc}",
            document=CONNECTIONS_FILE,
            field="connections",
        ) from exc
